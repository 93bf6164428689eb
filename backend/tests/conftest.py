import base64
import os
from datetime import date
from types import SimpleNamespace

import pytest

os.environ.setdefault('JWT_SECRET_KEY', 'test-jwt-secret')
os.environ.setdefault('FIELD_ENCRYPTION_KEY', base64.b64encode(b'0123456789abcdef0123456789abcdef').decode())
os.environ['EMAIL_BACKEND'] = 'console'
os.environ.pop('REFILL_LLM_API_KEY', None)
os.environ.pop('OPENAI_API_KEY', None)

from app import create_app, db  # noqa: E402
from app.models import User  # noqa: E402
from app.rules.course import Course  # noqa: E402
from app.utils.encryption import reset_cipher  # noqa: E402


def make_med(name='Aspirin', quantity=20, dose_times=('08:00',), active=True,
             course_days=None, course_start=None, med_id=None):
    """Plain record with the attributes the rule functions read."""
    course = None
    if course_days is not None:
        course = Course(duration_days=course_days, start_date=course_start or date(2026, 1, 1))
    return SimpleNamespace(id=med_id, name=name, quantity=quantity,
                           dose_times=list(dose_times), active=active, course=course)


def auth_headers(token):
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def app():
    reset_cipher()
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def register(client):
    def _register(email='pat@example.com', password='secret123', display_name=None):
        body = {'email': email, 'password': password}
        if display_name:
            body['display_name'] = display_name
        resp = client.post('/consumer/register', json=body)
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()
    return _register


@pytest.fixture
def user_headers(register):
    return auth_headers(register()['token'])


@pytest.fixture
def premium_headers(register):
    data = register('premium@example.com')
    user = db.session.get(User, data['user']['id'])
    user.subscription.apply_plan('Premium')
    db.session.commit()
    return auth_headers(data['token'])


@pytest.fixture
def guest(client):
    resp = client.post('/consumer/guest')
    assert resp.status_code == 201
    data = resp.get_json()
    data['headers'] = auth_headers(data['token'])
    return data
