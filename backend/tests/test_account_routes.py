from app import db
from app.models import User
from app.utils.email_sender import get_email_backend
from conftest import auth_headers


def test_register_returns_token_and_basic_plan(client, register):
    data = register('Pat@Example.com', display_name='Pat')
    assert data['token']
    assert data['user']['email'] == 'pat@example.com'
    assert data['user']['display_name'] == 'Pat'
    assert data['user']['subscription']['subscription_type'] == 'Basic'
    assert data['user']['subscription']['max_medicines'] == 5


def test_email_is_encrypted_at_rest(client, register):
    data = register()
    user = db.session.get(User, data['user']['id'])
    assert user._email_encrypted != 'pat@example.com'
    assert user.email == 'pat@example.com'


def test_duplicate_email_is_rejected(client, register):
    register()
    resp = client.post('/consumer/register', json={'email': 'PAT@example.com', 'password': 'another1'})
    assert resp.status_code == 409


def test_register_validation(client):
    resp = client.post('/consumer/register', json={'email': 'bad', 'password': '1'})
    assert resp.status_code == 400
    assert len(resp.get_json()['error']) == 2


def test_form_posts_are_rejected(client):
    resp = client.post('/consumer/register', data={'email': 'pat@example.com'})
    assert resp.status_code == 415


def test_login(client, register):
    register()
    ok = client.post('/consumer/login', json={'email': 'pat@example.com', 'password': 'secret123'})
    assert ok.status_code == 200
    assert ok.get_json()['token']

    bad = client.post('/consumer/login', json={'email': 'pat@example.com', 'password': 'wrong-one'})
    assert bad.status_code == 401


def test_guest_session(client, guest):
    assert guest['user']['is_anonymous'] is True
    assert guest['user']['email'] is None
    profile = client.get('/consumer/profile', headers=guest['headers'])
    assert profile.status_code == 200


def test_invalid_token(client):
    resp = client.get('/consumer/profile', headers=auth_headers('not-a-token'))
    assert resp.status_code == 401


def test_update_profile(client, user_headers):
    resp = client.put('/consumer/profile', json={'display_name': '  Robin '}, headers=user_headers)
    assert resp.status_code == 200
    assert resp.get_json()['display_name'] == 'Robin'


def test_subscription_reports_usage(client, user_headers):
    client.post('/consumer/medications', json={'name': 'Aspirin', 'quantity': 10, 'dose_times': []},
                headers=user_headers)
    data = client.get('/consumer/subscription', headers=user_headers).get_json()
    assert data['subscription_type'] == 'Basic'
    assert data['medication_count'] == 1
    assert data['blood_pressure_manager'] is False


def test_password_reset_flow(client, register):
    register()
    outbox = get_email_backend().outbox
    outbox.clear()

    resp = client.post('/consumer/password-reset', json={'email': 'pat@example.com'})
    assert resp.status_code == 200
    assert len(outbox) == 1
    code = outbox[0]['body'].split('code is: ', 1)[1][:6]

    wrong = client.post('/consumer/password-reset/confirm',
                        json={'email': 'pat@example.com', 'code': '000000' if code != '000000' else '111111',
                              'password': 'new-secret'})
    assert wrong.status_code == 400

    ok = client.post('/consumer/password-reset/confirm',
                     json={'email': 'pat@example.com', 'code': code, 'password': 'new-secret'})
    assert ok.status_code == 200

    reused = client.post('/consumer/password-reset/confirm',
                         json={'email': 'pat@example.com', 'code': code, 'password': 'other-secret'})
    assert reused.status_code == 400

    login = client.post('/consumer/login', json={'email': 'pat@example.com', 'password': 'new-secret'})
    assert login.status_code == 200


def test_password_reset_does_not_reveal_unknown_email(client):
    outbox = get_email_backend().outbox
    outbox.clear()
    resp = client.post('/consumer/password-reset', json={'email': 'nobody@example.com'})
    assert resp.status_code == 200
    assert outbox == []


def test_grant_premium_command(app, register):
    data = register()
    result = app.test_cli_runner().invoke(args=['grant-premium', 'pat@example.com'])
    assert 'upgraded to Premium' in result.output
    user = db.session.get(User, data['user']['id'])
    assert user.subscription.subscription_type == 'Premium'
    assert user.subscription.diabetic_manager is True


def test_health(client):
    assert client.get('/health').get_json() == {'status': 'healthy'}


def test_non_object_body_is_rejected(client):
    resp = client.post('/consumer/register', json=[{'email': 'pat@example.com', 'password': 'secret123'}])
    assert resp.status_code == 400
    assert resp.get_json()['error'] == ['Request body must be a JSON object']


def test_non_string_credentials_are_rejected(client, register):
    resp = client.post('/consumer/register', json={'email': 12345, 'password': 123456789})
    assert resp.status_code == 400
    errors = resp.get_json()['error']
    assert 'Email must be a string' in errors
    assert 'Password must be a string' in errors

    resp = client.post('/consumer/register', json={'email': 'pat@example.com', 'password': 'secret123',
                                                   'display_name': ['Pat']})
    assert resp.status_code == 400

    register()
    assert client.post('/consumer/login', json={'email': ['pat@example.com'],
                                                'password': 'secret123'}).status_code == 400
    assert client.post('/consumer/password-reset', json={'email': 42}).status_code == 400


def test_login_attempts_are_rate_limited(client, register):
    register()
    body = {'email': 'pat@example.com', 'password': 'wrong-one'}
    statuses = [client.post('/consumer/login', json=body).status_code for _ in range(6)]
    assert statuses == [401] * 5 + [429]
    assert 'Too many login attempts' in client.post('/consumer/login', json=body).get_json()['error']


def test_reset_code_guessing_is_rate_limited(client, register):
    register()
    client.post('/consumer/password-reset', json={'email': 'pat@example.com'})
    code = get_email_backend().outbox[-1]['body'].split('code is: ', 1)[1][:6]

    wrong = {'email': 'pat@example.com', 'code': '000000' if code != '000000' else '111111',
             'password': 'new-secret'}
    statuses = [client.post('/consumer/password-reset/confirm', json=wrong).status_code
                for _ in range(5)]
    assert statuses == [400] * 5

    # the right code is refused too once the limit is reached
    right = dict(wrong, code=code)
    assert client.post('/consumer/password-reset/confirm', json=right).status_code == 429


def test_cleanup_rate_limits_command(app, client, register):
    register()
    client.post('/consumer/login', json={'email': 'pat@example.com', 'password': 'secret123'})
    result = app.test_cli_runner().invoke(args=['cleanup-rate-limits'])
    assert 'Removed 0 rate limit entries.' in result.output
