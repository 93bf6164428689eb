"""
Account bootstrap: new users get a Basic subscription, guests get demo data.
"""
import logging
from datetime import date

from app import db
from app.errors import commit_or_raise
from app.models import User, Subscription, Medication
from app.rules.course import Course
from app.utils.audit_logger import audit_log

logger = logging.getLogger(__name__)

DEMO_MEDICATIONS = [
    {
        'name': 'Aspirin',
        'quantity': 50,
        'dose_times': ['08:00'],
        'instructions': 'Take with food.',
    },
    {
        'name': 'Vitamin D',
        'quantity': 3,
        'dose_times': ['09:00'],
        'instructions': 'Take with breakfast.',
    },
    {
        'name': 'Antibiotic',
        'quantity': 14,
        'dose_times': ['10:00', '22:00'],
        'instructions': 'Finish the full course.',
        'course_days': 7,
    },
]


def new_user(is_anonymous=False):
    """User plus its Basic subscription, added to the session but not committed."""
    user = User(is_anonymous=is_anonymous)
    user.subscription = Subscription.for_plan('Basic')
    db.session.add(user)
    return user


def ensure_seeded(user, today=None) -> int:
    """Insert the demo medications for a guest whose list is empty.

    Returns the number of medications inserted; calling it again is a no-op.
    """
    if not user.is_anonymous:
        return 0
    if user.medications.count() > 0:
        return 0

    today = today or date.today()
    for demo in DEMO_MEDICATIONS:
        med = Medication(
            user_id=user.id,
            name=demo['name'],
            quantity=demo['quantity'],
            instructions=demo['instructions'],
            active=True,
        )
        med.dose_times = demo['dose_times']
        if demo.get('course_days'):
            med.course = Course(duration_days=demo['course_days'], start_date=today)
        db.session.add(med)

    commit_or_raise('add the demo medications')
    audit_log('CREATE', 'medication', details={'action': 'demo_seed', 'count': len(DEMO_MEDICATIONS)},
              user_id=str(user.id))
    logger.info('Seeded %d demo medications for guest %s', len(DEMO_MEDICATIONS), user.id)
    return len(DEMO_MEDICATIONS)


def create_guest_user():
    user = new_user(is_anonymous=True)
    commit_or_raise('create the guest account')
    inserted = ensure_seeded(user)
    return user, inserted
