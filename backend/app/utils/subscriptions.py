"""
Subscription gating for premium routes and the medication limit.
"""
from functools import wraps
from flask import g

from app.errors import UpgradeRequired

FEATURE_NAMES = {
    'blood_pressure_manager': 'Blood Pressure Manager',
    'diabetic_manager': 'Diabetic Manager',
}


def subscription_required(feature):
    """Decorator that requires the current plan to include ``feature``.

    Must be applied below ``token_required`` so ``g.user`` is set.
    """
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            subscription = g.user.subscription
            if subscription is None or not subscription.allows(feature):
                raise UpgradeRequired(
                    f'{FEATURE_NAMES.get(feature, feature)} is a Premium feature. '
                    f'Upgrade to unlock it.'
                )
            return f(*args, **kwargs)
        return wrapper
    return decorator


def check_medication_limit(user):
    subscription = user.subscription
    if subscription and user.medications.count() >= subscription.max_medicines:
        raise UpgradeRequired(
            f'Your plan is limited to {subscription.max_medicines} medications. '
            f'Upgrade to Premium to add more.'
        )
