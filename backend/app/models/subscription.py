"""
Subscription model gating premium features and medication count.
"""
from datetime import datetime
from app import db

PLANS = {
    'Basic': {
        'max_medicines': 5,
        'blood_pressure_manager': False,
        'diabetic_manager': False,
    },
    'Premium': {
        'max_medicines': 999,
        'blood_pressure_manager': True,
        'diabetic_manager': True,
    },
}


class Subscription(db.Model):
    """Plan attached to exactly one user; read by the routes, never by the engines."""
    __tablename__ = 'subscriptions'

    id = db.Column(db.Integer, primary_key=True)
    subscription_type = db.Column(db.String(20), nullable=False, default='Basic')
    max_medicines = db.Column(db.Integer, nullable=False, default=5)
    blood_pressure_manager = db.Column(db.Boolean, nullable=False, default=False)
    diabetic_manager = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @classmethod
    def for_plan(cls, plan='Basic'):
        subscription = cls()
        subscription.apply_plan(plan)
        return subscription

    def apply_plan(self, plan):
        if plan not in PLANS:
            raise ValueError(f'Unknown subscription plan: {plan}')
        self.subscription_type = plan
        for field, value in PLANS[plan].items():
            setattr(self, field, value)

    def allows(self, feature: str) -> bool:
        return bool(getattr(self, feature, False))

    def to_dict(self):
        return {
            'id': self.id,
            'subscription_type': self.subscription_type,
            'max_medicines': self.max_medicines,
            'blood_pressure_manager': self.blood_pressure_manager,
            'diabetic_manager': self.diabetic_manager,
        }

    def __repr__(self):
        return f'<Subscription {self.id}: {self.subscription_type}>'
