"""
User model with an encrypted email address.
"""
import logging
from datetime import datetime
from werkzeug.security import generate_password_hash, check_password_hash
from app import db
from app.utils.encryption import encrypt_field, decrypt_field, hash_email

logger = logging.getLogger(__name__)


class User(db.Model):
    """
    Account owning medications and readings.
    Guest accounts (is_anonymous) have no email or password.
    """
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)

    _email_encrypted = db.Column('email', db.Text, nullable=True)
    _email_hash = db.Column('email_hash', db.String(64), nullable=True, unique=True, index=True)
    password_hash = db.Column(db.String(255), nullable=True)

    display_name = db.Column(db.String(100), nullable=True)
    is_anonymous = db.Column(db.Boolean, nullable=False, default=False)

    subscription_id = db.Column(db.Integer, db.ForeignKey('subscriptions.id'), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    subscription = db.relationship('Subscription', backref=db.backref('user', uselist=False))
    medications = db.relationship('Medication', backref='user', lazy='dynamic',
                                  cascade='all, delete-orphan')
    blood_pressure_readings = db.relationship(
        'BloodPressureReading', backref='user', lazy='dynamic', cascade='all, delete-orphan',
        order_by='BloodPressureReading.reading_date.desc()')
    diabetic_readings = db.relationship(
        'DiabeticReading', backref='user', lazy='dynamic', cascade='all, delete-orphan',
        order_by='DiabeticReading.reading_date.desc()')

    @property
    def email(self):
        return decrypt_field(self._email_encrypted) if self._email_encrypted else None

    @email.setter
    def email(self, value):
        value = value.strip().lower() if value else None
        self._email_encrypted = encrypt_field(value) if value else None
        self._email_hash = hash_email(value) if value else None

    def set_password(self, password: str):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    def to_dict(self):
        data = {
            'id': self.id,
            'display_name': self.display_name,
            'is_anonymous': self.is_anonymous,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'subscription': self.subscription.to_dict() if self.subscription else None,
        }
        try:
            data['email'] = self.email
        except Exception:
            logger.error('Decryption error for user_id=%s field=email', self.id, exc_info=True)
            data['email'] = None
        return data

    @staticmethod
    def find_by_email(email: str):
        """Find a user by email using the keyed lookup hash."""
        return User.query.filter_by(_email_hash=hash_email(email)).first()

    def __repr__(self):
        return f'<User {self.id}>'
