"""
Emergency contact model; name and phone are encrypted at rest.
"""
from datetime import datetime
from app import db
from app.utils.encryption import encrypt_field, decrypt_field


class EmergencyContact(db.Model):
    """The person notified about low stock. At most one per user."""
    __tablename__ = 'emergency_contacts'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, unique=True)

    _name_encrypted = db.Column('name', db.Text, nullable=False)
    _phone_encrypted = db.Column('phone', db.Text, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = db.relationship('User', backref=db.backref('emergency_contact', uselist=False,
                                                      cascade='all, delete-orphan'))

    @property
    def name(self):
        return decrypt_field(self._name_encrypted) if self._name_encrypted else None

    @name.setter
    def name(self, value):
        self._name_encrypted = encrypt_field(value) if value else None

    @property
    def phone(self):
        return decrypt_field(self._phone_encrypted) if self._phone_encrypted else None

    @phone.setter
    def phone(self, value):
        self._phone_encrypted = encrypt_field(value) if value else None

    def __repr__(self):
        return f'<EmergencyContact user={self.user_id}>'
