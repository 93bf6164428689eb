"""
Password reset model for 6-digit emailed codes.
"""
import secrets
from datetime import datetime, timedelta
from app import db

CODE_LIFETIME = timedelta(minutes=15)


class PasswordReset(db.Model):
    """Single-use reset codes; requesting a new one expires the old ones."""
    __tablename__ = 'password_resets'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    code = db.Column(db.String(6), nullable=False)
    expires_at = db.Column(db.DateTime, nullable=False)
    used_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    @classmethod
    def issue_for_user(cls, user_id):
        cls.query.filter_by(user_id=user_id, used_at=None).update(
            {'expires_at': datetime.utcnow()}
        )
        reset = cls(
            user_id=user_id,
            code=str(secrets.randbelow(1000000)).zfill(6),
            expires_at=datetime.utcnow() + CODE_LIFETIME,
        )
        db.session.add(reset)
        return reset

    @classmethod
    def find_valid(cls, user_id, code):
        return cls.query.filter_by(user_id=user_id, code=code, used_at=None).filter(
            cls.expires_at > datetime.utcnow()
        ).first()

    @staticmethod
    def cleanup_expired():
        count = PasswordReset.query.filter(
            PasswordReset.expires_at < datetime.utcnow()
        ).delete()
        db.session.commit()
        return count

    def __repr__(self):
        return f'<PasswordReset user={self.user_id}>'
