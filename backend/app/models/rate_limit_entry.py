"""
Attempt log backing the database rate limiter.
"""
from datetime import datetime, timedelta
from app import db


class RateLimitEntry(db.Model):
    """One attempt against a limited endpoint, keyed by client address."""
    __tablename__ = 'rate_limit_entries'

    id = db.Column(db.Integer, primary_key=True)
    key = db.Column(db.String(255), nullable=False, index=True)
    endpoint = db.Column(db.String(64), nullable=False, index=True)
    timestamp = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.Index('ix_rate_limit_key_endpoint_ts', 'key', 'endpoint', 'timestamp'),
    )

    @classmethod
    def count_since(cls, key, endpoint, since):
        return cls.query.filter(
            cls.key == key,
            cls.endpoint == endpoint,
            cls.timestamp > since,
        ).count()

    @staticmethod
    def cleanup_older_than(seconds):
        cutoff = datetime.utcnow() - timedelta(seconds=seconds)
        count = RateLimitEntry.query.filter(RateLimitEntry.timestamp < cutoff).delete()
        db.session.commit()
        return count

    def __repr__(self):
        return f'<RateLimitEntry {self.endpoint}:{self.key}>'
