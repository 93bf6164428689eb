"""
Database-backed rate limiting for sign-in and password reset.

Attempts are stored in ``rate_limit_entries`` so limits survive restarts and
hold across worker processes.
"""
import logging
from datetime import datetime, timedelta
from functools import wraps
from flask import request, jsonify

from app import db
from app.errors import commit_or_raise
from app.models.rate_limit_entry import RateLimitEntry

logger = logging.getLogger(__name__)


class DBRateLimiter:
    """Allows ``max_attempts`` per client address within ``window_seconds``."""

    def __init__(self, max_attempts=5, window_seconds=60, endpoint_name='default'):
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self.endpoint_name = endpoint_name

    def is_limited(self, key) -> bool:
        since = datetime.utcnow() - timedelta(seconds=self.window_seconds)
        return RateLimitEntry.count_since(key, self.endpoint_name, since) >= self.max_attempts

    def record(self, key):
        db.session.add(RateLimitEntry(key=key, endpoint=self.endpoint_name,
                                      timestamp=datetime.utcnow()))
        commit_or_raise('record the attempt')


# 5 sign-in attempts per minute per IP
login_limiter = DBRateLimiter(max_attempts=5, window_seconds=60, endpoint_name='login')

# Reset emails: 5 per 15 minutes per IP
reset_request_limiter = DBRateLimiter(max_attempts=5, window_seconds=900,
                                      endpoint_name='password_reset')

# Code guesses: 5 per 15 minutes per IP, the lifetime of one code
reset_confirm_limiter = DBRateLimiter(max_attempts=5, window_seconds=900,
                                      endpoint_name='password_reset_confirm')

LIMITERS = (login_limiter, reset_request_limiter, reset_confirm_limiter)


def _client_key():
    return request.remote_addr or 'unknown'


def rate_limit(limiter, message='Too many requests. Try again later.'):
    """Decorator factory: reject with 429 once ``limiter`` is exhausted for this client."""
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            key = _client_key()
            if limiter.is_limited(key):
                logger.warning('Rate limit hit on %s for %s', limiter.endpoint_name, key)
                return jsonify({'error': message}), 429
            limiter.record(key)
            return f(*args, **kwargs)
        return wrapper
    return decorator


rate_limit_login = rate_limit(login_limiter, 'Too many login attempts. Try again later.')
