"""
Authentication utilities for JWT bearer tokens.
"""
import os
import secrets
import jwt
from datetime import datetime, timedelta, timezone
from functools import wraps
from flask import request, jsonify, g


def _jwt_secret():
    secret = os.getenv('JWT_SECRET_KEY')
    if not secret:
        raise RuntimeError('JWT_SECRET_KEY environment variable is required')
    return secret


def generate_token(user_id: int, is_anonymous: bool = False) -> str:
    """
    Issue an access token for a user.
    Lifetime comes from JWT_ACCESS_TOKEN_EXPIRES (seconds, default 1 day).
    """
    expires = int(os.getenv('JWT_ACCESS_TOKEN_EXPIRES', 86400))
    now = datetime.now(timezone.utc)

    payload = {
        'user_id': user_id,
        'anonymous': is_anonymous,
        'jti': secrets.token_hex(16),
        'exp': now + timedelta(seconds=expires),
        'iat': now,
    }

    return jwt.encode(payload, _jwt_secret(), algorithm='HS256')


def decode_token(token: str):
    """Decode and validate a token, returning None when it is unusable."""
    try:
        return jwt.decode(token, _jwt_secret(), algorithms=['HS256'])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None


def token_required(f):
    """Decorator to require a valid bearer token for a route.

    Loads the user into ``g.user`` so handlers and the subscription
    decorators can read the plan without another query.
    """
    @wraps(f)
    def wrapper(*args, **kwargs):
        auth_header = request.headers.get('Authorization')
        if not auth_header:
            return jsonify({'error': 'Missing authorization header'}), 401

        parts = auth_header.split()
        if len(parts) != 2 or parts[0].lower() != 'bearer':
            return jsonify({'error': 'Invalid authorization header format'}), 401

        payload = decode_token(parts[1])
        if not payload:
            return jsonify({'error': 'Invalid or expired token'}), 401

        from app import db
        from app.models.user import User
        user = db.session.get(User, payload.get('user_id'))
        if not user:
            return jsonify({'error': 'Account no longer exists'}), 401

        g.user = user
        g.user_id = user.id
        g.token_jti = payload.get('jti')

        return f(*args, **kwargs)
    return wrapper
