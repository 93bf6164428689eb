"""Account routes: sign-up, sign-in, guest access, password reset and profile."""
from datetime import datetime
from flask import jsonify, g
from app.errors import ValidationError, commit_or_raise
from app.models import User, PasswordReset
from app.utils.auth import generate_token, token_required
from app.utils.audit_logger import audit_log
from app.utils.email_sender import send_password_reset_email
from app.utils.rate_limiter import rate_limit, rate_limit_login, reset_request_limiter, reset_confirm_limiter
from app.utils.seeding import new_user, create_guest_user
from app.utils.validators import validate_credentials, validate_display_name
from . import consumer_bp, json_body


def _session_payload(user, status=200):
    return jsonify({
        'token': generate_token(user.id, user.is_anonymous),
        'user': user.to_dict(),
    }), status


@consumer_bp.route('/register', methods=['POST'])
def register():
    """Create an email/password account with a Basic subscription."""
    data = json_body()

    errors = validate_credentials(data)
    if data.get('display_name') is not None:
        errors.extend(validate_display_name(data))
    if errors:
        raise ValidationError(errors)

    email = data['email'].strip().lower()
    if User.find_by_email(email):
        return jsonify({'error': 'A user with this email already exists'}), 409

    user = new_user()
    user.email = email
    user.set_password(data['password'])
    display_name = (data.get('display_name') or '').strip()
    user.display_name = display_name or None
    commit_or_raise('create your account')

    audit_log('CREATE', 'user', resource_id=str(user.id),
              details={'action': 'registration'}, user_id=str(user.id))

    return _session_payload(user, 201)


@consumer_bp.route('/login', methods=['POST'])
@rate_limit_login
def login():
    data = json_body()
    email = data.get('email')
    password = data.get('password')
    if not isinstance(email, str) or not isinstance(password, str) or not email or not password:
        return jsonify({'error': 'Email and password are required'}), 400

    user = User.find_by_email(email)
    if not user or not user.check_password(password):
        audit_log('LOGIN_FAILED', 'user', details={'reason': 'bad_credentials'})
        return jsonify({'error': 'Invalid email or password'}), 401

    audit_log('LOGIN', 'user', resource_id=str(user.id),
              details={'action': 'login'}, user_id=str(user.id))
    return _session_payload(user)


@consumer_bp.route('/guest', methods=['POST'])
def guest_login():
    """Start an anonymous session pre-filled with demo medications."""
    user, _ = create_guest_user()

    audit_log('LOGIN', 'user', resource_id=str(user.id),
              details={'action': 'guest_login'}, user_id=str(user.id))
    return _session_payload(user, 201)


@consumer_bp.route('/password-reset', methods=['POST'])
@rate_limit(reset_request_limiter)
def request_password_reset():
    """Email a reset code. The response never reveals whether the email exists."""
    data = json_body()
    email = data.get('email')
    if not isinstance(email, str) or not email.strip():
        return jsonify({'error': 'Email is required'}), 400

    user = User.find_by_email(email)
    if user and user.password_hash:
        reset = PasswordReset.issue_for_user(user.id)
        commit_or_raise('start the password reset')
        send_password_reset_email(user.email, reset.code)
        audit_log('UPDATE', 'user', resource_id=str(user.id),
                  details={'action': 'password_reset_requested'}, user_id=str(user.id))

    return jsonify({'message': 'If this email is registered, a reset code has been sent.'}), 200


@consumer_bp.route('/password-reset/confirm', methods=['POST'])
@rate_limit(reset_confirm_limiter)
def confirm_password_reset():
    data = json_body()

    errors = validate_credentials(data)
    code = str(data.get('code', '')).strip()
    if len(code) != 6 or not code.isdigit():
        errors.append('Invalid reset code format')
    if errors:
        raise ValidationError(errors)

    user = User.find_by_email(data['email'])
    reset = PasswordReset.find_valid(user.id, code) if user else None
    if not reset:
        return jsonify({'error': 'Invalid or expired reset code'}), 400

    reset.used_at = datetime.utcnow()
    user.set_password(data['password'])
    commit_or_raise('reset your password')

    audit_log('UPDATE', 'user', resource_id=str(user.id),
              details={'action': 'password_reset'}, user_id=str(user.id))
    return jsonify({'message': 'Password updated'}), 200


@consumer_bp.route('/profile', methods=['GET'])
@token_required
def get_profile():
    return jsonify(g.user.to_dict()), 200


@consumer_bp.route('/profile', methods=['PUT'])
@token_required
def update_profile():
    """Change the display name."""
    data = json_body()

    errors = validate_display_name(data)
    if errors:
        raise ValidationError(errors)

    old_name = g.user.display_name
    g.user.display_name = str(data['display_name']).strip() or None
    commit_or_raise('update your display name')

    audit_log('UPDATE', 'user', resource_id=str(g.user_id),
              details={'action': 'profile_update', 'changed': old_name != g.user.display_name})
    return jsonify(g.user.to_dict()), 200


@consumer_bp.route('/subscription', methods=['GET'])
@token_required
def get_subscription():
    subscription = g.user.subscription
    data = subscription.to_dict()
    data['medication_count'] = g.user.medications.count()
    return jsonify(data), 200
