import os
import click
from flask import Flask, request, redirect, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_cors import CORS
from dotenv import load_dotenv

load_dotenv()

db = SQLAlchemy()
migrate = Migrate()

SECURITY_HEADERS = {
    'X-Content-Type-Options': 'nosniff',
    'X-Frame-Options': 'DENY',
    'Content-Security-Policy': "default-src 'none'; frame-ancestors 'none'",
    'Cache-Control': 'no-store',
    'Referrer-Policy': 'no-referrer',
}

DEV_ORIGINS = ['http://localhost:*', 'http://127.0.0.1:*']


def _require_env(name):
    value = os.getenv(name)
    if not value:
        raise RuntimeError(f'{name} environment variable is required')
    return value


def _configure(app, config_name):
    if config_name == 'testing':
        app.config.update(
            TESTING=True,
            SECRET_KEY=os.getenv('SECRET_KEY', 'testing-secret'),
            SQLALCHEMY_DATABASE_URI='sqlite://',
        )
    else:
        app.config.update(
            SECRET_KEY=_require_env('SECRET_KEY'),
            SQLALCHEMY_DATABASE_URI=_require_env('DATABASE_URL'),
            SQLALCHEMY_ENGINE_OPTIONS={'pool_pre_ping': True, 'pool_recycle': 300},
        )
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config['MAX_CONTENT_LENGTH'] = 1024 * 1024
    app.config['AUDIT_LOG_FILE'] = os.getenv('AUDIT_LOG_FILE', 'logs/audit.log')


def _allowed_origins(is_production):
    configured = [o.strip() for o in os.getenv('ALLOWED_ORIGINS', '').split(',') if o.strip()]
    if configured:
        return configured
    if is_production:
        raise RuntimeError('ALLOWED_ORIGINS environment variable is required in production')
    return DEV_ORIGINS


def _register_request_hooks(app, is_production):
    if is_production:
        @app.before_request
        def redirect_to_https():
            forwarded = request.headers.get('X-Forwarded-Proto', 'http')
            if not request.is_secure and forwarded != 'https':
                return redirect(request.url.replace('http://', 'https://', 1), code=301)

    # Write methods only accept JSON bodies
    @app.before_request
    def require_json_body():
        if request.method in ('POST', 'PUT') and request.content_length:
            if not request.is_json:
                return jsonify({'error': 'Content-Type must be application/json'}), 415

    @app.after_request
    def set_security_headers(response):
        response.headers.update(SECURITY_HEADERS)
        if is_production or request.is_secure:
            response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'
        return response


def _register_cli(app):

    @app.cli.command('seed-demo')
    def seed_demo():
        """Create a guest account populated with the demo medications."""
        from app.utils.seeding import create_guest_user
        user, inserted = create_guest_user()
        print(f'Created guest user {user.id} with {inserted} demo medication(s).')

    @app.cli.command('grant-premium')
    @click.argument('email')
    def grant_premium(email):
        """Upgrade the account with EMAIL to the Premium plan."""
        from app.models.user import User
        user = User.find_by_email(email)
        if not user:
            print(f'No user with email {email}.')
            return
        user.subscription.apply_plan('Premium')
        db.session.commit()
        print(f'User {user.id} upgraded to Premium.')

    @app.cli.command('cleanup-password-resets')
    def cleanup_password_resets():
        """Remove expired password reset codes."""
        from app.models.password_reset import PasswordReset
        count = PasswordReset.cleanup_expired()
        print(f'Removed {count} expired password reset code(s).')

    @app.cli.command('cleanup-rate-limits')
    def cleanup_rate_limits():
        """Remove rate limit attempts older than the longest window."""
        from app.models.rate_limit_entry import RateLimitEntry
        from app.utils.rate_limiter import LIMITERS
        count = RateLimitEntry.cleanup_older_than(max(limiter.window_seconds for limiter in LIMITERS))
        print(f'Removed {count} rate limit entr{"y" if count == 1 else "ies"}.')


def create_app(config_name=None):
    app = Flask(__name__)

    config_name = config_name or os.getenv('APP_CONFIG')
    is_production = os.getenv('FLASK_ENV') == 'production'
    _configure(app, config_name)

    db.init_app(app)
    migrate.init_app(app, db)

    CORS(app, resources={r"/consumer/*": {"origins": _allowed_origins(is_production)}})
    _register_request_hooks(app, is_production)

    from app.errors import register_error_handlers
    register_error_handlers(app)

    from app.utils.audit_logger import setup_audit_logging
    setup_audit_logging(app)

    from app.utils.contact_store import contact_store, audit_contact_change
    contact_store.subscribe(audit_contact_change)

    from app.routes.consumer import consumer_bp
    app.register_blueprint(consumer_bp, url_prefix='/consumer')

    @app.route('/health')
    def health():
        return {'status': 'healthy'}, 200

    _register_cli(app)
    return app
