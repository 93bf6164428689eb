"""
Error taxonomy for the consumer API and the JSON handlers that render it.

Engines in ``app.rules`` never raise; everything here happens at the
request, storage or text-generation boundary.
"""
import logging
from flask import jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors that map to a JSON response."""
    status_code = 500

    def __init__(self, message=None):
        super().__init__(message)
        self.message = message or self.__class__.__doc__

    def to_dict(self):
        return {'error': self.message}


class ValidationError(AppError):
    """Malformed input rejected before reaching the engines."""
    status_code = 400

    def __init__(self, errors):
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        super().__init__('; '.join(self.errors))

    def to_dict(self):
        return {'error': self.errors}


class EstimationError(AppError):
    """Refill estimation failed or returned an unexpected format."""
    status_code = 502

    def to_dict(self):
        return {'error': self.message, 'retryable': True}


class StorageError(AppError):
    """A database write failed and was rolled back."""
    status_code = 503


class UpgradeRequired(AppError):
    """The current subscription does not include this feature."""
    status_code = 402

    def to_dict(self):
        return {'error': self.message, 'upgrade_required': True}


def commit_or_raise(action='save changes'):
    """Commit the session, rolling back and raising StorageError on failure."""
    from app import db
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.error('Database commit failed while trying to %s', action, exc_info=True)
        raise StorageError(f'Could not {action}. Please try again.')


def register_error_handlers(app):
    @app.errorhandler(AppError)
    def handle_app_error(e):
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({'error': e.description}), e.code
