"""
Audit logging for changes to medications, readings and account data.
Every event is written as one JSON line with timestamp, user, action and resource.
"""
import os
import logging
import structlog
from datetime import datetime, timezone
from flask import request, g, has_request_context, has_app_context
from functools import wraps


def setup_audit_logging(app):
    """Configure structlog JSON output and the audit file handler."""

    log_file = app.config.get('AUDIT_LOG_FILE') or os.getenv('AUDIT_LOG_FILE', 'logs/audit.log')

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    audit_logger = logging.getLogger('audit')
    audit_logger.setLevel(logging.INFO)

    # create_app may run many times in one process (tests, CLI)
    already_attached = any(
        getattr(h, 'baseFilename', None) == os.path.abspath(log_file)
        for h in audit_logger.handlers
    )
    if not already_attached and not app.config.get('TESTING'):
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(logging.Formatter('%(message)s'))
        audit_logger.addHandler(file_handler)

    app.config['AUDIT_LOGGER'] = structlog.get_logger('audit')


def get_audit_logger():
    """Get the audit logger instance."""
    if has_app_context():
        from flask import current_app
        return current_app.config.get('AUDIT_LOGGER', structlog.get_logger('audit'))
    return structlog.get_logger('audit')


def audit_log(action: str, resource_type: str, resource_id: str = None,
              details: dict = None, user_id: str = None):
    """
    Record an audit event.

    Args:
        action: CREATE, READ, UPDATE, DELETE, LOGIN, ...
        resource_type: medication, bp_reading, glucose_reading, user, ...
        resource_id: ID of the specific resource (optional)
        details: Additional details about the action (optional)
        user_id: acting user; defaults to g.user_id inside a request
    """
    logger = get_audit_logger()

    client_ip = 'unknown'
    user_agent = 'unknown'
    if has_request_context():
        if user_id is None:
            user_id = getattr(g, 'user_id', None)
        client_ip = request.remote_addr or 'unknown'
        user_agent = request.headers.get('User-Agent', 'unknown')

    logger.info(
        "audit_event",
        timestamp=datetime.now(timezone.utc).isoformat(),
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
        user_id=str(user_id) if user_id is not None else 'anonymous',
        client_ip=client_ip,
        user_agent=user_agent,
        details=details or {},
    )


def audited(action: str, resource_type: str):
    """Decorator that logs access to a route, using its id/item_id argument."""
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            resource_id = kwargs.get('item_id') or kwargs.get('medication_id')
            audit_log(action, resource_type, resource_id=str(resource_id) if resource_id else None)
            return f(*args, **kwargs)
        return wrapper
    return decorator
