"""
Consumer API routes.
"""
from flask import Blueprint, request

from app.errors import ValidationError

consumer_bp = Blueprint('consumer', __name__)


def json_body():
    """The request's JSON object; anything else is a 400."""
    data = request.get_json(silent=True)
    if not data:
        raise ValidationError('Request body is required')
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


# Import submodules to register routes on consumer_bp
from . import account      # noqa: E402, F401
from . import medications  # noqa: E402, F401
from . import readings     # noqa: E402, F401
from . import contacts     # noqa: E402, F401
