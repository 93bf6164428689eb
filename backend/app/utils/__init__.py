from .encryption import encrypt_field, decrypt_field, hash_email
from .audit_logger import audit_log, audited
from .auth import generate_token, token_required
from .validators import validate_credentials, validate_medication
from .subscriptions import subscription_required
