"""
Field-level encryption for personal data stored in the database.

Emails and emergency contact details are kept as AES-256-GCM ciphertext;
the random 96-bit nonce is stored in front of each value and the whole
blob is base64 encoded so it fits a Text column.
"""
import os
import base64
import hashlib
import hmac
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

NONCE_SIZE = 12


def _load_key() -> bytes:
    key_b64 = os.getenv('FIELD_ENCRYPTION_KEY')
    if not key_b64:
        raise ValueError('FIELD_ENCRYPTION_KEY environment variable not set')
    key = base64.b64decode(key_b64)
    if len(key) != 32:
        raise ValueError('FIELD_ENCRYPTION_KEY must decode to 32 bytes')
    return key


class FieldCipher:
    """Encrypts and decrypts single string values with one AES-GCM key."""

    def __init__(self, key: bytes):
        self._key = key
        self._aesgcm = AESGCM(key)

    def encrypt(self, plaintext):
        if not plaintext:
            return plaintext
        nonce = os.urandom(NONCE_SIZE)
        sealed = self._aesgcm.encrypt(nonce, plaintext.encode('utf-8'), None)
        return base64.b64encode(nonce + sealed).decode('ascii')

    def decrypt(self, token):
        if not token:
            return token
        raw = base64.b64decode(token)
        plaintext = self._aesgcm.decrypt(raw[:NONCE_SIZE], raw[NONCE_SIZE:], None)
        return plaintext.decode('utf-8')

    def lookup_hash(self, value: str) -> str:
        """Keyed digest used to find rows by an encrypted value."""
        normalized = value.strip().lower().encode('utf-8')
        return hmac.new(self._key, normalized, hashlib.sha256).hexdigest()


_cipher = None


def get_cipher() -> FieldCipher:
    """Return the process-wide cipher, built from the environment on first use."""
    global _cipher
    if _cipher is None:
        _cipher = FieldCipher(_load_key())
    return _cipher


def reset_cipher():
    """Forget the cached cipher so the next call re-reads the key."""
    global _cipher
    _cipher = None


def encrypt_field(value):
    return get_cipher().encrypt(value)


def decrypt_field(value):
    return get_cipher().decrypt(value)


def hash_email(email: str) -> str:
    return get_cipher().lookup_hash(email)
