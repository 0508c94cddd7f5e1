"""
Authentication utilities.

Password hashing uses scrypt with a random 16-byte salt; stored format is
``<hex digest>.<hex salt>``.
"""
import hashlib
import hmac
import secrets
from datetime import datetime, timezone

SCRYPT_N = 16384
SCRYPT_R = 8
SCRYPT_P = 1
SCRYPT_KEY_LENGTH = 64


def utcnow() -> datetime:
    """
    Return current UTC time as timezone-aware datetime.

    All datetime comparisons in the auth layer must use aware datetimes.
    """
    return datetime.now(timezone.utc)


def _scrypt(password: str, salt: str) -> bytes:
    return hashlib.scrypt(
        password.encode("utf-8"),
        salt=salt.encode("utf-8"),
        n=SCRYPT_N,
        r=SCRYPT_R,
        p=SCRYPT_P,
        dklen=SCRYPT_KEY_LENGTH,
    )


def hash_password(password: str) -> str:
    """Hash a password for storage."""
    salt = secrets.token_hex(16)
    return f"{_scrypt(password, salt).hex()}.{salt}"


def verify_password(supplied: str, stored: str) -> bool:
    """Constant-time comparison of a supplied password against a stored hash."""
    hashed, sep, salt = stored.partition(".")
    if not sep or not salt:
        return False
    try:
        expected = bytes.fromhex(hashed)
    except ValueError:
        return False
    return hmac.compare_digest(expected, _scrypt(supplied, salt))


def generate_session_id() -> str:
    """Generate a unique session ID."""
    return f"sess_{secrets.token_hex(16)}"


def generate_session_token() -> str:
    """Generate a secure session token."""
    return secrets.token_urlsafe(32)


def hash_token(token: str) -> str:
    """Hash a token for secure storage."""
    return hashlib.sha256(token.encode()).hexdigest()
