"""Authentication utilities"""
import hashlib
import secrets
from functools import lru_cache
from typing import Optional

import bcrypt

from blogapi.config import settings

# bcrypt only reads the first 72 bytes; newer releases reject longer input
_BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    """Hash a password with a fresh bcrypt salt"""
    salt = bcrypt.gensalt(rounds=rounds or settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plaintext password against a stored bcrypt hash"""
    try:
        return bcrypt.checkpw(_password_bytes(password), password_hash.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return hash_password(secrets.token_urlsafe(16))


def burn_password_check(password: str) -> None:
    """Spend the same bcrypt work as a real comparison (unknown-email logins)."""
    verify_password(password, _dummy_hash())


def generate_session_id() -> str:
    """Generate an opaque session cookie value"""
    return secrets.token_urlsafe(32)


def hash_session_id(session_id: str) -> str:
    """Hash a session id using SHA256"""
    return hashlib.sha256(session_id.encode()).hexdigest()
