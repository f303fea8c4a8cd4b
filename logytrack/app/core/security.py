"""
Password hashing utilities.

bcrypt hashes embed their own salt and cost factor, so verification only
needs the stored hash.
"""

import bcrypt

from logytrack.app.core.config import settings

# bcrypt ignores input past this many bytes; newer releases reject it.
BCRYPT_MAX_BYTES = 72


def get_password_hash(password: str) -> str:
    """
    Hash a plain-text password with a fresh salt.

    Args:
        password: Plain-text password

    Returns:
        bcrypt hash string (``$2b$<rounds>$<salt><digest>``)
    """
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, hashed_password: str) -> bool:
    """
    Check a plain-text password against a stored bcrypt hash.

    Malformed hashes and over-long passwords never verify.
    """
    secret = password.encode("utf-8")
    if len(secret) > BCRYPT_MAX_BYTES:
        return False
    try:
        return bcrypt.checkpw(secret, hashed_password.encode("utf-8"))
    except ValueError:
        return False


def password_too_long(password: str) -> bool:
    return len(password.encode("utf-8")) > BCRYPT_MAX_BYTES
