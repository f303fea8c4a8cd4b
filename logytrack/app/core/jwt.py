"""
JWT access tokens.

Tokens are HS256-signed and carry the user's id, name and role. Expiry is
the only invalidation path; there is no refresh or revocation.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from logytrack.app.core.config import settings


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Sign ``data`` with issued-at and expiry claims added.

    Args:
        data: Identity claims (``sub``, ``user_id``, ``name``, ``role``)
        expires_delta: Lifetime override; defaults to
            ``settings.access_token_expire_minutes``

    Example payload:
        {"sub": "7", "user_id": 7, "name": "dispatcher", "role": "Admin",
         "iat": 1234567890, "exp": 1234654290}
    """
    lifetime = expires_delta if expires_delta is not None else timedelta(
        minutes=settings.access_token_expire_minutes
    )
    issued_at = datetime.now(timezone.utc)
    claims = {**data, "iat": issued_at, "exp": issued_at + lifetime}
    return jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """Return the claims of a correctly signed, unexpired token, else None."""
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None
