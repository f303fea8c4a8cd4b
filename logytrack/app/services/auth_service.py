"""
Authentication service.

Registers users, verifies credentials and issues signed access tokens.
Login never reveals whether the name or the password was wrong.
"""

import logging
from functools import lru_cache
from typing import Any, Dict, Optional

from logytrack.app.core.config import settings
from logytrack.app.core.exceptions import AuthenticationError, ConflictError, ValidationError
from logytrack.app.core.jwt import create_access_token, decode_access_token
from logytrack.app.core.security import get_password_hash, password_too_long, verify_password
from logytrack.app.repositories.base import require_text, utcnow
from logytrack.app.repositories.user_repository import UserRepository
from logytrack.app.schemas.auth import LoginResponse, UserInDB, UserLogin, UserRegister, UserResponse

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    # Verified against for unknown names so both failure paths cost one bcrypt check.
    return get_password_hash("logytrack-dummy-password")


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class AuthService:
    def __init__(self, users: UserRepository):
        self.users = users

    def hash_password(self, password: str) -> str:
        return get_password_hash(password)

    def verify_password(self, password: str, hashed_password: str) -> bool:
        return verify_password(password, hashed_password)

    def generate_token(self, user: UserInDB) -> str:
        """
        Issue a signed access token for ``user``.

        Claims: ``sub`` (user id as string), ``user_id``, ``name``, ``role``,
        plus ``iat``/``exp`` added by the encoder.
        """
        return create_access_token(data={
            "sub": str(user.id),
            "user_id": user.id,
            "name": user.name,
            "role": user.role,
        })

    def decode_token(self, token: str) -> Optional[Dict[str, Any]]:
        return decode_access_token(token)

    async def register(self, data: UserRegister) -> UserResponse:
        """
        Create a user account.

        Raises:
            ValidationError: Empty or over-long field, short password or
                password over 72 bytes
            ConflictError: Name already taken
        """
        if _blank(data.name) or _blank(data.password) or _blank(data.role):
            raise ValidationError("All fields required")

        name = require_text(data.name, "Name", max_length=100)
        role = require_text(data.role, "Role", max_length=50)
        if len(data.password) < settings.min_password_length:
            raise ValidationError(
                f"Password must be at least {settings.min_password_length} characters"
            )
        if password_too_long(data.password):
            raise ValidationError("Password must be at most 72 bytes")
        if await self.users.get_by_name(name) is not None:
            raise ConflictError("Username already exists")
        # The unique index still guards against a concurrent registration.
        user_id = await self.users.create({
            "name": name,
            "password_hash": self.hash_password(data.password),
            "role": role,
            "created_date": utcnow(),
        })
        logger.info("Registered user %s (id=%s)", name, user_id)
        user = await self.users.get_by_id(user_id)
        return UserResponse(id=user.id, name=user.name, role=user.role)

    async def login(self, credentials: UserLogin) -> LoginResponse:
        """
        Verify credentials and issue a token.

        Raises:
            ValidationError: Name or password empty
            AuthenticationError: Unknown name or wrong password
        """
        if _blank(credentials.name) or _blank(credentials.password):
            raise ValidationError("Name and password are required")

        user = await self.users.get_by_name(credentials.name.strip())
        if user is None:
            self.verify_password(credentials.password, _dummy_hash())
            logger.warning("Failed login for unknown user %s", credentials.name.strip())
            raise AuthenticationError()

        if not self.verify_password(credentials.password, user.password_hash):
            logger.warning("Failed login for user %s", user.name)
            raise AuthenticationError()

        logger.info("User %s logged in", user.name)
        return LoginResponse(
            id=user.id,
            name=user.name,
            role=user.role,
            token=self.generate_token(user),
        )
