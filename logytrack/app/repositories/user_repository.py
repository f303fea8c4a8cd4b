"""
User repository backing the credential store.
"""

from typing import Any, Dict, List, Optional

from logytrack.app.core.exceptions import ConflictError
from logytrack.app.db.backend import ProcedureBackend
from logytrack.app.repositories.base import BINDINGS, CrudOperations
from logytrack.app.schemas.auth import UserInDB


class UserRepository:
    """CRUD plus lookup by unique name. Input is validated by the auth service."""

    def __init__(self, backend: ProcedureBackend):
        self.backend = backend
        self._crud = CrudOperations(backend, BINDINGS["user"], UserInDB)

    async def get_all(self) -> List[UserInDB]:
        return await self._crud.get_all()

    async def get_by_id(self, user_id: int) -> UserInDB:
        return await self._crud.get_by_id(user_id)

    async def get_by_name(self, name: str) -> Optional[UserInDB]:
        row = await self.backend.query_one("users.get_by_name", {"name": name})
        return self._crud.to_record(row) if row is not None else None

    async def create(self, params: Dict[str, Any]) -> int:
        try:
            return await self._crud.create(params)
        except ConflictError as exc:
            raise ConflictError("Username already exists") from exc

    async def update(self, user_id: int, params: Dict[str, Any]) -> int:
        try:
            return await self._crud.update(user_id, params)
        except ConflictError as exc:
            raise ConflictError("Username already exists") from exc

    async def delete(self, user_id: int) -> int:
        return await self._crud.delete(user_id)
