"""
Procedure-call backend.

Repositories talk to the database only through named procedures with a
fixed parameter shape. Every call borrows one connection from the engine
and gives it back on all exit paths.
"""

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

from sqlalchemy import text
from sqlalchemy.engine import CursorResult
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from logytrack.app.core.exceptions import BackendError, ConflictError
from logytrack.app.db.procedures import PROCEDURES, Procedure

logger = logging.getLogger(__name__)

Row = Dict[str, Any]

_UNIQUE_MARKERS = ("unique", "duplicate")
_FOREIGN_KEY_MARKERS = ("foreign key",)


def _violates(exc: IntegrityError, markers) -> bool:
    message = str(exc.orig).lower()
    return any(marker in message for marker in markers)


class ProcedureBackend:
    """
    Executes named procedures against an async SQLAlchemy engine.

    Reads return plain dict rows; writes return an affected-row count or
    the generated identity.
    """

    def __init__(self, engine: AsyncEngine, procedures: Optional[Mapping[str, Procedure]] = None):
        self._engine = engine
        self._procedures = procedures if procedures is not None else PROCEDURES

    def _statement(self, name: str, params: Optional[Mapping[str, Any]]):
        builder = self._procedures.get(name)
        if builder is None:
            raise BackendError(f"Unknown procedure '{name}'")
        return builder(params or {})

    async def _call(self, name: str, params: Optional[Mapping[str, Any]], consume: Callable[[CursorResult], Any], write: bool) -> Any:
        statement = self._statement(name, params)
        try:
            if write:
                async with self._engine.begin() as conn:
                    result = await conn.execute(statement)
                    return consume(result)
            async with self._engine.connect() as conn:
                result = await conn.execute(statement)
                return consume(result)
        except IntegrityError as exc:
            if _violates(exc, _UNIQUE_MARKERS):
                logger.info("Procedure %s rejected by unique constraint", name)
                raise ConflictError("A record with the same unique value already exists") from exc
            if _violates(exc, _FOREIGN_KEY_MARKERS):
                logger.info("Procedure %s rejected by foreign key constraint", name)
                raise ConflictError("Record is referenced by or refers to another record") from exc
            logger.error("Procedure %s violated an integrity constraint", name, exc_info=True)
            raise BackendError() from exc
        except SQLAlchemyError as exc:
            logger.error("Procedure %s failed", name, exc_info=True)
            raise BackendError() from exc

    async def query(self, name: str, params: Optional[Mapping[str, Any]] = None) -> List[Row]:
        """Run a read procedure and return every row."""
        return await self._call(
            name, params, lambda result: [dict(row) for row in result.mappings()], write=False
        )

    async def query_one(self, name: str, params: Optional[Mapping[str, Any]] = None) -> Optional[Row]:
        """Run a read procedure and return the first row, or None."""
        def first(result):
            row = result.mappings().first()
            return dict(row) if row is not None else None
        return await self._call(name, params, first, write=False)

    async def execute(self, name: str, params: Optional[Mapping[str, Any]] = None) -> int:
        """Run a write procedure and return the affected-row count."""
        return await self._call(name, params, lambda result: result.rowcount, write=True)

    async def execute_scalar(self, name: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        """Run an insert procedure and return the generated identity."""
        return await self._call(
            name, params, lambda result: result.inserted_primary_key[0], write=True
        )

    async def ping(self) -> bool:
        """Return True when a connection can be opened and used."""
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except (SQLAlchemyError, OSError):
            logger.warning("Database ping failed", exc_info=True)
            return False
