"""
Generic repository contract.

Every entity repository offers the same five CRUD operations. The
entity-specific part is data: which procedures to call and how the id
parameter is named. ``CrudOperations`` implements the shared behaviour and
is composed into each concrete repository.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Generic, List, Mapping, Protocol, Type, TypeVar

from pydantic import BaseModel

from logytrack.app.core.exceptions import InvalidArgumentError, ResourceNotFoundError, ValidationError
from logytrack.app.db.backend import ProcedureBackend

T = TypeVar("T", bound=BaseModel)


@dataclass(frozen=True)
class ProcedureBinding:
    """Backend procedures and id-parameter name used for one entity."""
    label: str
    get_all: str
    get_by_id: str
    create: str
    update: str
    delete: str
    id_param: str


BINDINGS: Dict[str, ProcedureBinding] = {
    "user": ProcedureBinding(
        "User", "users.get_all", "users.get_by_id", "users.create",
        "users.update", "users.delete", id_param="user_id",
    ),
    "driver": ProcedureBinding(
        "Driver", "drivers.get_all", "drivers.get_by_id", "drivers.create",
        "drivers.update", "drivers.delete", id_param="driver_id",
    ),
    "vehicle": ProcedureBinding(
        "Vehicle", "vehicles.get_all", "vehicles.get_by_id", "vehicles.create",
        "vehicles.update", "vehicles.delete", id_param="vehicle_id",
    ),
    "product": ProcedureBinding(
        "Product", "products.get_all", "products.get_by_id", "products.create",
        "products.update", "products.delete", id_param="product_id",
    ),
}


class Repository(Protocol[T]):
    """CRUD contract shared by every entity repository."""

    async def get_all(self) -> List[T]: ...

    async def get_by_id(self, entity_id: int) -> T: ...

    async def create(self, entity: Any) -> int: ...

    async def update(self, entity_id: int, entity: Any) -> int: ...

    async def delete(self, entity_id: int) -> int: ...


def require_positive_id(value: Any, label: str) -> int:
    """Reject missing or non-positive ids with InvalidArgumentError."""
    if value is None or isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidArgumentError(f"{label} ID must be greater than 0")
    return value


def require_text(value: Any, field: str, max_length: int, min_length: int = 1) -> str:
    """Return the stripped string or raise ValidationError."""
    text = value.strip() if isinstance(value, str) else ""
    if not text:
        raise ValidationError(f"{field} is required")
    if len(text) < min_length or len(text) > max_length:
        if min_length > 1:
            raise ValidationError(f"{field} must be between {min_length} and {max_length} characters")
        raise ValidationError(f"{field} must be at most {max_length} characters")
    return text


def require_positive(value: Any, field: str) -> Any:
    """Reject missing, non-finite and non-positive numbers with ValidationError."""
    if value is None or isinstance(value, bool) or not math.isfinite(value) or value <= 0:
        raise ValidationError(f"{field} must be greater than 0")
    return value


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CrudOperations(Generic[T]):
    """
    Shared CRUD behaviour over a procedure binding.

    Args:
        backend: Procedure backend
        binding: Procedure names and id-parameter for the entity
        record_type: Pydantic model rows are converted into
    """

    def __init__(self, backend: ProcedureBackend, binding: ProcedureBinding, record_type: Type[T]):
        self.backend = backend
        self.binding = binding
        self.record_type = record_type

    def id_params(self, entity_id: Any) -> Dict[str, int]:
        return {self.binding.id_param: require_positive_id(entity_id, self.binding.label)}

    def to_record(self, row: Mapping[str, Any]) -> T:
        return self.record_type.model_validate(row)

    async def get_all(self) -> List[T]:
        rows = await self.backend.query(self.binding.get_all)
        return [self.to_record(row) for row in rows]

    async def get_by_id(self, entity_id: int) -> T:
        row = await self.backend.query_one(self.binding.get_by_id, self.id_params(entity_id))
        if row is None:
            raise ResourceNotFoundError(self.binding.label, entity_id)
        return self.to_record(row)

    async def create(self, params: Mapping[str, Any]) -> int:
        now = utcnow()
        return await self.backend.execute_scalar(
            self.binding.create, {**params, "created_date": now, "updated_date": now}
        )

    async def update(self, entity_id: int, params: Mapping[str, Any]) -> int:
        """Rewrite mutable columns; created_date is never part of the update."""
        call_params = {**params, **self.id_params(entity_id), "updated_date": utcnow()}
        affected = await self.backend.execute(self.binding.update, call_params)
        if affected == 0:
            raise ResourceNotFoundError(self.binding.label, entity_id)
        return affected

    async def delete(self, entity_id: int) -> int:
        affected = await self.backend.execute(self.binding.delete, self.id_params(entity_id))
        if affected == 0:
            raise ResourceNotFoundError(self.binding.label, entity_id)
        return affected
