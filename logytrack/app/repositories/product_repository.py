"""
Product repository.
"""

from typing import Any, Dict, Iterable, List, Optional

from logytrack.app.core.exceptions import ValidationError
from logytrack.app.db.backend import ProcedureBackend
from logytrack.app.models.enums import ProductStatus
from logytrack.app.repositories.base import (
    BINDINGS,
    CrudOperations,
    require_positive,
    require_positive_id,
    require_text,
    utcnow,
)
from logytrack.app.schemas.product import ProductCreate, ProductResponse, ProductUpdate


def parse_product_status(value: Any) -> ProductStatus:
    """Map a raw string onto ProductStatus or raise ValidationError."""
    try:
        return ProductStatus(value)
    except ValueError:
        allowed = ", ".join(status.value for status in ProductStatus)
        raise ValidationError(f"Invalid status. Must be one of: {allowed}") from None


def product_params(data: ProductUpdate) -> Dict[str, Any]:
    """
    Validate and normalize product fields.

    SKUs are stored upper-case.
    """
    description = data.description.strip() if isinstance(data.description, str) else ""
    if len(description) > 500:
        raise ValidationError("Description must be at most 500 characters")
    return {
        "product_name": require_text(data.product_name, "Product name", max_length=200),
        "sku": require_text(data.sku, "SKU", max_length=100).upper(),
        "description": description,
        "quantity": require_positive(data.quantity, "Quantity"),
        "unit_price": require_positive(data.unit_price, "Unit price"),
    }


class ProductRepository:
    """
    CRUD plus lookup and assignment operations.

    Reads return ProductResponse rows joined with vehicle and driver labels.
    ``assign_to_vehicle``, ``unassign`` and ``update_status`` return the
    affected-row count; 0 means a procedure precondition failed.
    """

    def __init__(self, backend: ProcedureBackend):
        self.backend = backend
        self._crud = CrudOperations(backend, BINDINGS["product"], ProductResponse)

    async def _rows(self, procedure: str, params: Optional[Dict[str, Any]] = None) -> List[ProductResponse]:
        rows = await self.backend.query(procedure, params)
        return [self._crud.to_record(row) for row in rows]

    async def get_all(self) -> List[ProductResponse]:
        return await self._crud.get_all()

    async def get_by_id(self, product_id: int) -> ProductResponse:
        return await self._crud.get_by_id(product_id)

    async def create(self, data: ProductCreate) -> int:
        # Callers cannot create an already-assigned product.
        return await self._crud.create(product_params(ProductUpdate(
            product_name=data.product_name,
            sku=data.sku,
            description=data.description,
            quantity=data.quantity,
            unit_price=data.unit_price,
        )))

    async def update(self, product_id: int, data: ProductUpdate) -> int:
        return await self._crud.update(product_id, product_params(data))

    async def delete(self, product_id: int) -> int:
        return await self._crud.delete(product_id)

    async def get_by_status(self, status: Any) -> List[ProductResponse]:
        return await self._rows("products.get_by_status", {"status": parse_product_status(status)})

    async def get_by_vehicle(self, vehicle_id: int) -> List[ProductResponse]:
        return await self._rows(
            "products.get_by_vehicle", {"vehicle_id": require_positive_id(vehicle_id, "Vehicle")}
        )

    async def get_by_driver(self, driver_id: int) -> List[ProductResponse]:
        return await self._rows(
            "products.get_by_driver", {"driver_id": require_positive_id(driver_id, "Driver")}
        )

    async def get_unassigned(self) -> List[ProductResponse]:
        return await self._rows("products.get_unassigned")

    async def assign_to_vehicle(self, product_id: int, vehicle_id: int, driver_id: int) -> int:
        """Set both references and status Assigned in one conditional write."""
        return await self.backend.execute("products.assign_to_vehicle", {
            "product_id": require_positive_id(product_id, "Product"),
            "vehicle_id": require_positive_id(vehicle_id, "Vehicle"),
            "driver_id": require_positive_id(driver_id, "Driver"),
            "updated_date": utcnow(),
        })

    async def unassign(self, product_id: int, from_statuses: Optional[Iterable[ProductStatus]] = None) -> int:
        """Clear both references and reset status, optionally only from ``from_statuses``."""
        return await self.backend.execute("products.unassign", {
            "product_id": require_positive_id(product_id, "Product"),
            "from_statuses": tuple(from_statuses) if from_statuses else None,
            "updated_date": utcnow(),
        })

    async def update_status(self, product_id: int, status: Any, expected_status: Optional[ProductStatus] = None) -> int:
        """Rewrite only the status column; references are left untouched."""
        return await self.backend.execute("products.update_status", {
            "product_id": require_positive_id(product_id, "Product"),
            "status": parse_product_status(status),
            "expected_status": expected_status,
            "updated_date": utcnow(),
        })
