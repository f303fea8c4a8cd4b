"""
Driver repository.
"""

import re
from typing import Any, Dict, List

from logytrack.app.core.exceptions import ConflictError, ValidationError
from logytrack.app.db.backend import ProcedureBackend
from logytrack.app.repositories.base import BINDINGS, CrudOperations, require_text, utcnow
from logytrack.app.schemas.driver import DriverCreate, DriverResponse, DriverSummary

PHONE_PATTERN = re.compile(r"^[0-9\-\+\(\)\s]+$")

DUPLICATE_DRIVER = "A driver with this phone number or license number already exists"


def driver_params(data: DriverCreate) -> Dict[str, Any]:
    """
    Validate and normalize driver fields.

    Raises:
        ValidationError: On empty or malformed name, phone or license
    """
    full_name = require_text(data.full_name, "Full name", max_length=100, min_length=3)
    phone_number = require_text(data.phone_number, "Phone number", max_length=20)
    if not PHONE_PATTERN.match(phone_number):
        raise ValidationError("Invalid phone number format")
    license_number = require_text(data.license_number, "License number", max_length=50)
    return {
        "full_name": full_name,
        "phone_number": phone_number,
        "license_number": license_number,
        "is_active": bool(data.is_active),
    }


class DriverRepository:
    """CRUD plus active-driver and driver/vehicle summary queries."""

    def __init__(self, backend: ProcedureBackend):
        self.backend = backend
        self._crud = CrudOperations(backend, BINDINGS["driver"], DriverResponse)

    async def get_all(self) -> List[DriverResponse]:
        return await self._crud.get_all()

    async def get_by_id(self, driver_id: int) -> DriverResponse:
        return await self._crud.get_by_id(driver_id)

    async def create(self, data: DriverCreate) -> int:
        params = driver_params(data)
        try:
            return await self._crud.create(params)
        except ConflictError as exc:
            raise ConflictError(DUPLICATE_DRIVER) from exc

    async def update(self, driver_id: int, data: DriverCreate) -> int:
        if data.is_active is None:
            current = await self.get_by_id(driver_id)
            data = data.model_copy(update={"is_active": current.is_active})
        params = driver_params(data)
        try:
            return await self._crud.update(driver_id, params)
        except ConflictError as exc:
            raise ConflictError(DUPLICATE_DRIVER) from exc

    async def deactivate(self, driver_id: int, data: DriverCreate) -> int:
        """
        Rewrite a driver's fields and mark them inactive, provided they own
        no vehicle and carry no active product. Returns the affected-row
        count; 0 means the driver is missing or still in use.
        """
        params = driver_params(data)
        params.update(self._crud.id_params(driver_id), updated_date=utcnow())
        try:
            return await self.backend.execute("drivers.deactivate", params)
        except ConflictError as exc:
            raise ConflictError(DUPLICATE_DRIVER) from exc

    async def delete(self, driver_id: int) -> int:
        return await self._crud.delete(driver_id)

    async def get_active_drivers(self) -> List[DriverResponse]:
        rows = await self.backend.query("drivers.get_active")
        return [self._crud.to_record(row) for row in rows]

    async def get_drivers_with_vehicles(self) -> List[DriverSummary]:
        """Fold the driver/vehicle join into one summary per driver."""
        rows = await self.backend.query("drivers.get_with_vehicles")
        summaries: Dict[int, DriverSummary] = {}
        for row in rows:
            summary = summaries.get(row["id"])
            if summary is None:
                summary = DriverSummary(
                    id=row["id"],
                    full_name=row["full_name"],
                    phone_number=row["phone_number"],
                    license_number=row["license_number"],
                    is_active=row["is_active"],
                )
                summaries[row["id"]] = summary
            if row["vehicle_number"] is not None:
                summary.vehicle_numbers.append(row["vehicle_number"])
                summary.vehicle_count += 1
        return list(summaries.values())
