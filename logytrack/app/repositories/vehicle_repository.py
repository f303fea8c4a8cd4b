"""
Vehicle repository.
"""

from typing import Any, Dict, List

from logytrack.app.core.exceptions import ConflictError, InvalidArgumentError, ValidationError
from logytrack.app.db.backend import ProcedureBackend
from logytrack.app.models.enums import VehicleStatus
from logytrack.app.repositories.base import (
    BINDINGS,
    CrudOperations,
    require_positive,
    require_positive_id,
    require_text,
    utcnow,
)
from logytrack.app.schemas.vehicle import VehicleCreate, VehicleResponse, VehicleUpdate, VehicleWithDriver

DUPLICATE_VEHICLE = "A vehicle with this vehicle number already exists"


def parse_vehicle_status(value: Any) -> VehicleStatus:
    """Map a raw string onto VehicleStatus or raise InvalidArgumentError."""
    try:
        return VehicleStatus(value)
    except ValueError:
        allowed = ", ".join(status.value for status in VehicleStatus)
        raise InvalidArgumentError(f"Invalid vehicle status. Must be one of: {allowed}") from None


def vehicle_params(data: VehicleUpdate) -> Dict[str, Any]:
    model = data.model.strip() if isinstance(data.model, str) else ""
    if len(model) > 100:
        raise ValidationError("Model must be at most 100 characters")
    return {
        "vehicle_number": require_text(data.vehicle_number, "Vehicle number", max_length=50),
        "model": model,
        "capacity_kg": require_positive(data.capacity_kg, "Capacity"),
    }


class VehicleRepository:
    """
    CRUD plus status and driver-assignment operations.

    ``update_status``, ``assign_driver`` and ``unassign_driver`` are
    conditional writes: they return 0 when the vehicle is missing or a
    precondition held by the procedure is not met. Callers that need a
    precise reason go through the assignment coordinator.
    """

    def __init__(self, backend: ProcedureBackend):
        self.backend = backend
        self._crud = CrudOperations(backend, BINDINGS["vehicle"], VehicleResponse)

    async def get_all(self) -> List[VehicleResponse]:
        return await self._crud.get_all()

    async def get_by_id(self, vehicle_id: int) -> VehicleResponse:
        return await self._crud.get_by_id(vehicle_id)

    async def create(self, data: VehicleCreate) -> int:
        # Status and driver from the caller are ignored; new vehicles start Available.
        params = vehicle_params(VehicleUpdate(
            vehicle_number=data.vehicle_number,
            model=data.model,
            capacity_kg=data.capacity_kg,
        ))
        try:
            return await self._crud.create(params)
        except ConflictError as exc:
            raise ConflictError(DUPLICATE_VEHICLE) from exc

    async def update(self, vehicle_id: int, data: VehicleUpdate) -> int:
        params = vehicle_params(data)
        try:
            return await self._crud.update(vehicle_id, params)
        except ConflictError as exc:
            raise ConflictError(DUPLICATE_VEHICLE) from exc

    async def delete(self, vehicle_id: int) -> int:
        return await self._crud.delete(vehicle_id)

    async def get_by_status(self, status: Any) -> List[VehicleResponse]:
        parsed = parse_vehicle_status(status)
        rows = await self.backend.query("vehicles.get_by_status", {"status": parsed})
        return [self._crud.to_record(row) for row in rows]

    async def get_by_driver(self, driver_id: int) -> List[VehicleResponse]:
        rows = await self.backend.query(
            "vehicles.get_by_driver", {"driver_id": require_positive_id(driver_id, "Driver")}
        )
        return [self._crud.to_record(row) for row in rows]

    async def get_vehicles_with_driver(self) -> List[VehicleWithDriver]:
        rows = await self.backend.query("vehicles.get_with_drivers")
        return [VehicleWithDriver.model_validate(row) for row in rows]

    async def update_status(self, vehicle_id: int, status: Any) -> int:
        parsed = parse_vehicle_status(status)
        return await self.backend.execute("vehicles.update_status", {
            "vehicle_id": require_positive_id(vehicle_id, "Vehicle"),
            "status": parsed,
            "updated_date": utcnow(),
        })

    async def assign_driver(self, vehicle_id: int, driver_id: int) -> int:
        return await self.backend.execute("vehicles.assign_driver", {
            "vehicle_id": require_positive_id(vehicle_id, "Vehicle"),
            "driver_id": require_positive_id(driver_id, "Driver"),
            "updated_date": utcnow(),
        })

    async def unassign_driver(self, vehicle_id: int) -> int:
        return await self.backend.execute("vehicles.unassign_driver", {
            "vehicle_id": require_positive_id(vehicle_id, "Vehicle"),
            "updated_date": utcnow(),
        })
