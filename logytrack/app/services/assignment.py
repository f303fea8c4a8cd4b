"""
Assignment and status coordinator.

Owns every change to product/vehicle statuses and to the
product → vehicle → driver references. Each operation validates against
the current state for a precise error, then performs one conditional
write that re-checks the same preconditions in the database. A write that
matches no rows after the checks passed lost a race and is reported as a
conflict.

Product lifecycle::

    Unassigned --assign--> Assigned --status--> InTransit --status--> Delivered | Returned

Unassign is legal from Assigned, InTransit and Returned; Delivered is
terminal. Unassigned and Assigned are never set through a plain status
update.
"""

import logging
from typing import Dict, FrozenSet, List

from logytrack.app.core.exceptions import (
    ConflictError,
    InvalidTransitionError,
    ValidationError,
)
from logytrack.app.models.enums import ACTIVE_PRODUCT_STATUSES, ProductStatus, VehicleStatus
from logytrack.app.repositories.base import require_positive_id
from logytrack.app.repositories.driver_repository import DriverRepository
from logytrack.app.repositories.product_repository import ProductRepository, parse_product_status
from logytrack.app.repositories.vehicle_repository import VehicleRepository, parse_vehicle_status
from logytrack.app.schemas.driver import DriverResponse, DriverUpdate
from logytrack.app.schemas.product import ProductResponse
from logytrack.app.schemas.vehicle import VehicleResponse

logger = logging.getLogger(__name__)

PRODUCT_TRANSITIONS: Dict[ProductStatus, FrozenSet[ProductStatus]] = {
    ProductStatus.UNASSIGNED: frozenset(),
    ProductStatus.ASSIGNED: frozenset({ProductStatus.IN_TRANSIT}),
    ProductStatus.IN_TRANSIT: frozenset({ProductStatus.DELIVERED, ProductStatus.RETURNED}),
    ProductStatus.DELIVERED: frozenset(),
    ProductStatus.RETURNED: frozenset(),
}

UNASSIGNABLE_FROM = (ProductStatus.ASSIGNED, ProductStatus.IN_TRANSIT, ProductStatus.RETURNED)

# Reachable only through assign/unassign so status and references agree.
ASSIGNMENT_STATUSES = (ProductStatus.UNASSIGNED, ProductStatus.ASSIGNED)

LOST_RACE = "{} was modified concurrently, please retry"


class AssignmentCoordinator:
    """
    Enforces the status vocabulary and the product/vehicle/driver
    consistency rules on top of the three entity repositories.
    """

    def __init__(self, drivers: DriverRepository, vehicles: VehicleRepository, products: ProductRepository):
        self.drivers = drivers
        self.vehicles = vehicles
        self.products = products

    async def _active_cargo(self, vehicle_id: int) -> List[ProductResponse]:
        cargo = await self.products.get_by_vehicle(vehicle_id)
        return [product for product in cargo if product.status in ACTIVE_PRODUCT_STATUSES]

    # Products

    async def assign_product(self, product_id: int, vehicle_id: int, driver_id: int) -> ProductResponse:
        """
        Link a product to a vehicle and driver in one step.

        Raises:
            InvalidArgumentError: Any id is missing or not positive
            ResourceNotFoundError: Product, vehicle or driver does not exist
            ValidationError: Driver is inactive
            ConflictError: Product already assigned, vehicle in maintenance,
                vehicle driven or loaded for someone else, or a concurrent
                update won
        """
        require_positive_id(product_id, "Product")
        require_positive_id(vehicle_id, "Vehicle")
        require_positive_id(driver_id, "Driver")

        product = await self.products.get_by_id(product_id)
        vehicle = await self.vehicles.get_by_id(vehicle_id)
        driver = await self.drivers.get_by_id(driver_id)

        if not driver.is_active:
            raise ValidationError("Driver is not active")
        if product.status != ProductStatus.UNASSIGNED:
            raise ConflictError(f"Product is already {product.status.value}; unassign it first")
        if vehicle.status == VehicleStatus.MAINTENANCE:
            raise ConflictError("Vehicle is under maintenance")
        if vehicle.driver_id is not None and vehicle.driver_id != driver_id:
            raise ConflictError(
                f"Vehicle is driven by driver {vehicle.driver_id}; products must be assigned to that driver"
            )
        if vehicle.driver_id is None and any(
            product.driver_id != driver_id for product in await self._active_cargo(vehicle_id)
        ):
            raise ConflictError("Vehicle carries products assigned to another driver")

        affected = await self.products.assign_to_vehicle(product_id, vehicle_id, driver_id)
        if affected == 0:
            raise ConflictError(LOST_RACE.format("Product"))

        logger.info("Product %s assigned to vehicle %s / driver %s", product_id, vehicle_id, driver_id)
        return await self.products.get_by_id(product_id)

    async def unassign_product(self, product_id: int) -> ProductResponse:
        """
        Clear a product's vehicle and driver and return it to Unassigned.

        Raises:
            InvalidTransitionError: Product is unassigned or already delivered
        """
        product = await self.products.get_by_id(product_id)

        if product.status == ProductStatus.UNASSIGNED:
            raise InvalidTransitionError("Product is not assigned")
        if product.status not in UNASSIGNABLE_FROM:
            raise InvalidTransitionError(f"Cannot unassign a product that is {product.status.value}")

        affected = await self.products.unassign(product_id, from_statuses=(product.status,))
        if affected == 0:
            raise ConflictError(LOST_RACE.format("Product"))

        logger.info("Product %s unassigned (was %s)", product_id, product.status.value)
        return await self.products.get_by_id(product_id)

    async def update_product_status(self, product_id: int, status: str) -> ProductResponse:
        """
        Move a product along its delivery lifecycle.

        Raises:
            ValidationError: ``status`` is not a product status
            InvalidTransitionError: The move is not allowed from the current status
        """
        target = parse_product_status(status)
        product = await self.products.get_by_id(product_id)

        if target in ASSIGNMENT_STATUSES:
            action = "unassign" if target == ProductStatus.UNASSIGNED else "assign"
            raise InvalidTransitionError(f"Status '{target.value}' can only be set through {action}")
        if target not in PRODUCT_TRANSITIONS[product.status]:
            raise InvalidTransitionError(
                f"Cannot change product status from {product.status.value} to {target.value}"
            )

        affected = await self.products.update_status(product_id, target, expected_status=product.status)
        if affected == 0:
            raise ConflictError(LOST_RACE.format("Product"))

        logger.info("Product %s status %s -> %s", product_id, product.status.value, target.value)
        return await self.products.get_by_id(product_id)

    # Vehicles

    async def assign_driver(self, vehicle_id: int, driver_id: int) -> VehicleResponse:
        """
        Give a vehicle a driver. Re-assigning the same driver is a no-op
        apart from refreshing updated_date.
        """
        require_positive_id(vehicle_id, "Vehicle")
        require_positive_id(driver_id, "Driver")
        vehicle = await self.vehicles.get_by_id(vehicle_id)
        driver = await self.drivers.get_by_id(driver_id)

        if not driver.is_active:
            raise ValidationError("Driver is not active")
        if vehicle.driver_id is not None and vehicle.driver_id != driver_id:
            raise ConflictError(f"Vehicle is already assigned to driver {vehicle.driver_id}; unassign first")
        if any(product.driver_id != driver_id for product in await self._active_cargo(vehicle_id)):
            raise ConflictError("Vehicle carries products assigned to another driver")

        affected = await self.vehicles.assign_driver(vehicle_id, driver_id)
        if affected == 0:
            raise ConflictError(LOST_RACE.format("Vehicle"))

        logger.info("Driver %s assigned to vehicle %s", driver_id, vehicle_id)
        return await self.vehicles.get_by_id(vehicle_id)

    async def unassign_driver(self, vehicle_id: int) -> VehicleResponse:
        vehicle = await self.vehicles.get_by_id(vehicle_id)

        if vehicle.status == VehicleStatus.ON_TRIP:
            raise ConflictError("Cannot remove the driver of a vehicle that is on a trip")
        if await self._active_cargo(vehicle_id):
            raise ConflictError("Vehicle still carries assigned products")

        affected = await self.vehicles.unassign_driver(vehicle_id)
        if affected == 0:
            raise ConflictError(LOST_RACE.format("Vehicle"))

        logger.info("Driver removed from vehicle %s (was %s)", vehicle_id, vehicle.driver_id)
        return await self.vehicles.get_by_id(vehicle_id)

    async def update_vehicle_status(self, vehicle_id: int, status: str) -> VehicleResponse:
        """
        Change a vehicle's status.

        OnTrip needs an assigned driver; Maintenance needs an empty load.
        """
        target = parse_vehicle_status(status)
        vehicle = await self.vehicles.get_by_id(vehicle_id)

        if target == VehicleStatus.ON_TRIP and vehicle.driver_id is None:
            raise ValidationError("A vehicle needs a driver before it can go on a trip")
        if target == VehicleStatus.MAINTENANCE and await self._active_cargo(vehicle_id):
            raise ConflictError("Vehicle still carries assigned products")

        affected = await self.vehicles.update_status(vehicle_id, target)
        if affected == 0:
            raise ConflictError(LOST_RACE.format("Vehicle"))

        logger.info("Vehicle %s status %s -> %s", vehicle_id, vehicle.status.value, target.value)
        return await self.vehicles.get_by_id(vehicle_id)

    # Referential guards for plain CRUD

    async def update_driver(self, driver_id: int, data: DriverUpdate) -> DriverResponse:
        """Update a driver; deactivation is refused while they still own vehicles or cargo."""
        current = await self.drivers.get_by_id(driver_id)
        if data.is_active is None:
            data = data.model_copy(update={"is_active": current.is_active})

        if not (current.is_active and not data.is_active):
            await self.drivers.update(driver_id, data)
            return await self.drivers.get_by_id(driver_id)

        owned = await self.vehicles.get_by_driver(driver_id)
        if owned:
            raise ConflictError(
                f"Driver still owns {len(owned)} vehicle(s); unassign them before deactivating"
            )
        cargo = await self.products.get_by_driver(driver_id)
        if any(product.status in ACTIVE_PRODUCT_STATUSES for product in cargo):
            raise ConflictError("Driver still has assigned products")

        affected = await self.drivers.deactivate(driver_id, data)
        if affected == 0:
            raise ConflictError(LOST_RACE.format("Driver"))

        logger.info("Driver %s deactivated", driver_id)
        return await self.drivers.get_by_id(driver_id)

    async def delete_driver(self, driver_id: int) -> int:
        await self.drivers.get_by_id(driver_id)
        if await self.vehicles.get_by_driver(driver_id):
            raise ConflictError("Driver still owns vehicles")
        if await self.products.get_by_driver(driver_id):
            raise ConflictError("Driver is referenced by products")
        return await self.drivers.delete(driver_id)

    async def delete_vehicle(self, vehicle_id: int) -> int:
        await self.vehicles.get_by_id(vehicle_id)
        if await self.products.get_by_vehicle(vehicle_id):
            raise ConflictError("Vehicle is referenced by products")
        return await self.vehicles.delete(vehicle_id)
