"""
Assignment coordinator tests.

Covers the product lifecycle, vehicle/driver consistency guards and
the conditional writes that close assignment races.
"""

import pytest

from logytrack.app.core.exceptions import (
    ConflictError,
    InvalidArgumentError,
    InvalidTransitionError,
    ResourceNotFoundError,
    ValidationError,
)
from logytrack.app.models.enums import ProductStatus, VehicleStatus
from logytrack.app.schemas.driver import DriverCreate, DriverUpdate
from logytrack.app.schemas.product import ProductCreate
from logytrack.app.schemas.vehicle import VehicleCreate


def _deactivate(driver):
    return DriverUpdate(
        full_name=driver.full_name,
        phone_number=driver.phone_number,
        license_number=driver.license_number,
        is_active=False,
    )


@pytest.mark.asyncio
async def test_example_scenario(drivers, vehicles, products, coordinator):
    """Create driver, vehicle and product, assign, ship and unassign."""
    driver_id = await drivers.create(DriverCreate(
        full_name="Alice", phone_number="555-0100", license_number="LIC1"
    ))
    vehicle_id = await vehicles.create(VehicleCreate(vehicle_number="V-100", capacity_kg=500))
    product_id = await products.create(ProductCreate(
        product_name="Widget", sku="WID1", quantity=10, unit_price=5.0
    ))
    assert (driver_id, vehicle_id, product_id) == (1, 1, 1)
    vehicle_before = await vehicles.get_by_id(vehicle_id)
    assert vehicle_before.status == VehicleStatus.AVAILABLE
    assert (await products.get_by_id(product_id)).status == ProductStatus.UNASSIGNED

    product = await coordinator.assign_product(1, 1, 1)
    assert product.status == ProductStatus.ASSIGNED
    vehicle_after = await vehicles.get_by_id(vehicle_id)
    assert vehicle_after.status == vehicle_before.status
    assert vehicle_after.driver_id is None

    product = await coordinator.update_product_status(1, "InTransit")
    assert product.status == ProductStatus.IN_TRANSIT

    product = await coordinator.unassign_product(1)
    assert product.status == ProductStatus.UNASSIGNED
    assert product.vehicle_id is None
    assert product.driver_id is None


# Product assignment

@pytest.mark.asyncio
async def test_assign_rejects_non_positive_ids(coordinator):
    with pytest.raises(InvalidArgumentError):
        await coordinator.assign_product(1, 0, 1)
    with pytest.raises(InvalidArgumentError):
        await coordinator.assign_product(1, 1, -1)


@pytest.mark.asyncio
async def test_assign_missing_entities_are_not_found(coordinator, alice, truck, widget):
    with pytest.raises(ResourceNotFoundError):
        await coordinator.assign_product(99, truck.id, alice.id)
    with pytest.raises(ResourceNotFoundError):
        await coordinator.assign_product(widget.id, 99, alice.id)
    with pytest.raises(ResourceNotFoundError):
        await coordinator.assign_product(widget.id, truck.id, 99)


@pytest.mark.asyncio
async def test_assign_twice_is_conflict(coordinator, alice, truck, widget):
    await coordinator.assign_product(widget.id, truck.id, alice.id)
    with pytest.raises(ConflictError):
        await coordinator.assign_product(widget.id, truck.id, alice.id)


@pytest.mark.asyncio
async def test_assign_must_match_vehicle_driver(coordinator, alice, bob, truck, widget):
    await coordinator.assign_driver(truck.id, alice.id)

    with pytest.raises(ConflictError):
        await coordinator.assign_product(widget.id, truck.id, bob.id)

    product = await coordinator.assign_product(widget.id, truck.id, alice.id)
    assert product.driver_id == alice.id


@pytest.mark.asyncio
async def test_driverless_vehicle_keeps_one_driver_for_its_cargo(products, coordinator, alice, bob, truck, widget):
    gadget_id = await products.create(ProductCreate(
        product_name="Gadget", sku="gad1", quantity=1, unit_price=2.0
    ))
    await coordinator.assign_product(widget.id, truck.id, alice.id)

    with pytest.raises(ConflictError):
        await coordinator.assign_product(gadget_id, truck.id, bob.id)
    assert (await products.get_by_id(gadget_id)).status == ProductStatus.UNASSIGNED

    gadget = await coordinator.assign_product(gadget_id, truck.id, alice.id)
    assert gadget.driver_id == alice.id

    vehicle = await coordinator.assign_driver(truck.id, alice.id)
    assert vehicle.driver_id == alice.id


@pytest.mark.asyncio
async def test_assign_write_refuses_cargo_for_another_driver(products, coordinator, alice, bob, truck, widget):
    gadget_id = await products.create(ProductCreate(
        product_name="Gadget", sku="gad1", quantity=1, unit_price=2.0
    ))
    await coordinator.assign_product(widget.id, truck.id, alice.id)

    assert await products.assign_to_vehicle(gadget_id, truck.id, bob.id) == 0
    assert await products.assign_to_vehicle(gadget_id, truck.id, alice.id) == 1


@pytest.mark.asyncio
async def test_assign_rejects_inactive_driver(drivers, coordinator, alice, truck, widget):
    await drivers.update(alice.id, _deactivate(alice))
    with pytest.raises(ValidationError):
        await coordinator.assign_product(widget.id, truck.id, alice.id)


@pytest.mark.asyncio
async def test_assign_rejects_vehicle_in_maintenance(coordinator, alice, truck, widget):
    await coordinator.update_vehicle_status(truck.id, "Maintenance")
    with pytest.raises(ConflictError):
        await coordinator.assign_product(widget.id, truck.id, alice.id)


@pytest.mark.asyncio
async def test_lost_race_is_conflict(products, coordinator, alice, bob, truck, widget):
    """A competing write between the checks and the update leaves the product untouched."""
    original = products.assign_to_vehicle

    async def assign_after_competitor(product_id, vehicle_id, driver_id):
        await original(product_id, vehicle_id, bob.id)
        return await original(product_id, vehicle_id, driver_id)

    products.assign_to_vehicle = assign_after_competitor
    with pytest.raises(ConflictError):
        await coordinator.assign_product(widget.id, truck.id, alice.id)

    product = await products.get_by_id(widget.id)
    assert product.driver_id == bob.id


# Unassign

@pytest.mark.asyncio
async def test_unassign_unassigned_product_is_rejected(coordinator, widget):
    with pytest.raises(InvalidTransitionError):
        await coordinator.unassign_product(widget.id)


@pytest.mark.asyncio
async def test_unassign_rejected_once_delivered(coordinator, products, alice, truck, widget):
    await coordinator.assign_product(widget.id, truck.id, alice.id)
    await coordinator.update_product_status(widget.id, "InTransit")
    await coordinator.update_product_status(widget.id, "Delivered")

    with pytest.raises(InvalidTransitionError):
        await coordinator.unassign_product(widget.id)
    assert (await products.get_by_id(widget.id)).vehicle_id == truck.id


@pytest.mark.asyncio
@pytest.mark.parametrize("path", [[], ["InTransit"], ["InTransit", "Returned"]])
async def test_unassign_allowed_before_delivery(coordinator, alice, truck, widget, path):
    await coordinator.assign_product(widget.id, truck.id, alice.id)
    for status in path:
        await coordinator.update_product_status(widget.id, status)
    product = await coordinator.unassign_product(widget.id)
    assert product.status == ProductStatus.UNASSIGNED


# Status updates

@pytest.mark.asyncio
async def test_status_rejects_unknown_value_before_lookup(coordinator):
    with pytest.raises(ValidationError):
        await coordinator.update_product_status(999, "Lost")


@pytest.mark.asyncio
@pytest.mark.parametrize("target", ["Unassigned", "Assigned"])
async def test_status_never_sets_assignment_states(coordinator, products, alice, truck, widget, target):
    await coordinator.assign_product(widget.id, truck.id, alice.id)
    with pytest.raises(InvalidTransitionError):
        await coordinator.update_product_status(widget.id, target)

    product = await products.get_by_id(widget.id)
    assert product.status == ProductStatus.ASSIGNED
    assert product.vehicle_id == truck.id


@pytest.mark.asyncio
async def test_status_requires_assignment_first(coordinator, widget):
    with pytest.raises(InvalidTransitionError):
        await coordinator.update_product_status(widget.id, "InTransit")


@pytest.mark.asyncio
async def test_delivered_is_terminal(coordinator, alice, truck, widget):
    await coordinator.assign_product(widget.id, truck.id, alice.id)
    await coordinator.update_product_status(widget.id, "InTransit")
    product = await coordinator.update_product_status(widget.id, "Delivered")
    assert product.status == ProductStatus.DELIVERED

    with pytest.raises(InvalidTransitionError):
        await coordinator.update_product_status(widget.id, "Returned")


# Vehicle driver and status

@pytest.mark.asyncio
async def test_assign_driver_to_vehicle(coordinator, alice, truck):
    vehicle = await coordinator.assign_driver(truck.id, alice.id)
    assert vehicle.driver_id == alice.id

    again = await coordinator.assign_driver(truck.id, alice.id)
    assert again.driver_id == alice.id


@pytest.mark.asyncio
async def test_assign_different_driver_is_conflict(coordinator, alice, bob, truck):
    await coordinator.assign_driver(truck.id, alice.id)
    with pytest.raises(ConflictError):
        await coordinator.assign_driver(truck.id, bob.id)


@pytest.mark.asyncio
async def test_assign_driver_rejects_foreign_cargo(coordinator, alice, bob, truck, widget):
    await coordinator.assign_product(widget.id, truck.id, alice.id)
    with pytest.raises(ConflictError):
        await coordinator.assign_driver(truck.id, bob.id)

    vehicle = await coordinator.assign_driver(truck.id, alice.id)
    assert vehicle.driver_id == alice.id


@pytest.mark.asyncio
async def test_assign_inactive_driver_to_vehicle_is_rejected(drivers, coordinator, alice, truck):
    await drivers.update(alice.id, _deactivate(alice))
    with pytest.raises(ValidationError):
        await coordinator.assign_driver(truck.id, alice.id)


@pytest.mark.asyncio
async def test_unassign_driver_guards(coordinator, alice, truck, widget):
    await coordinator.assign_driver(truck.id, alice.id)
    await coordinator.assign_product(widget.id, truck.id, alice.id)

    with pytest.raises(ConflictError):
        await coordinator.unassign_driver(truck.id)

    await coordinator.unassign_product(widget.id)
    await coordinator.update_vehicle_status(truck.id, "OnTrip")
    with pytest.raises(ConflictError):
        await coordinator.unassign_driver(truck.id)

    await coordinator.update_vehicle_status(truck.id, "Available")
    vehicle = await coordinator.unassign_driver(truck.id)
    assert vehicle.driver_id is None


@pytest.mark.asyncio
async def test_on_trip_requires_driver(coordinator, alice, truck):
    with pytest.raises(ValidationError):
        await coordinator.update_vehicle_status(truck.id, "OnTrip")

    await coordinator.assign_driver(truck.id, alice.id)
    vehicle = await coordinator.update_vehicle_status(truck.id, "OnTrip")
    assert vehicle.status == VehicleStatus.ON_TRIP


@pytest.mark.asyncio
async def test_maintenance_requires_empty_load(coordinator, alice, truck, widget):
    await coordinator.assign_product(widget.id, truck.id, alice.id)
    with pytest.raises(ConflictError):
        await coordinator.update_vehicle_status(truck.id, "Maintenance")

    await coordinator.unassign_product(widget.id)
    vehicle = await coordinator.update_vehicle_status(truck.id, "Maintenance")
    assert vehicle.status == VehicleStatus.MAINTENANCE


@pytest.mark.asyncio
async def test_vehicle_status_rejects_unknown_value(coordinator, truck):
    with pytest.raises(ValidationError):
        await coordinator.update_vehicle_status(truck.id, "Parked")


# Referential guards

@pytest.mark.asyncio
async def test_deactivate_driver_with_vehicle_is_conflict(drivers, coordinator, alice, truck):
    await coordinator.assign_driver(truck.id, alice.id)
    with pytest.raises(ConflictError):
        await coordinator.update_driver(alice.id, _deactivate(alice))

    await coordinator.unassign_driver(truck.id)
    driver = await coordinator.update_driver(alice.id, _deactivate(alice))
    assert driver.is_active is False


@pytest.mark.asyncio
async def test_deactivate_driver_with_cargo_is_conflict(coordinator, alice, truck, widget):
    await coordinator.assign_product(widget.id, truck.id, alice.id)
    with pytest.raises(ConflictError):
        await coordinator.update_driver(alice.id, _deactivate(alice))


@pytest.mark.asyncio
async def test_deactivation_loses_to_concurrent_vehicle_assignment(drivers, vehicles, coordinator, alice, truck):
    original = drivers.deactivate

    async def deactivate_after_competitor(driver_id, data):
        await vehicles.assign_driver(truck.id, driver_id)
        return await original(driver_id, data)

    drivers.deactivate = deactivate_after_competitor
    with pytest.raises(ConflictError):
        await coordinator.update_driver(alice.id, _deactivate(alice))

    assert (await drivers.get_by_id(alice.id)).is_active is True
    assert (await vehicles.get_by_id(truck.id)).driver_id == alice.id


@pytest.mark.asyncio
async def test_update_driver_without_is_active_does_not_reactivate(coordinator, alice):
    await coordinator.update_driver(alice.id, _deactivate(alice))

    driver = await coordinator.update_driver(alice.id, DriverUpdate(
        full_name="Alice Smith", phone_number="555-0100", license_number="LIC1"
    ))
    assert driver.full_name == "Alice Smith"
    assert driver.is_active is False


@pytest.mark.asyncio
async def test_delete_referenced_driver_is_conflict(drivers, coordinator, alice, truck, widget):
    await coordinator.assign_product(widget.id, truck.id, alice.id)
    with pytest.raises(ConflictError):
        await coordinator.delete_driver(alice.id)

    await coordinator.unassign_product(widget.id)
    assert await coordinator.delete_driver(alice.id) == 1
    with pytest.raises(ResourceNotFoundError):
        await drivers.get_by_id(alice.id)


@pytest.mark.asyncio
async def test_delete_referenced_vehicle_is_conflict(coordinator, alice, truck, widget):
    await coordinator.assign_product(widget.id, truck.id, alice.id)
    with pytest.raises(ConflictError):
        await coordinator.delete_vehicle(truck.id)

    await coordinator.unassign_product(widget.id)
    assert await coordinator.delete_vehicle(truck.id) == 1
