"""
Named stored operations.

Each entry maps a procedure name to a builder that turns a parameter
mapping into exactly one SQLAlchemy Core statement. Repositories only
know the names and parameter shapes; the SQL lives here.

Conditional updates carry their preconditions in the WHERE clause so a
check and the write it guards happen in a single statement.
"""

from typing import Any, Callable, Dict, Mapping

from sqlalchemy import delete, insert, or_, select, update
from sqlalchemy.sql import Executable

from logytrack.app.models.driver import Driver
from logytrack.app.models.enums import ACTIVE_PRODUCT_STATUSES, ProductStatus, VehicleStatus
from logytrack.app.models.product import Product
from logytrack.app.models.user import User
from logytrack.app.models.vehicle import Vehicle

Params = Mapping[str, Any]
Procedure = Callable[[Params], Executable]

users = User.__table__
drivers = Driver.__table__
vehicles = Vehicle.__table__
products = Product.__table__

PROCEDURES: Dict[str, Procedure] = {}


def procedure(name: str):
    """Register a statement builder under ``name``."""
    def register(builder: Procedure) -> Procedure:
        PROCEDURES[name] = builder
        return builder
    return register


def _pick(params: Params, *names: str) -> Dict[str, Any]:
    return {name: params[name] for name in names}


def _active_cargo(vehicle_id):
    return select(products.c.id).where(
        products.c.vehicle_id == vehicle_id,
        products.c.status.in_(ACTIVE_PRODUCT_STATUSES),
    ).exists()


# Users

@procedure("users.get_all")
def _users_get_all(params: Params):
    return select(users).order_by(users.c.id)


@procedure("users.get_by_id")
def _users_get_by_id(params: Params):
    return select(users).where(users.c.id == params["user_id"])


@procedure("users.get_by_name")
def _users_get_by_name(params: Params):
    return select(users).where(users.c.name == params["name"])


@procedure("users.create")
def _users_create(params: Params):
    return insert(users).values(**_pick(params, "name", "password_hash", "role", "created_date"))


@procedure("users.update")
def _users_update(params: Params):
    return (
        update(users)
        .where(users.c.id == params["user_id"])
        .values(**_pick(params, "name", "password_hash", "role"))
    )


@procedure("users.delete")
def _users_delete(params: Params):
    return delete(users).where(users.c.id == params["user_id"])


# Drivers

DRIVER_FIELDS = ("full_name", "phone_number", "license_number", "is_active")


@procedure("drivers.get_all")
def _drivers_get_all(params: Params):
    return select(drivers).order_by(drivers.c.id)


@procedure("drivers.get_by_id")
def _drivers_get_by_id(params: Params):
    return select(drivers).where(drivers.c.id == params["driver_id"])


@procedure("drivers.get_active")
def _drivers_get_active(params: Params):
    return select(drivers).where(drivers.c.is_active.is_(True)).order_by(drivers.c.id)


@procedure("drivers.get_with_vehicles")
def _drivers_get_with_vehicles(params: Params):
    # One row per (driver, vehicle) pair; drivers without vehicles appear once
    # with a NULL vehicle_number.
    return (
        select(drivers, vehicles.c.vehicle_number)
        .select_from(drivers.outerjoin(vehicles, vehicles.c.driver_id == drivers.c.id))
        .order_by(drivers.c.id, vehicles.c.id)
    )


@procedure("drivers.create")
def _drivers_create(params: Params):
    return insert(drivers).values(**_pick(params, *DRIVER_FIELDS, "created_date", "updated_date"))


@procedure("drivers.update")
def _drivers_update(params: Params):
    return (
        update(drivers)
        .where(drivers.c.id == params["driver_id"])
        .values(**_pick(params, *DRIVER_FIELDS, "updated_date"))
    )


@procedure("drivers.deactivate")
def _drivers_deactivate(params: Params):
    driver_id = params["driver_id"]
    owns_vehicle = select(vehicles.c.id).where(vehicles.c.driver_id == driver_id).exists()
    carries_cargo = select(products.c.id).where(
        products.c.driver_id == driver_id,
        products.c.status.in_(ACTIVE_PRODUCT_STATUSES),
    ).exists()
    return (
        update(drivers)
        .where(drivers.c.id == driver_id, ~owns_vehicle, ~carries_cargo)
        .values(**_pick(params, "full_name", "phone_number", "license_number", "updated_date"), is_active=False)
    )


@procedure("drivers.delete")
def _drivers_delete(params: Params):
    return delete(drivers).where(drivers.c.id == params["driver_id"])


# Vehicles

def _vehicle_with_driver():
    return (
        select(
            vehicles,
            drivers.c.full_name.label("driver_name"),
            drivers.c.phone_number.label("driver_phone"),
        )
        .select_from(vehicles.outerjoin(drivers, vehicles.c.driver_id == drivers.c.id))
        .order_by(vehicles.c.id)
    )


@procedure("vehicles.get_all")
def _vehicles_get_all(params: Params):
    return select(vehicles).order_by(vehicles.c.id)


@procedure("vehicles.get_by_id")
def _vehicles_get_by_id(params: Params):
    return select(vehicles).where(vehicles.c.id == params["vehicle_id"])


@procedure("vehicles.get_by_status")
def _vehicles_get_by_status(params: Params):
    return select(vehicles).where(vehicles.c.status == params["status"]).order_by(vehicles.c.id)


@procedure("vehicles.get_by_driver")
def _vehicles_get_by_driver(params: Params):
    return select(vehicles).where(vehicles.c.driver_id == params["driver_id"]).order_by(vehicles.c.id)


@procedure("vehicles.get_with_drivers")
def _vehicles_get_with_drivers(params: Params):
    return _vehicle_with_driver()


@procedure("vehicles.create")
def _vehicles_create(params: Params):
    return insert(vehicles).values(
        **_pick(params, "vehicle_number", "model", "capacity_kg", "created_date", "updated_date"),
        driver_id=None,
        status=VehicleStatus.AVAILABLE,
    )


@procedure("vehicles.update")
def _vehicles_update(params: Params):
    return (
        update(vehicles)
        .where(vehicles.c.id == params["vehicle_id"])
        .values(**_pick(params, "vehicle_number", "model", "capacity_kg", "updated_date"))
    )


@procedure("vehicles.delete")
def _vehicles_delete(params: Params):
    return delete(vehicles).where(vehicles.c.id == params["vehicle_id"])


@procedure("vehicles.update_status")
def _vehicles_update_status(params: Params):
    vehicle_id = params["vehicle_id"]
    status = VehicleStatus(params["status"])
    statement = update(vehicles).where(vehicles.c.id == vehicle_id)
    if status == VehicleStatus.ON_TRIP:
        statement = statement.where(vehicles.c.driver_id.is_not(None))
    elif status == VehicleStatus.MAINTENANCE:
        statement = statement.where(~_active_cargo(vehicle_id))
    return statement.values(status=status, updated_date=params["updated_date"])


@procedure("vehicles.assign_driver")
def _vehicles_assign_driver(params: Params):
    vehicle_id = params["vehicle_id"]
    driver_id = params["driver_id"]
    driver_is_active = select(drivers.c.id).where(
        drivers.c.id == driver_id,
        drivers.c.is_active.is_(True),
    ).exists()
    foreign_cargo = select(products.c.id).where(
        products.c.vehicle_id == vehicle_id,
        products.c.status.in_(ACTIVE_PRODUCT_STATUSES),
        products.c.driver_id != driver_id,
    ).exists()
    return (
        update(vehicles)
        .where(
            vehicles.c.id == vehicle_id,
            or_(vehicles.c.driver_id.is_(None), vehicles.c.driver_id == driver_id),
            driver_is_active,
            ~foreign_cargo,
        )
        .values(driver_id=driver_id, updated_date=params["updated_date"])
    )


@procedure("vehicles.unassign_driver")
def _vehicles_unassign_driver(params: Params):
    vehicle_id = params["vehicle_id"]
    return (
        update(vehicles)
        .where(
            vehicles.c.id == vehicle_id,
            vehicles.c.status != VehicleStatus.ON_TRIP,
            ~_active_cargo(vehicle_id),
        )
        .values(driver_id=None, updated_date=params["updated_date"])
    )


# Products

PRODUCT_FIELDS = ("product_name", "sku", "description", "quantity", "unit_price")


def _product_detail():
    return (
        select(
            products,
            vehicles.c.vehicle_number,
            vehicles.c.model.label("vehicle_model"),
            drivers.c.full_name.label("driver_name"),
            drivers.c.phone_number.label("driver_phone"),
        )
        .select_from(
            products
            .outerjoin(vehicles, products.c.vehicle_id == vehicles.c.id)
            .outerjoin(drivers, products.c.driver_id == drivers.c.id)
        )
        .order_by(products.c.id)
    )


@procedure("products.get_all")
def _products_get_all(params: Params):
    return _product_detail()


@procedure("products.get_by_id")
def _products_get_by_id(params: Params):
    return _product_detail().where(products.c.id == params["product_id"])


@procedure("products.get_by_status")
def _products_get_by_status(params: Params):
    return _product_detail().where(products.c.status == params["status"])


@procedure("products.get_by_vehicle")
def _products_get_by_vehicle(params: Params):
    return _product_detail().where(products.c.vehicle_id == params["vehicle_id"])


@procedure("products.get_by_driver")
def _products_get_by_driver(params: Params):
    return _product_detail().where(products.c.driver_id == params["driver_id"])


@procedure("products.get_unassigned")
def _products_get_unassigned(params: Params):
    return _product_detail().where(
        products.c.status == ProductStatus.UNASSIGNED,
        products.c.vehicle_id.is_(None),
        products.c.driver_id.is_(None),
    )


@procedure("products.create")
def _products_create(params: Params):
    return insert(products).values(
        **_pick(params, *PRODUCT_FIELDS, "created_date", "updated_date"),
        vehicle_id=None,
        driver_id=None,
        status=ProductStatus.UNASSIGNED,
    )


@procedure("products.update")
def _products_update(params: Params):
    return (
        update(products)
        .where(products.c.id == params["product_id"])
        .values(**_pick(params, *PRODUCT_FIELDS, "updated_date"))
    )


@procedure("products.delete")
def _products_delete(params: Params):
    return delete(products).where(products.c.id == params["product_id"])


@procedure("products.assign_to_vehicle")
def _products_assign_to_vehicle(params: Params):
    vehicle_id = params["vehicle_id"]
    driver_id = params["driver_id"]
    vehicle_accepts = select(vehicles.c.id).where(
        vehicles.c.id == vehicle_id,
        vehicles.c.status != VehicleStatus.MAINTENANCE,
        or_(vehicles.c.driver_id.is_(None), vehicles.c.driver_id == driver_id),
    ).exists()
    driver_is_active = select(drivers.c.id).where(
        drivers.c.id == driver_id,
        drivers.c.is_active.is_(True),
    ).exists()
    # Aliased so the subquery does not correlate with the row being updated.
    cargo = products.alias("cargo")
    foreign_cargo = select(cargo.c.id).where(
        cargo.c.vehicle_id == vehicle_id,
        cargo.c.status.in_(ACTIVE_PRODUCT_STATUSES),
        cargo.c.driver_id != driver_id,
    ).exists()
    return (
        update(products)
        .where(
            products.c.id == params["product_id"],
            products.c.status == ProductStatus.UNASSIGNED,
            products.c.vehicle_id.is_(None),
            vehicle_accepts,
            driver_is_active,
            ~foreign_cargo,
        )
        .values(
            vehicle_id=vehicle_id,
            driver_id=driver_id,
            status=ProductStatus.ASSIGNED,
            updated_date=params["updated_date"],
        )
    )


@procedure("products.unassign")
def _products_unassign(params: Params):
    statement = update(products).where(products.c.id == params["product_id"])
    from_statuses = params.get("from_statuses")
    if from_statuses:
        statement = statement.where(products.c.status.in_(list(from_statuses)))
    return statement.values(
        vehicle_id=None,
        driver_id=None,
        status=ProductStatus.UNASSIGNED,
        updated_date=params["updated_date"],
    )


@procedure("products.update_status")
def _products_update_status(params: Params):
    statement = update(products).where(products.c.id == params["product_id"])
    expected = params.get("expected_status")
    if expected is not None:
        statement = statement.where(products.c.status == expected)
    return statement.values(status=ProductStatus(params["status"]), updated_date=params["updated_date"])
