"""
Status enumerations for vehicles and products.

Values are persisted verbatim, so they double as the public vocabulary.
"""

import enum


class VehicleStatus(str, enum.Enum):
    """
    Vehicle status enumeration.

    Statuses:
        AVAILABLE: Idle and ready for loading
        ON_TRIP: Out on delivery (requires an assigned driver)
        MAINTENANCE: Out of service; no new products may be loaded
    """
    AVAILABLE = "Available"
    ON_TRIP = "OnTrip"
    MAINTENANCE = "Maintenance"


class ProductStatus(str, enum.Enum):
    """
    Product status enumeration.

    Status flow:
        UNASSIGNED → ASSIGNED → IN_TRANSIT → DELIVERED | RETURNED
        ASSIGNED, IN_TRANSIT and RETURNED go back to UNASSIGNED via unassign.
    """
    UNASSIGNED = "Unassigned"
    ASSIGNED = "Assigned"
    IN_TRANSIT = "InTransit"
    DELIVERED = "Delivered"
    RETURNED = "Returned"


# Products in these states are physically bound to their vehicle and driver.
ACTIVE_PRODUCT_STATUSES = (ProductStatus.ASSIGNED, ProductStatus.IN_TRANSIT)


def enum_values(enum_cls):
    """Persist enum values ("OnTrip") rather than member names ("ON_TRIP")."""
    return [member.value for member in enum_cls]
