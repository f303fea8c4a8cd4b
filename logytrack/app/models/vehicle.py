"""
Vehicle database model.
"""

from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, Enum
from sqlalchemy.sql import func
from logytrack.app.db.session import Base
from logytrack.app.models.enums import VehicleStatus, enum_values


class Vehicle(Base):
    """
    Vehicle model.

    A vehicle may be unassigned (driver_id NULL). Status is drawn from
    VehicleStatus only.
    """
    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    vehicle_number = Column(String(50), unique=True, nullable=False, index=True)
    model = Column(String(100), nullable=False)
    capacity_kg = Column(Float, nullable=False)

    # Optional owner
    driver_id = Column(Integer, ForeignKey("drivers.id"), nullable=True, index=True)

    status = Column(
        Enum(VehicleStatus, name="vehicle_status", values_callable=enum_values),
        default=VehicleStatus.AVAILABLE,
        nullable=False,
        index=True,
    )

    # Timestamps
    created_date = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_date = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Vehicle(id={self.id}, number='{self.vehicle_number}', driver_id={self.driver_id})>"
