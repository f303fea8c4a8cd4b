"""
Vehicle Pydantic schemas.
"""

from pydantic import BaseModel
from datetime import datetime
from typing import Optional
from logytrack.app.models.enums import VehicleStatus


class VehicleCreate(BaseModel):
    """
    Schema for creating a vehicle.

    ``status`` and ``driver_id`` are accepted for compatibility but ignored:
    new vehicles always start Available and unassigned.
    """
    vehicle_number: Optional[str] = None
    model: Optional[str] = None
    capacity_kg: Optional[float] = None
    status: Optional[str] = None
    driver_id: Optional[int] = None


class VehicleUpdate(BaseModel):
    """Schema for replacing a vehicle's descriptive fields."""
    vehicle_number: Optional[str] = None
    model: Optional[str] = None
    capacity_kg: Optional[float] = None


class VehicleStatusUpdate(BaseModel):
    status: Optional[str] = None


class VehicleResponse(BaseModel):
    """Vehicle record."""
    id: int
    vehicle_number: str
    model: str
    capacity_kg: float
    driver_id: Optional[int] = None
    status: VehicleStatus
    created_date: datetime
    updated_date: datetime

    class Config:
        from_attributes = True


class VehicleWithDriver(VehicleResponse):
    """Vehicle joined with its driver's contact details."""
    driver_name: Optional[str] = None
    driver_phone: Optional[str] = None


class VehicleStateResponse(BaseModel):
    """Outcome of a vehicle driver or status change."""
    vehicle_id: int
    status: VehicleStatus
    driver_id: Optional[int] = None
