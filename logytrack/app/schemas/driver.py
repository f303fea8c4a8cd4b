"""
Driver Pydantic schemas.
"""

from pydantic import BaseModel
from datetime import datetime
from typing import Optional, List


class DriverCreate(BaseModel):
    """Schema for creating a driver. Field rules are enforced by the repository."""
    full_name: Optional[str] = None
    phone_number: Optional[str] = None
    license_number: Optional[str] = None
    is_active: bool = True


class DriverUpdate(DriverCreate):
    """Schema for replacing a driver's editable fields. Omitting ``is_active`` keeps the current value."""
    is_active: Optional[bool] = None


class DriverResponse(BaseModel):
    """Driver record."""
    id: int
    full_name: str
    phone_number: str
    license_number: str
    is_active: bool
    created_date: datetime
    updated_date: datetime

    class Config:
        from_attributes = True


class DriverSummary(BaseModel):
    """Read-only projection of a driver with the vehicles they own."""
    id: int
    full_name: str
    phone_number: str
    license_number: str
    is_active: bool
    vehicle_count: int = 0
    vehicle_numbers: List[str] = []
