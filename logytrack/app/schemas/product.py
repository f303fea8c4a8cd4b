"""
Product Pydantic schemas.
"""

from pydantic import BaseModel
from datetime import datetime
from typing import Optional
from logytrack.app.models.enums import ProductStatus


class ProductCreate(BaseModel):
    """
    Schema for creating a product.

    ``vehicle_id``, ``driver_id`` and ``status`` are ignored on create;
    products always start Unassigned.
    """
    product_name: Optional[str] = None
    sku: Optional[str] = None
    description: Optional[str] = None
    quantity: Optional[int] = None
    unit_price: Optional[float] = None
    vehicle_id: Optional[int] = None
    driver_id: Optional[int] = None
    status: Optional[str] = None


class ProductUpdate(BaseModel):
    """Schema for replacing a product's descriptive fields."""
    product_name: Optional[str] = None
    sku: Optional[str] = None
    description: Optional[str] = None
    quantity: Optional[int] = None
    unit_price: Optional[float] = None


class ProductAssignment(BaseModel):
    """Schema for assigning a product to a vehicle and its driver."""
    vehicle_id: Optional[int] = None
    driver_id: Optional[int] = None


class ProductStatusUpdate(BaseModel):
    status: Optional[str] = None


class ProductResponse(BaseModel):
    """Product record joined with its vehicle and driver labels."""
    id: int
    product_name: str
    sku: str
    description: str = ""
    quantity: int
    unit_price: float
    vehicle_id: Optional[int] = None
    driver_id: Optional[int] = None
    status: ProductStatus
    created_date: datetime
    updated_date: datetime

    vehicle_number: Optional[str] = None
    vehicle_model: Optional[str] = None
    driver_name: Optional[str] = None
    driver_phone: Optional[str] = None

    class Config:
        from_attributes = True


class AssignmentResponse(BaseModel):
    """Outcome of an assignment or status change."""
    product_id: int
    status: ProductStatus
    vehicle_id: Optional[int] = None
    driver_id: Optional[int] = None
