"""
Product database model.
"""

from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, Enum
from sqlalchemy.sql import func
from logytrack.app.db.session import Base
from logytrack.app.models.enums import ProductStatus, enum_values


class Product(Base):
    """
    Product model.

    vehicle_id and driver_id are either both NULL (status Unassigned) or
    both set; only the assignment coordinator changes them.
    """
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    product_name = Column(String(200), nullable=False)
    sku = Column(String(100), nullable=False, index=True)
    description = Column(String(500), nullable=False, default="")
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Float, nullable=False)

    # Assignment
    vehicle_id = Column(Integer, ForeignKey("vehicles.id"), nullable=True, index=True)
    driver_id = Column(Integer, ForeignKey("drivers.id"), nullable=True, index=True)

    status = Column(
        Enum(ProductStatus, name="product_status", values_callable=enum_values),
        default=ProductStatus.UNASSIGNED,
        nullable=False,
        index=True,
    )

    # Timestamps
    created_date = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_date = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Product(id={self.id}, sku='{self.sku}', status='{self.status.value}')>"
