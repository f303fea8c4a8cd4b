"""
Driver database model.
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.sql import func
from logytrack.app.db.session import Base


class Driver(Base):
    """
    Driver model.

    A driver owns zero or more vehicles. Phone and license numbers are
    unique across all drivers.
    """
    __tablename__ = "drivers"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    full_name = Column(String(100), nullable=False)
    phone_number = Column(String(20), unique=True, nullable=False, index=True)
    license_number = Column(String(50), unique=True, nullable=False, index=True)

    is_active = Column(Boolean, default=True, nullable=False, index=True)

    # Timestamps
    created_date = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_date = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Driver(id={self.id}, name='{self.full_name}', active={self.is_active})>"
