"""
User database model.

This module defines the User SQLAlchemy model backing the credential store.
"""

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from logytrack.app.db.session import Base


class User(Base):
    """
    User model for authentication.

    Role is a free-form label such as "Admin" or "Customer".
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(50), nullable=False)

    created_date = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<User(id={self.id}, name='{self.name}', role='{self.role}')>"
