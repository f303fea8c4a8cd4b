"""
Authentication Pydantic schemas.

Defines request and response schemas for authentication endpoints.
Request fields are optional so emptiness is reported by the auth service
with its own messages.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional


class UserRegister(BaseModel):
    """
    Schema for user registration.

    Used by POST /auth/register endpoint.
    """
    name: Optional[str] = Field(default=None, description="Unique user name")
    password: Optional[str] = Field(default=None, description="Password (min 8 characters)")
    role: Optional[str] = Field(default=None, description="Role label, e.g. Admin or Customer")


class UserLogin(BaseModel):
    """
    Schema for user login.

    Used by POST /auth/login endpoint.
    """
    name: Optional[str] = Field(default=None, description="User name")
    password: Optional[str] = Field(default=None, description="Password")


class UserInDB(BaseModel):
    """Credential store record, including the password hash."""
    id: int
    name: str
    password_hash: str
    role: str
    created_date: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserResponse(BaseModel):
    """Public view of a user."""
    id: int
    name: str
    role: str


class LoginResponse(BaseModel):
    """
    Schema for a successful login.

    Returned by POST /auth/login.
    """
    id: int
    name: str
    role: str
    token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
