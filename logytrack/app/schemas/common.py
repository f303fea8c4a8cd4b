"""
Response envelope shared by every endpoint.
"""

from pydantic import BaseModel
from typing import Any, Optional


class ApiResponse(BaseModel):
    """Uniform success envelope: ``{success, message, data?, count?}``."""
    success: bool = True
    message: str
    data: Optional[Any] = None
    count: Optional[int] = None


def envelope(message: str, data: Any = None, count: Optional[int] = None) -> ApiResponse:
    return ApiResponse(success=True, message=message, data=data, count=count)


def list_envelope(message: str, items: list) -> ApiResponse:
    return ApiResponse(success=True, message=message, data=items, count=len(items))
