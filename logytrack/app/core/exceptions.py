"""
Custom exceptions and error handlers for consistent error responses.

Every failure leaves the API as the standard envelope
``{"success": false, "message": ..., "error_code": ...}``.
"""

import logging
from typing import Any

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, error_code: str, status_code: int = 500):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(message)


class ValidationError(AppException):
    """Raised when input is missing or malformed."""

    def __init__(self, message: str, error_code: str = "ERR_VALIDATION"):
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=status.HTTP_400_BAD_REQUEST
        )


class InvalidArgumentError(ValidationError):
    """Raised for out-of-range arguments such as non-positive ids."""

    def __init__(self, message: str):
        super().__init__(message=message, error_code="ERR_INVALID_ARGUMENT")


class InvalidTransitionError(ValidationError):
    """Raised when a status change is not allowed from the current state."""

    def __init__(self, message: str):
        super().__init__(message=message, error_code="ERR_INVALID_TRANSITION")


class ResourceNotFoundError(AppException):
    """Raised when requested resource is not found."""

    def __init__(self, resource: str, resource_id: Any = None):
        message = f"{resource} not found"
        if resource_id:
            message = f"{resource} with ID {resource_id} not found"
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(
            message=message,
            error_code="ERR_NOT_FOUND",
            status_code=status.HTTP_404_NOT_FOUND
        )


class ConflictError(AppException):
    """Raised on uniqueness violations and lost concurrent updates."""

    def __init__(self, message: str = "Resource already exists"):
        super().__init__(
            message=message,
            error_code="ERR_CONFLICT",
            status_code=status.HTTP_409_CONFLICT
        )


class AuthenticationError(AppException):
    """Raised for authentication failures."""

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(
            message=message,
            error_code="ERR_UNAUTHORIZED",
            status_code=status.HTTP_401_UNAUTHORIZED
        )


class BackendError(AppException):
    """Raised when the persistence backend fails."""

    def __init__(self, message: str = "A persistence error occurred"):
        super().__init__(
            message=message,
            error_code="ERR_BACKEND",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )


def error_body(message: str, error_code: str) -> dict:
    return {"success": False, "message": message, "error_code": error_code}


# Global Exception Handlers

async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handler for custom application exceptions."""
    headers = None
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.message, exc.error_code),
        headers=headers,
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handler for FastAPI HTTPException with standardized format."""
    # Map status code to error code
    error_code_map = {
        400: "ERR_VALIDATION",
        401: "ERR_UNAUTHORIZED",
        403: "ERR_FORBIDDEN",
        404: "ERR_NOT_FOUND",
        405: "ERR_METHOD_NOT_ALLOWED",
        409: "ERR_CONFLICT",
        500: "ERR_INTERNAL_SERVER"
    }

    error_code = error_code_map.get(exc.status_code, "ERR_UNKNOWN")

    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail), error_code),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handler for request binding errors; reported as plain validation failures."""
    errors = exc.errors()
    message = "Validation error"
    if errors:
        location = ".".join(str(part) for part in errors[0].get("loc", ()) if part != "body")
        message = f"Validation error: {location} {errors[0].get('msg', '')}".strip()
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(message, "ERR_VALIDATION"),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handler for unhandled exceptions."""
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("An internal server error occurred", "ERR_INTERNAL_SERVER"),
    )
