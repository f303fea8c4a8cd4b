"""
FastAPI dependencies.

Wires repositories and services onto the shared procedure backend and
protects write routes with bearer-token authentication.
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from logytrack.app.core.exceptions import AuthenticationError, ResourceNotFoundError
from logytrack.app.db.backend import ProcedureBackend
from logytrack.app.db.session import engine
from logytrack.app.repositories.driver_repository import DriverRepository
from logytrack.app.repositories.product_repository import ProductRepository
from logytrack.app.repositories.user_repository import UserRepository
from logytrack.app.repositories.vehicle_repository import VehicleRepository
from logytrack.app.schemas.auth import UserResponse
from logytrack.app.services.assignment import AssignmentCoordinator
from logytrack.app.services.auth_service import AuthService

backend = ProcedureBackend(engine)

# auto_error=False so a missing header goes through the 401 envelope, not a bare 403.
security = HTTPBearer(auto_error=False)


def get_backend() -> ProcedureBackend:
    return backend


def get_driver_repository(backend: ProcedureBackend = Depends(get_backend)) -> DriverRepository:
    return DriverRepository(backend)


def get_vehicle_repository(backend: ProcedureBackend = Depends(get_backend)) -> VehicleRepository:
    return VehicleRepository(backend)


def get_product_repository(backend: ProcedureBackend = Depends(get_backend)) -> ProductRepository:
    return ProductRepository(backend)


def get_user_repository(backend: ProcedureBackend = Depends(get_backend)) -> UserRepository:
    return UserRepository(backend)


def get_assignment_coordinator(
    drivers: DriverRepository = Depends(get_driver_repository),
    vehicles: VehicleRepository = Depends(get_vehicle_repository),
    products: ProductRepository = Depends(get_product_repository),
) -> AssignmentCoordinator:
    return AssignmentCoordinator(drivers, vehicles, products)


def get_auth_service(users: UserRepository = Depends(get_user_repository)) -> AuthService:
    return AuthService(users)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service),
) -> UserResponse:
    """
    FastAPI dependency for JWT authentication.

    Checks:
    1. A bearer token is present
    2. Signature and expiry are valid
    3. The subject user still exists

    Raises:
        AuthenticationError: 401 if any check fails
    """
    if credentials is None:
        raise AuthenticationError("Not authenticated")

    payload = auth_service.decode_token(credentials.credentials)
    if payload is None:
        raise AuthenticationError("Could not validate credentials")

    user_id = payload.get("user_id")
    if not isinstance(user_id, int) or user_id <= 0:
        raise AuthenticationError("Invalid token payload")

    try:
        user = await auth_service.users.get_by_id(user_id)
    except ResourceNotFoundError:
        raise AuthenticationError("User not found") from None

    return UserResponse(id=user.id, name=user.name, role=user.role)
