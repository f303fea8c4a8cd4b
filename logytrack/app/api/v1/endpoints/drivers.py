"""
Driver API endpoints.

Reads are public; writes require a bearer token.
"""

from fastapi import APIRouter, Depends, status

from logytrack.app.core.dependencies import (
    get_assignment_coordinator,
    get_current_user,
    get_driver_repository,
)
from logytrack.app.repositories.driver_repository import DriverRepository
from logytrack.app.schemas.auth import UserResponse
from logytrack.app.schemas.common import ApiResponse, envelope, list_envelope
from logytrack.app.schemas.driver import DriverCreate, DriverUpdate
from logytrack.app.services.assignment import AssignmentCoordinator

router = APIRouter(prefix="/drivers", tags=["Drivers"])


@router.get("", response_model=ApiResponse)
async def list_drivers(drivers: DriverRepository = Depends(get_driver_repository)):
    return list_envelope("Drivers retrieved successfully", await drivers.get_all())


@router.get("/active", response_model=ApiResponse)
async def list_active_drivers(drivers: DriverRepository = Depends(get_driver_repository)):
    return list_envelope("Active drivers retrieved successfully", await drivers.get_active_drivers())


@router.get("/summary", response_model=ApiResponse)
async def list_driver_summaries(drivers: DriverRepository = Depends(get_driver_repository)):
    """Every driver with the count and numbers of the vehicles they drive."""
    return list_envelope("Driver summaries retrieved successfully", await drivers.get_drivers_with_vehicles())


@router.get("/{driver_id}", response_model=ApiResponse)
async def get_driver(driver_id: int, drivers: DriverRepository = Depends(get_driver_repository)):
    return envelope("Driver retrieved successfully", await drivers.get_by_id(driver_id))


@router.post("", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def create_driver(
    data: DriverCreate,
    drivers: DriverRepository = Depends(get_driver_repository),
    current_user: UserResponse = Depends(get_current_user)
):
    driver_id = await drivers.create(data)
    return envelope("Driver created successfully", await drivers.get_by_id(driver_id))


@router.put("/{driver_id}", response_model=ApiResponse)
async def update_driver(
    driver_id: int,
    data: DriverUpdate,
    coordinator: AssignmentCoordinator = Depends(get_assignment_coordinator),
    current_user: UserResponse = Depends(get_current_user)
):
    """Update a driver. Deactivation is refused while the driver still has vehicles or cargo."""
    driver = await coordinator.update_driver(driver_id, data)
    return envelope("Driver updated successfully", driver)


@router.delete("/{driver_id}", response_model=ApiResponse)
async def delete_driver(
    driver_id: int,
    coordinator: AssignmentCoordinator = Depends(get_assignment_coordinator),
    current_user: UserResponse = Depends(get_current_user)
):
    await coordinator.delete_driver(driver_id)
    return envelope("Driver deleted successfully")
