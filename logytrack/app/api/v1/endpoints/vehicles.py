"""
Vehicle API endpoints.

Driver assignment and status changes go through the assignment
coordinator so vehicle, driver and cargo stay consistent.
"""

from fastapi import APIRouter, Depends, status

from logytrack.app.core.dependencies import (
    get_assignment_coordinator,
    get_current_user,
    get_vehicle_repository,
)
from logytrack.app.repositories.vehicle_repository import VehicleRepository
from logytrack.app.schemas.auth import UserResponse
from logytrack.app.schemas.common import ApiResponse, envelope, list_envelope
from logytrack.app.schemas.vehicle import (
    VehicleCreate,
    VehicleResponse,
    VehicleStateResponse,
    VehicleStatusUpdate,
    VehicleUpdate,
)
from logytrack.app.services.assignment import AssignmentCoordinator

router = APIRouter(prefix="/vehicles", tags=["Vehicles"])


def _state(vehicle: VehicleResponse) -> VehicleStateResponse:
    return VehicleStateResponse(vehicle_id=vehicle.id, status=vehicle.status, driver_id=vehicle.driver_id)


@router.get("", response_model=ApiResponse)
async def list_vehicles(vehicles: VehicleRepository = Depends(get_vehicle_repository)):
    return list_envelope("Vehicles retrieved successfully", await vehicles.get_all())


@router.get("/with-drivers", response_model=ApiResponse)
async def list_vehicles_with_drivers(vehicles: VehicleRepository = Depends(get_vehicle_repository)):
    return list_envelope("Vehicles retrieved successfully", await vehicles.get_vehicles_with_driver())


@router.get("/status/{vehicle_status}", response_model=ApiResponse)
async def list_vehicles_by_status(
    vehicle_status: str,
    vehicles: VehicleRepository = Depends(get_vehicle_repository)
):
    return list_envelope("Vehicles retrieved successfully", await vehicles.get_by_status(vehicle_status))


@router.get("/{vehicle_id}", response_model=ApiResponse)
async def get_vehicle(vehicle_id: int, vehicles: VehicleRepository = Depends(get_vehicle_repository)):
    return envelope("Vehicle retrieved successfully", await vehicles.get_by_id(vehicle_id))


@router.post("", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def create_vehicle(
    data: VehicleCreate,
    vehicles: VehicleRepository = Depends(get_vehicle_repository),
    current_user: UserResponse = Depends(get_current_user)
):
    """Create a vehicle. New vehicles always start Available and without a driver."""
    vehicle_id = await vehicles.create(data)
    return envelope("Vehicle created successfully", await vehicles.get_by_id(vehicle_id))


@router.put("/{vehicle_id}", response_model=ApiResponse)
async def update_vehicle(
    vehicle_id: int,
    data: VehicleUpdate,
    vehicles: VehicleRepository = Depends(get_vehicle_repository),
    current_user: UserResponse = Depends(get_current_user)
):
    await vehicles.update(vehicle_id, data)
    return envelope("Vehicle updated successfully", await vehicles.get_by_id(vehicle_id))


@router.delete("/{vehicle_id}", response_model=ApiResponse)
async def delete_vehicle(
    vehicle_id: int,
    coordinator: AssignmentCoordinator = Depends(get_assignment_coordinator),
    current_user: UserResponse = Depends(get_current_user)
):
    await coordinator.delete_vehicle(vehicle_id)
    return envelope("Vehicle deleted successfully")


@router.put("/{vehicle_id}/assign-driver/{driver_id}", response_model=ApiResponse)
async def assign_driver(
    vehicle_id: int,
    driver_id: int,
    coordinator: AssignmentCoordinator = Depends(get_assignment_coordinator),
    current_user: UserResponse = Depends(get_current_user)
):
    vehicle = await coordinator.assign_driver(vehicle_id, driver_id)
    return envelope("Driver assigned successfully", _state(vehicle))


@router.put("/{vehicle_id}/unassign-driver", response_model=ApiResponse)
async def unassign_driver(
    vehicle_id: int,
    coordinator: AssignmentCoordinator = Depends(get_assignment_coordinator),
    current_user: UserResponse = Depends(get_current_user)
):
    vehicle = await coordinator.unassign_driver(vehicle_id)
    return envelope("Driver unassigned successfully", _state(vehicle))


@router.put("/{vehicle_id}/status", response_model=ApiResponse)
async def update_vehicle_status(
    vehicle_id: int,
    data: VehicleStatusUpdate,
    coordinator: AssignmentCoordinator = Depends(get_assignment_coordinator),
    current_user: UserResponse = Depends(get_current_user)
):
    vehicle = await coordinator.update_vehicle_status(vehicle_id, data.status)
    return envelope("Vehicle status updated successfully", _state(vehicle))
