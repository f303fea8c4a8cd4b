"""
Product API endpoints.

Assignment, unassignment and status changes are delegated to the
assignment coordinator; plain CRUD goes straight to the repository.
"""

from fastapi import APIRouter, Depends, status

from logytrack.app.core.dependencies import (
    get_assignment_coordinator,
    get_current_user,
    get_product_repository,
)
from logytrack.app.repositories.product_repository import ProductRepository
from logytrack.app.schemas.auth import UserResponse
from logytrack.app.schemas.common import ApiResponse, envelope, list_envelope
from logytrack.app.schemas.product import (
    AssignmentResponse,
    ProductAssignment,
    ProductCreate,
    ProductResponse,
    ProductStatusUpdate,
    ProductUpdate,
)
from logytrack.app.services.assignment import AssignmentCoordinator

router = APIRouter(prefix="/products", tags=["Products"])


def _assignment(product: ProductResponse) -> AssignmentResponse:
    return AssignmentResponse(
        product_id=product.id,
        status=product.status,
        vehicle_id=product.vehicle_id,
        driver_id=product.driver_id,
    )


@router.get("", response_model=ApiResponse)
async def list_products(products: ProductRepository = Depends(get_product_repository)):
    return list_envelope("Products retrieved successfully", await products.get_all())


@router.get("/unassigned", response_model=ApiResponse)
async def list_unassigned_products(products: ProductRepository = Depends(get_product_repository)):
    return list_envelope("Unassigned products retrieved successfully", await products.get_unassigned())


@router.get("/status/{product_status}", response_model=ApiResponse)
async def list_products_by_status(
    product_status: str,
    products: ProductRepository = Depends(get_product_repository)
):
    return list_envelope("Products retrieved successfully", await products.get_by_status(product_status))


@router.get("/vehicle/{vehicle_id}", response_model=ApiResponse)
async def list_products_by_vehicle(vehicle_id: int, products: ProductRepository = Depends(get_product_repository)):
    return list_envelope("Products retrieved successfully", await products.get_by_vehicle(vehicle_id))


@router.get("/driver/{driver_id}", response_model=ApiResponse)
async def list_products_by_driver(driver_id: int, products: ProductRepository = Depends(get_product_repository)):
    return list_envelope("Products retrieved successfully", await products.get_by_driver(driver_id))


@router.get("/{product_id}", response_model=ApiResponse)
async def get_product(product_id: int, products: ProductRepository = Depends(get_product_repository)):
    return envelope("Product retrieved successfully", await products.get_by_id(product_id))


@router.post("", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    data: ProductCreate,
    products: ProductRepository = Depends(get_product_repository),
    current_user: UserResponse = Depends(get_current_user)
):
    """Create a product. New products always start Unassigned with no vehicle or driver."""
    product_id = await products.create(data)
    return envelope("Product created successfully", await products.get_by_id(product_id))


@router.put("/{product_id}", response_model=ApiResponse)
async def update_product(
    product_id: int,
    data: ProductUpdate,
    products: ProductRepository = Depends(get_product_repository),
    current_user: UserResponse = Depends(get_current_user)
):
    await products.update(product_id, data)
    return envelope("Product updated successfully", await products.get_by_id(product_id))


@router.delete("/{product_id}", response_model=ApiResponse)
async def delete_product(
    product_id: int,
    products: ProductRepository = Depends(get_product_repository),
    current_user: UserResponse = Depends(get_current_user)
):
    await products.delete(product_id)
    return envelope("Product deleted successfully")


@router.post("/{product_id}/assign", response_model=ApiResponse)
async def assign_product(
    product_id: int,
    data: ProductAssignment,
    coordinator: AssignmentCoordinator = Depends(get_assignment_coordinator),
    current_user: UserResponse = Depends(get_current_user)
):
    """
    Assign a product to a vehicle and driver.

    If the vehicle already has a driver, ``driver_id`` must be that driver.
    """
    product = await coordinator.assign_product(product_id, data.vehicle_id, data.driver_id)
    return envelope("Product assigned successfully", _assignment(product))


@router.post("/{product_id}/unassign", response_model=ApiResponse)
async def unassign_product(
    product_id: int,
    coordinator: AssignmentCoordinator = Depends(get_assignment_coordinator),
    current_user: UserResponse = Depends(get_current_user)
):
    product = await coordinator.unassign_product(product_id)
    return envelope("Product unassigned successfully", _assignment(product))


@router.patch("/{product_id}/status", response_model=ApiResponse)
async def update_product_status(
    product_id: int,
    data: ProductStatusUpdate,
    coordinator: AssignmentCoordinator = Depends(get_assignment_coordinator),
    current_user: UserResponse = Depends(get_current_user)
):
    product = await coordinator.update_product_status(product_id, data.status)
    return envelope("Product status updated successfully", _assignment(product))
