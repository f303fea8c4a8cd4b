"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from logytrack.app.api.v1.endpoints import auth, drivers, vehicles, products

router = APIRouter()

# Authentication endpoints
router.include_router(auth.router)

# Entity endpoints
router.include_router(drivers.router)
router.include_router(vehicles.router)
router.include_router(products.router)
