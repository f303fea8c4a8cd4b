"""
Centralized Test Configuration.
"""

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import Pool, StaticPool

from logytrack.app.main import app
from logytrack.app.core.config import settings
from logytrack.app.core.dependencies import get_backend
from logytrack.app.db.backend import ProcedureBackend
from logytrack.app.db.session import Base
from logytrack.app.repositories.driver_repository import DriverRepository
from logytrack.app.repositories.product_repository import ProductRepository
from logytrack.app.repositories.user_repository import UserRepository
from logytrack.app.repositories.vehicle_repository import VehicleRepository
from logytrack.app.schemas.driver import DriverCreate
from logytrack.app.schemas.product import ProductCreate
from logytrack.app.schemas.vehicle import VehicleCreate
from logytrack.app.services.assignment import AssignmentCoordinator
from logytrack.app.services.auth_service import AuthService

# Cheap hashes keep the suite fast; verification reads the cost from the hash.
settings.bcrypt_rounds = 4

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@event.listens_for(Pool, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable foreign key constraints for SQLite."""
    if 'sqlite' in str(type(dbapi_conn)).lower():
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


engine = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

test_backend = ProcedureBackend(engine)


@pytest.fixture(scope="session", autouse=True)
def apply_overrides():
    """Route every request through the in-memory backend."""
    app.dependency_overrides[get_backend] = lambda: test_backend
    yield
    app.dependency_overrides = {}


@pytest.fixture(autouse=True)
async def setup_database():
    """Create tables before each test function and drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client():
    """Async client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def db_engine():
    return engine


@pytest.fixture
def backend():
    return test_backend


@pytest.fixture
def drivers(backend):
    return DriverRepository(backend)


@pytest.fixture
def vehicles(backend):
    return VehicleRepository(backend)


@pytest.fixture
def products(backend):
    return ProductRepository(backend)


@pytest.fixture
def users(backend):
    return UserRepository(backend)


@pytest.fixture
def coordinator(drivers, vehicles, products):
    return AssignmentCoordinator(drivers, vehicles, products)


@pytest.fixture
def auth_service(users):
    return AuthService(users)


@pytest.fixture
async def auth_headers(client):
    """Register and log in a dispatcher; return a bearer header."""
    payload = {"name": "dispatcher", "password": "password123", "role": "Admin"}
    response = await client.post("/v1/auth/register", json=payload)
    assert response.status_code == 201

    response = await client.post("/v1/auth/login", json={"name": "dispatcher", "password": "password123"})
    assert response.status_code == 200
    token = response.json()["data"]["token"]
    return {"Authorization": f"Bearer {token}"}


# Fixture data

@pytest.fixture
async def alice(drivers):
    driver_id = await drivers.create(DriverCreate(
        full_name="Alice", phone_number="555-0100", license_number="LIC1"
    ))
    return await drivers.get_by_id(driver_id)


@pytest.fixture
async def bob(drivers):
    driver_id = await drivers.create(DriverCreate(
        full_name="Bob Stone", phone_number="555-0200", license_number="LIC2"
    ))
    return await drivers.get_by_id(driver_id)


@pytest.fixture
async def truck(vehicles):
    vehicle_id = await vehicles.create(VehicleCreate(vehicle_number="V-100", model="Box", capacity_kg=500))
    return await vehicles.get_by_id(vehicle_id)


@pytest.fixture
async def widget(products):
    product_id = await products.create(ProductCreate(
        product_name="Widget", sku="wid1", quantity=10, unit_price=5.0
    ))
    return await products.get_by_id(product_id)
