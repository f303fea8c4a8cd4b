"""
Integration tests for the authentication flow.

Verifies Register -> Login -> Me and the credential rules.
"""

from datetime import timedelta

import pytest

from logytrack.app.core.exceptions import AuthenticationError, ConflictError, ValidationError
from logytrack.app.core.jwt import create_access_token
from logytrack.app.schemas.auth import UserLogin, UserRegister


# Service

@pytest.mark.asyncio
async def test_hash_is_salted_and_verifies(auth_service):
    first = auth_service.hash_password("password123")
    second = auth_service.hash_password("password123")
    assert first != second
    assert auth_service.verify_password("password123", first)
    assert auth_service.verify_password("password123", second)
    assert not auth_service.verify_password("password124", first)


@pytest.mark.asyncio
async def test_verify_password_rejects_malformed_hash(auth_service):
    assert not auth_service.verify_password("password123", "not-a-bcrypt-hash")


@pytest.mark.asyncio
async def test_register_and_login(auth_service):
    user = await auth_service.register(UserRegister(name=" alice ", password="password123", role="Admin"))
    assert user.name == "alice"
    assert user.role == "Admin"

    result = await auth_service.login(UserLogin(name="alice", password="password123"))
    assert result.id == user.id
    assert result.token_type == "bearer"

    claims = auth_service.decode_token(result.token)
    assert claims["sub"] == str(user.id)
    assert claims["user_id"] == user.id
    assert claims["name"] == "alice"
    assert claims["role"] == "Admin"
    assert claims["exp"] - claims["iat"] == 24 * 60 * 60


@pytest.mark.asyncio
@pytest.mark.parametrize("fields", [
    {"name": "", "password": "password123", "role": "Admin"},
    {"name": "alice", "password": None, "role": "Admin"},
    {"name": "alice", "password": "password123", "role": "  "},
])
async def test_register_requires_all_fields(auth_service, fields):
    with pytest.raises(ValidationError) as exc_info:
        await auth_service.register(UserRegister(**fields))
    assert exc_info.value.message == "All fields required"


@pytest.mark.asyncio
@pytest.mark.parametrize("fields, message", [
    ({"name": "n" * 101, "password": "password123", "role": "Admin"}, "Name must be at most 100 characters"),
    ({"name": "alice", "password": "password123", "role": "r" * 51}, "Role must be at most 50 characters"),
])
async def test_register_rejects_over_long_name_and_role(auth_service, users, fields, message):
    with pytest.raises(ValidationError) as exc_info:
        await auth_service.register(UserRegister(**fields))
    assert exc_info.value.message == message
    assert await users.get_all() == []


@pytest.mark.asyncio
async def test_register_rejects_short_password(auth_service):
    with pytest.raises(ValidationError) as exc_info:
        await auth_service.register(UserRegister(name="alice", password="short", role="Admin"))
    assert "at least 8" in exc_info.value.message


@pytest.mark.asyncio
async def test_register_rejects_password_over_bcrypt_limit(auth_service):
    with pytest.raises(ValidationError):
        await auth_service.register(UserRegister(name="alice", password="x" * 73, role="Admin"))


@pytest.mark.asyncio
async def test_register_twice_is_conflict(auth_service):
    await auth_service.register(UserRegister(name="alice", password="password123", role="Admin"))
    with pytest.raises(ConflictError):
        await auth_service.register(UserRegister(name="alice", password="password456", role="Customer"))


@pytest.mark.asyncio
async def test_login_failures_are_indistinguishable(auth_service):
    await auth_service.register(UserRegister(name="alice", password="password123", role="Admin"))

    with pytest.raises(AuthenticationError) as wrong_password:
        await auth_service.login(UserLogin(name="alice", password="password999"))
    with pytest.raises(AuthenticationError) as unknown_user:
        await auth_service.login(UserLogin(name="mallory", password="password123"))

    assert wrong_password.value.message == unknown_user.value.message == "Invalid credentials"


@pytest.mark.asyncio
async def test_login_requires_name_and_password(auth_service):
    with pytest.raises(ValidationError):
        await auth_service.login(UserLogin(name="alice", password=""))


@pytest.mark.asyncio
async def test_decode_rejects_tampered_and_expired_tokens(auth_service):
    assert auth_service.decode_token("not.a.token") is None

    expired = create_access_token({"sub": "1", "user_id": 1}, expires_delta=timedelta(seconds=-1))
    assert auth_service.decode_token(expired) is None


# HTTP

@pytest.mark.asyncio
async def test_register_login_me_flow(client):
    response = await client.post("/v1/auth/register", json={
        "name": "dispatcher", "password": "password123", "role": "Admin"
    })
    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["data"] == {"id": 1, "name": "dispatcher", "role": "Admin"}

    response = await client.post("/v1/auth/login", json={"name": "dispatcher", "password": "password123"})
    assert response.status_code == 200
    token = response.json()["data"]["token"]

    response = await client.get("/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
    assert response.json()["data"]["name"] == "dispatcher"


@pytest.mark.asyncio
async def test_duplicate_registration_returns_409(client):
    payload = {"name": "dispatcher", "password": "password123", "role": "Admin"}
    await client.post("/v1/auth/register", json=payload)
    response = await client.post("/v1/auth/register", json=payload)

    assert response.status_code == 409
    assert response.json() == {
        "success": False,
        "message": "Username already exists",
        "error_code": "ERR_CONFLICT",
    }


@pytest.mark.asyncio
async def test_bad_credentials_return_401(client):
    await client.post("/v1/auth/register", json={"name": "dispatcher", "password": "password123", "role": "Admin"})
    response = await client.post("/v1/auth/login", json={"name": "dispatcher", "password": "wrong-password"})

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid credentials"
    assert response.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_me_requires_token(client):
    response = await client.get("/v1/auth/me")
    assert response.status_code == 401
    assert response.json()["success"] is False

    response = await client.get("/v1/auth/me", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_token_for_deleted_user_is_rejected(client, users):
    await client.post("/v1/auth/register", json={"name": "dispatcher", "password": "password123", "role": "Admin"})
    response = await client.post("/v1/auth/login", json={"name": "dispatcher", "password": "password123"})
    token = response.json()["data"]["token"]

    await users.delete(1)
    response = await client.get("/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
