"""
Authentication API endpoints.

Provides register, login, and current-user endpoints.
"""

from fastapi import APIRouter, Depends, status

from logytrack.app.core.dependencies import get_auth_service, get_current_user
from logytrack.app.schemas.auth import UserLogin, UserRegister, UserResponse
from logytrack.app.schemas.common import ApiResponse, envelope
from logytrack.app.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserRegister,
    auth_service: AuthService = Depends(get_auth_service)
):
    """
    Register a new user.

    - name, password and role are required
    - password must be at least 8 characters
    - name must be unique
    """
    user = await auth_service.register(user_data)
    return envelope("User registered successfully", user)


@router.post("/login", response_model=ApiResponse)
async def login(
    credentials: UserLogin,
    auth_service: AuthService = Depends(get_auth_service)
):
    """
    Login user and return a JWT token.

    Unknown names and wrong passwords both return 401 with the same message.
    """
    result = await auth_service.login(credentials)
    return envelope("Login successful", result)


@router.get("/me", response_model=ApiResponse)
async def me(current_user: UserResponse = Depends(get_current_user)):
    return envelope("Current user retrieved successfully", current_user)
