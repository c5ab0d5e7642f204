from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.database import get_async_session
from src.core.exceptions import InvalidCredentials
from src.schemas.auth import (
    UserCreate,
    UserLogin,
    UserResponse,
    LoginResponse,
    RegisterResponse,
    TokenResponse,
    RefreshTokenRequest,
    MessageResponse,
)
from src.services.security_service import SecurityService
from src.services.token_service import TokenService
from src.api.dependencies.auth import get_bearer_token, get_current_user
from src.models.user import User
from src.logs import debug_logger

router = APIRouter(tags=["auth"])


def client_info(request: Request) -> dict:
    """IP address and user agent stored alongside an issued token"""
    return {
        "client_ip": request.client.host if request.client else None,
        "user_agent": request.headers.get("user-agent"),
    }


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserCreate,
    request: Request,
    db: AsyncSession = Depends(get_async_session)
):
    """
    Register a new user and sign them in
    """
    user = await SecurityService.register_user(
        db,
        name=user_data.name,
        email=user_data.email,
        password=user_data.password,
    )
    debug_logger.debug(f"Registered user {user.id}")

    tokens = await TokenService.issue(db, user, **client_info(request))

    return {
        "user": user,
        "access_token": tokens["access_token"],
        "refresh_token": tokens["refresh_token"],
    }


@router.post("/login", response_model=LoginResponse)
async def login(
    credentials: UserLogin,
    request: Request,
    db: AsyncSession = Depends(get_async_session)
):
    """
    Exchange email and password for an access/refresh token pair
    """
    user = await SecurityService.authenticate_user(db, credentials.email, credentials.password)
    if not user:
        raise InvalidCredentials()

    tokens = await TokenService.issue(db, user, **client_info(request))

    return {"user": user, **tokens}


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(
    refresh_data: RefreshTokenRequest,
    request: Request,
    db: AsyncSession = Depends(get_async_session)
):
    """
    Trade a refresh token for a new access token (and a rotated refresh token)
    """
    return await TokenService.refresh(db, refresh_data.refresh_token, **client_info(request))


@router.post("/logout", response_model=MessageResponse)
async def logout(
    token: str = Depends(get_bearer_token),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session)
):
    """
    Revoke the access token used for this request
    """
    await TokenService.revoke(db, token)
    debug_logger.debug(f"User {current_user.id} logged out")
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: User = Depends(get_current_user)
):
    """
    Get current user information
    """
    return current_user
