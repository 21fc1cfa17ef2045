"""
Authentication Endpoints
Registration, login, token refresh and logout
"""

from typing import Any

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from pathway_tracker.core.database import get_db
from pathway_tracker.core.deps import get_current_user
from pathway_tracker.models.user import User
from pathway_tracker.schemas.auth import (
    AuthResponse,
    LoginRequest,
    RefreshTokenRequest,
    RegisterRequest,
    TokenResponse,
    UserProfile,
)
from pathway_tracker.schemas.base import Acknowledgement
from pathway_tracker.services.auth import auth_service

logger = structlog.get_logger()
router = APIRouter()


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(data: RegisterRequest, db: AsyncSession = Depends(get_db)) -> Any:
    """Create an account and sign it in"""
    return await auth_service.register(db, data)


@router.post("/login", response_model=AuthResponse)
async def login(data: LoginRequest, db: AsyncSession = Depends(get_db)) -> Any:
    return await auth_service.login(db, data)


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(data: RefreshTokenRequest, db: AsyncSession = Depends(get_db)) -> Any:
    """Rotate the token pair; each refresh token is accepted once"""
    return await auth_service.refresh(db, data.refresh_token)


@router.post("/logout", response_model=Acknowledgement)
async def logout(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
) -> Any:
    await auth_service.logout(db, current_user)
    return Acknowledgement(message="Logged out successfully")


@router.get("/me", response_model=UserProfile)
async def read_me(current_user: User = Depends(get_current_user)) -> Any:
    return auth_service.to_profile(current_user)
