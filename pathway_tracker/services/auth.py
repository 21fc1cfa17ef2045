"""
Authentication Service
Registration, login and refresh-token rotation.
"""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID

import structlog
from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from pathway_tracker.core.security import (
    create_token_pair,
    decode_refresh_token,
    get_password_hash,
    hash_token,
    verify_password,
)
from pathway_tracker.models.user import User
from pathway_tracker.repositories.user import user_repository
from pathway_tracker.schemas.auth import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    UserProfile,
)

logger = structlog.get_logger()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


class AuthService:
    def to_profile(self, user: User) -> UserProfile:
        return UserProfile(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            full_name=user.full_name,
            phone=user.phone,
            role=user.role,
            is_active=user.is_active,
            avatar_url=user.avatar_url,
            created_at=user.created_at,
            last_login_at=user.last_login_at,
        )

    async def _issue_tokens(self, db: AsyncSession, user: User) -> TokenResponse:
        pair = create_token_pair(str(user.id), user.email, user.role)
        user.refresh_token_hash = hash_token(pair.refresh_token)
        await db.commit()
        await db.refresh(user)
        return TokenResponse(
            access_token=pair.access_token,
            refresh_token=pair.refresh_token,
            expires_in=pair.expires_in,
        )

    async def register(self, db: AsyncSession, data: RegisterRequest) -> AuthResponse:
        existing = await user_repository.get_by_email(db, data.email, include_deleted=True)
        if existing:
            logger.warning("Registration with existing email", email=data.email)
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")

        user = User(
            email=data.email,
            hashed_password=get_password_hash(data.password),
            first_name=data.first_name,
            last_name=data.last_name,
            phone=data.phone,
            role=data.role,
            is_active=True,
        )
        db.add(user)
        await db.flush()

        tokens = await self._issue_tokens(db, user)
        logger.info("User registered", user_id=str(user.id), role=user.role)
        return AuthResponse(user=self.to_profile(user), tokens=tokens, message="Registration successful")

    async def login(self, db: AsyncSession, data: LoginRequest) -> AuthResponse:
        user = await user_repository.get_by_email(db, data.email)
        if not user or not verify_password(data.password, user.hashed_password):
            logger.warning("Failed login attempt", email=data.email)
            raise _unauthorized("Invalid email or password")

        if not user.is_active:
            logger.warning("Login attempt on inactive account", user_id=str(user.id))
            raise _unauthorized("Account is inactive")

        user.last_login_at = datetime.now(timezone.utc)
        tokens = await self._issue_tokens(db, user)
        logger.info("User logged in", user_id=str(user.id))
        return AuthResponse(user=self.to_profile(user), tokens=tokens, message="Login successful")

    async def refresh(self, db: AsyncSession, refresh_token: str) -> TokenResponse:
        """
        Exchange a refresh token for a new token pair

        The token must verify and match the hash stored at its issue; the
        stored hash is replaced so each refresh token works once.
        """
        payload = decode_refresh_token(refresh_token)
        try:
            user_id = UUID(payload.subject)
        except ValueError:
            raise _unauthorized("Invalid refresh token")

        user = await user_repository.get(db, id=user_id)
        if (
            not user
            or not user.is_active
            or user.refresh_token_hash != hash_token(refresh_token)
        ):
            logger.warning("Refresh token rejected", user_id=payload.subject)
            raise _unauthorized("Invalid refresh token")

        tokens = await self._issue_tokens(db, user)
        logger.info("Tokens refreshed", user_id=str(user.id))
        return tokens

    async def logout(self, db: AsyncSession, user: User) -> None:
        user.refresh_token_hash = None
        await db.commit()
        logger.info("User logged out", user_id=str(user.id))


auth_service = AuthService()
