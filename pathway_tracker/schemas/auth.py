"""
Authentication Schemas
Pydantic models for authentication requests and responses
"""

from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import Field, field_validator

from pathway_tracker.schemas.base import BaseSchema, normalize_email, require_text


class LoginRequest(BaseSchema):
    """Login request schema"""
    email: str = Field(..., description="User email address")
    password: str = Field(..., min_length=1, description="User password")

    @field_validator('email')
    @classmethod
    def validate_email_format(cls, v):
        return normalize_email(v)


class RegisterRequest(BaseSchema):
    """Self-service registration; privileged roles are assigned by super admins"""
    email: str = Field(..., description="User email address")
    password: str = Field(..., min_length=8, max_length=128, description="User password")
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=32)
    role: Literal["ADMIN", "VOLUNTEER"] = Field("VOLUNTEER", description="Requested role")

    @field_validator('email')
    @classmethod
    def validate_email_format(cls, v):
        return normalize_email(v)

    @field_validator('first_name', 'last_name')
    @classmethod
    def validate_names(cls, v):
        return require_text(v)


class RefreshTokenRequest(BaseSchema):
    """Refresh token request schema"""
    refresh_token: str = Field(..., min_length=1, description="Refresh token")


class TokenResponse(BaseSchema):
    """Token response schema"""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Access token lifetime in seconds")


class UserProfile(BaseSchema):
    """User profile returned to the account owner"""
    id: UUID
    email: str
    first_name: str
    last_name: str
    full_name: str
    phone: Optional[str] = None
    role: str
    is_active: bool
    avatar_url: Optional[str] = None
    created_at: datetime
    last_login_at: Optional[datetime] = None


class AuthResponse(BaseSchema):
    """Login / registration response schema"""
    user: UserProfile
    tokens: TokenResponse
    message: str
