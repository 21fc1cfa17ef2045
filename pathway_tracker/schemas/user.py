"""
User management schemas.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from pathway_tracker.core.rbac import Role
from pathway_tracker.schemas.base import BaseSchema


class UserDetail(BaseSchema):
    id: UUID
    email: str
    first_name: str
    last_name: str
    full_name: str
    phone: Optional[str] = None
    role: str
    is_active: bool
    avatar_url: Optional[str] = None
    gender: Optional[str] = None
    address: Optional[str] = None
    location: Optional[str] = None
    postal_code: Optional[str] = None
    date_of_birth: Optional[str] = None
    created_at: datetime
    last_login_at: Optional[datetime] = None


class UserUpdateRequest(BaseSchema):
    """Profile fields a user (or a user manager) may change"""
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=32)
    avatar_url: Optional[str] = Field(default=None, max_length=500, pattern=r"^https?://")
    gender: Optional[str] = Field(default=None, max_length=32)
    address: Optional[str] = Field(default=None, max_length=255)
    location: Optional[str] = Field(default=None, max_length=255)
    postal_code: Optional[str] = Field(default=None, max_length=20)
    date_of_birth: Optional[str] = Field(default=None, max_length=20)


class UserRoleUpdateRequest(BaseSchema):
    role: Role


class UserFilters(BaseSchema):
    search: Optional[str] = Field(default=None)
    role: Optional[Role] = Field(default=None)
    skip: int = Field(default=0, ge=0)
    limit: int = Field(default=20, ge=1, le=100)


class RolePermissionsResponse(BaseSchema):
    role: str
    permissions: list[str] = Field(default_factory=list)
