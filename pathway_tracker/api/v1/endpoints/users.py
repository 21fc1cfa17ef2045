"""User and role management endpoints."""

from __future__ import annotations

from typing import Any
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from pathway_tracker.core.database import get_db
from pathway_tracker.core.deps import get_current_principal, require_permission
from pathway_tracker.core.enforcement import Principal
from pathway_tracker.core.rbac import Permission, Role, get_role_permissions, sorted_permission_values
from pathway_tracker.schemas.base import Page
from pathway_tracker.schemas.user import (
    RolePermissionsResponse,
    UserDetail,
    UserFilters,
    UserRoleUpdateRequest,
    UserUpdateRequest,
)
from pathway_tracker.services.user import user_service

logger = structlog.get_logger()
router = APIRouter()


@router.get("/", response_model=Page[UserDetail])
async def list_users(
    search: str | None = Query(default=None),
    role: Role | None = Query(default=None),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=20, ge=1, le=100),
    principal: Principal = Depends(require_permission(Permission.USER_VIEW)),
    db: AsyncSession = Depends(get_db)
) -> Any:
    """List users with pagination and filters."""
    filters = UserFilters(search=search, role=role, skip=skip, limit=limit)
    return await user_service.list_users(db, filters)


@router.get("/me/permissions", response_model=RolePermissionsResponse)
async def my_permissions(principal: Principal = Depends(get_current_principal)) -> Any:
    """Role and effective permissions of the caller."""
    return RolePermissionsResponse(
        role=principal.role,
        permissions=sorted_permission_values(get_role_permissions(principal.role)),
    )


@router.get("/{user_id}", response_model=UserDetail)
async def get_user(
    user_id: UUID,
    principal: Principal = Depends(require_permission(Permission.USER_VIEW)),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await user_service.get_user(db, user_id)


@router.put("/{user_id}", response_model=UserDetail)
async def update_user(
    user_id: UUID,
    data: UserUpdateRequest,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await user_service.update_user(db, principal, user_id, data)


@router.put("/{user_id}/role", response_model=UserDetail)
async def update_user_role(
    user_id: UUID,
    data: UserRoleUpdateRequest,
    principal: Principal = Depends(require_permission(Permission.USER_MANAGE_ROLES)),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await user_service.change_role(db, principal, user_id, data.role)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: UUID,
    principal: Principal = Depends(require_permission(Permission.USER_DELETE)),
    db: AsyncSession = Depends(get_db)
) -> None:
    await user_service.delete_user(db, principal, user_id)
