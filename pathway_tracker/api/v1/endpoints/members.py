"""
Member Endpoints
"""

from typing import Any, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from pathway_tracker.core.database import get_db
from pathway_tracker.core.deps import require_permission
from pathway_tracker.core.enforcement import Principal
from pathway_tracker.core.rbac import Permission
from pathway_tracker.models.member import MemberStatus, PathwayType
from pathway_tracker.schemas.base import Page
from pathway_tracker.schemas.member import (
    MemberAssignRequest,
    MemberCreate,
    MemberDetail,
    MemberFilters,
    MemberResponse,
    MemberUpdate,
    NoteCreate,
    NoteResponse,
)
from pathway_tracker.services.member import member_service

logger = structlog.get_logger()
router = APIRouter()


@router.get("/", response_model=Page[MemberResponse])
async def list_members(
    pathway: Optional[PathwayType] = Query(None),
    status_filter: Optional[MemberStatus] = Query(None, alias="status"),
    search: Optional[str] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    principal: Principal = Depends(require_permission(Permission.MEMBER_VIEW)),
    db: AsyncSession = Depends(get_db)
) -> Any:
    """
    List members

    Callers without ``member:view_all`` only see members assigned to them.
    """
    filters = MemberFilters(pathway=pathway, status=status_filter, search=search, skip=skip, limit=limit)
    return await member_service.list_members(db, principal, filters)


@router.get("/{member_id}", response_model=MemberDetail)
async def get_member(
    member_id: UUID,
    principal: Principal = Depends(require_permission(Permission.MEMBER_VIEW)),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await member_service.get_member(db, principal, member_id)


@router.post("/", response_model=MemberDetail, status_code=status.HTTP_201_CREATED)
async def create_member(
    data: MemberCreate,
    principal: Principal = Depends(require_permission(Permission.MEMBER_CREATE)),
    db: AsyncSession = Depends(get_db)
) -> Any:
    """Create a member assigned to the caller"""
    return await member_service.create_member(db, principal, data)


@router.put("/{member_id}", response_model=MemberDetail)
async def update_member(
    member_id: UUID,
    data: MemberUpdate,
    principal: Principal = Depends(require_permission(Permission.MEMBER_UPDATE)),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await member_service.update_member(db, principal, member_id, data)


@router.put("/{member_id}/assign", response_model=MemberDetail)
async def assign_member(
    member_id: UUID,
    data: MemberAssignRequest,
    principal: Principal = Depends(require_permission(Permission.MEMBER_ASSIGN)),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await member_service.assign_member(db, principal, member_id, data.assigned_to_id)


@router.delete("/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_member(
    member_id: UUID,
    principal: Principal = Depends(require_permission(Permission.MEMBER_DELETE)),
    db: AsyncSession = Depends(get_db)
) -> None:
    await member_service.delete_member(db, principal, member_id)


@router.post("/{member_id}/notes", response_model=NoteResponse, status_code=status.HTTP_201_CREATED)
async def add_note(
    member_id: UUID,
    data: NoteCreate,
    principal: Principal = Depends(require_permission(Permission.MEMBER_UPDATE)),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await member_service.add_note(db, principal, member_id, data.content)
