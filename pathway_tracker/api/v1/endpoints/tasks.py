"""
Task Endpoints
"""

from typing import Any, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from pathway_tracker.core.database import get_db
from pathway_tracker.core.deps import check_resource_ownership, require_permission
from pathway_tracker.core.enforcement import Principal
from pathway_tracker.core.rbac import Permission
from pathway_tracker.repositories.task import task_repository
from pathway_tracker.schemas.base import Page
from pathway_tracker.schemas.task import TaskCreate, TaskFilters, TaskResponse, TaskUpdate
from pathway_tracker.services.task import task_service

logger = structlog.get_logger()
router = APIRouter()


async def resolve_task_owner(request: Request, db: AsyncSession) -> Optional[str]:
    """Assignee of the task addressed by the ``task_id`` path parameter"""
    try:
        task_id = UUID(str(request.path_params.get("task_id")))
    except ValueError:
        return None

    task = await task_repository.get(db, id=task_id)
    return str(task.assigned_to_id) if task else None


@router.get("/", response_model=Page[TaskResponse])
async def list_tasks(
    member_id: Optional[UUID] = Query(None),
    completed: Optional[bool] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    principal: Principal = Depends(require_permission(Permission.TASK_VIEW)),
    db: AsyncSession = Depends(get_db)
) -> Any:
    filters = TaskFilters(member_id=member_id, completed=completed, skip=skip, limit=limit)
    return await task_service.list_tasks(db, principal, filters)


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: UUID,
    principal: Principal = Depends(require_permission(Permission.TASK_VIEW)),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await task_service.get_task(db, principal, task_id)


@router.post("/", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    data: TaskCreate,
    principal: Principal = Depends(require_permission(Permission.TASK_CREATE)),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await task_service.create_task(db, principal, data)


@router.put("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: UUID,
    data: TaskUpdate,
    principal: Principal = Depends(require_permission(Permission.TASK_UPDATE)),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await task_service.update_task(db, principal, task_id, data)


@router.patch(
    "/{task_id}/complete",
    response_model=TaskResponse,
    dependencies=[Depends(require_permission(Permission.TASK_UPDATE))],
)
async def complete_task(
    task_id: UUID,
    principal: Principal = Depends(check_resource_ownership(resolve_task_owner)),
    db: AsyncSession = Depends(get_db)
) -> Any:
    """Only the assignee (or a super admin) may complete a task"""
    return await task_service.complete_task(db, task_id)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    task_id: UUID,
    principal: Principal = Depends(require_permission(Permission.TASK_DELETE)),
    db: AsyncSession = Depends(get_db)
) -> None:
    await task_service.delete_task(db, principal, task_id)
