"""
Task Service
"""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID

import structlog
from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from pathway_tracker.core.authorization import has_permission
from pathway_tracker.core.deps import denial_to_http_exception, ensure_resource_access
from pathway_tracker.core.enforcement import AccessDecision, Forbidden, Principal
from pathway_tracker.core.rbac import Permission
from pathway_tracker.models.task import Task
from pathway_tracker.repositories.member import member_repository
from pathway_tracker.repositories.task import task_repository
from pathway_tracker.repositories.user import user_repository
from pathway_tracker.schemas.base import Page
from pathway_tracker.schemas.task import TaskCreate, TaskFilters, TaskResponse, TaskUpdate

logger = structlog.get_logger()


def _completion_fields(completed: bool) -> dict:
    return {
        "completed": completed,
        "completed_at": datetime.now(timezone.utc) if completed else None,
    }


class TaskService:
    async def get_accessible_task(
        self,
        db: AsyncSession,
        principal: Principal,
        task_id: UUID,
        required_permission: Permission,
    ) -> Task:
        task = await task_repository.get(db, id=task_id)
        if not task:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")

        ensure_resource_access(principal, task.assigned_to_id, required_permission)
        return task

    async def list_tasks(self, db: AsyncSession, principal: Principal, filters: TaskFilters) -> Page[TaskResponse]:
        assigned_to_id = None
        if not has_permission(principal.role, Permission.TASK_VIEW_ALL):
            assigned_to_id = UUID(principal.user_id)

        tasks, total = await task_repository.filter_tasks(db, filters=filters, assigned_to_id=assigned_to_id)
        return Page[TaskResponse].build(
            items=[TaskResponse.model_validate(t) for t in tasks],
            total=total,
            skip=filters.skip,
            limit=filters.limit,
        )

    async def get_task(self, db: AsyncSession, principal: Principal, task_id: UUID) -> TaskResponse:
        task = await self.get_accessible_task(db, principal, task_id, Permission.TASK_VIEW)
        return TaskResponse.model_validate(task)

    async def create_task(self, db: AsyncSession, principal: Principal, data: TaskCreate) -> TaskResponse:
        """
        Create a task for a member the caller can see

        Assigning the task to another user needs ``task:assign``.
        """
        assignee_id = data.assigned_to_id or UUID(principal.user_id)
        if str(assignee_id) != principal.user_id:
            if not has_permission(principal.role, Permission.TASK_ASSIGN):
                logger.warning("Task assignment denied", user_id=principal.user_id, assignee=str(assignee_id))
                raise denial_to_http_exception(
                    AccessDecision.deny(Forbidden(role=principal.role, required=(Permission.TASK_ASSIGN.value,)))
                )
            assignee = await user_repository.get(db, id=assignee_id)
            if not assignee or not assignee.is_active:
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Assigned user not found")

        member = await member_repository.get(db, id=data.member_id)
        if not member:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Member not found")
        ensure_resource_access(principal, member.assigned_to_id, Permission.MEMBER_VIEW)

        obj_in = data.model_dump(exclude={"assigned_to_id"})
        obj_in["assigned_to_id"] = assignee_id
        task = await task_repository.create(db, obj_in=obj_in)
        logger.info("Task created", task_id=str(task.id), assigned_to=str(assignee_id))
        return TaskResponse.model_validate(task)

    async def update_task(
        self,
        db: AsyncSession,
        principal: Principal,
        task_id: UUID,
        data: TaskUpdate,
    ) -> TaskResponse:
        task = await self.get_accessible_task(db, principal, task_id, Permission.TASK_UPDATE)
        update_data = data.model_dump(exclude_unset=True)
        if "completed" in update_data and update_data["completed"] != task.completed:
            update_data.update(_completion_fields(bool(update_data["completed"])))
        task = await task_repository.update(db, db_obj=task, obj_in=update_data)
        return TaskResponse.model_validate(task)

    async def complete_task(self, db: AsyncSession, task_id: UUID) -> TaskResponse:
        """Mark a task done; ownership has already been checked by the route"""
        task = await task_repository.get(db, id=task_id)
        if not task:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
        if not task.completed:
            task = await task_repository.update(db, db_obj=task, obj_in=_completion_fields(True))
            logger.info("Task completed", task_id=str(task.id))
        return TaskResponse.model_validate(task)

    async def delete_task(self, db: AsyncSession, principal: Principal, task_id: UUID) -> None:
        task = await self.get_accessible_task(db, principal, task_id, Permission.TASK_DELETE)
        await task_repository.remove(db, db_obj=task)
        logger.info("Task deleted", task_id=str(task_id), deleted_by=principal.user_id)


task_service = TaskService()
