"""
Task Repository
"""

from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from pathway_tracker.models.task import Task
from pathway_tracker.repositories.base import CRUDBase
from pathway_tracker.schemas.task import TaskCreate, TaskFilters, TaskUpdate


class TaskRepository(CRUDBase[Task, TaskCreate, TaskUpdate]):
    async def filter_tasks(
        self,
        db: AsyncSession,
        *,
        filters: TaskFilters,
        assigned_to_id: Optional[UUID] = None,
    ) -> tuple[list[Task], int]:
        criteria = {
            "member_id": filters.member_id,
            "completed": filters.completed,
            "assigned_to_id": assigned_to_id,
        }
        return await self.page(db, skip=filters.skip, limit=filters.limit, criteria=criteria)


task_repository = TaskRepository(Task)
