"""
Task Schemas
"""

from datetime import date, datetime
from typing import ClassVar, FrozenSet, Optional
from uuid import UUID

from pydantic import Field

from pathway_tracker.models.task import TaskPriority
from pathway_tracker.schemas.base import BaseResponseSchema, BaseSchema, PartialUpdateSchema


class TaskCreate(BaseSchema):
    description: str = Field(..., min_length=1, max_length=500)
    due_date: date
    priority: TaskPriority = TaskPriority.MEDIUM
    member_id: UUID
    assigned_to_id: Optional[UUID] = Field(None, description="Defaults to the caller")


class TaskUpdate(PartialUpdateSchema):
    required_columns: ClassVar[FrozenSet[str]] = frozenset(
        {"description", "due_date", "priority", "completed"}
    )

    description: Optional[str] = Field(None, min_length=1, max_length=500)
    due_date: Optional[date] = None
    priority: Optional[TaskPriority] = None
    completed: Optional[bool] = None


class TaskFilters(BaseSchema):
    member_id: Optional[UUID] = None
    completed: Optional[bool] = None
    skip: int = Field(default=0, ge=0)
    limit: int = Field(default=100, ge=1, le=500)


class TaskResponse(BaseResponseSchema):
    description: str
    due_date: date
    priority: TaskPriority
    completed: bool
    completed_at: Optional[datetime] = None
    member_id: UUID
    assigned_to_id: UUID
