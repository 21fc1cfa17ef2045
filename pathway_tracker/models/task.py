"""
Task Model
Follow-up work items assigned to volunteers
"""

import enum

from sqlalchemy import Column, String, Boolean, Date, DateTime, Enum, ForeignKey, Uuid, Index

from pathway_tracker.models.base import BaseModel


class TaskPriority(str, enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class Task(BaseModel):
    """Task; ``assigned_to_id`` is the owning volunteer"""
    __tablename__ = "tasks"

    description = Column(String(500), nullable=False)
    due_date = Column(Date, nullable=False)
    priority = Column(Enum(TaskPriority, native_enum=False), nullable=False, default=TaskPriority.MEDIUM)
    completed = Column(Boolean, default=False, nullable=False, index=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    member_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("members.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    assigned_to_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)

    __table_args__ = (
        Index("ix_task_assignee_completed", "assigned_to_id", "completed"),
    )

    def __repr__(self):
        return f"<Task(description='{self.description[:30]}', completed={self.completed})>"
