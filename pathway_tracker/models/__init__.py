"""
Database Models
"""

from pathway_tracker.models.base import BaseModel, SoftDeleteModel
from pathway_tracker.models.user import User
from pathway_tracker.models.member import Member, MemberStatus, Note, PathwayType
from pathway_tracker.models.task import Task, TaskPriority
from pathway_tracker.models.message import Message, MessageChannel, MessageDirection

__all__ = [
    "BaseModel",
    "SoftDeleteModel",
    "User",
    "Member",
    "MemberStatus",
    "Note",
    "PathwayType",
    "Task",
    "TaskPriority",
    "Message",
    "MessageChannel",
    "MessageDirection",
]
