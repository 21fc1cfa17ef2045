"""
Abstract bases for persisted models
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Uuid
from sqlalchemy.sql import func

from pathway_tracker.core.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BaseModel(Base):
    """UUID key plus creation and modification times"""
    __abstract__ = True
    # Load server-side defaults right after INSERT/UPDATE
    __mapper_args__ = {"eager_defaults": True}

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    # Set in Python as well so rows inserted within one second still order correctly
    created_at = Column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False, index=True
    )
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


class SoftDeleteModel(BaseModel):
    """Rows are flagged rather than removed; see ``CRUDBase.remove``"""
    __abstract__ = True

    is_deleted = Column(Boolean, default=False, nullable=False, index=True)
    deleted_at = Column(DateTime(timezone=True), nullable=True)
