"""
Shared schema building blocks
"""

import re
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar, Dict, FrozenSet, Generic, List, Optional, TypeVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

ItemT = TypeVar("ItemT")

_EMAIL_RE = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BaseSchema(BaseModel):
    """ORM-readable schema; enum fields serialize as their plain values"""
    model_config = ConfigDict(
        from_attributes=True,
        validate_assignment=True,
        str_strip_whitespace=True,
        use_enum_values=True
    )


class BaseResponseSchema(BaseSchema):
    """Fields every persisted row exposes"""
    id: UUID
    created_at: datetime
    updated_at: datetime


class PartialUpdateSchema(BaseSchema):
    """
    PATCH-style body: omitted fields are left unchanged

    Fields listed in ``required_columns`` back NOT NULL columns, so an
    explicit ``null`` for them is rejected instead of reaching the database.
    """
    required_columns: ClassVar[FrozenSet[str]] = frozenset()

    @model_validator(mode="after")
    def reject_null_for_required_columns(self):
        nulled = sorted(
            name for name in self.model_fields_set & self.required_columns
            if getattr(self, name) is None
        )
        if nulled:
            raise ValueError(f"Fields cannot be null: {', '.join(nulled)}")
        return self


class Page(BaseModel, Generic[ItemT]):
    """One window of a filtered listing plus the size of the full result"""
    items: List[ItemT]
    total: int = Field(..., ge=0)
    skip: int = Field(..., ge=0)
    limit: int = Field(..., ge=1)
    has_next: bool

    @classmethod
    def build(cls, items: List[ItemT], *, total: int, skip: int, limit: int) -> "Page[ItemT]":
        return cls(
            items=items,
            total=total,
            skip=skip,
            limit=limit,
            has_next=skip + len(items) < total,
        )


class Acknowledgement(BaseModel):
    message: str
    timestamp: datetime = Field(default_factory=_utcnow)


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class HealthReport(BaseModel):
    """Detailed health of the API process and its database"""
    status: HealthStatus
    service: str
    version: str
    timestamp: datetime = Field(default_factory=_utcnow)
    checks: Dict[str, Dict[str, Any]] = Field(default_factory=dict)


def require_text(value: Any) -> str:
    """Reject blank strings, returning the stripped value"""
    if not isinstance(value, str) or not value.strip():
        raise ValueError("Value must be a non-empty string")
    return value.strip()


def normalize_email(value: Optional[str]) -> Optional[str]:
    """
    Check the address shape and lowercase it

    ``None`` passes through so optional email fields can share the validator.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError("Email must be a string")

    candidate = value.strip().lower()
    if not _EMAIL_RE.match(candidate):
        raise ValueError("Invalid email format")
    return candidate
