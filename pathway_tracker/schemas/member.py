"""
Member Schemas
"""

from datetime import date, datetime
from typing import ClassVar, FrozenSet, List, Optional
from uuid import UUID

from pydantic import Field, field_validator

from pathway_tracker.models.member import MemberStatus, PathwayType
from pathway_tracker.schemas.base import (
    BaseResponseSchema,
    BaseSchema,
    PartialUpdateSchema,
    normalize_email,
)


def _normalize_tags(values: Optional[List[str]]) -> Optional[List[str]]:
    if values is None:
        return values
    seen = []
    for tag in values:
        tag = tag.strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


class MemberBase(BaseSchema):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: str
    phone: str = Field(..., min_length=1, max_length=32)
    pathway: PathwayType
    current_stage_id: str = Field(..., min_length=1, max_length=64)
    address: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    zip: Optional[str] = Field(None, max_length=20)
    date_of_birth: Optional[str] = Field(None, max_length=20)
    gender: Optional[str] = Field(None, max_length=32)
    marital_status: Optional[str] = Field(None, max_length=32)


class MemberCreate(MemberBase):
    tags: List[str] = Field(default_factory=list)

    @field_validator("email")
    @classmethod
    def validate_email_format(cls, v):
        return normalize_email(v)

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v):
        return _normalize_tags(v)


class MemberUpdate(PartialUpdateSchema):
    required_columns: ClassVar[FrozenSet[str]] = frozenset({
        "first_name", "last_name", "email", "phone",
        "pathway", "current_stage_id", "status", "tags",
    })

    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[str] = None
    phone: Optional[str] = Field(None, min_length=1, max_length=32)
    pathway: Optional[PathwayType] = None
    current_stage_id: Optional[str] = Field(None, min_length=1, max_length=64)
    status: Optional[MemberStatus] = None
    address: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    zip: Optional[str] = Field(None, max_length=20)
    date_of_birth: Optional[str] = Field(None, max_length=20)
    gender: Optional[str] = Field(None, max_length=32)
    marital_status: Optional[str] = Field(None, max_length=32)
    tags: Optional[List[str]] = None

    @field_validator("email")
    @classmethod
    def validate_email_format(cls, v):
        return normalize_email(v)

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v):
        return _normalize_tags(v)


class MemberAssignRequest(BaseSchema):
    assigned_to_id: UUID


class MemberFilters(BaseSchema):
    pathway: Optional[PathwayType] = None
    status: Optional[MemberStatus] = None
    search: Optional[str] = None
    skip: int = Field(default=0, ge=0)
    limit: int = Field(default=100, ge=1, le=500)


class NoteCreate(BaseSchema):
    content: str = Field(..., min_length=1, max_length=5000)


class NoteResponse(BaseResponseSchema):
    content: str
    member_id: UUID


class MemberResponse(BaseResponseSchema):
    first_name: str
    last_name: str
    email: str
    phone: str
    photo_url: Optional[str] = None
    pathway: PathwayType
    current_stage_id: str
    status: MemberStatus
    joined_date: date
    assigned_to_id: UUID
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    date_of_birth: Optional[str] = None
    gender: Optional[str] = None
    marital_status: Optional[str] = None
    tags: List[str] = Field(default_factory=list)


class MemberDetail(MemberResponse):
    notes: List[NoteResponse] = Field(default_factory=list)
