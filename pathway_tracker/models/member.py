"""
Member Model
Church members moving through an integration pathway
"""

import enum
from datetime import date

from sqlalchemy import Column, String, Text, Date, Enum, ForeignKey, JSON, Uuid, Index
from sqlalchemy.orm import relationship

from pathway_tracker.models.base import BaseModel


class PathwayType(str, enum.Enum):
    NEWCOMER = "NEWCOMER"
    NEW_BELIEVER = "NEW_BELIEVER"


class MemberStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    INTEGRATED = "INTEGRATED"
    INACTIVE = "INACTIVE"


class Member(BaseModel):
    """Member record; ``assigned_to_id`` is the owning volunteer"""
    __tablename__ = "members"

    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(254), nullable=False, index=True)
    phone = Column(String(32), nullable=False)
    photo_url = Column(String(500), nullable=True)

    pathway = Column(Enum(PathwayType, native_enum=False), nullable=False, index=True)
    current_stage_id = Column(String(64), nullable=False)
    status = Column(
        Enum(MemberStatus, native_enum=False),
        nullable=False,
        default=MemberStatus.ACTIVE,
        index=True
    )
    joined_date = Column(Date, nullable=False, default=date.today)

    assigned_to_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)

    address = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(100), nullable=True)
    zip = Column(String(20), nullable=True)
    date_of_birth = Column(String(20), nullable=True)
    gender = Column(String(32), nullable=True)
    marital_status = Column(String(32), nullable=True)

    tags = Column(JSON, default=list, nullable=False)

    notes = relationship(
        "Note",
        back_populates="member",
        cascade="all, delete-orphan",
        order_by="Note.created_at.desc()",
        lazy="selectin"
    )

    __table_args__ = (
        Index("ix_member_assignee_status", "assigned_to_id", "status"),
    )

    def __repr__(self):
        return f"<Member(name='{self.first_name} {self.last_name}', pathway='{self.pathway}')>"


class Note(BaseModel):
    """Free-text note attached to a member"""
    __tablename__ = "notes"

    content = Column(Text, nullable=False)
    member_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("members.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    member = relationship("Member", back_populates="notes")
