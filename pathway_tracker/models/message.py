"""
Message Model
Communication log of emails and SMS exchanged with members
"""

import enum

from sqlalchemy import Column, String, Text, Enum, ForeignKey, Uuid

from pathway_tracker.models.base import BaseModel


class MessageChannel(str, enum.Enum):
    SMS = "SMS"
    EMAIL = "EMAIL"


class MessageDirection(str, enum.Enum):
    INBOUND = "INBOUND"
    OUTBOUND = "OUTBOUND"


class Message(BaseModel):
    __tablename__ = "messages"

    channel = Column(Enum(MessageChannel, native_enum=False), nullable=False)
    direction = Column(Enum(MessageDirection, native_enum=False), nullable=False)
    subject = Column(String(255), nullable=True)
    content = Column(Text, nullable=False)
    sent_by = Column(String(254), nullable=False)

    member_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("members.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    def __repr__(self):
        return f"<Message(channel='{self.channel}', direction='{self.direction}')>"
