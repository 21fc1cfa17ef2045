"""
Communication Schemas
"""

from typing import Optional
from uuid import UUID

from pydantic import Field

from pathway_tracker.models.message import MessageChannel, MessageDirection
from pathway_tracker.schemas.base import BaseResponseSchema, BaseSchema


class SendEmailRequest(BaseSchema):
    member_id: UUID
    subject: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1, max_length=10000)


class SendSMSRequest(BaseSchema):
    member_id: UUID
    message: str = Field(..., min_length=1, max_length=1600)


class SendResult(BaseSchema):
    success: bool
    message_id: Optional[UUID] = None


class MessageResponse(BaseResponseSchema):
    channel: MessageChannel
    direction: MessageDirection
    subject: Optional[str] = None
    content: str
    sent_by: str
    member_id: UUID
