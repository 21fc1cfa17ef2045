"""
Communication Service
Sends follow-ups to members and keeps the message log.
"""

from __future__ import annotations

from uuid import UUID

import structlog
from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from pathway_tracker.core.authorization import has_permission
from pathway_tracker.core.deps import denial_to_http_exception
from pathway_tracker.core.enforcement import AccessDecision, Forbidden, Principal
from pathway_tracker.core.rbac import Permission
from pathway_tracker.models.message import Message, MessageChannel, MessageDirection
from pathway_tracker.repositories.member import member_repository
from pathway_tracker.repositories.message import message_repository
from pathway_tracker.schemas.communication import (
    MessageResponse,
    SendEmailRequest,
    SendResult,
    SendSMSRequest,
)
from pathway_tracker.services.email_service import email_service
from pathway_tracker.services.member import member_service
from pathway_tracker.services.sms_service import sms_service

logger = structlog.get_logger()


class CommunicationService:
    async def _log_outbound(
        self,
        db: AsyncSession,
        *,
        principal: Principal,
        member_id: UUID,
        channel: MessageChannel,
        content: str,
        subject: str = None,
    ) -> Message:
        return await message_repository.create(
            db,
            obj_in={
                "member_id": member_id,
                "channel": channel,
                "direction": MessageDirection.OUTBOUND,
                "subject": subject,
                "content": content,
                "sent_by": principal.email or principal.user_id,
            },
        )

    async def send_email(self, db: AsyncSession, principal: Principal, data: SendEmailRequest) -> SendResult:
        member = await member_service.get_accessible_member(db, principal, data.member_id, Permission.MEMBER_VIEW)

        try:
            await email_service.send_follow_up(to_email=member.email, subject=data.subject, body=data.message)
        except RuntimeError as exc:
            logger.error("Follow-up email failed", member_id=str(member.id), error=str(exc))
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to send email")

        message = await self._log_outbound(
            db,
            principal=principal,
            member_id=member.id,
            channel=MessageChannel.EMAIL,
            subject=data.subject,
            content=data.message,
        )
        return SendResult(success=True, message_id=message.id)

    async def send_sms(self, db: AsyncSession, principal: Principal, data: SendSMSRequest) -> SendResult:
        member = await member_service.get_accessible_member(db, principal, data.member_id, Permission.MEMBER_VIEW)

        try:
            await sms_service.send_sms(to=member.phone, body=data.message)
        except RuntimeError as exc:
            logger.error("Follow-up SMS failed", member_id=str(member.id), error=str(exc))
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to send SMS")

        message = await self._log_outbound(
            db,
            principal=principal,
            member_id=member.id,
            channel=MessageChannel.SMS,
            content=data.message,
        )
        return SendResult(success=True, message_id=message.id)

    async def get_history(self, db: AsyncSession, principal: Principal, member_id: UUID) -> list[MessageResponse]:
        """
        Messages exchanged with a member, newest first

        Without ``comm:view_all_history`` only the member's assignee may read it.
        """
        member = await member_repository.get(db, id=member_id)
        if not member:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Member not found")

        if (
            not has_permission(principal.role, Permission.COMM_VIEW_ALL_HISTORY)
            and str(member.assigned_to_id) != principal.user_id
        ):
            logger.warning("Message history denied", user_id=principal.user_id, member_id=str(member_id))
            raise denial_to_http_exception(
                AccessDecision.deny(
                    Forbidden(role=principal.role, required=(Permission.COMM_VIEW_ALL_HISTORY.value,))
                )
            )

        messages = await message_repository.history_for_member(db, member.id)
        return [MessageResponse.model_validate(m) for m in messages]


communication_service = CommunicationService()
