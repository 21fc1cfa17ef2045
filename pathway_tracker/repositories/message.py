"""
Message Repository
Communication log persistence
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pathway_tracker.models.message import Message
from pathway_tracker.repositories.base import CRUDBase
from pathway_tracker.schemas.communication import MessageResponse


class MessageRepository(CRUDBase[Message, MessageResponse, MessageResponse]):
    async def history_for_member(self, db: AsyncSession, member_id: UUID) -> list[Message]:
        result = await db.execute(
            select(Message)
            .where(Message.member_id == member_id)
            .order_by(Message.created_at.desc())
        )
        return list(result.scalars().all())


message_repository = MessageRepository(Message)
