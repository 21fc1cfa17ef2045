"""
Member Repository
"""

from typing import Optional
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.ext.asyncio import AsyncSession

from pathway_tracker.models.member import Member, Note
from pathway_tracker.repositories.base import CRUDBase
from pathway_tracker.schemas.member import MemberCreate, MemberFilters, MemberUpdate


class MemberRepository(CRUDBase[Member, MemberCreate, MemberUpdate]):
    async def filter_members(
        self,
        db: AsyncSession,
        *,
        filters: MemberFilters,
        assigned_to_id: Optional[UUID] = None,
    ) -> tuple[list[Member], int]:
        """
        List members matching ``filters``

        Args:
            db: Database session
            filters: Pathway, status and free-text filters plus pagination
            assigned_to_id: Restrict to members owned by this user

        Returns:
            Page of members and the total match count
        """
        clauses = []
        if filters.search:
            like = f"%{filters.search.strip()}%"
            clauses.append(
                or_(
                    Member.first_name.ilike(like),
                    Member.last_name.ilike(like),
                    Member.email.ilike(like),
                    Member.phone.ilike(like),
                )
            )

        criteria = {
            "assigned_to_id": assigned_to_id,
            "pathway": filters.pathway,
            "status": filters.status,
        }
        return await self.page(
            db, skip=filters.skip, limit=filters.limit, criteria=criteria, clauses=clauses
        )

    async def add_note(self, db: AsyncSession, *, member: Member, content: str) -> Note:
        note = Note(member_id=member.id, content=content)
        db.add(note)
        await db.commit()
        await db.refresh(note)
        return note


member_repository = MemberRepository(Member)
