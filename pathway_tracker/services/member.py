"""
Member Service
Member CRUD scoped by assignment.
"""

from __future__ import annotations

from uuid import UUID

import structlog
from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from pathway_tracker.core.authorization import has_permission
from pathway_tracker.core.deps import ensure_resource_access
from pathway_tracker.core.enforcement import Principal
from pathway_tracker.core.rbac import Permission
from pathway_tracker.models.member import Member, Note
from pathway_tracker.repositories.member import member_repository
from pathway_tracker.repositories.user import user_repository
from pathway_tracker.schemas.base import Page
from pathway_tracker.schemas.member import (
    MemberCreate,
    MemberDetail,
    MemberFilters,
    MemberResponse,
    MemberUpdate,
)

logger = structlog.get_logger()


class MemberService:
    async def get_accessible_member(
        self,
        db: AsyncSession,
        principal: Principal,
        member_id: UUID,
        required_permission: Permission,
    ) -> Member:
        """
        Load a member the principal may act on

        Raises:
            HTTPException: 404 if the member does not exist, 403 if
                ``can_access_resource`` denies the principal
        """
        member = await member_repository.get(db, id=member_id)
        if not member:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Member not found")

        ensure_resource_access(principal, member.assigned_to_id, required_permission)
        return member

    async def list_members(self, db: AsyncSession, principal: Principal, filters: MemberFilters) -> Page[MemberResponse]:
        assigned_to_id = None
        if not has_permission(principal.role, Permission.MEMBER_VIEW_ALL):
            assigned_to_id = UUID(principal.user_id)

        members, total = await member_repository.filter_members(
            db, filters=filters, assigned_to_id=assigned_to_id
        )
        return Page[MemberResponse].build(
            items=[MemberResponse.model_validate(m) for m in members],
            total=total,
            skip=filters.skip,
            limit=filters.limit,
        )

    async def get_member(self, db: AsyncSession, principal: Principal, member_id: UUID) -> MemberDetail:
        member = await self.get_accessible_member(db, principal, member_id, Permission.MEMBER_VIEW)
        return MemberDetail.model_validate(member)

    async def create_member(self, db: AsyncSession, principal: Principal, data: MemberCreate) -> MemberDetail:
        obj_in = data.model_dump()
        obj_in["assigned_to_id"] = UUID(principal.user_id)
        member = await member_repository.create(db, obj_in=obj_in)
        logger.info("Member created", member_id=str(member.id), assigned_to=principal.user_id)
        return MemberDetail.model_validate(member)

    async def update_member(
        self,
        db: AsyncSession,
        principal: Principal,
        member_id: UUID,
        data: MemberUpdate,
    ) -> MemberDetail:
        member = await self.get_accessible_member(db, principal, member_id, Permission.MEMBER_UPDATE)
        member = await member_repository.update(db, db_obj=member, obj_in=data)
        return MemberDetail.model_validate(member)

    async def assign_member(
        self,
        db: AsyncSession,
        principal: Principal,
        member_id: UUID,
        assignee_id: UUID,
    ) -> MemberDetail:
        member = await member_repository.get(db, id=member_id)
        if not member:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Member not found")

        assignee = await user_repository.get(db, id=assignee_id)
        if not assignee or not assignee.is_active:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Assigned user not found")

        member = await member_repository.update(db, db_obj=member, obj_in={"assigned_to_id": assignee.id})
        logger.info(
            "Member reassigned",
            member_id=str(member.id),
            assigned_to=str(assignee.id),
            assigned_by=principal.user_id,
        )
        return MemberDetail.model_validate(member)

    async def delete_member(self, db: AsyncSession, principal: Principal, member_id: UUID) -> None:
        member = await self.get_accessible_member(db, principal, member_id, Permission.MEMBER_DELETE)
        await member_repository.remove(db, db_obj=member)
        logger.info("Member deleted", member_id=str(member_id), deleted_by=principal.user_id)

    async def add_note(self, db: AsyncSession, principal: Principal, member_id: UUID, content: str) -> Note:
        member = await self.get_accessible_member(db, principal, member_id, Permission.MEMBER_UPDATE)
        note = await member_repository.add_note(db, member=member, content=content)
        logger.info("Member note added", member_id=str(member_id), note_id=str(note.id))
        return note


member_service = MemberService()
