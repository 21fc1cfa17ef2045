"""
User Service
Business logic for user and role management.
"""

from __future__ import annotations

from uuid import UUID

import structlog
from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from pathway_tracker.core.authorization import has_permission
from pathway_tracker.core.deps import denial_to_http_exception
from pathway_tracker.core.enforcement import AccessDecision, Forbidden, Principal
from pathway_tracker.core.rbac import Permission, Role
from pathway_tracker.models.user import User
from pathway_tracker.repositories.user import user_repository
from pathway_tracker.schemas.base import Page
from pathway_tracker.schemas.user import UserDetail, UserFilters, UserUpdateRequest

logger = structlog.get_logger()


class UserService:
    def _to_user_detail(self, user: User) -> UserDetail:
        return UserDetail.model_validate(user)

    async def _get_or_404(self, db: AsyncSession, user_id: UUID) -> User:
        user = await user_repository.get(db, id=user_id)
        if not user:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        return user

    async def list_users(self, db: AsyncSession, filters: UserFilters) -> Page[UserDetail]:
        users, total = await user_repository.filter_users(
            db,
            search=filters.search,
            role=filters.role,
            skip=filters.skip,
            limit=filters.limit,
        )
        return Page[UserDetail].build(
            items=[self._to_user_detail(user) for user in users],
            total=total,
            skip=filters.skip,
            limit=filters.limit,
        )

    async def get_user(self, db: AsyncSession, user_id: UUID) -> UserDetail:
        return self._to_user_detail(await self._get_or_404(db, user_id))

    async def update_user(
        self,
        db: AsyncSession,
        principal: Principal,
        user_id: UUID,
        data: UserUpdateRequest,
    ) -> UserDetail:
        """Users edit their own profile; editing anyone else needs ``user:update``"""
        if str(user_id) != principal.user_id and not has_permission(principal.role, Permission.USER_UPDATE):
            logger.warning("Profile update denied", user_id=principal.user_id, target=str(user_id))
            raise denial_to_http_exception(
                AccessDecision.deny(Forbidden(role=principal.role, required=(Permission.USER_UPDATE.value,)))
            )

        user = await self._get_or_404(db, user_id)
        user = await user_repository.update(db, db_obj=user, obj_in=data)
        return self._to_user_detail(user)

    async def change_role(self, db: AsyncSession, principal: Principal, user_id: UUID, role: Role) -> UserDetail:
        if str(user_id) == principal.user_id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot change your own role")

        user = await self._get_or_404(db, user_id)
        previous = user.role
        # Outstanding refresh tokens carry the old role
        user = await user_repository.update(
            db, db_obj=user, obj_in={"role": Role(role).value, "refresh_token_hash": None}
        )
        logger.info(
            "User role changed",
            user_id=str(user.id),
            previous_role=previous,
            role=user.role,
            changed_by=principal.user_id,
        )
        return self._to_user_detail(user)

    async def delete_user(self, db: AsyncSession, principal: Principal, user_id: UUID) -> None:
        if str(user_id) == principal.user_id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot delete your own account")

        user = await self._get_or_404(db, user_id)
        user.is_active = False
        user.refresh_token_hash = None
        await user_repository.remove(db, db_obj=user)
        logger.info("User deleted", user_id=str(user_id), deleted_by=principal.user_id)


user_service = UserService()
