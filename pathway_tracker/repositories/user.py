"""
User Repository
Database operations for user management.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import or_
from sqlalchemy.ext.asyncio import AsyncSession

from pathway_tracker.models.user import User
from pathway_tracker.repositories.base import CRUDBase
from pathway_tracker.schemas.auth import RegisterRequest
from pathway_tracker.schemas.user import UserUpdateRequest


class UserRepository(CRUDBase[User, RegisterRequest, UserUpdateRequest]):
    async def get_by_email(self, db: AsyncSession, email: str, include_deleted: bool = False) -> Optional[User]:
        query = self._select(include_deleted).where(User.email == email.lower().strip())
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def filter_users(
        self,
        db: AsyncSession,
        *,
        search: Optional[str],
        role: Optional[str],
        skip: int,
        limit: int,
    ) -> tuple[list[User], int]:
        clauses = []
        if search:
            like = f"%{search.strip()}%"
            clauses.append(
                or_(User.email.ilike(like), User.first_name.ilike(like), User.last_name.ilike(like))
            )

        return await self.page(db, skip=skip, limit=limit, criteria={"role": role}, clauses=clauses)


user_repository = UserRepository(User)
