"""
Creates the first SUPER_ADMIN so a fresh deployment can be administered.
"""

from __future__ import annotations

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from pathway_tracker.core.config import settings
from pathway_tracker.core.rbac import Role
from pathway_tracker.core.security import get_password_hash
from pathway_tracker.models.user import User
from pathway_tracker.repositories.user import user_repository

logger = structlog.get_logger()


async def ensure_bootstrap_admin_exists(db: AsyncSession) -> User:
    """
    Return the bootstrap account, creating it on first start

    A soft-deleted account with the bootstrap email counts as existing, so
    deleting the bootstrap admin is not undone by a restart.
    """
    email = settings.BOOTSTRAP_ADMIN_EMAIL.lower().strip()

    admin = await user_repository.get_by_email(db, email, include_deleted=True)
    if admin is not None:
        logger.debug("Bootstrap admin present", user_id=str(admin.id))
        return admin

    admin = await user_repository.create(
        db,
        obj_in={
            "email": email,
            "first_name": settings.BOOTSTRAP_ADMIN_FIRST_NAME,
            "last_name": settings.BOOTSTRAP_ADMIN_LAST_NAME,
            "hashed_password": get_password_hash(settings.BOOTSTRAP_ADMIN_PASSWORD),
            "role": Role.SUPER_ADMIN.value,
            "is_active": True,
        },
    )
    logger.warning("Bootstrap admin created; change its password", email=email, user_id=str(admin.id))
    return admin
