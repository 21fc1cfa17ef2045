"""
FastAPI Dependencies
Authentication, authorization gates and database dependencies
"""

import uuid
from typing import Awaitable, Callable, Optional

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from pathway_tracker.core.authorization import can_access_resource
from pathway_tracker.core.database import get_db
from pathway_tracker.core.enforcement import (
    AccessDecision,
    Forbidden,
    Principal,
    ResourceNotFound,
    Unauthenticated,
    authorize_all_permissions,
    authorize_any_permission,
    authorize_permission,
    authorize_resource_ownership,
    authorize_role,
)
from pathway_tracker.core.rbac import PermissionLike, RoleLike
from pathway_tracker.core.security import decode_access_token
from pathway_tracker.models.user import User

logger = structlog.get_logger()

# Security scheme; missing credentials are reported by the gates, not FastAPI
security = HTTPBearer(auto_error=False)

# Resolves the owner id of the resource addressed by the request
OwnerLookup = Callable[[Request, AsyncSession], Awaitable[Optional[str]]]


def denial_to_http_exception(decision: AccessDecision) -> HTTPException:
    """
    Translate a denied decision into the HTTP error returned to the client

    Args:
        decision: Denied access decision

    Returns:
        HTTPException with 401, 403 or 404 status
    """
    denial = decision.denial
    if isinstance(denial, Unauthenticated):
        return HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=denial.message,
            headers={"WWW-Authenticate": "Bearer"},
        )
    if isinstance(denial, ResourceNotFound):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=denial.message)
    if isinstance(denial, Forbidden):
        return HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "error": denial.message,
                "required": denial.describe_requirement(),
                "user_role": denial.role,
            },
        )
    raise ValueError(f"Unsupported denial: {denial!r}")


def raise_for_denial(decision: AccessDecision) -> None:
    if not decision.allowed:
        raise denial_to_http_exception(decision)


async def get_optional_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security)
) -> Optional[Principal]:
    """
    Build the request principal from the bearer token, if one was sent

    Returns:
        Principal, or None when no credentials were supplied

    Raises:
        HTTPException: 401 if a token was supplied but fails verification
    """
    if not credentials:
        return None

    payload = decode_access_token(credentials.credentials)
    if not payload.role:
        logger.warning("Access token without role claim", subject=payload.subject)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token claims",
            headers={"WWW-Authenticate": "Bearer"},
        )

    # Services key ownership on UUIDs; keep the canonical form
    user_id = str(_as_uuid(payload.subject))
    return Principal(user_id=user_id, email=payload.email or "", role=payload.role)


async def get_current_principal(
    principal: Optional[Principal] = Depends(get_optional_principal)
) -> Principal:
    if principal is None:
        logger.warning("Missing authentication credentials")
        raise denial_to_http_exception(AccessDecision.deny(Unauthenticated()))
    return principal


async def get_current_user(
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
) -> User:
    """
    Load the account behind the principal

    Raises:
        HTTPException: 401 if the account no longer exists or is inactive
    """
    result = await db.execute(
        select(User).where(
            User.id == _as_uuid(principal.user_id),
            User.is_active == True,
            User.is_deleted == False
        )
    )
    user = result.scalar_one_or_none()

    if not user:
        logger.warning("User not found or inactive", user_id=principal.user_id)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found or inactive",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user


def _as_uuid(value: str) -> uuid.UUID:
    try:
        return uuid.UUID(str(value))
    except ValueError:
        logger.warning("Access token subject is not a user id", subject=value)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token subject",
            headers={"WWW-Authenticate": "Bearer"},
        )


def require_permission(permission: PermissionLike):
    """
    Dependency factory requiring a single permission

    Args:
        permission: Required permission

    Returns:
        Dependency returning the authorized principal
    """
    async def permission_checker(
        principal: Optional[Principal] = Depends(get_optional_principal)
    ) -> Principal:
        raise_for_denial(authorize_permission(principal, permission))
        return principal

    return permission_checker


def require_any_permission(*permissions: PermissionLike):
    """Dependency factory requiring at least one of ``permissions``"""
    async def permission_checker(
        principal: Optional[Principal] = Depends(get_optional_principal)
    ) -> Principal:
        raise_for_denial(authorize_any_permission(principal, permissions))
        return principal

    return permission_checker


def require_all_permissions(*permissions: PermissionLike):
    """Dependency factory requiring every one of ``permissions``"""
    async def permission_checker(
        principal: Optional[Principal] = Depends(get_optional_principal)
    ) -> Principal:
        raise_for_denial(authorize_all_permissions(principal, permissions))
        return principal

    return permission_checker


def require_role(*roles: RoleLike):
    """
    Dependency factory for checking the principal's role

    Args:
        roles: Accepted roles

    Returns:
        Dependency returning the authorized principal
    """
    async def role_checker(
        principal: Optional[Principal] = Depends(get_optional_principal)
    ) -> Principal:
        raise_for_denial(authorize_role(principal, roles))
        return principal

    return role_checker


def check_resource_ownership(resolve_owner: OwnerLookup):
    """
    Dependency factory allowing only the resource owner (or SUPER_ADMIN)

    Args:
        resolve_owner: Coroutine taking the request and session and returning
            the owner id, or None when the resource does not exist

    Returns:
        Dependency returning the authorized principal
    """
    async def ownership_checker(
        request: Request,
        principal: Optional[Principal] = Depends(get_optional_principal),
        db: AsyncSession = Depends(get_db),
    ) -> Principal:
        decision = await authorize_resource_ownership(
            principal, lambda: resolve_owner(request, db)
        )
        raise_for_denial(decision)
        return principal

    return ownership_checker


def ensure_resource_access(
    principal: Principal,
    resource_owner_id,
    required_permission: PermissionLike,
) -> None:
    """
    Raise 403 unless ``can_access_resource`` allows the principal

    Args:
        principal: Authorized principal
        resource_owner_id: Owner of the addressed resource
        required_permission: Permission the route requires
    """
    if can_access_resource(
        principal.role,
        principal.user_id,
        str(resource_owner_id) if resource_owner_id is not None else None,
        required_permission,
    ):
        return

    logger.warning(
        "Resource access denied",
        user_id=principal.user_id,
        role=principal.role,
        owner_id=str(resource_owner_id),
        required=getattr(required_permission, "value", required_permission),
    )
    raise denial_to_http_exception(
        AccessDecision.deny(
            Forbidden(
                role=principal.role,
                message="You do not have permission to access this resource",
            )
        )
    )
