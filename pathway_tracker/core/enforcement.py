"""
Per-request enforcement gates.

Each gate takes the request principal (or None when the request is not
authenticated) plus the route's declared requirement and returns an
``AccessDecision``. Status-code mapping lives in ``pathway_tracker.core.deps``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional, Sequence, Union

import structlog

from pathway_tracker.core.authorization import (
    has_all_permissions,
    has_any_permission,
    has_permission,
)
from pathway_tracker.core.rbac import (
    PermissionLike,
    PermissionRegistry,
    Role,
    RoleLike,
    role_key,
)

logger = structlog.get_logger()


@dataclass(frozen=True)
class Principal:
    """Authenticated identity attached to one request."""
    user_id: str
    email: str
    role: str

    @property
    def is_super_admin(self) -> bool:
        return self.role == Role.SUPER_ADMIN.value


@dataclass(frozen=True)
class Unauthenticated:
    message: str = "Not authenticated"


@dataclass(frozen=True)
class Forbidden:
    role: Optional[str]
    required: tuple[str, ...] = ()
    required_roles: tuple[str, ...] = ()
    match: str = "all"
    message: str = "Insufficient permissions"

    def describe_requirement(self) -> str:
        if self.required_roles:
            return f"Role must be one of: {', '.join(self.required_roles)}"
        if not self.required:
            return "resource owner"
        if len(self.required) == 1:
            return self.required[0]
        prefix = "Any of" if self.match == "any" else "All of"
        return f"{prefix}: {', '.join(self.required)}"


@dataclass(frozen=True)
class ResourceNotFound:
    message: str = "Resource not found"


Denial = Union[Unauthenticated, Forbidden, ResourceNotFound]


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    denial: Optional[Denial] = field(default=None)

    @classmethod
    def allow(cls) -> "AccessDecision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, denial: Denial) -> "AccessDecision":
        return cls(allowed=False, denial=denial)

    def __bool__(self) -> bool:
        return self.allowed


OwnerResolver = Callable[[], Awaitable[Optional[str]]]


def _values(permissions: Sequence[PermissionLike]) -> tuple[str, ...]:
    return tuple(getattr(p, "value", p) for p in permissions)


def authorize_permission(
    principal: Optional[Principal],
    permission: PermissionLike,
    registry: Optional[PermissionRegistry] = None,
) -> AccessDecision:
    if principal is None:
        return AccessDecision.deny(Unauthenticated())

    if not has_permission(principal.role, permission, registry):
        logger.warning(
            "Permission denied",
            user_id=principal.user_id,
            role=principal.role,
            required=getattr(permission, "value", permission),
        )
        return AccessDecision.deny(Forbidden(role=principal.role, required=_values([permission])))

    return AccessDecision.allow()


def authorize_any_permission(
    principal: Optional[Principal],
    permissions: Sequence[PermissionLike],
    registry: Optional[PermissionRegistry] = None,
) -> AccessDecision:
    if principal is None:
        return AccessDecision.deny(Unauthenticated())

    if not has_any_permission(principal.role, permissions, registry):
        logger.warning(
            "Permission denied",
            user_id=principal.user_id,
            role=principal.role,
            required_any=_values(permissions),
        )
        return AccessDecision.deny(
            Forbidden(role=principal.role, required=_values(permissions), match="any")
        )

    return AccessDecision.allow()


def authorize_all_permissions(
    principal: Optional[Principal],
    permissions: Sequence[PermissionLike],
    registry: Optional[PermissionRegistry] = None,
) -> AccessDecision:
    if principal is None:
        return AccessDecision.deny(Unauthenticated())

    if not has_all_permissions(principal.role, permissions, registry):
        logger.warning(
            "Permission denied",
            user_id=principal.user_id,
            role=principal.role,
            required_all=_values(permissions),
        )
        return AccessDecision.deny(
            Forbidden(role=principal.role, required=_values(permissions), match="all")
        )

    return AccessDecision.allow()


def authorize_role(principal: Optional[Principal], roles: Sequence[RoleLike]) -> AccessDecision:
    if principal is None:
        return AccessDecision.deny(Unauthenticated())

    allowed_roles = tuple(role_key(r) for r in roles)
    if principal.role not in allowed_roles:
        logger.warning(
            "Role denied",
            user_id=principal.user_id,
            role=principal.role,
            required_roles=allowed_roles,
        )
        return AccessDecision.deny(Forbidden(role=principal.role, required_roles=allowed_roles))

    return AccessDecision.allow()


async def authorize_resource_ownership(
    principal: Optional[Principal],
    resolve_owner_id: OwnerResolver,
) -> AccessDecision:
    """
    Allow only the resource owner (or SUPER_ADMIN).

    ``view_all`` permissions are not consulted here; routes that want the
    broader rule call ``can_access_resource`` themselves. Errors raised by
    the resolver propagate unchanged.
    """
    if principal is None:
        return AccessDecision.deny(Unauthenticated())

    if principal.is_super_admin:
        return AccessDecision.allow()

    resource_owner_id = await resolve_owner_id()
    if resource_owner_id is None:
        return AccessDecision.deny(ResourceNotFound())

    if str(principal.user_id) == str(resource_owner_id):
        return AccessDecision.allow()

    logger.warning(
        "Ownership check failed",
        user_id=principal.user_id,
        role=principal.role,
        owner_id=str(resource_owner_id),
    )
    return AccessDecision.deny(
        Forbidden(
            role=principal.role,
            message="You do not have permission to access this resource",
        )
    )
