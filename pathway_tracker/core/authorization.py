"""
Authorization decision functions.

Pure checks over the permission registry. None of these raise for unknown
roles or unknown permission identifiers; both simply grant nothing.
"""

from __future__ import annotations

from typing import Iterable, Optional

from pathway_tracker.core.rbac import (
    PermissionLike,
    PermissionRegistry,
    Role,
    RoleLike,
    Permission,
    broadening_permission_for,
    get_role_permissions,
    role_key,
)


def has_permission(
    role: Optional[RoleLike],
    permission: PermissionLike,
    registry: Optional[PermissionRegistry] = None,
) -> bool:
    """True iff ``permission`` is in the role's permission set."""
    parsed = Permission.parse(permission)
    return (parsed if parsed is not None else permission) in get_role_permissions(role, registry)


def has_any_permission(
    role: Optional[RoleLike],
    permissions: Iterable[PermissionLike],
    registry: Optional[PermissionRegistry] = None,
) -> bool:
    """
    True iff the role holds at least one of ``permissions``.

    An empty collection grants nothing and returns False.
    """
    return any(has_permission(role, p, registry) for p in permissions)


def has_all_permissions(
    role: Optional[RoleLike],
    permissions: Iterable[PermissionLike],
    registry: Optional[PermissionRegistry] = None,
) -> bool:
    """
    True iff the role holds every one of ``permissions``.

    An empty collection is vacuously satisfied and returns True.
    """
    return all(has_permission(role, p, registry) for p in permissions)


def can_access_resource(
    role: Optional[RoleLike],
    user_id: str,
    resource_owner_id: Optional[str],
    required_permission: PermissionLike,
    registry: Optional[PermissionRegistry] = None,
) -> bool:
    """
    Decide whether a principal may act on a resource owned by someone.

    Evaluated in order, first match wins:

    1. SUPER_ADMIN is always allowed.
    2. Without ``required_permission`` the answer is no.
    3. Holding ``<domain>:view_all`` for the permission's domain allows
       access to any resource in that domain.
    4. Otherwise only the owner is allowed.

    Identifiers without a domain separator have no broadening permission and
    go straight to the ownership rule.
    """
    if role_key(role) == Role.SUPER_ADMIN.value:
        return True

    if not has_permission(role, required_permission, registry):
        return False

    broadening = broadening_permission_for(required_permission)
    if broadening is not None and has_permission(role, broadening, registry):
        return True

    return str(user_id) == str(resource_owner_id)
