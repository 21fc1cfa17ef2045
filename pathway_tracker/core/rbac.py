"""
RBAC registry and canonical permission definitions for Pathway Tracker.

Permissions are ``<domain>:<action>`` identifiers. Roles map to a fixed,
read-only set of permissions that is built once at import time.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Union

PERMISSION_SEPARATOR = ":"
BROADENING_ACTION = "view_all"


class Permission(str, Enum):
    # User management
    USER_VIEW = "user:view"
    USER_CREATE = "user:create"
    USER_UPDATE = "user:update"
    USER_DELETE = "user:delete"
    USER_MANAGE_ROLES = "user:manage_roles"

    # Member management
    MEMBER_VIEW = "member:view"
    MEMBER_CREATE = "member:create"
    MEMBER_UPDATE = "member:update"
    MEMBER_DELETE = "member:delete"
    MEMBER_VIEW_ALL = "member:view_all"
    MEMBER_ASSIGN = "member:assign"

    # Task management
    TASK_VIEW = "task:view"
    TASK_CREATE = "task:create"
    TASK_UPDATE = "task:update"
    TASK_DELETE = "task:delete"
    TASK_VIEW_ALL = "task:view_all"
    TASK_ASSIGN = "task:assign"

    # Communication
    COMM_SEND_EMAIL = "comm:send_email"
    COMM_SEND_SMS = "comm:send_sms"
    COMM_VIEW_HISTORY = "comm:view_history"
    COMM_VIEW_ALL_HISTORY = "comm:view_all_history"

    # AI features
    AI_GENERATE_MESSAGE = "ai:generate_message"
    AI_ANALYZE_JOURNEY = "ai:analyze_journey"

    # Settings & configuration
    SETTINGS_VIEW = "settings:view"
    SETTINGS_UPDATE = "settings:update"
    SETTINGS_UPDATE_CHURCH = "settings:update_church"
    SETTINGS_MANAGE_INTEGRATIONS = "settings:manage_integrations"
    SETTINGS_MANAGE_AUTOMATION = "settings:manage_automation"
    SETTINGS_MANAGE_PATHWAYS = "settings:manage_pathways"

    # Reports & analytics
    REPORTS_VIEW = "reports:view"
    REPORTS_EXPORT = "reports:export"
    REPORTS_VIEW_ALL = "reports:view_all"

    # System administration
    SYSTEM_VIEW_LOGS = "system:view_logs"
    SYSTEM_MANAGE_TENANTS = "system:manage_tenants"
    SYSTEM_VIEW_HEALTH = "system:view_health"

    @property
    def domain(self) -> str:
        return self.value.split(PERMISSION_SEPARATOR, 1)[0]

    @property
    def action(self) -> str:
        return self.value.split(PERMISSION_SEPARATOR, 1)[1]

    def broadening_key(self) -> Optional["Permission"]:
        """The ``<domain>:view_all`` permission for this domain, if one is defined."""
        return broadening_permission_for(self)

    @classmethod
    def parse(cls, value: Union["Permission", str]) -> Optional["Permission"]:
        """Return the matching Permission, or None for unknown identifiers."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


class Role(str, Enum):
    SUPER_ADMIN = "SUPER_ADMIN"
    ADMIN = "ADMIN"
    TEAM_LEADER = "TEAM_LEADER"
    VOLUNTEER = "VOLUNTEER"


RoleLike = Union[Role, str]
PermissionLike = Union[Permission, str]


def role_key(role: Optional[RoleLike]) -> Optional[str]:
    if isinstance(role, Role):
        return role.value
    return role


def _normalize_permission(permission: PermissionLike) -> PermissionLike:
    # Known identifiers always compare as enum members
    parsed = Permission.parse(permission)
    return parsed if parsed is not None else permission


def broadening_permission_for(permission: PermissionLike) -> Optional[Permission]:
    """
    Derive the broadening permission for ``permission``'s domain.

    Returns None when the identifier has no domain separator or when the
    domain defines no ``view_all`` permission.
    """
    value = permission.value if isinstance(permission, Permission) else str(permission)
    if PERMISSION_SEPARATOR not in value:
        return None
    domain = value.split(PERMISSION_SEPARATOR, 1)[0]
    return Permission.parse(f"{domain}{PERMISSION_SEPARATOR}{BROADENING_ACTION}")


_ADMIN_EXCLUDED: frozenset[Permission] = frozenset({
    Permission.USER_DELETE,
    Permission.USER_MANAGE_ROLES,
    Permission.SYSTEM_MANAGE_TENANTS,
})

_TEAM_LEADER_PERMISSIONS: frozenset[Permission] = frozenset({
    Permission.USER_VIEW,

    Permission.MEMBER_VIEW,
    Permission.MEMBER_CREATE,
    Permission.MEMBER_UPDATE,
    Permission.MEMBER_VIEW_ALL,
    Permission.MEMBER_ASSIGN,

    Permission.TASK_VIEW,
    Permission.TASK_CREATE,
    Permission.TASK_UPDATE,
    Permission.TASK_VIEW_ALL,
    Permission.TASK_ASSIGN,

    Permission.COMM_SEND_EMAIL,
    Permission.COMM_SEND_SMS,
    Permission.COMM_VIEW_HISTORY,
    Permission.COMM_VIEW_ALL_HISTORY,

    Permission.AI_GENERATE_MESSAGE,
    Permission.AI_ANALYZE_JOURNEY,

    Permission.SETTINGS_VIEW,
    Permission.SETTINGS_UPDATE,

    Permission.REPORTS_VIEW,
    Permission.REPORTS_VIEW_ALL,
    Permission.REPORTS_EXPORT,

    Permission.SYSTEM_VIEW_HEALTH,
})

# Volunteers only see what is assigned to them: no view_all, no deletes.
_VOLUNTEER_PERMISSIONS: frozenset[Permission] = frozenset({
    Permission.USER_VIEW,

    Permission.MEMBER_VIEW,
    Permission.MEMBER_CREATE,
    Permission.MEMBER_UPDATE,

    Permission.TASK_VIEW,
    Permission.TASK_CREATE,
    Permission.TASK_UPDATE,

    Permission.COMM_SEND_EMAIL,
    Permission.COMM_SEND_SMS,
    Permission.COMM_VIEW_HISTORY,

    Permission.AI_GENERATE_MESSAGE,
    Permission.AI_ANALYZE_JOURNEY,

    Permission.SETTINGS_VIEW,

    Permission.REPORTS_VIEW,

    Permission.SYSTEM_VIEW_HEALTH,
})


class PermissionRegistry:
    """
    Read-only role -> permissions table.

    Roles missing from the table hold no permissions; lookups never raise.
    """

    __slots__ = ("_table",)

    def __init__(self, table: Mapping[RoleLike, Iterable[PermissionLike]]) -> None:
        frozen = {
            role_key(role): frozenset(_normalize_permission(p) for p in perms)
            for role, perms in table.items()
        }
        object.__setattr__(self, "_table", MappingProxyType(frozen))

    def __setattr__(self, name, value):
        raise AttributeError("PermissionRegistry is immutable")

    @classmethod
    def default(cls) -> "PermissionRegistry":
        all_permissions = frozenset(Permission)
        return cls({
            Role.SUPER_ADMIN: all_permissions,
            Role.ADMIN: all_permissions - _ADMIN_EXCLUDED,
            Role.TEAM_LEADER: _TEAM_LEADER_PERMISSIONS,
            Role.VOLUNTEER: _VOLUNTEER_PERMISSIONS,
        })

    @property
    def roles(self) -> tuple[str, ...]:
        return tuple(self._table.keys())

    def get_role_permissions(self, role: Optional[RoleLike]) -> frozenset[Permission]:
        return self._table.get(role_key(role), frozenset())

    def __contains__(self, role: object) -> bool:
        return role_key(role) in self._table


ALL_PERMISSIONS: tuple[Permission, ...] = tuple(Permission)

default_registry = PermissionRegistry.default()

ROLE_PERMISSIONS: Mapping[str, frozenset[Permission]] = MappingProxyType(
    {role: default_registry.get_role_permissions(role) for role in default_registry.roles}
)


def get_role_permissions(
    role: Optional[RoleLike],
    registry: Optional[PermissionRegistry] = None,
) -> frozenset[Permission]:
    """Permissions held by ``role``; the empty set for unknown roles."""
    return (registry or default_registry).get_role_permissions(role)


def sorted_permission_values(permissions: Iterable[Permission]) -> list[str]:
    return sorted(p.value for p in permissions)
