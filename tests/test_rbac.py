"""
Tests for the role -> permission registry
"""

import pytest

from pathway_tracker.core.rbac import (
    ALL_PERMISSIONS,
    ROLE_PERMISSIONS,
    Permission,
    PermissionRegistry,
    Role,
    broadening_permission_for,
    default_registry,
    get_role_permissions,
)


def test_super_admin_holds_every_permission():
    assert get_role_permissions(Role.SUPER_ADMIN) == frozenset(Permission)
    assert len(ALL_PERMISSIONS) == 35


def test_admin_holds_everything_but_destructive_user_and_tenant_permissions():
    excluded = {Permission.USER_DELETE, Permission.USER_MANAGE_ROLES, Permission.SYSTEM_MANAGE_TENANTS}

    admin = get_role_permissions(Role.ADMIN)

    assert admin == frozenset(Permission) - excluded
    assert not admin & excluded


def test_volunteer_has_no_delete_or_view_all_permissions():
    volunteer = get_role_permissions(Role.VOLUNTEER)

    assert volunteer
    assert not [p for p in volunteer if p.action == "delete"]
    assert not [p for p in volunteer if p.action == "view_all"]
    assert Permission.COMM_VIEW_ALL_HISTORY not in volunteer


def test_team_leader_can_broaden_members_and_tasks_but_not_delete():
    leader = get_role_permissions(Role.TEAM_LEADER)

    assert Permission.MEMBER_VIEW_ALL in leader
    assert Permission.TASK_VIEW_ALL in leader
    assert Permission.MEMBER_DELETE not in leader
    assert Permission.TASK_DELETE not in leader


@pytest.mark.parametrize("role", [None, "", "GUEST", "super_admin"])
def test_unknown_role_gets_empty_set(role):
    assert get_role_permissions(role) == frozenset()


def test_string_role_names_resolve_like_enum_members():
    assert get_role_permissions("TEAM_LEADER") == get_role_permissions(Role.TEAM_LEADER)


def test_registry_is_immutable():
    with pytest.raises(AttributeError):
        default_registry._table = {}

    with pytest.raises(TypeError):
        ROLE_PERMISSIONS["VOLUNTEER"] = frozenset(Permission)


def test_injected_registry_normalizes_known_identifiers():
    registry = PermissionRegistry({"CUSTOM": ["member:view", "standalone"]})

    perms = registry.get_role_permissions("CUSTOM")

    assert Permission.MEMBER_VIEW in perms
    assert "standalone" in perms
    assert "CUSTOM" in registry
    assert "VOLUNTEER" not in registry


def test_permission_exposes_domain_action_and_broadening_key():
    assert Permission.MEMBER_UPDATE.domain == "member"
    assert Permission.MEMBER_UPDATE.action == "update"
    assert Permission.MEMBER_UPDATE.broadening_key() is Permission.MEMBER_VIEW_ALL
    assert Permission.REPORTS_EXPORT.broadening_key() is Permission.REPORTS_VIEW_ALL


def test_domains_without_view_all_have_no_broadening_key():
    assert Permission.COMM_SEND_SMS.broadening_key() is None
    assert Permission.USER_VIEW.broadening_key() is None
    assert broadening_permission_for("standalone") is None
    assert broadening_permission_for("member:anything") is Permission.MEMBER_VIEW_ALL


def test_parse_returns_none_for_unknown_identifiers():
    assert Permission.parse("task:delete") is Permission.TASK_DELETE
    assert Permission.parse("task:fly") is None
