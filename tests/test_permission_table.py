from types import MappingProxyType

import pytest

from taskboard.models.enums import Role
from taskboard.rbac.perms import (
    DEFAULT_TABLE,
    ROLE_PERMISSIONS,
    Permission,
    PermissionTable,
    has_permission,
    permissions_for,
)

P = Permission

EXPECTED: dict[Role, set[Permission]] = {
    Role.admin: set(Permission),
    Role.manager: {
        P.view_users,
        P.view_all_projects, P.view_own_projects, P.create_project,
        P.edit_any_project, P.edit_own_project, P.delete_own_project,
        P.create_task, P.edit_any_task, P.edit_own_task, P.delete_any_task, P.delete_own_task,
        P.change_own_password, P.view_settings,
    },
    Role.team_lead: {
        P.view_all_projects, P.view_own_projects, P.create_project,
        P.edit_own_project, P.delete_own_project,
        P.create_task, P.edit_any_task, P.edit_own_task, P.delete_own_task,
        P.change_own_password, P.view_settings,
    },
    Role.developer: {
        P.view_own_projects, P.create_project,
        P.create_task, P.edit_own_task,
        P.change_own_password, P.view_settings,
    },
    Role.viewer: {P.view_own_projects, P.change_own_password, P.view_settings},
}

@pytest.mark.parametrize("role", list(Role))
def test_permissions_for_matches_table(role: Role):
    perms = permissions_for(role)
    assert perms
    assert set(perms) == EXPECTED[role]

@pytest.mark.parametrize("role", list(Role))
@pytest.mark.parametrize("perm", list(Permission))
def test_has_permission_is_membership(role: Role, perm: Permission):
    assert has_permission(role, perm) is (perm in EXPECTED[role])

def test_admin_holds_everything_and_viewer_only_basics():
    assert permissions_for(Role.admin) == frozenset(Permission)
    assert not has_permission(Role.viewer, P.create_task)
    assert not has_permission(Role.viewer, P.create_project)
    assert has_permission(Role.viewer, P.change_own_password)

def test_manager_vs_team_lead():
    manager = permissions_for(Role.manager)
    team_lead = permissions_for(Role.team_lead)
    assert manager - team_lead == {P.view_users, P.edit_any_project, P.delete_any_task}
    # neither may delete someone else's project
    assert P.delete_any_project not in manager | team_lead

@pytest.mark.parametrize("value", ["Team Lead", "team lead", "TEAM_LEAD", "teamlead", "  Team   Lead "])
def test_role_names_parse(value: str):
    assert permissions_for(value) == permissions_for(Role.team_lead)

@pytest.mark.parametrize("value", ["", "root", "superadmin", None, 42, "admin; drop table users"])
def test_unknown_role_gets_viewer_set(value):
    assert permissions_for(value) == permissions_for(Role.viewer)
    assert not has_permission(value, P.manage_users)
    assert not has_permission(value, P.delete_any_project)

def test_unknown_permission_is_never_held():
    assert has_permission(Role.admin, "launch_missiles") is False
    assert has_permission(Role.admin, None) is False
    assert has_permission(Role.admin, "edit_any_project") is True

def test_table_is_read_only():
    assert isinstance(ROLE_PERMISSIONS, MappingProxyType)
    with pytest.raises(TypeError):
        ROLE_PERMISSIONS[Role.viewer] = frozenset(Permission)  # type: ignore[index]
    assert isinstance(permissions_for(Role.viewer), frozenset)

def test_table_must_cover_every_role():
    with pytest.raises(RuntimeError):
        PermissionTable({Role.admin: frozenset(Permission)})

def test_custom_table_is_frozen_copy():
    grants = {r: set(EXPECTED[r]) for r in Role}
    table = PermissionTable(grants)
    grants[Role.viewer].add(P.manage_users)
    assert not table.has_permission(Role.viewer, P.manage_users)

def test_proxy_over_mutable_sets_is_frozen_too():
    grants = {r: set(EXPECTED[r]) for r in Role}
    table = PermissionTable(MappingProxyType(grants))
    grants[Role.viewer].add(P.manage_users)

    assert not table.has_permission(Role.viewer, P.manage_users)
    assert all(isinstance(perms, frozenset) for perms in table.grants.values())

def test_holders_of():
    assert DEFAULT_TABLE.holders_of(P.delete_any_project) == frozenset({Role.admin})
    assert DEFAULT_TABLE.holders_of(P.view_settings) == frozenset(Role)
