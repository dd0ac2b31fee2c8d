from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

from taskboard.models.enums import Role

class Permission(str, Enum):
    view_users = "view_users"
    manage_users = "manage_users"

    view_all_projects = "view_all_projects"
    view_own_projects = "view_own_projects"
    create_project = "create_project"
    edit_any_project = "edit_any_project"
    edit_own_project = "edit_own_project"
    delete_any_project = "delete_any_project"
    delete_own_project = "delete_own_project"

    create_task = "create_task"
    edit_any_task = "edit_any_task"
    edit_own_task = "edit_own_task"
    delete_any_task = "delete_any_task"
    delete_own_task = "delete_own_task"

    change_own_password = "change_own_password"
    view_settings = "view_settings"

P = Permission

ROLE_PERMISSIONS: Mapping[Role, frozenset[Permission]] = MappingProxyType({
    Role.admin: frozenset(Permission),

    Role.manager: frozenset({
        P.view_users,
        P.view_all_projects, P.view_own_projects, P.create_project,
        P.edit_any_project, P.edit_own_project, P.delete_own_project,
        P.create_task, P.edit_any_task, P.edit_own_task, P.delete_any_task, P.delete_own_task,
        P.change_own_password, P.view_settings,
    }),

    Role.team_lead: frozenset({
        P.view_all_projects, P.view_own_projects, P.create_project,
        P.edit_own_project, P.delete_own_project,
        P.create_task, P.edit_any_task, P.edit_own_task, P.delete_own_task,
        P.change_own_password, P.view_settings,
    }),

    # may create projects but not edit or delete them afterwards
    Role.developer: frozenset({
        P.view_own_projects, P.create_project,
        P.create_task, P.edit_own_task,
        P.change_own_password, P.view_settings,
    }),

    Role.viewer: frozenset({
        P.view_own_projects,
        P.change_own_password, P.view_settings,
    }),
})

LEAST_PRIVILEGED = Role.viewer

@dataclass(frozen=True)
class PermissionTable:
    """Immutable role -> permission set lookup.

    Every lookup is total: a role name that does not parse resolves to the
    least-privileged role and an unknown permission name is simply not held.
    """

    grants: Mapping[Role, frozenset[Permission]]
    fallback: Role = LEAST_PRIVILEGED

    def __post_init__(self) -> None:
        missing = [r.value for r in Role if r not in self.grants]
        if missing:
            raise RuntimeError(f"permission table has no entry for roles: {missing}")
        # values become frozensets even when grants is already a proxy
        object.__setattr__(
            self, "grants", MappingProxyType({r: frozenset(p) for r, p in self.grants.items()})
        )

    def permissions_for(self, role: Role | str | None) -> frozenset[Permission]:
        parsed = Role.parse(role) if Role.is_known(role) else self.fallback
        return self.grants[parsed]

    def has_permission(self, role: Role | str | None, permission: Permission | str) -> bool:
        try:
            perm = Permission(permission)
        except ValueError:
            return False
        return perm in self.permissions_for(role)

    def holders_of(self, permission: Permission) -> frozenset[Role]:
        return frozenset(r for r, perms in self.grants.items() if permission in perms)

DEFAULT_TABLE = PermissionTable(ROLE_PERMISSIONS)

def get_permission_table() -> PermissionTable:
    return DEFAULT_TABLE

def permissions_for(role: Role | str | None) -> frozenset[Permission]:
    return DEFAULT_TABLE.permissions_for(role)

def has_permission(role: Role | str | None, permission: Permission | str) -> bool:
    return DEFAULT_TABLE.has_permission(role, permission)
