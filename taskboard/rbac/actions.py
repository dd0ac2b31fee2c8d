from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

from taskboard.rbac.perms import DEFAULT_TABLE, Permission, PermissionTable

class Action(str, Enum):
    view = "view"
    create = "create"
    edit = "edit"
    delete = "delete"
    manage = "manage"

class ResourceType(str, Enum):
    project = "project"
    task = "task"
    user = "user"

@dataclass(frozen=True)
class ActionRule:
    # own is None when ownership makes no difference (e.g. create)
    any: Permission
    own: Permission | None = None

    def permission_for(self, is_owner: bool) -> Permission:
        if is_owner and self.own is not None:
            return self.own
        return self.any

A, R, P = Action, ResourceType, Permission

ACTION_RULES: Mapping[tuple[Action, ResourceType], ActionRule] = MappingProxyType({
    (A.view, R.project): ActionRule(any=P.view_all_projects, own=P.view_own_projects),
    (A.create, R.project): ActionRule(any=P.create_project),
    (A.edit, R.project): ActionRule(any=P.edit_any_project, own=P.edit_own_project),
    (A.delete, R.project): ActionRule(any=P.delete_any_project, own=P.delete_own_project),

    (A.create, R.task): ActionRule(any=P.create_task),
    (A.edit, R.task): ActionRule(any=P.edit_any_task, own=P.edit_own_task),
    (A.delete, R.task): ActionRule(any=P.delete_any_task, own=P.delete_own_task),

    (A.view, R.user): ActionRule(any=P.view_users),
    (A.manage, R.user): ActionRule(any=P.manage_users),
})

def rule_for(action: Action | str, resource_type: ResourceType | str) -> ActionRule | None:
    try:
        key = (Action(action), ResourceType(resource_type))
    except ValueError:
        return None
    return ACTION_RULES.get(key)

def validate_action_rules(
    required: Iterable[tuple[Action, ResourceType]],
    table: PermissionTable = DEFAULT_TABLE,
) -> None:
    """Fail at startup when an enforcement point names an unmapped action."""
    missing = [f"{a.value}:{r.value}" for a, r in required if (a, r) not in ACTION_RULES]
    if missing:
        raise RuntimeError(f"unmapped rbac actions: {', '.join(sorted(missing))}")

    orphaned: list[str] = []
    for (a, r), rule in ACTION_RULES.items():
        if not table.holders_of(rule.any) and (rule.own is None or not table.holders_of(rule.own)):
            orphaned.append(f"{a.value}:{r.value}")
    if orphaned:
        raise RuntimeError(f"rbac actions no role can perform: {', '.join(sorted(orphaned))}")
