import structlog

from taskboard.models.enums import Role
from taskboard.rbac.actions import Action, ResourceType, rule_for
from taskboard.rbac.perms import DEFAULT_TABLE, PermissionTable

logger = structlog.get_logger(__name__)

class Authorizer:
    """Decides (role, action, resource type, ownership) against a permission table.

    Owning a resource never narrows access: an owner is allowed when the role
    holds either the "own" or the "any" permission. A non-owner can only be
    allowed through the "any" permission. Unmapped combinations are denied.
    """

    def __init__(self, table: PermissionTable = DEFAULT_TABLE):
        self.table = table

    def authorize(
        self,
        role: Role | str | None,
        action: Action | str,
        resource_type: ResourceType | str,
        is_owner: bool,
    ) -> bool:
        rule = rule_for(action, resource_type)
        if rule is None:
            logger.warning(
                "rbac.unmapped_action",
                action=str(getattr(action, "value", action)),
                resource_type=str(getattr(resource_type, "value", resource_type)),
                is_owner=bool(is_owner),
            )
            return False

        if self.table.has_permission(role, rule.any):
            return True
        if is_owner is True and rule.own is not None:
            return self.table.has_permission(role, rule.own)
        return False

_default = Authorizer(DEFAULT_TABLE)

def default_authorizer() -> Authorizer:
    return _default

def authorize(
    role: Role | str | None,
    action: Action | str,
    resource_type: ResourceType | str,
    is_owner: bool,
) -> bool:
    return _default.authorize(role, action, resource_type, is_owner)
