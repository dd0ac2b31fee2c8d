import uuid
from dataclasses import dataclass

import structlog
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from taskboard.auth.deps import get_current_user
from taskboard.db import get_db
from taskboard.models.enums import Role
from taskboard.models.user import User
from taskboard.rbac.actions import ACTION_RULES, Action, ResourceType
from taskboard.rbac.authorizer import Authorizer, default_authorizer
from taskboard.rbac.errors import PermissionDenied, ResourceNotFound
from taskboard.rbac.ownership import OwnershipResolver
from taskboard.rbac.perms import DEFAULT_TABLE, Permission, PermissionTable, get_permission_table

logger = structlog.get_logger(__name__)

# every (action, resource) pair a route guards, checked against ACTION_RULES at startup
REQUIRED_ACTIONS: set[tuple[Action, ResourceType]] = set()

@dataclass(frozen=True)
class Principal:
    id: uuid.UUID
    role: Role

@dataclass(frozen=True)
class AccessContext:
    principal: Principal
    resource_type: ResourceType
    resource_id: uuid.UUID
    owner_id: uuid.UUID
    is_owner: bool

def get_principal(user: User = Depends(get_current_user)) -> Principal:
    return Principal(id=user.id, role=Role.parse(user.role))

def get_ownership_resolver(db: Session = Depends(get_db)) -> OwnershipResolver:
    return OwnershipResolver(db)

def get_authorizer(table: PermissionTable = Depends(get_permission_table)) -> Authorizer:
    if table is DEFAULT_TABLE:
        return default_authorizer()
    return Authorizer(table)

def require_permission(permission: Permission | str):
    try:
        required = Permission(permission)
    except ValueError:
        raise RuntimeError(f"unknown permission: {permission}")

    def _checker(
        principal: Principal = Depends(get_principal),
        table: PermissionTable = Depends(get_permission_table),
    ) -> Principal:
        if not table.has_permission(principal.role, required):
            logger.info(
                "rbac.denied",
                user_id=str(principal.id),
                role=principal.role.value,
                permission=required.value,
            )
            raise PermissionDenied()
        return principal

    return _checker

def require_action(action: Action | str, resource_type: ResourceType | str, id_param: str):
    key = (Action(action), ResourceType(resource_type))
    if key not in ACTION_RULES:
        raise RuntimeError(f"unmapped rbac action: {key[0].value}:{key[1].value}")
    REQUIRED_ACTIONS.add(key)
    act, kind = key

    def _checker(
        request: Request,
        principal: Principal = Depends(get_principal),
        resolver: OwnershipResolver = Depends(get_ownership_resolver),
        authorizer: Authorizer = Depends(get_authorizer),
    ) -> AccessContext:
        raw_id = request.path_params.get(id_param)
        owner_id = resolver.find_owner(kind, raw_id)
        if owner_id is None:
            raise ResourceNotFound(kind.value)

        is_owner = owner_id == principal.id
        if not authorizer.authorize(principal.role, act, kind, is_owner):
            logger.info(
                "rbac.denied",
                user_id=str(principal.id),
                role=principal.role.value,
                action=act.value,
                resource_type=kind.value,
                resource_id=str(raw_id),
                is_owner=is_owner,
            )
            raise PermissionDenied()

        return AccessContext(
            principal=principal,
            resource_type=kind,
            resource_id=uuid.UUID(str(raw_id)),
            owner_id=owner_id,
            is_owner=is_owner,
        )

    return _checker
