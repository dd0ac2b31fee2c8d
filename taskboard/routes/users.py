import uuid

import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from taskboard.config import settings
from taskboard.db import get_db
from taskboard.models.enums import Role
from taskboard.models.user import User
from taskboard.rbac.actions import Action, ResourceType
from taskboard.rbac.authorizer import Authorizer
from taskboard.rbac.deps import (
    REQUIRED_ACTIONS,
    Principal,
    get_authorizer,
    get_ownership_resolver,
    get_principal,
    require_permission,
)
from taskboard.rbac.errors import PermissionDenied, ResourceNotFound
from taskboard.rbac.ownership import OwnershipResolver
from taskboard.rbac.perms import Permission
from taskboard.schemas.auth import UserOut
from taskboard.schemas.users import RoleUpdateIn

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/users", tags=["users"])

REQUIRED_ACTIONS.add((Action.manage, ResourceType.user))

@router.get("", response_model=list[UserOut])
def list_users(
    _: Principal = Depends(require_permission(Permission.view_users)),
    db: Session = Depends(get_db),
) -> list[UserOut]:
    rows = db.scalars(select(User).order_by(User.created_at.desc())).all()
    return [UserOut.model_validate(u) for u in rows]

def _role_change_guard(
    user_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    resolver: OwnershipResolver = Depends(get_ownership_resolver),
    authorizer: Authorizer = Depends(get_authorizer),
) -> Principal:
    if resolver.find_owner(ResourceType.user, user_id) is None:
        raise ResourceNotFound("user")

    is_self = user_id == principal.id
    if is_self and settings.allow_self_role_change:
        return principal

    if not authorizer.authorize(principal.role, Action.manage, ResourceType.user, is_self):
        logger.info(
            "rbac.denied",
            user_id=str(principal.id),
            role=principal.role.value,
            action=Action.manage.value,
            resource_type=ResourceType.user.value,
            resource_id=str(user_id),
            is_owner=is_self,
        )
        raise PermissionDenied()
    return principal

@router.put("/{user_id}/role", response_model=UserOut)
def update_user_role(
    user_id: uuid.UUID,
    payload: RoleUpdateIn,
    principal: Principal = Depends(_role_change_guard),
    db: Session = Depends(get_db),
) -> UserOut:
    if not Role.is_known(payload.role):
        raise HTTPException(status_code=400, detail="invalid role")
    new_role = Role.parse(payload.role)

    user = db.get(User, user_id)
    if user is None:
        raise ResourceNotFound("user")

    old_role = user.role
    user.role = new_role.value
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info(
        "users.role_changed",
        actor_id=str(principal.id),
        user_id=str(user.id),
        old_role=old_role,
        new_role=user.role,
    )
    return UserOut.model_validate(user)
