import uuid

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from taskboard.db import get_db
from taskboard.models.project import Project
from taskboard.models.task import Task
from taskboard.rbac.actions import Action, ResourceType
from taskboard.rbac.authorizer import Authorizer
from taskboard.rbac.deps import (
    AccessContext,
    Principal,
    get_authorizer,
    get_ownership_resolver,
    require_action,
    require_permission,
)
from taskboard.rbac.errors import PermissionDenied, ResourceChanged, ResourceNotFound
from taskboard.rbac.ownership import OwnershipResolver
from taskboard.rbac.perms import Permission
from taskboard.schemas.tasks import TaskCreateIn, TaskOut, TaskUpdateIn

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/projects/{project_id}/tasks", tags=["tasks"])

@router.get("", response_model=list[TaskOut])
def list_tasks(
    project_id: uuid.UUID,
    access: AccessContext = Depends(require_action(Action.view, ResourceType.project, "project_id")),
    db: Session = Depends(get_db),
) -> list[TaskOut]:
    q = (
        select(Task)
        .where(Task.project_id == access.resource_id)
        .order_by(Task.created_at.desc())
    )
    return [TaskOut.model_validate(t) for t in db.scalars(q).all()]

@router.post("", response_model=TaskOut, status_code=201)
def create_task(
    project_id: uuid.UUID,
    payload: TaskCreateIn,
    principal: Principal = Depends(require_permission(Permission.create_task)),
    resolver: OwnershipResolver = Depends(get_ownership_resolver),
    authorizer: Authorizer = Depends(get_authorizer),
    db: Session = Depends(get_db),
) -> TaskOut:
    owner_id = resolver.find_owner(ResourceType.project, project_id)
    if owner_id is None:
        raise ResourceNotFound("project")

    # tasks can only be added to projects the caller can see
    if not authorizer.authorize(principal.role, Action.view, ResourceType.project, owner_id == principal.id):
        logger.info(
            "rbac.denied",
            user_id=str(principal.id),
            role=principal.role.value,
            action=Action.create.value,
            resource_type=ResourceType.task.value,
            project_id=str(project_id),
        )
        raise PermissionDenied()

    t = Task(project_id=project_id, title=payload.title, status=payload.status)
    db.add(t)
    db.commit()
    db.refresh(t)
    return TaskOut.model_validate(t)

def _owned_by(owner_id: uuid.UUID):
    return Task.project_id.in_(select(Project.id).where(Project.owner_id == owner_id))

def _check_parent(db: Session, project_id: uuid.UUID, access: AccessContext) -> None:
    parent = db.scalar(select(Task.project_id).where(Task.id == access.resource_id))
    if parent != project_id:
        raise ResourceNotFound("task")

def _apply_update(project_id: uuid.UUID, payload: TaskUpdateIn, access: AccessContext, db: Session) -> TaskOut:
    _check_parent(db, project_id, access)

    values: dict = {}
    if payload.title is not None:
        values["title"] = payload.title
    if payload.status is not None:
        values["status"] = payload.status

    if values:
        stmt = (
            update(Task)
            .where(Task.id == access.resource_id, Task.project_id == project_id, _owned_by(access.owner_id))
            .values(**values)
            .returning(Task.id)
            .execution_options(synchronize_session=False)
        )
        if db.scalar(stmt) is None:
            db.rollback()
            raise ResourceChanged()
        db.commit()

    t = db.get(Task, access.resource_id, populate_existing=True)
    if t is None:
        raise ResourceNotFound("task")
    return TaskOut.model_validate(t)

@router.patch("/{task_id}", response_model=TaskOut)
def update_task(
    project_id: uuid.UUID,
    task_id: uuid.UUID,
    payload: TaskUpdateIn,
    access: AccessContext = Depends(require_action(Action.edit, ResourceType.task, "task_id")),
    db: Session = Depends(get_db),
) -> TaskOut:
    return _apply_update(project_id, payload, access, db)

@router.put("/{task_id}", response_model=TaskOut)
def replace_task(
    project_id: uuid.UUID,
    task_id: uuid.UUID,
    payload: TaskUpdateIn,
    access: AccessContext = Depends(require_action(Action.edit, ResourceType.task, "task_id")),
    db: Session = Depends(get_db),
) -> TaskOut:
    return _apply_update(project_id, payload, access, db)

@router.delete("/{task_id}")
def delete_task(
    project_id: uuid.UUID,
    task_id: uuid.UUID,
    access: AccessContext = Depends(require_action(Action.delete, ResourceType.task, "task_id")),
    db: Session = Depends(get_db),
) -> dict:
    _check_parent(db, project_id, access)

    deleted = db.scalar(
        delete(Task)
        .where(Task.id == access.resource_id, Task.project_id == project_id, _owned_by(access.owner_id))
        .returning(Task.id)
        .execution_options(synchronize_session=False)
    )
    if deleted is None:
        db.rollback()
        raise ResourceChanged()
    db.commit()
    return {"deleted": True}
