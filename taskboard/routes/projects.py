import uuid

from fastapi import APIRouter, Depends
from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session

from taskboard.db import get_db
from taskboard.models.enums import TaskStatus
from taskboard.models.project import Project
from taskboard.models.task import Task
from taskboard.models.user import User
from taskboard.rbac.actions import Action, ResourceType
from taskboard.rbac.authorizer import Authorizer
from taskboard.rbac.deps import (
    AccessContext,
    Principal,
    get_authorizer,
    get_ownership_resolver,
    get_principal,
    require_action,
    require_permission,
)
from taskboard.rbac.errors import ResourceChanged, ResourceNotFound
from taskboard.rbac.ownership import OwnershipResolver
from taskboard.rbac.perms import Permission
from taskboard.schemas.projects import CapabilitiesOut, ProjectCreateIn, ProjectOut, ProjectUpdateIn

router = APIRouter(prefix="/projects", tags=["projects"])

def _project_query():
    task_count = (
        select(func.count(Task.id))
        .where(Task.project_id == Project.id)
        .correlate(Project)
        .scalar_subquery()
    )
    completed = (
        select(func.count(Task.id))
        .where(Task.project_id == Project.id, Task.status == TaskStatus.done)
        .correlate(Project)
        .scalar_subquery()
    )
    return select(Project, User.name, task_count, completed).join(User, User.id == Project.owner_id)

def _to_out(row) -> ProjectOut:
    p, owner_name, task_count, completed = row
    return ProjectOut(
        id=p.id,
        owner_id=p.owner_id,
        owner_name=owner_name,
        name=p.name,
        description=p.description,
        status=p.status,
        task_count=task_count or 0,
        completed_tasks=completed or 0,
        created_at=p.created_at,
    )

def load_project_out(db: Session, project_id: uuid.UUID) -> ProjectOut:
    row = db.execute(_project_query().where(Project.id == project_id)).first()
    if row is None:
        raise ResourceNotFound("project")
    return _to_out(row)

@router.get("", response_model=list[ProjectOut])
def list_projects(
    principal: Principal = Depends(get_principal),
    authorizer: Authorizer = Depends(get_authorizer),
    db: Session = Depends(get_db),
) -> list[ProjectOut]:
    q = _project_query().order_by(Project.created_at.desc())

    # roles without view_all_projects only see the projects they own
    if not authorizer.authorize(principal.role, Action.view, ResourceType.project, is_owner=False):
        if not authorizer.authorize(principal.role, Action.view, ResourceType.project, is_owner=True):
            return []
        q = q.where(Project.owner_id == principal.id)

    return [_to_out(r) for r in db.execute(q).all()]

@router.post("", response_model=ProjectOut, status_code=201)
def create_project(
    payload: ProjectCreateIn,
    principal: Principal = Depends(require_permission(Permission.create_project)),
    db: Session = Depends(get_db),
) -> ProjectOut:
    p = Project(
        owner_id=principal.id,
        name=payload.name,
        description=payload.description,
        status=payload.status,
    )
    db.add(p)
    db.commit()
    return load_project_out(db, p.id)

@router.get("/{project_id}", response_model=ProjectOut)
def get_project(
    project_id: uuid.UUID,
    access: AccessContext = Depends(require_action(Action.view, ResourceType.project, "project_id")),
    db: Session = Depends(get_db),
) -> ProjectOut:
    return load_project_out(db, access.resource_id)

# what the caller may do with a project, for client-side gating; every route re-checks
@router.get("/{project_id}/capabilities", response_model=CapabilitiesOut)
def project_capabilities(
    project_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    resolver: OwnershipResolver = Depends(get_ownership_resolver),
    authorizer: Authorizer = Depends(get_authorizer),
) -> CapabilitiesOut:
    is_owner = resolver.is_owner(ResourceType.project, project_id, principal.id)
    if not is_owner and resolver.find_owner(ResourceType.project, project_id) is None:
        raise ResourceNotFound("project")

    def can(action: Action, kind: ResourceType = ResourceType.project) -> bool:
        return authorizer.authorize(principal.role, action, kind, is_owner)

    can_view = can(Action.view)
    return CapabilitiesOut(
        project_id=project_id,
        is_owner=is_owner,
        can_view=can_view,
        can_edit=can(Action.edit),
        can_delete=can(Action.delete),
        can_create_task=can_view and can(Action.create, ResourceType.task),
    )

def _apply_update(
    payload: ProjectUpdateIn,
    access: AccessContext,
    db: Session,
) -> ProjectOut:
    values: dict = {}
    if payload.name is not None:
        values["name"] = payload.name
    if payload.description is not None:
        values["description"] = payload.description
    if payload.status is not None:
        values["status"] = payload.status

    if values:
        # single conditional write: only applies while the owner seen by the guard still owns it
        stmt = (
            update(Project)
            .where(Project.id == access.resource_id, Project.owner_id == access.owner_id)
            .values(**values)
            .returning(Project.id)
            .execution_options(synchronize_session=False)
        )
        if db.scalar(stmt) is None:
            db.rollback()
            raise ResourceChanged()
        db.commit()

    return load_project_out(db, access.resource_id)

@router.patch("/{project_id}", response_model=ProjectOut)
def update_project(
    project_id: uuid.UUID,
    payload: ProjectUpdateIn,
    access: AccessContext = Depends(require_action(Action.edit, ResourceType.project, "project_id")),
    db: Session = Depends(get_db),
) -> ProjectOut:
    return _apply_update(payload, access, db)

@router.put("/{project_id}", response_model=ProjectOut)
def replace_project(
    project_id: uuid.UUID,
    payload: ProjectUpdateIn,
    access: AccessContext = Depends(require_action(Action.edit, ResourceType.project, "project_id")),
    db: Session = Depends(get_db),
) -> ProjectOut:
    return _apply_update(payload, access, db)

@router.delete("/{project_id}")
def delete_project(
    project_id: uuid.UUID,
    access: AccessContext = Depends(require_action(Action.delete, ResourceType.project, "project_id")),
    db: Session = Depends(get_db),
) -> dict:
    db.execute(
        delete(Task)
        .where(Task.project_id == access.resource_id)
        .execution_options(synchronize_session=False)
    )
    deleted = db.scalar(
        delete(Project)
        .where(Project.id == access.resource_id, Project.owner_id == access.owner_id)
        .returning(Project.id)
        .execution_options(synchronize_session=False)
    )
    if deleted is None:
        db.rollback()
        raise ResourceChanged()
    db.commit()
    return {"deleted": True}
