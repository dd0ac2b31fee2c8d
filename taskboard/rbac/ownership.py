import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from taskboard.models.project import Project
from taskboard.models.task import Task
from taskboard.models.user import User
from taskboard.rbac.actions import ResourceType

def _as_uuid(value: uuid.UUID | str | None) -> uuid.UUID | None:
    if value is None:
        return None
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None

class OwnershipResolver:
    """Answers "who owns this row" with a single read.

    A task has no owner column; it belongs to whoever owns its project.
    """

    def __init__(self, db: Session):
        self.db = db

    def find_owner(
        self, resource_type: ResourceType | str, resource_id: uuid.UUID | str | None
    ) -> uuid.UUID | None:
        rid = _as_uuid(resource_id)
        if rid is None:
            return None

        try:
            kind = ResourceType(resource_type)
        except ValueError:
            return None

        if kind is ResourceType.project:
            return self.db.scalar(select(Project.owner_id).where(Project.id == rid))
        if kind is ResourceType.task:
            q = (
                select(Project.owner_id)
                .join(Task, Task.project_id == Project.id)
                .where(Task.id == rid)
            )
            return self.db.scalar(q)
        if kind is ResourceType.user:
            return self.db.scalar(select(User.id).where(User.id == rid))
        return None

    def is_owner(
        self,
        resource_type: ResourceType | str,
        resource_id: uuid.UUID | str | None,
        principal_id: uuid.UUID | str | None,
    ) -> bool:
        pid = _as_uuid(principal_id)
        if pid is None:
            return False
        owner = self.find_owner(resource_type, resource_id)
        return owner is not None and owner == pid
