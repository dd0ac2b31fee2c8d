import uuid
from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, StringConstraints

from taskboard.models.enums import ProjectStatus

ProjectName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]

class ProjectCreateIn(BaseModel):
    name: ProjectName
    description: str = ""
    status: ProjectStatus = ProjectStatus.active

class ProjectUpdateIn(BaseModel):
    name: ProjectName | None = None
    description: str | None = None
    status: ProjectStatus | None = None

class ProjectOut(BaseModel):
    id: uuid.UUID
    owner_id: uuid.UUID
    owner_name: str | None = None
    name: str
    description: str
    status: ProjectStatus
    task_count: int = 0
    completed_tasks: int = 0
    created_at: datetime | None = None

class CapabilitiesOut(BaseModel):
    project_id: uuid.UUID
    is_owner: bool
    can_view: bool
    can_edit: bool
    can_delete: bool
    can_create_task: bool
