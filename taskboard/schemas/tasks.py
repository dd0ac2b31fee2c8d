import uuid
from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, StringConstraints

from taskboard.models.enums import TaskStatus

TaskTitle = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=300)]

class TaskCreateIn(BaseModel):
    title: TaskTitle
    status: TaskStatus = TaskStatus.todo

class TaskUpdateIn(BaseModel):
    title: TaskTitle | None = None
    status: TaskStatus | None = None

class TaskOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    project_id: uuid.UUID
    title: str
    status: TaskStatus
    created_at: datetime | None = None
