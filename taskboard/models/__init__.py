from taskboard.models.project import Project
from taskboard.models.task import Task
from taskboard.models.user import User

__all__ = ["User", "Project", "Task"]
