from enum import Enum

class Role(str, Enum):
    admin = "Admin"
    manager = "Manager"
    team_lead = "Team Lead"
    developer = "Developer"
    viewer = "Viewer"

    @classmethod
    def parse(cls, value: "Role | str | None") -> "Role":
        """Resolve a stored or submitted role name; unknown names fall back to viewer."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return cls.viewer
        key = " ".join(value.replace("_", " ").split()).lower()
        return _ROLE_ALIASES.get(key, cls.viewer)

    @classmethod
    def is_known(cls, value: str | None) -> bool:
        if not isinstance(value, str):
            return False
        key = " ".join(value.replace("_", " ").split()).lower()
        return key in _ROLE_ALIASES

_ROLE_ALIASES: dict[str, Role] = {
    "admin": Role.admin,
    "manager": Role.manager,
    "team lead": Role.team_lead,
    "teamlead": Role.team_lead,
    "developer": Role.developer,
    "viewer": Role.viewer,
}

class ProjectStatus(str, Enum):
    active = "active"
    completed = "completed"
    on_hold = "on-hold"

class TaskStatus(str, Enum):
    todo = "todo"
    in_progress = "in-progress"
    done = "done"

class AuthProvider(str, Enum):
    email = "email"
    google = "google"
