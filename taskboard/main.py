from fastapi import FastAPI

from taskboard.logs import configure_logging
from taskboard.rbac.actions import validate_action_rules
from taskboard.rbac.deps import REQUIRED_ACTIONS
from taskboard.rbac.perms import get_permission_table
from taskboard.routes.auth import router as auth_router
from taskboard.routes.health import router as health_router
from taskboard.routes.projects import router as projects_router
from taskboard.routes.tasks import router as tasks_router
from taskboard.routes.users import router as users_router

def create_app() -> FastAPI:
    configure_logging()
    # routers register their guarded actions on import; refuse to start with a gap
    validate_action_rules(REQUIRED_ACTIONS, get_permission_table())

    app = FastAPI(title="taskboard-api", version="0.1.0")
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(projects_router)
    app.include_router(tasks_router)
    return app

app = create_app()
