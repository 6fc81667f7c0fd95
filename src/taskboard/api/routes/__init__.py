"""HTTP routers."""

from taskboard.api.routes.auth import router as auth_router
from taskboard.api.routes.projects import router as projects_router
from taskboard.api.routes.tasks import router as tasks_router

__all__ = ["auth_router", "projects_router", "tasks_router"]
