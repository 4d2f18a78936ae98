"""Route handlers for Web API."""

from classroom.web.routes.health import router as health_router
from classroom.web.routes.users import router as users_router
from classroom.web.routes.lessons import router as lessons_router
from classroom.web.routes.progress import router as progress_router
from classroom.web.routes.sessions import router as sessions_router

__all__ = [
    "health_router",
    "users_router",
    "lessons_router",
    "progress_router",
    "sessions_router",
]
