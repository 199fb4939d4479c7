"""API layer - FastAPI endpoints (local bridge for the UI)."""

from .projects import router as projects_router
from .session import router as session_router
from .taxonomy import router as config_router
from .users import router as users_router

__all__ = [
    "projects_router",
    "session_router",
    "users_router",
    "config_router",
]
