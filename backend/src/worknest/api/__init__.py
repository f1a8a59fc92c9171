"""API routers for Worknest."""

from .auth import router as auth_router
from .folders import router as folders_router
from .health import router as health_router
from .notes import router as notes_router
from .servers import router as servers_router
from .user import router as user_router
from .workspace import router as workspace_router

__all__ = [
    "auth_router",
    "folders_router",
    "health_router",
    "notes_router",
    "servers_router",
    "user_router",
    "workspace_router",
]
