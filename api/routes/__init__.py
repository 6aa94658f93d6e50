"""API route handlers organized by domain."""

from .auth import router as auth_router
from .health import router as health_router
from .notes import router as notes_router
from .tags import router as tags_router
from .upload import router as upload_router
from .views import router as views_router

__all__ = [
    "auth_router",
    "health_router",
    "notes_router",
    "tags_router",
    "upload_router",
    "views_router",
]
