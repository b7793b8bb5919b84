"""API routes."""

from .auth_routes import router as auth_router
from .users import router as users_router
from .categories import router as categories_router
from .folders import router as folders_router
from .documents import router as documents_router
from .versions import router as versions_router
from .comments import router as comments_router
from .files import router as files_router
from .audit import router as audit_router

__all__ = [
    "auth_router",
    "users_router",
    "categories_router",
    "folders_router",
    "documents_router",
    "versions_router",
    "comments_router",
    "files_router",
    "audit_router",
]
