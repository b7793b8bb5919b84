"""Database models."""

from .user import User, AccessGrant, AuditLog
from .category import Category
from .folder import Folder
from .document import Document, DocumentVersion
from .comment import DocumentComment

__all__ = [
    "User", "AccessGrant", "AuditLog",
    "Category", "Folder",
    "Document", "DocumentVersion",
    "DocumentComment",
]
