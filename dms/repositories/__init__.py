"""Data access repositories."""

from .base import BaseRepository
from .user_repository import UserRepository, AccessGrantRepository
from .category_repository import CategoryRepository
from .folder_repository import FolderRepository
from .document_repository import DocumentRepository
from .version_repository import VersionRepository
from .comment_repository import CommentRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "AccessGrantRepository",
    "CategoryRepository",
    "FolderRepository",
    "DocumentRepository",
    "VersionRepository",
    "CommentRepository",
]
