"""Business logic services."""

from .category_service import CategoryService
from .comment_service import CommentService
from .document_service import DocumentService
from .file_service import FileService
from .folder_service import FolderService

__all__ = ["CategoryService", "CommentService", "DocumentService", "FileService", "FolderService"]
