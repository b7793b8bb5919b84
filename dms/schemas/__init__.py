"""Pydantic schemas for API validation."""

from .user import UserCreate, UserResponse, LoginRequest, LoginResponse, MeResponse, CategoryAccess
from .category import CategoryCreate, CategoryUpdate, CategoryResponse, GrantRequest, GrantResponse
from .folder import FolderCreate, FolderUpdate, FolderResponse, PersonalFolderResponse
from .document import DocumentCreate, DocumentUpdate, DocumentClone, DocumentResponse
from .version import VersionCreate, VersionResponse
from .comment import CommentCreate, CommentUpdate, CommentResponse
from .file import UploadResponse, SignedUrlResponse
from .audit import AuditEntryResponse

__all__ = [
    "UserCreate", "UserResponse", "LoginRequest", "LoginResponse", "MeResponse", "CategoryAccess",
    "CategoryCreate", "CategoryUpdate", "CategoryResponse", "GrantRequest", "GrantResponse",
    "FolderCreate", "FolderUpdate", "FolderResponse", "PersonalFolderResponse",
    "DocumentCreate", "DocumentUpdate", "DocumentClone", "DocumentResponse",
    "VersionCreate", "VersionResponse",
    "CommentCreate", "CommentUpdate", "CommentResponse",
    "UploadResponse", "SignedUrlResponse",
    "AuditEntryResponse",
]
