"""Custom exception hierarchy for the DMS."""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Lookup errors
    USER_NOT_FOUND = "USER_NOT_FOUND"
    CATEGORY_NOT_FOUND = "CATEGORY_NOT_FOUND"
    FOLDER_NOT_FOUND = "FOLDER_NOT_FOUND"
    DOCUMENT_NOT_FOUND = "DOCUMENT_NOT_FOUND"
    VERSION_NOT_FOUND = "VERSION_NOT_FOUND"
    COMMENT_NOT_FOUND = "COMMENT_NOT_FOUND"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Auth & rate limiting
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    RATE_LIMITED = "RATE_LIMITED"

    # Uniqueness / concurrency errors
    CONFLICT = "CONFLICT"

    # Blob store errors
    STORAGE_ERROR = "STORAGE_ERROR"

    # Generic errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class DmsException(Exception):
    """
    Base exception for all DMS errors.

    Provides structured error responses with:
    - Human-readable message
    - Machine-readable error code
    - HTTP status code
    - Optional additional details
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            status_code: HTTP status code to return
            details: Optional additional context/details
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for JSON response.

        Returns:
            Dictionary with error, message, and details fields
        """
        return {
            "error": self.error_code.value,
            "message": self.message,
            "details": self.details
        }


class _NotFoundError(DmsException):
    """Shared shape for 404 lookups: one id field named after the entity."""

    entity = "Entity"
    code = ErrorCode.INTERNAL_ERROR
    id_field = "id"

    def __init__(self, entity_id: str):
        super().__init__(
            f"{self.entity} not found: {entity_id}",
            self.code,
            status_code=404,
            details={self.id_field: entity_id}
        )


class UserNotFoundError(_NotFoundError):
    """User not found in database."""
    entity = "User"
    code = ErrorCode.USER_NOT_FOUND
    id_field = "user_id"


class CategoryNotFoundError(_NotFoundError):
    """Category not found in database."""
    entity = "Category"
    code = ErrorCode.CATEGORY_NOT_FOUND
    id_field = "category_id"


class FolderNotFoundError(_NotFoundError):
    """Folder not found in database."""
    entity = "Folder"
    code = ErrorCode.FOLDER_NOT_FOUND
    id_field = "folder_id"


class DocumentNotFoundError(_NotFoundError):
    """Document not found in database."""
    entity = "Document"
    code = ErrorCode.DOCUMENT_NOT_FOUND
    id_field = "document_id"


class VersionNotFoundError(_NotFoundError):
    """Document version not found in database."""
    entity = "Version"
    code = ErrorCode.VERSION_NOT_FOUND
    id_field = "version_id"


class CommentNotFoundError(_NotFoundError):
    """Comment not found in database."""
    entity = "Comment"
    code = ErrorCode.COMMENT_NOT_FOUND
    id_field = "comment_id"


class ValidationError(DmsException):
    """Validation failed for user input."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(
            message,
            ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details=details
        )


class AuthenticationError(DmsException):
    """Request lacks valid authentication credentials."""

    def __init__(self, message: str = "Invalid or missing authentication token"):
        super().__init__(
            message,
            ErrorCode.UNAUTHORIZED,
            status_code=401,
        )


class ForbiddenError(DmsException):
    """Authenticated user lacks the grant or ownership required for the action."""

    def __init__(self, message: str = "You do not have permission to perform this action"):
        super().__init__(
            message,
            ErrorCode.FORBIDDEN,
            status_code=403,
        )


class ConflictError(DmsException):
    """Write collides with existing state (duplicate email, version number race)."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message,
            ErrorCode.CONFLICT,
            status_code=409,
            details=details
        )


class StorageError(DmsException):
    """Blob store operation failed.

    The message returned to the client is generic; the provider error is
    logged by the storage adapter where it happened.
    """

    def __init__(self, message: str = "File storage operation failed", status_code: int = 502):
        super().__init__(
            message,
            ErrorCode.STORAGE_ERROR,
            status_code=status_code,
        )
