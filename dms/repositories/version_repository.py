"""Version repository for database operations."""

from typing import Optional

from sqlalchemy import func

from ..exceptions import VersionNotFoundError
from ..models import DocumentVersion
from .base import BaseRepository


class VersionRepository(BaseRepository[DocumentVersion]):
    """Repository for document version CRUD operations."""

    model_class = DocumentVersion
    not_found_error = VersionNotFoundError

    def count_for_document(self, document_id: str) -> int:
        return (
            self.db.query(DocumentVersion)
            .filter(DocumentVersion.document_id == document_id)
            .count()
        )

    def max_version_number(self, document_id: str) -> int:
        """Highest version number in use for a document, 0 when there are none."""
        result = (
            self.db.query(func.max(DocumentVersion.version_number))
            .filter(DocumentVersion.document_id == document_id)
            .scalar()
        )
        return result or 0

    def get_latest(self, document_id: str) -> Optional[DocumentVersion]:
        """The version with the highest number."""
        return (
            self.db.query(DocumentVersion)
            .filter(DocumentVersion.document_id == document_id)
            .order_by(DocumentVersion.version_number.desc())
            .first()
        )

    def public_id_in_use(self, public_id: str) -> bool:
        """Whether any remaining version still points at this stored object."""
        return (
            self.db.query(DocumentVersion.id)
            .filter(DocumentVersion.public_id == public_id)
            .first()
            is not None
        )
