"""Repository for document comments."""

from typing import List

from ..exceptions import CommentNotFoundError
from ..models import DocumentComment
from .base import BaseRepository


class CommentRepository(BaseRepository[DocumentComment]):
    """Repository for comment CRUD operations."""

    model_class = DocumentComment
    not_found_error = CommentNotFoundError

    def get_by_document(self, document_id: str) -> List[DocumentComment]:
        """Every comment on a document (roots and replies), oldest first."""
        return (
            self.db.query(DocumentComment)
            .filter(DocumentComment.document_id == document_id)
            .order_by(DocumentComment.created_at, DocumentComment.id)
            .all()
        )
