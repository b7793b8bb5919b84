"""Repository for documents."""

from typing import List

from ..exceptions import DocumentNotFoundError
from ..models import Document
from .base import BaseRepository


class DocumentRepository(BaseRepository[Document]):
    """Repository for document CRUD operations."""

    model_class = Document
    not_found_error = DocumentNotFoundError

    def list_by_folder(self, folder_id: str) -> List[Document]:
        return (
            self.db.query(Document)
            .filter(Document.folder_id == folder_id)
            .order_by(Document.name)
            .all()
        )

    def count(self) -> int:
        return self.db.query(Document).count()
