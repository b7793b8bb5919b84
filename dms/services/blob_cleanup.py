"""Release stored objects that no version references any more."""

import logging
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from ..exceptions import StorageError
from ..models import Document, DocumentVersion, Folder
from ..repositories import VersionRepository
from ..storage import BlobStorage

logger = logging.getLogger(__name__)


def public_ids_for_document(db: Session, document_id: str) -> set[str]:
    rows = (
        db.query(DocumentVersion.public_id)
        .filter(DocumentVersion.document_id == document_id, DocumentVersion.public_id.isnot(None))
        .all()
    )
    return {r[0] for r in rows}


def public_ids_for_folder(db: Session, folder_id: str) -> set[str]:
    rows = (
        db.query(DocumentVersion.public_id)
        .join(Document, Document.id == DocumentVersion.document_id)
        .filter(Document.folder_id == folder_id, DocumentVersion.public_id.isnot(None))
        .all()
    )
    return {r[0] for r in rows}


def public_ids_for_category(db: Session, category_id: str) -> set[str]:
    rows = (
        db.query(DocumentVersion.public_id)
        .join(Document, Document.id == DocumentVersion.document_id)
        .join(Folder, Folder.id == Document.folder_id)
        .filter(Folder.category_id == category_id, DocumentVersion.public_id.isnot(None))
        .all()
    )
    return {r[0] for r in rows}


def release_unreferenced(
    db: Session, storage: Optional[BlobStorage], public_ids: Iterable[str]
) -> int:
    """Delete each object no remaining version points at.

    Runs after the owning rows are committed. Storage failures are logged
    and skipped. Returns the number of objects deleted.
    """
    if storage is None:
        return 0

    repo = VersionRepository(db)
    released = 0
    for public_id in sorted(set(public_ids)):
        if repo.public_id_in_use(public_id):
            continue
        try:
            storage.delete(public_id)
            released += 1
        except StorageError:
            logger.warning("Could not delete stored object", extra={"public_id": public_id})
    if released:
        logger.info("Released stored objects", extra={"count": released})
    return released
