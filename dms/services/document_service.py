"""Document service — deep module for document and version lifecycle.

Owns document CRUD, version numbering, current-version bookkeeping, cloning
and release of stored files. Every public method takes the caller's
AuthContext and enforces permission_service rules before touching rows.
"""

import logging
import re
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.auth import AuthContext
from ..exceptions import ConflictError, ForbiddenError, ValidationError, VersionNotFoundError
from ..models import Document, DocumentVersion, Folder, User
from ..repositories import DocumentRepository, FolderRepository, VersionRepository
from ..schemas.document import DocumentCreate
from ..schemas.version import VersionCreate, VersionResponse
from ..storage import BlobStorage
from . import permission_service
from .blob_cleanup import public_ids_for_document, release_unreferenced

logger = logging.getLogger(__name__)

CLONE_SUFFIX = " (Copy)"
UPLOAD_ROOT = "dms"

_UPLOAD_NAME = re.compile(r"^[A-Za-z0-9._-]+$")


def upload_folder(user_id: str) -> str:
    """Blob-store folder holding one user's uploads."""
    return f"{UPLOAD_ROOT}/{user_id}"


class DocumentService:
    """Deep module for document operations.

    The caller never coordinates versions and documents itself: creating a
    document records version 1, deleting a version re-points the current
    version, and deletions release files nothing else references.
    """

    def __init__(self, db: Session, storage: Optional[BlobStorage] = None):
        self.db = db
        self.storage = storage
        self.doc_repo = DocumentRepository(db)
        self.folder_repo = FolderRepository(db)
        self.version_repo = VersionRepository(db)

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def list_documents(self, auth: AuthContext, folder_id: str) -> List[Document]:
        folder = self.folder_repo.get_by_id(folder_id)
        self._require_folder_visible(auth, folder)
        return self.doc_repo.list_by_folder(folder_id)

    def get_document(self, auth: AuthContext, document_id: str) -> Document:
        """Load a document the caller is allowed to see."""
        document = self.doc_repo.get_by_id(document_id)
        self._require_folder_visible(auth, document.folder)
        return document

    def create_document(self, auth: AuthContext, data: DocumentCreate) -> Document:
        """Create a document with its first version.

        Regular users may only create documents in their own personal
        folders.
        """
        folder = self.folder_repo.get_by_id(data.folder_id)
        self._require_folder_visible(auth, folder)
        if not permission_service.can_write_folder(auth, folder):
            raise ForbiddenError("You can only add documents to your own personal folders")
        self._require_own_upload(auth, data.public_id)

        document = self._insert_document(
            name=data.name,
            folder_id=folder.id,
            created_by=auth.user_id,
            file_url=data.file_url,
            public_id=data.public_id,
        )
        self.db.commit()
        self.db.refresh(document)
        logger.info("Document created", extra={"document_id": document.id, "folder_id": folder.id})
        return document

    def rename_document(self, auth: AuthContext, document_id: str, name: str) -> Document:
        document = self._get_modifiable(auth, document_id)
        document.name = name
        self.db.commit()
        self.db.refresh(document)
        return document

    def delete_document(self, auth: AuthContext, document_id: str) -> None:
        """Delete a document with its versions and comments."""
        document = self._get_modifiable(auth, document_id)
        public_ids = public_ids_for_document(self.db, document_id)
        self.doc_repo.delete(document)
        self.db.commit()
        logger.info("Document deleted", extra={"document_id": document_id})
        release_unreferenced(self.db, self.storage, public_ids)

    def clone_document(
        self,
        auth: AuthContext,
        document_id: str,
        target_folder_id: str,
        new_name: Optional[str] = None,
    ) -> Document:
        """Copy a document's current version into one of the caller's
        personal folders as a new document with a single version.

        The clone shares the source's stored file; no bytes are copied.
        """
        source = self.get_document(auth, document_id)
        target = self.folder_repo.get_by_id(target_folder_id)
        if not permission_service.can_clone_into(auth, target):
            raise ForbiddenError("Documents can only be cloned into your own personal folders")

        current = self._current_version(source)
        file_url = current.file_url if current else source.file_url
        public_id = current.public_id if current else source.public_id

        clone = self._insert_document(
            name=new_name or f"{source.name}{CLONE_SUFFIX}",
            folder_id=target.id,
            created_by=auth.user_id,
            file_url=file_url,
            public_id=public_id,
        )
        self.db.commit()
        self.db.refresh(clone)
        logger.info(
            "Document cloned",
            extra={"source_id": source.id, "document_id": clone.id, "folder_id": target.id},
        )
        return clone

    # ------------------------------------------------------------------
    # Versions
    # ------------------------------------------------------------------

    def list_versions(self, auth: AuthContext, document_id: str) -> List[VersionResponse]:
        """Versions oldest first, with uploader name and email."""
        document = self.get_document(auth, document_id)
        rows = (
            self.db.query(DocumentVersion, User)
            .outerjoin(User, User.id == DocumentVersion.uploaded_by)
            .filter(DocumentVersion.document_id == document_id)
            .order_by(DocumentVersion.version_number)
            .all()
        )
        return [
            VersionResponse(
                id=v.id,
                document_id=v.document_id,
                version_number=v.version_number,
                file_url=v.file_url,
                public_id=v.public_id,
                uploaded_by=v.uploaded_by,
                uploaded_by_name=u.name if u else None,
                uploaded_by_email=u.email if u else None,
                created_at=v.created_at,
                is_current=v.id == document.current_version_id,
            )
            for v, u in rows
        ]

    def add_version(self, auth: AuthContext, document_id: str, data: VersionCreate) -> DocumentVersion:
        """Record a new version numbered max(existing) + 1 and make it current.

        A concurrent upload that claims the same number loses on the unique
        constraint and gets a ConflictError.
        """
        document = self._get_modifiable(auth, document_id)
        self._require_own_upload(auth, data.public_id)
        number = self.version_repo.max_version_number(document_id) + 1

        version = DocumentVersion(
            document_id=document_id,
            version_number=number,
            file_url=data.file_url,
            public_id=data.public_id,
            uploaded_by=auth.user_id,
        )
        try:
            self.version_repo.add(version)
            self._make_current(document, version)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(
                "Version number collision",
                extra={"document_id": document_id, "version_number": number},
            )
            raise ConflictError(
                "Another version was uploaded at the same time; retry",
                details={"document_id": document_id, "version_number": number},
            ) from e

        self.db.refresh(version)
        logger.info(
            "Version added",
            extra={"document_id": document_id, "version_id": version.id, "version_number": number},
        )
        return version

    def delete_version(self, auth: AuthContext, document_id: str, version_id: str) -> None:
        """Delete a version. Deleting the current one re-points the document
        at the highest remaining version. The only version cannot be deleted."""
        document = self._get_modifiable(auth, document_id)
        version = self.version_repo.get_by_id(version_id)
        if version.document_id != document_id:
            raise VersionNotFoundError(version_id)

        if self.version_repo.count_for_document(document_id) <= 1:
            raise ValidationError("Cannot delete the only version of a document", field="version_id")

        public_id = version.public_id
        was_current = document.current_version_id == version_id
        self.version_repo.delete(version)

        if was_current:
            latest = self.version_repo.get_latest(document_id)
            self._make_current(document, latest)

        self.db.commit()
        logger.info(
            "Version deleted",
            extra={"document_id": document_id, "version_id": version_id, "was_current": was_current},
        )
        if public_id:
            release_unreferenced(self.db, self.storage, [public_id])

    def get_version_for_download(
        self, auth: AuthContext, version_id: str
    ) -> tuple[DocumentVersion, Document]:
        """Resolve a version and re-check visibility of its document."""
        version = self.version_repo.get_by_id(version_id)
        document = self.get_document(auth, version.document_id)
        return version, document

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _insert_document(
        self,
        name: str,
        folder_id: str,
        created_by: str,
        file_url: str,
        public_id: Optional[str],
    ) -> Document:
        document = Document(
            name=name,
            folder_id=folder_id,
            created_by=created_by,
            file_url=file_url,
            public_id=public_id,
        )
        self.doc_repo.add(document)
        version = DocumentVersion(
            document_id=document.id,
            version_number=1,
            file_url=file_url,
            public_id=public_id,
            uploaded_by=created_by,
        )
        self.version_repo.add(version)
        self._make_current(document, version)
        return document

    @staticmethod
    def _make_current(document: Document, version: DocumentVersion) -> None:
        document.current_version_id = version.id
        document.file_url = version.file_url
        document.public_id = version.public_id

    def _current_version(self, document: Document) -> Optional[DocumentVersion]:
        if document.current_version_id:
            version = self.version_repo.get_by_id_optional(document.current_version_id)
            if version is not None:
                return version
        return self.version_repo.get_latest(document.id)

    def _require_folder_visible(self, auth: AuthContext, folder: Folder) -> None:
        if not permission_service.can_view_folder(auth, folder):
            raise ForbiddenError("You do not have access to this folder")

    def _get_modifiable(self, auth: AuthContext, document_id: str) -> Document:
        document = self.get_document(auth, document_id)
        if not permission_service.can_modify_document(auth, document, document.folder):
            raise ForbiddenError("You can only modify your own documents in your personal folders")
        return document

    def _require_own_upload(self, auth: AuthContext, public_id: str) -> None:
        """Only objects the caller uploaded may be registered as documents
        or versions; anything else would bypass category visibility."""
        folder, _, name = public_id.rpartition("/")
        if folder != upload_folder(auth.user_id) or not _UPLOAD_NAME.match(name) or name in (".", ".."):
            logger.warning(
                "Rejected foreign file reference",
                extra={"user_id": auth.user_id, "public_id": public_id},
            )
            raise ForbiddenError("You can only register files you uploaded")
