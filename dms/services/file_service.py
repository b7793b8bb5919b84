"""File upload and secure download.

Uploads are validated and written to the blob store under ``dms/<user id>``.
Downloads re-check visibility of the version's document before any bytes
are read, so a signed URL is never handed to someone who could not open the
document in the first place.
"""

import logging
import re
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import PurePosixPath
from typing import Optional, Sequence

import httpx
from sqlalchemy.orm import Session

from ..core.auth import AuthContext
from ..exceptions import ForbiddenError, StorageError, ValidationError
from ..models import DocumentVersion
from ..schemas.file import SignedUrlResponse, UploadResponse
from ..storage import BlobContent, BlobStorage
from .document_service import DocumentService, upload_folder

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {
    "application/msword": ".doc",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": ".docx",
    "application/pdf": ".pdf",
    "text/plain": ".txt",
    "application/vnd.ms-excel": ".xls",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": ".xlsx",
}

DEFAULT_CONTENT_TYPE = "application/octet-stream"
LEGACY_FETCH_TIMEOUT = 30.0
DOWNLOAD_CACHE_CONTROL = "private, max-age=3600"

_UNSAFE_NAME_CHARS = re.compile(r"[^a-zA-Z0-9.-]")


@dataclass(frozen=True)
class DownloadPayload:
    data: bytes
    content_type: str
    content_disposition: str
    filename: str


def sanitize_filename(name: str) -> str:
    return _UNSAFE_NAME_CHARS.sub("_", name)


def storage_name(original_name: str, now_ms: Optional[int] = None) -> str:
    """``<unix-ms>-<sanitised name>``, unique enough per user folder."""
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"{stamp}-{sanitize_filename(original_name)}"


def extension_for(document_name: str, content_type: str) -> str:
    """Extension taken from the document name, else inferred from the MIME type."""
    suffix = PurePosixPath(document_name).suffix
    if suffix:
        return suffix
    ct = content_type.lower()
    if "pdf" in ct:
        return ".pdf"
    if "spreadsheet" in ct or "excel" in ct:
        return ".xlsx"
    if "word" in ct or "document" in ct:
        return ".docx"
    if "text" in ct:
        return ".txt"
    return ""


def download_filename(document_name: str, version_number: int, content_type: str) -> str:
    """``<stem>_v<n><ext>``."""
    ext = extension_for(document_name, content_type)
    stem = document_name[: -len(ext)] if ext and document_name.endswith(ext) else document_name
    return f"{stem}_v{version_number}{ext}"


def content_disposition(filename: str, content_type: str, inline: bool) -> str:
    """Inline only for PDFs that were asked to be shown inline."""
    kind = "inline" if inline and content_type == "application/pdf" else "attachment"
    safe = filename.replace('"', "_").encode("ascii", "replace").decode("ascii")
    return f'{kind}; filename="{safe}"'


class FileService:
    """Upload validation plus authorised download and signed-URL issue."""

    def __init__(
        self,
        db: Session,
        storage: BlobStorage,
        max_upload_bytes: int,
        signed_url_expiry: int = 3600,
        http_client: Optional[httpx.Client] = None,
        legacy_url_prefixes: Sequence[str] = (),
    ):
        self.db = db
        self.storage = storage
        self.max_upload_bytes = max_upload_bytes
        self.signed_url_expiry = signed_url_expiry
        self.http_client = http_client
        self.legacy_url_prefixes = tuple(legacy_url_prefixes)
        self.documents = DocumentService(db, storage)

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    def upload(
        self,
        auth: AuthContext,
        filename: Optional[str],
        content_type: Optional[str],
        data: bytes,
    ) -> UploadResponse:
        """Validate and store an uploaded file.

        Raises ValidationError for missing, empty, oversized or unsupported
        files and StorageError when the blob store fails.
        """
        if not filename:
            raise ValidationError("No file uploaded", field="file")
        if not data:
            raise ValidationError("Uploaded file is empty", field="file")
        if len(data) > self.max_upload_bytes:
            limit_mb = self.max_upload_bytes // (1024 * 1024)
            raise ValidationError(f"File too large. Maximum size is {limit_mb}MB", field="file")

        content_type = (content_type or "").split(";")[0].strip().lower()
        if content_type not in ALLOWED_CONTENT_TYPES:
            raise ValidationError(
                "File type not supported. Please upload .doc, .docx, .pdf, .txt, .xlsx, or .xls files.",
                field="file",
            )

        blob = self.storage.put(
            data,
            name=storage_name(filename),
            folder=upload_folder(auth.user_id),
            content_type=content_type,
        )
        logger.info(
            "File uploaded",
            extra={"public_id": blob.public_id, "size": blob.size, "content_type": content_type},
        )
        return UploadResponse(
            url=blob.url,
            public_id=blob.public_id,
            original_name=filename,
            size=blob.size,
            content_type=content_type,
            uploaded_at=datetime.now(timezone.utc),
        )

    # ------------------------------------------------------------------
    # Download
    # ------------------------------------------------------------------

    def download(self, auth: AuthContext, version_id: str, inline: bool = False) -> DownloadPayload:
        version, document = self.documents.get_version_for_download(auth, version_id)
        content = self._read(version)

        if not content.data:
            logger.error("Stored file is empty", extra={"version_id": version_id})
            raise StorageError("File is empty or could not be retrieved", status_code=500)

        content_type = content.content_type or DEFAULT_CONTENT_TYPE
        filename = download_filename(document.name, version.version_number, content_type)
        logger.info(
            "Secure download",
            extra={
                "document_id": document.id,
                "version_number": version.version_number,
                "size": len(content.data),
                "inline": inline,
            },
        )
        return DownloadPayload(
            data=content.data,
            content_type=content_type,
            content_disposition=content_disposition(filename, content_type, inline),
            filename=filename,
        )

    def signed_url(self, auth: AuthContext, version_id: str) -> SignedUrlResponse:
        """Time-limited URL for a version; falls back to the stored URL when
        signing is unavailable."""
        version, _ = self.documents.get_version_for_download(auth, version_id)
        if version.public_id:
            try:
                url = self.storage.sign_url(version.public_id, self.signed_url_expiry)
                return SignedUrlResponse(url=url, expires_in=self.signed_url_expiry, signed=True)
            except StorageError:
                logger.warning(
                    "Signing failed; returning stored URL", extra={"version_id": version_id}
                )
        return SignedUrlResponse(url=version.file_url, expires_in=0, signed=False)

    def _read(self, version: DocumentVersion) -> BlobContent:
        if version.public_id:
            return self.storage.fetch(version.public_id)
        return self._fetch_url(version.file_url)

    def _is_trusted_url(self, url: str) -> bool:
        return self.storage.owns_url(url) or url.startswith(self.legacy_url_prefixes)

    def _fetch_url(self, url: str) -> BlobContent:
        """Fetch a legacy version recorded by URL only.

        Only URLs inside the blob store or under a configured legacy prefix
        are fetched, and redirects are not followed.
        """
        if not self._is_trusted_url(url):
            logger.warning("Refused legacy fetch from untrusted URL", extra={"url": url})
            raise ForbiddenError("File location is not allowed")
        headers = {"Accept": "*/*", "User-Agent": "DMS-SecureDownload/1.0"}
        try:
            if self.http_client is not None:
                response = self.http_client.get(url, headers=headers)
            else:
                with httpx.Client(timeout=LEGACY_FETCH_TIMEOUT, follow_redirects=False) as client:
                    response = client.get(url, headers=headers)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("Legacy file fetch failed", extra={"url": url, "error": str(e)})
            raise StorageError() from e
        content_type = response.headers.get("content-type")
        return BlobContent(data=response.content, content_type=content_type.split(";")[0] if content_type else None)
