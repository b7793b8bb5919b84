"""File upload and secure download endpoints.

    POST /api/files/upload                          — store a file, return its reference
    GET  /api/files/versions/{version_id}/download  — stream a version after an access check
    GET  /api/files/versions/{version_id}/url       — time-limited signed URL
"""

from fastapi import APIRouter, Depends, File, Query, Request, UploadFile
from fastapi.responses import Response
from sqlalchemy.orm import Session

from ..core.auth import AuthContext, client_ip, require_auth
from ..core.config import settings
from ..database import get_db
from ..schemas.file import SignedUrlResponse, UploadResponse
from ..services import FileService, audit_service
from ..services.file_service import DOWNLOAD_CACHE_CONTROL
from ..storage import BlobStorage
from .deps import get_storage

router = APIRouter(prefix="/api/files", tags=["files"])


def _file_service(db: Session, storage: BlobStorage) -> FileService:
    return FileService(
        db,
        storage,
        max_upload_bytes=settings.max_upload_bytes,
        signed_url_expiry=settings.signed_url_expiry_seconds,
        legacy_url_prefixes=settings.get_legacy_url_prefixes(),
    )


@router.post("/upload", response_model=UploadResponse, status_code=201)
def upload_file(
    request: Request,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
    storage: BlobStorage = Depends(get_storage),
):
    """Upload a .doc, .docx, .pdf, .txt, .xls or .xlsx file (max MAX_UPLOAD_MB).

    The returned url/public_id are then passed to ``POST /api/documents`` or
    ``POST /api/documents/{id}/versions``.
    """
    # Runs in the threadpool; one byte past the limit flags an oversized file.
    data = file.file.read(settings.max_upload_bytes + 1)
    result = _file_service(db, storage).upload(auth, file.filename, file.content_type, data)
    audit_service.log(
        db, auth.user_id, "upload", "file", resource_id=result.public_id,
        details={"size": result.size, "content_type": result.content_type},
        ip_address=client_ip(request),
    )
    return result


@router.get("/versions/{version_id}/download")
def download_version(
    version_id: str,
    inline: bool = Query(False, description="Display PDFs inline instead of downloading"),
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
    storage: BlobStorage = Depends(get_storage),
):
    payload = _file_service(db, storage).download(auth, version_id, inline=inline)
    return Response(
        content=payload.data,
        media_type=payload.content_type,
        headers={
            "Content-Disposition": payload.content_disposition,
            "Cache-Control": DOWNLOAD_CACHE_CONTROL,
        },
    )


@router.get("/versions/{version_id}/url", response_model=SignedUrlResponse)
def signed_version_url(
    version_id: str,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
    storage: BlobStorage = Depends(get_storage),
):
    return _file_service(db, storage).signed_url(auth, version_id)
