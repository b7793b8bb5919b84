"""Version endpoints."""

from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..core.auth import AuthContext, client_ip, require_auth
from ..database import get_db
from ..schemas.version import VersionCreate, VersionResponse
from ..services import DocumentService, audit_service
from ..storage import BlobStorage
from .deps import get_storage

router = APIRouter(prefix="/api/documents/{document_id}/versions", tags=["versions"])


@router.get("", response_model=List[VersionResponse])
def list_versions(
    document_id: str,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    """All versions, oldest first, with uploader details."""
    return DocumentService(db).list_versions(auth, document_id)


@router.post("", response_model=VersionResponse, status_code=201)
def add_version(
    document_id: str,
    body: VersionCreate,
    request: Request,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    """Attach a new file as the next version and make it current."""
    version = DocumentService(db).add_version(auth, document_id, body)
    audit_service.log(
        db, auth.user_id, "upload", "version", resource_id=version.id,
        details={"document_id": document_id, "version_number": version.version_number},
        ip_address=client_ip(request),
    )
    return VersionResponse(
        id=version.id,
        document_id=version.document_id,
        version_number=version.version_number,
        file_url=version.file_url,
        public_id=version.public_id,
        uploaded_by=version.uploaded_by,
        uploaded_by_name=auth.name or None,
        uploaded_by_email=auth.email or None,
        created_at=version.created_at,
        is_current=True,
    )


@router.delete("/{version_id}", status_code=204)
def delete_version(
    document_id: str,
    version_id: str,
    request: Request,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
    storage: BlobStorage = Depends(get_storage),
):
    """Delete a version. The only remaining version cannot be deleted."""
    DocumentService(db, storage).delete_version(auth, document_id, version_id)
    audit_service.log(
        db, auth.user_id, "delete", "version", resource_id=version_id,
        details={"document_id": document_id}, ip_address=client_ip(request),
    )
    return None
