"""Document endpoints.

Endpoints are thin — DocumentService handles versions, permissions and
file cleanup as one deep module.
"""

from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..core.auth import AuthContext, client_ip, require_auth
from ..database import get_db
from ..schemas.document import DocumentClone, DocumentCreate, DocumentResponse, DocumentUpdate
from ..services import DocumentService, audit_service
from ..storage import BlobStorage
from .deps import get_storage

router = APIRouter(prefix="/api", tags=["documents"])


@router.get("/folders/{folder_id}/documents", response_model=List[DocumentResponse])
def list_documents(
    folder_id: str,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    return DocumentService(db).list_documents(auth, folder_id)


@router.get("/documents/{document_id}", response_model=DocumentResponse)
def get_document(
    document_id: str,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    return DocumentService(db).get_document(auth, document_id)


@router.post("/documents", response_model=DocumentResponse, status_code=201)
def create_document(
    body: DocumentCreate,
    request: Request,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    """Register an uploaded file as a new document with version 1."""
    document = DocumentService(db).create_document(auth, body)
    audit_service.log(
        db, auth.user_id, "create", "document", resource_id=document.id,
        details={"folder_id": document.folder_id, "name": document.name},
        ip_address=client_ip(request),
    )
    return document


@router.put("/documents/{document_id}", response_model=DocumentResponse)
def rename_document(
    document_id: str,
    body: DocumentUpdate,
    request: Request,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    document = DocumentService(db).rename_document(auth, document_id, body.name)
    audit_service.log(
        db, auth.user_id, "update", "document", resource_id=document_id,
        details={"name": body.name}, ip_address=client_ip(request),
    )
    return document


@router.delete("/documents/{document_id}", status_code=204)
def delete_document(
    document_id: str,
    request: Request,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
    storage: BlobStorage = Depends(get_storage),
):
    """Delete a document with all versions and comments."""
    DocumentService(db, storage).delete_document(auth, document_id)
    audit_service.log(db, auth.user_id, "delete", "document", resource_id=document_id, ip_address=client_ip(request))
    return None


@router.post("/documents/{document_id}/clone", response_model=DocumentResponse, status_code=201)
def clone_document(
    document_id: str,
    body: DocumentClone,
    request: Request,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    """Copy the current version into one of the caller's personal folders."""
    clone = DocumentService(db).clone_document(auth, document_id, body.target_folder_id, body.new_name)
    audit_service.log(
        db, auth.user_id, "clone", "document", resource_id=clone.id,
        details={"source_id": document_id, "folder_id": body.target_folder_id},
        ip_address=client_ip(request),
    )
    return clone
