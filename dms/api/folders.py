"""Folder endpoints."""

from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..core.auth import AuthContext, client_ip, require_auth
from ..database import get_db
from ..schemas.folder import FolderCreate, FolderResponse, FolderUpdate, PersonalFolderResponse
from ..services import FolderService, audit_service
from ..storage import BlobStorage
from .deps import get_storage

router = APIRouter(prefix="/api", tags=["folders"])


@router.get("/categories/{category_id}/folders", response_model=List[FolderResponse])
def list_folders(
    category_id: str,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    """Shared folders plus the caller's personal folders (admins: all folders)."""
    return FolderService(db).list_folders(auth, category_id)


@router.get("/folders/personal", response_model=List[PersonalFolderResponse])
def list_personal_folders(
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    """The caller's personal folders across categories, for picking a clone target."""
    return [
        PersonalFolderResponse(
            id=f.id,
            name=f.name,
            category_id=f.category_id,
            created_by=f.created_by,
            is_personal=f.is_personal,
            created_at=f.created_at,
            category_name=c.name,
        )
        for f, c in FolderService(db).list_personal_folders(auth)
    ]


@router.post("/folders", response_model=FolderResponse, status_code=201)
def create_folder(
    body: FolderCreate,
    request: Request,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    folder = FolderService(db).create_folder(auth, body)
    audit_service.log(
        db, auth.user_id, "create", "folder", resource_id=folder.id,
        details={"category_id": folder.category_id, "is_personal": folder.is_personal},
        ip_address=client_ip(request),
    )
    return folder


@router.put("/folders/{folder_id}", response_model=FolderResponse)
def rename_folder(
    folder_id: str,
    body: FolderUpdate,
    request: Request,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    folder = FolderService(db).rename_folder(auth, folder_id, body.name)
    audit_service.log(
        db, auth.user_id, "update", "folder", resource_id=folder_id,
        details={"name": body.name}, ip_address=client_ip(request),
    )
    return folder


@router.delete("/folders/{folder_id}", status_code=204)
def delete_folder(
    folder_id: str,
    request: Request,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
    storage: BlobStorage = Depends(get_storage),
):
    """Delete a folder and all documents in it."""
    FolderService(db, storage).delete_folder(auth, folder_id)
    audit_service.log(db, auth.user_id, "delete", "folder", resource_id=folder_id, ip_address=client_ip(request))
    return None
