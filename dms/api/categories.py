"""Category and access-grant endpoints.

Everyone authenticated can list and read the categories visible to them;
creating, renaming, deleting and managing grants is admin-only.
"""

from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..core.auth import AuthContext, client_ip, require_admin, require_auth
from ..database import get_db
from ..schemas.category import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    GrantRequest,
    GrantResponse,
)
from ..services import CategoryService, access_service, audit_service
from ..storage import BlobStorage
from .deps import get_storage

router = APIRouter(prefix="/api/categories", tags=["categories"])


def _category_response(category, access_level) -> CategoryResponse:
    return CategoryResponse(
        id=category.id,
        name=category.name,
        created_by=category.created_by,
        created_at=category.created_at,
        access_level=access_level,
    )


@router.get("", response_model=List[CategoryResponse])
def list_categories(
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    """Admins: every category. Users: granted categories with their level."""
    return [_category_response(c, level) for c, level in CategoryService(db).list_categories(auth)]


@router.get("/{category_id}", response_model=CategoryResponse)
def get_category(
    category_id: str,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    category, level = CategoryService(db).get_category(auth, category_id)
    return _category_response(category, level)


@router.post("", response_model=CategoryResponse, status_code=201)
def create_category(
    body: CategoryCreate,
    request: Request,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_admin),
):
    category = CategoryService(db).create_category(auth, body.name)
    audit_service.log(
        db, auth.user_id, "create", "category", resource_id=category.id,
        details={"name": category.name}, ip_address=client_ip(request),
    )
    return _category_response(category, "full")


@router.put("/{category_id}", response_model=CategoryResponse)
def rename_category(
    category_id: str,
    body: CategoryUpdate,
    request: Request,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_admin),
):
    category = CategoryService(db).rename_category(category_id, body.name)
    audit_service.log(
        db, auth.user_id, "update", "category", resource_id=category_id,
        details={"name": body.name}, ip_address=client_ip(request),
    )
    return _category_response(category, "full")


@router.delete("/{category_id}", status_code=204)
def delete_category(
    category_id: str,
    request: Request,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_admin),
    storage: BlobStorage = Depends(get_storage),
):
    """Delete a category with all its folders, documents and grants."""
    CategoryService(db, storage).delete_category(category_id)
    audit_service.log(db, auth.user_id, "delete", "category", resource_id=category_id, ip_address=client_ip(request))
    return None


# --- Access grants ---


@router.get("/{category_id}/access", response_model=List[GrantResponse])
def list_access(
    category_id: str,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_admin),
):
    return [
        GrantResponse(
            id=g.id,
            user_id=g.user_id,
            category_id=g.category_id,
            access_level=g.access_level,
            granted_by=g.granted_by,
            granted_at=g.granted_at,
            user_email=u.email,
            user_name=u.name,
        )
        for g, u in access_service.list_access(db, category_id)
    ]


@router.put("/{category_id}/access/{user_id}", response_model=GrantResponse)
def grant_access(
    category_id: str,
    user_id: str,
    body: GrantRequest,
    request: Request,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_admin),
):
    """Grant or overwrite a user's access level on a category."""
    grant = access_service.grant_access(db, category_id, user_id, body.access_level, granted_by=auth.user_id)
    audit_service.log(
        db, auth.user_id, "grant", "grant", resource_id=grant.id,
        details={"category_id": category_id, "user_id": user_id, "access_level": body.access_level},
        ip_address=client_ip(request),
    )
    return GrantResponse(
        id=grant.id,
        user_id=grant.user_id,
        category_id=grant.category_id,
        access_level=grant.access_level,
        granted_by=grant.granted_by,
        granted_at=grant.granted_at,
        user_email=grant.user.email,
        user_name=grant.user.name,
    )


@router.delete("/{category_id}/access/{user_id}", status_code=204)
def revoke_access(
    category_id: str,
    user_id: str,
    request: Request,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_admin),
):
    """Revoke a grant. Idempotent."""
    if access_service.revoke_access(db, category_id, user_id):
        audit_service.log(
            db, auth.user_id, "revoke", "grant",
            details={"category_id": category_id, "user_id": user_id},
            ip_address=client_ip(request),
        )
    return None
