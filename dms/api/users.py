"""User administration endpoints (system admins only)."""

from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..core.auth import AuthContext, client_ip, require_admin
from ..database import get_db
from ..schemas.user import UserCreate, UserResponse
from ..services import audit_service, auth_service

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("", response_model=List[UserResponse])
def list_users(
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_admin),
):
    return auth_service.list_users(db)


@router.post("", response_model=UserResponse, status_code=201)
def create_user(
    body: UserCreate,
    request: Request,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_admin),
):
    """Create an account. Duplicate emails are rejected with 409."""
    user = auth_service.create_user(db, body.name, body.email, body.password, body.role)
    audit_service.log(
        db, auth.user_id, "create", "user", resource_id=user.id,
        details={"email": user.email, "role": user.role}, ip_address=client_ip(request),
    )
    return user


@router.delete("/{user_id}", status_code=204)
def delete_user(
    user_id: str,
    request: Request,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_admin),
):
    """Delete an account. Refused for oneself and for users who still own content."""
    auth_service.delete_user(db, user_id, actor_id=auth.user_id)
    audit_service.log(db, auth.user_id, "delete", "user", resource_id=user_id, ip_address=client_ip(request))
    return None
