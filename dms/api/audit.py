"""Audit log endpoint (system admins only)."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..core.auth import AuthContext, require_admin
from ..database import get_db
from ..schemas.audit import AuditEntryResponse
from ..services import audit_service

router = APIRouter(prefix="/api/audit", tags=["audit"])


@router.get("", response_model=List[AuditEntryResponse])
def list_audit_entries(
    limit: int = Query(100, ge=1, le=1000),
    user_id: Optional[str] = None,
    resource_type: Optional[str] = None,
    resource_id: Optional[str] = None,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_admin),
):
    """Most recent entries first."""
    return audit_service.get_recent(
        db, limit=limit, user_id=user_id, resource_type=resource_type, resource_id=resource_id
    )
