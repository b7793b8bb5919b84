"""Comment endpoints."""

from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..core.auth import AuthContext, client_ip, require_auth
from ..database import get_db
from ..schemas.comment import CommentCreate, CommentResponse, CommentUpdate
from ..services import CommentService, audit_service

router = APIRouter(prefix="/api", tags=["comments"])


def _to_response(comment, auth: AuthContext) -> CommentResponse:
    return CommentResponse(
        id=comment.id,
        document_id=comment.document_id,
        parent_comment_id=comment.parent_comment_id,
        content=comment.content,
        author_id=comment.author_id,
        author_name=auth.name or None,
        author_email=auth.email or None,
        is_edited=bool(comment.is_edited),
        created_at=comment.created_at,
        updated_at=comment.updated_at,
        replies=[],
    )


@router.get("/documents/{document_id}/comments", response_model=List[CommentResponse])
def list_comments(
    document_id: str,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    """Threads: root comments oldest first with replies nested."""
    return CommentService(db).list_threads(auth, document_id)


@router.post("/documents/{document_id}/comments", response_model=CommentResponse, status_code=201)
def add_comment(
    document_id: str,
    body: CommentCreate,
    request: Request,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    comment = CommentService(db).add_comment(auth, document_id, body)
    audit_service.log(
        db, auth.user_id, "create", "comment", resource_id=comment.id,
        details={"document_id": document_id}, ip_address=client_ip(request),
    )
    return _to_response(comment, auth)


@router.put("/comments/{comment_id}", response_model=CommentResponse)
def edit_comment(
    comment_id: str,
    body: CommentUpdate,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    """Edit your own comment. Marks it as edited."""
    comment = CommentService(db).edit_comment(auth, comment_id, body.content)
    return _to_response(comment, auth)


@router.delete("/comments/{comment_id}", status_code=204)
def delete_comment(
    comment_id: str,
    request: Request,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    """Delete your own comment and its replies."""
    CommentService(db).delete_comment(auth, comment_id)
    audit_service.log(db, auth.user_id, "delete", "comment", resource_id=comment_id, ip_address=client_ip(request))
    return None
