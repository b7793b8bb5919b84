"""Threaded document comments."""

import logging
from typing import Dict, List

from sqlalchemy.orm import Session

from ..core.auth import AuthContext
from ..exceptions import ForbiddenError, ValidationError
from ..models import DocumentComment, User
from ..repositories import CommentRepository
from ..schemas.comment import CommentCreate, CommentResponse
from . import permission_service
from .document_service import DocumentService

logger = logging.getLogger(__name__)


class CommentService:
    """Read and write comments on documents the caller can see.

    Editing and deleting are restricted to the author, admins included.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = CommentRepository(db)
        self.documents = DocumentService(db)

    def list_threads(self, auth: AuthContext, document_id: str) -> List[CommentResponse]:
        """Root comments oldest first, each with its replies nested."""
        self.documents.get_document(auth, document_id)
        comments = self.repo.get_by_document(document_id)

        author_ids = {c.author_id for c in comments}
        authors: Dict[str, User] = {}
        if author_ids:
            authors = {u.id: u for u in self.db.query(User).filter(User.id.in_(author_ids)).all()}

        nodes: Dict[str, CommentResponse] = {}
        for c in comments:
            author = authors.get(c.author_id)
            nodes[c.id] = CommentResponse(
                id=c.id,
                document_id=c.document_id,
                parent_comment_id=c.parent_comment_id,
                content=c.content,
                author_id=c.author_id,
                author_name=author.name if author else None,
                author_email=author.email if author else None,
                is_edited=bool(c.is_edited),
                created_at=c.created_at,
                updated_at=c.updated_at,
                replies=[],
            )

        roots: List[CommentResponse] = []
        for c in comments:
            node = nodes[c.id]
            parent = nodes.get(c.parent_comment_id) if c.parent_comment_id else None
            if parent is not None:
                parent.replies.append(node)
            else:
                roots.append(node)
        return roots

    def add_comment(self, auth: AuthContext, document_id: str, data: CommentCreate) -> DocumentComment:
        self.documents.get_document(auth, document_id)
        if data.parent_comment_id:
            parent = self.repo.get_by_id_optional(data.parent_comment_id)
            if parent is None or parent.document_id != document_id:
                raise ValidationError(
                    "Parent comment does not belong to this document", field="parent_comment_id"
                )

        comment = DocumentComment(
            document_id=document_id,
            parent_comment_id=data.parent_comment_id,
            content=data.content,
            author_id=auth.user_id,
        )
        self.repo.add(comment)
        self.db.commit()
        self.db.refresh(comment)
        logger.info("Comment added", extra={"comment_id": comment.id, "document_id": document_id})
        return comment

    def edit_comment(self, auth: AuthContext, comment_id: str, content: str) -> DocumentComment:
        comment = self._get_own(auth, comment_id)
        comment.content = content
        comment.is_edited = True
        self.db.commit()
        self.db.refresh(comment)
        return comment

    def delete_comment(self, auth: AuthContext, comment_id: str) -> None:
        """Delete a comment together with its replies."""
        comment = self._get_own(auth, comment_id)
        self.repo.delete(comment)
        self.db.commit()
        logger.info("Comment deleted", extra={"comment_id": comment_id})

    def _get_own(self, auth: AuthContext, comment_id: str) -> DocumentComment:
        comment = self.repo.get_by_id(comment_id)
        self.documents.get_document(auth, comment.document_id)
        if not permission_service.can_edit_comment(auth, comment):
            raise ForbiddenError("You can only modify your own comments")
        return comment
