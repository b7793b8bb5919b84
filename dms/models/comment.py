"""Threaded document comments."""

from datetime import datetime, timezone

from sqlalchemy import Column, Index, String, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from ..core.ids import new_id
from ..database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DocumentComment(Base):
    """A comment on a document, optionally replying to another comment.

    Replies are deleted together with their parent.
    """

    __tablename__ = "document_comments"
    __table_args__ = (
        Index("ix_document_comments_document_id", "document_id"),
        Index("ix_document_comments_author_id", "author_id"),
        Index("ix_document_comments_parent_id", "parent_comment_id"),
    )

    id = Column(String(50), primary_key=True, default=new_id)
    document_id = Column(String(50), ForeignKey("documents.id", ondelete="CASCADE"), nullable=False)
    parent_comment_id = Column(
        String(50), ForeignKey("document_comments.id", ondelete="CASCADE"), nullable=True
    )
    content = Column(Text, nullable=False)
    author_id = Column(String(50), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    is_edited = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    document = relationship("Document", back_populates="comments")
    author = relationship("User")
