"""Document and DocumentVersion models."""

from datetime import datetime, timezone

from sqlalchemy import Column, Index, Integer, String, Text, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.ids import new_id
from ..database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Document(Base):
    """A named file living in a folder.

    ``file_url`` and ``public_id`` are denormalised copies of the current
    version's file reference, kept in step by DocumentService.
    """

    __tablename__ = "documents"
    __table_args__ = (
        Index("ix_documents_folder_id", "folder_id"),
        Index("ix_documents_created_by", "created_by"),
    )

    id = Column(String(50), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    folder_id = Column(String(50), ForeignKey("folders.id", ondelete="CASCADE"), nullable=False)
    created_by = Column(String(50), ForeignKey("users.id"), nullable=False)

    # Not a foreign key: documents and versions would reference each other.
    current_version_id = Column(String(50), nullable=True)
    file_url = Column(Text, nullable=False)
    public_id = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    folder = relationship("Folder", back_populates="documents")
    versions = relationship(
        "DocumentVersion",
        back_populates="document",
        order_by="DocumentVersion.version_number",
        passive_deletes="all",
    )
    comments = relationship("DocumentComment", back_populates="document", passive_deletes="all")


class DocumentVersion(Base):
    """One uploaded revision of a document.

    version_number is 1-based and strictly increasing per document; numbers
    freed by deletions are not reused while higher numbers exist.
    """

    __tablename__ = "document_versions"
    __table_args__ = (
        UniqueConstraint("document_id", "version_number", name="uq_document_versions_number"),
        Index("ix_document_versions_uploaded_by", "uploaded_by"),
        Index("ix_document_versions_public_id", "public_id"),
    )

    id = Column(String(50), primary_key=True, default=new_id)
    document_id = Column(String(50), ForeignKey("documents.id", ondelete="CASCADE"), nullable=False)
    version_number = Column(Integer, nullable=False)
    file_url = Column(Text, nullable=False)
    public_id = Column(Text, nullable=True)  # NULL for versions recorded by URL only
    uploaded_by = Column(String(50), ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow)

    document = relationship("Document", back_populates="versions")
    uploader = relationship("User")
