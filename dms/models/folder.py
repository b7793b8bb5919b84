"""Folder model."""

from sqlalchemy import Column, Index, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.ids import new_id
from ..database import Base


class Folder(Base):
    """A folder inside a category.

    Shared folders (is_personal=False) are visible to every grantee of the
    category. Personal folders are visible only to their creator.
    """

    __tablename__ = "folders"
    __table_args__ = (
        Index("ix_folders_category_id", "category_id"),
        Index("ix_folders_created_by", "created_by"),
    )

    id = Column(String(50), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    category_id = Column(String(50), ForeignKey("categories.id", ondelete="CASCADE"), nullable=False)
    created_by = Column(String(50), ForeignKey("users.id"), nullable=False)
    is_personal = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    category = relationship("Category", back_populates="folders")
    documents = relationship("Document", back_populates="folder", passive_deletes="all")
