"""Category model — the top-level access-control boundary."""

from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.ids import new_id
from ..database import Base


class Category(Base):
    """Groups folders. Only admins create, rename or delete categories."""

    __tablename__ = "categories"

    id = Column(String(50), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    created_by = Column(String(50), ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Folders, documents, versions and grants go with the category (ON DELETE CASCADE).
    folders = relationship("Folder", back_populates="category", passive_deletes="all")
    grants = relationship("AccessGrant", back_populates="category", passive_deletes="all")
