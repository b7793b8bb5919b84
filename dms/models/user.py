"""User, AccessGrant, and AuditLog models.

Users authenticate with email/password and receive session tokens.
AccessGrants decide which categories a regular user can see.
AuditLog records state-changing operations for accountability.
"""

from sqlalchemy import Column, String, DateTime, Integer, Text, ForeignKey, UniqueConstraint, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.ids import new_id
from ..database import Base

ROLE_SYSTEM_ADMIN = "system_admin"
ROLE_USER = "user"
ROLES = (ROLE_SYSTEM_ADMIN, ROLE_USER)

ACCESS_FULL = "full"
ACCESS_READ = "read"
ACCESS_LEVELS = (ACCESS_FULL, ACCESS_READ)


class User(Base):
    """User account.

    Roles:
        system_admin — unrestricted access, manages users, categories and grants
        user         — sees only categories it holds an AccessGrant for
    """

    __tablename__ = "users"

    id = Column(String(50), primary_key=True, default=new_id)
    email = Column(String(255), unique=True, nullable=False)
    name = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default=ROLE_USER)
    password_hash = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    grants = relationship(
        "AccessGrant",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
        foreign_keys="[AccessGrant.user_id]",
    )

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_SYSTEM_ADMIN


class AccessGrant(Base):
    """Category-level grant for a regular user.

    One row per (user, category). Granting again overwrites the level.
    ``full`` and ``read`` both give visibility of the category's shared
    folders; writes are governed by permission_service.
    """

    __tablename__ = "access_grants"
    __table_args__ = (
        UniqueConstraint("user_id", "category_id", name="uq_access_grants_user_category"),
        Index("ix_access_grants_category_id", "category_id"),
    )

    id = Column(String(50), primary_key=True, default=new_id)
    user_id = Column(String(50), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    category_id = Column(String(50), ForeignKey("categories.id", ondelete="CASCADE"), nullable=False)
    access_level = Column(String(10), nullable=False, default=ACCESS_READ)
    granted_by = Column(String(50), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    granted_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="grants", foreign_keys=[user_id])
    category = relationship("Category", back_populates="grants")


class AuditLog(Base):
    """Immutable record of state-changing operations.

    Fields:
        action        — login, login_failed, create, update, delete, grant,
                        revoke, upload, clone
        resource_type — user, category, grant, folder, document, version,
                        comment, file
        resource_id   — ID of the affected resource
        details       — JSON string with additional context
    """

    __tablename__ = "audit_log"
    __table_args__ = (
        Index("ix_audit_log_created_at", "created_at"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(50), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    action = Column(String(50), nullable=False)
    resource_type = Column(String(50), nullable=False)
    resource_id = Column(String(255), nullable=True)
    details = Column(Text, nullable=True)
    ip_address = Column(String(45), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
