"""Category access grants: grant, overwrite, revoke, list."""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from ..exceptions import ValidationError
from ..models import AccessGrant, User
from ..models.user import ACCESS_LEVELS
from ..repositories import AccessGrantRepository, CategoryRepository, UserRepository

logger = logging.getLogger(__name__)


def grant_access(
    db: Session,
    category_id: str,
    user_id: str,
    access_level: str,
    granted_by: Optional[str] = None,
) -> AccessGrant:
    """Give a user access to a category.

    An existing grant for the same (user, category) is overwritten with the
    new level, grantor and timestamp.
    """
    if access_level not in ACCESS_LEVELS:
        raise ValidationError(f"Invalid access level: {access_level}", field="access_level")

    CategoryRepository(db).get_by_id(category_id)
    UserRepository(db).get_by_id(user_id)

    repo = AccessGrantRepository(db)
    grant = repo.get(user_id, category_id)
    if grant is None:
        grant = AccessGrant(user_id=user_id, category_id=category_id)
        db.add(grant)
    grant.access_level = access_level
    grant.granted_by = granted_by
    grant.granted_at = datetime.now(timezone.utc)

    db.commit()
    db.refresh(grant)
    logger.info(
        "Access granted",
        extra={"category_id": category_id, "grantee": user_id, "access_level": access_level},
    )
    return grant


def revoke_access(db: Session, category_id: str, user_id: str) -> bool:
    """Remove a grant. Returns True if one was removed."""
    CategoryRepository(db).get_by_id(category_id)
    grant = AccessGrantRepository(db).get(user_id, category_id)
    if grant is None:
        return False
    db.delete(grant)
    db.commit()
    logger.info("Access revoked", extra={"category_id": category_id, "grantee": user_id})
    return True


def list_access(db: Session, category_id: str) -> list[tuple[AccessGrant, User]]:
    CategoryRepository(db).get_by_id(category_id)
    return AccessGrantRepository(db).list_for_category(category_id)
