"""Seed the initial administrator on first startup.

Idempotent: skips if any user exists. The account details come from the
SEED_ADMIN_* settings.
"""

import logging

from sqlalchemy.orm import Session

from .config import Settings

logger = logging.getLogger(__name__)


def seed_initial_admin(db: Session, settings: Settings) -> bool:
    """Create the first system admin if the user table is empty.

    Returns:
        True if an account was created.
    """
    from ..models.user import ROLE_SYSTEM_ADMIN
    from ..repositories import UserRepository
    from ..services import auth_service

    existing = UserRepository(db).count()
    if existing > 0:
        logger.debug("Database has %d users, skipping admin seed", existing)
        return False

    user = auth_service.create_user(
        db,
        name=settings.seed_admin_name,
        email=settings.seed_admin_email,
        password=settings.seed_admin_password,
        role=ROLE_SYSTEM_ADMIN,
    )
    logger.info("Seeded initial admin account", extra={"user_id": user.id, "email": user.email})
    return True
