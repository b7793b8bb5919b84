"""User and access-grant repositories."""

from typing import List, Optional

from ..exceptions import UserNotFoundError
from ..models import User, AccessGrant, Category
from .base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for user accounts."""

    model_class = User
    not_found_error = UserNotFoundError

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def list_all(self) -> List[User]:
        return self.db.query(User).order_by(User.created_at, User.email).all()

    def count(self) -> int:
        return self.db.query(User).count()


class AccessGrantRepository:
    """Data access for (user, category) grants."""

    def __init__(self, db):
        self.db = db

    def get(self, user_id: str, category_id: str) -> Optional[AccessGrant]:
        return (
            self.db.query(AccessGrant)
            .filter(AccessGrant.user_id == user_id, AccessGrant.category_id == category_id)
            .first()
        )

    def list_for_category(self, category_id: str) -> List[tuple[AccessGrant, User]]:
        """Grants on a category joined with the grantee, ordered by email."""
        return (
            self.db.query(AccessGrant, User)
            .join(User, User.id == AccessGrant.user_id)
            .filter(AccessGrant.category_id == category_id)
            .order_by(User.email)
            .all()
        )

    def list_for_user(self, user_id: str) -> List[tuple[AccessGrant, Category]]:
        """Grants held by a user joined with their category, ordered by name."""
        return (
            self.db.query(AccessGrant, Category)
            .join(Category, Category.id == AccessGrant.category_id)
            .filter(AccessGrant.user_id == user_id)
            .order_by(Category.name)
            .all()
        )

    def levels_for_user(self, user_id: str) -> dict[str, str]:
        """Map of category_id -> access_level for one user."""
        rows = (
            self.db.query(AccessGrant.category_id, AccessGrant.access_level)
            .filter(AccessGrant.user_id == user_id)
            .all()
        )
        return {category_id: level for category_id, level in rows}
