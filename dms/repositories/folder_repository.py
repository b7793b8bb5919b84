"""Repository for folders."""

from typing import List

from sqlalchemy import or_

from ..exceptions import FolderNotFoundError
from ..models import Folder, Category
from .base import BaseRepository


class FolderRepository(BaseRepository[Folder]):
    """Data access layer for folders."""

    model_class = Folder
    not_found_error = FolderNotFoundError

    def list_by_category(self, category_id: str) -> List[Folder]:
        """Every folder in the category, shared and personal."""
        return (
            self.db.query(Folder)
            .filter(Folder.category_id == category_id)
            .order_by(Folder.is_personal, Folder.name)
            .all()
        )

    def list_visible_in_category(self, category_id: str, user_id: str) -> List[Folder]:
        """Shared folders in the category plus the user's own personal folders."""
        return (
            self.db.query(Folder)
            .filter(
                Folder.category_id == category_id,
                or_(Folder.is_personal.is_(False), Folder.created_by == user_id),
            )
            .order_by(Folder.is_personal, Folder.name)
            .all()
        )

    def list_personal_for_user(self, user_id: str) -> List[tuple[Folder, Category]]:
        """All personal folders owned by a user, with their category."""
        return (
            self.db.query(Folder, Category)
            .join(Category, Category.id == Folder.category_id)
            .filter(Folder.is_personal.is_(True), Folder.created_by == user_id)
            .order_by(Category.name, Folder.name)
            .all()
        )
