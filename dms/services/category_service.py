"""Category lifecycle. Creation, rename and deletion are admin-only."""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.auth import AuthContext
from ..exceptions import ForbiddenError
from ..models import Category
from ..repositories import CategoryRepository
from ..storage import BlobStorage
from . import permission_service
from .blob_cleanup import public_ids_for_category, release_unreferenced

logger = logging.getLogger(__name__)


class CategoryService:
    """Categories as seen by one caller."""

    def __init__(self, db: Session, storage: Optional[BlobStorage] = None):
        self.db = db
        self.storage = storage
        self.repo = CategoryRepository(db)

    def list_categories(self, auth: AuthContext) -> List[tuple[Category, str]]:
        """Admins get every category; users get the ones they hold a grant on."""
        return [
            (c, permission_service.access_level(auth, c.id))
            for c in self.repo.list_all()
            if permission_service.can_view_category(auth, c.id)
        ]

    def get_category(self, auth: AuthContext, category_id: str) -> tuple[Category, str]:
        if not permission_service.can_view_category(auth, category_id):
            raise ForbiddenError("You do not have access to this category")
        category = self.repo.get_by_id(category_id)
        return category, permission_service.access_level(auth, category_id)

    def create_category(self, auth: AuthContext, name: str) -> Category:
        category = Category(name=name, created_by=auth.user_id)
        self.repo.add(category)
        self.db.commit()
        self.db.refresh(category)
        logger.info("Category created", extra={"category_id": category.id})
        return category

    def rename_category(self, category_id: str, name: str) -> Category:
        category = self.repo.get_by_id(category_id)
        category.name = name
        self.db.commit()
        self.db.refresh(category)
        return category

    def delete_category(self, category_id: str) -> None:
        """Delete a category with its folders, documents, versions, comments and grants."""
        category = self.repo.get_by_id(category_id)
        public_ids = public_ids_for_category(self.db, category_id)
        self.repo.delete(category)
        self.db.commit()
        logger.info("Category deleted", extra={"category_id": category_id})
        release_unreferenced(self.db, self.storage, public_ids)
