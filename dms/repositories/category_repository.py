"""Repository for categories."""

from typing import List

from ..exceptions import CategoryNotFoundError
from ..models import Category
from .base import BaseRepository


class CategoryRepository(BaseRepository[Category]):
    """Repository for category CRUD operations."""

    model_class = Category
    not_found_error = CategoryNotFoundError

    def list_all(self) -> List[Category]:
        return self.db.query(Category).order_by(Category.name).all()
