"""Base repository: primary-key lookups plus staged add/delete.

Each subclass names its model and the not-found exception that
``get_by_id`` raises, so services never check for ``None`` themselves.
"""

from typing import TypeVar, Generic, Optional, Type

from sqlalchemy.orm import Session

from ..database import Base
from ..exceptions import DmsException

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """Shared repository logic for SQLAlchemy models.

    Subclasses set:
        model_class:     the mapped class, e.g. Folder
        not_found_error: raised by get_by_id with the missing id
    """

    model_class: Type[ModelT]
    not_found_error: Type[DmsException]

    def __init__(self, db: Session):
        self.db = db

    def get_by_id_optional(self, entity_id: str) -> Optional[ModelT]:
        return self.db.get(self.model_class, entity_id)

    def get_by_id(self, entity_id: str) -> ModelT:
        entity = self.get_by_id_optional(entity_id)
        if entity is None:
            raise self.not_found_error(entity_id)
        return entity

    def add(self, entity: ModelT) -> ModelT:
        """Stage a new row and flush so its generated id is populated."""
        self.db.add(entity)
        self.db.flush()
        return entity

    def delete(self, entity: ModelT) -> None:
        self.db.delete(entity)
        self.db.flush()
