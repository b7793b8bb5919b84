"""Folder operations: listing, personal folders, create, rename, delete."""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.auth import AuthContext
from ..exceptions import ForbiddenError
from ..models import Category, Folder
from ..repositories import CategoryRepository, FolderRepository
from ..schemas.folder import FolderCreate
from ..storage import BlobStorage
from . import permission_service
from .blob_cleanup import public_ids_for_folder, release_unreferenced

logger = logging.getLogger(__name__)


class FolderService:
    """Folder operations behind a narrow interface.

    Public methods:
        list_folders          -- visible folders of a category
        list_personal_folders -- caller's personal folders (clone targets)
        get_folder            -- lookup with visibility check
        create_folder
        rename_folder
        delete_folder         -- cascades to documents and releases their files
    """

    def __init__(self, db: Session, storage: Optional[BlobStorage] = None):
        self.db = db
        self.storage = storage
        self.repo = FolderRepository(db)
        self.category_repo = CategoryRepository(db)

    def list_folders(self, auth: AuthContext, category_id: str) -> List[Folder]:
        """Admins see every folder. Users see shared folders plus their own
        personal folders, and need a grant on the category."""
        if not permission_service.can_view_category(auth, category_id):
            raise ForbiddenError("You do not have access to this category")
        self.category_repo.get_by_id(category_id)
        if auth.is_admin:
            return self.repo.list_by_category(category_id)
        return self.repo.list_visible_in_category(category_id, auth.user_id)

    def list_personal_folders(self, auth: AuthContext) -> List[tuple[Folder, Category]]:
        """The caller's personal folders in categories it can still see."""
        return [
            (folder, category)
            for folder, category in self.repo.list_personal_for_user(auth.user_id)
            if permission_service.can_view_category(auth, category.id)
        ]

    def get_folder(self, auth: AuthContext, folder_id: str) -> Folder:
        folder = self.repo.get_by_id(folder_id)
        if not permission_service.can_view_folder(auth, folder):
            raise ForbiddenError("You do not have access to this folder")
        return folder

    def create_folder(self, auth: AuthContext, data: FolderCreate) -> Folder:
        """Create a folder.

        Regular users may only create personal folders, and only in
        categories they hold a grant on. When is_personal is omitted it
        defaults to personal for users and shared for admins.
        """
        is_personal = data.is_personal if data.is_personal is not None else not auth.is_admin

        if not permission_service.can_create_folder(auth, data.category_id, is_personal):
            if not permission_service.can_view_category(auth, data.category_id):
                raise ForbiddenError("You do not have access to this category")
            raise ForbiddenError("Only administrators can create shared folders")

        self.category_repo.get_by_id(data.category_id)

        folder = Folder(
            name=data.name,
            category_id=data.category_id,
            created_by=auth.user_id,
            is_personal=is_personal,
        )
        self.repo.add(folder)
        self.db.commit()
        self.db.refresh(folder)
        logger.info(
            "Folder created",
            extra={"folder_id": folder.id, "category_id": folder.category_id, "is_personal": is_personal},
        )
        return folder

    def rename_folder(self, auth: AuthContext, folder_id: str, name: str) -> Folder:
        folder = self._get_manageable(auth, folder_id)
        folder.name = name
        self.db.commit()
        self.db.refresh(folder)
        return folder

    def delete_folder(self, auth: AuthContext, folder_id: str) -> None:
        """Delete a folder and everything in it."""
        folder = self._get_manageable(auth, folder_id)
        public_ids = public_ids_for_folder(self.db, folder_id)
        self.repo.delete(folder)
        self.db.commit()
        logger.info("Folder deleted", extra={"folder_id": folder_id})
        release_unreferenced(self.db, self.storage, public_ids)

    def _get_manageable(self, auth: AuthContext, folder_id: str) -> Folder:
        folder = self.repo.get_by_id(folder_id)
        if not permission_service.can_view_folder(auth, folder):
            raise ForbiddenError("You do not have access to this folder")
        if not permission_service.can_manage_folder(auth, folder):
            raise ForbiddenError("You can only modify your own personal folders")
        return folder
