"""Permission checking — the one place authorization rules live.

Every service asks these functions; there are no separate admin and user
code paths. Each rule has the shape ``is_admin OR <grant/ownership rule>``.

Rules:
    - Visibility: admins see everything. A regular user sees a category only
      with an AccessGrant on it, and inside it the shared folders plus its
      own personal folders.
    - Writes by regular users are confined to their own personal folders.
      Shared folders and categories are managed by admins.
    - ``full`` and ``read`` grants give the same rights; the level is
      recorded and reported but does not unlock shared-folder writes.
    - Comments are edited and deleted by their author only, admins included.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ..core.auth import AuthContext
    from ..models import Document, DocumentComment, Folder


def access_level(auth: AuthContext, category_id: str) -> Optional[str]:
    """The caller's level on a category: ``full`` for admins, the grant
    level for users, None without a grant."""
    if auth.is_admin:
        return "full"
    return auth.grants.get(category_id)


def can_view_category(auth: AuthContext, category_id: str) -> bool:
    return auth.is_admin or category_id in auth.grants


def can_view_folder(auth: AuthContext, folder: Folder) -> bool:
    if auth.is_admin:
        return True
    if folder.category_id not in auth.grants:
        return False
    return not folder.is_personal or folder.created_by == auth.user_id


def can_create_folder(auth: AuthContext, category_id: str, is_personal: bool) -> bool:
    if auth.is_admin:
        return True
    return is_personal and category_id in auth.grants


def _owns_personal_folder(auth: AuthContext, folder: Folder) -> bool:
    return (
        folder.is_personal
        and folder.created_by == auth.user_id
        and folder.category_id in auth.grants
    )


def can_manage_folder(auth: AuthContext, folder: Folder) -> bool:
    """Rename or delete the folder itself."""
    return auth.is_admin or _owns_personal_folder(auth, folder)


def can_write_folder(auth: AuthContext, folder: Folder) -> bool:
    """Create documents inside the folder."""
    return auth.is_admin or _owns_personal_folder(auth, folder)


def can_modify_document(auth: AuthContext, document: Document, folder: Folder) -> bool:
    """Rename, delete, or add/remove versions of a document."""
    if auth.is_admin:
        return True
    return document.created_by == auth.user_id and _owns_personal_folder(auth, folder)


def can_clone_into(auth: AuthContext, folder: Folder) -> bool:
    """Clone target: a personal folder owned by the caller.

    Ownership applies to admins too; only the grant check is waived.
    """
    if not folder.is_personal or folder.created_by != auth.user_id:
        return False
    return auth.is_admin or folder.category_id in auth.grants


def can_edit_comment(auth: AuthContext, comment: DocumentComment) -> bool:
    return comment.author_id == auth.user_id
