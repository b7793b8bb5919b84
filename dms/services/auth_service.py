"""Authentication service — user CRUD and password hashing.

All password operations use bcrypt via passlib. Passwords are never stored
or logged in plaintext. Accounts are created by admins (or the startup
seeder); there is no self-registration.
"""

import logging
from typing import Optional

from passlib.hash import bcrypt
from sqlalchemy.orm import Session

from ..exceptions import AuthenticationError, ConflictError, ValidationError
from ..models import Category, Document, DocumentVersion, Folder, User
from ..models.user import ROLES, ROLE_USER
from ..repositories import UserRepository, AccessGrantRepository, CategoryRepository

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def hash_password(password: str) -> str:
    return bcrypt.hash(password)


def create_user(
    db: Session,
    name: str,
    email: str,
    password: str,
    role: str = ROLE_USER,
) -> User:
    """Create a user account.

    Raises ValidationError on bad input and ConflictError if the email is
    already registered.
    """
    email = email.strip().lower()
    if not email or "@" not in email:
        raise ValidationError("Valid email address required", field="email")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters", field="password"
        )
    if not name.strip():
        raise ValidationError("Name required", field="name")
    if role not in ROLES:
        raise ValidationError(f"Invalid role: {role}", field="role")

    repo = UserRepository(db)
    if repo.get_by_email(email) is not None:
        raise ConflictError("Email already registered", details={"email": email})

    user = User(
        name=name.strip(),
        email=email,
        password_hash=hash_password(password),
        role=role,
    )
    repo.add(user)
    db.commit()
    db.refresh(user)
    logger.info("User created", extra={"user_id": user.id, "role": role})
    return user


def authenticate(db: Session, email: str, password: str) -> User:
    """Validate credentials and return the user.

    Raises AuthenticationError on unknown email or wrong password, with the
    same message for both.
    """
    user = UserRepository(db).get_by_email(email.strip().lower())

    if user is None or not user.password_hash:
        raise AuthenticationError("Invalid email or password")

    if not bcrypt.verify(password, user.password_hash):
        raise AuthenticationError("Invalid email or password")

    return user


def get_user_by_id(db: Session, user_id: str) -> Optional[User]:
    return UserRepository(db).get_by_id_optional(user_id)


def list_users(db: Session) -> list[User]:
    return UserRepository(db).list_all()


def list_category_access(db: Session, user: User) -> list[tuple[Category, str]]:
    """Categories the user can see, with the level held on each.

    Admins see every category at ``full``.
    """
    if user.is_admin:
        return [(c, "full") for c in CategoryRepository(db).list_all()]
    return [(c, g.access_level) for g, c in AccessGrantRepository(db).list_for_user(user.id)]


def delete_user(db: Session, user_id: str, actor_id: str) -> None:
    """Delete an account and its grants and comments.

    Raises ValidationError when deleting oneself and ConflictError while the
    user still owns categories, folders, documents or versions.
    """
    if user_id == actor_id:
        raise ValidationError("You cannot delete your own account", field="user_id")

    repo = UserRepository(db)
    user = repo.get_by_id(user_id)

    owned = {
        "categories": db.query(Category).filter(Category.created_by == user_id).count(),
        "folders": db.query(Folder).filter(Folder.created_by == user_id).count(),
        "documents": db.query(Document).filter(Document.created_by == user_id).count(),
        "versions": db.query(DocumentVersion).filter(DocumentVersion.uploaded_by == user_id).count(),
    }
    owned = {k: v for k, v in owned.items() if v}
    if owned:
        raise ConflictError("User still owns content", details=owned)

    repo.delete(user)
    db.commit()
    logger.info("User deleted", extra={"user_id": user_id})
