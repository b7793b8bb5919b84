"""Shared test fixtures for the DMS backend test suite.

Tests run against a throwaway SQLite database (override with
TEST_DATABASE_URL). Every table is emptied before each test, and the blob
store is replaced by an in-memory double so no test touches the disk or the
network.
"""

import os
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="dms-tests-")

# Point the app at the test database before any app imports.
os.environ["DATABASE_URL"] = os.environ.get(
    "TEST_DATABASE_URL",
    f"sqlite:///{_TMP_DIR}/dms_test.db",
)
os.environ["ENVIRONMENT"] = "development"
os.environ["LOG_FORMAT"] = "text"
os.environ["RATE_LIMIT_PER_MINUTE"] = "0"
os.environ["STORAGE_BACKEND"] = "local"
os.environ["STORAGE_LOCAL_ROOT"] = os.path.join(_TMP_DIR, "storage")
os.environ["AUDIT_RETENTION_DAYS"] = "0"

from typing import Optional

import pytest
from sqlalchemy import text
from fastapi.testclient import TestClient

from dms.database import get_db, SessionLocal
from dms.main import app
from dms.api.deps import get_storage
from dms.core.auth import AuthContext
from dms.core.config import settings
from dms.core.token_factory import create_token
from dms.exceptions import StorageError
from dms.middleware.request_context import rate_limiter
from dms.models import AccessGrant, Category, Document, DocumentVersion, Folder, User
from dms.repositories import AccessGrantRepository
from dms.services.auth_service import hash_password
from dms.storage import BlobContent, BlobStorage, StoredBlob

# Children before parents so foreign keys never block a delete.
_CLEAN_TABLES = [
    "audit_log", "document_comments", "document_versions", "documents",
    "folders", "access_grants", "categories", "users",
]

TEST_PASSWORD = "password123"
# Hashed once; bcrypt is deliberately slow.
_PASSWORD_HASH = hash_password(TEST_PASSWORD)


class MemoryStorage(BlobStorage):
    """In-memory blob store recording every call."""

    def __init__(self):
        self.objects: dict[str, tuple[bytes, str]] = {}
        self.deleted: list[str] = []
        self.fail_signing = False

    def put(self, data: bytes, name: str, folder: str, content_type: str) -> StoredBlob:
        public_id = f"{folder}/{name}"
        self.objects[public_id] = (data, content_type)
        return StoredBlob(
            url=f"https://blobs.test/{public_id}",
            public_id=public_id,
            size=len(data),
            content_type=content_type,
        )

    def delete(self, public_id: str) -> None:
        self.deleted.append(public_id)
        self.objects.pop(public_id, None)

    def sign_url(self, public_id: str, expires_in: int) -> str:
        if self.fail_signing:
            raise StorageError()
        return f"https://blobs.test/{public_id}?expires={expires_in}&sig=test"

    def owns_url(self, url: str) -> bool:
        return url.startswith("https://blobs.test/")

    def fetch(self, public_id: str) -> BlobContent:
        if public_id not in self.objects:
            raise StorageError()
        data, content_type = self.objects[public_id]
        return BlobContent(data=data, content_type=content_type)


@pytest.fixture(autouse=True)
def _clean_tables():
    """Empty all data tables before each test.

    Runs before the test (not after) so test failures leave data
    available for debugging.
    """
    db = SessionLocal()
    try:
        for table in _CLEAN_TABLES:
            db.execute(text(f"DELETE FROM {table}"))
        db.commit()
    finally:
        db.close()
    yield


@pytest.fixture()
def db():
    """Per-test database session."""
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture()
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture()
def client(db, storage):
    """TestClient sharing the test session and the in-memory blob store."""

    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_storage] = lambda: storage
    rate_limiter.reset()
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# --- Factories ---


def make_user(db, name: str = "User", email: Optional[str] = None, role: str = "user") -> User:
    user = User(
        name=name,
        email=email or f"{name.lower().replace(' ', '.')}@example.test",
        role=role,
        password_hash=_PASSWORD_HASH,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_category(db, creator: User, name: str = "Finance") -> Category:
    category = Category(name=name, created_by=creator.id)
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


def grant(db, user: User, category: Category, level: str = "read") -> AccessGrant:
    g = AccessGrant(user_id=user.id, category_id=category.id, access_level=level)
    db.add(g)
    db.commit()
    return g


def make_folder(db, owner: User, category: Category, name: str = "Folder", personal: bool = False) -> Folder:
    folder = Folder(name=name, category_id=category.id, created_by=owner.id, is_personal=personal)
    db.add(folder)
    db.commit()
    db.refresh(folder)
    return folder


def make_document(
    db,
    owner: User,
    folder: Folder,
    name: str = "report.pdf",
    versions: int = 1,
) -> Document:
    """Document with ``versions`` versions numbered 1..n, the last one current."""
    document = Document(
        name=name,
        folder_id=folder.id,
        created_by=owner.id,
        file_url="https://blobs.test/placeholder",
    )
    db.add(document)
    db.flush()
    for n in range(1, versions + 1):
        version = DocumentVersion(
            document_id=document.id,
            version_number=n,
            file_url=f"https://blobs.test/{document.id}/v{n}",
            public_id=f"{document.id}/v{n}",
            uploaded_by=owner.id,
        )
        db.add(version)
        db.flush()
        document.current_version_id = version.id
        document.file_url = version.file_url
        document.public_id = version.public_id
    db.commit()
    db.refresh(document)
    return document


def auth_for(db, user: User) -> AuthContext:
    """AuthContext as require_auth would build it."""
    return AuthContext(
        user_id=user.id,
        role=user.role,
        email=user.email,
        name=user.name,
        grants=AccessGrantRepository(db).levels_for_user(user.id),
    )


def headers_for(user: User) -> dict:
    token = create_token(subject=user.id, role=user.role, secret=settings.jwt_secret_key)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def admin(db) -> User:
    return make_user(db, name="Admin", email="root@example.test", role="system_admin")


@pytest.fixture()
def alice(db) -> User:
    return make_user(db, name="Alice")


@pytest.fixture()
def bob(db) -> User:
    return make_user(db, name="Bob")
