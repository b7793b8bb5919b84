"""Blob storage contract shared by every backend."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ..core.config import Settings, StorageBackend


@dataclass(frozen=True)
class StoredBlob:
    """Reference to an object after a successful put."""
    url: str
    public_id: str
    size: int
    content_type: str


@dataclass(frozen=True)
class BlobContent:
    data: bytes
    content_type: Optional[str] = None


@dataclass(frozen=True)
class StorageConfig:
    """Everything a backend needs, passed explicitly to its constructor."""
    backend: StorageBackend
    local_root: str = "./storage"
    public_base_url: str = "http://localhost:8000/files"
    s3_bucket: str = ""
    s3_endpoint_url: str = ""
    s3_region: str = "us-east-1"
    s3_access_key_id: str = ""
    s3_secret_access_key: str = ""

    @classmethod
    def from_settings(cls, settings: Settings) -> "StorageConfig":
        return cls(
            backend=settings.storage_backend,
            local_root=settings.storage_local_root,
            public_base_url=settings.storage_public_base_url,
            s3_bucket=settings.s3_bucket,
            s3_endpoint_url=settings.s3_endpoint_url,
            s3_region=settings.s3_region,
            s3_access_key_id=settings.s3_access_key_id,
            s3_secret_access_key=settings.s3_secret_access_key,
        )


class BlobStorage(ABC):
    """Put, fetch, sign and delete opaque file bytes.

    Implementations raise StorageError on provider failures and log the
    underlying error themselves.
    """

    @abstractmethod
    def put(self, data: bytes, name: str, folder: str, content_type: str) -> StoredBlob:
        """Store bytes under ``<folder>/<name>`` and return the reference."""

    @abstractmethod
    def delete(self, public_id: str) -> None:
        """Remove an object. Deleting a missing object is not an error."""

    @abstractmethod
    def sign_url(self, public_id: str, expires_in: int) -> str:
        """Return a URL granting read access for ``expires_in`` seconds."""

    @abstractmethod
    def fetch(self, public_id: str) -> BlobContent:
        """Read an object's bytes."""

    @abstractmethod
    def owns_url(self, url: str) -> bool:
        """Whether ``url`` points at an object inside this store."""
