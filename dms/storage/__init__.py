"""Blob storage adapter.

Usage::

    storage = build_storage(StorageConfig.from_settings(settings))
    blob = storage.put(data, name, folder="dms/<user id>", content_type="application/pdf")
"""

from ..core.config import StorageBackend
from .base import BlobContent, BlobStorage, StorageConfig, StoredBlob
from .local import LocalBlobStorage
from .s3 import S3BlobStorage


def build_storage(config: StorageConfig) -> BlobStorage:
    """Instantiate the backend selected by ``config.backend``."""
    if config.backend == StorageBackend.S3:
        return S3BlobStorage(config)
    return LocalBlobStorage(config)


__all__ = [
    "BlobContent",
    "BlobStorage",
    "StorageConfig",
    "StoredBlob",
    "LocalBlobStorage",
    "S3BlobStorage",
    "build_storage",
]
