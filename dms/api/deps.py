"""Shared route dependencies."""

from fastapi import Request

from ..exceptions import StorageError
from ..storage import BlobStorage


def get_storage(request: Request) -> BlobStorage:
    """The blob store built at startup. Tests override this dependency."""
    storage = getattr(request.app.state, "storage", None)
    if storage is None:
        raise StorageError("File storage is not configured", status_code=503)
    return storage
