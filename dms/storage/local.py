"""Filesystem blob storage for development and single-host deployments."""

import logging
import mimetypes
from pathlib import Path

from ..exceptions import StorageError
from .base import BlobContent, BlobStorage, StorageConfig, StoredBlob

logger = logging.getLogger(__name__)


class LocalBlobStorage(BlobStorage):
    """Keeps objects as files under a root directory.

    public_id is the path relative to the root. URLs are built from
    ``public_base_url`` and are not signed.
    """

    def __init__(self, config: StorageConfig):
        self.root = Path(config.local_root).resolve()
        self.public_base_url = config.public_base_url.rstrip("/")
        self.root.mkdir(parents=True, exist_ok=True)

    def _path_for(self, public_id: str) -> Path:
        path = (self.root / public_id).resolve()
        if self.root not in path.parents:
            raise StorageError("Invalid storage path", status_code=400)
        return path

    def put(self, data: bytes, name: str, folder: str, content_type: str) -> StoredBlob:
        public_id = f"{folder.strip('/')}/{name}" if folder else name
        path = self._path_for(public_id)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            logger.error("Local put failed", extra={"public_id": public_id, "error": str(e)})
            raise StorageError() from e
        return StoredBlob(
            url=f"{self.public_base_url}/{public_id}",
            public_id=public_id,
            size=len(data),
            content_type=content_type,
        )

    def delete(self, public_id: str) -> None:
        path = self._path_for(public_id)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.error("Local delete failed", extra={"public_id": public_id, "error": str(e)})
            raise StorageError() from e

    def owns_url(self, url: str) -> bool:
        return url.startswith(f"{self.public_base_url}/")

    def sign_url(self, public_id: str, expires_in: int) -> str:
        raise StorageError("Signed URLs are not supported by the local backend", status_code=501)

    def fetch(self, public_id: str) -> BlobContent:
        path = self._path_for(public_id)
        try:
            data = path.read_bytes()
        except FileNotFoundError as e:
            logger.error("Local object missing", extra={"public_id": public_id})
            raise StorageError() from e
        except OSError as e:
            logger.error("Local fetch failed", extra={"public_id": public_id, "error": str(e)})
            raise StorageError() from e
        content_type, _ = mimetypes.guess_type(path.name)
        return BlobContent(data=data, content_type=content_type)
