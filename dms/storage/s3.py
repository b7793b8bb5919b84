"""S3-compatible blob storage (AWS, Backblaze B2, MinIO, R2)."""

import logging
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ..exceptions import StorageError
from .base import BlobContent, BlobStorage, StorageConfig, StoredBlob

logger = logging.getLogger(__name__)


class S3BlobStorage(BlobStorage):
    """Blob storage on a single S3 bucket.

    public_id is the object key.
    """

    def __init__(self, config: StorageConfig, client=None):
        if not config.s3_bucket:
            raise StorageError("S3 bucket is not configured", status_code=500)
        self.bucket = config.s3_bucket
        self.endpoint_url = config.s3_endpoint_url or None
        self.region = config.s3_region
        if not config.s3_access_key_id or not config.s3_secret_access_key:
            logger.warning("S3 credentials not set; falling back to the default boto3 credential chain")
        self.client = client or boto3.client(
            "s3",
            endpoint_url=self.endpoint_url,
            aws_access_key_id=config.s3_access_key_id or None,
            aws_secret_access_key=config.s3_secret_access_key or None,
            region_name=self.region,
            config=Config(signature_version="s3v4"),
        )

    def _object_url(self, key: str) -> str:
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket}/{key}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"

    def owns_url(self, url: str) -> bool:
        return url.startswith(self._object_url(""))

    def put(self, data: bytes, name: str, folder: str, content_type: str) -> StoredBlob:
        key = f"{folder.strip('/')}/{name}" if folder else name
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error("S3 put failed", extra={"key": key, "error": str(e)})
            raise StorageError() from e
        return StoredBlob(url=self._object_url(key), public_id=key, size=len(data), content_type=content_type)

    def delete(self, public_id: str) -> None:
        try:
            self.client.delete_object(Bucket=self.bucket, Key=public_id)
        except (ClientError, BotoCoreError) as e:
            logger.error("S3 delete failed", extra={"key": public_id, "error": str(e)})
            raise StorageError() from e

    def sign_url(self, public_id: str, expires_in: int) -> str:
        try:
            return self.client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket, "Key": public_id},
                ExpiresIn=expires_in,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error("S3 presign failed", extra={"key": public_id, "error": str(e)})
            raise StorageError() from e

    def fetch(self, public_id: str) -> BlobContent:
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=public_id)
            data = response["Body"].read()
        except (ClientError, BotoCoreError) as e:
            logger.error("S3 fetch failed", extra={"key": public_id, "error": str(e)})
            raise StorageError() from e
        content_type: Optional[str] = response.get("ContentType")
        return BlobContent(data=data, content_type=content_type)
