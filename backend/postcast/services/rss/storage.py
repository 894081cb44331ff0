"""
RSS File Storage

Uploads and deletes personal RSS files on S3-compatible object storage
(Cloudflare R2 when R2 credentials are configured, AWS S3 otherwise).
boto3 is synchronous, so every call runs in a worker thread.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from postcast.config.logging import get_logger, mask_token
from postcast.config.settings import settings
from postcast.errors import RssUploadError, StorageError

logger = get_logger(__name__)

RSS_CONTENT_TYPE = "application/rss+xml"
RSS_CACHE_CONTROL = "max-age=300"


def masked_path(path: str) -> str:
    """Mask the token segment of `u/{token}/rss.xml` for logging."""
    parts = path.split("/")
    if len(parts) == 3:
        parts[1] = mask_token(parts[1])
    return "/".join(parts)


@dataclass(frozen=True)
class RssUploadResult:
    url: str
    path: str


class RssFileStorage:
    """
    Object storage for RSS files.

    The boto3 client is created lazily on first use.
    """

    def __init__(self, client: Optional[Any] = None):
        self._client = client

    def _get_client(self) -> Any:
        if self._client is not None:
            return self._client

        if settings.uses_cloudflare_r2:
            logger.info("Using Cloudflare R2 for RSS storage", endpoint=settings.cloudflare_r2_endpoint)
            self._client = boto3.client(
                "s3",
                endpoint_url=settings.cloudflare_r2_endpoint,
                aws_access_key_id=settings.cloudflare_access_key_id,
                aws_secret_access_key=settings.cloudflare_secret_access_key,
                region_name="auto",
                config=Config(retries={"max_attempts": 3, "mode": "standard"}),
            )
        else:
            logger.info("Using AWS S3 for RSS storage", region=settings.aws_region)
            self._client = boto3.client(
                "s3",
                region_name=settings.aws_region,
                config=Config(retries={"max_attempts": 3, "mode": "standard"}),
            )
        return self._client

    async def upload(self, bucket: str, path: str, local_file_path: str) -> RssUploadResult:
        """
        Upload a local RSS file to `bucket` under `path`.

        Raises:
            RssUploadError: If the upload fails.
        """
        client = self._get_client()
        try:
            await asyncio.to_thread(
                client.upload_file,
                local_file_path,
                bucket,
                path,
                ExtraArgs={
                    "ContentType": RSS_CONTENT_TYPE,
                    "CacheControl": RSS_CACHE_CONTROL,
                },
            )
        except (BotoCoreError, ClientError) as e:
            logger.error("RSS upload failed", bucket=bucket, path=masked_path(path), error=str(e))
            raise RssUploadError(
                f"Failed to upload {masked_path(path)}: {e}", bucket=bucket
            ) from e

        url = f"{settings.rss_url_prefix}/{path}"
        logger.info("RSS file uploaded", bucket=bucket, path=masked_path(path))
        return RssUploadResult(url=url, path=path)

    async def delete(self, bucket: str, path: str) -> None:
        """
        Delete the object at `path`. Deleting a missing object succeeds.

        Raises:
            StorageError: If the delete call fails.
        """
        client = self._get_client()
        try:
            await asyncio.to_thread(client.delete_object, Bucket=bucket, Key=path)
        except (BotoCoreError, ClientError) as e:
            logger.error("RSS delete failed", bucket=bucket, path=masked_path(path), error=str(e))
            raise StorageError(f"Failed to delete {masked_path(path)}: {e}", bucket=bucket) from e

        logger.info("RSS file deleted", bucket=bucket, path=masked_path(path))


rss_file_storage = RssFileStorage()
