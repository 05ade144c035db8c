"""S3-compatible storage driver (AWS S3, Cloudflare R2, MinIO, etc)."""

import logging
from contextlib import AsyncExitStack
from typing import Any, Dict
from urllib.parse import quote

import aioboto3
from botocore.exceptions import BotoCoreError, ClientError

from image_repo.storage.base import (
    BaseStorageDriver,
    BlobNotFoundError,
    BlobStream,
    StorageConnectionError,
    StorageError,
)

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class S3StorageDriver(BaseStorageDriver):
    """S3-compatible storage driver.

    Supports:
    - AWS S3
    - Cloudflare R2
    - MinIO
    - Any S3-compatible API

    Configuration:
        aws_access_key_id: Access key
        aws_secret_access_key: Secret key
        bucket_name: Bucket name
        region: AWS region (default: us-east-1)
        endpoint_url: Custom endpoint URL (for R2, MinIO, etc)

    Example:
        >>> config = {
        ...     "aws_access_key_id": "AKIA...",
        ...     "aws_secret_access_key": "...",
        ...     "bucket_name": "my-bucket",
        ...     "region": "us-east-1"
        ... }
        >>> driver = S3StorageDriver(config)
        >>> url = await driver.upload_file("images/abc123-cat.png", content)
    """

    def __init__(self, config: Dict[str, Any]):
        super().__init__(config)
        self.bucket_name = config["bucket_name"]
        self.region = config.get("region", "us-east-1")
        self.endpoint_url = config.get("endpoint_url")

        # S3 client configuration
        self.s3_config = {
            "aws_access_key_id": config["aws_access_key_id"],
            "aws_secret_access_key": config["aws_secret_access_key"],
            "region_name": self.region,
        }

        # Support custom endpoint (Cloudflare R2, MinIO, etc)
        if self.endpoint_url:
            self.s3_config["endpoint_url"] = self.endpoint_url

        self.session = aioboto3.Session()

    def object_url(self, key: str) -> str:
        """Build the direct retrieval URL of an object."""
        quoted = quote(key)
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket_name}/{quoted}"
        return f"https://{self.bucket_name}.s3.{self.region}.amazonaws.com/{quoted}"

    async def upload_file(self, key: str, content: bytes, public_read: bool = True) -> str:
        """Upload file to S3.

        Args:
            key: Destination key
            content: File content
            public_read: Apply the ``public-read`` canned ACL

        Returns:
            Direct URL of the uploaded object
        """
        params = {"Bucket": self.bucket_name, "Key": key, "Body": content}
        if public_read:
            params["ACL"] = "public-read"

        try:
            async with self.session.client("s3", **self.s3_config) as s3:
                await s3.put_object(**params)
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Failed to upload file: {e}")

        return self.object_url(key)

    async def open_stream(self, key: str) -> BlobStream:
        """Open a streaming read on an S3 object.

        The client stays open until the returned stream is exhausted or
        closed.
        """
        stack = AsyncExitStack()
        try:
            s3 = await stack.enter_async_context(
                self.session.client("s3", **self.s3_config)
            )
            response = await s3.get_object(Bucket=self.bucket_name, Key=key)
            body = await stack.enter_async_context(response["Body"])
        except ClientError as e:
            await stack.aclose()
            if e.response["Error"]["Code"] in ("NoSuchKey", "404"):
                raise BlobNotFoundError(f"File not found: {key}")
            raise StorageError(f"Failed to download file: {e}")
        except BotoCoreError as e:
            await stack.aclose()
            raise StorageError(f"Failed to download file: {e}")

        return BlobStream(body.iter_chunks(CHUNK_SIZE), stack.aclose)

    async def delete_file(self, key: str) -> None:
        """Delete an object from S3."""
        try:
            async with self.session.client("s3", **self.s3_config) as s3:
                await s3.delete_object(Bucket=self.bucket_name, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Failed to delete file: {e}")

        logger.debug(f"Deleted s3://{self.bucket_name}/{key}")

    async def test_connection(self) -> bool:
        """Test S3 connection by checking if bucket exists.

        Returns:
            True if bucket is accessible
        """
        try:
            async with self.session.client("s3", **self.s3_config) as s3:
                await s3.head_bucket(Bucket=self.bucket_name)
            return True

        except ClientError as e:
            error_code = e.response["Error"]["Code"]
            if error_code in ("404", "NoSuchBucket"):
                raise StorageConnectionError(f"Bucket not found: {self.bucket_name}")
            elif error_code == "403":
                raise StorageConnectionError(f"Access denied to bucket: {self.bucket_name}")
            return False

        except BotoCoreError:
            return False
