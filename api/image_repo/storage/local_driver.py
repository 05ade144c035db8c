"""Local filesystem storage driver."""

import logging
import os
from pathlib import Path
from typing import Any, AsyncIterator, Dict
from urllib.parse import quote

import aiofiles
import aiofiles.os

from image_repo.storage.base import (
    BaseStorageDriver,
    BlobNotFoundError,
    BlobStream,
    StorageError,
)

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class LocalStorageDriver(BaseStorageDriver):
    """Local filesystem storage driver.

    Configuration:
        base_path: Path to storage directory
        public_url: Base URL the directory is served from (optional,
            defaults to a ``file://`` URI)

    Example:
        >>> driver = LocalStorageDriver({"base_path": "/data/blobs"})
        >>> url = await driver.upload_file("images/abc123-cat.png", content)
    """

    def __init__(self, config: Dict[str, Any]):
        super().__init__(config)
        self.base_path = Path(config["base_path"])

        # Ensure base_path is absolute for security
        if not self.base_path.is_absolute():
            self.base_path = self.base_path.resolve()

        self.public_url = config.get("public_url")

    def _validate_path(self, key: str) -> Path:
        """Validate key resolves within base_path (prevent directory traversal).

        Args:
            key: Blob key

        Returns:
            Absolute Path object

        Raises:
            StorageError: If key tries to escape base_path
        """
        full_path = (self.base_path / key).resolve()

        try:
            full_path.relative_to(self.base_path)
        except ValueError:
            raise StorageError(f"Path {key} attempts to escape base directory")

        return full_path

    def object_url(self, key: str) -> str:
        if self.public_url:
            return f"{self.public_url.rstrip('/')}/{quote(key)}"
        return self._validate_path(key).as_uri()

    async def upload_file(self, key: str, content: bytes, public_read: bool = True) -> str:
        """Write file to local filesystem.

        ``public_read`` has no meaning on a plain directory and is ignored.
        """
        full_path = self._validate_path(key)

        try:
            full_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(full_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            raise StorageError(f"Failed to upload file: {e}")

        return self.object_url(key)

    async def open_stream(self, key: str) -> BlobStream:
        full_path = self._validate_path(key)

        if not full_path.exists():
            raise BlobNotFoundError(f"File not found: {key}")

        try:
            handle = await aiofiles.open(full_path, "rb")
        except OSError as e:
            raise StorageError(f"Failed to download file: {e}")

        async def chunks() -> AsyncIterator[bytes]:
            while True:
                chunk = await handle.read(CHUNK_SIZE)
                if not chunk:
                    break
                yield chunk

        return BlobStream(chunks(), handle.close)

    async def delete_file(self, key: str) -> None:
        full_path = self._validate_path(key)

        try:
            await aiofiles.os.remove(full_path)
        except FileNotFoundError:
            # S3 deletes of missing keys succeed too
            logger.warning(f"Blob {key} already absent from {self.base_path}")
        except OSError as e:
            raise StorageError(f"Failed to delete file: {e}")

    async def test_connection(self) -> bool:
        """Test if base path exists and is accessible.

        Returns:
            True if base_path exists and is writable
        """
        try:
            return self.base_path.exists() and os.access(self.base_path, os.W_OK)
        except OSError:
            return False
