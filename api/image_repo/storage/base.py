"""Base storage driver interface."""

from abc import ABC, abstractmethod
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, Optional

from image_repo.errors import StoreError


class BlobStream:
    """Async iterable over the chunks of a stored blob.

    Wraps the driver's chunk iterator together with the cleanup callback that
    releases the underlying connection or file handle. Iterating to the end
    (or breaking out early) always runs the cleanup exactly once.
    """

    def __init__(
        self,
        chunks: AsyncIterator[bytes],
        on_close: Optional[Callable[[], Awaitable[Any]]] = None,
    ):
        self._chunks = chunks
        self._on_close = on_close
        self._closed = False

    async def __aiter__(self) -> AsyncIterator[bytes]:
        try:
            async for chunk in self._chunks:
                yield chunk
        finally:
            await self.close()

    async def read(self) -> bytes:
        """Consume the whole stream and return its content."""
        parts = [chunk async for chunk in self]
        return b"".join(parts)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._on_close is not None:
            await self._on_close()


class BaseStorageDriver(ABC):
    """Base class for blob storage drivers.

    Blobs are addressed by key (``images/{id}-{name}``). Drivers translate
    their backend failures into :class:`StorageError` so that no library
    exception leaks into the services.
    """

    def __init__(self, config: Dict[str, Any]):
        """Initialize storage driver with configuration.

        Args:
            config: Storage configuration dict with provider-specific settings
        """
        self.config = config

    @abstractmethod
    async def upload_file(self, key: str, content: bytes, public_read: bool = True) -> str:
        """Store content under key.

        Args:
            key: Destination key
            content: File content as bytes
            public_read: Grant anonymous read access to the stored object

        Returns:
            Durable URL the object can be retrieved from

        Raises:
            StorageError: If upload fails
        """
        pass

    @abstractmethod
    async def open_stream(self, key: str) -> BlobStream:
        """Open a read stream on a stored blob.

        Args:
            key: Key of the blob

        Returns:
            BlobStream yielding the blob content in chunks

        Raises:
            StorageError: If the blob is missing or cannot be read
        """
        pass

    @abstractmethod
    async def delete_file(self, key: str) -> None:
        """Delete a stored blob.

        Args:
            key: Key of the blob

        Raises:
            StorageError: If deletion fails
        """
        pass

    @abstractmethod
    async def test_connection(self) -> bool:
        """Test if storage is accessible.

        Returns:
            True if connection successful, False otherwise
        """
        pass


class StorageError(StoreError):
    """Base exception for storage operations."""

    pass


class StorageConnectionError(StorageError):
    """Exception for connection errors."""

    pass


class BlobNotFoundError(StorageError):
    """Exception for keys with no stored blob."""

    pass
