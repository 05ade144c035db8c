"""Base metadata store interface."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from image_repo.errors import StoreError

Record = Dict[str, Any]


def split_path(path: str) -> tuple:
    """Split ``namespace/key`` into its two parts.

    Raises:
        ValueError: If path is not exactly two non-empty segments
    """
    namespace, _, key = path.strip("/").partition("/")
    if not namespace or not key or "/" in key:
        raise ValueError(f"Invalid metadata path: {path!r}")
    return namespace, key


class BaseMetadataStore(ABC):
    """Key-value document store for asset and user records.

    Records are JSON-compatible dicts addressed by ``namespace/key`` paths
    (``images/{id}``, ``users/{id}``). Drivers translate backend failures into
    :class:`MetadataStoreError`.
    """

    @abstractmethod
    async def get(self, path: str) -> Optional[Record]:
        """Return the record at path, or None if absent."""
        pass

    @abstractmethod
    async def set(self, path: str, record: Record) -> None:
        """Create or replace the record at path."""
        pass

    @abstractmethod
    async def update(self, path: str, fields: Record) -> None:
        """Merge fields into an existing record, leaving other fields untouched.

        Raises:
            RecordNotFoundError: If no record exists at path
        """
        pass

    @abstractmethod
    async def delete(self, path: str) -> None:
        """Remove the record at path. Removing an absent record is not an error."""
        pass

    @abstractmethod
    async def list_children(self, namespace: str) -> Dict[str, Record]:
        """Return every record under namespace, keyed by record key."""
        pass

    @abstractmethod
    async def set_if_absent(self, path: str, record: Record) -> bool:
        """Write record only if nothing exists at path.

        Returns:
            True if the record was written, False if path was already taken
        """
        pass

    @abstractmethod
    async def increment(self, path: str, field: str, amount: int = 1) -> int:
        """Atomically add amount to a numeric field of an existing record.

        A missing field counts as 0.

        Returns:
            The new field value

        Raises:
            RecordNotFoundError: If no record exists at path
        """
        pass

    @abstractmethod
    async def ping(self) -> bool:
        """Return True if the store is reachable."""
        pass

    async def close(self) -> None:
        """Release connections held by the driver."""
        pass


class MetadataStoreError(StoreError):
    """Base exception for metadata store operations."""

    pass


class RecordNotFoundError(MetadataStoreError):
    """Exception for updates addressed to a missing record."""

    pass
