"""Metadata store factory."""

from typing import Optional

from image_repo.config import Settings, settings
from image_repo.metadata.base import BaseMetadataStore, MetadataStoreError
from image_repo.metadata.memory_store import MemoryMetadataStore
from image_repo.metadata.redis_store import RedisMetadataStore

_store: Optional[BaseMetadataStore] = None


def build_metadata_store(app_settings: Settings = settings) -> BaseMetadataStore:
    """Build the metadata store selected by the application settings.

    Raises:
        MetadataStoreError: If the provider is not supported
    """
    provider = app_settings.metadata_provider.lower()

    if provider == "redis":
        return RedisMetadataStore(app_settings.redis_url, prefix=app_settings.redis_key_prefix)
    elif provider == "memory":
        return MemoryMetadataStore()
    else:
        raise MetadataStoreError(f"Unsupported metadata provider: {provider}")


def get_metadata_store() -> BaseMetadataStore:
    """Get the process-wide metadata store, creating it on first use."""
    global _store
    if _store is None:
        _store = build_metadata_store()
    return _store


async def close_metadata_store() -> None:
    global _store
    if _store is not None:
        await _store.close()
        _store = None
