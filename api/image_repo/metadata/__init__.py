"""Metadata stores for asset and user records."""

from image_repo.metadata.base import BaseMetadataStore, MetadataStoreError, RecordNotFoundError
from image_repo.metadata.factory import get_metadata_store

__all__ = [
    "BaseMetadataStore",
    "MetadataStoreError",
    "RecordNotFoundError",
    "get_metadata_store",
]
