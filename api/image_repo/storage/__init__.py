"""Blob storage drivers."""

from image_repo.storage.base import BaseStorageDriver, BlobStream, StorageError
from image_repo.storage.factory import get_storage_driver

__all__ = ["BaseStorageDriver", "BlobStream", "StorageError", "get_storage_driver"]
