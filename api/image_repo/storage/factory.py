"""Storage driver factory."""

from typing import Optional

from image_repo.config import Settings, settings
from image_repo.storage.base import BaseStorageDriver, StorageError
from image_repo.storage.local_driver import LocalStorageDriver
from image_repo.storage.s3_driver import S3StorageDriver

_driver: Optional[BaseStorageDriver] = None


def get_storage_driver_from_config(provider: str, config: dict) -> BaseStorageDriver:
    """Get storage driver from explicit configuration.

    Args:
        provider: Storage provider (s3, local)
        config: Driver configuration dict

    Returns:
        Configured storage driver instance

    Raises:
        StorageError: If driver not supported or configuration incomplete

    Example:
        >>> driver = get_storage_driver_from_config(
        ...     provider="local",
        ...     config={"base_path": "/tmp/blobs"}
        ... )
    """
    provider = provider.lower()

    if provider == "local":
        return LocalStorageDriver(config)

    elif provider == "s3":
        required_fields = ["aws_access_key_id", "aws_secret_access_key", "bucket_name"]
        missing = [f for f in required_fields if not config.get(f)]
        if missing:
            raise StorageError(f"Missing required S3 configuration: {missing}")
        return S3StorageDriver(config)

    else:
        raise StorageError(f"Unsupported storage provider: {provider}")


def build_storage_driver(app_settings: Settings = settings) -> BaseStorageDriver:
    """Build the storage driver selected by the application settings."""
    return get_storage_driver_from_config(
        app_settings.storage_provider, app_settings.blob_config
    )


def get_storage_driver() -> BaseStorageDriver:
    """Get the process-wide storage driver, creating it on first use."""
    global _driver
    if _driver is None:
        _driver = build_storage_driver()
    return _driver
