"""Health check endpoints."""

import logging

from fastapi import APIRouter, Depends

from image_repo.api.deps import get_metadata, get_storage
from image_repo.errors import StoreError
from image_repo.metadata.base import BaseMetadataStore
from image_repo.storage.base import BaseStorageDriver

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/healthz")
async def healthz():
    """Simple health check for Kubernetes/Docker."""
    return {"status": "ok"}


@router.get("/health")
async def health_check(
    metadata: BaseMetadataStore = Depends(get_metadata),
    storage: BaseStorageDriver = Depends(get_storage),
):
    """Report connectivity of the metadata and blob stores."""
    metadata_status = "connected" if await metadata.ping() else "disconnected"

    try:
        storage_status = "connected" if await storage.test_connection() else "disconnected"
    except StoreError as e:
        logger.warning(f"Storage health check failed: {e}")
        storage_status = f"error: {e.message}"

    overall_status = (
        "ok" if metadata_status == "connected" and storage_status == "connected" else "degraded"
    )

    return {
        "status": overall_status,
        "metadata": metadata_status,
        "storage": storage_status,
    }
