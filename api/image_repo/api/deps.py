"""API dependencies."""

from typing import Any, Dict

from fastapi import Depends, Request

from image_repo.errors import ValidationError
from image_repo.metadata.base import BaseMetadataStore
from image_repo.metadata.factory import get_metadata_store
from image_repo.services.upload_service import UploadPipeline
from image_repo.storage.base import BaseStorageDriver
from image_repo.storage.factory import get_storage_driver


def get_metadata() -> BaseMetadataStore:
    """Get metadata store."""
    return get_metadata_store()


def get_storage() -> BaseStorageDriver:
    """Get blob storage driver."""
    return get_storage_driver()


def get_upload_pipeline(
    metadata: BaseMetadataStore = Depends(get_metadata),
    storage: BaseStorageDriver = Depends(get_storage),
) -> UploadPipeline:
    """Get upload pipeline bound to the configured stores."""
    return UploadPipeline(metadata, storage)


async def read_body(request: Request) -> Dict[str, Any]:
    """Read a JSON or form-encoded request body as a dict.

    Missing or unsupported bodies read as empty so that optional fields fall
    back to their defaults.
    """
    content_type = request.headers.get("content-type", "")

    if content_type.startswith("application/json"):
        raw = await request.body()
        if not raw:
            return {}
        try:
            body = await request.json()
        except ValueError:
            raise ValidationError("Malformed JSON body.")
        return body if isinstance(body, dict) else {}

    if content_type.startswith(("application/x-www-form-urlencoded", "multipart/form-data")):
        form = await request.form()
        return dict(form)

    return {}
