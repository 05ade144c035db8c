"""Image endpoints."""

import mimetypes
from typing import List, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from image_repo.api.deps import get_metadata, get_storage, get_upload_pipeline, read_body
from image_repo.metadata.base import BaseMetadataStore
from image_repo.schemas.asset import AssetDetailsResponse, AssetListResponse
from image_repo.schemas.envelope import SuccessResponse, create_success
from image_repo.services import asset_service
from image_repo.services.upload_service import UploadPipeline, upload_result
from image_repo.storage.base import BaseStorageDriver

router = APIRouter()

BASE_IMAGE_API = "/i/{file_id}"


def content_disposition(filename: str) -> str:
    """Build an attachment header suggesting filename as the save name."""
    quoted = quote(filename)
    if quoted != filename:
        return f"attachment; filename*=utf-8''{quoted}"
    return f'attachment; filename="{filename}"'


@router.get("/", response_model=AssetListResponse)
async def list_images(metadata: BaseMetadataStore = Depends(get_metadata)):
    """List all public images."""
    images = await asset_service.list_assets(metadata)
    return create_success(images=images)


@router.post("/upload")
async def upload_images(
    photos: Optional[List[UploadFile]] = File(None, description="Up to 5 image files"),
    pipeline: UploadPipeline = Depends(get_upload_pipeline),
):
    """Upload one or more images anonymously.

    Returns ``file`` when a single image was uploaded and ``files`` when
    several were.
    """
    uploaded = await pipeline.run(photos or [])
    return create_success(**upload_result(uploaded))


@router.get(BASE_IMAGE_API, response_model=AssetDetailsResponse)
async def get_image(file_id: str, metadata: BaseMetadataStore = Depends(get_metadata)):
    """Get image details."""
    details = await asset_service.get_asset(metadata, file_id)
    return create_success(details=details)


@router.post(f"{BASE_IMAGE_API}/set_public", response_model=SuccessResponse)
async def set_image_public(
    file_id: str,
    body: dict = Depends(read_body),
    metadata: BaseMetadataStore = Depends(get_metadata),
):
    """Change whether an image is public.

    - **public**: true / false, or omitted to make the image public
    """
    await asset_service.set_visibility(metadata, file_id, body.get("public"))
    return create_success()


@router.delete(BASE_IMAGE_API, response_model=SuccessResponse)
async def delete_image(
    file_id: str,
    metadata: BaseMetadataStore = Depends(get_metadata),
    storage: BaseStorageDriver = Depends(get_storage),
):
    """Delete an image record and its stored file."""
    await asset_service.delete_asset(metadata, storage, file_id)
    return create_success()


@router.get(f"{BASE_IMAGE_API}/download")
async def download_image(
    file_id: str,
    metadata: BaseMetadataStore = Depends(get_metadata),
    storage: BaseStorageDriver = Depends(get_storage),
):
    """Download a public image as an attachment.

    The blob stream is closed after the response even when the client goes
    away before the body is sent.
    """
    record, stream = await asset_service.download_asset(metadata, storage, file_id)

    media_type = mimetypes.guess_type(record.name)[0] or "application/octet-stream"
    return StreamingResponse(
        stream,
        media_type=media_type,
        headers={"Content-Disposition": content_disposition(record.name)},
        background=BackgroundTask(stream.close),
    )
