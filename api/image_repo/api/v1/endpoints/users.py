"""User endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, UploadFile

from image_repo.api.deps import get_metadata, get_upload_pipeline, read_body
from image_repo.metadata.base import BaseMetadataStore
from image_repo.schemas.user import UserListResponse
from image_repo.schemas.envelope import create_success
from image_repo.services import user_service
from image_repo.services.upload_service import UploadPipeline, upload_result

router = APIRouter()

BASE_USER_API = "/u/{user_id}"


@router.get("/", response_model=UserListResponse)
async def list_users(metadata: BaseMetadataStore = Depends(get_metadata)):
    """List all registered users."""
    users = await user_service.list_users(metadata)
    return create_success(users=users)


@router.post("/register")
async def register_user(
    body: dict = Depends(read_body),
    metadata: BaseMetadataStore = Depends(get_metadata),
):
    """
    Create a new user.

    - **username**: Username, unique regardless of case (required)
    """
    details = await user_service.create_user(metadata, body.get("username"))
    return create_success(details=details)


@router.get(BASE_USER_API)
async def get_user(user_id: str, metadata: BaseMetadataStore = Depends(get_metadata)):
    """Get a user with the public images they uploaded."""
    details = await user_service.get_user(metadata, user_id)
    return create_success(details=details)


@router.post(f"{BASE_USER_API}/upload")
async def upload_user_images(
    user_id: str,
    photos: Optional[List[UploadFile]] = File(None, description="Up to 5 image files"),
    metadata: BaseMetadataStore = Depends(get_metadata),
    pipeline: UploadPipeline = Depends(get_upload_pipeline),
):
    """Upload one or more images owned by a registered user."""
    await user_service.get_user_record(metadata, user_id)

    uploaded = await pipeline.run(photos or [], owner_id=user_id)
    return create_success(**upload_result(uploaded))
