"""Business logic services."""

from image_repo.services.asset_service import (
    delete_asset,
    download_asset,
    get_asset,
    list_assets,
    set_visibility,
)
from image_repo.services.identifiers import generate_uid
from image_repo.services.upload_service import UploadPipeline, upload_result
from image_repo.services.user_service import create_user, get_user, list_users

__all__ = [
    "delete_asset",
    "download_asset",
    "get_asset",
    "list_assets",
    "set_visibility",
    "generate_uid",
    "UploadPipeline",
    "upload_result",
    "create_user",
    "get_user",
    "list_users",
]
