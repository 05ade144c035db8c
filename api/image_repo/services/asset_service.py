"""Asset business logic service."""

import logging
from typing import Any, Dict, List, Optional, Tuple

import pydantic

from image_repo.errors import NotFoundError, PartialDeletionError, PermissionDeniedError, StoreError
from image_repo.metadata.base import BaseMetadataStore, RecordNotFoundError
from image_repo.schemas.asset import AssetRecord
from image_repo.services.visibility import parse_public_value
from image_repo.storage.base import BaseStorageDriver, BlobStream

logger = logging.getLogger(__name__)

IMAGES_NAMESPACE = "images"


def asset_path(asset_id: str) -> str:
    return f"{IMAGES_NAMESPACE}/{asset_id}"


def blob_key_for(asset_id: str, name: str) -> str:
    """Derive the blob key of an asset.

    Upload, deletion and download all address blobs through this function.

    Examples:
        >>> blob_key_for("abc123", "cat.png")
        'images/abc123-cat.png'
    """
    return f"images/{asset_id}-{name}"


async def create_asset_record(
    metadata: BaseMetadataStore,
    asset_id: str,
    url: str,
    name: str,
    owner_id: Optional[str] = None,
) -> AssetRecord:
    """Write a new asset record, public and with no downloads.

    Args:
        metadata: Metadata store
        asset_id: Generated asset id
        url: Direct blob URL returned by the storage driver
        name: Original filename
        owner_id: Id of the uploading user, None for anonymous uploads

    Returns:
        The stored AssetRecord
    """
    record = AssetRecord(
        id=asset_id,
        link=url,
        name=name,
        public=True,
        owner_id=owner_id,
        downloads=0,
    )
    await metadata.set(asset_path(asset_id), record.model_dump())
    return record


async def get_asset_record(metadata: BaseMetadataStore, asset_id: str) -> AssetRecord:
    """Fetch the full asset record.

    Raises:
        NotFoundError: If no asset has this id
    """
    data = await metadata.get(asset_path(asset_id))
    if data is None:
        raise NotFoundError(f'File with id "{asset_id}" does not exist.')
    return AssetRecord.model_validate(data)


async def get_asset(metadata: BaseMetadataStore, asset_id: str) -> Dict[str, Any]:
    """Get caller-facing details of an asset (direct link omitted)."""
    record = await get_asset_record(metadata, asset_id)
    return record.details()


async def list_assets(metadata: BaseMetadataStore) -> List[Dict[str, Any]]:
    """List every public asset in store order, direct links omitted."""
    children = await metadata.list_children(IMAGES_NAMESPACE)

    images = []
    for key, data in children.items():
        try:
            record = AssetRecord.model_validate(data)
        except pydantic.ValidationError as e:
            logger.warning(f"Skipping malformed asset record {key}: {e}")
            continue
        if record.public:
            images.append(record.details())
    return images


async def list_assets_owned_by(metadata: BaseMetadataStore, owner_id: str) -> List[Dict[str, Any]]:
    """List the public assets uploaded by a user.

    Recomputed on every call by scanning all public assets.
    """
    return [asset for asset in await list_assets(metadata) if asset["owner_id"] == owner_id]


async def set_visibility(metadata: BaseMetadataStore, asset_id: str, value: Any = None) -> bool:
    """Change whether an asset is public.

    Only the ``public`` field is written; the rest of the record is left
    untouched.

    Args:
        metadata: Metadata store
        asset_id: Asset id
        value: Requested value, see :func:`parse_public_value`

    Returns:
        The visibility now stored

    Raises:
        NotFoundError: If no asset has this id
        ValidationError: If value cannot be parsed
    """
    await get_asset_record(metadata, asset_id)
    public = parse_public_value(value)

    try:
        await metadata.update(asset_path(asset_id), {"public": public})
    except RecordNotFoundError:
        # deleted after the existence check
        raise NotFoundError(f'File with id "{asset_id}" does not exist.')

    logger.info(f"Asset {asset_id} visibility set to {'public' if public else 'private'}")
    return public


async def delete_asset(
    metadata: BaseMetadataStore,
    storage: BaseStorageDriver,
    asset_id: str,
) -> None:
    """Delete an asset's metadata record, then its blob.

    The order is fixed: a failure after the record is gone leaves an orphaned
    blob, never a record pointing at deleted content. Nothing is retried or
    rolled back.

    Raises:
        NotFoundError: If no asset has this id
        StoreError: If the metadata record could not be deleted
        PartialDeletionError: If the record was deleted but the blob was not
    """
    record = await get_asset_record(metadata, asset_id)

    await metadata.delete(asset_path(asset_id))

    key = blob_key_for(record.id, record.name)
    try:
        await storage.delete_file(key)
    except StoreError as e:
        logger.error(f"Asset {asset_id} metadata deleted but blob {key} was left behind: {e}")
        raise PartialDeletionError(
            f'File "{asset_id}" was removed but its stored content could not be deleted: {e.message}'
        )

    logger.info(f"Deleted asset {asset_id}")


async def download_asset(
    metadata: BaseMetadataStore,
    storage: BaseStorageDriver,
    asset_id: str,
) -> Tuple[AssetRecord, BlobStream]:
    """Count a download of a public asset and open its blob stream.

    Private assets are refused before the counter or the blob store is
    touched.

    Returns:
        Tuple of (record, stream); the record's ``name`` is the suggested
        save name

    Raises:
        NotFoundError: If no asset has this id
        PermissionDeniedError: If the asset is private
        StoreError: If the counter or the blob cannot be reached
    """
    record = await get_asset_record(metadata, asset_id)
    if not record.public:
        raise PermissionDeniedError(f'Cannot download file "{asset_id}": invalid permissions.')

    try:
        record.downloads = await metadata.increment(asset_path(asset_id), "downloads")
    except RecordNotFoundError:
        raise NotFoundError(f'File with id "{asset_id}" does not exist.')

    stream = await storage.open_stream(blob_key_for(record.id, record.name))
    return record, stream
