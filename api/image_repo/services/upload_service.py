"""Upload pipeline: staging, blob write, metadata commit."""

import logging
import os
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from image_repo.config import settings
from image_repo.errors import StoreError, ValidationError
from image_repo.metadata.base import BaseMetadataStore
from image_repo.schemas.asset import UploadedFile
from image_repo.services.asset_service import blob_key_for, create_asset_record
from image_repo.services.identifiers import generate_uid
from image_repo.services.staging import IncomingFile, read_staged, staged_file
from image_repo.storage.base import BaseStorageDriver

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = (".png", ".jpg", ".gif", ".jpeg")


class UploadStage(str, Enum):
    """Stages a single file moves through, in order."""

    STAGE = "stage"
    BLOB_WRITE = "blob_write"
    RELEASE_STAGING = "release_staging"
    COMMIT_METADATA = "commit_metadata"


def is_allowed_filename(filename: Optional[str]) -> bool:
    """Check the file extension against the image allow-list (case-sensitive).

    Examples:
        >>> is_allowed_filename("cat.png")
        True
        >>> is_allowed_filename("cat.PNG")
        False
    """
    if not filename:
        return False
    return os.path.splitext(filename)[1] in ALLOWED_EXTENSIONS


def upload_result(uploaded: List[UploadedFile]) -> Dict[str, Any]:
    """Shape a batch result: ``file`` for one upload, ``files`` for several."""
    if len(uploaded) == 1:
        return {"file": uploaded[0].model_dump()}
    return {"files": [item.model_dump() for item in uploaded]}


class UploadPipeline:
    """Moves uploaded files into the blob store and records their metadata.

    Each file goes through the stages of :class:`UploadStage`. The blob is
    written before the record so that a failure can only leave an orphaned
    blob, never a record without content. Staging files are released as soon
    as the blob write finishes, before the record is committed.

    Example:
        >>> pipeline = UploadPipeline(metadata, storage)
        >>> uploaded = await pipeline.run(files, owner_id="k3x9a1")
    """

    def __init__(
        self,
        metadata: BaseMetadataStore,
        storage: BaseStorageDriver,
        staging_dir: Optional[str] = None,
        max_files: Optional[int] = None,
        link_template: Optional[str] = None,
    ):
        self.metadata = metadata
        self.storage = storage
        self.staging_dir = staging_dir or settings.staging_dir
        self.max_files = max_files or settings.max_files_per_upload
        self.link_template = link_template or settings.download_link_template

    def validate(self, files: Sequence[IncomingFile]) -> None:
        """Reject the whole batch before any storage I/O.

        Raises:
            ValidationError: No files, too many files, or a non-image extension
        """
        if not files:
            raise ValidationError("No images provided.")
        if len(files) > self.max_files:
            raise ValidationError(
                f"Too many files. At most {self.max_files} images can be uploaded at once."
            )
        for file in files:
            if not is_allowed_filename(file.filename):
                raise ValidationError("Only images are allowed.")

    async def run(
        self, files: Sequence[IncomingFile], owner_id: Optional[str] = None
    ) -> List[UploadedFile]:
        """Upload a batch of files sequentially, in submission order.

        Processing stops at the first failing file; files committed before it
        stay committed.

        Args:
            files: Incoming files
            owner_id: Id of the uploading user, None for anonymous uploads

        Returns:
            One UploadedFile per file

        Raises:
            ValidationError: If the batch is rejected
            StoreError: If a file could not be stored
        """
        self.validate(files)

        uploaded = []
        for file in files:
            uploaded.append(await self.upload_one(file, owner_id))

        logger.info(f"Uploaded {len(uploaded)} file(s) for owner {owner_id or 'anonymous'}")
        return uploaded

    async def upload_one(self, file: IncomingFile, owner_id: Optional[str] = None) -> UploadedFile:
        """Run one file through the pipeline stages."""
        name = file.filename
        asset_id = generate_uid()
        key = blob_key_for(asset_id, name)
        stage = UploadStage.STAGE

        try:
            async with staged_file(file, self.staging_dir) as staged:
                stage = UploadStage.BLOB_WRITE
                content = await read_staged(staged)
                url = await self.storage.upload_file(key, content, public_read=True)
                stage = UploadStage.RELEASE_STAGING

            stage = UploadStage.COMMIT_METADATA
            await create_asset_record(self.metadata, asset_id, url, name, owner_id)

        except StoreError as e:
            if stage == UploadStage.COMMIT_METADATA:
                logger.error(f"Blob {key} stored but its record could not be written: {e}")
            else:
                logger.error(f"Upload of {name} failed at stage {stage.value}: {e}")
            raise
        except OSError as e:
            logger.error(f"Upload of {name} failed at stage {stage.value}: {e}", exc_info=True)
            raise StoreError(f'Failed to stage file "{name}": {e}')

        logger.debug(f"Stored {name} as {key}")
        return UploadedFile(
            id=asset_id,
            name=name,
            link=self.link_template.format(id=asset_id),
        )
