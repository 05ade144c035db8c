"""Pytest configuration and fixtures."""

import io
from typing import List

import pytest
from fastapi.testclient import TestClient
from starlette.datastructures import UploadFile

from image_repo.api.deps import get_metadata, get_storage, get_upload_pipeline
from image_repo.errors import StoreError
from image_repo.main import app
from image_repo.metadata.memory_store import MemoryMetadataStore
from image_repo.services.upload_service import UploadPipeline
from image_repo.storage.base import StorageError
from image_repo.storage.local_driver import LocalStorageDriver


class RecordingStorage(LocalStorageDriver):
    """Local driver that records calls and can be told to fail."""

    def __init__(self, config):
        super().__init__(config)
        self.calls: List[tuple] = []
        self.fail_upload_on: set = set()
        self.fail_delete = False

    async def upload_file(self, key, content, public_read=True):
        self.calls.append(("upload", key))
        if any(key.endswith(f"-{name}") for name in self.fail_upload_on):
            raise StorageError(f"Failed to upload file: simulated outage for {key}")
        return await super().upload_file(key, content, public_read)

    async def open_stream(self, key):
        self.calls.append(("open", key))
        return await super().open_stream(key)

    async def delete_file(self, key):
        self.calls.append(("delete", key))
        if self.fail_delete:
            raise StorageError("Failed to delete file: simulated outage")
        await super().delete_file(key)


class RecordingMetadata(MemoryMetadataStore):
    """Memory store that records writes and can be told to fail them."""

    def __init__(self):
        super().__init__()
        self.writes: List[tuple] = []
        self.fail_writes = False

    def _check(self, op, path):
        self.writes.append((op, path))
        if self.fail_writes:
            raise StoreError(f"Failed to {op} {path}: simulated outage")

    async def set(self, path, record):
        self._check("set", path)
        await super().set(path, record)

    async def update(self, path, fields):
        self._check("update", path)
        await super().update(path, fields)

    async def delete(self, path):
        self._check("delete", path)
        await super().delete(path)

    async def increment(self, path, field, amount=1):
        self._check("increment", path)
        return await super().increment(path, field, amount)


def make_upload(filename: str, content: bytes = b"GIF89a fake image bytes") -> UploadFile:
    """Build an in-memory upload like the ones FastAPI hands to endpoints."""
    return UploadFile(file=io.BytesIO(content), filename=filename, size=len(content))


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def metadata():
    return RecordingMetadata()


@pytest.fixture
def storage(tmp_path):
    return RecordingStorage({"base_path": str(tmp_path / "blobs")})


@pytest.fixture
def staging_dir(tmp_path):
    path = tmp_path / "staging"
    path.mkdir()
    return path


@pytest.fixture
def pipeline(metadata, storage, staging_dir):
    return UploadPipeline(metadata, storage, staging_dir=str(staging_dir))


@pytest.fixture
def client(metadata, storage, pipeline):
    """Create a test client bound to in-memory metadata and a temp blob dir."""
    app.dependency_overrides[get_metadata] = lambda: metadata
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_upload_pipeline] = lambda: pipeline
    yield TestClient(app)
    app.dependency_overrides.clear()
