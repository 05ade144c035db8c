"""Tests for the upload pipeline."""

import pytest

from conftest import make_upload
from image_repo.errors import StoreError, ValidationError
from image_repo.services.upload_service import is_allowed_filename, upload_result

pytestmark = pytest.mark.anyio


class TestIsAllowedFilename:
    @pytest.mark.parametrize("name", ["a.png", "a.jpg", "a.gif", "a.jpeg", "my.photo.jpeg"])
    def test_allowed(self, name):
        assert is_allowed_filename(name)

    @pytest.mark.parametrize("name", ["a.PNG", "a.bmp", "a.txt", "png", ".gif", "", None])
    def test_rejected(self, name):
        assert not is_allowed_filename(name)


async def test_single_upload(pipeline, metadata, storage):
    uploaded = await pipeline.run([make_upload("test.gif", b"GIF89a")])

    assert len(uploaded) == 1
    item = uploaded[0]
    assert item.name == "test.gif"
    assert item.link == f"./api/images/i/{item.id}/download"

    record = await metadata.get(f"images/{item.id}")
    assert record["public"] is True
    assert record["downloads"] == 0
    assert record["owner_id"] is None
    assert record["link"].startswith("file://")

    blob = storage.base_path / "images" / f"{item.id}-test.gif"
    assert blob.read_bytes() == b"GIF89a"


async def test_owner_recorded(pipeline, metadata):
    uploaded = await pipeline.run([make_upload("cat.png")], owner_id="user01")
    record = await metadata.get(f"images/{uploaded[0].id}")
    assert record["owner_id"] == "user01"


async def test_unsupported_type_touches_no_store(pipeline, metadata, storage):
    files = [make_upload("ok.png"), make_upload("notes.txt")]

    with pytest.raises(ValidationError, match="Only images are allowed."):
        await pipeline.run(files)

    assert storage.calls == []
    assert metadata.writes == []


async def test_no_files(pipeline):
    with pytest.raises(ValidationError, match="No images provided."):
        await pipeline.run([])


async def test_too_many_files(pipeline, storage):
    files = [make_upload(f"{i}.png") for i in range(6)]
    with pytest.raises(ValidationError, match="At most 5"):
        await pipeline.run(files)
    assert storage.calls == []


async def test_stops_at_first_failing_file(pipeline, metadata, storage):
    storage.fail_upload_on = {"b.png"}
    files = [make_upload("a.png"), make_upload("b.png"), make_upload("c.png")]

    with pytest.raises(StoreError, match="simulated outage"):
        await pipeline.run(files)

    uploaded_keys = [key for op, key in storage.calls if op == "upload"]
    assert len(uploaded_keys) == 2
    assert uploaded_keys[0].endswith("-a.png")
    assert uploaded_keys[1].endswith("-b.png")

    # a.png stays committed, nothing was recorded for b.png or c.png
    records = await metadata.list_children("images")
    assert [record["name"] for record in records.values()] == ["a.png"]


async def test_blob_failure_skips_metadata_and_releases_staging(
    pipeline, metadata, storage, staging_dir
):
    storage.fail_upload_on = {"a.png"}

    with pytest.raises(StoreError):
        await pipeline.run([make_upload("a.png")])

    assert metadata.writes == []
    assert list(staging_dir.iterdir()) == []


async def test_metadata_failure_leaves_orphan_blob(pipeline, metadata, storage, staging_dir):
    metadata.fail_writes = True

    with pytest.raises(StoreError):
        await pipeline.run([make_upload("a.png")])

    blobs = list((storage.base_path / "images").iterdir())
    assert len(blobs) == 1
    assert blobs[0].name.endswith("-a.png")
    assert list(staging_dir.iterdir()) == []


async def test_staging_released_after_success(pipeline, staging_dir):
    await pipeline.run([make_upload("a.png"), make_upload("b.jpg")])
    assert list(staging_dir.iterdir()) == []


class TestUploadResult:
    async def test_single_shape(self, pipeline):
        uploaded = await pipeline.run([make_upload("a.png")])
        result = upload_result(uploaded)
        assert set(result) == {"file"}
        assert result["file"]["name"] == "a.png"

    async def test_multiple_shape(self, pipeline):
        uploaded = await pipeline.run([make_upload("a.png"), make_upload("b.png")])
        result = upload_result(uploaded)
        assert set(result) == {"files"}
        assert [item["name"] for item in result["files"]] == ["a.png", "b.png"]
