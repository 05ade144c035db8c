"""Tests for the user registry."""

import pytest

from conftest import make_upload
from image_repo.errors import ConflictError, NotFoundError, StoreError, ValidationError
from image_repo.services import user_service

pytestmark = pytest.mark.anyio


async def test_create_user(metadata):
    details = await user_service.create_user(metadata, "Alice")

    assert details["username"] == "Alice"
    assert len(details["id"]) == 6
    assert await metadata.get(f"users/{details['id']}") == details
    assert await metadata.get("usernames/alice") == {"user_id": details["id"]}


@pytest.mark.parametrize("username", [None, ""])
async def test_missing_username(metadata, username):
    with pytest.raises(ValidationError, match="Please provide a username for the new user!"):
        await user_service.create_user(metadata, username)


async def test_duplicate_username_any_case(metadata):
    await user_service.create_user(metadata, "alice")

    with pytest.raises(ConflictError, match='User with username "ALICE" already exists!'):
        await user_service.create_user(metadata, "ALICE")

    assert len(await user_service.list_users(metadata)) == 1


async def test_username_with_slash(metadata):
    user = await user_service.create_user(metadata, "ac/dc")
    assert user["username"] == "ac/dc"
    assert await metadata.get("usernames/ac%2Fdc") == {"user_id": user["id"]}

    with pytest.raises(ConflictError, match='User with username "AC/DC" already exists!'):
        await user_service.create_user(metadata, "AC/DC")


async def test_user_without_index_entry_still_conflicts(metadata):
    await metadata.set("users/old001", {"id": "old001", "username": "Legacy"})

    with pytest.raises(ConflictError):
        await user_service.create_user(metadata, "legacy")


async def test_claimed_index_conflicts(metadata):
    # Another registration claimed the name but has not written its record yet
    await metadata.set_if_absent("usernames/bob", {"user_id": "race01"})

    with pytest.raises(ConflictError):
        await user_service.create_user(metadata, "Bob")


async def test_failed_write_releases_claim(metadata):
    original_set = metadata.set

    async def failing_set(path, record):
        if path.startswith("users/"):
            raise StoreError("Failed to write: simulated outage")
        await original_set(path, record)

    metadata.set = failing_set

    with pytest.raises(StoreError):
        await user_service.create_user(metadata, "carol")

    assert await metadata.get("usernames/carol") is None


async def test_list_users(metadata):
    await user_service.create_user(metadata, "a")
    await user_service.create_user(metadata, "b")
    users = await user_service.list_users(metadata)
    assert sorted(user["username"] for user in users) == ["a", "b"]


async def test_get_user_with_images(metadata, pipeline):
    user = await user_service.create_user(metadata, "dave")
    uploaded = await pipeline.run([make_upload("dog.png")], owner_id=user["id"])

    details = await user_service.get_user(metadata, user["id"])
    assert details["username"] == "dave"
    assert details["images"] == [
        {
            "id": uploaded[0].id,
            "name": "dog.png",
            "public": True,
            "owner_id": user["id"],
            "downloads": 0,
        }
    ]


async def test_get_missing_user(metadata):
    with pytest.raises(NotFoundError, match='User with id "nope00" does not exist.'):
        await user_service.get_user(metadata, "nope00")
