"""User registry and user queries."""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from image_repo.errors import ConflictError, NotFoundError, StoreError, ValidationError
from image_repo.metadata.base import BaseMetadataStore
from image_repo.schemas.user import UserRecord
from image_repo.services.asset_service import list_assets_owned_by
from image_repo.services.identifiers import generate_uid

logger = logging.getLogger(__name__)

USERS_NAMESPACE = "users"
USERNAMES_NAMESPACE = "usernames"


def user_path(user_id: str) -> str:
    return f"{USERS_NAMESPACE}/{user_id}"


def username_index_path(username: str) -> str:
    """Index path claiming a username, case-folded and escaped into one key.

    Examples:
        >>> username_index_path("AC/DC")
        'usernames/ac%2Fdc'
    """
    return f"{USERNAMES_NAMESPACE}/{quote(username.lower(), safe='')}"


async def list_users(metadata: BaseMetadataStore) -> List[Dict[str, Any]]:
    """List all user records verbatim, in store order."""
    children = await metadata.list_children(USERS_NAMESPACE)
    return list(children.values())


async def get_user_record(metadata: BaseMetadataStore, user_id: str) -> UserRecord:
    """Fetch a user record.

    Raises:
        NotFoundError: If no user has this id
    """
    data = await metadata.get(user_path(user_id))
    if data is None:
        raise NotFoundError(f'User with id "{user_id}" does not exist.')
    return UserRecord.model_validate(data)


async def get_user(metadata: BaseMetadataStore, user_id: str) -> Dict[str, Any]:
    """Get a user with the public images they uploaded."""
    user = await get_user_record(metadata, user_id)
    details = user.model_dump()
    details["images"] = await list_assets_owned_by(metadata, user_id)
    return details


async def create_user(metadata: BaseMetadataStore, username: Optional[str]) -> Dict[str, Any]:
    """Register a new user.

    Usernames are unique case-insensitively. Existing users are scanned first,
    then the lowercased username is claimed in the ``usernames`` index so two
    concurrent registrations cannot both succeed.

    Args:
        metadata: Metadata store
        username: Requested username

    Returns:
        The new user record

    Raises:
        ValidationError: If username is missing or empty
        ConflictError: If the username is taken
    """
    if not username or not isinstance(username, str):
        raise ValidationError("Please provide a username for the new user!")

    conflict = ConflictError(f'User with username "{username}" already exists!')

    for existing in await list_users(metadata):
        if str(existing.get("username", "")).lower() == username.lower():
            raise conflict

    user_id = generate_uid()
    index_path = username_index_path(username)
    if not await metadata.set_if_absent(index_path, {"user_id": user_id}):
        raise conflict

    user = UserRecord(id=user_id, username=username)
    try:
        await metadata.set(user_path(user_id), user.model_dump())
    except StoreError:
        await metadata.delete(index_path)
        raise

    logger.info(f"Registered user {user_id} ({username})")
    return user.model_dump()
