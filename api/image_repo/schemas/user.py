"""User schemas."""

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field


class UserRecord(BaseModel):
    """User record as kept in the metadata store."""

    model_config = ConfigDict(extra="allow")

    id: str = Field(..., description="Short user identifier")
    username: str = Field(..., description="Username, unique case-insensitively")


class UserListResponse(BaseModel):
    success: bool = True
    users: List[Dict[str, Any]]
