"""Asset schemas."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class AssetRecord(BaseModel):
    """Asset record as kept in the metadata store."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., description="Short asset identifier")
    name: str = Field(..., description="Original filename")
    link: Optional[str] = Field(None, description="Direct blob URL, never returned to callers")
    public: bool = Field(default=True, description="Whether the asset can be downloaded")
    owner_id: Optional[str] = Field(None, description="Id of the uploading user")
    downloads: int = Field(default=0, ge=0, description="Number of downloads")

    def details(self) -> Dict[str, Any]:
        """Caller-facing view of the record (direct link omitted)."""
        return self.model_dump(exclude={"link"})


class UploadedFile(BaseModel):
    """Result of one successfully uploaded file."""

    id: str
    name: str
    link: str = Field(..., description="Download link served by this API")


class AssetDetailsResponse(BaseModel):
    success: bool = True
    details: Dict[str, Any]


class AssetListResponse(BaseModel):
    success: bool = True
    images: List[Dict[str, Any]]
