"""Request and response models shared by the v1 endpoints."""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class TagResponse(BaseModel):
    """Response model for tag data."""

    id: int
    type: str = Field(validation_alias="tag_type")
    label: str
    count: int = Field(validation_alias="usage_count")
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class FileResponse(BaseModel):
    """Response model for file data."""

    id: int
    hash: str
    folder: str
    filename: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TagRefResponse(BaseModel):
    """Tag reference inside a file listing."""

    id: int
    label: str

    class Config:
        from_attributes = True


class FileWithTagsResponse(FileResponse):
    """File data with its linked tags."""

    tags: List[TagRefResponse] = []


class TagCreate(BaseModel):
    """Request to create (or fetch) a tag."""

    type: str = Field(min_length=1)
    label: str = Field(min_length=1)


class TagUpdate(BaseModel):
    """Request to rename a tag."""

    label: str = Field(min_length=1)


class FileTagLink(BaseModel):
    """Request to link a tag to a file."""

    file_path: str = Field(min_length=1)
    tag_id: int


class RatingUpdate(BaseModel):
    """Request to set a file's rating; 0 clears it."""

    file_path: str = Field(min_length=1)
    rating: int = Field(ge=0, le=5)


class OperationResponse(BaseModel):
    """Outcome of a mutation."""

    success: bool
    message: str
