from datetime import datetime
from pydantic import BaseModel, Field


class VideoCreate(BaseModel):
    """Create a video row for a blob that was already uploaded (see POST /api/upload)."""
    title: str
    url: str
    category_id: str | None = Field(default=None, alias="categoryId")
    duration: str | None = None

    class Config:
        populate_by_name = True


class VideoResponse(BaseModel):
    id: str
    title: str
    category_id: str | None
    category_name: str | None = None
    url: str
    duration: str
    display_order: int
    created_at: datetime

    class Config:
        from_attributes = True


class UploadResponse(BaseModel):
    url: str
