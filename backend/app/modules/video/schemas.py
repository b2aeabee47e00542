"""Pydantic schemas for video module.

Defines request/response schemas and the upload constraints.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


# Upload constraints
VIDEO_FORM_FIELD = "video"
THUMBNAIL_FORM_FIELD = "thumbnail"
ALLOWED_VIDEO_MIME_TYPE = "video/mp4"
ALLOWED_THUMBNAIL_MIME_TYPES = {
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
}
MAX_TITLE_LENGTH = 255
MAX_DESCRIPTION_LENGTH = 5000


class VideoCreate(BaseModel):
    """Request schema for creating a video record."""

    title: str = Field(..., min_length=1, max_length=MAX_TITLE_LENGTH)
    description: Optional[str] = Field(None, max_length=MAX_DESCRIPTION_LENGTH)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title must not be blank")
        return v


class VideoResponse(BaseModel):
    """Video record as returned to clients (camelCase on the wire)."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: uuid.UUID
    user_id: uuid.UUID
    title: str
    description: Optional[str] = None
    thumbnail_url: Optional[str] = None
    video_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ErrorDetail(BaseModel):
    """Structured error body carried in ``detail``."""

    error: str
    message: str


class ErrorResponse(BaseModel):
    """Error envelope for documented failure responses."""

    detail: ErrorDetail
