"""Video API routers.

``router`` manages video records; ``upload_router`` accepts media uploads
for an existing record.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.exceptions import UploadError
from app.modules.auth.jwt import get_bearer_token, get_current_user_id
from app.modules.video.schemas import (
    THUMBNAIL_FORM_FIELD,
    VIDEO_FORM_FIELD,
    ErrorResponse,
    VideoCreate,
    VideoResponse,
)
from app.modules.video.service import VideoService

router = APIRouter(prefix="/videos", tags=["videos"])
upload_router = APIRouter(tags=["uploads"])

ERROR_RESPONSES = {
    code: {"model": ErrorResponse}
    for code in (400, 401, 403, 404, 413, 415, 500)
}


@router.post("", response_model=VideoResponse, status_code=status.HTTP_201_CREATED)
async def create_video(
    request: VideoCreate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Create a video record to upload media into."""
    service = VideoService(db)
    try:
        return await service.create_video(user_id, request)
    except UploadError as e:
        raise e.to_http()


@router.get("", response_model=list[VideoResponse])
async def list_videos(
    limit: int = 100,
    offset: int = 0,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """List the caller's videos, newest first."""
    service = VideoService(db)
    return await service.list_videos(user_id, limit, offset)


@router.get("/{video_id}", response_model=VideoResponse, responses=ERROR_RESPONSES)
async def get_video(
    video_id: str,
    _user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Get video by ID."""
    service = VideoService(db)
    try:
        return await service.get_video(video_id)
    except UploadError as e:
        raise e.to_http()


@router.delete(
    "/{video_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=ERROR_RESPONSES,
)
async def delete_video(
    video_id: str,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Delete a video record (owner only)."""
    service = VideoService(db)
    try:
        await service.delete_video(video_id, user_id)
    except UploadError as e:
        raise e.to_http()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@upload_router.post(
    "/video_upload/{video_id}",
    response_model=VideoResponse,
    responses=ERROR_RESPONSES,
)
async def upload_video(
    video_id: str,
    request: Request,
    token: Optional[str] = Depends(get_bearer_token),
    db: AsyncSession = Depends(get_db),
):
    """Upload an mp4 for a video record.

    The file (multipart field ``video``) is remuxed for fast start,
    classified by aspect ratio and stored; the record's ``videoUrl`` then
    points at the stored object.
    """
    service = VideoService(db)
    try:
        video = await service.authorize_upload(video_id, token)
        async with request.form() as form:
            return await service.process_video(video, form.get(VIDEO_FORM_FIELD))
    except UploadError as e:
        raise e.to_http()


@upload_router.post(
    "/thumbnail_upload/{video_id}",
    response_model=VideoResponse,
    responses=ERROR_RESPONSES,
)
async def upload_thumbnail(
    video_id: str,
    request: Request,
    token: Optional[str] = Depends(get_bearer_token),
    db: AsyncSession = Depends(get_db),
):
    """Upload a thumbnail image (multipart field ``thumbnail``)."""
    service = VideoService(db)
    try:
        video = await service.authorize_upload(video_id, token)
        async with request.form() as form:
            return await service.process_thumbnail(video, form.get(THUMBNAIL_FORM_FIELD))
    except UploadError as e:
        raise e.to_http()
