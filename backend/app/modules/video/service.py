"""Video service for business logic.

Implements video record management and the upload pipeline:
stage → fast-start remux → classify aspect ratio → upload → record URL.
"""

import asyncio
import base64
import logging
import os
import uuid
from contextlib import ExitStack
from typing import Any, Callable, Optional, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile

from app.core.config import settings
from app.core.exceptions import (
    Forbidden,
    InvalidRequest,
    NotFound,
    PayloadTooLarge,
    StoreError,
    UnsupportedMediaType,
)
from app.core.logging import log_info
from app.modules.auth.jwt import validate_credential
from app.modules.transcoding import (
    VIDEO_CONTENT_TYPE,
    VIDEO_EXTENSION,
    AspectRatioClassifier,
    FastStartTranscoder,
    StagingArea,
    VideoUploader,
    build_object_key,
    output_path_for,
)
from app.modules.video.models import Video
from app.modules.video.repository import VideoRepository
from app.modules.video.schemas import (
    ALLOWED_THUMBNAIL_MIME_TYPES,
    ALLOWED_VIDEO_MIME_TYPE,
    THUMBNAIL_FORM_FIELD,
    VIDEO_FORM_FIELD,
    VideoCreate,
)

logger = logging.getLogger(__name__)


def parse_video_id(video_id: Union[str, uuid.UUID, None]) -> uuid.UUID:
    """Parse a video identifier.

    Raises:
        InvalidRequest: If the identifier is missing or not a UUID
    """
    if isinstance(video_id, uuid.UUID):
        return video_id
    if not video_id:
        raise InvalidRequest("Invalid video ID")
    try:
        return uuid.UUID(video_id)
    except ValueError:
        raise InvalidRequest("Invalid video ID")


def require_file(part: Any, field_name: str) -> UploadFile:
    """Ensure a multipart part is a file upload.

    Raises:
        InvalidRequest: If the part is missing or a plain form value
    """
    if not isinstance(part, UploadFile):
        raise InvalidRequest(f"Multipart field '{field_name}' must be a file")
    return part


def get_upload_size(upload: UploadFile) -> int:
    """Size of an uploaded file in bytes."""
    if upload.size is not None:
        return upload.size
    upload.file.seek(0, os.SEEK_END)
    size = upload.file.tell()
    upload.file.seek(0)
    return size


def get_media_type(upload: UploadFile) -> str:
    """Declared content type without parameters, lower-cased."""
    return (upload.content_type or "").split(";")[0].strip().lower()


def encode_data_url(media_type: str, data: bytes) -> str:
    """Inline ``data:`` URL for small binary assets."""
    return f"data:{media_type};base64,{base64.b64encode(data).decode('ascii')}"


class VideoService:
    """Service for video records and media uploads.

    Collaborators default to the configured implementations and can be
    replaced for testing.
    """

    def __init__(
        self,
        session: AsyncSession,
        video_repo: Optional[VideoRepository] = None,
        staging: Optional[StagingArea] = None,
        transcoder: Optional[FastStartTranscoder] = None,
        classifier: Optional[AspectRatioClassifier] = None,
        uploader: Optional[VideoUploader] = None,
    ):
        self.session = session
        self.video_repo = video_repo or VideoRepository(session)
        self.staging = staging or StagingArea()
        self.transcoder = transcoder or FastStartTranscoder()
        self.classifier = classifier or AspectRatioClassifier()
        self.uploader = uploader or VideoUploader()

    # Records

    async def create_video(self, user_id: uuid.UUID, request: VideoCreate) -> Video:
        """Create a video record with no media attached."""
        video = await self.video_repo.create(
            user_id=user_id,
            title=request.title,
            description=request.description,
        )
        await self._commit()
        return video

    async def get_video(self, video_id: Union[str, uuid.UUID]) -> Video:
        """Get a video record.

        Raises:
            InvalidRequest: If the id is malformed
            NotFound: If no record has that id
        """
        video = await self.video_repo.get_by_id(parse_video_id(video_id))
        if video is None:
            raise NotFound("Video metadata not found")
        return video

    async def list_videos(
        self,
        user_id: uuid.UUID,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Video]:
        return await self.video_repo.list_by_user(user_id, limit, offset)

    async def delete_video(
        self,
        video_id: Union[str, uuid.UUID],
        user_id: uuid.UUID,
    ) -> None:
        video = await self._get_owned_video(parse_video_id(video_id), user_id)
        await self.video_repo.delete(video)
        await self._commit()

    # Uploads

    async def authorize_upload(
        self,
        video_id: Union[str, uuid.UUID, None],
        token: Optional[str],
    ) -> Video:
        """Resolve the target record for an upload by its owner.

        Raises:
            InvalidRequest: If the id is missing or malformed
            Unauthorized: If the bearer token is missing or invalid
            NotFound: If the record does not exist
            Forbidden: If the caller does not own the record
        """
        video_uuid = parse_video_id(video_id)
        user_id = validate_credential(token)

        log_info(logger, "Upload authorized", video_id=str(video_uuid), user_id=str(user_id))

        return await self._get_owned_video(video_uuid, user_id)

    async def upload_video(
        self,
        video_id: Union[str, uuid.UUID, None],
        token: Optional[str],
        part: Any,
    ) -> Video:
        """Authorize and process a video upload in one call."""
        video = await self.authorize_upload(video_id, token)
        return await self.process_video(video, part)

    async def process_video(self, video: Video, part: Any) -> Video:
        """Process an uploaded video and attach it to its record.

        All validation happens before anything is staged or spawned. Both
        staged files (raw upload and fast-start output) are removed on every
        exit path, and ``video_url`` changes only when every stage succeeded.

        Args:
            video: Record returned by ``authorize_upload``
            part: The ``video`` multipart part

        Returns:
            Video: Updated record

        Raises:
            InvalidRequest, PayloadTooLarge, UnsupportedMediaType: Bad file
            TranscodeFailed, ProbeFailed, NoVideoStream: Processing failed
            StorageFailed: Object store upload failed
            StoreError: Record could not be saved
        """
        upload = require_file(part, VIDEO_FORM_FIELD)

        if get_upload_size(upload) > settings.MAX_VIDEO_UPLOAD_SIZE:
            raise PayloadTooLarge("File size exceeds the upload limit")

        if get_media_type(upload) != ALLOWED_VIDEO_MIME_TYPE:
            raise UnsupportedMediaType("Only mp4 files are allowed")

        filename = f"{self.staging.new_token()}.{VIDEO_EXTENSION}"
        raw_path = self.staging.path_for(filename)

        with ExitStack() as stack:
            stack.enter_context(self.staging.staged(raw_path))
            await self._run_blocking(self.staging.write, raw_path, upload.file)

            # Registered before ffmpeg starts so partial output is removed too
            stack.enter_context(self.staging.staged(output_path_for(raw_path)))
            processed_path = await self.transcoder.process(raw_path)

            aspect = await self.classifier.classify(processed_path)
            key = build_object_key(aspect, filename)
            url = await self.uploader.upload(key, processed_path, VIDEO_CONTENT_TYPE)

            video.video_url = url
            await self._save(video)

        log_info(logger, "Video uploaded", video_id=str(video.id), key=key)
        return video

    async def upload_thumbnail(
        self,
        video_id: Union[str, uuid.UUID, None],
        token: Optional[str],
        part: Any,
    ) -> Video:
        """Authorize and store a thumbnail in one call."""
        video = await self.authorize_upload(video_id, token)
        return await self.process_thumbnail(video, part)

    async def process_thumbnail(self, video: Video, part: Any) -> Video:
        """Store a thumbnail inline on the record as a data URL."""
        upload = require_file(part, THUMBNAIL_FORM_FIELD)

        if get_upload_size(upload) > settings.MAX_THUMBNAIL_UPLOAD_SIZE:
            raise PayloadTooLarge("Thumbnail size exceeds the upload limit")

        media_type = get_media_type(upload)
        if media_type not in ALLOWED_THUMBNAIL_MIME_TYPES:
            raise UnsupportedMediaType(
                f"Thumbnail must be one of: {', '.join(sorted(ALLOWED_THUMBNAIL_MIME_TYPES))}"
            )

        data = await upload.read()
        video.thumbnail_url = encode_data_url(media_type, data)
        await self._save(video)
        return video

    # Helpers

    async def _get_owned_video(self, video_id: uuid.UUID, user_id: uuid.UUID) -> Video:
        video = await self.video_repo.get_by_id(video_id)
        if video is None:
            raise NotFound("Video metadata not found")
        if video.user_id != user_id:
            raise Forbidden("You are not allowed to edit this video")
        return video

    async def _save(self, video: Video) -> None:
        try:
            await self.video_repo.update(video)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise StoreError("Failed to save video metadata") from e

    async def _commit(self) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise StoreError("Failed to save video metadata") from e

    @staticmethod
    async def _run_blocking(func: Callable[..., Any], *args: Any) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func, *args)
