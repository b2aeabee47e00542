"""Video management module."""

from app.modules.video.models import Video
from app.modules.video.repository import VideoRepository
from app.modules.video.router import router, upload_router
from app.modules.video.service import (
    VideoService,
    encode_data_url,
    parse_video_id,
)

__all__ = [
    # Models
    "Video",
    # Repositories
    "VideoRepository",
    # Routers
    "router",
    "upload_router",
    # Service
    "VideoService",
    "encode_data_url",
    "parse_video_id",
]
