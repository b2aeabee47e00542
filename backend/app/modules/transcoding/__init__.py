"""Media processing: staging, fast-start remuxing, probing and upload."""

from app.modules.transcoding.ffmpeg import FastStartTranscoder, output_path_for
from app.modules.transcoding.probe import (
    AspectRatio,
    AspectRatioClassifier,
    classify_aspect_ratio,
)
from app.modules.transcoding.process import ToolError, ToolOutput, run_external_tool
from app.modules.transcoding.staging import StagingArea
from app.modules.transcoding.uploader import (
    VIDEO_CONTENT_TYPE,
    VIDEO_EXTENSION,
    VideoUploader,
    build_object_key,
)

__all__ = [
    "AspectRatio",
    "AspectRatioClassifier",
    "classify_aspect_ratio",
    "FastStartTranscoder",
    "output_path_for",
    "StagingArea",
    "ToolError",
    "ToolOutput",
    "run_external_tool",
    "VideoUploader",
    "VIDEO_CONTENT_TYPE",
    "VIDEO_EXTENSION",
    "build_object_key",
]
