"""FFmpeg fast-start remuxing.

Moves the MP4 ``moov`` atom ahead of the media data so playback can begin
before the whole file is downloaded. Streams are copied, never re-encoded.
"""

import logging
from pathlib import Path
from typing import Optional

from app.core.config import settings
from app.core.exceptions import TranscodeFailed
from app.modules.transcoding.process import ToolError, run_external_tool

logger = logging.getLogger(__name__)

PROCESSED_SUFFIX = ".processed"
OUTPUT_FORMAT = "mp4"


def output_path_for(input_path: Path) -> Path:
    """Deterministic output location: ``<input path>.processed``."""
    return input_path.with_name(input_path.name + PROCESSED_SUFFIX)


class FastStartTranscoder:
    """Rewrites a container for progressive playback."""

    def __init__(
        self,
        ffmpeg_path: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.ffmpeg_path = ffmpeg_path or settings.FFMPEG_PATH
        self.timeout = timeout if timeout is not None else settings.PROCESS_TIMEOUT_SECONDS

    def build_command(self, input_path: Path, output_path: Path) -> list[str]:
        return [
            self.ffmpeg_path,
            "-y",
            "-i", str(input_path),
            "-movflags", "faststart",
            "-map_metadata", "0",
            "-codec", "copy",
            "-f", OUTPUT_FORMAT,
            str(output_path),
        ]

    async def process(self, input_path: Path) -> Path:
        """Remux ``input_path`` into ``<input_path>.processed``.

        The input is left in place; the caller owns both files.

        Raises:
            TranscodeFailed: If ffmpeg cannot run or exits non-zero
        """
        output_path = output_path_for(input_path)
        cmd = self.build_command(input_path, output_path)

        try:
            result = await run_external_tool(cmd, timeout=self.timeout)
        except ToolError as e:
            raise TranscodeFailed(str(e)) from e

        if not result.ok:
            logger.error(
                "ffmpeg fast-start failed",
                extra={"exit_code": result.exit_code, "stderr": result.stderr},
            )
            raise TranscodeFailed(
                f"FFmpeg failed with exit code {result.exit_code}",
                stderr=result.stderr,
                exit_code=result.exit_code,
            )

        logger.info("ffmpeg fast-start completed", extra={"output": output_path.name})
        return output_path
