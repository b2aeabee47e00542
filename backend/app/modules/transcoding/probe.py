"""Aspect ratio classification with ffprobe."""

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Optional

from app.core.config import settings
from app.core.exceptions import NoVideoStream, ProbeFailed
from app.modules.transcoding.process import ToolError, run_external_tool

logger = logging.getLogger(__name__)


class AspectRatio(str, Enum):
    """Coarse display aspect category, used as the object key prefix."""

    LANDSCAPE = "landscape"
    PORTRAIT = "portrait"
    OTHER = "other"


RATIO_CATEGORIES = {
    "16:9": AspectRatio.LANDSCAPE,
    "9:16": AspectRatio.PORTRAIT,
}


def classify_aspect_ratio(ratio: Optional[str]) -> AspectRatio:
    """Map a ``display_aspect_ratio`` string to its category.

    Total: every input, including None, maps to a category.
    """
    if not isinstance(ratio, str):
        return AspectRatio.OTHER
    return RATIO_CATEGORIES.get(ratio, AspectRatio.OTHER)


class AspectRatioClassifier:
    """Reads the first video stream's display aspect ratio."""

    def __init__(
        self,
        ffprobe_path: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.ffprobe_path = ffprobe_path or settings.FFPROBE_PATH
        self.timeout = timeout if timeout is not None else settings.PROCESS_TIMEOUT_SECONDS

    def build_command(self, path: Path) -> list[str]:
        return [
            self.ffprobe_path,
            "-v", "error",
            "-select_streams", "v:0",
            "-show_entries", "stream=display_aspect_ratio",
            "-of", "json",
            str(path),
        ]

    async def classify(self, path: Path) -> AspectRatio:
        """Probe ``path`` and classify its display aspect ratio.

        Raises:
            ProbeFailed: If ffprobe cannot run, exits non-zero or prints
                output that is not JSON
            NoVideoStream: If ffprobe reports no video stream
        """
        try:
            result = await run_external_tool(self.build_command(path), timeout=self.timeout)
        except ToolError as e:
            raise ProbeFailed(str(e)) from e

        if not result.ok:
            logger.error(
                "ffprobe failed",
                extra={"exit_code": result.exit_code, "stderr": result.stderr},
            )
            raise ProbeFailed(
                f"FFprobe failed with exit code {result.exit_code}",
                stderr=result.stderr,
                exit_code=result.exit_code,
            )

        try:
            output = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise ProbeFailed(f"Unreadable ffprobe output: {e}", stderr=result.stderr) from e

        streams = output.get("streams") if isinstance(output, dict) else None
        if not isinstance(streams, list) or not streams:
            raise NoVideoStream("No video stream found")

        stream = streams[0] if isinstance(streams[0], dict) else {}
        ratio = stream.get("display_aspect_ratio")
        category = classify_aspect_ratio(ratio)
        logger.info("Classified aspect ratio", extra={"ratio": ratio, "category": category.value})
        return category
