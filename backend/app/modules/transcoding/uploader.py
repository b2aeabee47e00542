"""Pushes processed media to the object store."""

import asyncio
import logging
from pathlib import Path
from typing import Optional

from app.core.exceptions import StorageFailed
from app.core.storage import Storage, get_storage
from app.modules.transcoding.probe import AspectRatio

logger = logging.getLogger(__name__)

VIDEO_CONTENT_TYPE = "video/mp4"
VIDEO_EXTENSION = "mp4"


def build_object_key(aspect: AspectRatio, filename: str) -> str:
    """Object key: ``{aspect}/{filename}``."""
    return f"{aspect.value}/{filename}"


class VideoUploader:
    """Uploads a local file to the configured bucket."""

    def __init__(self, storage: Optional[Storage] = None):
        self._storage = storage

    @property
    def storage(self) -> Storage:
        if self._storage is None:
            self._storage = get_storage()
        return self._storage

    async def upload(self, key: str, path: Path, content_type: str) -> str:
        """Store ``path`` under ``key``, overwriting any existing object.

        The blocking client call runs in the default executor.

        Returns:
            Public URL of the stored object

        Raises:
            StorageFailed: On any transport or authorization error
        """
        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(
            None, self.storage.upload, str(path), key, content_type
        )

        if not result.success:
            logger.error(
                "Object store upload failed",
                extra={"key": key, "error": result.error_message},
            )
            raise StorageFailed(f"Failed to upload {key}: {result.error_message}")

        logger.info(
            "Uploaded object",
            extra={"key": key, "file_size": result.file_size, "etag": result.etag},
        )
        return result.url
