"""Temporary on-disk staging for uploads being processed.

Staged files are named from a random URL-safe token, never from the video
id, so concurrent requests cannot collide and storage keys do not leak ids.
"""

import logging
import secrets
import shutil
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator, Union

from app.core.config import settings

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024  # 1 MB
TOKEN_BYTES = 32


class StagingArea:
    """Allocates, writes and removes staged files under a root directory."""

    def __init__(self, root: Union[str, Path, None] = None):
        self.root = Path(root if root is not None else settings.ASSETS_ROOT)

    def ensure_root(self) -> None:
        """Create the staging directory if it does not exist."""
        self.root.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def new_token() -> str:
        return secrets.token_urlsafe(TOKEN_BYTES)

    def path_for(self, filename: str) -> Path:
        return self.root / filename

    def write(self, path: Path, fileobj: BinaryIO) -> int:
        """Copy ``fileobj`` into ``path``; returns the number of bytes written."""
        self.ensure_root()
        fileobj.seek(0)
        with path.open("wb") as f:
            shutil.copyfileobj(fileobj, f, CHUNK_SIZE)
            return f.tell()

    @staticmethod
    def remove(path: Path) -> bool:
        """Delete ``path``. Missing files are not an error.

        Returns:
            True if a file was removed
        """
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        return True

    @contextmanager
    def staged(self, path: Path) -> Iterator[Path]:
        """Scope ``path`` to the ``with`` block; it is removed on every exit.

        Removal errors are logged and do not replace the block's outcome.
        """
        try:
            yield path
        finally:
            try:
                self.remove(path)
            except OSError as e:
                logger.warning(
                    "Failed to remove staged file",
                    extra={"path": str(path), "error": str(e)},
                )
