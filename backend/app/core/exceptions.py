"""Error taxonomy for the upload pipeline.

Every error is terminal for the request that raised it. Routers translate
them into HTTP responses using ``status_code``; ``error`` is the stable kind
name clients can switch on.
"""

from typing import Optional

from fastapi import HTTPException, status


class UploadError(Exception):
    """Base exception for upload pipeline errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def error(self) -> str:
        return type(self).__name__

    def to_http(self) -> HTTPException:
        """Build the HTTPException carrying the structured error body."""
        headers = None
        if self.status_code == status.HTTP_401_UNAUTHORIZED:
            headers = {"WWW-Authenticate": "Bearer"}
        return HTTPException(
            status_code=self.status_code,
            detail={"error": self.error, "message": self.message},
            headers=headers,
        )


class InvalidRequest(UploadError):
    """Missing or malformed input."""

    status_code = status.HTTP_400_BAD_REQUEST


class Unauthorized(UploadError):
    """Missing or invalid bearer credential."""

    status_code = status.HTTP_401_UNAUTHORIZED


class Forbidden(UploadError):
    """Authenticated user does not own the record."""

    status_code = status.HTTP_403_FORBIDDEN


class NotFound(UploadError):
    """Video record does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class PayloadTooLarge(UploadError):
    """Uploaded file exceeds the endpoint's ceiling."""

    status_code = 413


class UnsupportedMediaType(UploadError):
    """Declared content type is not accepted by the endpoint."""

    status_code = status.HTTP_415_UNSUPPORTED_MEDIA_TYPE


class ProcessingFailed(UploadError):
    """An external media tool failed.

    Carries the tool's captured stderr and exit code for operators.
    """

    def __init__(
        self,
        message: str,
        stderr: str = "",
        exit_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.stderr = stderr
        self.exit_code = exit_code


class TranscodeFailed(ProcessingFailed):
    """ffmpeg could not rewrite the container."""


class ProbeFailed(ProcessingFailed):
    """ffprobe could not inspect the file."""


class NoVideoStream(ProcessingFailed):
    """ffprobe reported no video stream."""


class StorageFailed(UploadError):
    """The object store rejected or failed the upload."""


class StoreError(UploadError):
    """The metadata record could not be persisted."""
