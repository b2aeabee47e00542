"""Shared fixtures: in-memory database, tokens, fake media tools, storage."""

import io
import json
import os
import shutil
import uuid
from pathlib import Path
from typing import Optional

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from starlette.datastructures import Headers, UploadFile

from app.core.database import Base
from app.core.storage import Storage, StorageConfig
from app.modules.auth.jwt import TokenBlacklist, create_access_token
from app.modules.transcoding import (
    AspectRatioClassifier,
    FastStartTranscoder,
    StagingArea,
    ToolOutput,
    VideoUploader,
)
from app.modules.video.models import Video
from app.modules.video.repository import VideoRepository

CDN_DOMAIN = "cdn.example.com"


class FakeToolRunner:
    """Stands in for ffmpeg/ffprobe.

    ffmpeg copies its input to the output path; ffprobe reports
    ``ratio`` for the first video stream.
    """

    def __init__(self) -> None:
        self.ratio: Optional[str] = "16:9"
        self.ffmpeg_exit = 0
        self.ffmpeg_stderr = ""
        self.ffprobe_exit = 0
        self.ffprobe_stderr = ""
        self.ffprobe_stdout: Optional[str] = None
        self.calls: list[list[str]] = []

    async def __call__(self, argv, timeout=None) -> ToolOutput:
        argv = list(argv)
        self.calls.append(argv)
        tool = os.path.basename(argv[0])

        if tool == "ffmpeg":
            source = argv[argv.index("-i") + 1]
            target = argv[-1]
            if self.ffmpeg_exit != 0:
                Path(target).write_bytes(b"partial")
                return ToolOutput(self.ffmpeg_exit, "", self.ffmpeg_stderr)
            shutil.copyfile(source, target)
            return ToolOutput(0, "", "")

        if tool == "ffprobe":
            if self.ffprobe_exit != 0:
                return ToolOutput(self.ffprobe_exit, "", self.ffprobe_stderr)
            if self.ffprobe_stdout is not None:
                return ToolOutput(0, self.ffprobe_stdout, "")
            stream = {} if self.ratio is None else {"display_aspect_ratio": self.ratio}
            return ToolOutput(0, json.dumps({"programs": [], "streams": [stream]}), "")

        raise AssertionError(f"Unexpected tool: {argv}")

    def tools_called(self) -> list[str]:
        return [os.path.basename(call[0]) for call in self.calls]


@pytest.fixture
def tool_runner(monkeypatch) -> FakeToolRunner:
    runner = FakeToolRunner()
    monkeypatch.setattr("app.modules.transcoding.ffmpeg.run_external_tool", runner)
    monkeypatch.setattr("app.modules.transcoding.probe.run_external_tool", runner)
    return runner


@pytest.fixture(autouse=True)
def clear_blacklist():
    TokenBlacklist.clear()
    yield
    TokenBlacklist.clear()


@pytest_asyncio.fixture
async def db_session():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def owner_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def owner_token(owner_id) -> str:
    token, _ = create_access_token(owner_id)
    return token


@pytest.fixture
def stranger_token() -> str:
    token, _ = create_access_token(uuid.uuid4())
    return token


@pytest_asyncio.fixture
async def video(db_session, owner_id) -> Video:
    repo = VideoRepository(db_session)
    record = await repo.create(owner_id, "Boot camp", "First lesson")
    record.video_url = "https://cdn.example.com/other/previous.mp4"
    await repo.update(record)
    await db_session.commit()
    return record


@pytest.fixture
def staging(tmp_path) -> StagingArea:
    return StagingArea(tmp_path / "assets")


@pytest.fixture
def storage(tmp_path) -> Storage:
    return Storage(
        StorageConfig(
            backend="local",
            local_path=str(tmp_path / "bucket"),
            cdn_domain=CDN_DOMAIN,
            cdn_enabled=True,
        )
    )


@pytest.fixture
def media_tools(tool_runner):
    return (
        FastStartTranscoder(ffmpeg_path="ffmpeg", timeout=5),
        AspectRatioClassifier(ffprobe_path="ffprobe", timeout=5),
    )


@pytest.fixture
def uploader(storage) -> VideoUploader:
    return VideoUploader(storage)


def make_upload(
    data: bytes = b"\x00\x00\x00\x18ftypmp42",
    content_type: str = "video/mp4",
    filename: str = "clip.mp4",
    size: Optional[int] = None,
) -> UploadFile:
    return UploadFile(
        file=io.BytesIO(data),
        size=len(data) if size is None else size,
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


def staged_files(staging: StagingArea) -> list[Path]:
    if not staging.root.exists():
        return []
    return list(staging.root.iterdir())
