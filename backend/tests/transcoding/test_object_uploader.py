"""Tests for object keys, storage backends and the uploader."""

import logging
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from app.core.exceptions import StorageFailed
from app.core.storage import (
    LocalStorage,
    S3Storage,
    Storage,
    StorageConfig,
    StorageResult,
)
from app.modules.transcoding import AspectRatio, VideoUploader, build_object_key


class TestObjectKey:
    @pytest.mark.parametrize(
        "aspect,prefix",
        [
            (AspectRatio.LANDSCAPE, "landscape"),
            (AspectRatio.PORTRAIT, "portrait"),
            (AspectRatio.OTHER, "other"),
        ],
    )
    def test_key_is_category_slash_filename(self, aspect, prefix) -> None:
        assert build_object_key(aspect, "tok_en-123.mp4") == f"{prefix}/tok_en-123.mp4"


class TestLocalStorage:
    def test_upload_copies_file_under_key(self, tmp_path) -> None:
        source = tmp_path / "in.mp4.processed"
        source.write_bytes(b"moov-first")
        backend = LocalStorage(StorageConfig(backend="local", local_path=str(tmp_path / "bucket")))

        result = backend.upload(str(source), "portrait/abc.mp4", "video/mp4")

        assert result.success
        assert result.file_size == len(b"moov-first")
        assert (tmp_path / "bucket" / "portrait" / "abc.mp4").read_bytes() == b"moov-first"
        assert result.url.startswith("file://")

    def test_upload_overwrites_existing_object(self, tmp_path) -> None:
        backend = LocalStorage(StorageConfig(backend="local", local_path=str(tmp_path / "bucket")))
        first = tmp_path / "first"
        second = tmp_path / "second"
        first.write_bytes(b"one")
        second.write_bytes(b"two")

        backend.upload(str(first), "other/same.mp4")
        backend.upload(str(second), "other/same.mp4")

        assert (tmp_path / "bucket" / "other" / "same.mp4").read_bytes() == b"two"

    def test_missing_source_is_a_failed_result(self, tmp_path) -> None:
        backend = LocalStorage(StorageConfig(backend="local", local_path=str(tmp_path)))

        result = backend.upload(str(tmp_path / "gone.mp4"), "other/gone.mp4")

        assert not result.success
        assert result.error_message

    def test_cdn_url(self, tmp_path) -> None:
        backend = LocalStorage(
            StorageConfig(
                backend="local",
                local_path=str(tmp_path),
                cdn_domain="media.example.org",
                cdn_enabled=True,
            )
        )

        assert backend.get_url("landscape/a.mp4") == "https://media.example.org/landscape/a.mp4"


class TestS3Storage:
    def test_url_uses_virtual_hosted_bucket(self) -> None:
        backend = S3Storage(StorageConfig(backend="s3", bucket="clips", region="eu-west-1"))

        assert backend.get_url("landscape/a.mp4") == (
            "https://clips.s3.eu-west-1.amazonaws.com/landscape/a.mp4"
        )

    def test_url_with_custom_endpoint(self) -> None:
        backend = S3Storage(
            StorageConfig(backend="minio", bucket="clips", endpoint_url="http://minio:9000/")
        )

        assert backend.get_url("other/a.mp4") == "http://minio:9000/clips/other/a.mp4"

    def test_cdn_takes_precedence(self) -> None:
        backend = S3Storage(
            StorageConfig(
                backend="s3",
                bucket="clips",
                endpoint_url="http://minio:9000",
                cdn_domain="cdn.example.com",
                cdn_enabled=True,
            )
        )

        assert backend.get_url("portrait/a.mp4") == "https://cdn.example.com/portrait/a.mp4"

    def test_put_object_sets_bucket_key_and_content_type(self, tmp_path) -> None:
        source = tmp_path / "clip.mp4.processed"
        source.write_bytes(b"data")
        backend = S3Storage(StorageConfig(backend="s3", bucket="clips", region="us-east-1"))
        backend._client = MagicMock()
        backend._client.put_object.return_value = {"ETag": '"abc123"'}

        result = backend.upload(str(source), "landscape/clip.mp4", "video/mp4")

        assert result.success
        assert result.etag == "abc123"
        assert result.url == "https://clips.s3.us-east-1.amazonaws.com/landscape/clip.mp4"
        kwargs = backend._client.put_object.call_args.kwargs
        assert kwargs["Bucket"] == "clips"
        assert kwargs["Key"] == "landscape/clip.mp4"
        assert kwargs["ContentType"] == "video/mp4"

    def test_client_error_is_a_failed_result(self, tmp_path) -> None:
        source = tmp_path / "clip.mp4"
        source.write_bytes(b"data")
        backend = S3Storage(StorageConfig(backend="s3", bucket="clips"))
        backend._client = MagicMock()
        backend._client.put_object.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "Access Denied"}},
            "PutObject",
        )

        result = backend.upload(str(source), "other/clip.mp4", "video/mp4")

        assert not result.success
        assert "AccessDenied" in result.error_message


class TestStorageFacade:
    def test_unknown_backend_is_rejected(self) -> None:
        with pytest.raises(ValueError, match="Unsupported storage backend"):
            Storage(StorageConfig(backend="ftp"))

    @pytest.mark.parametrize("backend", ["s3", "minio", "aws", "S3"])
    def test_s3_compatible_backends(self, backend) -> None:
        storage = Storage(StorageConfig(backend=backend, bucket="b"))
        assert isinstance(storage._backend, S3Storage)


class TestVideoUploader:
    @pytest.mark.asyncio
    async def test_returns_public_url(self, tmp_path, storage) -> None:
        source = tmp_path / "clip.mp4.processed"
        source.write_bytes(b"data")

        url = await VideoUploader(storage).upload("landscape/clip.mp4", source, "video/mp4")

        assert url == "https://cdn.example.com/landscape/clip.mp4"

    @pytest.mark.asyncio
    async def test_failed_result_raises(self, tmp_path) -> None:
        backend = MagicMock()
        backend.upload.return_value = StorageResult(
            success=False, key="other/x.mp4", url="", error_message="connection reset"
        )

        with pytest.raises(StorageFailed, match="connection reset"):
            await VideoUploader(backend).upload("other/x.mp4", tmp_path / "x", "video/mp4")

        backend.upload.assert_called_once_with(str(tmp_path / "x"), "other/x.mp4", "video/mp4")

    def test_defaults_to_shared_storage(self, monkeypatch, storage) -> None:
        monkeypatch.setattr(Storage, "_instance", storage)

        assert VideoUploader().storage is storage

    @pytest.mark.asyncio
    async def test_logs_size_and_etag(self, tmp_path, caplog) -> None:
        backend = MagicMock()
        backend.upload.return_value = StorageResult(
            success=True,
            key="portrait/x.mp4",
            url="https://cdn.example.com/portrait/x.mp4",
            file_size=4,
            etag="9b2cf535f27731c974343645a3985328",
        )

        with caplog.at_level(logging.INFO, logger="app.modules.transcoding.uploader"):
            await VideoUploader(backend).upload("portrait/x.mp4", tmp_path / "x", "video/mp4")

        (record,) = [r for r in caplog.records if r.getMessage() == "Uploaded object"]
        assert record.file_size == 4
        assert record.etag == "9b2cf535f27731c974343645a3985328"
