"""Tests for JSON log formatting and correlation IDs."""

import json
import logging
import sys

import pytest

from app.core.logging import (
    CorrelationIdFilter,
    StructuredFormatter,
    clear_correlation_id,
    get_correlation_id,
    set_correlation_id,
)


@pytest.fixture(autouse=True)
def reset_correlation_id():
    clear_correlation_id()
    yield
    clear_correlation_id()


def make_record(msg: str = "hello", level: int = logging.INFO, exc_info=None, **extra):
    record = logging.LogRecord(
        name="app.modules.transcoding.ffmpeg",
        level=level,
        pathname="ffmpeg.py",
        lineno=10,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestCorrelationId:
    def test_generated_once_per_context(self) -> None:
        first = get_correlation_id()
        assert first == get_correlation_id()

    def test_set_and_clear(self) -> None:
        set_correlation_id("abc")
        assert get_correlation_id() == "abc"

        clear_correlation_id()
        assert get_correlation_id() != "abc"

    def test_filter_stamps_record(self) -> None:
        set_correlation_id("upload-1")
        record = make_record()

        assert CorrelationIdFilter().filter(record) is True
        assert record.correlation_id == "upload-1"


class TestStructuredFormatter:
    def test_emits_json_with_core_fields(self) -> None:
        set_correlation_id("req-7")

        data = json.loads(StructuredFormatter().format(make_record("Video uploaded")))

        assert data["level"] == "INFO"
        assert data["logger"] == "app.modules.transcoding.ffmpeg"
        assert data["message"] == "Video uploaded"
        assert data["correlation_id"] == "req-7"
        assert data["source"]["line"] == 10

    def test_extra_fields_are_included(self) -> None:
        record = make_record(key="landscape/abc.mp4", exit_code=1, path=object())

        data = json.loads(StructuredFormatter().format(record))

        assert data["extra"]["key"] == "landscape/abc.mp4"
        assert data["extra"]["exit_code"] == 1
        assert isinstance(data["extra"]["path"], str)

    def test_exception_details(self) -> None:
        try:
            raise RuntimeError("ffprobe crashed")
        except RuntimeError:
            record = make_record("failed", level=logging.ERROR, exc_info=sys.exc_info())

        data = json.loads(StructuredFormatter().format(record))

        assert data["exception"]["type"] == "RuntimeError"
        assert data["exception"]["message"] == "ffprobe crashed"
        assert data["exception"]["stack_trace"]

    def test_stack_trace_can_be_disabled(self) -> None:
        try:
            raise ValueError("x")
        except ValueError:
            record = make_record("failed", level=logging.ERROR, exc_info=sys.exc_info())

        data = json.loads(StructuredFormatter(include_stack_trace=False).format(record))

        assert "exception" not in data
