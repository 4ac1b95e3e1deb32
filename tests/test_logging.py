"""Tests for the structured logging setup."""

from __future__ import annotations

import json
import logging
import sys

import pytest
from rfxbridge.config import logging as rfx_logging
from rfxbridge.config.logging import LOG_STREAM_ENV, StructuredLogFormatter, configure_logging


def _record(**extra: object) -> logging.LogRecord:
    record = logging.LogRecord("rfxbridge.connection", logging.INFO, __file__, 1, "hello %s", ("world",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_emits_json_line() -> None:
    payload = json.loads(StructuredLogFormatter().format(_record()))
    assert payload["level"] == "INFO"
    assert payload["logger"] == "connection"
    assert payload["message"] == "hello world"
    assert payload["ts"].endswith("Z")
    assert "extra" not in payload


def test_formatter_renders_extra_fields() -> None:
    payload = json.loads(StructuredLogFormatter().format(_record(frame=b"\xDE\xAD", seq=3)))
    assert payload["extra"] == {"frame": "[DE AD]", "seq": 3}


def test_formatter_includes_exception() -> None:
    try:
        raise ValueError("bad frame")
    except ValueError:
        record = _record()
        record.exc_info = sys.exc_info()
    payload = json.loads(StructuredLogFormatter().format(record))
    assert "ValueError: bad frame" in payload["exception"]


def test_configure_logging_uses_stream_when_requested(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(LOG_STREAM_ENV, "1")
    configure_logging(debug=True)

    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1
    handler = root.handlers[0]
    assert type(handler) is logging.StreamHandler
    assert isinstance(handler.formatter, StructuredLogFormatter)


def test_configure_logging_falls_back_to_stderr_without_syslog(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.delenv(LOG_STREAM_ENV, raising=False)
    monkeypatch.setattr(rfx_logging, "SYSLOG_SOCKETS", (tmp_path / "missing",))
    configure_logging()

    root = logging.getLogger()
    assert root.level == logging.INFO
    assert type(root.handlers[0]) is logging.StreamHandler
