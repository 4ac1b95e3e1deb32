"""Logging setup for the RFXCOM bridge daemon.

Records are emitted as one JSON object per line. Syslog is used when a local
socket exists; set ``RFXBRIDGE_LOG_STREAM`` to force stderr instead.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from logging.config import dictConfig
from logging.handlers import SysLogHandler
from pathlib import Path
from typing import Any

import msgspec

LOG_STREAM_ENV = "RFXBRIDGE_LOG_STREAM"
SYSLOG_SOCKETS: tuple[Path, ...] = (Path("/dev/log"), Path("/var/run/log"))

# Attributes every LogRecord carries; anything else came in through ``extra=``.
_RECORD_ATTRIBUTES = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


def _render_extra(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        return f"[{bytes(value).hex(' ').upper()}]"
    return str(value)


class StructuredLogFormatter(logging.Formatter):
    """JSON line formatter with the ``rfxbridge.`` logger prefix stripped."""

    PREFIX = "rfxbridge."

    def format(self, record: logging.LogRecord) -> str:
        name = record.name.removeprefix(self.PREFIX)
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)

        payload: dict[str, Any] = {
            "ts": created.isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }

        extra = {
            key: _render_extra(value)
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRIBUTES and not key.startswith("_")
        }
        if extra:
            payload["extra"] = extra
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return msgspec.json.encode(payload).decode("utf-8")


def _build_handler() -> logging.Handler:
    if os.environ.get(LOG_STREAM_ENV):
        return logging.StreamHandler()

    for socket_path in SYSLOG_SOCKETS:
        if socket_path.exists():
            handler = SysLogHandler(address=str(socket_path), facility=SysLogHandler.LOG_DAEMON)
            handler.ident = "rfxbridge "
            return handler
    return logging.StreamHandler()


def configure_logging(debug: bool = False) -> None:
    """Install the structured handler on the root logger."""

    level_name = "DEBUG" if debug else "INFO"
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "structured": {"()": "rfxbridge.config.logging.StructuredLogFormatter"},
            },
            "handlers": {
                "rfxbridge": {
                    "()": _build_handler,
                    "level": level_name,
                    "formatter": "structured",
                }
            },
            "root": {"level": level_name, "handlers": ["rfxbridge"]},
        }
    )
    logging.getLogger("rfxbridge").info("Logging configured at level %s", level_name)
