"""Logging setup for ledgerflow.

Modules obtain loggers through ``get_logger`` so that everything lives under
the ``ledgerflow`` namespace. Nothing is configured on import; the CLI calls
``configure_logging`` when a log level is requested.
"""

import json
import logging
import os
import sys
import threading
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any, Optional

__all__ = ["get_logger", "configure_logging", "reset_logging", "JSONFormatter", "LOG_LEVEL_ENV"]

_LOGGER_PREFIX = "ledgerflow"
LOG_LEVEL_ENV = "LEDGERFLOW_LOG_LEVEL"
TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

_STDLIB_KEYS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "taskName"}


class JSONFormatter(logging.Formatter):
    """Formats each log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Fields passed through ``extra=``
        for key, val in vars(record).items():
            if key not in _STDLIB_KEYS and key not in payload:
                payload[key] = val

        if record.exc_info and record.exc_info[1] is not None:
            exc = record.exc_info[1]
            payload["exc_type"] = type(exc).__name__
            payload["exc_message"] = str(exc)
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_json_default)


def _json_default(obj: Any) -> Any:
    if isinstance(obj, (Decimal, datetime)):
        return str(obj)
    return repr(obj)


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the ledgerflow namespace."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


_configured = False
_lock = threading.Lock()


def configure_logging(
    level: Optional[str | int] = None,
    *,
    json_output: bool = False,
    stream: Any = None,
) -> None:
    """Configure the ledgerflow logger hierarchy (idempotent).

    Args:
        level: Level name or number. Falls back to LEDGERFLOW_LOG_LEVEL, then WARNING.
        json_output: Emit one JSON object per line instead of plain text
        stream: Output stream, defaults to stderr
    """
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, "WARNING")
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(JSONFormatter() if json_output else logging.Formatter(TEXT_FORMAT))

    root_logger = logging.getLogger(_LOGGER_PREFIX)
    root_logger.setLevel(level)
    root_logger.addHandler(handler)


def reset_logging() -> None:
    """Reset logging configuration. FOR TESTING ONLY."""
    global _configured
    with _lock:
        _configured = False
    logger = logging.getLogger(_LOGGER_PREFIX)
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
