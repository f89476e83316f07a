"""JSON logging setup with request correlation for the shop backend."""

from __future__ import annotations

import json
import logging
import sys
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from typing import Any, Final

REQUEST_ID_CTX: Final[ContextVar[str | None]] = ContextVar("request_id", default=None)

# Attributes every LogRecord carries; anything else was passed via ``extra=``.
_STANDARD_RECORD_ATTRS: Final[frozenset[str]] = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime", "request_id", "taskName"}

_NOISY_LOGGERS: Final[tuple[str, ...]] = (
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "aiosqlite",
    "asyncio",
)

_configured: bool = False


class JsonLogFormatter(logging.Formatter):
    """Render each record as one compact JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = get_request_id()
        if request_id:
            entry["request_id"] = request_id

        for key, value in record.__dict__.items():
            if key in _STANDARD_RECORD_ATTRS or key.startswith("_") or value is None:
                continue
            entry[key] = _to_jsonable(value)

        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info).replace("\n", " | ")
        if record.stack_info:
            entry["stack"] = self.formatStack(record.stack_info).replace("\n", " | ")

        return json.dumps(entry, ensure_ascii=True, separators=(",", ":"))


def _to_jsonable(value: object) -> object:
    if isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (list, dict)):
        try:
            json.dumps(value)
        except TypeError:
            return str(value)
        return value
    return str(value)


def configure_logging(level_name: str) -> None:
    """Install the JSON handler on the root logger (first call wins)."""

    global _configured
    if _configured:
        return

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(JsonLogFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(_resolve_level(level_name))

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.captureWarnings(True)
    _configured = True


def _resolve_level(level_name: str) -> int:
    level_value = logging.getLevelName(level_name.strip().upper())
    if isinstance(level_value, int):
        return level_value
    return logging.INFO


def get_logger(name: str) -> logging.Logger:
    """Return the named module logger."""
    return logging.getLogger(name)


def bind_request_id(request_id: str) -> Token[str | None]:
    """Bind a request_id to the current context."""
    return REQUEST_ID_CTX.set(request_id)


def get_request_id() -> str | None:
    return REQUEST_ID_CTX.get()


def reset_request_id(token: Token[str | None]) -> None:
    REQUEST_ID_CTX.reset(token)


__all__ = [
    "JsonLogFormatter",
    "bind_request_id",
    "configure_logging",
    "get_logger",
    "get_request_id",
    "reset_request_id",
]
