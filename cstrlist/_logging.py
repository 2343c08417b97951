"""
Logging for cstrlist.

Records from the collection carry a ``scope`` and, where it applies, the
``count`` of strings involved and the ``operation`` that was running. A
single formatter renders them either as one JSON object per line or as a
short line for a terminal.

Usage::

    from ._logging import scoped_logger

    log = scoped_logger("collection")
    log.debug("Rebuilt pointer array", extra={"count": 3})

Environment::

    CSTRLIST_LOG_LEVEL=trace|debug|info|warn|error|fatal|off (default: info)
    CSTRLIST_LOG_FORMAT=json|human (default: human if tty, json if piped)
"""

from __future__ import annotations

import json
import logging
import os
import sys
from collections.abc import MutableMapping
from datetime import datetime, timezone
from typing import Any

__all__ = ["logger", "setup_logging", "scoped_logger", "RecordFormatter"]

# Attributes the collection passes through ``extra``
RECORD_FIELDS = ("operation", "count")

# Level names accepted on top of the standard ones
_LEVEL_ALIASES = {
    "trace": logging.DEBUG,
    "warn": logging.WARNING,
    "fatal": logging.CRITICAL,
    "off": logging.CRITICAL + 10,
}


def _parse_level(name: str) -> int:
    name = name.lower()
    if name in _LEVEL_ALIASES:
        return _LEVEL_ALIASES[name]
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


class RecordFormatter(logging.Formatter):
    """
    Formatter for cstrlist records.

    ``layout="json"`` gives ``{"time", "level", "scope", "message", ...}``
    with ``operation``/``count`` as top-level keys when present.
    ``layout="human"`` gives ``HH:MM:SS LEVEL [scope] message (count=N)``.
    """

    def __init__(self, layout: str = "json") -> None:
        super().__init__(
            "%(asctime)s %(levelname)-7s [%(scope)s] %(message)s%(field_text)s",
            datefmt="%H:%M:%S",
        )
        self.layout = layout

    def format(self, record: logging.LogRecord) -> str:
        if not getattr(record, "scope", None):
            record.scope = record.name.rpartition(".")[2]
        fields = {key: getattr(record, key) for key in RECORD_FIELDS if hasattr(record, key)}

        if self.layout != "json":
            record.field_text = (
                " (" + ", ".join(f"{k}={v}" for k, v in fields.items()) + ")" if fields else ""
            )
            return super().format(record)

        payload: dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(
                timespec="milliseconds"
            ),
            "level": record.levelname,
            "scope": record.scope,
            "message": record.getMessage(),
            **fields,
        }
        if record.exc_info and record.exc_info[0] is not None:
            payload["error"] = f"{record.exc_info[0].__name__}: {record.exc_info[1]}"
        return json.dumps(payload, default=str)


def _get_log_level() -> int:
    return _parse_level(os.environ.get("CSTRLIST_LOG_LEVEL", "info"))


def _get_log_format() -> str:
    fmt = os.environ.get("CSTRLIST_LOG_FORMAT")
    if fmt:
        return fmt.lower()
    return "human" if sys.stderr.isatty() else "json"


def _create_handler(layout: str | None = None) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(RecordFormatter(layout or _get_log_format()))
    return handler


logger = logging.getLogger("cstrlist")


def setup_logging(level: str | int = "INFO", format: str | None = None) -> None:
    """
    Configure cstrlist logging.

    Args:
        level: Level name (``"debug"``, ``"warn"``, ``"off"`` ...) or a
            ``logging`` constant. Unknown names mean INFO.
        format: ``"json"`` or ``"human"``. Defaults to
            ``CSTRLIST_LOG_FORMAT``, then to TTY detection.

    Example:
        >>> cstrlist.setup_logging("DEBUG", format="human")
    """
    if isinstance(level, str):
        level = _parse_level(level)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    logger.addHandler(_create_handler(format.lower() if format else None))
    logger.setLevel(level)


class _ScopedLoggerAdapter(logging.LoggerAdapter):
    """Adds the adapter's scope to each record, keeping per-call extras."""

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> tuple[str, MutableMapping[str, Any]]:
        kwargs["extra"] = {**(self.extra or {}), **kwargs.get("extra", {})}
        return msg, kwargs


def scoped_logger(scope: str) -> logging.LoggerAdapter:
    """Logger adapter that tags every record with ``scope``."""
    return _ScopedLoggerAdapter(logger, {"scope": scope})


# Leave user-configured logging alone
if not logger.handlers:
    logger.addHandler(_create_handler())
    logger.setLevel(_get_log_level())
