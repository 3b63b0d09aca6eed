"""
Structured logging setup for the recommendation trend engine.

Call ``configure_logging(config)`` once at CLI entry (before any store or
report work) to set up the root logger with the configured level and
optional file handler.

All internal modules use ``logging.getLogger(__name__)`` — never call
``configure_logging`` or ``basicConfig`` from within library code.

Store and query modules attach context through ``extra=``, e.g. the event
store logs ``event_count`` / ``first_event_id`` / ``last_event_id`` per
append and the query service logs ``time_range`` / ``item_count``. Both
formats surface those fields:

  Text (default)::

    2026-10-19T15:00:00Z [INFO] rec_trends...event_repo: Appended 3 recommendation event(s). | event_count=3 first_event_id=1 last_event_id=3

  JSON (set ``json_format = true`` in config/default.toml [logging])::

    {"ts": "2026-10-19T15:00:00Z", "level": "INFO", "logger": "...", "msg": "...", "event_count": 3, ...}
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from rec_trends.config import LoggingConfig

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# Attributes every LogRecord carries; anything else came from ``extra=``.
_STANDARD_RECORD_KEYS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime"}


def record_context(record: logging.LogRecord) -> dict[str, Any]:
    """Return the ``extra=`` fields attached to ``record``, in insertion order."""
    return {
        key: val
        for key, val in record.__dict__.items()
        if key not in _STANDARD_RECORD_KEYS and not key.startswith("_")
    }


class _ContextFormatter(logging.Formatter):
    """Plain text lines with any ``extra=`` fields appended as ``key=value``."""

    def __init__(self) -> None:
        super().__init__(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
        self.converter = _utc_timetuple

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = record_context(record)
        if context:
            line += " | " + " ".join(f"{k}={v}" for k, v in context.items())
        return line


class _JsonFormatter(logging.Formatter):
    """Emit one JSON object per log line.

    Fields: ``ts``, ``level``, ``logger``, ``msg``, plus ``exc`` when an
    exception is attached and every ``extra=`` field at the top level.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).strftime(
                LOG_DATE_FORMAT
            ),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        payload.update(record_context(record))
        return json.dumps(payload, default=str)


def _utc_timetuple(seconds: float | None):
    return datetime.fromtimestamp(seconds or 0, tz=timezone.utc).timetuple()


def configure_logging(config: "LoggingConfig") -> None:
    """Configure the root logger from a ``LoggingConfig`` instance.

    Sets up a stdout handler at the configured level, an optional file
    handler when ``config.log_file`` is set, and JSON lines when
    ``config.json_format`` is ``True``. Timestamps are UTC in both formats.

    Args:
        config: Logging configuration section from ``AppConfig``.
    """
    level = getattr(logging, config.level.upper(), logging.INFO)

    formatter: logging.Formatter
    if config.json_format:
        formatter = _JsonFormatter()
    else:
        formatter = _ContextFormatter()

    handlers: list[logging.Handler] = []

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(formatter)
    handlers.append(console)

    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    logging.basicConfig(level=level, handlers=handlers, force=True)
