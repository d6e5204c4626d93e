"""Console and JSON-file logging for the ``expense_tracker`` package.

Only the package logger carries handlers. Module loggers obtained through
:func:`logging.getLogger` propagate to it, so one call to
:func:`configure_cli_logging` (or :func:`setup_logger`) covers the server, the
database layer and the client alike.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Final

CONSOLE_FORMAT: Final[str] = "[%(levelname)s] %(name)s: %(message)s"
LOG_PATH: Final[Path] = Path("artifacts") / "logs" / "expense_tracker.log"
JSON_ENV_FLAG: Final[str] = "EXPENSE_TRACKER_JSON_LOGS"
LEVEL_ENV_FLAG: Final[str] = "EXPENSE_TRACKER_LOG_LEVEL"
ROOT_LOGGER: Final[str] = "expense_tracker"

# Attribute marking the handlers installed here, valued "console" or "json".
HANDLER_TAG: Final[str] = "expense_tracker_handler"

_REQUEST_FIELDS: Final[tuple[str, ...]] = ("method", "path", "status_code", "duration_ms")


class JsonLogFormatter(logging.Formatter):
    """One JSON object per line; request fields appear only when the record has them."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "source": record.name,
            "message": record.getMessage(),
        }
        payload.update(
            (name, getattr(record, name)) for name in _REQUEST_FIELDS if getattr(record, name, None) is not None
        )
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def json_logging_enabled(explicit: bool = False) -> bool:
    if explicit:
        return True
    return os.environ.get(JSON_ENV_FLAG, "").strip().lower() in {"1", "true", "yes", "on"}


def _level_number(level: str | None) -> int:
    # The environment wins over the caller so operators can raise verbosity.
    name = (os.environ.get(LEVEL_ENV_FLAG) or level or "INFO").strip().upper()
    number = logging.getLevelName(name)
    return number if isinstance(number, int) else logging.INFO


def _console_handler() -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    return handler


def _json_handler() -> logging.Handler:
    LOG_PATH.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(LOG_PATH, encoding="utf-8")
    handler.setFormatter(JsonLogFormatter())
    return handler


def _attach(logger: logging.Logger, kind: str, build: Callable[[], logging.Handler], level: int) -> None:
    handler = next((h for h in logger.handlers if getattr(h, HANDLER_TAG, None) == kind), None)
    if handler is None:
        handler = build()
        setattr(handler, HANDLER_TAG, kind)
        logger.addHandler(handler)
    handler.setLevel(level)


def setup_logger(name: str = ROOT_LOGGER, json_format: bool = False, level: str | None = None) -> logging.Logger:
    """Attach the console handler, plus the JSON file handler when requested.

    Repeated calls reuse the tagged handlers and only refresh their level.
    """

    number = _level_number(level)
    logger = logging.getLogger(name)
    logger.setLevel(number)
    logger.propagate = True
    _attach(logger, "console", _console_handler, number)
    if json_logging_enabled(json_format):
        _attach(logger, "json", _json_handler, number)
    return logger


def configure_cli_logging(json_logs: bool, level: str | None = None) -> logging.Logger:
    """Configure the package logger for a CLI run and let module loggers inherit it."""

    if json_logs:
        os.environ[JSON_ENV_FLAG] = "1"
    else:
        os.environ.pop(JSON_ENV_FLAG, None)
    prefix = ROOT_LOGGER + "."
    for name, logger in logging.Logger.manager.loggerDict.items():
        if isinstance(logger, logging.Logger) and name.startswith(prefix):
            logger.setLevel(logging.NOTSET)
    return setup_logger(ROOT_LOGGER, json_format=json_logs, level=level)


__all__ = [
    "JsonLogFormatter",
    "configure_cli_logging",
    "json_logging_enabled",
    "setup_logger",
]
