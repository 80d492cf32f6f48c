"""Logging configuration utilities for lipsample.

lipsample is silent by default (a NullHandler is attached to the
``lipsample`` logger on import). These helpers attach real handlers.

Example usage:
    import lipsample

    # Round-by-round sampling details on stderr
    lipsample.enable_console_logging(level="DEBUG")

    # Rotating log file
    lipsample.enable_file_logging("logs/lipsample.log", max_bytes=5_000_000)

    # Structured output for log aggregation
    lipsample.enable_json_logging()

    # Driven by environment variables
    lipsample.configure_from_env()

Environment variables:
    LS_LOGGING: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    LS_LOG_FILE: Path to a log file (enables rotating file logging)
    LS_LOG_JSON: Set to "1" for JSON output
"""

from __future__ import annotations

import json
import logging
import os
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Literal

__all__ = [
    "JsonFormatter",
    "configure_from_env",
    "disable_logging",
    "enable_console_logging",
    "enable_file_logging",
    "enable_json_logging",
    "set_level",
    "set_module_level",
]

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

DEFAULT_MAX_BYTES = 10 * 1024 * 1024  # 10 MB
DEFAULT_BACKUP_COUNT = 5

LOGGER_NAME = "lipsample"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class JsonFormatter(logging.Formatter):
    """Formats log records as one JSON object per line.

    Example output:
        {"timestamp": "2026-01-15T10:30:00.123456+00:00", "level": "WARNING",
         "logger": "lipsample.envelope", "message": "3 of 400 grid secants ..."}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data)


def _get_level(level: str | int) -> int:
    """Convert a level name or int to a logging level constant."""
    if isinstance(level, int):
        return level
    return getattr(logging, level.upper(), logging.INFO)


def _get_logger() -> logging.Logger:
    return logging.getLogger(LOGGER_NAME)


def _attach(handler: logging.Handler, level: LogLevel | int, formatter: logging.Formatter):
    """Set level and formatter on ``handler`` and add it to the package logger."""
    logger = _get_logger()
    logger.setLevel(_get_level(level))
    handler.setLevel(_get_level(level))
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    return handler


def _clear_handlers() -> None:
    """Remove and close every handler of the package logger except NullHandler."""
    logger = _get_logger()
    for handler in logger.handlers[:]:
        if not isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)
            handler.close()


def enable_console_logging(
    level: LogLevel | int = "INFO",
    format: str = DEFAULT_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT,
) -> logging.StreamHandler:
    """Log lipsample messages to stderr.

    Args:
        level: Log level name or int.
        format: Log message format string.
        date_format: Date format string for %(asctime)s.

    Returns:
        The created StreamHandler.
    """
    return _attach(logging.StreamHandler(), level, logging.Formatter(format, date_format))


def enable_file_logging(
    path: str | Path,
    level: LogLevel | int = "INFO",
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    json_format: bool = False,
) -> RotatingFileHandler:
    """Log lipsample messages to a rotating file.

    Args:
        path: Log file path. Parent directories are created.
        level: Log level name or int.
        max_bytes: Size at which the file is rotated. Default 10 MB.
        backup_count: Number of rotated files kept. Default 5.
        json_format: Write JSON lines instead of plain text.

    Returns:
        The created RotatingFileHandler.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    handler = RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backup_count)
    formatter = JsonFormatter() if json_format else logging.Formatter(
        DEFAULT_FORMAT, DEFAULT_DATE_FORMAT
    )
    return _attach(handler, level, formatter)


def enable_json_logging(level: LogLevel | int = "INFO") -> logging.StreamHandler:
    """Log lipsample messages to stderr as JSON lines."""
    return _attach(logging.StreamHandler(), level, JsonFormatter())


def configure_from_env() -> None:
    """Configure logging from ``LS_LOGGING``, ``LS_LOG_FILE`` and ``LS_LOG_JSON``.

    Does nothing when neither a level nor a file is set.
    """
    level = os.environ.get("LS_LOGGING", "").upper()
    log_file = os.environ.get("LS_LOG_FILE", "")
    use_json = os.environ.get("LS_LOG_JSON", "") == "1"

    if not level and not log_file:
        return

    level = level or "INFO"

    if log_file:
        enable_file_logging(log_file, level=level, json_format=use_json)
    elif use_json:
        enable_json_logging(level=level)
    else:
        enable_console_logging(level=level)


def set_level(level: LogLevel | int) -> None:
    """Set the level of the package logger."""
    _get_logger().setLevel(_get_level(level))


def set_module_level(module: str, level: LogLevel | int) -> None:
    """Set the level of one submodule logger.

    Example:
        >>> lipsample.enable_console_logging(level="DEBUG")
        >>> lipsample.set_module_level("acceptance", "WARNING")
    """
    logging.getLogger(f"{LOGGER_NAME}.{module}").setLevel(_get_level(level))


def disable_logging() -> None:
    """Remove all handlers and silence the package logger."""
    logger = _get_logger()
    _clear_handlers()
    logger.addHandler(logging.NullHandler())
    logger.setLevel(logging.CRITICAL + 1)
