"""
Logging configuration for mdd_rest.

Features:
- Log level controlled via the LOG_LEVEL setting
- Console output as readable lines or as JSON lines (LOG_FORMAT)
- Repeated setup only updates level and format, one handler is installed
"""

import json
import logging
import sys

from mdd_rest.config import settings

LOGGER_NAME = "mdd_rest"
HUMAN_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)-8s %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_handler: logging.Handler | None = None


class JsonLinesFormatter(logging.Formatter):
    """One JSON object per record, for log shippers."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record, DATE_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def build_formatter(log_format: str) -> logging.Formatter:
    """Formatter for a LOG_FORMAT value, "human" or "json"."""
    if log_format == "json":
        return JsonLinesFormatter()
    return logging.Formatter(HUMAN_FORMAT, DATE_FORMAT)


def setup_logging(level: str | None = None, log_format: str | None = None) -> logging.Logger:
    """Configure the ``mdd_rest`` logger hierarchy.

    Args:
        level: Log level name. Defaults to settings.
        log_format: "human" or "json". Defaults to settings.

    Returns:
        The package logger
    """
    global _handler

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel((level or settings.log_level).upper())

    if _handler is None:
        _handler = logging.StreamHandler(sys.stdout)
        logger.addHandler(_handler)
        logger.propagate = False
    _handler.setFormatter(build_formatter(log_format or settings.log_format))
    return logger
