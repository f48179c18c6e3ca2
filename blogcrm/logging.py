"""Logging setup for blogcrm commands."""

from __future__ import annotations

import json
import logging

from rich.console import Console
from rich.logging import RichHandler

from blogcrm.config.models import BlogCRMConfig

_LOGGER_NAME = "blogcrm"

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


class JsonFormatter(logging.Formatter):
    """One JSON object per log line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def configure_logging(config: BlogCRMConfig) -> logging.Logger:
    """Configure the ``blogcrm`` logger from config. Safe to call repeatedly."""
    level = logging.DEBUG if config.debug else _LEVELS[config.log_level]
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Reset handlers to avoid duplicate output when the CLI runs more than once.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler: logging.Handler
    if config.log_format == "json":
        handler = logging.StreamHandler()
        handler.setFormatter(JsonFormatter())
    else:
        handler = RichHandler(
            console=Console(stderr=True), show_path=False, rich_tracebacks=config.debug
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
    handler.setLevel(level)
    logger.addHandler(handler)
    return logger


__all__ = ["JsonFormatter", "configure_logging"]
