"""Structured logging configuration."""
from __future__ import annotations

import logging
import sys


class StructuredFormatter(logging.Formatter):
    """Render log records as ``key=value`` pairs."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if hasattr(record, "extra_data"):
            log_data.update(record.extra_data)

        line = " ".join(f"{key}={value}" for key, value in log_data.items())
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


_configured = False


def configure_logging(level: str = "INFO") -> None:
    """Install the structured handler on the package logger once per process."""

    global _configured
    logger = logging.getLogger("orchard_desk")
    logger.setLevel(level.upper())
    if _configured:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredFormatter())
    logger.addHandler(handler)
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the package namespace."""

    return logging.getLogger(name)
