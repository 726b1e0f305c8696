"""
bootstrap/entrypoints.py - Entry points

Logging setup shared by the command line and embedding hosts.
"""

from __future__ import annotations
from typing import Optional
import json
import logging
import sys

from .config import LoggingConfig

logger = logging.getLogger("bootstrap.entrypoints")

_HANDLER_MARK = "_affected_handler"


class JSONFormatter(logging.Formatter):
    """One JSON object per log record."""

    def format(self, record):
        return json.dumps({
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        })


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    json_format: bool = False,
    fmt: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
) -> None:
    """
    Configure application logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional log file path
        json_format: Use JSON format for logs
        fmt: Format string for plain text logs

    Calling again replaces the handlers installed by a previous call.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    formatter = JSONFormatter() if json_format else logging.Formatter(fmt)

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        if getattr(handler, _HANDLER_MARK, False):
            root_logger.removeHandler(handler)

    # Console handler; stdout carries command output
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(log_level)
    setattr(console_handler, _HANDLER_MARK, True)

    root_logger.setLevel(log_level)
    root_logger.addHandler(console_handler)

    # File handler
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        file_handler.setLevel(log_level)
        setattr(file_handler, _HANDLER_MARK, True)
        root_logger.addHandler(file_handler)

    # Reduce noise from third-party libraries
    logging.getLogger("networkx").setLevel(logging.WARNING)


def setup_logging_from_config(config: LoggingConfig, debug: bool = False) -> None:
    """Configure logging from a LoggingConfig; debug forces DEBUG level."""
    setup_logging(
        level="DEBUG" if debug else config.level,
        log_file=config.log_file,
        json_format=config.json_logs,
        fmt=config.format,
    )
