"""Logging configuration for the CLI and the HTTP server.

Library modules only create module loggers; handlers are attached here.
"""

import logging
from enum import Enum
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "kalvian_roots"
FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class LogLevel(str, Enum):
    """Log level enumeration."""

    MINIMAL = "minimal"  # Warnings and errors
    NORMAL = "normal"  # INFO and above
    DETAILED = "detailed"  # Everything, including DEBUG


_LEVELS = {
    LogLevel.MINIMAL: logging.WARNING,
    LogLevel.NORMAL: logging.INFO,
    LogLevel.DETAILED: logging.DEBUG,
}


def setup_logging(
    level: LogLevel | str = LogLevel.NORMAL,
    log_file: Path | None = None,
    verbose: bool = False,
    console: Console | None = None,
) -> logging.Logger:
    """Configure the package logger.

    Args:
        level: Log level name or LogLevel
        log_file: Optional file to also write log records to
        verbose: Force DEBUG output regardless of level
        console: Rich console to render to (defaults to stderr)

    Returns:
        The configured package logger
    """
    log_level = logging.DEBUG if verbose else _LEVELS[LogLevel(level)]

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level)
    logger.handlers.clear()

    console_handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    console_handler.setLevel(log_level)
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger
