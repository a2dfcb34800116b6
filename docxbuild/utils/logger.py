"""
Logging helpers for docxbuild.

Library modules only create module-level loggers; applications embedding the
encoder pick a handler setup with configure_logging or setup_rich_logging.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
DEFAULT_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def _resolve_level(level: str) -> int:
    if not isinstance(level, str) or level.upper() not in _LEVELS:
        raise ValueError(f"Invalid log level: {level}")
    return getattr(logging, level.upper())


def get_logger(name: str) -> logging.Logger:
    """
    Get logger instance for module.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    if not name or not isinstance(name, str):
        raise ValueError("Logger name must be a non-empty string")
    return logging.getLogger(name)


def configure_logging(level: str = "INFO", format_string: Optional[str] = None,
                      log_file: Optional[str] = None, max_file_size: int = 10 * 1024 * 1024,
                      backup_count: int = 5, logger_name: str = "docxbuild") -> logging.Logger:
    """
    Configure plain stream (and optional rotating file) logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_string: Custom format string
        log_file: Log file path
        max_file_size: Maximum log file size in bytes
        backup_count: Number of backup files to keep
        logger_name: Logger to configure (package logger by default)

    Returns:
        The configured logger
    """
    resolved = _resolve_level(level)
    logger = logging.getLogger(logger_name)
    logger.setLevel(resolved)
    logger.handlers.clear()

    formatter = logging.Formatter(format_string or DEFAULT_FORMAT, datefmt=DEFAULT_DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(resolved)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(log_file, maxBytes=max_file_size, backupCount=backup_count)
        file_handler.setLevel(resolved)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def setup_rich_logging(level: str = "INFO", logger_name: str = "docxbuild",
                       console: Optional[Console] = None) -> logging.Logger:
    """
    Configure colorful console logging using the rich library.

    Args:
        level: Log level
        logger_name: Logger to configure (package logger by default)
        console: Console to write to (stderr console when omitted)

    Returns:
        The configured logger
    """
    resolved = _resolve_level(level)
    logger = logging.getLogger(logger_name)
    logger.setLevel(resolved)
    logger.handlers.clear()

    rich_handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=True,
        show_path=True,
        markup=False,
        rich_tracebacks=True,
    )
    rich_handler.setLevel(resolved)
    rich_handler.setFormatter(logging.Formatter(fmt="%(message)s", datefmt="[%X]"))
    logger.addHandler(rich_handler)
    return logger
