"""
Logging setup for the label extraction pipeline.

Every module logs through ``get_logger(__name__)``; the loggers hang off the
``label_extraction`` namespace, so ``setup_logger`` (called once by the CLI)
decides the level, console colours and the optional rotating log file.
Nothing is printed until a handler is installed.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import colorama
from colorama import Fore, Style

colorama.init()

ROOT_LOGGER_NAME = "label_extraction"

DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LEVEL_COLORS = {
    logging.DEBUG: Fore.CYAN,
    logging.INFO: Fore.GREEN,
    logging.WARNING: Fore.YELLOW,
    logging.ERROR: Fore.RED,
    logging.CRITICAL: Fore.RED + Style.BRIGHT,
}

logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


class ColoredFormatter(logging.Formatter):
    """Console formatter that tints each record by level."""

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        color = LEVEL_COLORS.get(record.levelno)
        return f"{color}{text}{Style.RESET_ALL}" if color else text


def _file_handler(path: str, max_bytes: int, backup_count: int) -> logging.Handler:
    log_path = Path(path)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    return logging.handlers.RotatingFileHandler(
        log_path,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding='utf-8'
    )


def setup_logger(
    level: str = "INFO",
    log_format: Optional[str] = None,
    date_format: Optional[str] = None,
    log_file: Optional[str] = None,
    max_bytes: int = 10485760,
    backup_count: int = 5,
    colorize: bool = True
) -> logging.Logger:
    """
    Install console (and optionally file) handlers on the package logger.

    Calling it again replaces the previous handlers.

    Args:
        level: Level name applied to the logger and every handler.
        log_format: Record format; defaults to ``DEFAULT_FORMAT``.
        date_format: ``asctime`` format; defaults to ``DEFAULT_DATE_FORMAT``.
        log_file: Rotating log file path, or None for console only.
        max_bytes: Size at which the log file rotates.
        backup_count: Rotated files to keep.
        colorize: Colour console output by level.

    Returns:
        The ``label_extraction`` logger.
    """
    log_format = log_format or DEFAULT_FORMAT
    date_format = date_format or DEFAULT_DATE_FORMAT
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")

    package_logger = logging.getLogger(ROOT_LOGGER_NAME)
    package_logger.handlers.clear()
    package_logger.setLevel(numeric_level)
    package_logger.propagate = False

    formatter_cls = ColoredFormatter if colorize else logging.Formatter
    handlers = [(logging.StreamHandler(sys.stdout), formatter_cls)]
    if log_file:
        handlers.append((_file_handler(log_file, max_bytes, backup_count), logging.Formatter))

    for handler, formatter in handlers:
        handler.setLevel(numeric_level)
        handler.setFormatter(formatter(log_format, datefmt=date_format))
        package_logger.addHandler(handler)

    package_logger.debug(f"Logging initialized at {logging.getLevelName(numeric_level)}")
    return package_logger


def get_logger(name: str) -> logging.Logger:
    """Return the logger for module ``name``, placed under the package namespace."""
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def setup_logger_from_config(level: Optional[str] = None) -> logging.Logger:
    """
    Configure logging from the ``logging`` section of the settings file.

    ``level`` overrides the configured level (the CLI's --debug / --quiet).
    """
    from config import ConfigurationManager

    settings: Dict[str, Any] = ConfigurationManager().section("logging")
    file_settings = settings.get("file") or {}
    console_settings = settings.get("console") or {}

    return setup_logger(
        level=level or settings.get("level", "INFO"),
        log_format=settings.get("format"),
        date_format=settings.get("date_format"),
        log_file=file_settings.get("path") if file_settings.get("enabled") else None,
        max_bytes=file_settings.get("max_bytes", 10485760),
        backup_count=file_settings.get("backup_count", 5),
        colorize=console_settings.get("colorize", True)
    )
