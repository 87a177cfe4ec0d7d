"""
Logging configuration utilities.

This module provides the standard logging setup for siteops scripts:
every message goes to stdout and is appended to the tool's log file.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    name: str = None,
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    console: bool = True,
    format_string: str = LOG_FORMAT,
) -> logging.Logger:
    """
    Set up logging with optional file and console handlers.

    Args:
        name: Logger name (defaults to root logger if None)
        level: Logging level (default: INFO)
        log_file: Path to an append-only log file (optional)
        console: Whether to add a stdout handler (default: True)
        format_string: Log message format

    Returns:
        Configured logger instance

    Example:
        >>> logger = setup_logging(log_file=Path("optimization.log"))
        >>> logger.info("Starting asset optimization...")
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Clear existing handlers to avoid duplicates
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(format_string, datefmt=DATE_FORMAT)

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def close_handlers(logger: logging.Logger) -> None:
    """Detach and close every handler of ``logger`` (flushes the log file)."""
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
