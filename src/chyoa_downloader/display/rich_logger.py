"""Rich-based logger configuration for chyoa-downloader."""

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from .constants import DATE_FORMAT, FILE_LOG_FORMAT, LOG_FORMAT, VALID_LOG_LEVELS


def get_valid_log_levels() -> list[str]:
    """Return a list of valid log level names."""
    return list(VALID_LOG_LEVELS)


def setup_rich_logger(
    name: str,
    level: int | str = logging.INFO,
    log_file: Path | None = None,
    quiet: bool = False,
    show_time: bool = True,
    show_path: bool = False,
) -> logging.Logger:
    """
    Set up a Rich-based logger, optionally mirrored to a file.

    Args:
        name: Logger name
        level: Logging level, as a number or a name like "DEBUG"
        log_file: Also write plain-text records to this file
        quiet: Only show errors on the console (the file still gets everything)
        show_time: Show timestamp in logs
        show_path: Show file path in logs

    Returns:
        Configured logger instance
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    console = Console(stderr=True)

    # Create Rich handler
    rich_handler = RichHandler(
        console=console,
        show_time=show_time,
        show_path=show_path,
        rich_tracebacks=True,
        markup=False,
    )
    rich_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    rich_handler.setLevel(logging.ERROR if quiet else level)

    # Create logger
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.handlers.clear()  # Clear any existing handlers
    logger.addHandler(rich_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, datefmt=DATE_FORMAT))
        file_handler.setLevel(level)
        logger.addHandler(file_handler)

    return logger
