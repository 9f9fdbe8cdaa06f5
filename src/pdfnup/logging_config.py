"""Logging configuration for pdfnup."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TextIO

# Package-level logger name
LOGGER_NAME = "pdfnup"

_LEVEL_PREFIXES = {
    logging.DEBUG: "[debug] ",
    logging.INFO: "",
    logging.WARNING: "Warning: ",
    logging.ERROR: "Error: ",
    logging.CRITICAL: "Error: ",
}


def get_logger(name: str | None = None) -> logging.Logger:
    """Get a logger inside the pdfnup hierarchy.

    Args:
        name: Module name (e.g., __name__). If None, returns the root pdfnup logger.
    """
    if name is None or name == LOGGER_NAME:
        return logging.getLogger(LOGGER_NAME)
    if name.startswith(f"{LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


class ConsoleFormatter(logging.Formatter):
    """Plain console output: bare INFO lines, prefixed warnings and errors."""

    def format(self, record: logging.LogRecord) -> str:
        prefix = _LEVEL_PREFIXES.get(record.levelno)
        if prefix is None:
            return super().format(record)
        message = f"{prefix}{record.getMessage()}"
        if record.exc_info and record.levelno <= logging.DEBUG:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return message


class BelowWarningFilter(logging.Filter):
    """Only let DEBUG and INFO records through."""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < logging.WARNING


def setup_logging(
    verbosity: int = 0,
    quiet: bool = False,
    log_file: Path | None = None,
    stdout_stream: TextIO | None = None,
    stderr_stream: TextIO | None = None,
) -> None:
    """Configure logging for the pdfnup CLI.

    Args:
        verbosity: 0=normal, 1=verbose (-v), 2=debug (-vv)
        quiet: If True, suppress all output except errors
        log_file: Optional file receiving every record
        stdout_stream: Stream for INFO/DEBUG output (default sys.stdout)
        stderr_stream: Stream for WARNING and above (default sys.stderr)
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        if isinstance(handler, logging.FileHandler):
            handler.close()

    if quiet:
        console_level = logging.ERROR
    elif verbosity >= 2:
        console_level = logging.DEBUG
    else:
        console_level = logging.INFO

    # Capture everything at logger level, filter at handlers
    logger.setLevel(logging.DEBUG)

    stdout_handler = logging.StreamHandler(stdout_stream or sys.stdout)
    stdout_handler.setLevel(console_level)
    stdout_handler.setFormatter(ConsoleFormatter())
    stdout_handler.addFilter(BelowWarningFilter())
    logger.addHandler(stdout_handler)

    stderr_handler = logging.StreamHandler(stderr_stream or sys.stderr)
    stderr_handler.setLevel(max(console_level, logging.WARNING))
    stderr_handler.setFormatter(ConsoleFormatter())
    logger.addHandler(stderr_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        logger.addHandler(file_handler)
