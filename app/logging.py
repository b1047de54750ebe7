import logging
import sys
import traceback
from datetime import datetime
from typing import Optional, Union
from pathlib import Path

from app.config import settings

# Configure log formats
LOG_FORMAT = "%(levelname)s:     %(message)s (%(filename)s:%(lineno)d)"
RECORD_FORMAT = "%(message)s"

# Terminal color codes for different log levels
COLORS = {
    "DEBUG": "\033[94m",  # Blue
    "INFO": "\033[92m",  # Green
    "WARNING": "\033[93m",  # Yellow
    "ERROR": "\033[91m",  # Red
    "CRITICAL": "\033[1;91m",  # Bold Red
    "RESET": "\033[0m",  # Reset to default
}


class ColoredFormatter(logging.Formatter):
    """
    Custom formatter that adds colors to log level names in terminal output.

    Errors show up in red, warnings in yellow, so a busy webhook log
    can be scanned by eye.
    """

    def format(self, record):
        levelname = record.levelname
        if levelname in COLORS:
            record.levelname = f"{COLORS[levelname]}{levelname}{COLORS['RESET']}"
        result = super().format(record)
        record.levelname = levelname  # Restore original levelname
        return result


def get_logs_dir() -> Path:
    """Return the log directory, creating it on first use."""
    logs_dir = Path(settings.LOGS_DIR)
    logs_dir.mkdir(parents=True, exist_ok=True)
    return logs_dir


def setup_logger(
    name: str,
    level: Optional[Union[int, str]] = None,
    log_format: Optional[str] = None,
    log_file: Optional[Union[str, Path]] = None,
) -> logging.Logger:
    """
    Configure and return a logger with consistent formatting.

    Args:
        name: Logger name (typically __name__)
        level: Logging level (DEBUG, INFO, etc.), defaults to settings.LOG_LEVEL
        log_format: Custom log format string
        log_file: Optional path to additional log file

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if level is None and not logger.level:
        level = settings.LOG_LEVEL
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    if level is not None:
        logger.setLevel(level)

    if log_format is None:
        log_format = LOG_FORMAT

    standard_formatter = logging.Formatter(log_format)
    colored_formatter = ColoredFormatter(log_format)

    # Only add handlers if none exist already
    if not logger.handlers:
        # Console output with colors
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(colored_formatter)
        logger.addHandler(console_handler)

        # Optional specific log file
        if log_file:
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(standard_formatter)
            logger.addHandler(file_handler)

        # Daily error log file
        today = datetime.now().strftime("%Y-%m-%d")
        error_file_handler = logging.FileHandler(
            get_logs_dir() / f"{today}-errors.log"
        )
        error_file_handler.setLevel(logging.ERROR)
        error_file_handler.setFormatter(standard_formatter)
        logger.addHandler(error_file_handler)

    return logger


def setup_record_logger(name: str, path: Union[str, Path]) -> logging.Logger:
    """
    Return a logger that appends bare messages to ``path``.

    Used for durable one-line-per-event records; it does not propagate,
    so records never end up in the console stream twice.
    """
    target = str(Path(path).resolve())

    # One logger per file, so two sinks never write into each other's file
    logger = logging.getLogger(f"{name}[{target}]")
    logger.setLevel(logging.INFO)
    logger.propagate = False
    if logger.handlers:
        return logger

    Path(target).parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(target, encoding="utf-8")
    file_handler.setFormatter(logging.Formatter(RECORD_FORMAT))
    logger.addHandler(file_handler)
    return logger


def log_exception(logger: logging.Logger, message: str, exc: Exception = None) -> None:
    """
    Log an exception with full traceback information.

    Args:
        logger: Logger instance
        message: Error message to include
        exc: Exception object (if None, uses current exception context)
    """
    if exc is None:
        exc_type, exc_value, exc_traceback = sys.exc_info()
        if not any((exc_type, exc_value, exc_traceback)):
            logger.error(f"{message} (no exception info available)")
            return
    else:
        exc_type = type(exc)
        exc_value = exc
        exc_traceback = exc.__traceback__

    tb_lines = traceback.format_exception(exc_type, exc_value, exc_traceback)
    tb_text = "".join(tb_lines)
    logger.error(f"{message}\n{tb_text}")
