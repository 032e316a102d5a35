"""
Logging configuration for fishplot.

One named logger ("fishplot"), two destinations:

  - Console: WARNING+ by default, DEBUG with ``verbose=True``.
    Config ``console_format`` options:
    - "simple" — (default) bare messages for DEBUG/INFO, [LEVEL] prefix for WARNING+
    - "full"   — same structured format as the file handler
    - "clean"  — no console output at all
  - File: only when config ``log_to_file`` is true. Always DEBUG level,
    one file per session in ``<data_dir>/logs/``.
    Format: "timestamp | level | name | message"

Records propagate to the root logger, so applications (and pytest's caplog)
still see them.
"""

import logging
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Optional

from . import config

LOGGER_NAME = "fishplot"

# Module-level state (shared across re-inits)
_current_log_file: Optional[Path] = None


def get_log_dir() -> Path:
    """Directory holding per-session log files."""
    return config.get_data_dir() / "logs"


class _ConsoleFormatter(logging.Formatter):
    """Console formatter: shows [LEVEL] prefix only for WARNING and above.

    DEBUG/INFO messages print bare (e.g. ``  Drawing clone 3 (polygon)``).
    WARNING/ERROR messages include the level (e.g. ``  [WARNING] ...``).
    """

    def format(self, record: logging.LogRecord) -> str:
        if record.levelno >= logging.WARNING:
            return f"  [{record.levelname}] {record.getMessage()}"
        return f"  {record.getMessage()}"


_FILE_FORMAT = logging.Formatter(
    "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


def setup_logging(verbose: bool = False) -> logging.Logger:
    """Configure the fishplot logger.

    Args:
        verbose: If True, show DEBUG level on console; otherwise WARNING+ only

    Returns:
        Configured logger instance
    """
    global _current_log_file

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)  # Capture everything, filter at handler level

    # Clear existing handlers (in case of re-init)
    logger.handlers.clear()

    if config.get("log_to_file", False):
        log_dir = get_log_dir()
        log_dir.mkdir(parents=True, exist_ok=True)
        session_timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_dir / f"fishplot_{session_timestamp}.log"
        _current_log_file = log_file
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(_FILE_FORMAT)
        logger.addHandler(file_handler)

    console_format = config.get("console_format", "simple")
    if console_format != "clean":
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
        if console_format == "full":
            console_handler.setFormatter(_FILE_FORMAT)
        else:
            console_handler.setFormatter(_ConsoleFormatter())
        logger.addHandler(console_handler)
    else:
        # Keep the logger "configured" so get_logger() does not re-init
        logger.addHandler(logging.NullHandler())

    if _current_log_file is not None:
        logger.debug(f"Log file: {_current_log_file}")

    return logger


def get_logger() -> logging.Logger:
    """Get the fishplot logger instance.

    Returns:
        The fishplot logger (creates with defaults if not configured)
    """
    logger = logging.getLogger(LOGGER_NAME)
    if not logger.handlers:
        return setup_logging(verbose=False)
    return logger


def log_error(
    message: str,
    exc: Optional[Exception] = None,
    context: Optional[dict] = None,
) -> None:
    """Log an error with full details including stack trace.

    Args:
        message: Error description
        exc: Optional exception to include stack trace from
        context: Optional dict of additional context (clone index, shape, etc.)
    """
    logger = get_logger()

    lines = [message]

    if context:
        lines.append("Context:")
        for key, value in context.items():
            lines.append(f"  {key}: {value}")

    if exc:
        lines.append(f"Exception type: {type(exc).__name__}")
        lines.append(f"Exception message: {exc}")
        lines.append("Stack trace:")
        lines.append(traceback.format_exc())

    logger.error("\n".join(lines))


def get_current_log_path() -> Optional[Path]:
    """Return the path to the current session's log file (None if file logging is off)."""
    return _current_log_file
