"""
Unified output system using Loguru.
User-facing messages are printed and also written to the log file.
"""

import sys
from pathlib import Path

from loguru import logger

from .config import get_data_dir

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} | {message}"


def get_log_file_path() -> Path:
    """Get the path to the log file."""
    return get_data_dir() / "random-album.log"


def setup_loguru(
    log_file: Path | None = None, level: str = "INFO", console_output: bool = False
) -> None:
    """
    Configure loguru for file logging, optionally mirrored to stderr.

    Args:
        log_file: Path to log file (default: data dir/random-album.log)
        level: Minimum level for file logging (DEBUG, INFO, WARNING, ERROR)
        console_output: Also emit records to stderr
    """
    log_file = log_file or get_log_file_path()
    log_file.parent.mkdir(parents=True, exist_ok=True)

    # Remove default handler
    logger.remove()

    logger.add(
        log_file,
        rotation="10 MB",
        retention=5,  # Keep 5 backup files
        level=level,
        format=LOG_FORMAT,
        enqueue=False,
    )

    if console_output:
        logger.add(sys.stderr, level=level, format="{level}: {message}")

    logger.info(f"Loguru initialized: {log_file} (level={level})")


def log(message: str, level: str = "info") -> None:
    """
    Unified logging: writes to the log file AND prints for the user.

    Use this instead of print() for user-facing messages that should also be logged.
    Errors and warnings go to stderr, everything else to stdout.

    Args:
        message: User-facing message
        level: Log level (debug, info, warning, error)
    """
    log_func = getattr(logger, level)
    log_func(message)

    if level == "debug":
        return
    stream = sys.stderr if level in ("warning", "error") else sys.stdout
    print(message, file=stream)
