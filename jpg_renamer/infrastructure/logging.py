"""loguru setup for the renamer: a rotating daily file plus an optional stderr sink."""

from __future__ import annotations

from pathlib import Path
import sys

from loguru import logger

APP_DIR_NAME = ".jpgrenamer"
CONSOLE_FORMAT = "<level>{level: <8}</level> {message}"


def get_log_directory() -> str:
    """Default log directory, `~/.jpgrenamer/logs`."""
    return str(Path.home() / APP_DIR_NAME / "logs")


def init_logging(
    log_dir: str | None = None, level: str = "INFO", console_level: str | None = None
) -> Path:
    """Initialize rotating file logging under the given directory.

    Args:
        log_dir: Directory for `app_*.log` files; defaults to `get_log_directory()`.
        level: Minimum level written to the log file.
        console_level: If set, also log to stderr from this level up.

    Returns:
        The directory the log files are written to.
    """
    log_path = Path(log_dir or get_log_directory())
    log_path.mkdir(parents=True, exist_ok=True)

    logger.remove()
    logger.add(
        str(log_path / "app_{time:YYYYMMDD}.log"),
        rotation="10 MB",
        retention="10 days",
        compression="zip",
        enqueue=True,
        backtrace=False,
        diagnose=False,
        level=level,
    )
    if console_level:
        logger.add(sys.stderr, level=console_level, format=CONSOLE_FORMAT)
    return log_path
