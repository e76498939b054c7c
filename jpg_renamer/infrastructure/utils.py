"""Utilities for date parsing (EXIF and filesystem) and display formatting.

This module centralizes the date handling so the rest of the app can depend on
a single behavior. Parsers are best-effort and return `None` when a value is
missing or malformed; callers decide which fallback comes next.
"""

from __future__ import annotations

from datetime import datetime
import os
from typing import Any

from loguru import logger

EXIF_DT_FMT = "%Y:%m:%d %H:%M:%S"
DISPLAY_DT_FMT = "%Y-%m-%d %H:%M:%S"


def parse_exif_datetime(value: Any) -> datetime | None:
    """Parse an EXIF ASCII timestamp (`YYYY:MM:DD HH:MM:SS`); None on failure."""
    if value is None:
        return None
    if isinstance(value, bytes):
        value = value.decode("ascii", errors="ignore")
    # EXIF ASCII values are NUL-terminated and sometimes padded
    text = str(value).strip("\x00 ")
    if not text:
        return None
    try:
        return datetime.strptime(text[:19], EXIF_DT_FMT)
    except (ValueError, TypeError):
        return None


def format_display_datetime(dt: datetime | None) -> str:
    """Format datetime for display; empty string when None."""
    try:
        return dt.strftime(DISPLAY_DT_FMT) if dt else ""
    except (ValueError, TypeError, AttributeError):
        return ""


def get_filesystem_creation_datetime(path: str) -> datetime:
    """File creation time as a naive local datetime.

    Uses `st_birthtime` where the platform reports it (macOS, BSD, Windows on
    recent Pythons). Elsewhere `st_ctime` is the closest value available.

    Raises:
        OSError: if the file cannot be stat'ed.
    """
    st = os.stat(path)
    ts = getattr(st, "st_birthtime", None)
    if ts is None:
        ts = st.st_ctime
    try:
        return datetime.fromtimestamp(ts)
    except (OverflowError, ValueError) as ex:
        logger.debug("Creation time out of range for {}: {}", path, ex)
        raise OSError(f"Invalid creation time for {path}") from ex
