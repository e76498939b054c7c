"""Core domain model for a loaded JPEG file."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
import os
from pathlib import Path
from typing import Any

UNKNOWN_DIMENSION = -1
JPG_SUFFIX = ".jpg"
NAME_DT_FMT = "%Y-%m-%d %H-%M-%S"


def ensure_jpg_suffix(name: str) -> str:
    """Return `name` with `.jpg` appended unless it already ends in it (any case)."""
    if name.lower().endswith(JPG_SUFFIX):
        return name
    return name + JPG_SUFFIX


def suggest_name(captured_at: datetime) -> str:
    """Format the capture timestamp as the default file name."""
    return captured_at.strftime(NAME_DT_FMT) + JPG_SUFFIX


@dataclass
class ImageRecord:
    """A single JPEG file with the attributes read at load time.

    Only the rename service updates `current_path`; `proposed_name` is free to
    be edited by the caller and always reads back with a `.jpg` suffix.
    """

    current_path: str
    captured_at: datetime
    width: int = UNKNOWN_DIMENSION
    height: int = UNKNOWN_DIMENSION
    thumbnail: Any | None = field(default=None, repr=False)
    _proposed_name: str = field(default="", init=False, repr=False)

    def __post_init__(self) -> None:
        self.current_path = os.path.abspath(self.current_path)
        self.proposed_name = suggest_name(self.captured_at)

    @property
    def proposed_name(self) -> str:
        """Name the file will get on the next rename."""
        return self._proposed_name

    @proposed_name.setter
    def proposed_name(self, value: str) -> None:
        name = (value or "").strip()
        if not name:
            raise ValueError("File name must not be empty")
        if "/" in name or os.sep in name or (os.altsep and os.altsep in name):
            raise ValueError(f"File name must not contain a path separator: {name!r}")
        if "\x00" in name:
            raise ValueError(f"File name must not contain a NUL character: {name!r}")
        self._proposed_name = ensure_jpg_suffix(name)

    @property
    def current_name(self) -> str:
        """Base name of the current path."""
        return Path(self.current_path).name

    @property
    def resolution(self) -> str:
        """`"W x H"`, or `"n/a"` when a dimension is unknown."""
        if self.width < 0 or self.height < 0:
            return "n/a"
        return f"{self.width} x {self.height}"
