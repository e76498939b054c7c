"""Lightweight view model wrapper around `ImageRecord`."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from jpg_renamer.core.models import ImageRecord
from jpg_renamer.infrastructure.utils import format_display_datetime


@dataclass
class PhotoVM:
    """Expose display-ready properties for a table row."""

    record: ImageRecord

    @property
    def current_name(self) -> str:
        """Base name of the file as it is on disk now."""
        return self.record.current_name

    @property
    def taken(self) -> str:
        """Capture date formatted for display."""
        return format_display_datetime(self.record.captured_at)

    @property
    def resolution(self) -> str:
        """`"W x H"` or `"n/a"`."""
        return self.record.resolution

    @property
    def new_name(self) -> str:
        return self.record.proposed_name

    @new_name.setter
    def new_name(self, value: str) -> None:
        self.record.proposed_name = value

    @property
    def thumbnail(self) -> Any | None:
        return self.record.thumbnail
