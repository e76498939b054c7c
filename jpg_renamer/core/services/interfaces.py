"""Core error types and shared result structures.

Extraction and rename failures are raised as typed exceptions per file; batch
operations collect them into result dataclasses so one failure never stops
the rest of the batch.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from jpg_renamer.core.models import ImageRecord


class ReadError(Exception):
    """Base class for failures while loading a file."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(message)
        self.path = path


class FileUnavailableError(ReadError):
    """The file is missing, unreadable, or access was denied."""


class UnsupportedImageError(ReadError):
    """The bytes do not form a JPEG stream."""


class RenameError(Exception):
    """Base class for failures while renaming a file."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(message)
        self.path = path


class TargetExistsError(RenameError):
    """Another file already uses the target name."""

    def __init__(self, path: str, target_path: str) -> None:
        super().__init__(path, f'The file at "{target_path}" already exists.')
        self.target_path = target_path


class ConflictLimitError(RenameError):
    """No free `_N` suffix was found within the configured attempts."""

    def __init__(self, path: str, base_name: str, attempts: int) -> None:
        super().__init__(
            path, f'No free name for "{base_name}" after {attempts} numbered attempts.'
        )
        self.attempts = attempts


class MoveFailedError(RenameError):
    """The filesystem move failed; the original file was left in place."""

    def __init__(self, path: str, target_path: str, cause: OSError | ValueError) -> None:
        super().__init__(path, f'Moving "{path}" to "{target_path}" failed: {cause}')
        self.target_path = target_path
        self.cause = cause


@dataclass
class LoadResult:
    """Outcome of loading a batch of files.

    Attributes:
        records: Records in input order for files that loaded.
        failed: Tuples of (path, error) for files that did not.
    """

    records: list[ImageRecord] = field(default_factory=list)
    failed: list[tuple[str, ReadError]] = field(default_factory=list)


@dataclass
class RenameResult:
    """Outcome of a bulk rename.

    Attributes:
        success_paths: New paths of files that were renamed (or already named).
        failed: Tuples of (path, error) for files left under their old name.
    """

    success_paths: list[str] = field(default_factory=list)
    failed: list[tuple[str, RenameError]] = field(default_factory=list)
