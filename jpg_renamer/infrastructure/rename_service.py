"""Rename planning and execution service.

Computes target paths from a record's proposed name, detects collisions,
optionally resolves them with a numeric `_N` suffix, and moves each file with
a single `os.rename`. Bulk renames are independent per file: a failure is
reported and the batch moves on, earlier successes are kept.
"""

from __future__ import annotations

from collections.abc import Iterable
import os
import threading
import weakref

from loguru import logger

from jpg_renamer.core.models import JPG_SUFFIX, ImageRecord
from jpg_renamer.core.services.interfaces import (
    ConflictLimitError,
    MoveFailedError,
    RenameError,
    RenameResult,
    TargetExistsError,
)

DEFAULT_MAX_CONFLICT_ATTEMPTS = 9999

_locks_guard = threading.Lock()
# Entries disappear once no rename holds the lock
_dir_locks: weakref.WeakValueDictionary[str, threading.Lock] = weakref.WeakValueDictionary()


def _directory_lock(directory: str) -> threading.Lock:
    """Return the process-wide lock serializing renames into `directory`."""
    key = os.path.normcase(os.path.abspath(directory))
    with _locks_guard:
        lock = _dir_locks.get(key)
        if lock is None:
            lock = _dir_locks[key] = threading.Lock()
        return lock


def same_path(a: str, b: str) -> bool:
    """Case-insensitive comparison of two normalized absolute paths."""
    return os.path.normpath(os.path.abspath(a)).lower() == os.path.normpath(
        os.path.abspath(b)
    ).lower()


def split_proposed_name(name: str) -> tuple[str, str]:
    """Split a `.jpg`-suffixed name into (base, suffix), keeping the suffix's case."""
    cut = len(name) - len(JPG_SUFFIX)
    return name[:cut], name[cut:]


class RenameService:
    """Renames files of `ImageRecord`s to their proposed names."""

    def __init__(self, settings: object | None = None) -> None:
        """Read the conflict probe bound (`rename.max_conflict_attempts`).

        A value of 0 or null disables the bound.
        """
        self._max_attempts: int | None = DEFAULT_MAX_CONFLICT_ATTEMPTS
        if settings is not None:
            raw = settings.get("rename.max_conflict_attempts", DEFAULT_MAX_CONFLICT_ATTEMPTS)
            try:
                value = int(raw or 0)
            except (ValueError, TypeError):
                value = DEFAULT_MAX_CONFLICT_ATTEMPTS
            self._max_attempts = value if value > 0 else None

    def compute_target(self, record: ImageRecord) -> str:
        """Sibling of the current path named after `record.proposed_name`."""
        return os.path.join(os.path.dirname(record.current_path), record.proposed_name)

    def rename(self, record: ImageRecord, resolve_conflicts: bool = False) -> None:
        """Rename the record's file to its proposed name.

        Args:
            record: Record to rename; `current_path` is updated on success.
            resolve_conflicts: If True, pick the first free `_N` suffixed name
                instead of failing when the target exists.

        Raises:
            TargetExistsError: target exists and `resolve_conflicts` is False.
            ConflictLimitError: no free suffixed name within the probe bound.
            MoveFailedError: the filesystem move failed; the file is untouched.
        """
        source = record.current_path
        target = self.compute_target(record)
        if same_path(source, target):
            logger.debug("Rename skipped, name unchanged: {}", source)
            return

        with _directory_lock(os.path.dirname(target)):
            if os.path.lexists(target):
                if not resolve_conflicts:
                    raise TargetExistsError(source, target)
                self._resolve_conflict(record)
                target = self.compute_target(record)
                if same_path(source, target):
                    logger.debug("Conflict resolved to the current name: {}", source)
                    return

            try:
                os.rename(source, target)
            except (OSError, ValueError) as ex:
                logger.error("Rename failed {} -> {}: {}", source, target, ex)
                raise MoveFailedError(source, target, ex) from ex

        record.current_path = target
        logger.info("Renamed {} -> {}", source, target)

    def rename_all(
        self, records: Iterable[ImageRecord], resolve_conflicts: bool = False
    ) -> RenameResult:
        """Rename every record in order and report per-file results."""
        result = RenameResult()
        for record in records:
            try:
                self.rename(record, resolve_conflicts)
                result.success_paths.append(record.current_path)
            except RenameError as ex:
                logger.warning("Rename of {} failed: {}", record.current_path, ex)
                result.failed.append((record.current_path, ex))
        logger.info(
            "Bulk rename finished ({} success, {} failed, resolve_conflicts={})",
            len(result.success_paths),
            len(result.failed),
            resolve_conflicts,
        )
        return result

    def _resolve_conflict(self, record: ImageRecord) -> None:
        """Set `record.proposed_name` to the first `<base>_N<ext>` that is free."""
        base, suffix = split_proposed_name(record.proposed_name)
        directory = os.path.dirname(record.current_path)
        attempt = 0
        while self._max_attempts is None or attempt < self._max_attempts:
            attempt += 1
            candidate = f"{base}_{attempt}{suffix}"
            candidate_path = os.path.join(directory, candidate)
            # The file's own current name counts as free
            if same_path(candidate_path, record.current_path) or not os.path.lexists(
                candidate_path
            ):
                logger.debug("Conflict on {} resolved as {}", record.proposed_name, candidate)
                record.proposed_name = candidate
                return
        raise ConflictLimitError(record.current_path, record.proposed_name, attempt)
