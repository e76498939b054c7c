"""ViewModel for loading a directory of JPEG files and renaming them."""

from __future__ import annotations

from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
import os
from pathlib import Path

from loguru import logger

from jpg_renamer.app.viewmodels.photo_vm import PhotoVM
from jpg_renamer.core.models import ImageRecord
from jpg_renamer.core.services.interfaces import LoadResult, ReadError, RenameResult
from jpg_renamer.infrastructure.metadata_service import MetadataService
from jpg_renamer.infrastructure.rename_service import RenameService

FILE_EXTENSIONS = (".jpg", ".jpeg")
DEFAULT_MAX_WORKERS = 4


def list_candidates(directory: str) -> list[str]:
    """Return regular `.jpg`/`.jpeg` files directly inside `directory`, sorted by name.

    Raises:
        NotADirectoryError: `directory` is not a directory.
        OSError: the directory cannot be listed.
    """
    root = Path(directory)
    if not root.is_dir():
        raise NotADirectoryError(f"Not a directory: {directory}")
    paths = [
        os.path.abspath(p)
        for p in root.iterdir()
        if p.is_file() and p.name.lower().endswith(FILE_EXTENSIONS)
    ]
    return sorted(paths, key=lambda p: Path(p).name.lower())


class MainVM:
    """Main application view-model.

    Mediates between the metadata/rename services and whatever presents the
    file list (the CLI, or a GUI table).
    """

    def __init__(
        self,
        extractor: MetadataService | None = None,
        renamer: RenameService | None = None,
        settings: object | None = None,
    ) -> None:
        """Create a MainVM.

        Args:
            extractor: Service building records from files.
            renamer: Service renaming records' files.
            settings: Optional settings (`extraction.max_workers`).
        """
        self._extractor = extractor or MetadataService(settings)
        self._renamer = renamer or RenameService(settings)
        self._max_workers = DEFAULT_MAX_WORKERS
        if settings is not None:
            try:
                self._max_workers = max(
                    1, int(settings.get("extraction.max_workers", DEFAULT_MAX_WORKERS) or 1)
                )
            except (ValueError, TypeError):
                self._max_workers = DEFAULT_MAX_WORKERS
        self.items: list[PhotoVM] = []
        self.load_failures: list[tuple[str, ReadError]] = []
        self._directory: str | None = None

    def load_directory(self, directory: str) -> LoadResult:
        """Replace the current list with the JPEG files found in `directory`."""
        paths = list_candidates(directory)
        self._directory = os.path.abspath(directory)
        logger.info("Loading {} JPEG files from {}", len(paths), self._directory)
        return self.load_files(paths)

    def load_files(self, paths: Iterable[str]) -> LoadResult:
        """Extract records for `paths` in parallel, keeping input order."""
        paths = list(paths)
        result = LoadResult()
        with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
            futures = [executor.submit(self._extractor.extract, p) for p in paths]
            for path, future in zip(paths, futures):
                try:
                    result.records.append(future.result())
                except ReadError as ex:
                    logger.warning("Could not open the image at {}: {}", path, ex)
                    result.failed.append((path, ex))

        self.items = [PhotoVM(r) for r in result.records]
        self.load_failures = list(result.failed)
        logger.info("Loaded {} files ({} failed)", len(result.records), len(result.failed))
        return result

    def get_directory(self) -> str | None:
        """Return the last-loaded directory, if available."""
        return self._directory

    @property
    def records(self) -> list[ImageRecord]:
        """Records of all listed items, in display order."""
        return [vm.record for vm in self.items]

    @property
    def item_count(self) -> int:
        """Number of files currently listed."""
        return len(self.items)

    def target_of(self, index: int) -> str:
        """Path the item at `index` would be renamed to."""
        return self._renamer.compute_target(self.items[index].record)

    def rename_item(self, index: int, resolve_conflicts: bool = False) -> None:
        """Rename the item at `index`; raises `RenameError` on failure."""
        self._renamer.rename(self.items[index].record, resolve_conflicts)

    def rename_all(self, resolve_conflicts: bool = False) -> RenameResult:
        """Rename every listed item, continuing past failures."""
        return self._renamer.rename_all(self.records, resolve_conflicts)

    def remove_from_list(self, paths_to_remove: list[str]) -> None:
        """Remove specified items from the list without touching the files."""
        if not paths_to_remove:
            return
        removed = {os.path.abspath(p) for p in paths_to_remove}
        self.items = [vm for vm in self.items if vm.record.current_path not in removed]
