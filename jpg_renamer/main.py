from __future__ import annotations

import argparse
from pathlib import Path
import sys

from loguru import logger

from jpg_renamer.app.viewmodels.main_vm import MainVM
from jpg_renamer.infrastructure.image_service import ImageService
from jpg_renamer.infrastructure.logging import init_logging
from jpg_renamer.infrastructure.metadata_service import MetadataService
from jpg_renamer.infrastructure.rename_service import RenameService
from jpg_renamer.infrastructure.settings import DEFAULT_SETTINGS_PATH, JsonSettings


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jpg-renamer",
        description="Rename JPEG files after the date they were taken.",
    )
    parser.add_argument("directory", help="Directory containing .jpg/.jpeg files")
    parser.add_argument(
        "--rename", action="store_true", help="Rename all files (default: only list them)"
    )
    parser.add_argument(
        "--resolve-conflicts",
        action="store_true",
        default=None,
        help="Append _1, _2, ... instead of failing when a name is taken",
    )
    parser.add_argument(
        "--settings",
        default=str(DEFAULT_SETTINGS_PATH),
        help="JSON settings file (default: bundled settings.json)",
    )
    parser.add_argument("--log-dir", default=None, help="Directory for log files")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log details to stderr")
    return parser


def _print_table(vm: MainVM) -> None:
    rows = [("Current name", "Date taken", "Resolution", "New name")]
    rows += [(it.current_name, it.taken, it.resolution, it.new_name) for it in vm.items]
    widths = [max(len(r[i]) for r in rows) for i in range(4)]
    for row in rows:
        print("  ".join(cell.ljust(w) for cell, w in zip(row, widths)).rstrip())


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        settings = JsonSettings(Path(args.settings))
    except (OSError, ValueError) as ex:
        print(f"Cannot load settings: {ex}", file=sys.stderr)
        return 2

    log_dir = init_logging(
        args.log_dir or settings.get("logging.dir"),
        level=str(settings.get("logging.level", "INFO") or "INFO"),
        console_level="DEBUG" if args.verbose else "WARNING",
    )
    logger.info("Settings: {} | logs: {}", settings.path, log_dir)

    extractor = MetadataService(settings, ImageService(settings))
    vm = MainVM(extractor=extractor, renamer=RenameService(settings), settings=settings)

    try:
        loaded = vm.load_directory(args.directory)
    except OSError as ex:
        logger.error("Opening directory {} failed: {}", args.directory, ex)
        print(f'Opening the directory "{args.directory}" failed: {ex}', file=sys.stderr)
        return 2

    for path, error in loaded.failed:
        print(f'Could not open the image at "{path}": {error}', file=sys.stderr)

    _print_table(vm)
    if not args.rename:
        return 1 if loaded.failed else 0

    resolve = args.resolve_conflicts
    if resolve is None:
        resolve = bool(settings.get("rename.resolve_conflicts", False))
    result = vm.rename_all(resolve_conflicts=resolve)
    for path, error in result.failed:
        print(f'Renaming the file "{path}" failed: {error}', file=sys.stderr)
    print(f"Renamed {len(result.success_paths)} files, {len(result.failed)} failed.")

    return 1 if (loaded.failed or result.failed) else 0


if __name__ == "__main__":
    raise SystemExit(main())
