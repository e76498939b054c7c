"""End-to-end tests for the command line entry point."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from jpg_renamer import main as cli
from jpg_renamer.infrastructure import metadata_service


@pytest.fixture(autouse=True)
def fixed_creation_time(monkeypatch):
    monkeypatch.setattr(
        metadata_service,
        "get_filesystem_creation_datetime",
        lambda path: datetime(2020, 1, 1, 10, 0, 0),
    )


@pytest.fixture
def photo_dir(tmp_path: Path, make_jpeg) -> Path:
    folder = tmp_path / "photos"
    folder.mkdir()
    make_jpeg("a.jpg", directory=folder)
    make_jpeg("b.jpg", directory=folder, original="2021:06:15 08:30:00")
    return folder


def _run(*args: str, log_dir: Path) -> int:
    return cli.main([*args, "--log-dir", str(log_dir)])


def test_listing_does_not_rename(photo_dir, tmp_path, capsys, reset_logger):
    code = _run(str(photo_dir), log_dir=tmp_path / "logs")

    out = capsys.readouterr().out
    assert code == 0
    assert "2020-01-01 10-00-00.jpg" in out
    assert "2021-06-15 08-30-00.jpg" in out
    assert "600 x 400" in out
    assert sorted(p.name for p in photo_dir.iterdir()) == ["a.jpg", "b.jpg"]
    assert list((tmp_path / "logs").glob("app_*.log"))


def test_rename_flag_renames_files(photo_dir, tmp_path, capsys, reset_logger):
    code = _run(str(photo_dir), "--rename", log_dir=tmp_path / "logs")

    assert code == 0
    assert sorted(p.name for p in photo_dir.iterdir()) == [
        "2020-01-01 10-00-00.jpg",
        "2021-06-15 08-30-00.jpg",
    ]
    assert "Renamed 2 files, 0 failed." in capsys.readouterr().out


def test_conflicts_reported_then_resolved(tmp_path, make_jpeg, capsys, reset_logger):
    folder = tmp_path / "dupes"
    folder.mkdir()
    make_jpeg("a.jpg", directory=folder)
    make_jpeg("b.jpg", directory=folder)

    code = _run(str(folder), "--rename", log_dir=tmp_path / "logs")
    captured = capsys.readouterr()
    assert code == 1
    assert "already exists" in captured.err

    code = _run(str(folder), "--rename", "--resolve-conflicts", log_dir=tmp_path / "logs")
    assert code == 0
    assert sorted(p.name for p in folder.iterdir()) == [
        "2020-01-01 10-00-00.jpg",
        "2020-01-01 10-00-00_1.jpg",
    ]


def test_resolve_conflicts_default_from_settings(
    tmp_path, make_jpeg, write_settings, reset_logger
):
    folder = tmp_path / "dupes"
    folder.mkdir()
    make_jpeg("a.jpg", directory=folder)
    make_jpeg("b.jpg", directory=folder)
    settings = write_settings('{"rename": {"resolve_conflicts": true}}')

    code = _run(str(folder), "--rename", "--settings", str(settings), log_dir=tmp_path / "logs")

    assert code == 0
    assert len(list(folder.iterdir())) == 2


def test_missing_directory_fails(tmp_path, capsys, reset_logger):
    code = _run(str(tmp_path / "nope"), log_dir=tmp_path / "logs")

    assert code == 2
    assert "Opening the directory" in capsys.readouterr().err


def test_missing_settings_fails(photo_dir, tmp_path, capsys):
    code = cli.main([str(photo_dir), "--settings", str(tmp_path / "absent.json")])

    assert code == 2
    assert "Cannot load settings" in capsys.readouterr().err
