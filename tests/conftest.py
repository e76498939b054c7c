"""Shared fixtures: real JPEG files with hand-built EXIF blocks."""

from __future__ import annotations

from collections.abc import Callable
from io import BytesIO
from pathlib import Path

from PIL import Image
from loguru import logger
import piexif
import pytest


def _jpeg_bytes(size: tuple[int, int], color: tuple[int, int, int]) -> bytes:
    buf = BytesIO()
    Image.new("RGB", size, color).save(buf, "JPEG")
    return buf.getvalue()


def build_exif(
    *,
    original: str | None = None,
    modified: str | None = None,
    width: int | None = None,
    height: int | None = None,
    exif_width: int | None = None,
    exif_height: int | None = None,
    thumbnail_size: tuple[int, int] | None = None,
) -> bytes:
    """Return an `Exif\\0\\0`-prefixed APP1 payload with the given tags."""
    zeroth: dict[int, object] = {piexif.ImageIFD.Make: b"TestCam"}
    exif: dict[int, object] = {}
    first: dict[int, object] = {}
    thumbnail = None
    if modified is not None:
        zeroth[piexif.ImageIFD.DateTime] = modified.encode("ascii")
    if width is not None:
        zeroth[piexif.ImageIFD.ImageWidth] = width
    if height is not None:
        zeroth[piexif.ImageIFD.ImageLength] = height
    if original is not None:
        exif[piexif.ExifIFD.DateTimeOriginal] = original.encode("ascii")
    if exif_width is not None:
        exif[piexif.ExifIFD.PixelXDimension] = exif_width
    if exif_height is not None:
        exif[piexif.ExifIFD.PixelYDimension] = exif_height
    if thumbnail_size is not None:
        first = {piexif.ImageIFD.XResolution: (72, 1), piexif.ImageIFD.YResolution: (72, 1)}
        thumbnail = _jpeg_bytes(thumbnail_size, (20, 40, 220))
    return piexif.dump(
        {
            "0th": zeroth,
            "Exif": exif,
            "GPS": {},
            "Interop": {},
            "1st": first,
            "thumbnail": thumbnail,
        }
    )


@pytest.fixture
def make_jpeg(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a JPEG into `tmp_path`.

    Keyword arguments other than `name`, `size` and `directory` go to `build_exif`;
    with none of them the file has no EXIF block at all.
    """

    def _make(
        name: str = "image.jpg",
        size: tuple[int, int] = (600, 400),
        directory: Path | None = None,
        **exif_tags: object,
    ) -> Path:
        path = (directory or tmp_path) / name
        img = Image.new("RGB", size, (210, 40, 40))
        if exif_tags:
            img.save(path, "JPEG", exif=build_exif(**exif_tags))
        else:
            img.save(path, "JPEG")
        return path

    return _make


@pytest.fixture
def write_settings(tmp_path: Path) -> Callable[[str], Path]:
    """Factory writing a settings JSON file and returning its path."""

    def _write(text: str) -> Path:
        path = tmp_path / "settings.json"
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def reset_logger():
    """Drop any sinks a test installed via `init_logging`."""
    yield
    logger.remove()
