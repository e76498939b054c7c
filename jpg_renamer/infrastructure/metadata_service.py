"""Metadata extraction for JPEG files.

Each attribute is resolved through an ordered chain of sources, from the
camera-supplied EXIF block down to the JPEG frame header and the filesystem:

- capture date: EXIF DateTimeOriginal, EXIF DateTime, file creation time
- width/height: EXIF IFD0 size tags, Exif IFD pixel dimensions, frame header
- thumbnail: EXIF preview, scaled decode of the full image

Missing dimensions or thumbnails are recorded as unknown/None. Only a file
that cannot be read, or that is not a JPEG stream, fails the extraction.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from io import BytesIO
import os
import struct
from typing import Any

from PIL import Image, JpegImagePlugin
from loguru import logger
import piexif

from jpg_renamer.core.models import UNKNOWN_DIMENSION, ImageRecord
from jpg_renamer.core.services.interfaces import FileUnavailableError, UnsupportedImageError
from jpg_renamer.infrastructure.image_service import ImageService
from jpg_renamer.infrastructure.utils import (
    get_filesystem_creation_datetime,
    parse_exif_datetime,
)

# Pillow reports multi-picture camera JPEGs as MPO
JPEG_FORMATS = {"JPEG", "MPO"}

# (IFD name, tag) pairs, most specific first
DATE_TAGS = (
    ("Exif", piexif.ExifIFD.DateTimeOriginal),
    ("0th", piexif.ImageIFD.DateTime),
)
WIDTH_TAGS = (
    ("0th", piexif.ImageIFD.ImageWidth),
    ("Exif", piexif.ExifIFD.PixelXDimension),
)
HEIGHT_TAGS = (
    ("0th", piexif.ImageIFD.ImageLength),
    ("Exif", piexif.ExifIFD.PixelYDimension),
)


@dataclass
class ExifBlock:
    """Parsed EXIF IFDs of a single file."""

    ifds: dict[str, dict[int, Any]] = field(default_factory=dict)
    thumbnail: bytes | None = None

    def get(self, ifd: str, tag: int) -> Any:
        """Return the raw value of `tag` in `ifd`, or None."""
        return self.ifds.get(ifd, {}).get(tag)


def _as_positive_int(value: Any) -> int | None:
    """Coerce an EXIF SHORT/LONG value to a positive int."""
    if isinstance(value, (tuple, list)):
        value = value[0] if value else None
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value if value > 0 else None


class MetadataService:
    """Builds `ImageRecord` instances from JPEG files."""

    def __init__(
        self, settings: object | None = None, image_service: ImageService | None = None
    ) -> None:
        self._images = image_service or ImageService(settings)

    def extract(self, path: str) -> ImageRecord:
        """Load `path` and return its record.

        Raises:
            FileUnavailableError: the file cannot be read.
            UnsupportedImageError: the bytes are not a JPEG stream.
        """
        path = os.path.abspath(path)
        data = self._read_bytes(path)
        header_size = self._read_header_size(path, data)
        exif = self._read_exif(path, data)

        captured_at = self._read_exif_date(exif)
        if captured_at is None:
            captured_at = self._read_file_date(path)

        width = self._read_dimension(exif, WIDTH_TAGS) or header_size[0] or UNKNOWN_DIMENSION
        height = self._read_dimension(exif, HEIGHT_TAGS) or header_size[1] or UNKNOWN_DIMENSION

        thumbnail = self._images.get_thumbnail(data, exif.thumbnail if exif else None)
        if thumbnail is None:
            logger.debug("No thumbnail available for {}", path)

        return ImageRecord(
            current_path=path,
            captured_at=captured_at,
            width=width,
            height=height,
            thumbnail=thumbnail,
        )

    # File level
    def _read_bytes(self, path: str) -> bytes:
        try:
            with open(path, "rb") as f:
                return f.read()
        except OSError as ex:
            logger.warning("Cannot read {}: {}", path, ex)
            raise FileUnavailableError(path, f'Could not open "{path}": {ex}') from ex

    def _read_file_date(self, path: str) -> datetime:
        try:
            return get_filesystem_creation_datetime(path)
        except OSError as ex:
            logger.warning("Cannot stat {}: {}", path, ex)
            raise FileUnavailableError(path, f'Could not read "{path}": {ex}') from ex

    # Container level
    def _read_header_size(self, path: str, data: bytes) -> tuple[int | None, int | None]:
        """Identify the JPEG stream and return its frame size without decoding pixels."""
        try:
            with Image.open(BytesIO(data)) as im:
                fmt = im.format
                w, h = im.size
        except Image.DecompressionBombError as ex:
            logger.debug("Large frame in {}, reading the header directly: {}", path, ex)
            fmt, (w, h) = self._read_large_header(path, data)
        except (OSError, SyntaxError, ValueError) as ex:
            raise UnsupportedImageError(path, f'"{path}" is not a readable image: {ex}') from ex
        if fmt not in JPEG_FORMATS:
            raise UnsupportedImageError(path, f'"{path}" is {fmt}, not JPEG')
        return _as_positive_int(w), _as_positive_int(h)

    def _read_large_header(self, path: str, data: bytes) -> tuple[str, tuple[int, int]]:
        """Parse the JPEG markers without `Image.open`'s pixel-count limit."""
        try:
            with JpegImagePlugin.JpegImageFile(BytesIO(data)) as im:
                return im.format, im.size
        except (OSError, SyntaxError, ValueError) as ex:
            raise UnsupportedImageError(path, f'"{path}" is not a readable image: {ex}') from ex

    def _read_exif(self, path: str, data: bytes) -> ExifBlock | None:
        """Parse the EXIF block; None when absent or malformed."""
        try:
            raw = piexif.load(data)
        except (ValueError, struct.error, IndexError, KeyError) as ex:
            logger.debug("EXIF parse failed for {}: {}", path, ex)
            return None
        ifds = {name: raw.get(name) or {} for name in ("0th", "Exif")}
        thumbnail = raw.get("thumbnail") or None
        if not any(ifds.values()) and thumbnail is None:
            return None
        return ExifBlock(ifds=ifds, thumbnail=thumbnail)

    # Tag level
    def _read_exif_date(self, exif: ExifBlock | None) -> datetime | None:
        if exif is None:
            return None
        for ifd, tag in DATE_TAGS:
            dt = parse_exif_datetime(exif.get(ifd, tag))
            if dt is not None:
                return dt
        return None

    def _read_dimension(
        self, exif: ExifBlock | None, tags: tuple[tuple[str, int], ...]
    ) -> int | None:
        if exif is None:
            return None
        for ifd, tag in tags:
            value = _as_positive_int(exif.get(ifd, tag))
            if value is not None:
                return value
        return None
