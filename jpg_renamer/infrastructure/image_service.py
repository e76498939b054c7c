"""Thumbnail building for loaded JPEG files.

A thumbnail comes from the EXIF embedded preview when the file carries one;
otherwise the full image is decoded and scaled down to a fixed width.
"""

from __future__ import annotations

from io import BytesIO
from typing import Any

from PIL import Image
from loguru import logger

DEFAULT_THUMB_WIDTH = 150


def _box_filter() -> Any:
    """Area-averaging resample filter (Pillow>=9 moved it under `Resampling`)."""
    resampling = getattr(Image, "Resampling", Image)
    return resampling.BOX


class ImageService:
    """Builds RGB thumbnails from embedded previews or scaled decodes."""

    def __init__(self, settings: object | None = None) -> None:
        """Read the target thumbnail width from settings (`thumbnail.width`)."""
        self._target_width = DEFAULT_THUMB_WIDTH
        if settings is not None:
            try:
                width = int(settings.get("thumbnail.width", DEFAULT_THUMB_WIDTH) or 0)
            except (ValueError, TypeError):
                width = DEFAULT_THUMB_WIDTH
            if width > 0:
                self._target_width = width

    @property
    def target_width(self) -> int:
        """Width of thumbnails produced by scaling."""
        return self._target_width

    # Public API
    def get_thumbnail(self, data: bytes, embedded: bytes | None = None) -> Image.Image | None:
        """Return a thumbnail for the JPEG in `data`, or None if nothing decodes.

        Args:
            data: Raw bytes of the source file.
            embedded: EXIF preview bytes, tried first when present.
        """
        if embedded:
            img = self._load_embedded(embedded)
            if img is not None:
                return img
        return self._load_scaled(data)

    def scaled_size(self, width: int, height: int) -> tuple[int, int]:
        """Size of a thumbnail for a `width` x `height` source, keeping proportions."""
        factor = width / float(self._target_width)
        return self._target_width, max(1, round(height / factor))

    # Internal helpers
    def _load_embedded(self, embedded: bytes) -> Image.Image | None:
        """Decode the EXIF preview image as-is."""
        try:
            with Image.open(BytesIO(embedded)) as im:
                return im.convert("RGB")
        except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as ex:
            logger.debug("Embedded thumbnail decode failed: {}", ex)
            return None

    def _load_scaled(self, data: bytes) -> Image.Image | None:
        """Decode the full image and scale it to the target width."""
        try:
            with Image.open(BytesIO(data)) as im:
                w, h = im.size
                if w <= 0 or h <= 0:
                    return None
                size = self.scaled_size(w, h)
                # Let the JPEG decoder skip detail we are about to average away
                im.draft("RGB", size)
                rgb = im.convert("RGB")
            return rgb.resize(size, _box_filter())
        except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as ex:
            logger.debug("Scaled thumbnail decode failed: {}", ex)
            return None
