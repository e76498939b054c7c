"""JSON settings for thumbnails, extraction, renaming and logging."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

# Bundled defaults, used when no --settings file is given
DEFAULT_SETTINGS_PATH = Path(__file__).resolve().parent.parent / "settings.json"


class JsonSettings:
    """Renamer settings read once from a JSON object, queried by dotted key."""

    def __init__(self, settings_path: str | Path = DEFAULT_SETTINGS_PATH) -> None:
        self._path = Path(settings_path)
        if not self._path.exists():
            raise FileNotFoundError(f"JPG Renamer settings missing: {self._path}")
        with self._path.open("r", encoding="utf-8") as f:
            self._data = json.load(f)
        if not isinstance(self._data, dict):
            raise ValueError(
                f"JPG Renamer settings must be a JSON object of sections: {self._path}"
            )

    @property
    def path(self) -> Path:
        """Location the settings were read from."""
        return self._path

    def get(self, key: str, default: Any | None = None) -> Any:
        """Return the value at `key` (e.g. `"rename.max_conflict_attempts"`), else `default`."""
        node: Any = self._data
        for section in key.split("."):
            if not isinstance(node, dict) or section not in node:
                return default
            node = node[section]
        return node
