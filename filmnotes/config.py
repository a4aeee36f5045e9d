"""JSON-based settings with dotted-key access and built-in defaults."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from filmnotes.db.models import RollFilter
from filmnotes.sorting import RollSortMode

CONFIG_DIR = Path.home() / ".filmnotes"
SETTINGS_PATH = CONFIG_DIR / "settings.json"

DEFAULTS: dict[str, Any] = {
    "database": {"path": str(CONFIG_DIR / "filmnotes.db")},
    "logging": {"dir": str(CONFIG_DIR / "logs"), "level": "INFO"},
    "display": {"roll_filter": RollFilter.ACTIVE.value, "roll_sort": RollSortMode.DATE.value},
    "cloud": {"app_key": "", "remote_folder": ""},
}


def _lookup(data: dict, key: str) -> tuple[bool, Any]:
    node: Any = data
    for part in key.split("."):
        if isinstance(node, dict) and part in node:
            node = node[part]
        else:
            return False, None
    return True, node


class Settings:
    """Settings reader. A missing file means every value takes its default."""

    def __init__(self, settings_path: str | Path | None = None, data: dict | None = None) -> None:
        self._path = Path(settings_path) if settings_path else SETTINGS_PATH
        if data is not None:
            self._data = data
        elif self._path.exists():
            with self._path.open("r", encoding="utf-8") as f:
                self._data = json.load(f)
        else:
            self._data = {}

    def get(self, key: str, default: Any | None = None) -> Any:
        """Return value for dotted `key`, falling back to DEFAULTS, then `default`."""
        found, value = _lookup(self._data, key)
        if found:
            return value
        found, value = _lookup(DEFAULTS, key)
        return value if found else default

    @property
    def db_path(self) -> Path:
        return Path(self.get("database.path")).expanduser()

    @property
    def log_dir(self) -> Path:
        return Path(self.get("logging.dir")).expanduser()

    @property
    def log_level(self) -> str:
        return str(self.get("logging.level")).upper()

    @property
    def roll_filter(self) -> RollFilter:
        try:
            return RollFilter(self.get("display.roll_filter"))
        except ValueError:
            return RollFilter.ACTIVE

    @property
    def roll_sort(self) -> RollSortMode:
        try:
            return RollSortMode(self.get("display.roll_sort"))
        except ValueError:
            return RollSortMode.DATE
