"""Persisted command-line preferences."""

import json
import logging
import os
from typing import Any, Dict, Optional

from tag2dir.core.history import DEFAULT_HISTORY_SIZE
from tag2dir.core.mover import FileMover

logger = logging.getLogger(__name__)


class Settings:
    """Manages settings stored in the user's config directory.

    Windows: %APPDATA%/tag2dir/settings.json
    macOS/Linux: $XDG_CONFIG_HOME/tag2dir/settings.json (~/.config by default)
    """

    DEFAULT_SETTINGS = {
        "last_source_path": "",
        "last_dest_path": "",
        "history_size": DEFAULT_HISTORY_SIZE,
        "copy_workers": FileMover.DEFAULT_COPY_WORKERS,
    }

    def __init__(self, config_path: Optional[str] = None):
        """Initialize settings.

        Args:
            config_path: Explicit settings file (default: per-user config dir).
        """
        self._settings: Dict[str, Any] = self.DEFAULT_SETTINGS.copy()
        self._config_path = config_path or self._get_config_path()
        self.load()

    @staticmethod
    def _get_config_path() -> str:
        if os.name == "nt":
            base = os.environ.get("APPDATA", os.path.expanduser("~"))
        else:
            base = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
        return os.path.join(base, "tag2dir", "settings.json")

    @property
    def config_path(self) -> str:
        return self._config_path

    def load(self) -> None:
        """Load settings from file, keeping defaults for anything missing."""
        try:
            if os.path.exists(self._config_path):
                with open(self._config_path, "r", encoding="utf-8") as f:
                    loaded = json.load(f)
                if isinstance(loaded, dict):
                    self._settings.update(loaded)
        except (OSError, ValueError) as e:
            logger.debug(f"Error loading settings from {self._config_path}: {e}")

    def save(self) -> None:
        """Save settings to file."""
        try:
            os.makedirs(os.path.dirname(self._config_path), exist_ok=True)
            with open(self._config_path, "w", encoding="utf-8") as f:
                json.dump(self._settings, f, indent=2, ensure_ascii=False)
        except OSError as e:
            logger.debug(f"Error saving settings to {self._config_path}: {e}")

    def get(self, key: str, default: Any = None) -> Any:
        return self._settings.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._settings[key] = value

    def get_int(self, key: str, minimum: int = 1) -> int:
        """Get an integer setting, falling back to the default if invalid."""
        value = self._settings.get(key)
        if isinstance(value, int) and not isinstance(value, bool) and value >= minimum:
            return value
        return self.DEFAULT_SETTINGS[key]
