"""User settings for the termpad editor.

Settings live in a JSON file in the OS-appropriate config directory and
survive restarts. Missing or invalid values fall back to defaults.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import platformdirs

from .constants import EditorConstants

logger = logging.getLogger(__name__)

APP_NAME = "termpad"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

DEFAULTS: Dict[str, Any] = {
    "tab_size": EditorConstants.TAB_SIZE,
    "log_level": "WARNING",
    "show_action_bar": False,
}


def log_file_path() -> Path:
    """Location of the editor's log file."""
    return Path(platformdirs.user_log_dir(APP_NAME)) / f"{APP_NAME}.log"


class Settings:
    """Loads, validates and saves the settings file.

    Reads are cached; call :meth:`clear_cache` to pick up external edits.
    """

    def __init__(self, config_dir: Optional[Path] = None):
        self._config_dir = Path(config_dir or platformdirs.user_config_dir(APP_NAME))
        self._settings_file = self._config_dir / "settings.json"
        self._settings_cache: Optional[Dict[str, Any]] = None

    @property
    def path(self) -> Path:
        return self._settings_file

    def _ensure_config_dir(self) -> None:
        try:
            self._config_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning(f"Could not create config directory {self._config_dir}: {e}")

    def _load(self) -> Dict[str, Any]:
        """Load the raw settings dict from disk, or an empty dict."""
        if self._settings_cache is not None:
            return self._settings_cache

        if not self._settings_file.exists():
            self._settings_cache = {}
            return self._settings_cache

        try:
            with open(self._settings_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Could not load settings from {self._settings_file}: {e}")
            data = {}

        if not isinstance(data, dict):
            logger.warning("Settings file has invalid format (not a dict), ignoring")
            data = {}

        self._settings_cache = data
        return self._settings_cache

    def get(self, key: str) -> Any:
        """Return a validated setting, or its default."""
        value = self._load().get(key, DEFAULTS.get(key))
        if not self.validate_setting(key, value):
            logger.warning(f"Invalid value for setting {key!r}: {value!r}, using default")
            return DEFAULTS.get(key)
        return value

    def set(self, key: str, value: Any) -> bool:
        """Validate and persist one setting.

        Returns:
            True if the value was valid and written to disk.
        """
        if not self.validate_setting(key, value):
            return False
        settings = dict(self._load())
        settings[key] = value
        return self._save(settings)

    def _save(self, settings: Dict[str, Any]) -> bool:
        self._ensure_config_dir()
        temp_file = self._settings_file.with_suffix('.tmp')
        try:
            with open(temp_file, 'w', encoding='utf-8') as f:
                json.dump(settings, f, indent=2)
            temp_file.replace(self._settings_file)
            self._settings_cache = settings
            return True
        except OSError as e:
            logger.warning(f"Could not save settings to {self._settings_file}: {e}")
            try:
                if temp_file.exists():
                    temp_file.unlink()
            except OSError:
                logger.warning(f"Could not remove temporary settings file {temp_file}")
            return False

    @property
    def tab_size(self) -> int:
        return self.get("tab_size")

    @property
    def log_level(self) -> str:
        return self.get("log_level").upper()

    @property
    def show_action_bar(self) -> bool:
        return self.get("show_action_bar")

    @staticmethod
    def validate_setting(key: str, value: Any) -> bool:
        if key == "tab_size":
            # bool is an int subclass; reject it explicitly
            return (isinstance(value, int) and not isinstance(value, bool)
                    and EditorConstants.MIN_TAB_SIZE <= value <= EditorConstants.MAX_TAB_SIZE)
        if key == "log_level":
            return isinstance(value, str) and value.upper() in LOG_LEVELS
        if key == "show_action_bar":
            return isinstance(value, bool)
        # Unknown settings are considered valid (forward compatibility)
        return True

    def clear_cache(self) -> None:
        self._settings_cache = None


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the process-wide Settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
