"""User settings for the editor.

Settings are read from a JSON file in the user's config directory. Unknown
keys are ignored and invalid values fall back to their defaults, so a broken
settings file never prevents the editor from starting.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import platformdirs

from .constants import EditorConstants

logger = logging.getLogger(__name__)

APP_NAME = "rilo"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class EditorSettings:
    """Named options that would otherwise be global constants."""
    tab_width: int = EditorConstants.DEFAULT_TAB_WIDTH
    message_timeout: float = EditorConstants.DEFAULT_MESSAGE_TIMEOUT
    log_level: str = "WARNING"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def validate_setting(key: str, value: Any) -> bool:
    """Check a single setting value.

    Args:
        key: Setting name.
        value: Value read from the settings file.

    Returns:
        True if the value is usable.
    """
    if key == 'tab_width':
        return isinstance(value, int) and not isinstance(value, bool) and 1 <= value <= 16
    if key == 'message_timeout':
        return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0
    if key == 'log_level':
        return isinstance(value, str) and value.upper() in LOG_LEVELS
    # Unknown settings are accepted and ignored (forward compatibility)
    return True


class SettingsStore:
    """Loads EditorSettings from JSON in the platform config dir."""

    def __init__(self, config_dir: Optional[Path] = None):
        self._config_dir = Path(config_dir or platformdirs.user_config_dir(APP_NAME))
        self._settings_file = self._config_dir / "settings.json"

    @property
    def path(self) -> Path:
        return self._settings_file

    def load(self) -> EditorSettings:
        """Read settings from disk, falling back to defaults."""
        settings = EditorSettings()
        if not self._settings_file.exists():
            return settings

        try:
            with open(self._settings_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Could not load settings from {self._settings_file}: {e}")
            return settings

        if not isinstance(data, dict):
            logger.warning("Settings file has invalid format (not a dict), ignoring")
            return settings

        known = settings.to_dict()
        for key, value in data.items():
            if key not in known:
                continue
            if not validate_setting(key, value):
                logger.warning(f"Ignoring invalid value {value!r} for setting {key}")
                continue
            if key == 'log_level':
                value = value.upper()
            setattr(settings, key, value)
        return settings
