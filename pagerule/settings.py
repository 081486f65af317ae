"""User settings for page rules.

Settings are stored as JSON in an OS-appropriate config directory and
survive application restarts. Fold state is never stored.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import platformdirs

from .constants import RuleConstants
from .errors import InvalidPattern
from .scanner import compile_pattern

logger = logging.getLogger(__name__)


@dataclass
class RuleSettings:
    """Options recognized by the page rule mode.

    Attributes:
        delimiter: Regular expression matching a page delimiter
        rule_style: "auto" (pick by display capability), "strike-through" or "underline"
        kick_cursor: Nudge the point off rules during interactive navigation
        fold_on_click: Activating a rule toggles the section after it
    """
    delimiter: str = RuleConstants.DEFAULT_DELIMITER
    rule_style: str = RuleConstants.RULE_STYLE_AUTO
    kick_cursor: bool = True
    fold_on_click: bool = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RuleSettings":
        """Build settings from a dict, ignoring unknown keys and invalid values."""
        settings = cls()
        for f in fields(cls):
            if f.name not in data:
                continue
            value = data[f.name]
            if validate_setting(f.name, value):
                setattr(settings, f.name, value)
            else:
                logger.warning(f"Ignoring invalid value for {f.name}: {value!r}")
        return settings

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def validate_setting(key: str, value: Any) -> bool:
    """Validate a setting value.

    Args:
        key: Setting key name.
        value: Setting value to validate.

    Returns:
        True if setting is valid, False otherwise.
    """
    if key == 'delimiter':
        if not isinstance(value, str):
            return False
        try:
            compile_pattern(value)
        except InvalidPattern:
            return False
        return True

    if key == 'rule_style':
        return value in RuleConstants.RULE_STYLE_CHOICES

    # Boolean settings
    if key in ('kick_cursor', 'fold_on_click'):
        return isinstance(value, bool)

    # Unknown settings are considered valid (forward compatibility)
    return True


class SettingsPersistence:
    """Loads and saves RuleSettings as JSON in the user's config directory."""

    def __init__(self, config_dir: Optional[Path] = None):
        self._config_dir = config_dir or Path(
            platformdirs.user_config_dir(RuleConstants.SETTINGS_APP_NAME))
        self._settings_file = self._config_dir / RuleConstants.SETTINGS_FILENAME

    @property
    def settings_file(self) -> Path:
        return self._settings_file

    def load(self) -> RuleSettings:
        """Load settings, falling back to defaults when the file is missing or unreadable."""
        if not self._settings_file.exists():
            return RuleSettings()
        try:
            with open(self._settings_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Could not load settings from {self._settings_file}: {e}")
            return RuleSettings()

        if not isinstance(data, dict):
            logger.warning("Settings file has invalid format (not a dict), ignoring")
            return RuleSettings()
        return RuleSettings.from_dict(data)

    def save(self, settings: RuleSettings) -> bool:
        """Save settings atomically (temp file + rename).

        Returns:
            True if save was successful, False otherwise.
        """
        try:
            self._config_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning(f"Could not create config directory {self._config_dir}: {e}")
            return False

        temp_file = self._settings_file.with_suffix('.tmp')
        try:
            with open(temp_file, 'w', encoding='utf-8') as f:
                json.dump(settings.to_dict(), f, indent=2)
            temp_file.replace(self._settings_file)
            return True
        except OSError as e:
            logger.warning(f"Could not save settings to {self._settings_file}: {e}")
            try:
                if temp_file.exists():
                    temp_file.unlink()
            except OSError:
                pass
            return False


# Global instance
_persistence: Optional[SettingsPersistence] = None


def get_persistence() -> SettingsPersistence:
    """Get the global settings persistence instance."""
    global _persistence
    if _persistence is None:
        _persistence = SettingsPersistence()
    return _persistence


def load_settings() -> RuleSettings:
    return get_persistence().load()


def save_settings(settings: RuleSettings) -> bool:
    return get_persistence().save(settings)
