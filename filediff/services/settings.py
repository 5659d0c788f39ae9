"""
Application settings management.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, asdict
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from filediff.core.diff.sequence_diff import DiffOptions


class Theme(Enum):
    """UI theme options."""
    SYSTEM = "system"
    LIGHT = "light"
    DARK = "dark"

    @classmethod
    def from_string(cls, value: str) -> 'Theme':
        """Create from string value."""
        try:
            # Try to match by value
            for theme in cls:
                if theme.value == value.lower():
                    return theme
            # Try to match by name
            return cls[value.upper()]
        except (KeyError, AttributeError):
            return cls.SYSTEM


@dataclass
class ComparisonSettings:
    """Settings for the comparison engine."""
    max_input_size: int = 2_000_000
    diff_timeout: float = 1.0
    line_mode_threshold: int = 10_000
    semantic_cleanup: bool = True
    wrap_navigation: bool = True
    sync_scroll: bool = True

    def to_diff_options(self) -> DiffOptions:
        """Options for the sequence differ."""
        return DiffOptions(
            max_input_size=self.max_input_size,
            timeout=self.diff_timeout,
            line_mode_threshold=self.line_mode_threshold,
            semantic_cleanup=self.semantic_cleanup,
        )


@dataclass
class UISettings:
    """User interface settings."""
    theme: Theme = Theme.SYSTEM
    font_family: str = "Monospace"
    font_size: int = 10
    window_width: int = 1200
    window_height: int = 800
    horizontal_split: bool = True  # Panes side by side, False stacks them


@dataclass
class ColorSettings:
    """Color settings for diff highlighting."""
    added_background: str = "#e6ffe6"
    removed_background: str = "#ffe6e6"
    modified_background: str = "#fffde6"
    inserted_text_background: str = "#b3f0b3"
    deleted_text_background: str = "#f5b8b8"
    padding_color: str = "#c8c8c8"

    # Dark theme overrides
    dark_added_background: str = "#1e3a1e"
    dark_removed_background: str = "#3a1e1e"
    dark_modified_background: str = "#3a3a1e"
    dark_inserted_text_background: str = "#2d5a2d"
    dark_deleted_text_background: str = "#5a2d2d"
    dark_padding_color: str = "#555555"


@dataclass
class ApplicationSettings:
    """Main application settings container."""
    comparison: ComparisonSettings = field(default_factory=ComparisonSettings)
    ui: UISettings = field(default_factory=UISettings)
    colors: ColorSettings = field(default_factory=ColorSettings)
    last_directory: str = ""


class SettingsManager:
    """Manager for loading/saving application settings."""

    def __init__(self, settings_path: Optional[Path] = None):
        self.settings_path = settings_path or self._get_default_path()
        self._settings: Optional[ApplicationSettings] = None

    @staticmethod
    def _get_default_path() -> Path:
        """Get the default settings file path."""
        if os.name == 'nt':
            # Windows
            app_data = os.environ.get('APPDATA', os.path.expanduser('~'))
            return Path(app_data) / 'FileDiff' / 'settings.json'
        else:
            # Linux/Mac
            config_home = os.environ.get('XDG_CONFIG_HOME',
                                         os.path.expanduser('~/.config'))
            return Path(config_home) / 'filediff' / 'settings.json'

    @property
    def settings(self) -> ApplicationSettings:
        """Get current settings, loading from disk if needed."""
        if self._settings is None:
            self._settings = self.load()
        return self._settings

    def load(self) -> ApplicationSettings:
        """Load settings from disk, falling back to defaults."""
        if not self.settings_path.exists():
            return ApplicationSettings()

        try:
            with open(self.settings_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("settings root is not an object")
            return self._from_dict(data)
        except (OSError, ValueError) as e:
            logging.warning(f"SettingsManager - Could not load {self.settings_path}: {e}")
            return ApplicationSettings()

    def save(self, settings: Optional[ApplicationSettings] = None) -> bool:
        """Save settings to disk."""
        settings = settings or self._settings
        if settings is None:
            return False

        try:
            self.settings_path.parent.mkdir(parents=True, exist_ok=True)

            data = self._to_dict(settings)

            with open(self.settings_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            logging.error(f"SettingsManager - Could not save {self.settings_path}: {e}")
            return False

        self._settings = settings
        return True

    def _to_dict(self, settings: ApplicationSettings) -> dict:
        """Convert settings to dictionary for JSON serialization."""
        def convert(obj: Any) -> Any:
            if isinstance(obj, Enum):
                return obj.name
            elif isinstance(obj, dict):
                return {k: convert(v) for k, v in obj.items()}
            elif isinstance(obj, list):
                return [convert(item) for item in obj]
            else:
                return obj

        return convert(asdict(settings))

    def _from_dict(self, data: dict) -> ApplicationSettings:
        """Convert dictionary back to settings objects."""
        def section(cls: type, values: Any) -> Any:
            # Unknown keys are ignored, missing keys keep their defaults
            if not isinstance(values, dict):
                return cls()
            known = {k: v for k, v in values.items() if k in cls.__dataclass_fields__}
            return cls(**known)

        ui = section(UISettings, data.get('ui', {}))
        if isinstance(ui.theme, str):
            ui.theme = Theme.from_string(ui.theme)

        return ApplicationSettings(
            comparison=section(ComparisonSettings, data.get('comparison', {})),
            ui=ui,
            colors=section(ColorSettings, data.get('colors', {})),
            last_directory=data.get('last_directory', ''),
        )
