"""
Application services: settings persistence and file I/O.
"""

from filediff.services.settings import (
    ApplicationSettings,
    ComparisonSettings,
    SettingsManager,
    Theme,
)
from filediff.services.file_io import (
    FileIOService,
    FileContent,
    LineEnding,
)

__all__ = [
    # Settings
    'ApplicationSettings',
    'ComparisonSettings',
    'SettingsManager',
    'Theme',
    # File I/O
    'FileIOService',
    'FileContent',
    'LineEnding',
]
