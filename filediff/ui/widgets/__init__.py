"""
Reusable UI widgets for the file comparison application.
"""

from filediff.ui.widgets.diff_text_edit import (
    DiffTextEdit,
    DiffColors,
)

__all__ = [
    'DiffTextEdit',
    'DiffColors',
]
