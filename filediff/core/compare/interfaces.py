"""
Collaborator interfaces the comparison engine talks to.

The engine never touches a widget or a file directly. Hosts provide a
DocumentSource (the text) and, optionally, a Viewport (the display) per
side. Lines are 0-based; positions are code-point offsets.
"""

from __future__ import annotations

from typing import Mapping, Protocol, Sequence, runtime_checkable

from filediff.core.models import ChangeKind, IntralineRange, Padding


@runtime_checkable
class DocumentSource(Protocol):
    """Editable text of one side."""

    def get_text(self) -> str:
        ...

    def set_range(self, start: int, end: int, text: str) -> None:
        """Replace characters ``[start, end)`` with ``text``."""
        ...

    def line_at(self, pos: int) -> int:
        ...

    def pos_at(self, line: int) -> int:
        ...


@runtime_checkable
class Viewport(Protocol):
    """Display of one side: scroll position, caret and change markers."""

    def scroll_to(self, line: int) -> None:
        """Make ``line`` the first visible document line."""
        ...

    def current_scroll(self) -> int:
        """First visible document line."""
        ...

    def caret_line(self) -> int:
        ...

    def set_caret_line(self, line: int) -> None:
        """Move the caret to the start of ``line`` and keep it visible."""
        ...

    def mark_changes(
        self,
        markers: Mapping[int, ChangeKind],
        padding: Sequence[Padding],
        highlights: Sequence[IntralineRange],
    ) -> None:
        """Show per-line change markers, padding and intraline highlights."""
        ...

    def clear_changes(self) -> None:
        ...
