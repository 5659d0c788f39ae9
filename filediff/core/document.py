"""
In-memory document and viewport.

TextBuffer and BufferView implement the DocumentSource and Viewport
interfaces without any GUI toolkit, for headless comparisons and tests.
"""

from __future__ import annotations

from typing import Callable, Mapping, Optional, Sequence

from filediff.core.lines import LineIndex
from filediff.core.models import ChangeKind, EditKind, IntralineRange, Padding

EditListener = Callable[[int, EditKind, str, int], None]


class TextBuffer:
    """
    Editable text with edit notifications.

    Listeners are called as ``listener(position, kind, text, length)`` after
    each change: a deletion reports the removed text, an insertion the
    inserted text.
    """

    def __init__(self, text: str = "", name: str = ""):
        self.name = name
        self._text = text
        self._index = LineIndex(text)
        self._listeners: list[EditListener] = []

    def add_listener(self, listener: EditListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: EditListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def get_text(self) -> str:
        return self._text

    def set_text(self, text: str) -> None:
        """Replace the whole content."""
        self.set_range(0, len(self._text), text)

    def set_range(self, start: int, end: int, text: str) -> None:
        """
        Replace characters ``[start, end)`` with ``text``.

        Raises:
            ValueError: If the range is outside the buffer
        """
        if not 0 <= start <= end <= len(self._text):
            raise ValueError(
                f"Range [{start}, {end}) outside buffer of length {len(self._text)}"
            )
        removed = self._text[start:end]
        self._text = self._text[:start] + text + self._text[end:]
        self._index.rebuild(self._text)

        if removed:
            self._notify(start, EditKind.DELETE, removed, len(removed))
        if text:
            self._notify(start, EditKind.INSERT, text, len(text))

    def line_at(self, pos: int) -> int:
        return self._index.line_at(pos)

    def pos_at(self, line: int) -> int:
        return self._index.pos_at(line)

    @property
    def line_count(self) -> int:
        return self._index.line_count

    def line_text(self, line: int) -> str:
        """Text of a line without its line break."""
        return self._text[self._index.pos_at(line):self._index.line_end(line)].rstrip('\r\n')

    def _notify(self, position: int, kind: EditKind, text: str, length: int) -> None:
        for listener in list(self._listeners):
            listener(position, kind, text, length)


class BufferView:
    """A fixed-height viewport over a TextBuffer."""

    def __init__(self, buffer: TextBuffer, height: int = 40):
        self.buffer = buffer
        self.height = max(1, height)
        self._top = 0
        self._caret = 0
        self.markers: dict[int, ChangeKind] = {}
        self.padding: list[Padding] = []
        self.highlights: list[IntralineRange] = []

    def _clamp(self, line: int) -> int:
        return max(0, min(line, self.buffer.line_count - 1))

    def scroll_to(self, line: int) -> None:
        self._top = self._clamp(line)

    def current_scroll(self) -> int:
        return self._top

    def caret_line(self) -> int:
        return self._caret

    def set_caret_line(self, line: int) -> None:
        self._caret = self._clamp(line)
        if self._caret < self._top:
            self._top = self._caret
        elif self._caret >= self._top + self.height:
            self._top = self._caret - self.height + 1

    def mark_changes(
        self,
        markers: Mapping[int, ChangeKind],
        padding: Sequence[Padding],
        highlights: Sequence[IntralineRange],
    ) -> None:
        self.markers = dict(markers)
        self.padding = list(padding)
        self.highlights = list(highlights)

    def clear_changes(self) -> None:
        self.markers = {}
        self.padding = []
        self.highlights = []

    def rows(self) -> list[Optional[str]]:
        """
        Display rows of the whole document, padding included.

        Padding rows are None.
        """
        pads: dict[int, int] = {}
        for pad in self.padding:
            pads[pad.line] = pads.get(pad.line, 0) + pad.count
        result: list[Optional[str]] = []
        for line in range(self.buffer.line_count):
            result.extend([None] * pads.get(line, 0))
            result.append(self.buffer.line_text(line))
        # Padding after the last line
        result.extend([None] * pads.get(self.buffer.line_count, 0))
        return result
