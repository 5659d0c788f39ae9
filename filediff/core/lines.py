"""
Line/position index over a text.
"""

from __future__ import annotations

from bisect import bisect_right


class LineIndex:
    """
    Maps between character positions and 0-based line numbers.

    A text always has at least one line; a trailing newline opens an
    empty final line, so ``"a\\nb\\n"`` has three lines.
    """

    def __init__(self, text: str = ""):
        self.rebuild(text)

    def rebuild(self, text: str) -> None:
        self._length = len(text)
        starts = [0]
        pos = text.find('\n')
        while pos != -1:
            starts.append(pos + 1)
            pos = text.find('\n', pos + 1)
        self._starts = starts

    @property
    def length(self) -> int:
        return self._length

    @property
    def line_count(self) -> int:
        return len(self._starts)

    def line_at(self, pos: int) -> int:
        """Line containing character position ``pos`` (clamped)."""
        pos = max(0, min(pos, self._length))
        return bisect_right(self._starts, pos) - 1

    def pos_at(self, line: int) -> int:
        """Position of the first character of ``line``.

        Lines past the end map to the end of the text.
        """
        if line < 0:
            return 0
        if line >= len(self._starts):
            return self._length
        return self._starts[line]

    def line_end(self, line: int) -> int:
        """Position just past the newline ending ``line`` (or end of text)."""
        return self.pos_at(line + 1)

    def is_line_start(self, pos: int) -> bool:
        i = bisect_right(self._starts, pos) - 1
        return i >= 0 and self._starts[i] == pos

    def is_end(self, pos: int) -> bool:
        return pos == self._length
