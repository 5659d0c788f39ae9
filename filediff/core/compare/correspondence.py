"""
Line correspondence between the two sides of a comparison.
"""

from __future__ import annotations

from bisect import bisect_right
from typing import Sequence

from filediff.core.models import ChangeBlock, Padding, Side


class LineCorrespondence:
    """
    Maps line numbers between the two sides and places padding.

    Outside change blocks a line maps to the other side shifted by the
    cumulative difference in block sizes before it. Inside a block it maps
    to the block's first line on the other side.

    For each block the shorter side gets ``abs(count_a - count_b)`` padding
    lines directly after the block, so both sides occupy the same number of
    display rows.
    """

    def __init__(self, blocks: Sequence[ChangeBlock] = ()):
        self.rebuild(blocks)

    def rebuild(self, blocks: Sequence[ChangeBlock]) -> None:
        """Recompute the model from scratch for a new block list."""
        self._blocks = list(blocks)
        self._ends = {
            Side.LEFT: [block.a_end for block in self._blocks],
            Side.RIGHT: [block.b_end for block in self._blocks],
        }
        self._padding: dict[Side, list[Padding]] = {Side.LEFT: [], Side.RIGHT: []}
        for block in self._blocks:
            delta = block.count(Side.RIGHT) - block.count(Side.LEFT)
            if delta > 0:
                self._padding[Side.LEFT].append(Padding(block.a_end, delta))
            elif delta < 0:
                self._padding[Side.RIGHT].append(Padding(block.b_end, -delta))

        # Display row where each padding starts, and padding rows before it
        self._pad_rows: dict[Side, list[int]] = {}
        self._pad_before: dict[Side, list[int]] = {}
        for side, pads in self._padding.items():
            rows = []
            before = []
            total = 0
            for pad in pads:
                rows.append(pad.line + total)
                before.append(total)
                total += pad.count
            before.append(total)
            self._pad_rows[side] = rows
            self._pad_before[side] = before

    @property
    def blocks(self) -> list[ChangeBlock]:
        return list(self._blocks)

    def lookup(self, side: Side, line: int) -> int:
        """
        Corresponding line on the other side.

        Args:
            side: Side ``line`` belongs to
            line: 0-based line number

        Returns:
            0-based line number on ``side.other``
        """
        index = bisect_right(self._ends[side], line)
        if index < len(self._blocks) and self._blocks[index].contains(side, line):
            return self._blocks[index].start(side.other)
        if index == 0:
            return line
        previous = self._blocks[index - 1]
        return line + previous.end(side.other) - previous.end(side)

    def padding(self, side: Side) -> list[Padding]:
        """Padding to display on a side, in line order."""
        return list(self._padding[side])

    def padding_total(self, side: Side) -> int:
        return self._pad_before[side][-1]

    def visible_line(self, side: Side, line: int) -> int:
        """Display row of a real line once padding is inserted."""
        pads = self._padding[side]
        count = 0
        for pad in pads:
            if pad.line > line:
                break
            count += pad.count
        return line + count

    def doc_line(self, side: Side, visible: int) -> int:
        """
        Real line shown at a display row.

        Rows inside padding map to the real line that follows the padding.
        """
        rows = self._pad_rows[side]
        index = bisect_right(rows, visible)
        if index == 0:
            return visible
        pad = self._padding[side][index - 1]
        if visible < rows[index - 1] + pad.count:
            return pad.line
        return visible - self._pad_before[side][index]
