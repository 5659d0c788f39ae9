"""
Navigation between change blocks.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from filediff.core.compare.correspondence import LineCorrespondence
from filediff.core.models import ChangeBlock, NavigationTarget, Side


class Navigator:
    """
    Finds the next or previous change relative to the carets of both sides.

    A block that has no lines on a side has no start there, so it is only
    reachable through the other side. Both candidates are considered and
    whichever comes first in document order wins.
    """

    def __init__(
        self,
        blocks: Sequence[ChangeBlock],
        correspondence: Optional[LineCorrespondence] = None
    ):
        self._blocks = list(blocks)
        self._correspondence = correspondence or LineCorrespondence(self._blocks)

    def next_change(
        self,
        side: Side,
        line: int,
        forward: bool = True,
        other_line: Optional[int] = None,
        wrap: bool = True
    ) -> Optional[NavigationTarget]:
        """
        Find the change to move to.

        Args:
            side: Side the caret ``line`` belongs to
            line: Current caret line on ``side``
            forward: Search direction
            other_line: Caret line on the other side; derived from the
                correspondence when omitted
            wrap: Restart from the first/last change when nothing is left

        Returns:
            NavigationTarget, or None if there are no differences
        """
        if not self._blocks:
            return None

        if other_line is None:
            other_line = self._correspondence.lookup(side, line)

        own = self._find(side, line, forward)
        other = self._find(side.other, other_line, forward)
        candidates = [index for index in (own, other) if index is not None]

        wrapped = False
        if candidates:
            # Block order agrees on both sides
            index = min(candidates) if forward else max(candidates)
        elif wrap:
            index = 0 if forward else len(self._blocks) - 1
            wrapped = True
        else:
            return None

        block = self._blocks[index]
        logging.debug(
            f"Navigator - {'next' if forward else 'previous'} change from "
            f"{side.name.lower()}:{line} -> {block}{' (wrapped)' if wrapped else ''}"
        )
        return NavigationTarget(block, block.a_start, block.b_start, wrapped)

    def _find(self, side: Side, line: int, forward: bool) -> Optional[int]:
        """Index of the nearest block starting strictly beyond ``line`` on a side."""
        indices = range(len(self._blocks))
        if not forward:
            indices = reversed(indices)
        for index in indices:
            block = self._blocks[index]
            if block.is_empty(side):
                continue
            start = block.start(side)
            if (forward and start > line) or (not forward and start < line):
                return index
        return None
