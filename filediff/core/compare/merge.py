"""
Merge engine for applying a single change block to one side.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence

from filediff.core.compare.interfaces import DocumentSource
from filediff.core.models import ChangeBlock, ChangeKind, MergeDirection, Side


class MergeEngine:
    """
    Applies one change block in a chosen direction.

    The block list is never patched in place: after every merge the
    ``rebuild`` callback runs a full recompute.
    """

    def __init__(self, rebuild: Optional[Callable[[], object]] = None):
        self._rebuild = rebuild

    @staticmethod
    def resolve_block(
        blocks: Sequence[ChangeBlock],
        side: Side,
        line: int
    ) -> Optional[ChangeBlock]:
        """
        Find the block the caret of a side refers to.

        A caret inside a block's range selects it. A block with no lines on
        the side is selected from the line its padding sits above, or from
        the line just before the padding.

        Returns:
            The current block, or None if the caret is not on a change
        """
        for block in blocks:
            if block.contains(side, line):
                return block
        for block in blocks:
            if block.is_empty(side) and block.start(side) == line:
                return block
        for block in blocks:
            if block.is_empty(side) and block.start(side) == line + 1:
                return block
        return None

    def merge(
        self,
        block: Optional[ChangeBlock],
        direction: MergeDirection,
        left: DocumentSource,
        right: DocumentSource
    ) -> bool:
        """
        Copy one side's version of a block over the other side.

        Args:
            block: Block to merge; None makes this a no-op
            direction: Which side wins
            left: Left document
            right: Right document

        Returns:
            True if a document was changed
        """
        if block is None:
            logging.debug("MergeEngine - No current change, nothing to merge")
            return False

        a_start, a_end = block.a_span
        b_start, b_end = block.b_span

        if block.kind is ChangeKind.ADDITION:
            if direction is MergeDirection.LEFT_TO_RIGHT:
                # Right has lines the left lacks: remove them
                right.set_range(b_start, b_end, '')
            else:
                left.set_range(a_start, a_start, right.get_text()[b_start:b_end])
        elif block.kind is ChangeKind.DELETION:
            if direction is MergeDirection.LEFT_TO_RIGHT:
                right.set_range(b_start, b_start, left.get_text()[a_start:a_end])
            else:
                # Left has lines the right lacks: remove them
                left.set_range(a_start, a_end, '')
        elif block.kind is ChangeKind.MODIFICATION:
            if direction is MergeDirection.LEFT_TO_RIGHT:
                right.set_range(b_start, b_end, left.get_text()[a_start:a_end])
            else:
                left.set_range(a_start, a_end, right.get_text()[b_start:b_end])
        else:
            raise ValueError(f"Unknown change kind: {block.kind}")

        logging.debug(f"MergeEngine - Merged {block} {direction.name}")
        if self._rebuild is not None:
            self._rebuild()
        return True
