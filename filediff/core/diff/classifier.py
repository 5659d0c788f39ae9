"""
Change classifier.

Turns a character-level edit script into line-aligned change blocks:
- Additions: complete lines present only on the right
- Deletions: complete lines present only on the left
- Modifications: everything else, widened to whole lines on both sides

Edits that do not cover complete lines are widened to the nearest line
boundaries through the equal text around them; edits that share a line
are folded into one modification.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from filediff.core.lines import LineIndex
from filediff.core.models import (
    ChangeBlock,
    ChangeKind,
    DiffOp,
    DiffOperation,
    IntralineRange,
)


@dataclass
class _Run:
    """A maximal stretch of non-equal operations (character positions)."""
    a_start: int
    a_end: int
    b_start: int
    b_end: int
    deleted: list[tuple[int, int]] = field(default_factory=list)
    inserted: list[tuple[int, int]] = field(default_factory=list)
    partial: bool = False
    block: Optional[ChangeBlock] = None

    def absorb(self, other: _Run) -> None:
        self.a_end = other.a_end
        self.b_end = other.b_end
        self.deleted.extend(other.deleted)
        self.inserted.extend(other.inserted)


def _end_line(index: LineIndex, pos: int) -> int:
    """Exclusive end line for a range ending at ``pos``."""
    line = index.line_at(pos)
    return line if index.is_line_start(pos) else line + 1


class ChangeClassifier:
    """Classifies an edit script into ChangeBlocks."""

    def classify(
        self,
        ops: Sequence[DiffOp],
        text_a: str,
        text_b: str
    ) -> list[ChangeBlock]:
        """
        Build the change blocks for an edit script.

        Args:
            ops: Edit script transforming ``text_a`` into ``text_b``
            text_a: Left text
            text_b: Right text

        Returns:
            Blocks in document order, non-overlapping on both sides

        Raises:
            ValueError: If the edit script does not rebuild both texts
        """
        index_a = LineIndex(text_a)
        index_b = LineIndex(text_b)
        runs, equals = self._collect_runs(ops, len(text_a), len(text_b))

        groups: list[_Run] = []
        for i, run in enumerate(runs):
            before = equals[i]
            last = groups[-1] if groups else None

            if last is not None and last.partial:
                newline = before.find('\n')
                if newline == -1:
                    # Same line as the previous partial change
                    last.absorb(run)
                    continue
                last.a_end += newline + 1
                last.b_end += newline + 1

            run.block = self._aligned_block(run, text_a, text_b, index_a, index_b)
            if run.block is None:
                # Widen back to the start of the line, shared by both sides
                newline = before.rfind('\n')
                back = len(before) - (newline + 1)
                run.a_start -= back
                run.b_start -= back
                run.partial = True
            groups.append(run)

        if groups and groups[-1].partial:
            last = groups[-1]
            newline = equals[-1].find('\n')
            if newline == -1:
                last.a_end = len(text_a)
                last.b_end = len(text_b)
            else:
                last.a_end += newline + 1
                last.b_end += newline + 1

        blocks = [
            group.block if group.block is not None
            else self._modification(group, index_a, index_b)
            for group in groups
        ]
        logging.debug(f"ChangeClassifier - {len(ops)} ops -> {len(blocks)} blocks")
        return blocks

    @staticmethod
    def _collect_runs(
        ops: Sequence[DiffOp],
        length_a: int,
        length_b: int
    ) -> tuple[list[_Run], list[str]]:
        """
        Split an edit script into runs of edits and the equal text around them.

        Returns:
            (runs, equals) where ``equals[i]`` is the equal text just before
            ``runs[i]`` and ``equals[-1]`` the equal text after the last run.
        """
        runs: list[_Run] = []
        equals: list[str] = []
        pending = ''
        current: Optional[_Run] = None
        pos_a = pos_b = 0

        for op in ops:
            if op.operation is DiffOperation.EQUAL:
                if current is not None:
                    runs.append(current)
                    current = None
                pending += op.text
                pos_a += len(op.text)
                pos_b += len(op.text)
                continue

            if current is None:
                equals.append(pending)
                pending = ''
                current = _Run(pos_a, pos_a, pos_b, pos_b)

            if op.operation is DiffOperation.DELETE:
                current.deleted.append((pos_a, pos_a + len(op.text)))
                pos_a += len(op.text)
                current.a_end = pos_a
            else:
                current.inserted.append((pos_b, pos_b + len(op.text)))
                pos_b += len(op.text)
                current.b_end = pos_b

        if current is not None:
            runs.append(current)
        equals.append(pending)

        if pos_a != length_a or pos_b != length_b:
            raise ValueError("Edit script does not match the compared texts")
        return runs, equals

    @staticmethod
    def _whole_lines(
        index: LineIndex,
        start: int,
        end: int
    ) -> Optional[tuple[int, int]]:
        """Line range of a non-empty character range made of complete lines."""
        if index.is_line_start(start) and (index.is_line_start(end) or index.is_end(end)):
            return index.line_at(start), _end_line(index, end)
        return None

    @staticmethod
    def _appended_lines(
        index: LineIndex,
        text: str,
        start: int,
        end: int
    ) -> Optional[tuple[int, int]]:
        """
        Line range of ``"\\n" + lines`` appended to an unterminated last line.

        The leading newline terminates the previous last line, so the
        edit amounts to complete new lines after it.
        """
        if (index.is_end(end) and end - start > 1 and text[start] == '\n'
                and not index.is_line_start(start)):
            return index.line_at(start) + 1, _end_line(index, end)
        return None

    def _insertion_block(
        self,
        point: int,
        start: int,
        end: int,
        point_index: LineIndex,
        index: LineIndex,
        text: str
    ) -> Optional[tuple[int, tuple[int, int]]]:
        """
        Align a one-sided edit.

        Returns:
            (insertion line on the empty side, line range on the edited side),
            or None if the edit is not line-aligned
        """
        lines = self._whole_lines(index, start, end)
        if lines is not None and point_index.is_line_start(point):
            return point_index.line_at(point), lines

        lines = self._appended_lines(index, text, start, end)
        if (lines is not None and point_index.is_end(point)
                and not point_index.is_line_start(point)):
            return point_index.line_at(point) + 1, lines

        return None

    def _aligned_block(
        self,
        run: _Run,
        text_a: str,
        text_b: str,
        index_a: LineIndex,
        index_b: LineIndex
    ) -> Optional[ChangeBlock]:
        """Block for a run that already falls on line boundaries, else None."""
        a_empty = run.a_start == run.a_end
        b_empty = run.b_start == run.b_end

        if a_empty:
            aligned = self._insertion_block(
                run.a_start, run.b_start, run.b_end,
                index_a, index_b, text_b
            )
            if aligned is None:
                return None
            line, (b_start, b_end) = aligned
            return ChangeBlock(
                ChangeKind.ADDITION, line, line, b_start, b_end,
                a_span=(run.a_start, run.a_start),
                b_span=(run.b_start, run.b_end),
            )

        if b_empty:
            aligned = self._insertion_block(
                run.b_start, run.a_start, run.a_end,
                index_b, index_a, text_a
            )
            if aligned is None:
                return None
            line, (a_start, a_end) = aligned
            return ChangeBlock(
                ChangeKind.DELETION, a_start, a_end, line, line,
                a_span=(run.a_start, run.a_end),
                b_span=(run.b_start, run.b_start),
            )

        lines_a = self._whole_lines(index_a, run.a_start, run.a_end)
        lines_b = self._whole_lines(index_b, run.b_start, run.b_end)
        if lines_a is None or lines_b is None:
            return None
        return self._modification(run, index_a, index_b)

    @staticmethod
    def _modification(run: _Run, index_a: LineIndex, index_b: LineIndex) -> ChangeBlock:
        """Modification covering every line the run touches on both sides."""
        a_start = index_a.line_at(run.a_start)
        a_end = _end_line(index_a, run.a_end)
        b_start = index_b.line_at(run.b_start)
        b_end = _end_line(index_b, run.b_end)
        return ChangeBlock(
            ChangeKind.MODIFICATION, a_start, a_end, b_start, b_end,
            a_span=(index_a.pos_at(a_start), index_a.pos_at(a_end)),
            b_span=(index_b.pos_at(b_start), index_b.pos_at(b_end)),
            intraline_a=tuple(IntralineRange(s, e, 'deleted') for s, e in run.deleted),
            intraline_b=tuple(IntralineRange(s, e, 'inserted') for s, e in run.inserted),
        )


def classify(ops: Sequence[DiffOp], text_a: str, text_b: str) -> list[ChangeBlock]:
    """Convenience wrapper around ChangeClassifier.classify."""
    return ChangeClassifier().classify(ops, text_a, text_b)
