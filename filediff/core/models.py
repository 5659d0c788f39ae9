"""
Core data models for the diff/merge engine.

This module defines the data structures shared by every layer of the
comparison engine:
- Edit script operations produced by the sequence differ
- Line-aligned change blocks produced by the classifier
- Padding, navigation and statistics models used by the session

Conventions:
- Line numbers are 0-based
- Positions are 0-based code-point offsets into a Python ``str``
- Ranges are half-open ``[start, end)``
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional, Sequence


# =============================================================================
# Enumerations
# =============================================================================

class DiffOperation(Enum):
    """Kind of an edit script operation."""
    DELETE = auto()     # Text present only in A
    INSERT = auto()     # Text present only in B
    EQUAL = auto()      # Text common to both


class ChangeKind(Enum):
    """Kind of a line-aligned change block."""
    ADDITION = auto()       # Lines present only on the right
    DELETION = auto()       # Lines present only on the left
    MODIFICATION = auto()   # Lines changed on both sides


class Side(Enum):
    """One of the two compared sources."""
    LEFT = auto()   # Source A
    RIGHT = auto()  # Source B

    @property
    def other(self) -> Side:
        """The opposite side."""
        return Side.RIGHT if self is Side.LEFT else Side.LEFT

    @classmethod
    def from_string(cls, value: str) -> Side:
        """Parse 'left'/'right' (also 'a'/'b')."""
        value = value.strip().lower()
        if value in ('left', 'a'):
            return cls.LEFT
        if value in ('right', 'b'):
            return cls.RIGHT
        raise ValueError(f"Unknown side: {value!r}")


class MergeDirection(Enum):
    """Direction in which a change block is merged."""
    LEFT_TO_RIGHT = auto()  # Copy the left version over the right one
    RIGHT_TO_LEFT = auto()  # Copy the right version over the left one

    @property
    def source(self) -> Side:
        return Side.LEFT if self is MergeDirection.LEFT_TO_RIGHT else Side.RIGHT

    @property
    def target(self) -> Side:
        return self.source.other


class EditKind(Enum):
    """Kind of a document modification notification."""
    INSERT = auto()
    DELETE = auto()


# =============================================================================
# Edit Script Models
# =============================================================================

@dataclass(frozen=True)
class DiffOp:
    """
    A single operation of an edit script.

    Concatenating the text of all DELETE and EQUAL operations rebuilds A,
    and the text of all INSERT and EQUAL operations rebuilds B.
    """
    operation: DiffOperation
    text: str

    @property
    def length(self) -> int:
        return len(self.text)

    def __repr__(self) -> str:
        return f"DiffOp({self.operation.name}, {self.text!r})"


def reconstruct(ops: Sequence[DiffOp], side: Side) -> str:
    """
    Rebuild one side of the comparison from an edit script.

    Args:
        ops: Edit script
        side: LEFT rebuilds A, RIGHT rebuilds B

    Returns:
        The reconstructed text
    """
    skip = DiffOperation.INSERT if side is Side.LEFT else DiffOperation.DELETE
    return ''.join(op.text for op in ops if op.operation is not skip)


# =============================================================================
# Change Block Models
# =============================================================================

@dataclass(frozen=True)
class IntralineRange:
    """
    Character-level difference inside a modification.

    Offsets are absolute positions into the side's text.
    """
    start: int          # Start character index (inclusive)
    end: int            # End character index (exclusive)
    diff_type: str      # 'inserted' (right side) or 'deleted' (left side)

    @property
    def length(self) -> int:
        """Length of the highlighted region."""
        return self.end - self.start


@dataclass(frozen=True)
class ChangeBlock:
    """
    A line-aligned unit of difference between A and B.

    Line ranges are end-exclusive. An empty range (start == end) marks the
    insertion point on that side: the change sits just before line ``start``.
    Spans are the character ranges a merge replaces.
    """
    kind: ChangeKind
    a_start: int
    a_end: int
    b_start: int
    b_end: int
    a_span: tuple[int, int] = (0, 0)
    b_span: tuple[int, int] = (0, 0)
    intraline_a: tuple[IntralineRange, ...] = ()
    intraline_b: tuple[IntralineRange, ...] = ()

    def start(self, side: Side) -> int:
        return self.a_start if side is Side.LEFT else self.b_start

    def end(self, side: Side) -> int:
        return self.a_end if side is Side.LEFT else self.b_end

    def count(self, side: Side) -> int:
        """Number of lines the block covers on a side."""
        return self.end(side) - self.start(side)

    def span(self, side: Side) -> tuple[int, int]:
        return self.a_span if side is Side.LEFT else self.b_span

    def intraline(self, side: Side) -> tuple[IntralineRange, ...]:
        return self.intraline_a if side is Side.LEFT else self.intraline_b

    def is_empty(self, side: Side) -> bool:
        """True if the block has no lines on a side."""
        return self.end(side) == self.start(side)

    def contains(self, side: Side, line: int) -> bool:
        """True if ``line`` lies inside the block's range on a side."""
        return self.start(side) <= line < self.end(side)

    def __str__(self) -> str:
        return (f"{self.kind.name.lower()} "
                f"L[{self.a_start}:{self.a_end}] R[{self.b_start}:{self.b_end}]")


@dataclass(frozen=True)
class Padding:
    """
    Virtual blank lines shown on one side to keep both sides aligned.

    The padding is displayed directly above real line ``line``, i.e. right
    after the block that ends there.
    """
    line: int
    count: int


@dataclass(frozen=True)
class NavigationTarget:
    """Result of a next/previous change search."""
    block: ChangeBlock
    a_line: int
    b_line: int
    wrapped: bool = False

    def line(self, side: Side) -> int:
        return self.a_line if side is Side.LEFT else self.b_line


# =============================================================================
# Statistics
# =============================================================================

@dataclass
class DiffStatistics:
    """Statistics about a set of change blocks."""
    added_lines: int = 0
    removed_lines: int = 0
    modified_lines: int = 0
    blocks: int = 0

    @property
    def total_changes(self) -> int:
        """Total number of changed lines."""
        return self.added_lines + self.removed_lines + self.modified_lines

    @property
    def has_differences(self) -> bool:
        return self.blocks > 0

    @classmethod
    def from_blocks(cls, blocks: Sequence[ChangeBlock]) -> DiffStatistics:
        """Summarize a block list."""
        stats = cls(blocks=len(blocks))
        for block in blocks:
            if block.kind is ChangeKind.ADDITION:
                stats.added_lines += block.count(Side.RIGHT)
            elif block.kind is ChangeKind.DELETION:
                stats.removed_lines += block.count(Side.LEFT)
            else:
                stats.modified_lines += max(
                    block.count(Side.LEFT), block.count(Side.RIGHT)
                )
        return stats

    def __str__(self) -> str:
        return (f"+{self.added_lines} -{self.removed_lines} "
                f"~{self.modified_lines}")


@dataclass
class ComparisonSummary:
    """Result of a headless comparison, used by the command line."""
    left_name: str
    right_name: str
    blocks: list[ChangeBlock] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def statistics(self) -> DiffStatistics:
        return DiffStatistics.from_blocks(self.blocks)

    @property
    def identical(self) -> bool:
        return self.error is None and not self.blocks
