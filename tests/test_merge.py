"""
Tests for the merge engine.
"""

import pytest

from filediff.core.compare.merge import MergeEngine
from filediff.core.diff.classifier import classify
from filediff.core.diff.sequence_diff import diff
from filediff.core.document import TextBuffer
from filediff.core.models import ChangeBlock, ChangeKind, MergeDirection, Side

ADDED = ChangeBlock(ChangeKind.ADDITION, 2, 2, 2, 5)
MODIFIED = ChangeBlock(ChangeKind.MODIFICATION, 5, 7, 8, 9)


def merged(text_a, text_b, direction):
    """Merge the only block between two texts and return both texts."""
    left = TextBuffer(text_a)
    right = TextBuffer(text_b)
    [block] = classify(diff(text_a, text_b), text_a, text_b)
    rebuilds = []
    engine = MergeEngine(lambda: rebuilds.append(True))
    assert engine.merge(block, direction, left, right)
    assert rebuilds == [True]
    return left.get_text(), right.get_text()


@pytest.mark.parametrize("side,line,expected", [
    (Side.LEFT, 6, MODIFIED),
    (Side.LEFT, 5, MODIFIED),
    (Side.RIGHT, 3, ADDED),
    # Block with no left lines: from the line below the padding...
    (Side.LEFT, 2, ADDED),
    # ...or from the line just above it
    (Side.LEFT, 1, ADDED),
    (Side.LEFT, 0, None),
    (Side.RIGHT, 9, None),
])
def test_resolve_block(side, line, expected):
    assert MergeEngine.resolve_block([ADDED, MODIFIED], side, line) == expected


def test_no_block_is_a_no_op():
    left = TextBuffer("a\n")
    right = TextBuffer("b\n")
    assert not MergeEngine().merge(None, MergeDirection.LEFT_TO_RIGHT, left, right)
    assert (left.get_text(), right.get_text()) == ("a\n", "b\n")


def test_addition_left_to_right_removes_lines_from_right():
    assert merged("1\n2\n3\n", "1\n2\nX\n3\n", MergeDirection.LEFT_TO_RIGHT) == (
        "1\n2\n3\n", "1\n2\n3\n"
    )


def test_addition_right_to_left_copies_lines_to_left():
    assert merged("1\n2\n3\n", "1\n2\nX\n3\n", MergeDirection.RIGHT_TO_LEFT) == (
        "1\n2\nX\n3\n", "1\n2\nX\n3\n"
    )


def test_deletion_left_to_right_copies_lines_to_right():
    assert merged("1\n2\nX\n3\n", "1\n2\n3\n", MergeDirection.LEFT_TO_RIGHT) == (
        "1\n2\nX\n3\n", "1\n2\nX\n3\n"
    )


def test_deletion_right_to_left_removes_lines_from_left():
    assert merged("1\n2\nX\n3\n", "1\n2\n3\n", MergeDirection.RIGHT_TO_LEFT) == (
        "1\n2\n3\n", "1\n2\n3\n"
    )


def test_modification_in_both_directions():
    assert merged("foo\nbar\n", "foo\nbaz\n", MergeDirection.LEFT_TO_RIGHT) == (
        "foo\nbar\n", "foo\nbar\n"
    )
    assert merged("foo\nbar\n", "foo\nbaz\n", MergeDirection.RIGHT_TO_LEFT) == (
        "foo\nbaz\n", "foo\nbaz\n"
    )


def test_appended_lines_merge_both_ways():
    assert merged("a", "a\nb", MergeDirection.RIGHT_TO_LEFT) == ("a\nb", "a\nb")
    assert merged("a", "a\nb", MergeDirection.LEFT_TO_RIGHT) == ("a", "a")


def test_empty_side():
    assert merged("", "hello\n", MergeDirection.RIGHT_TO_LEFT) == ("hello\n", "hello\n")
    assert merged("", "hello\n", MergeDirection.LEFT_TO_RIGHT) == ("", "")
