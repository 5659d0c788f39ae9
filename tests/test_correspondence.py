"""
Tests for line correspondence and padding.
"""

import pytest

from filediff.core.compare.correspondence import LineCorrespondence
from filediff.core.models import ChangeBlock, ChangeKind, Padding, Side


@pytest.fixture
def correspondence():
    # Three lines added on the right before left line 2, then two left
    # lines replaced by one right line
    return LineCorrespondence([
        ChangeBlock(ChangeKind.ADDITION, 2, 2, 2, 5),
        ChangeBlock(ChangeKind.MODIFICATION, 5, 7, 8, 9),
    ])


def test_no_blocks_is_identity():
    correspondence = LineCorrespondence()
    assert correspondence.lookup(Side.LEFT, 12) == 12
    assert correspondence.lookup(Side.RIGHT, 0) == 0
    assert correspondence.padding(Side.LEFT) == []
    assert correspondence.visible_line(Side.RIGHT, 7) == 7
    assert correspondence.doc_line(Side.RIGHT, 7) == 7


def test_padding_goes_on_the_shorter_side(correspondence):
    assert correspondence.padding(Side.LEFT) == [Padding(2, 3)]
    assert correspondence.padding(Side.RIGHT) == [Padding(9, 1)]
    assert correspondence.padding_total(Side.LEFT) == 3
    assert correspondence.padding_total(Side.RIGHT) == 1


@pytest.mark.parametrize("side,line,expected", [
    (Side.LEFT, 0, 0),
    (Side.LEFT, 1, 1),
    (Side.LEFT, 2, 5),
    (Side.LEFT, 6, 8),
    (Side.LEFT, 7, 9),
    (Side.RIGHT, 3, 2),
    (Side.RIGHT, 8, 5),
    (Side.RIGHT, 9, 7),
])
def test_lookup(correspondence, side, line, expected):
    assert correspondence.lookup(side, line) == expected


def test_visible_rows_line_up_after_each_block(correspondence):
    # Left line 7 and right line 9 follow the second block
    assert correspondence.visible_line(Side.LEFT, 7) == 10
    assert correspondence.visible_line(Side.RIGHT, 9) == 10
    assert correspondence.visible_line(Side.LEFT, 2) == 5
    assert correspondence.visible_line(Side.RIGHT, 5) == 5


def test_doc_line(correspondence):
    assert correspondence.doc_line(Side.LEFT, 1) == 1
    # Rows inside padding show the line after it
    assert correspondence.doc_line(Side.LEFT, 3) == 2
    assert correspondence.doc_line(Side.LEFT, 5) == 2
    assert correspondence.doc_line(Side.LEFT, 10) == 7


def test_rebuild_replaces_state(correspondence):
    correspondence.rebuild([])
    assert correspondence.blocks == []
    assert correspondence.lookup(Side.LEFT, 6) == 6
    assert correspondence.padding_total(Side.LEFT) == 0
