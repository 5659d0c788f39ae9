"""
Tests for change navigation.
"""

import pytest

from filediff.core.compare.navigator import Navigator
from filediff.core.models import ChangeBlock, ChangeKind, Side

ADDED = ChangeBlock(ChangeKind.ADDITION, 2, 2, 2, 5)
MODIFIED = ChangeBlock(ChangeKind.MODIFICATION, 5, 7, 8, 9)


@pytest.fixture
def navigator():
    return Navigator([ADDED, MODIFIED])


def test_no_blocks_means_no_target():
    assert Navigator([]).next_change(Side.LEFT, 0) is None
    assert Navigator([]).next_change(Side.RIGHT, 3, forward=False) is None


def test_block_without_left_lines_is_found_from_the_right(navigator):
    target = navigator.next_change(Side.LEFT, 0)
    assert target.block == ADDED
    assert (target.a_line, target.b_line) == (2, 2)
    assert not target.wrapped


def test_next_from_first_block(navigator):
    target = navigator.next_change(Side.LEFT, 2, other_line=2)
    assert target.block == MODIFIED
    assert target.line(Side.LEFT) == 5
    assert target.line(Side.RIGHT) == 8


def test_wraps_to_first_block(navigator):
    target = navigator.next_change(Side.LEFT, 5, other_line=8)
    assert target.block == ADDED
    assert target.wrapped


def test_no_wrap_returns_none(navigator):
    assert navigator.next_change(Side.LEFT, 5, other_line=8, wrap=False) is None


def test_previous_change(navigator):
    target = navigator.next_change(Side.LEFT, 5, forward=False, other_line=8)
    assert target.block == ADDED
    assert not target.wrapped


def test_previous_wraps_to_last_block(navigator):
    target = navigator.next_change(Side.RIGHT, 0, forward=False, other_line=0)
    assert target.block == MODIFIED
    assert target.wrapped


def test_single_block_wraps_onto_itself():
    navigator = Navigator([MODIFIED])
    first = navigator.next_change(Side.RIGHT, 0)
    assert first.block == MODIFIED and not first.wrapped
    again = navigator.next_change(Side.RIGHT, first.b_line, other_line=first.a_line)
    assert again.block == MODIFIED and again.wrapped
