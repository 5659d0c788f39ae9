"""
Tests for the change classifier.
"""

import random

import pytest

from filediff.core.diff.classifier import classify
from filediff.core.diff.sequence_diff import diff
from filediff.core.models import (
    ChangeBlock,
    ChangeKind,
    DiffOp,
    DiffOperation,
    IntralineRange,
    Side,
)


def blocks_for(text_a, text_b):
    return classify(diff(text_a, text_b), text_a, text_b)


def test_identical_texts_have_no_blocks():
    assert blocks_for("a\nb\n", "a\nb\n") == []
    assert blocks_for("", "") == []


def test_addition_into_empty_text():
    [block] = blocks_for("", "hello\n")
    assert block.kind is ChangeKind.ADDITION
    assert (block.a_start, block.a_end, block.b_start, block.b_end) == (0, 0, 0, 1)
    assert block.b_span == (0, 6)


def test_deletion_of_whole_text():
    [block] = blocks_for("hello\n", "")
    assert block.kind is ChangeKind.DELETION
    assert (block.a_start, block.a_end, block.b_start, block.b_end) == (0, 1, 0, 0)
    assert block.a_span == (0, 6)


def test_inserted_line_between_lines():
    [block] = blocks_for("1\n2\n3\n", "1\n2\nX\n3\n")
    assert block == ChangeBlock(
        ChangeKind.ADDITION, 2, 2, 2, 3, a_span=(4, 4), b_span=(4, 6)
    )


def test_kinds_swap_when_sides_swap():
    [forward] = blocks_for("1\n2\n3\n", "1\n2\nX\n3\n")
    [backward] = blocks_for("1\n2\nX\n3\n", "1\n2\n3\n")
    assert backward.kind is ChangeKind.DELETION
    assert (backward.a_start, backward.a_end) == (forward.b_start, forward.b_end)
    assert (backward.b_start, backward.b_end) == (forward.a_start, forward.a_end)


def test_partial_line_change_is_a_modification_of_whole_lines():
    [block] = blocks_for("foo\nbar\n", "foo\nbaz\n")
    assert block.kind is ChangeKind.MODIFICATION
    assert (block.a_start, block.a_end, block.b_start, block.b_end) == (1, 2, 1, 2)
    assert block.a_span == (4, 8)
    assert block.b_span == (4, 8)
    assert block.intraline_a == (IntralineRange(6, 7, 'deleted'),)
    assert block.intraline_b == (IntralineRange(6, 7, 'inserted'),)


def test_word_change_inside_line():
    [block] = blocks_for("one\ntwo three\nfour\n", "one\ntwo 3\nfour\n")
    assert block.kind is ChangeKind.MODIFICATION
    assert (block.a_start, block.a_end, block.b_start, block.b_end) == (1, 2, 1, 2)


def test_edits_on_the_same_line_fold_into_one_block():
    [block] = blocks_for("ab cd ef\n", "aX cd eY\n")
    assert block.kind is ChangeKind.MODIFICATION
    assert (block.a_start, block.a_end) == (0, 1)
    assert len(block.intraline_a) == 2
    assert len(block.intraline_b) == 2


def test_lines_appended_to_unterminated_last_line():
    [block] = blocks_for("a", "a\nb")
    assert block.kind is ChangeKind.ADDITION
    assert (block.a_start, block.a_end, block.b_start, block.b_end) == (1, 1, 1, 2)
    assert block.a_span == (1, 1)
    assert block.b_span == (1, 3)


@pytest.mark.parametrize("text_a,text_b", [
    ("a\nb\nc\nd\ne\n", "a\nB\nc\ne\nf\n"),
    ("The quick\nbrown fox\njumps\n", "The slow\nbrown fox\nleaps high\n"),
    ("x\n" * 5, "x\n" * 3 + "y\n" + "x\n" * 2),
    ("no newline", "no\nnewline"),
])
def test_blocks_are_ordered_and_disjoint(text_a, text_b):
    blocks = blocks_for(text_a, text_b)
    assert blocks
    for first, second in zip(blocks, blocks[1:]):
        assert first.a_end <= second.a_start
        assert first.b_end <= second.b_start
    for block in blocks:
        assert block.a_start <= block.a_end
        assert block.b_start <= block.b_end
        assert not (block.is_empty(Side.LEFT) and block.is_empty(Side.RIGHT))


def test_script_that_does_not_match_texts_is_rejected():
    with pytest.raises(ValueError):
        classify([DiffOp(DiffOperation.EQUAL, "abc")], "abcd", "abc")


@pytest.mark.parametrize("seed", range(200))
def test_random_pairs_give_ordered_disjoint_blocks(seed):
    rng = random.Random(seed)
    text_a, text_b = (
        "".join(rng.choice("ab \n") for _ in range(rng.randint(0, 12)))
        for _ in range(2)
    )
    blocks = blocks_for(text_a, text_b)
    if text_a == text_b:
        assert blocks == []
    for first, second in zip(blocks, blocks[1:]):
        assert first.a_end <= second.a_start
        assert first.b_end <= second.b_start
        assert first.a_span[1] <= second.a_span[0]
        assert first.b_span[1] <= second.b_span[0]
    for block in blocks:
        assert block.a_start <= block.a_end
        assert block.b_start <= block.b_end
        assert not (block.is_empty(Side.LEFT) and block.is_empty(Side.RIGHT))
