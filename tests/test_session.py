"""
Tests for the comparison session, driven through in-memory documents.
"""

import pytest

from filediff.core.compare.session import (
    ComparisonSession,
    NO_MORE_DIFFERENCES,
    SEARCH_WRAPPED,
)
from filediff.core.document import BufferView, TextBuffer
from filediff.core.models import ChangeKind, EditKind, MergeDirection, Side
from filediff.services.settings import ComparisonSettings

NUMBERS = "".join(f"{i}\n" for i in range(10))
NUMBERS_WITH_INSERT = NUMBERS.replace("1\n", "1\nx\ny\nz\n")


def make_session(text_a, text_b, settings=None, connect=True):
    left = TextBuffer(text_a, "left")
    right = TextBuffer(text_b, "right")
    left_view = BufferView(left)
    right_view = BufferView(right)
    session = ComparisonSession(left, right, left_view, right_view, settings)
    if connect:
        for side, buffer in ((Side.LEFT, left), (Side.RIGHT, right)):
            buffer.add_listener(
                lambda pos, kind, text, length, side=side:
                    session.on_modified(side, pos, kind, text, length)
            )
    return session, left, right, left_view, right_view


def test_inactive_session_does_nothing():
    session, left, _, left_view, _ = make_session("foo\nbar\n", "foo\nbaz\n")
    assert not session.is_active
    assert session.recompute() == []
    assert session.goto_change(Side.LEFT) is None
    assert not session.merge(MergeDirection.RIGHT_TO_LEFT, Side.LEFT, line=1)
    assert left.get_text() == "foo\nbar\n"
    assert left_view.markers == {}


def test_start_marks_both_views():
    session, _, _, left_view, right_view = make_session("foo\nbar\n", "foo\nbaz\n")
    blocks = session.start()
    assert len(blocks) == 1
    assert left_view.markers == {1: ChangeKind.MODIFICATION}
    assert right_view.markers == {1: ChangeKind.MODIFICATION}
    assert [h.diff_type for h in left_view.highlights] == ['deleted']
    assert [h.diff_type for h in right_view.highlights] == ['inserted']


def test_identical_texts():
    session, *_ = make_session("same\n", "same\n")
    assert session.start() == []
    assert not session.statistics.has_differences
    assert session.goto_change(Side.LEFT) is None
    assert session.status_message == NO_MORE_DIFFERENCES


def test_merge_then_recompute_removes_the_block():
    session, left, right, left_view, _ = make_session("foo\nbar\n", "foo\nbaz\n")
    session.start()
    assert session.merge(MergeDirection.RIGHT_TO_LEFT, Side.LEFT, line=1)
    assert left.get_text() == right.get_text() == "foo\nbaz\n"
    assert session.blocks == []
    assert left_view.markers == {}


def test_merge_left_to_right_removes_added_line():
    session, left, right, _, _ = make_session("1\n2\n3\n", "1\n2\nX\n3\n")
    [block] = session.start()
    assert block.kind is ChangeKind.ADDITION
    assert (block.a_start, block.a_end, block.b_start, block.b_end) == (2, 2, 2, 3)
    assert session.merge(MergeDirection.LEFT_TO_RIGHT, Side.RIGHT, line=2)
    assert right.get_text() == left.get_text() == "1\n2\n3\n"
    assert session.blocks == []


def test_merge_without_block_at_caret():
    session, left, right, _, _ = make_session("foo\nbar\n", "foo\nbaz\n")
    session.start()
    assert not session.merge(MergeDirection.LEFT_TO_RIGHT, Side.LEFT, line=0)
    assert right.get_text() == "foo\nbaz\n"


def test_edits_trigger_recompute_and_listeners():
    session, left, _, _, _ = make_session("foo\nbar\n", "foo\nbaz\n")
    seen = []
    session.add_listener(lambda blocks: seen.append(len(blocks)))
    session.start()
    left.set_range(6, 7, "z")
    assert session.blocks == []
    assert seen[0] == 1
    assert seen[-1] == 0


def test_replacement_recomputes_once():
    session, left, _, _, _ = make_session("foo\nbar\n", "foo\nbaz\n")
    session.start()
    seen = []
    session.add_listener(lambda blocks: seen.append(len(blocks)))
    left.set_range(6, 7, "z")
    assert seen == [0]


def test_notification_without_change_keeps_blocks():
    session, _, _, _, _ = make_session("foo\nbar\n", "foo\nbaz\n")
    blocks = session.start()
    seen = []
    session.add_listener(lambda blocks: seen.append(len(blocks)))
    session.on_modified(Side.LEFT, 0, EditKind.INSERT, "", 0)
    assert seen == []
    assert session.blocks == blocks


def test_stale_documents_are_recomputed_before_merge():
    session, left, right, _, _ = make_session("foo\nbar\n", "foo\nbaz\n", connect=False)
    session.start()
    left.set_text("foo\nbaz\n")
    assert not session.merge(MergeDirection.LEFT_TO_RIGHT, Side.LEFT, line=1)
    assert session.blocks == []
    assert right.get_text() == "foo\nbaz\n"


def test_stop_clears_markers():
    session, _, _, left_view, right_view = make_session("foo\nbar\n", "foo\nbaz\n")
    seen = []
    session.add_listener(seen.append)
    session.start()
    session.stop()
    assert not session.is_active
    assert session.blocks == []
    assert left_view.markers == right_view.markers == {}
    assert seen[-1] == []


def test_source_closed_stops_session():
    session, *_ = make_session("a\n", "b\n")
    session.start()
    session.on_source_closed(Side.RIGHT)
    assert not session.is_active


def test_goto_change_moves_both_carets_and_wraps():
    session, _, _, left_view, right_view = make_session("1\n2\n3\n", "1\n2\nX\n3\n")
    session.start()

    target = session.goto_change(Side.LEFT)
    assert target is not None and not target.wrapped
    assert left_view.caret_line() == 2
    assert right_view.caret_line() == 2
    assert session.status_message == ""

    again = session.goto_change(Side.LEFT)
    assert again.block == target.block
    assert again.wrapped
    assert session.status_message == SEARCH_WRAPPED


def test_goto_change_without_wrap():
    settings = ComparisonSettings(wrap_navigation=False)
    session, *_ = make_session("1\n2\n3\n", "1\n2\nX\n3\n", settings)
    session.start()
    assert session.goto_change(Side.LEFT) is not None
    assert session.goto_change(Side.LEFT) is None
    assert session.status_message == NO_MORE_DIFFERENCES


def test_padding_rows():
    session, _, _, left_view, right_view = make_session(NUMBERS, NUMBERS_WITH_INSERT)
    session.start()
    assert left_view.rows()[:6] == ['0', '1', None, None, None, '2']
    assert right_view.rows()[:6] == ['0', '1', 'x', 'y', 'z', '2']
    assert len(left_view.rows()) == len(right_view.rows())


def test_synchronize_aligns_caret_and_scroll():
    session, _, _, left_view, right_view = make_session(NUMBERS, NUMBERS_WITH_INSERT)
    session.start()

    left_view.set_caret_line(6)
    left_view.scroll_to(6)
    session.synchronize(Side.LEFT)
    assert right_view.caret_line() == 9
    assert right_view.current_scroll() == 9

    # A right line inside the addition shows the left line after the padding
    right_view.scroll_to(3)
    session.synchronize(Side.RIGHT)
    assert left_view.current_scroll() == 2


def test_synchronize_ignores_its_own_scroll_events():
    session, _, right, left_view, _ = make_session(NUMBERS, NUMBERS_WITH_INSERT)
    calls = []

    class EchoView(BufferView):
        def scroll_to(self, line):
            super().scroll_to(line)
            calls.append(line)
            session.synchronize(Side.RIGHT)

    echo = EchoView(right)
    session._views[Side.RIGHT] = echo
    session.start()
    calls.clear()

    left_view.scroll_to(6)
    session.synchronize(Side.LEFT)
    assert calls == [9]
    assert left_view.current_scroll() == 6


def test_sync_scroll_can_be_disabled():
    settings = ComparisonSettings(sync_scroll=False)
    session, _, _, left_view, right_view = make_session(
        NUMBERS, NUMBERS_WITH_INSERT, settings
    )
    session.start()
    left_view.scroll_to(6)
    session.synchronize(Side.LEFT)
    assert right_view.current_scroll() == 0


@pytest.mark.parametrize("text_a,text_b", [
    ("a\nb\nc\nd\ne\n", "a\nB\nc\ne\nf\n"),
    ("x", "x\ny\nz\n"),
])
def test_merging_every_block_makes_texts_equal(text_a, text_b):
    session, left, right, _, _ = make_session(text_a, text_b)
    blocks = session.start()
    for _ in range(len(blocks)):
        block = session.blocks[0]
        assert session.merge(MergeDirection.LEFT_TO_RIGHT, Side.LEFT, line=block.a_start)
    assert session.blocks == []
    assert right.get_text() == left.get_text() == text_a
