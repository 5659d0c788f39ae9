"""
Comparison session.

Owns the state of one live comparison between two documents: the current
change blocks, the line correspondence and the markers shown in both
viewports. Every host event (edit, scroll, navigation, merge, close) goes
through the session, which recomputes everything from the current texts
whenever they change.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from filediff.core.compare.correspondence import LineCorrespondence
from filediff.core.compare.interfaces import DocumentSource, Viewport
from filediff.core.compare.merge import MergeEngine
from filediff.core.compare.navigator import Navigator
from filediff.core.diff.classifier import ChangeClassifier
from filediff.core.diff.sequence_diff import SequenceDiffer
from filediff.core.models import (
    ChangeBlock,
    DiffStatistics,
    EditKind,
    IntralineRange,
    MergeDirection,
    NavigationTarget,
    Side,
)
from filediff.services.settings import ComparisonSettings

NO_MORE_DIFFERENCES = "No more differences"
SEARCH_WRAPPED = "Search wrapped"


class ComparisonSession:
    """
    A live two-way comparison.

    The session is inactive until ``start()``; while inactive every
    operation is a no-op. One re-entrant lock serializes recompute,
    navigation and merge.
    """

    def __init__(
        self,
        left: DocumentSource,
        right: DocumentSource,
        left_view: Optional[Viewport] = None,
        right_view: Optional[Viewport] = None,
        settings: Optional[ComparisonSettings] = None
    ):
        self._sources = {Side.LEFT: left, Side.RIGHT: right}
        self._views: dict[Side, Optional[Viewport]] = {
            Side.LEFT: left_view,
            Side.RIGHT: right_view,
        }
        self.settings = settings or ComparisonSettings()

        self._lock = threading.RLock()
        self._active = False
        self._blocks: list[ChangeBlock] = []
        self._correspondence = LineCorrespondence()
        self._snapshot: Optional[tuple[str, str]] = None
        self._synchronizing = False
        self._merging = False
        self._listeners: list[Callable[[list[ChangeBlock]], None]] = []

        self._differ = SequenceDiffer(self.settings.to_diff_options())
        self._classifier = ChangeClassifier()
        self._merger = MergeEngine(self.recompute)

        self.status_message = ""

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def blocks(self) -> list[ChangeBlock]:
        """Current change blocks (a copy)."""
        return list(self._blocks)

    @property
    def correspondence(self) -> LineCorrespondence:
        return self._correspondence

    @property
    def statistics(self) -> DiffStatistics:
        return DiffStatistics.from_blocks(self._blocks)

    def source(self, side: Side) -> DocumentSource:
        return self._sources[side]

    def view(self, side: Side) -> Optional[Viewport]:
        return self._views[side]

    def add_listener(self, callback: Callable[[list[ChangeBlock]], None]) -> None:
        """Register a callback invoked with the blocks after every recompute."""
        self._listeners.append(callback)

    def remove_listener(self, callback: Callable[[list[ChangeBlock]], None]) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start(self) -> list[ChangeBlock]:
        """Start comparing: compute, mark both views and align them."""
        with self._lock:
            if not self._active:
                self._active = True
                logging.info("ComparisonSession - Comparison started")
            blocks = self.recompute()
            self.synchronize(Side.LEFT)
            return blocks

    def stop(self) -> None:
        """Stop comparing and remove all markers and padding."""
        with self._lock:
            if not self._active:
                return
            self._active = False
            self._blocks = []
            self._correspondence.rebuild([])
            self._snapshot = None
            self.status_message = ""
            for view in self._views.values():
                if view is not None:
                    view.clear_changes()
            logging.info("ComparisonSession - Comparison stopped")
        self._notify_listeners()

    def on_source_closed(self, side: Side) -> None:
        """A compared document was closed."""
        logging.debug(f"ComparisonSession - {side.name.lower()} source closed")
        self.stop()

    def on_source_switched(self, side: Side) -> None:
        """A view switched away from its compared document."""
        logging.debug(f"ComparisonSession - {side.name.lower()} source switched")
        self.stop()

    # -------------------------------------------------------------------------
    # Recompute
    # -------------------------------------------------------------------------

    def recompute(self) -> list[ChangeBlock]:
        """
        Rediff both documents from scratch and refresh the markers.

        Returns:
            The new change blocks (empty when the session is inactive)
        """
        with self._lock:
            if not self._active:
                return []
            text_a = self._sources[Side.LEFT].get_text()
            text_b = self._sources[Side.RIGHT].get_text()
            ops = self._differ.diff(text_a, text_b)
            self._blocks = self._classifier.classify(ops, text_a, text_b)
            self._correspondence.rebuild(self._blocks)
            self._snapshot = (text_a, text_b)
            self._mark_views()
            logging.debug(
                f"ComparisonSession - Recomputed: {len(self._blocks)} blocks "
                f"({self.statistics})"
            )
            blocks = list(self._blocks)
        self._notify_listeners()
        return blocks

    def on_modified(
        self,
        side: Side,
        position: int,
        kind: EditKind,
        text: str,
        length: int
    ) -> None:
        """
        Edit notification from a document.

        Any insertion or deletion invalidates the blocks; edits made by a
        merge in progress are skipped since the merge recomputes itself.
        A replacement arrives as a deletion and an insertion of the same
        final text, so only the first of the pair recomputes.
        """
        if not self._active or self._merging:
            return
        if not self._is_stale():
            logging.debug(
                f"ComparisonSession - {side.name.lower()} unchanged since last recompute"
            )
            return
        logging.debug(
            f"ComparisonSession - {side.name.lower()} {kind.name.lower()} "
            f"of {length} chars at {position}"
        )
        self.recompute()

    def _is_stale(self) -> bool:
        current = (
            self._sources[Side.LEFT].get_text(),
            self._sources[Side.RIGHT].get_text(),
        )
        return current != self._snapshot

    def _mark_views(self) -> None:
        for side, view in self._views.items():
            if view is None:
                continue
            markers = {}
            highlights: list[IntralineRange] = []
            for block in self._blocks:
                for line in range(block.start(side), block.end(side)):
                    markers[line] = block.kind
                highlights.extend(block.intraline(side))
            view.mark_changes(markers, self._correspondence.padding(side), highlights)

    def _notify_listeners(self) -> None:
        blocks = list(self._blocks)
        for callback in list(self._listeners):
            callback(blocks)

    # -------------------------------------------------------------------------
    # Viewport synchronization
    # -------------------------------------------------------------------------

    def synchronize(self, from_side: Side, caret: bool = True) -> None:
        """
        Align the other viewport with ``from_side``.

        The caret moves to the corresponding line (unless ``caret`` is
        False) and the first visible line is matched through the padded
        display rows. Moving the other
        view triggers its own scroll events; those are ignored while the
        synchronization is running.
        """
        if not self._active or self._synchronizing:
            return
        source_view = self._views[from_side]
        target_view = self._views[from_side.other]
        if source_view is None or target_view is None:
            return

        with self._lock:
            self._synchronizing = True
            try:
                if caret:
                    line = source_view.caret_line()
                    target_view.set_caret_line(self._correspondence.lookup(from_side, line))
                if self.settings.sync_scroll:
                    row = self._correspondence.visible_line(
                        from_side, source_view.current_scroll()
                    )
                    target_view.scroll_to(
                        self._correspondence.doc_line(from_side.other, row)
                    )
            finally:
                self._synchronizing = False

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    def _caret(self, side: Side) -> Optional[int]:
        view = self._views[side]
        return view.caret_line() if view is not None else None

    def goto_change(
        self,
        side: Side,
        forward: bool = True,
        line: Optional[int] = None
    ) -> Optional[NavigationTarget]:
        """
        Move both carets to the next (or previous) change.

        Args:
            side: Side whose caret drives the search
            forward: Search direction
            line: Caret line on ``side``; defaults to the view's caret

        Returns:
            The target, or None when there are no differences
        """
        with self._lock:
            if not self._active:
                return None
            if self._is_stale():
                self.recompute()

            other_line = None
            if line is None:
                caret = self._caret(side)
                line = caret if caret is not None else 0
                other_line = self._caret(side.other)

            target = Navigator(self._blocks, self._correspondence).next_change(
                side, line, forward, other_line, wrap=self.settings.wrap_navigation
            )
            if target is None:
                self.status_message = NO_MORE_DIFFERENCES
                logging.debug(f"ComparisonSession - {NO_MORE_DIFFERENCES}")
                return None

            self.status_message = SEARCH_WRAPPED if target.wrapped else ""
            for view_side, view in self._views.items():
                if view is not None:
                    view.set_caret_line(target.line(view_side))
            # Both carets already sit on the block
            self.synchronize(side, caret=False)
            return target

    # -------------------------------------------------------------------------
    # Merge
    # -------------------------------------------------------------------------

    def current_block(self, side: Side, line: Optional[int] = None) -> Optional[ChangeBlock]:
        """Block under the caret of a side, if any."""
        if line is None:
            caret = self._caret(side)
            line = caret if caret is not None else 0
        return MergeEngine.resolve_block(self._blocks, side, line)

    def merge(
        self,
        direction: MergeDirection,
        side: Side = Side.LEFT,
        line: Optional[int] = None
    ) -> bool:
        """
        Merge the change under the caret of ``side``.

        Args:
            direction: LEFT_TO_RIGHT copies the left version to the right
            side: Side whose caret selects the block
            line: Caret line on ``side``; defaults to the view's caret

        Returns:
            True if a change was merged
        """
        with self._lock:
            if not self._active:
                return False
            if self._is_stale():
                # Documents changed without a notification
                self.recompute()

            block = self.current_block(side, line)
            if block is None:
                logging.debug("ComparisonSession - No change at the caret")
                return False

            self._merging = True
            try:
                merged = self._merger.merge(
                    block, direction,
                    self._sources[Side.LEFT], self._sources[Side.RIGHT]
                )
            finally:
                self._merging = False

            self.status_message = ""
            self.synchronize(side)
            return merged
