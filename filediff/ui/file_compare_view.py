"""
File comparison view.

Shows two editable documents side by side with a live comparison
session: markers follow every edit, carets and scrolling stay aligned,
and single changes can be navigated and merged in either direction.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtGui import QKeySequence, QShortcut
from PyQt6.QtWidgets import (
    QHBoxLayout, QLabel, QMessageBox, QSplitter, QVBoxLayout, QWidget,
)

from filediff.core.compare.session import ComparisonSession
from filediff.core.models import ChangeBlock, EditKind, MergeDirection, Side
from filediff.services.file_io import FileContent, FileIOService
from filediff.services.settings import ApplicationSettings
from filediff.ui.widgets.diff_text_edit import DiffColors, DiffTextEdit


class FileCompareView(QWidget):
    """
    View for comparing and merging two text files.

    Supports:
    - Live markers for additions, deletions and modifications
    - Caret and scroll synchronization
    - Next/previous change navigation with wraparound
    - Merging the change under the caret in either direction
    """

    # Signals
    status_changed = pyqtSignal(str)
    differences_changed = pyqtSignal(int)  # number of change blocks
    modified_changed = pyqtSignal(bool)

    def __init__(
        self,
        settings: Optional[ApplicationSettings] = None,
        parent: Optional[QWidget] = None
    ):
        super().__init__(parent)

        self._settings = settings or ApplicationSettings()
        self._file_io = FileIOService()
        self._paths: dict[Side, Optional[Path]] = {Side.LEFT: None, Side.RIGHT: None}
        self._contents: dict[Side, Optional[FileContent]] = {Side.LEFT: None, Side.RIGHT: None}
        self._modified = False
        self._focus_side = Side.LEFT

        dark = DiffColors.is_dark(self._settings.ui.theme)
        self._diff_colors = DiffColors.from_settings(self._settings.colors, dark)

        self._setup_ui()

        self.session = ComparisonSession(
            self._editors[Side.LEFT], self._editors[Side.RIGHT],
            self._editors[Side.LEFT], self._editors[Side.RIGHT],
            settings=self._settings.comparison,
        )
        self.session.add_listener(self._on_blocks_changed)

        self._setup_connections()

    def _setup_ui(self) -> None:
        """Set up the UI."""
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        header = QWidget()
        header_layout = QHBoxLayout(header)
        header_layout.setContentsMargins(4, 2, 4, 2)
        self._labels = {Side.LEFT: QLabel(), Side.RIGHT: QLabel()}
        header_layout.addWidget(self._labels[Side.LEFT], 1)
        header_layout.addWidget(self._labels[Side.RIGHT], 1)
        layout.addWidget(header)

        self._splitter = QSplitter(self._orientation(self._settings.ui.horizontal_split))
        self._editors = {}
        for side in Side:
            editor = DiffTextEdit(
                colors=self._diff_colors,
                font_family=self._settings.ui.font_family,
                font_size=self._settings.ui.font_size,
            )
            self._editors[side] = editor
            self._splitter.addWidget(editor)
        self._splitter.setSizes([500, 500])
        layout.addWidget(self._splitter, 1)

        self._status_label = QLabel()
        layout.addWidget(self._status_label)

    def _setup_connections(self) -> None:
        """Wire editors to the session and install shortcuts."""
        for side, editor in self._editors.items():
            editor.modified.connect(
                lambda pos, kind, text, length, side=side:
                    self._on_modified(side, pos, kind, text, length)
            )
            editor.verticalScrollBar().valueChanged.connect(
                lambda _value, side=side: self.session.synchronize(side)
            )
            editor.caret_moved.connect(
                lambda _line, side=side: self._on_caret_moved(side)
            )
            editor.horizontalScrollBar().valueChanged.connect(
                lambda value, side=side: self._sync_horizontal(side, value)
            )

        QShortcut(QKeySequence("Alt+Down"), self).activated.connect(self.goto_next_diff)
        QShortcut(QKeySequence("Alt+Up"), self).activated.connect(self.goto_prev_diff)
        QShortcut(QKeySequence("Alt+Left"), self).activated.connect(self.merge_left)
        QShortcut(QKeySequence("Alt+Right"), self).activated.connect(self.merge_right)

    def editor(self, side: Side) -> DiffTextEdit:
        return self._editors[side]

    @staticmethod
    def _orientation(horizontal: bool) -> Qt.Orientation:
        return Qt.Orientation.Horizontal if horizontal else Qt.Orientation.Vertical

    @property
    def horizontal_split(self) -> bool:
        return self._splitter.orientation() == Qt.Orientation.Horizontal

    def set_horizontal_split(self, horizontal: bool) -> None:
        """Place the documents side by side, or one above the other."""
        self._settings.ui.horizontal_split = horizontal
        self._splitter.setOrientation(self._orientation(horizontal))
        logging.debug(f"FileCompareView - horizontal split {horizontal}")

    # === Loading ===

    def load_files(self, left: Path | str, right: Path | str) -> bool:
        """
        Load two files and start comparing them.

        Returns:
            False if either file could not be read
        """
        self.session.stop()
        for side, path in ((Side.LEFT, Path(left)), (Side.RIGHT, Path(right))):
            result = self._file_io.read_file(path, normalize_line_endings=True)
            if not result.success:
                logging.warning(f"FileCompareView - Could not read {path}: {result.error}")
                QMessageBox.warning(self, "Open Error", f"{path}\n\n{result.error}")
                return False
            self._paths[side] = path
            self._contents[side] = result.content
            self._labels[side].setText(str(path))
            self._editors[side].set_text(result.content.content)

        self._set_modified(False)
        self.start_comparing()
        return True

    def set_texts(self, left: str, right: str) -> None:
        """Compare two texts that are not backed by files."""
        self.session.stop()
        self._editors[Side.LEFT].set_text(left)
        self._editors[Side.RIGHT].set_text(right)
        self.start_comparing()

    # === Comparison ===

    def start_comparing(self) -> None:
        self.session.start()
        self._show_status(self._statistics_text())

    def stop_comparing(self) -> None:
        self.session.stop()
        self._show_status("Comparison stopped")

    def goto_next_diff(self) -> None:
        """Navigate to the next difference."""
        self._goto(forward=True)

    def goto_prev_diff(self) -> None:
        """Navigate to the previous difference."""
        self._goto(forward=False)

    def _goto(self, forward: bool) -> None:
        target = self.session.goto_change(self._focus_side, forward)
        if target is None:
            self._show_status(self.session.status_message)
        else:
            self._show_status(self.session.status_message or self._statistics_text())

    def merge_left(self) -> None:
        """Take the right version of the change under the caret."""
        self._merge(MergeDirection.RIGHT_TO_LEFT)

    def merge_right(self) -> None:
        """Copy the left version of the change under the caret to the right."""
        self._merge(MergeDirection.LEFT_TO_RIGHT)

    def _merge(self, direction: MergeDirection) -> None:
        if self.session.merge(direction, self._focus_side):
            self._set_modified(True)
            self._show_status(self._statistics_text())

    # === Events ===

    def _on_modified(self, side: Side, position: int, kind: EditKind, text: str, length: int) -> None:
        self.session.on_modified(side, position, kind, text, length)
        if self.session.is_active:
            self._set_modified(True)

    def _on_caret_moved(self, side: Side) -> None:
        if self._editors[side].hasFocus():
            self._focus_side = side
        self.session.synchronize(side)

    def _sync_horizontal(self, side: Side, value: int) -> None:
        if self._settings.comparison.sync_scroll:
            self._editors[side.other].sync_horizontal_to(value)

    def _on_blocks_changed(self, blocks: list[ChangeBlock]) -> None:
        self.differences_changed.emit(len(blocks))

    # === Saving ===

    def is_modified(self) -> bool:
        """Check if content is modified."""
        return self._modified

    def _set_modified(self, modified: bool) -> None:
        if modified != self._modified:
            self._modified = modified
            self.modified_changed.emit(modified)

    def save(self) -> bool:
        """Write both sides back to their files."""
        for side, path in self._paths.items():
            if path is None:
                continue
            result = self._file_io.save_content(
                path, self._editors[side].get_text(), self._contents[side]
            )
            if not result.success:
                logging.error(f"FileCompareView - Failed to save {path}: {result.error}")
                QMessageBox.critical(self, "Save Error", f"Failed to save file: {result.error}")
                return False
        self._set_modified(False)
        self._show_status("Saved")
        return True

    # === Status ===

    def _statistics_text(self) -> str:
        stats = self.session.statistics
        if not stats.has_differences:
            return "Files are identical"
        return f"{stats.blocks} differences ({stats})"

    def _show_status(self, message: str) -> None:
        self._status_label.setText(message)
        self.status_changed.emit(message)

    def closeEvent(self, event) -> None:
        self.session.stop()
        super().closeEvent(event)
