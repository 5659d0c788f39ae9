"""
Text editor widget for one side of a live comparison.

Provides a QPlainTextEdit that is both the document and the viewport of
a comparison session:
- Full-width line backgrounds for additions, deletions and modifications
- Intraline highlighting through extra selections
- A rule where padding lines belong
- Edit notifications translated to code-point offsets
"""

from __future__ import annotations

from bisect import bisect_left
from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtGui import (
    QColor, QFont, QPainter, QPaintEvent, QPalette, QPen, QTextCharFormat,
    QTextCursor,
)
from PyQt6.QtWidgets import QApplication, QPlainTextEdit, QTextEdit, QWidget

from filediff.core.models import ChangeKind, EditKind, IntralineRange, Padding
from filediff.services.settings import ColorSettings, Theme


@dataclass
class DiffColors:
    """Color scheme for diff highlighting."""
    added_bg: QColor = field(default_factory=lambda: QColor("#e6ffe6"))
    removed_bg: QColor = field(default_factory=lambda: QColor("#ffe6e6"))
    modified_bg: QColor = field(default_factory=lambda: QColor("#fffde6"))

    # Intraline highlighting
    intraline_added: QColor = field(default_factory=lambda: QColor("#b3f0b3"))
    intraline_removed: QColor = field(default_factory=lambda: QColor("#f5b8b8"))

    padding: QColor = field(default_factory=lambda: QColor("#c8c8c8"))

    @classmethod
    def from_settings(cls, colors: ColorSettings, dark: bool = False) -> 'DiffColors':
        """Build a scheme from configured color strings."""
        if dark:
            return cls(
                added_bg=QColor(colors.dark_added_background),
                removed_bg=QColor(colors.dark_removed_background),
                modified_bg=QColor(colors.dark_modified_background),
                intraline_added=QColor(colors.dark_inserted_text_background),
                intraline_removed=QColor(colors.dark_deleted_text_background),
                padding=QColor(colors.dark_padding_color),
            )
        return cls(
            added_bg=QColor(colors.added_background),
            removed_bg=QColor(colors.removed_background),
            modified_bg=QColor(colors.modified_background),
            intraline_added=QColor(colors.inserted_text_background),
            intraline_removed=QColor(colors.deleted_text_background),
            padding=QColor(colors.padding_color),
        )

    @staticmethod
    def is_dark(theme: Theme) -> bool:
        """
        Resolve a theme to dark or light.

        SYSTEM looks at the application palette: a dark base color
        means a dark theme.
        """
        if theme is Theme.DARK:
            return True
        if theme is Theme.LIGHT:
            return False
        app = QApplication.instance()
        if app is None:
            return False
        return app.palette().color(QPalette.ColorRole.Base).lightness() < 128

    def background(self, kind: ChangeKind) -> QColor:
        if kind is ChangeKind.ADDITION:
            return self.added_bg
        if kind is ChangeKind.DELETION:
            return self.removed_bg
        return self.modified_bg


class DiffTextEdit(QPlainTextEdit):
    """
    Editable text view for one side of a comparison.

    Implements the DocumentSource and Viewport interfaces. Qt addresses
    text in UTF-16 units; the conversion to Python code-point offsets
    happens here so the engine never sees UTF-16 positions.
    """

    # Signals
    caret_moved = pyqtSignal(int)  # line
    modified = pyqtSignal(int, object, str, int)  # (position, EditKind, text, length)

    def __init__(
        self,
        parent: Optional[QWidget] = None,
        colors: Optional[DiffColors] = None,
        font_family: str = "Monospace",
        font_size: int = 10
    ):
        super().__init__(parent)

        self.colors = colors or DiffColors()
        self._markers: dict[int, ChangeKind] = {}
        self._padding: list[Padding] = []
        self._highlights: list[IntralineRange] = []

        # Code-point offsets of characters outside the BMP and their
        # UTF-16 positions
        self._astral: list[int] = []
        self._astral_qt: list[int] = []
        self._text = ""

        self._setup_editor(font_family, font_size)
        self._connect_signals()

    def _setup_editor(self, font_family: str, font_size: int) -> None:
        """Configure editor settings."""
        self.setLineWrapMode(QPlainTextEdit.LineWrapMode.NoWrap)

        font = QFont(font_family, font_size)
        font.setStyleHint(QFont.StyleHint.Monospace)
        self.setFont(font)
        self.setTabStopDistance(self.fontMetrics().horizontalAdvance(' ') * 4)

    def _connect_signals(self) -> None:
        """Connect internal signals."""
        self.document().contentsChange.connect(self._on_contents_change)
        self.cursorPositionChanged.connect(
            lambda: self.caret_moved.emit(self.textCursor().blockNumber())
        )

    def set_colors(self, colors: DiffColors) -> None:
        """Set color scheme."""
        self.colors = colors
        self._apply_highlights()
        self.viewport().update()

    # -------------------------------------------------------------------------
    # Position conversion
    # -------------------------------------------------------------------------

    def _refresh_text(self) -> None:
        self._text = self.toPlainText()
        self._astral = [i for i, ch in enumerate(self._text) if ord(ch) > 0xFFFF]
        self._astral_qt = [pos + rank for rank, pos in enumerate(self._astral)]

    def _to_qt(self, pos: int) -> int:
        return pos + bisect_left(self._astral, pos)

    def _from_qt(self, pos: int) -> int:
        return pos - bisect_left(self._astral_qt, pos)

    def _on_contents_change(self, position: int, removed: int, added: int) -> None:
        """Translate a Qt document change into edit notifications."""
        start = self._from_qt(position)
        # Removed range is measured against the text before the change
        removed_end = self._from_qt(position + removed)
        removed_text = self._text[start:removed_end]
        self._refresh_text()
        if removed:
            self.modified.emit(start, EditKind.DELETE, removed_text, len(removed_text))
        if added:
            end = self._from_qt(position + added)
            self.modified.emit(start, EditKind.INSERT, self._text[start:end], end - start)

    # -------------------------------------------------------------------------
    # DocumentSource
    # -------------------------------------------------------------------------

    def get_text(self) -> str:
        return self._text

    def set_text(self, text: str) -> None:
        self.setPlainText(text)
        self._refresh_text()

    def set_range(self, start: int, end: int, text: str) -> None:
        """Replace characters ``[start, end)`` as one undoable edit."""
        cursor = QTextCursor(self.document())
        cursor.setPosition(self._to_qt(start))
        cursor.setPosition(self._to_qt(end), QTextCursor.MoveMode.KeepAnchor)
        cursor.beginEditBlock()
        cursor.insertText(text)
        cursor.endEditBlock()

    def line_at(self, pos: int) -> int:
        return self.document().findBlock(self._to_qt(pos)).blockNumber()

    def pos_at(self, line: int) -> int:
        block = self.document().findBlockByNumber(line)
        if not block.isValid():
            return len(self._text)
        return self._from_qt(block.position())

    # -------------------------------------------------------------------------
    # Viewport
    # -------------------------------------------------------------------------

    def scroll_to(self, line: int) -> None:
        self.verticalScrollBar().setValue(line)

    def current_scroll(self) -> int:
        # One scroll step per block without line wrapping
        return self.verticalScrollBar().value()

    def caret_line(self) -> int:
        return self.textCursor().blockNumber()

    def set_caret_line(self, line: int) -> None:
        block = self.document().findBlockByNumber(
            max(0, min(line, self.document().blockCount() - 1))
        )
        self.setTextCursor(QTextCursor(block))
        self.ensureCursorVisible()

    def mark_changes(
        self,
        markers: Mapping[int, ChangeKind],
        padding: Sequence[Padding],
        highlights: Sequence[IntralineRange],
    ) -> None:
        self._markers = dict(markers)
        self._padding = list(padding)
        self._highlights = list(highlights)
        self._apply_highlights()
        self.viewport().update()

    def clear_changes(self) -> None:
        self.mark_changes({}, [], [])

    def sync_horizontal_to(self, value: int) -> None:
        """Mirror the horizontal scroll position without echoing it back."""
        self.blockSignals(True)
        self.horizontalScrollBar().setValue(value)
        self.blockSignals(False)

    # -------------------------------------------------------------------------
    # Painting
    # -------------------------------------------------------------------------

    def _apply_highlights(self) -> None:
        """Show intraline ranges as extra selections."""
        selections = []
        for highlight in self._highlights:
            selection = QTextEdit.ExtraSelection()
            fmt = QTextCharFormat()
            if highlight.diff_type == 'inserted':
                fmt.setBackground(self.colors.intraline_added)
            else:
                fmt.setBackground(self.colors.intraline_removed)
            selection.format = fmt
            cursor = QTextCursor(self.document())
            cursor.setPosition(self._to_qt(highlight.start))
            cursor.setPosition(self._to_qt(highlight.end), QTextCursor.MoveMode.KeepAnchor)
            selection.cursor = cursor
            selections.append(selection)
        self.setExtraSelections(selections)

    def paintEvent(self, event: QPaintEvent) -> None:
        """Paint change backgrounds under the text and padding rules over it."""
        painter = QPainter(self.viewport())
        block = self.firstVisibleBlock()
        block_number = block.blockNumber()
        top = int(self.blockBoundingGeometry(block).translated(
            self.contentOffset()).top())
        bottom = top + int(self.blockBoundingRect(block).height())
        rows: dict[int, int] = {}

        while block.isValid() and top <= event.rect().bottom():
            if block.isVisible() and bottom >= event.rect().top():
                kind = self._markers.get(block_number)
                if kind is not None:
                    painter.fillRect(
                        0, top,
                        self.viewport().width(),
                        bottom - top,
                        self.colors.background(kind)
                    )
            rows[block_number] = top
            block = block.next()
            top = bottom
            bottom = top + int(self.blockBoundingRect(block).height())
            block_number += 1
        # Rule for padding after the last line
        rows.setdefault(self.document().blockCount(), top)
        painter.end()

        super().paintEvent(event)

        if not self._padding:
            return
        painter = QPainter(self.viewport())
        pen = QPen(self.colors.padding)
        pen.setStyle(Qt.PenStyle.DashLine)
        painter.setPen(pen)
        for pad in self._padding:
            y = rows.get(pad.line)
            if y is None:
                continue
            painter.drawLine(0, y, self.viewport().width(), y)
            label = f"{pad.count} line{'s' if pad.count != 1 else ''}"
            painter.drawText(
                self.viewport().width() - self.fontMetrics().horizontalAdvance(label) - 4,
                y + self.fontMetrics().ascent(),
                label
            )
        painter.end()
