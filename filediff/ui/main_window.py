"""
Main application window.

Hosts a single file comparison with a menu, toolbar and status bar.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from PyQt6.QtGui import QAction, QCloseEvent, QKeySequence
from PyQt6.QtWidgets import (
    QFileDialog, QLabel, QMainWindow, QMessageBox, QStatusBar, QToolBar, QWidget,
)

from filediff.services.settings import SettingsManager
from filediff.ui.file_compare_view import FileCompareView


class MainWindow(QMainWindow):
    """Main application window."""

    def __init__(
        self,
        settings_manager: Optional[SettingsManager] = None,
        parent: Optional[QWidget] = None
    ):
        super().__init__(parent)

        self._settings_manager = settings_manager or SettingsManager()
        self._settings = self._settings_manager.settings

        self.setWindowTitle("File Diff")
        self.resize(self._settings.ui.window_width, self._settings.ui.window_height)

        self._view = FileCompareView(self._settings)
        self.setCentralWidget(self._view)

        self._setup_actions()
        self._setup_toolbar()
        self._setup_statusbar()

        self._view.status_changed.connect(self._status_label.setText)
        self._view.modified_changed.connect(self._action_save.setEnabled)

    @property
    def view(self) -> FileCompareView:
        return self._view

    def _setup_actions(self) -> None:
        """Create actions and the menu bar."""
        menubar = self.menuBar()
        file_menu = menubar.addMenu("&File")

        self._action_compare_files = QAction("Compare &Files...", self)
        self._action_compare_files.setShortcut(QKeySequence("F6"))
        self._action_compare_files.triggered.connect(self._on_compare_files)
        file_menu.addAction(self._action_compare_files)

        self._action_save = QAction("&Save", self)
        self._action_save.setShortcut(QKeySequence.StandardKey.Save)
        self._action_save.triggered.connect(self._view.save)
        self._action_save.setEnabled(False)
        file_menu.addAction(self._action_save)

        file_menu.addSeparator()

        action_exit = QAction("E&xit", self)
        action_exit.triggered.connect(self.close)
        file_menu.addAction(action_exit)

        compare_menu = menubar.addMenu("&Compare")

        self._action_next_diff = QAction("&Next Change", self)
        self._action_next_diff.triggered.connect(self._view.goto_next_diff)
        compare_menu.addAction(self._action_next_diff)

        self._action_prev_diff = QAction("&Previous Change", self)
        self._action_prev_diff.triggered.connect(self._view.goto_prev_diff)
        compare_menu.addAction(self._action_prev_diff)

        compare_menu.addSeparator()

        self._action_merge_left = QAction("Merge &Left", self)
        self._action_merge_left.triggered.connect(self._view.merge_left)
        compare_menu.addAction(self._action_merge_left)

        self._action_merge_right = QAction("Merge &Right", self)
        self._action_merge_right.triggered.connect(self._view.merge_right)
        compare_menu.addAction(self._action_merge_right)

        compare_menu.addSeparator()

        self._action_stop = QAction("&Stop Comparing", self)
        self._action_stop.triggered.connect(self._view.stop_comparing)
        compare_menu.addAction(self._action_stop)

        view_menu = menubar.addMenu("&View")

        self._action_vertical_split = QAction("Split &Vertically", self)
        self._action_vertical_split.setCheckable(True)
        self._action_vertical_split.setChecked(not self._settings.ui.horizontal_split)
        self._action_vertical_split.toggled.connect(
            lambda checked: self._view.set_horizontal_split(not checked)
        )
        view_menu.addAction(self._action_vertical_split)

    def _setup_toolbar(self) -> None:
        toolbar = QToolBar("Main")
        toolbar.setMovable(False)
        for action in (
            self._action_compare_files, self._action_save,
            self._action_prev_diff, self._action_next_diff,
            self._action_merge_left, self._action_merge_right,
        ):
            toolbar.addAction(action)
        self.addToolBar(toolbar)

    def _setup_statusbar(self) -> None:
        """Set up the status bar."""
        self._statusbar = QStatusBar()
        self.setStatusBar(self._statusbar)
        self._status_label = QLabel("Ready")
        self._statusbar.addWidget(self._status_label, 1)

    def open_files(self, left: Path | str, right: Path | str) -> bool:
        if self._view.load_files(left, right):
            self._settings.last_directory = str(Path(left).parent)
            return True
        return False

    def _on_compare_files(self) -> None:
        start_dir = self._settings.last_directory
        left, _ = QFileDialog.getOpenFileName(self, "Left File", start_dir)
        if not left:
            return
        right, _ = QFileDialog.getOpenFileName(self, "Right File", str(Path(left).parent))
        if not right:
            return
        self.open_files(left, right)

    def closeEvent(self, event: QCloseEvent) -> None:
        if self._view.is_modified():
            answer = QMessageBox.question(
                self, "Unsaved Changes", "Save changes before closing?",
                QMessageBox.StandardButton.Save | QMessageBox.StandardButton.Discard
                | QMessageBox.StandardButton.Cancel
            )
            if answer == QMessageBox.StandardButton.Cancel:
                event.ignore()
                return
            if answer == QMessageBox.StandardButton.Save and not self._view.save():
                event.ignore()
                return

        self._settings.ui.window_width = self.width()
        self._settings.ui.window_height = self.height()
        if not self._settings_manager.save(self._settings):
            logging.warning("MainWindow - Settings were not saved")
        self._view.stop_comparing()
        super().closeEvent(event)
