"""
Pytest configuration: project root on sys.path, Qt without a display.
"""
import os
import sys
from pathlib import Path

import pytest

# Widgets are created without a window system
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture(scope="session")
def qapp():
    """A QApplication shared by all widget tests."""
    widgets = pytest.importorskip("PyQt6.QtWidgets")
    app = widgets.QApplication.instance() or widgets.QApplication([])
    yield app
