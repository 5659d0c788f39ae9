"""
Main entry point for the File Diff application.

This module handles:
- Command line argument parsing
- Logging configuration
- Headless comparison summaries
- Main window creation
- Exception handling
"""

from __future__ import annotations

import argparse
import logging
import sys
import traceback
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from PyQt6.QtWidgets import QApplication, QMessageBox

from filediff.core.compare.session import ComparisonSession
from filediff.core.document import TextBuffer
from filediff.core.models import ChangeBlock, ComparisonSummary, Side
from filediff.services.file_io import FileIOService
from filediff.services.settings import ApplicationSettings, SettingsManager, Theme


# =============================================================================
# Constants
# =============================================================================

APP_NAME = "filediff"
APP_DISPLAY_NAME = "File Diff"
APP_VERSION = "1.0.0"

LOGS_DIR = Path.home() / ".cache" / APP_NAME / "logs"

# Exit codes of the summary mode, as in diff(1)
EXIT_IDENTICAL = 0
EXIT_DIFFERENT = 1
EXIT_TROUBLE = 2


@dataclass
class CommandLineArgs:
    """Parsed command line arguments."""
    left_path: Optional[str] = None
    right_path: Optional[str] = None
    summary: bool = False
    theme: Optional[Theme] = None
    vertical: bool = False
    config_file: Optional[str] = None
    log_level: str = "INFO"
    debug: bool = False


# =============================================================================
# Logging Setup
# =============================================================================

class LogFormatter(logging.Formatter):
    """Custom log formatter with colors for console."""

    COLORS = {
        logging.INFO: '\033[32m',      # Green
        logging.WARNING: '\033[33m',   # Yellow
        logging.ERROR: '\033[31m',     # Red
        logging.CRITICAL: '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def __init__(self, use_colors: bool = True):
        super().__init__(
            fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)

        if self.use_colors:
            color = self.COLORS.get(record.levelno, '')
            return f"{color}{formatted}{self.RESET}"

        return formatted


def setup_logging(level: str = "INFO", log_file: Optional[Path] = None) -> logging.Logger:
    """
    Configure application logging.

    Args:
        level: Log level string
        log_file: Optional file path for logging

    Returns:
        Root logger instance
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    # Console handler; stderr keeps summary output on stdout clean
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(LogFormatter(use_colors=True))
    root_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(LogFormatter(use_colors=False))
        root_logger.addHandler(file_handler)

    return root_logger


# =============================================================================
# Exception Handling
# =============================================================================

class ExceptionHandler:
    """
    Global exception handler for unhandled exceptions.

    Logs the exception and shows an error dialog while the GUI runs.
    """

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self._app: Optional[QApplication] = None

    def set_application(self, app: QApplication) -> None:
        """Set the application instance for error dialogs."""
        self._app = app

    def handle_exception(
        self,
        exc_type: type,
        exc_value: BaseException,
        exc_tb
    ) -> None:
        """Handle an unhandled exception."""
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_tb)
            return

        self.logger.critical(
            "Unhandled exception",
            exc_info=(exc_type, exc_value, exc_tb)
        )

        if self._app and QApplication.instance():
            tb_text = ''.join(traceback.format_exception(exc_type, exc_value, exc_tb))
            dialog = QMessageBox()
            dialog.setIcon(QMessageBox.Icon.Critical)
            dialog.setWindowTitle("Application Error")
            dialog.setText(f"An unexpected error occurred:\n\n{exc_type.__name__}: {exc_value}")
            dialog.setDetailedText(tb_text)
            dialog.exec()


# =============================================================================
# Command Line
# =============================================================================

def parse_arguments(args: Optional[List[str]] = None) -> CommandLineArgs:
    """
    Parse command line arguments.

    Args:
        args: Arguments to parse (defaults to sys.argv)

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Two-way file comparison and merge tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s file1.txt file2.txt             Compare two files
  %(prog)s --summary file1.txt file2.txt   Print the changes and exit
  %(prog)s --theme dark a.txt b.txt        Start with dark theme
  %(prog)s --vertical a.txt b.txt          Stack the documents vertically
        """
    )

    parser.add_argument('left', nargs='?', help='Left file to compare')
    parser.add_argument('right', nargs='?', help='Right file to compare')

    parser.add_argument(
        '-s', '--summary',
        action='store_true',
        help='Print change blocks without opening a window'
    )
    parser.add_argument(
        '--theme',
        choices=['system', 'light', 'dark'],
        default=None,
        help='Application theme'
    )
    parser.add_argument(
        '--vertical',
        action='store_true',
        help='Stack the documents one above the other'
    )
    parser.add_argument(
        '-c', '--config',
        help='Configuration file path'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug mode'
    )
    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        default='WARNING',
        help='Log level'
    )
    parser.add_argument(
        '--version',
        action='version',
        version=f'{APP_NAME} {APP_VERSION}'
    )

    parsed = parser.parse_args(args)

    if parsed.summary and not (parsed.left and parsed.right):
        parser.error("--summary needs both LEFT and RIGHT")
    if bool(parsed.left) != bool(parsed.right):
        parser.error("give both LEFT and RIGHT or neither")

    return CommandLineArgs(
        left_path=parsed.left,
        right_path=parsed.right,
        summary=parsed.summary,
        theme=Theme.from_string(parsed.theme) if parsed.theme else None,
        vertical=parsed.vertical,
        config_file=parsed.config,
        log_level='DEBUG' if parsed.debug else parsed.log_level,
        debug=parsed.debug,
    )


# =============================================================================
# Headless Summary
# =============================================================================

def describe_block(block: ChangeBlock) -> str:
    """One-line description of a block with 1-based line numbers."""
    def span(side: Side) -> str:
        start = block.start(side) + 1
        count = block.count(side)
        if count == 0:
            return f"after {start - 1}"
        if count == 1:
            return f"{start}"
        return f"{start}-{start + count - 1}"

    return f"{block.kind.name.lower():<12} left {span(Side.LEFT):<12} right {span(Side.RIGHT)}"


def compare_files(
    left: Path | str,
    right: Path | str,
    settings: Optional[ApplicationSettings] = None
) -> ComparisonSummary:
    """Compare two files without any GUI."""
    settings = settings or ApplicationSettings()
    file_io = FileIOService()
    summary = ComparisonSummary(str(left), str(right))

    texts = []
    for path in (left, right):
        result = file_io.read_file(path, normalize_line_endings=True)
        if not result.success:
            summary.error = f"{path}: {result.error}"
            return summary
        texts.append(result.content.content)

    session = ComparisonSession(
        TextBuffer(texts[0], str(left)), TextBuffer(texts[1], str(right)),
        settings=settings.comparison,
    )
    summary.blocks = session.start()
    session.stop()
    return summary


def run_summary(args: CommandLineArgs, settings: ApplicationSettings) -> int:
    """Print the change blocks of two files and return a diff(1) exit code."""
    summary = compare_files(args.left_path, args.right_path, settings)
    if summary.error:
        logging.error(f"main - {summary.error}")
        print(summary.error, file=sys.stderr)
        return EXIT_TROUBLE

    for block in summary.blocks:
        print(describe_block(block))
    if summary.identical:
        print("Files are identical")
        return EXIT_IDENTICAL

    stats = summary.statistics
    print(f"{stats.blocks} differences ({stats})")
    return EXIT_DIFFERENT


# =============================================================================
# Main
# =============================================================================

def main(argv: Optional[List[str]] = None) -> int:
    """
    Application main entry point.

    Returns:
        Exit code
    """
    args = parse_arguments(argv)

    log_file = LOGS_DIR / f"{APP_NAME}_{datetime.now():%Y%m%d}.log" if args.debug else None
    logger = setup_logging(args.log_level, log_file)

    settings_manager = SettingsManager(Path(args.config_file) if args.config_file else None)
    settings = settings_manager.settings
    if args.theme is not None:
        settings.ui.theme = args.theme
    if args.vertical:
        settings.ui.horizontal_split = False

    if args.summary:
        return run_summary(args, settings)

    logger.info(f"Starting {APP_NAME} v{APP_VERSION}")
    exception_handler = ExceptionHandler(logger)
    sys.excepthook = exception_handler.handle_exception

    # Imported late: the summary mode needs no widgets
    from filediff.ui.main_window import MainWindow

    app = QApplication(sys.argv if argv is None else [APP_NAME, *argv])
    app.setApplicationName(APP_NAME)
    app.setApplicationDisplayName(APP_DISPLAY_NAME)
    app.setApplicationVersion(APP_VERSION)
    exception_handler.set_application(app)

    window = MainWindow(settings_manager)
    if args.left_path and args.right_path:
        window.open_files(args.left_path, args.right_path)
    window.show()

    exit_code = app.exec()
    logger.info(f"Application exiting with code {exit_code}")
    return exit_code


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == '__main__':
    sys.exit(main())
