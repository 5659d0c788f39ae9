"""
Tests for the command line entry point in summary mode.
"""

import logging

import pytest

pytest.importorskip("PyQt6.QtWidgets")

import main  # noqa: E402
from filediff.services.settings import Theme  # noqa: E402


@pytest.fixture(autouse=True)
def restore_logging():
    """main() reconfigures the root logger; put it back afterwards."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def config(tmp_path):
    return str(tmp_path / "settings.json")


def write(tmp_path, name, text):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return str(path)


def test_parse_arguments():
    args = main.parse_arguments(["--summary", "--theme", "dark", "a.txt", "b.txt"])
    assert args.summary
    assert args.theme is Theme.DARK
    assert (args.left_path, args.right_path) == ("a.txt", "b.txt")


def test_vertical_flag():
    assert main.parse_arguments(["--vertical"]).vertical
    assert not main.parse_arguments([]).vertical


def test_debug_forces_debug_level():
    assert main.parse_arguments(["--debug"]).log_level == "DEBUG"


def test_one_path_is_an_error():
    with pytest.raises(SystemExit):
        main.parse_arguments(["a.txt"])


def test_summary_of_identical_files(tmp_path, config, capsys):
    left = write(tmp_path, "a.txt", "same\n")
    right = write(tmp_path, "b.txt", "same\n")
    assert main.main(["--summary", "-c", config, left, right]) == main.EXIT_IDENTICAL
    assert "identical" in capsys.readouterr().out


def test_summary_of_different_files(tmp_path, config, capsys):
    left = write(tmp_path, "a.txt", "1\n2\n3\n")
    right = write(tmp_path, "b.txt", "1\n2\nX\n3\n")
    assert main.main(["--summary", "-c", config, left, right]) == main.EXIT_DIFFERENT
    out = capsys.readouterr().out
    assert "addition" in out
    assert "+1 -0 ~0" in out


def test_summary_of_missing_file(tmp_path, config):
    left = write(tmp_path, "a.txt", "1\n")
    assert main.main(
        ["--summary", "-c", config, left, str(tmp_path / "missing.txt")]
    ) == main.EXIT_TROUBLE


def test_describe_block():
    [block] = main.ComparisonSession(
        main.TextBuffer("1\n2\n3\n"), main.TextBuffer("1\n2\nX\n3\n")
    ).start()
    line = main.describe_block(block)
    assert line.startswith("addition")
    assert "after 2" in line
    assert line.endswith("right 3")
