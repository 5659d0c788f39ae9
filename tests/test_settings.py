"""
Tests for settings persistence.
"""

import json
import logging

from filediff.services.settings import (
    ApplicationSettings,
    ComparisonSettings,
    SettingsManager,
    Theme,
)


def test_missing_file_gives_defaults(tmp_path):
    manager = SettingsManager(tmp_path / "settings.json")
    settings = manager.settings
    assert settings == ApplicationSettings()
    assert settings.comparison.max_input_size == 2_000_000
    assert settings.comparison.wrap_navigation


def test_save_and_load(tmp_path):
    path = tmp_path / "nested" / "settings.json"
    manager = SettingsManager(path)
    settings = ApplicationSettings()
    settings.ui.theme = Theme.DARK
    settings.comparison.diff_timeout = 1.5
    settings.last_directory = "/tmp/work"
    assert manager.save(settings)

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["ui"]["theme"] == "DARK"

    loaded = SettingsManager(path).load()
    assert loaded.ui.theme is Theme.DARK
    assert loaded.comparison.diff_timeout == 1.5
    assert loaded.last_directory == "/tmp/work"


def test_corrupt_file_falls_back_to_defaults(tmp_path, caplog):
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")
    with caplog.at_level(logging.WARNING):
        settings = SettingsManager(path).load()
    assert settings == ApplicationSettings()
    assert "Could not load" in caplog.text


def test_unknown_keys_are_ignored(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({
        "comparison": {"max_input_size": 10, "no_such_option": True},
        "ui": {"theme": "light"},
        "colors": "not a section",
    }), encoding="utf-8")
    settings = SettingsManager(path).load()
    assert settings.comparison.max_input_size == 10
    assert settings.ui.theme is Theme.LIGHT
    assert settings.colors == ApplicationSettings().colors


def test_theme_from_string():
    assert Theme.from_string("dark") is Theme.DARK
    assert Theme.from_string("LIGHT") is Theme.LIGHT
    assert Theme.from_string("neon") is Theme.SYSTEM


def test_diff_options_follow_comparison_settings():
    options = ComparisonSettings(
        max_input_size=100, diff_timeout=2.0, semantic_cleanup=False
    ).to_diff_options()
    assert options.max_input_size == 100
    assert options.timeout == 2.0
    assert not options.semantic_cleanup
