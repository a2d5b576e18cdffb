"""
Tests for environment-driven settings.
"""

import importlib

import pytest

import config


@pytest.mark.parametrize("value, expected", [
    (None, False), ("", False), ("1", True), ("true", True), ("YES", True), ("0", False), ("nah", False),
])
def test_bool(value, expected):
    assert config._bool(value) is expected


def test_number_fallbacks():
    assert config._int("30", 60) == 30
    assert config._int("fast", 60) == 60
    assert config._int(None, 60) == 60
    assert config._float("0.5", 0.8) == 0.5
    assert config._float("big", 0.8) == 0.8


def test_settings_from_environment(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("CARDLE_CARDS_FILE", "/tmp/cards.json")
    monkeypatch.setenv("CARDLE_LOG_LEVEL", "debug")
    monkeypatch.setenv("CARDLE_SHOW_TARGET", "on")
    monkeypatch.setenv("CARDLE_FPS", "30")
    try:
        importlib.reload(config)
        assert config.CARDS_FILE == "/tmp/cards.json"
        assert config.LOG_LEVEL == "DEBUG"
        assert config.SHOW_TARGET is True
        assert config.FPS == 30
    finally:
        monkeypatch.undo()
        importlib.reload(config)
