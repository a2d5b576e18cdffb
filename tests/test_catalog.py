"""
Tests for card catalog loading.
"""

import json
import logging

import pytest

import backend
import config
from backend import CatalogError, load_cards


def write_catalog(tmp_path, data):
    path = tmp_path / "cards.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


def test_load_records(tmp_path):
    path = write_catalog(tmp_path, [{"name": "Hog Rider", "elixir": 4}, {"name": "X-Bow"}])
    cards = load_cards(path)
    assert [c.name for c in cards] == ["Hog Rider", "X-Bow"]
    assert [c.name_norm for c in cards] == ["HOGRIDER", "XBOW"]
    assert cards[0].extra == {"elixir": 4}


def test_load_plain_names_and_mapping(tmp_path):
    assert [c.name_norm for c in load_cards(write_catalog(tmp_path, ["Zap", "Rage"]))] == ["ZAP", "RAGE"]
    assert [c.name_norm for c in load_cards(write_catalog(tmp_path, {"Golem": {}, "Miner": {}}))] == ["GOLEM", "MINER"]


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_cards(str(tmp_path / "nope.json"))


def test_empty_catalog(tmp_path):
    with pytest.raises(CatalogError, match="No cards"):
        load_cards(write_catalog(tmp_path, []))


def test_unexpected_format(tmp_path):
    with pytest.raises(CatalogError):
        load_cards(write_catalog(tmp_path, "Knight"))


def test_record_without_name(tmp_path):
    with pytest.raises(CatalogError, match="no name"):
        load_cards(write_catalog(tmp_path, [{"name": "Knight"}, {"elixir": 3}]))


def test_name_without_letters_rejected(tmp_path):
    with pytest.raises(CatalogError, match="no letters"):
        load_cards(write_catalog(tmp_path, [{"name": "Knight"}, {"name": "?!"}]))


def test_short_name_warns(tmp_path, caplog):
    with caplog.at_level(logging.WARNING, logger="backend"):
        cards = load_cards(write_catalog(tmp_path, [{"name": "Z"}]))
    assert cards[0].name_norm == "Z"
    assert "cannot be solved" in caplog.text


def test_get_cards_caches(tmp_path, monkeypatch):
    path = write_catalog(tmp_path, ["Knight"])
    monkeypatch.setattr(config, "CARDS_FILE", path)
    monkeypatch.setattr(backend, "_CARDS_CACHE", None)
    first = backend.get_cards()
    assert backend.get_cards() is first
    assert backend.get_cards(reload=True) is not first


def test_bundled_catalog_is_playable():
    cards = load_cards(config.CARDS_FILE)
    assert cards
    assert all(len(c.name_norm) >= backend.MIN_COLS for c in cards)
