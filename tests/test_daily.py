"""
Tests for the date-seeded daily selector.
"""

from datetime import date, timedelta

import pytest

import backend
from backend import CatalogError, Card, day_number, daily_index, lcg, pick_daily_card


def test_day_number():
    assert day_number(date(1970, 1, 1)) == 0
    assert day_number(date(1970, 1, 2)) == 1
    assert day_number(date(2024, 1, 1)) == 19723


def test_lcg_sequence():
    rnd = lcg(0)
    assert rnd() == 1013904223 / 2 ** 32
    assert rnd() == 1196435762 / 2 ** 32
    assert rnd() == 3519870697 / 2 ** 32


def test_lcg_coerces_seed_to_unsigned_32_bits():
    a, b = lcg(-1), lcg(2 ** 32 - 1)
    assert [a() for _ in range(3)] == [b() for _ in range(3)]


def test_lcg_values_in_unit_interval():
    rnd = lcg(12345)
    for _ in range(1000):
        v = rnd()
        assert 0.0 <= v < 1.0


@pytest.mark.parametrize("today, count, expected", [
    (date(2024, 1, 1), 60, 31),
    (date(2024, 1, 1), 1000, 522),
    (date(2025, 6, 15), 1000, 328),
    (date(2025, 6, 15), 7, 2),
    (date(1970, 1, 1), 1000, 165),
])
def test_daily_index_known_values(today, count, expected):
    assert daily_index(count, today) == expected


def test_daily_index_is_deterministic():
    today = date(2026, 3, 14)
    assert len({daily_index(97, today) for _ in range(10)}) == 1


def test_daily_index_in_range_and_varies():
    start = date(2024, 1, 1)
    seen = set()
    for offset in range(365):
        idx = daily_index(50, start + timedelta(days=offset))
        assert 0 <= idx < 50
        seen.add(idx)
    assert len(seen) > 10


def test_single_card_always_selected():
    assert daily_index(1, date(2030, 12, 31)) == 0


def test_daily_index_zero_cards():
    with pytest.raises(CatalogError):
        daily_index(0, date(2024, 1, 1))


def test_daily_index_defaults_to_utc_today(monkeypatch):
    monkeypatch.setattr(backend, "utc_today", lambda: date(2024, 1, 1))
    assert daily_index(1000) == 522


def test_pick_daily_card():
    cards = [Card(f"Card {i}") for i in range(60)]
    assert pick_daily_card(cards, date(2024, 1, 1)) is cards[31]
