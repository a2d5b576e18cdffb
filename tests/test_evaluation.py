"""
Tests for guess evaluation, normalization and keyboard-state merging.
"""

from collections import Counter

import pytest

from backend import (
    ABSENT, PRESENT, CORRECT,
    Judge, normalize_name, merge_key_states, row_key_states,
)

C, P, A = CORRECT, PRESENT, ABSENT


@pytest.mark.parametrize("target, guess, expected", [
    ("AABBB", "AAAAA", [C, C, A, A, A]),
    ("ABCDE", "BCDEA", [P, P, P, P, P]),
    ("HELLO", "HELLO", [C, C, C, C, C]),
    ("ABBEY", "BABES", [P, P, C, C, A]),
    ("SPEED", "EERIE", [P, P, A, A, A]),
    ("ABA", "AAA", [C, A, C]),
    ("HELLO", "LLAMA", [P, P, A, A, A]),
])
def test_evaluate(target, guess, expected):
    assert Judge.evaluate(guess, target) == expected


def test_exact_matches_consumed_before_presence():
    # the trailing L is exact, so only one L is left for the earlier position
    assert Judge.evaluate("LXXLL", "HELLO") == [P, A, A, C, A]


def test_evaluate_is_case_insensitive():
    assert Judge.evaluate("hello", "HELLO") == [C] * 5


def test_guess_longer_than_target_never_matches_past_the_end():
    assert Judge.evaluate("ABC", "AB") == [C, C, A]
    assert Judge.evaluate("BAA", "AB") == [P, P, A]


@pytest.mark.parametrize("target, guess", [
    ("AABBB", "BBBBA"),
    ("SPEED", "EEEEE"),
    ("KNIGHT", "THTHTH"),
    ("GOLEM", "MOLLE"),
    ("MINERS", "SSSSSS"),
])
def test_matches_never_exceed_target_counts(target, guess):
    evals = Judge.evaluate(guess, target)
    hits = Counter(ch for ch, s in zip(guess, evals) if s != ABSENT)
    counts = Counter(target)
    for ch, n in hits.items():
        assert n <= counts[ch]


@pytest.mark.parametrize("name, expected", [
    ("P.E.K.K.A", "PEKKA"),
    ("X-Bow", "XBOW"),
    ("The Log", "THELOG"),
    ("mini p.e.k.k.a", "MINIPEKKA"),
    ("Écho 2", "CHO2"),
    ("---", ""),
])
def test_normalize_name(name, expected):
    assert normalize_name(name) == expected


@pytest.mark.parametrize("name", ["Hog Rider", "x-bow!", "", "  a1 b2 ", "ÄÖÜ", "already"])
def test_normalize_is_idempotent(name):
    once = normalize_name(name)
    assert normalize_name(once) == once


def test_row_key_states_keeps_best_tag_per_letter():
    states = row_key_states("LXXLL", [P, A, A, C, A])
    assert states == {"L": C, "X": A}


def test_merge_never_downgrades():
    existing = {"H": C, "E": P, "Z": A}
    incoming = {"H": A, "E": A, "Z": P, "Q": A}
    merged = merge_key_states(existing, incoming)
    assert merged == {"H": C, "E": P, "Z": P, "Q": A}


def test_merge_does_not_mutate_inputs():
    existing = {"H": P}
    incoming = {"H": C}
    merge_key_states(existing, incoming)
    assert existing == {"H": P}
    assert incoming == {"H": C}
