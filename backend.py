import os
import re
import json
import logging
from datetime import date, datetime, timezone

import config

log = logging.getLogger(__name__)

MAX_ROWS = 6
MIN_COLS = 3
DAILY_MAGIC = 0xC0FFEE

ABSENT, PRESENT, CORRECT = 0, 1, 2
TAG_NAMES = {ABSENT: "absent", PRESENT: "present", CORRECT: "correct"}

PLAYING, WON, LOST = "playing", "won", "lost"

_NON_ALNUM = re.compile(r"[^A-Za-z0-9]")
_CHAR = re.compile(r"[A-Za-z0-9]")
_EPOCH = date(1970, 1, 1)


class CatalogError(RuntimeError):
    """Raised when the card catalog cannot produce a playable target."""


def normalize_name(name: str) -> str:
    return _NON_ALNUM.sub("", name).upper()


class Card:
    def __init__(self, name: str, **extra):
        self.name = name
        self.name_norm = normalize_name(name)
        self.extra = extra

    def __repr__(self):
        return f"Card({self.name!r})"


# -------------------------
# Catalog
# -------------------------

def _records(data, path):
    if isinstance(data, dict):
        return [{"name": k} for k in data.keys()]
    if isinstance(data, list):
        return data
    raise CatalogError(f"Unexpected card catalog format in {path}")


def load_cards(path=None):
    path = path or config.CARDS_FILE
    if not os.path.exists(path):
        raise FileNotFoundError(f"Required card catalog not found: {path}")
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    cards = []
    for i, record in enumerate(_records(data, path)):
        if isinstance(record, str):
            record = {"name": record}
        if not isinstance(record, dict) or not isinstance(record.get("name"), str):
            raise CatalogError(f"Card #{i} in {path} has no name")
        record = dict(record)
        card = Card(record.pop("name"), **record)
        if not card.name_norm:
            raise CatalogError(f"Card {card.name!r} in {path} has no letters or digits")
        if len(card.name_norm) < MIN_COLS:
            log.warning("Card %r is shorter than %d columns and cannot be solved", card.name, MIN_COLS)
        cards.append(card)

    if not cards:
        raise CatalogError(f"No cards found in {path}")
    log.info("Loaded %d cards from %s", len(cards), path)
    return cards


_CARDS_CACHE = None


def get_cards(reload: bool = False):
    global _CARDS_CACHE
    if reload or _CARDS_CACHE is None:
        _CARDS_CACHE = load_cards()
    return _CARDS_CACHE


# -------------------------
# Daily selection
# -------------------------

def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def day_number(today: date) -> int:
    return (today - _EPOCH).days


def lcg(seed: int):
    """Linear congruential generator yielding floats in [0, 1)."""
    state = seed & 0xFFFFFFFF

    def rnd():
        nonlocal state
        state = (1664525 * state + 1013904223) & 0xFFFFFFFF
        return state / 2 ** 32

    return rnd


def daily_index(count: int, today=None) -> int:
    if count <= 0:
        raise CatalogError("Cannot select a daily target from zero cards")
    if today is None:
        today = utc_today()
    rnd = lcg(DAILY_MAGIC ^ day_number(today))
    return int(rnd() * count)


def column_count(target: str) -> int:
    return max(MIN_COLS, len(target))


def pick_daily_card(cards, today=None) -> Card:
    return cards[daily_index(len(cards), today)]


# -------------------------
# Evaluation
# -------------------------

class Judge:
    @staticmethod
    def evaluate(guess: str, target: str):
        guess = guess.upper()
        target = target.upper()
        res = [ABSENT] * len(guess)
        taken = [False] * len(target)
        for i, g in enumerate(guess):
            if i < len(target) and g == target[i]:
                res[i] = CORRECT
                taken[i] = True
        for i, g in enumerate(guess):
            if res[i] == CORRECT:
                continue
            for j, t in enumerate(target):
                if t == g and not taken[j]:
                    res[i] = PRESENT
                    taken[j] = True
                    break
        return res


def row_key_states(guess: str, evaluations):
    states = {}
    for ch, s in zip(guess.upper(), evaluations):
        states[ch] = max(states.get(ch, s), s)
    return states


def merge_key_states(existing, incoming):
    merged = dict(existing)
    for ch, s in incoming.items():
        merged[ch] = max(merged.get(ch, s), s)
    return merged


# -------------------------
# Session
# -------------------------

class SessionListener:
    """Receives state deltas from a GameSession. Override what you need."""

    def on_cell_changed(self, row, col, char):
        pass

    def on_row_evaluated(self, row, evaluations):
        pass

    def on_keyboard_updated(self, key_states):
        pass

    def on_row_rejected(self, row):
        pass

    def on_game_won(self):
        pass

    def on_game_lost(self):
        pass


class GameSession:
    """
    One play of the daily puzzle.

    Owns the grid, the evaluation grid, the cursor, the keyboard state and the
    target. Input goes through type_char, delete_char and submit_guess; every
    change is announced to the subscribed listeners.

    With deferred_reveal the session stops after announcing a row's
    evaluations and ignores all input until complete_reveal is called, so a
    presentation layer can animate the reveal first.
    """

    def __init__(self, target: str, max_rows: int = MAX_ROWS, deferred_reveal: bool = False):
        target = normalize_name(target)
        if not target:
            raise CatalogError("Target word has no letters or digits")
        self.target = target
        self.max_rows = max_rows
        self.cols = column_count(target)
        self.deferred_reveal = deferred_reveal
        self.grid = [[''] * self.cols for _ in range(max_rows)]
        self.evaluations = [[None] * self.cols for _ in range(max_rows)]
        self.row = 0
        self.col = 0
        self.status = PLAYING
        self.card = None
        self._key_states = {}
        self._pending = None
        self._listeners = []

    def subscribe(self, listener):
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, name, *args):
        for listener in list(self._listeners):
            getattr(listener, name)(*args)

    @property
    def keyboard(self):
        return dict(self._key_states)

    @property
    def revealing(self) -> bool:
        return self._pending is not None

    @property
    def is_over(self) -> bool:
        return self.status != PLAYING

    def _accepts_input(self) -> bool:
        return self.status == PLAYING and self._pending is None and self.row < self.max_rows

    def guess_at(self, row: int) -> str:
        return "".join(self.grid[row])

    def type_char(self, ch):
        if not self._accepts_input() or self.col >= self.cols:
            return
        if not isinstance(ch, str):
            return
        if not _CHAR.fullmatch(ch):
            return
        ch = ch.upper()
        self.grid[self.row][self.col] = ch
        self._emit("on_cell_changed", self.row, self.col, ch)
        self.col += 1

    def delete_char(self):
        # never steps back into a submitted row
        if not self._accepts_input() or self.col == 0:
            return
        self.col -= 1
        self.grid[self.row][self.col] = ''
        self._emit("on_cell_changed", self.row, self.col, '')

    def submit_guess(self):
        if not self._accepts_input():
            return None
        if any(ch == '' for ch in self.grid[self.row]):
            log.debug("Row %d rejected: incomplete", self.row)
            self._emit("on_row_rejected", self.row)
            return None

        guess = self.guess_at(self.row)
        evals = Judge.evaluate(guess, self.target)
        self.evaluations[self.row] = list(evals)
        self._pending = (self.row, guess, evals)
        log.info("Row %d: %s -> %s", self.row, guess, " ".join(TAG_NAMES[s] for s in evals))
        self._emit("on_row_evaluated", self.row, list(evals))
        if not self.deferred_reveal:
            self.complete_reveal()
        return evals

    def complete_reveal(self):
        if self._pending is None:
            return
        row, guess, evals = self._pending
        self._pending = None

        self._key_states = merge_key_states(self._key_states, row_key_states(guess, evals))
        self._emit("on_keyboard_updated", self.keyboard)

        if all(s == CORRECT for s in evals):
            self.status = WON
            log.info("Solved %s in %d guesses", self.target, row + 1)
            self._emit("on_game_won")
            return
        self.row += 1
        self.col = 0
        if self.row >= self.max_rows:
            self.status = LOST
            log.info("Out of guesses, the answer was %s", self.target)
            self._emit("on_game_lost")


def new_session(cards, today=None, **kwargs) -> GameSession:
    card = pick_daily_card(cards, today)
    session = GameSession(card.name_norm, **kwargs)
    session.card = card
    return session
