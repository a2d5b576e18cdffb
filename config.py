"""
Runtime settings for Cardle.

Values come from the environment (a .env file in the working directory is
loaded first). Malformed numbers fall back to their defaults.
"""

import os
import logging

from dotenv import load_dotenv

load_dotenv()

log = logging.getLogger(__name__)


def _bool(env_value, default: bool = False) -> bool:
    if env_value is None or env_value.strip() == "":
        return default
    return env_value.strip().lower() in ("1", "true", "yes", "on")


def _int(env_value, default: int = 0) -> int:
    try:
        return int(env_value) if env_value else default
    except ValueError:
        log.warning("Ignoring invalid integer setting %r", env_value)
        return default


def _float(env_value, default: float = 0.0) -> float:
    try:
        return float(env_value) if env_value else default
    except ValueError:
        log.warning("Ignoring invalid number setting %r", env_value)
        return default


BASE_DIR = os.path.dirname(os.path.abspath(__file__))

CARDS_FILE = os.getenv("CARDLE_CARDS_FILE") or os.path.join(BASE_DIR, "data", "cards.json")
LOG_LEVEL = (os.getenv("CARDLE_LOG_LEVEL") or "INFO").upper()
SHOW_TARGET = _bool(os.getenv("CARDLE_SHOW_TARGET"))
WINDOW_FRACTION = _float(os.getenv("CARDLE_WINDOW_FRACTION"), 0.8)
FPS = _int(os.getenv("CARDLE_FPS"), 60)
