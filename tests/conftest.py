"""
Pytest configuration for Cardle.

Runs pygame against SDL's dummy drivers so the presentation tests need no
display or sound device.
"""

import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
