"""
Pytest configuration for Word Duel.

Shared fixtures: a small word bank, a fixed player setup, zero-delay
opponent parameters and a manual clock.
"""

import pytest

from agents.params import ExecutionerParams
from core.difficulty import Difficulty
from core.grid import WordPlacement
from core.setup import OpponentSetupData
from utils.wordlist import WordBank


TEST_WORDS = [
    "CAT", "COT", "CUT", "BAT", "HAT", "DOG", "SUN",
    "BIRD", "BARN", "LION", "FROG", "STAR",
    "APPLE", "TIGER", "HOUSE", "RIVER",
    "CASTLE", "GARDEN", "ROCKET",
]


class ManualClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


@pytest.fixture
def word_bank():
    return WordBank(TEST_WORDS)


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def fast_params():
    """Opponent parameters with no think delay and a fixed seed."""
    return ExecutionerParams(min_think_time=0.0, max_think_time=0.0, seed=7)


@pytest.fixture
def player_setup():
    """8x8 grid with CAT across row 0, BIRD down column 7 and APPLE across row 5."""
    placements = (
        WordPlacement("CAT", 8, 0, 0),
        WordPlacement("BIRD", 8, 1, 7, 1, 0),
        WordPlacement("APPLE", 8, 5, 1),
    )
    return OpponentSetupData(
        name="Player",
        color=(0.9, 0.2, 0.2),
        grid_size=8,
        word_count=3,
        difficulty=Difficulty.NORMAL,
        word_lengths=(3, 4, 5),
        placements=placements,
    )


@pytest.fixture
def opponent_setup():
    """6x6 grid with DOG across row 2, SUN down column 0 and STAR across row 5."""
    placements = (
        WordPlacement("DOG", 6, 2, 2),
        WordPlacement("SUN", 6, 0, 0, 1, 0),
        WordPlacement("STAR", 6, 5, 1),
    )
    return OpponentSetupData(
        name="Opponent",
        color=(0.2, 0.2, 0.9),
        grid_size=6,
        word_count=3,
        difficulty=Difficulty.NORMAL,
        word_lengths=(3, 3, 4),
        placements=placements,
    )
