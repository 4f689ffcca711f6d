"""
Guess strategies for the computer opponent.

Each strategy turns a GameSnapshot into a ranked, confidence-scored
GuessRecommendation.
"""

from agents.strategies.base_strategy import (
    BaseStrategy,
    GuessRecommendation,
    GuessType,
    pick_from_pool,
)
from agents.strategies.letter_strategy import LetterGuessStrategy
from agents.strategies.coordinate_strategy import CoordinateGuessStrategy
from agents.strategies.word_strategy import WordGuessStrategy, match_confidence

__all__ = [
    "BaseStrategy",
    "GuessRecommendation",
    "GuessType",
    "pick_from_pool",
    "LetterGuessStrategy",
    "CoordinateGuessStrategy",
    "WordGuessStrategy",
    "match_confidence",
]
