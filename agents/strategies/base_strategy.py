"""
Base class and shared types for guess strategies.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import torch

from agents.params import ExecutionerParams
from core.grid import coordinate_to_string
from core.snapshot import GameSnapshot


class GuessType(Enum):
    LETTER = "letter"
    COORDINATE = "coordinate"
    WORD = "word"


@dataclass(frozen=True)
class GuessRecommendation:
    """
    A strategy's suggested guess.

    Invalid recommendations carry no payload and must never be acted upon.

    Attributes:
        guess_type: Kind of guess
        confidence: Confidence in [0, 1]
        is_valid: Whether the recommendation may be executed
        letter: Letter payload (LETTER)
        row: Row payload (COORDINATE)
        col: Column payload (COORDINATE)
        word: Word payload (WORD)
        pattern_index: Word row the word is for (WORD)
    """
    guess_type: GuessType
    confidence: float = 0.0
    is_valid: bool = True
    letter: Optional[str] = None
    row: Optional[int] = None
    col: Optional[int] = None
    word: Optional[str] = None
    pattern_index: Optional[int] = None

    @classmethod
    def for_letter(cls, letter: str, confidence: float) -> "GuessRecommendation":
        return cls(GuessType.LETTER, confidence, letter=letter.upper())

    @classmethod
    def for_coordinate(cls, row: int, col: int, confidence: float) -> "GuessRecommendation":
        return cls(GuessType.COORDINATE, confidence, row=row, col=col)

    @classmethod
    def for_word(cls, word: str, pattern_index: int, confidence: float) -> "GuessRecommendation":
        if not word:
            return cls.invalid()
        return cls(GuessType.WORD, confidence, word=word.upper(), pattern_index=pattern_index)

    @classmethod
    def invalid(cls) -> "GuessRecommendation":
        return cls(GuessType.LETTER, 0.0, is_valid=False)

    def __str__(self) -> str:
        if not self.is_valid:
            return "Invalid recommendation"
        if self.guess_type is GuessType.LETTER:
            return f"Letter '{self.letter}' (confidence: {self.confidence:.0%})"
        if self.guess_type is GuessType.COORDINATE:
            return f"Coordinate {coordinate_to_string(self.row, self.col)} (confidence: {self.confidence:.0%})"
        return f"Word '{self.word}' for pattern {self.pattern_index} (confidence: {self.confidence:.0%})"


def pick_from_pool(pool_size: int, candidate_count: int, generator: torch.Generator) -> int:
    """
    Uniformly pick an index among the top pool_size ranked candidates.

    Args:
        pool_size: Requested pool size (skill-dependent)
        candidate_count: Number of ranked candidates available
        generator: Random generator

    Returns:
        Index into the ranked candidate list
    """
    pool = max(1, min(pool_size, candidate_count))
    return int(torch.randint(0, pool, (1,), generator=generator).item())


class BaseStrategy(ABC):
    """
    Abstract base class for guess strategies.

    A strategy reads a GameSnapshot and returns one GuessRecommendation. It
    never mutates game state.
    """

    guess_type: GuessType

    def __init__(self, params: Optional[ExecutionerParams] = None, generator: Optional[torch.Generator] = None):
        """
        Initialize strategy.

        Args:
            params: ExecutionerParams with skill tables
            generator: Random generator for pool picks (seeded from params if None)
        """
        self.params = params if params is not None else ExecutionerParams()
        if generator is None:
            generator = torch.Generator()
            if self.params.seed is not None:
                generator.manual_seed(self.params.seed)
        self.generator = generator

    @abstractmethod
    def evaluate(self, snapshot: GameSnapshot) -> GuessRecommendation:
        """
        Recommend a guess for the snapshot.

        Args:
            snapshot: Guesser's current knowledge

        Returns:
            GuessRecommendation (invalid if nothing can be suggested)
        """
        pass
