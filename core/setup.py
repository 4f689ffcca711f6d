"""
Opponent setup data and random word layout generation for the computer
opponent.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence
import logging

import torch

from core.difficulty import (
    COMPUTER_GRID_SIZES,
    COMPUTER_WORD_COUNTS,
    Difficulty,
    word_lengths_for_count,
)
from core.grid import Coordinate, WordPlacement
from utils.wordlist import WordBank

logger = logging.getLogger(__name__)

COMPUTER_NAME = "The Executioner"
COMPUTER_COLOR = (0.235, 0.353, 0.706)


@dataclass(frozen=True)
class OpponentSetupData:
    """
    One side's game setup, immutable once created.

    Attributes:
        name: Display name
        color: RGB color in [0, 1]
        grid_size: Grid dimension N
        word_count: Number of hidden words
        difficulty: Difficulty this side plays at
        word_lengths: Required word lengths, in word-row order
        placements: Placed words, in word-row order
    """
    name: str
    color: tuple[float, float, float]
    grid_size: int
    word_count: int
    difficulty: Difficulty
    word_lengths: tuple[int, ...] = ()
    placements: tuple[WordPlacement, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if len(self.placements) != self.word_count:
            raise ValueError(
                f"Setup for {self.name} declares {self.word_count} words but has {len(self.placements)} placements"
            )
        for placement in self.placements:
            if placement.grid_size != self.grid_size:
                raise ValueError(f"Placement {placement.word} does not match grid size {self.grid_size}")


def _randint(generator: torch.Generator, high: int) -> int:
    """Uniform integer in [0, high)."""
    return int(torch.randint(0, high, (1,), generator=generator).item())


class ComputerSetup:
    """
    Builds the computer opponent's grid: size, words and placements.

    Attributes:
        word_bank: Source of candidate words
        generator: Seeded random generator
        max_placement_attempts: Random tries per word before restarting
        max_layout_attempts: Full-layout restarts before giving up
    """

    def __init__(
        self,
        word_bank: WordBank,
        seed: Optional[int] = None,
        generator: Optional[torch.Generator] = None,
        max_placement_attempts: int = 100,
        max_layout_attempts: int = 20
    ):
        self.word_bank = word_bank
        if generator is None:
            generator = torch.Generator()
            if seed is not None:
                generator.manual_seed(seed)
        self.generator = generator
        self.max_placement_attempts = max_placement_attempts
        self.max_layout_attempts = max_layout_attempts

    def choose_grid(self, difficulty: Difficulty) -> tuple[int, int]:
        """Pick (grid_size, word_count) for the computer at a difficulty."""
        sizes = COMPUTER_GRID_SIZES[difficulty]
        counts = COMPUTER_WORD_COUNTS[difficulty]
        return sizes[_randint(self.generator, len(sizes))], counts[_randint(self.generator, len(counts))]

    def choose_words(self, lengths: Sequence[int]) -> list[str]:
        """
        Draw one distinct bank word per requested length.

        Raises:
            ValueError: If the bank has no unused word of a requested length
        """
        chosen: list[str] = []
        for length in lengths:
            candidates = [w for w in self.word_bank.words_of_length(length) if w not in chosen]
            if not candidates:
                raise ValueError(f"Word bank has no available words of length {length}")
            chosen.append(candidates[_randint(self.generator, len(candidates))])
        return chosen

    def place_words(self, words: Sequence[str], grid_size: int) -> list[WordPlacement]:
        """
        Place words horizontally or vertically without overlapping cells.

        Longer words are placed first; the returned list keeps the input order.

        Raises:
            ValueError: If no layout is found within the attempt limits
        """
        order = sorted(range(len(words)), key=lambda i: len(words[i]), reverse=True)

        for attempt in range(self.max_layout_attempts):
            occupied: set[Coordinate] = set()
            placed: dict[int, WordPlacement] = {}
            for index in order:
                placement = self._place_one(words[index], grid_size, occupied)
                if placement is None:
                    break
                placed[index] = placement
                occupied.update(placement.cells)
            else:
                return [placed[i] for i in range(len(words))]
            logger.debug(f"Layout attempt {attempt + 1} failed, retrying")

        raise ValueError(f"Could not place {list(words)} on a {grid_size}x{grid_size} grid")

    def _place_one(self, word: str, grid_size: int, occupied: set[Coordinate]) -> Optional[WordPlacement]:
        length = len(word)
        if length > grid_size:
            return None
        for _ in range(self.max_placement_attempts):
            horizontal = _randint(self.generator, 2) == 0
            if horizontal:
                row = _randint(self.generator, grid_size)
                col = _randint(self.generator, grid_size - length + 1)
                d_row, d_col = 0, 1
            else:
                row = _randint(self.generator, grid_size - length + 1)
                col = _randint(self.generator, grid_size)
                d_row, d_col = 1, 0
            cells = [(row + i * d_row, col + i * d_col) for i in range(length)]
            if any(cell in occupied for cell in cells):
                continue
            return WordPlacement(word, grid_size, row, col, d_row, d_col)
        return None

    def generate(
        self,
        difficulty: Difficulty,
        name: str = COMPUTER_NAME,
        color: tuple[float, float, float] = COMPUTER_COLOR
    ) -> OpponentSetupData:
        """
        Generate a complete computer setup.

        Args:
            difficulty: Difficulty the computer plays at
            name: Display name
            color: RGB color

        Returns:
            OpponentSetupData with placements
        """
        grid_size, word_count = self.choose_grid(difficulty)
        lengths = word_lengths_for_count(word_count)
        words = self.choose_words(lengths)
        placements = self.place_words(words, grid_size)
        logger.info(f"{name} set up a {grid_size}x{grid_size} grid with {word_count} words ({difficulty.value})")
        return OpponentSetupData(
            name=name,
            color=color,
            grid_size=grid_size,
            word_count=word_count,
            difficulty=difficulty,
            word_lengths=tuple(lengths),
            placements=tuple(placements),
        )
