"""
Difficulty settings and the tables derived from them.
"""

from __future__ import annotations

from enum import Enum


class Difficulty(Enum):
    """Player-selected difficulty."""
    EASY = "easy"
    NORMAL = "normal"
    HARD = "hard"

    def inverse(self) -> "Difficulty":
        """
        Difficulty the computer opponent plays at for this player setting.

        A player who picks Easy faces the hardest computer opponent, so the
        extra misses they are granted are balanced by a sharper opponent.
        """
        if self is Difficulty.EASY:
            return Difficulty.HARD
        if self is Difficulty.HARD:
            return Difficulty.EASY
        return Difficulty.NORMAL

    @classmethod
    def parse(cls, value: "str | Difficulty") -> "Difficulty":
        """Accept a Difficulty or its case-insensitive name/value."""
        if isinstance(value, Difficulty):
            return value
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown difficulty: {value!r}") from None


BASE_MISSES = 15
MIN_MISS_LIMIT = 10
MAX_MISS_LIMIT = 40

# Extra misses granted per grid size; larger grids need more probing
GRID_SIZE_BONUS = {6: 3, 7: 4, 8: 6, 9: 8, 10: 10, 11: 12, 12: 13}
DEFAULT_GRID_SIZE_BONUS = 6

DIFFICULTY_MISS_MODIFIER = {
    Difficulty.EASY: 4,
    Difficulty.NORMAL: 0,
    Difficulty.HARD: -4,
}

# Grid sizes and word counts the computer opponent picks from
COMPUTER_GRID_SIZES = {
    Difficulty.EASY: (6, 7, 8),
    Difficulty.NORMAL: (8, 9, 10),
    Difficulty.HARD: (10, 11, 12),
}
COMPUTER_WORD_COUNTS = {
    Difficulty.EASY: (4,),
    Difficulty.NORMAL: (3, 4),
    Difficulty.HARD: (3,),
}

MIN_GRID_SIZE = 6
MAX_GRID_SIZE = 12


def calculate_miss_limit(grid_size: int, word_count: int, difficulty: Difficulty) -> int:
    """
    Miss limit for a guesser facing an opponent's grid.

    Args:
        grid_size: Opponent's grid dimension
        word_count: Number of words the opponent hid (3 or 4)
        difficulty: Guesser's difficulty setting

    Returns:
        Miss limit clamped to [10, 40]
    """
    grid_bonus = GRID_SIZE_BONUS.get(grid_size, DEFAULT_GRID_SIZE_BONUS)
    word_modifier = -2 if word_count == 4 else 0
    limit = BASE_MISSES + grid_bonus + word_modifier + DIFFICULTY_MISS_MODIFIER[difficulty]
    return max(MIN_MISS_LIMIT, min(MAX_MISS_LIMIT, limit))


def word_lengths_for_count(word_count: int) -> list[int]:
    """
    Required word lengths for a word count.

    Raises:
        ValueError: If word_count is not 3 or 4
    """
    if word_count == 3:
        return [4, 5, 6]
    if word_count == 4:
        return [3, 4, 5, 6]
    raise ValueError(f"Word count must be 3 or 4, got {word_count}")
