"""
Per-side guess progress.
"""

from __future__ import annotations

from dataclasses import dataclass, field

Coordinate = tuple[int, int]


@dataclass
class GuessState:
    """
    Everything one side has learned about the other side's hidden words.

    Owned by the turn loop for that side and mutated only through
    GuessProcessor. Hits never reduce `misses`.

    Attributes:
        miss_limit: Misses at which this side loses
        misses: Misses accumulated so far
        known_letters: Letters confirmed to appear in the target words
        guessed_letters: Every letter guessed, hit or miss
        guessed_coordinates: Every coordinate guessed or revealed
        guessed_words: Normalized (uppercase) word guesses
        solved_word_rows: Indices of word rows solved by a word guess
    """
    miss_limit: int = 0
    misses: int = 0
    known_letters: set[str] = field(default_factory=set)
    guessed_letters: set[str] = field(default_factory=set)
    guessed_coordinates: set[Coordinate] = field(default_factory=set)
    guessed_words: set[str] = field(default_factory=set)
    solved_word_rows: set[int] = field(default_factory=set)

    def reset(self, miss_limit: int) -> None:
        """Clear all progress and set a new miss limit (game setup or rematch)."""
        self.miss_limit = miss_limit
        self.misses = 0
        self.known_letters.clear()
        self.guessed_letters.clear()
        self.guessed_coordinates.clear()
        self.guessed_words.clear()
        self.solved_word_rows.clear()

    def add_misses(self, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"Miss increments must be non-negative, got {amount}")
        self.misses += amount

    @property
    def misses_remaining(self) -> int:
        return max(0, self.miss_limit - self.misses)

    def has_exceeded_miss_limit(self) -> bool:
        return self.misses >= self.miss_limit
