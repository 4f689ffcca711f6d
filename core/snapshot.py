"""
Immutable per-turn view of one side's guess progress, consumed by the guess
strategies.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable, Optional

from core.grid import TargetGrid
from core.guess_state import GuessState
from utils.wordlist import ALPHABET, WILDCARD

Coordinate = tuple[int, int]


@dataclass(frozen=True)
class GameSnapshot:
    """
    Point-in-time read of a guesser's knowledge of the opponent's grid.

    Attributes:
        grid_size: Opponent grid dimension N
        word_count: Number of opponent words
        guessed_letters: Letters already guessed
        hit_letters: Letters known to be in the target words
        guessed_coordinates: Coordinates already guessed or revealed
        hit_coordinates: Guessed coordinates that held a letter
        word_patterns: Per word row, letters known in place, WILDCARD elsewhere
        words_solved: Per word row, whether it was solved by a word guess
        guessed_words: Words already guessed, right or wrong
        skill_level: Skill of the guesser in [0, 1]
        fill_ratio: Proportion of opponent cells holding letters
        target_letter_count: Number of distinct letters across opponent words
        target_cell_count: Number of letter-bearing opponent cells
    """
    grid_size: int
    word_count: int
    guessed_letters: frozenset[str] = field(default_factory=frozenset)
    hit_letters: frozenset[str] = field(default_factory=frozenset)
    guessed_coordinates: frozenset[Coordinate] = field(default_factory=frozenset)
    hit_coordinates: frozenset[Coordinate] = field(default_factory=frozenset)
    word_patterns: tuple[str, ...] = ()
    words_solved: tuple[bool, ...] = ()
    guessed_words: frozenset[str] = field(default_factory=frozenset)
    skill_level: float = 0.5
    fill_ratio: float = 0.0
    target_letter_count: Optional[int] = None
    target_cell_count: Optional[int] = None

    @property
    def unsolved_word_count(self) -> int:
        return sum(1 for solved in self.words_solved if not solved)

    def unguessed_letters(self) -> list[str]:
        """Letters A-Z not yet guessed, in alphabetical order."""
        return [c for c in ALPHABET if c not in self.guessed_letters]

    def unguessed_coordinates(self) -> list[Coordinate]:
        """Coordinates not yet guessed, in row-major order."""
        return [
            (row, col)
            for row in range(self.grid_size)
            for col in range(self.grid_size)
            if (row, col) not in self.guessed_coordinates
        ]

    def all_letters_found(self) -> bool:
        """Whether every letter in the target words is already known."""
        if self.target_letter_count is not None:
            return len(self.hit_letters) >= self.target_letter_count
        # Without a count, fall back to fully revealed patterns
        return bool(self.word_patterns) and all(WILDCARD not in p for p in self.word_patterns)

    def all_coordinates_found(self) -> bool:
        """Whether every letter-bearing cell has already been hit."""
        if self.target_cell_count is not None:
            return len(self.hit_coordinates) >= self.target_cell_count
        return False

    def with_skill(self, skill_level: float) -> "GameSnapshot":
        return replace(self, skill_level=skill_level)

    def with_hits(self, hit_coordinates: Iterable[Coordinate]) -> "GameSnapshot":
        """Copy with a (possibly memory-filtered) set of hit coordinates."""
        return replace(self, hit_coordinates=frozenset(hit_coordinates))


def build_patterns(target: TargetGrid, state: GuessState) -> tuple[str, ...]:
    """Word patterns for every target word given the guesser's knowledge."""
    patterns = []
    for index, placement in enumerate(target.placements):
        if index in state.solved_word_rows:
            patterns.append(placement.word)
        else:
            patterns.append("".join(
                c if c in state.known_letters else WILDCARD for c in placement.word
            ))
    return tuple(patterns)


def build_snapshot(target: TargetGrid, state: GuessState, skill_level: float = 0.5) -> GameSnapshot:
    """
    Derive a snapshot from a target grid and the guesser's state.

    Args:
        target: Opponent's hidden layout
        state: Guesser's progress against it
        skill_level: Guesser skill in [0, 1]

    Returns:
        GameSnapshot for the strategies
    """
    occupied = target.occupied
    return GameSnapshot(
        grid_size=target.grid_size,
        word_count=len(target.placements),
        guessed_letters=frozenset(state.guessed_letters),
        hit_letters=frozenset(state.known_letters),
        guessed_coordinates=frozenset(state.guessed_coordinates),
        hit_coordinates=frozenset(c for c in state.guessed_coordinates if c in occupied),
        word_patterns=build_patterns(target, state),
        words_solved=tuple(i in state.solved_word_rows for i in range(len(target.placements))),
        guessed_words=frozenset(state.guessed_words),
        skill_level=skill_level,
        fill_ratio=target.fill_ratio,
        target_letter_count=len(target.unique_letters),
        target_cell_count=target.letter_count,
    )
