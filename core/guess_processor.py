"""
Guess application against a target's hidden word layout.

The processor is the only component that mutates a side's GuessState and the
target's cell states. Gameplay-level rejections (duplicates, words missing
from the bank) are returned as GuessResult values, never raised.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional
import logging

from core.grid import CellState, TargetGrid, coordinate_to_string
from core.guess_state import GuessState
from core.snapshot import build_patterns
from utils.wordlist import WordBank

logger = logging.getLogger(__name__)

WRONG_WORD_PENALTY = 2


class GuessResult(Enum):
    """Outcome of a guess."""
    HIT = "hit"
    MISS = "miss"
    ALREADY_GUESSED = "already_guessed"
    INVALID_WORD = "invalid_word"
    # Produced by the turn loop before the processor is reached
    TURN_VIOLATION = "turn_violation"

    @property
    def ends_turn(self) -> bool:
        """Only processed guesses pass the turn; rejections let the mover retry."""
        return self in (GuessResult.HIT, GuessResult.MISS)


class GuessProcessor:
    """
    Applies letter, coordinate and word guesses for one guessing side.

    Attributes:
        target: Opponent's hidden layout being searched
        state: Guesser's progress (mutated in place)
        word_bank: Bank used to validate word guesses
        name: Label used in log messages
    """

    def __init__(
        self,
        target: TargetGrid,
        state: GuessState,
        word_bank: Optional[WordBank] = None,
        name: str = "player"
    ):
        """
        Initialize guess processor.

        Args:
            target: Opponent's hidden layout
            state: Guess state owned by the guessing side
            word_bank: Word bank for validation (None accepts any word)
            name: Label for log messages
        """
        self.target = target
        self.state = state
        self.word_bank = word_bank
        self.name = name

    def reset(self, miss_limit: int) -> None:
        """Clear progress and hide the target grid again."""
        self.state.reset(miss_limit)
        self.target.reset()
        logger.info(f"[{self.name}] Guess processor reset with miss limit {miss_limit}")

    def process_letter(self, letter: str) -> GuessResult:
        """
        Guess a letter.

        A hit marks the letter known (revealing it in every word pattern) and
        upgrades cells already hit with that letter to REVEALED. A miss costs
        one miss.

        Args:
            letter: Single alphabetic character

        Returns:
            HIT, MISS or ALREADY_GUESSED

        Raises:
            ValueError: If letter is not a single alphabetic character
        """
        if len(letter) != 1 or not letter.isalpha():
            raise ValueError(f"Letter guess must be a single letter, got {letter!r}")
        letter = letter.upper()

        if letter in self.state.guessed_letters:
            logger.warning(f"[{self.name}] Already guessed letter '{letter}'")
            return GuessResult.ALREADY_GUESSED

        self.state.guessed_letters.add(letter)

        if self.target.contains_letter(letter):
            self._learn_letter(letter)
            logger.debug(f"[{self.name}] Letter '{letter}' hit")
            return GuessResult.HIT

        self.state.add_misses(1)
        logger.debug(f"[{self.name}] Letter '{letter}' missed ({self.state.misses}/{self.state.miss_limit})")
        return GuessResult.MISS

    def _learn_letter(self, letter: str) -> None:
        self.state.known_letters.add(letter)
        self.target.upgrade_letter(letter)

    def process_coordinate(self, row: int, col: int) -> GuessResult:
        """
        Guess a coordinate.

        Args:
            row: Row index
            col: Column index

        Returns:
            HIT, MISS or ALREADY_GUESSED

        Raises:
            ValueError: If the coordinate lies outside the grid
        """
        self.target.check_bounds(row, col)
        coord = (row, col)

        if coord in self.state.guessed_coordinates:
            logger.warning(f"[{self.name}] Already guessed coordinate {coordinate_to_string(row, col)}")
            return GuessResult.ALREADY_GUESSED

        self.state.guessed_coordinates.add(coord)
        letter = self.target.letter_at(row, col)

        if letter is None:
            self.target.set_state(row, col, CellState.MISS)
            self.state.add_misses(1)
            logger.debug(
                f"[{self.name}] Coordinate {coordinate_to_string(row, col)} missed "
                f"({self.state.misses}/{self.state.miss_limit})"
            )
            return GuessResult.MISS

        if letter in self.state.known_letters:
            self.target.set_state(row, col, CellState.REVEALED)
        else:
            self.target.set_state(row, col, CellState.PARTIALLY_KNOWN)
        logger.debug(f"[{self.name}] Coordinate {coordinate_to_string(row, col)} hit")
        return GuessResult.HIT

    def process_word(self, word: str, pattern_index: int) -> GuessResult:
        """
        Guess the word in one word row.

        Words missing from the bank are rejected without penalty and are not
        recorded. A correct guess solves the row: every letter becomes known,
        every cell of the word is revealed and recorded as guessed. A wrong
        guess costs two misses.

        Args:
            word: Guessed word (trimmed and upper-cased)
            pattern_index: Word row the guess is for

        Returns:
            HIT, MISS, ALREADY_GUESSED or INVALID_WORD
        """
        normalized = word.strip().upper()

        if self.word_bank is not None and not self.word_bank.contains(normalized):
            logger.warning(f"[{self.name}] '{normalized}' is not a valid word")
            return GuessResult.INVALID_WORD

        if normalized in self.state.guessed_words:
            logger.warning(f"[{self.name}] Already guessed word '{normalized}'")
            return GuessResult.ALREADY_GUESSED

        self.state.guessed_words.add(normalized)

        placements = self.target.placements
        if 0 <= pattern_index < len(placements) and placements[pattern_index].word == normalized:
            self._solve_row(pattern_index)
            logger.info(f"[{self.name}] Solved word row {pattern_index}: {normalized}")
            return GuessResult.HIT

        self.state.add_misses(WRONG_WORD_PENALTY)
        logger.debug(
            f"[{self.name}] Wrong word '{normalized}' for row {pattern_index} "
            f"({self.state.misses}/{self.state.miss_limit})"
        )
        return GuessResult.MISS

    def _solve_row(self, pattern_index: int) -> None:
        placement = self.target.placements[pattern_index]
        self.state.solved_word_rows.add(pattern_index)

        for letter in placement.word:
            self.state.guessed_letters.add(letter)
            self._learn_letter(letter)

        for row, col in placement.cells:
            self.state.guessed_coordinates.add((row, col))
            self.target.set_state(row, col, CellState.REVEALED)

    def word_patterns(self) -> tuple[str, ...]:
        """Current pattern of every target word."""
        return build_patterns(self.target, self.state)

    def has_exceeded_miss_limit(self) -> bool:
        return self.state.has_exceeded_miss_limit()
