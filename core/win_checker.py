"""
Win/lose evaluation over tracked guess state. Pure functions, no mutation.
"""

from __future__ import annotations

from enum import Enum
from typing import Sequence

from core.grid import WordPlacement
from core.guess_state import GuessState


class GameOutcome(Enum):
    NONE = "none"
    WIN = "win"
    LOSE = "lose"


def is_word_fully_known(state: GuessState, placement: WordPlacement) -> bool:
    """Whether every letter of the word is known."""
    return all(letter in state.known_letters for letter in placement.word)


def is_word_fully_revealed(state: GuessState, placement: WordPlacement) -> bool:
    """Whether every letter is known and every cell of the word has been guessed."""
    return (
        is_word_fully_known(state, placement)
        and all(cell in state.guessed_coordinates for cell in placement.cells)
    )


def check_win(state: GuessState, placements: Sequence[WordPlacement]) -> bool:
    """
    Whether the guesser has uncovered every opponent word.

    Both every letter and every position are required; knowing all letters
    without having guessed every cell is not enough, and vice versa.

    Args:
        state: Guesser's progress
        placements: Opponent's placed words

    Returns:
        True if the guesser has won
    """
    if not placements:
        return False
    return all(is_word_fully_revealed(state, p) for p in placements)


def check_lose(state: GuessState) -> bool:
    return state.has_exceeded_miss_limit()


def evaluate_outcome(state: GuessState, placements: Sequence[WordPlacement]) -> GameOutcome:
    """
    Outcome for the guesser after a processed guess.

    Loss is checked first: a guess that finishes the board while pushing the
    mover past its own miss limit is a loss.
    """
    if check_lose(state):
        return GameOutcome.LOSE
    if check_win(state, placements):
        return GameOutcome.WIN
    return GameOutcome.NONE


def find_newly_revealed_word_rows(state: GuessState, placements: Sequence[WordPlacement]) -> list[int]:
    """Word rows whose letters are all known but that are not marked solved yet."""
    return [
        i for i, placement in enumerate(placements)
        if i not in state.solved_word_rows and is_word_fully_known(state, placement)
    ]
