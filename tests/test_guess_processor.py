"""
Tests for core.guess_processor, core.win_checker and core.turns.
"""

import pytest

from core.grid import CellState, TargetGrid, WordPlacement
from core.guess_processor import GuessProcessor, GuessResult, WRONG_WORD_PENALTY
from core.guess_state import GuessState
from core.turns import TurnTracker
from core.win_checker import (
    GameOutcome,
    check_lose,
    check_win,
    evaluate_outcome,
    find_newly_revealed_word_rows,
)


def make_processor(word_bank, placements=None, grid_size=6, miss_limit=10):
    if placements is None:
        placements = [WordPlacement("CAT", grid_size, 0, 0), WordPlacement("BIRD", grid_size, 2, 1)]
    target = TargetGrid(grid_size, placements)
    state = GuessState(miss_limit=miss_limit)
    return GuessProcessor(target, state, word_bank), target, state


# ============================================================================
# Letters
# ============================================================================

def test_letter_hit_marks_known_and_upgrades_cells(word_bank):
    """Test that a letter hit upgrades already-hit cells holding it."""
    processor, target, state = make_processor(word_bank)
    processor.process_coordinate(0, 1)
    assert target.state_at(0, 1) == CellState.PARTIALLY_KNOWN

    result = processor.process_letter("a")

    assert result is GuessResult.HIT
    assert "A" in state.known_letters
    assert target.state_at(0, 1) == CellState.REVEALED
    assert state.misses == 0
    assert processor.word_patterns() == ("_A_", "____")


def test_letter_miss_costs_one(word_bank):
    """Test that a letter not in any word costs one miss."""
    processor, _, state = make_processor(word_bank)

    assert processor.process_letter("Z") is GuessResult.MISS
    assert state.misses == 1
    assert "Z" in state.guessed_letters


def test_duplicate_letter_is_reported(word_bank):
    """Test duplicate letters are rejected without reprocessing."""
    processor, _, state = make_processor(word_bank)
    processor.process_letter("Z")

    assert processor.process_letter("z") is GuessResult.ALREADY_GUESSED
    assert state.misses == 1


def test_letter_must_be_single_character(word_bank):
    """Test structural validation of letter guesses."""
    processor, _, _ = make_processor(word_bank)
    with pytest.raises(ValueError):
        processor.process_letter("AB")


# ============================================================================
# Coordinates
# ============================================================================

def test_coordinate_hit_with_known_letter_reveals(word_bank):
    """Test a coordinate hit on a known letter goes straight to REVEALED."""
    processor, target, _ = make_processor(word_bank)
    processor.process_letter("C")

    assert processor.process_coordinate(0, 0) is GuessResult.HIT
    assert target.state_at(0, 0) == CellState.REVEALED


def test_coordinate_miss_is_never_rescored(word_bank):
    """Test guessing an empty cell twice is ALREADY_GUESSED the second time."""
    processor, target, state = make_processor(word_bank)

    assert processor.process_coordinate(5, 5) is GuessResult.MISS
    assert target.state_at(5, 5) == CellState.MISS
    assert processor.process_coordinate(5, 5) is GuessResult.ALREADY_GUESSED
    assert state.misses == 1
    assert target.state_at(5, 5) == CellState.MISS


def test_coordinate_out_of_bounds_raises(word_bank):
    """Test coordinates outside the grid are a programming error."""
    processor, _, _ = make_processor(word_bank)
    with pytest.raises(ValueError):
        processor.process_coordinate(6, 0)


# ============================================================================
# Words
# ============================================================================

def test_wrong_word_costs_exactly_two(word_bank):
    """Test the double penalty for a wrong word."""
    processor, _, state = make_processor(word_bank)

    assert processor.process_word("COT", 0) is GuessResult.MISS
    assert state.misses == WRONG_WORD_PENALTY == 2


def test_correct_word_costs_nothing_and_solves_row(word_bank):
    """Test a correct word reveals the whole row and every letter."""
    processor, target, state = make_processor(word_bank)

    assert processor.process_word(" bird ", 1) is GuessResult.HIT
    assert state.misses == 0
    assert 1 in state.solved_word_rows
    assert {"B", "I", "R", "D"} <= state.known_letters
    assert all(target.state_at(r, c) == CellState.REVEALED for r, c in target.placements[1].cells)
    assert set(target.placements[1].cells) <= state.guessed_coordinates


def test_invalid_word_is_not_recorded(word_bank):
    """Test words outside the bank are rejected without penalty or record."""
    processor, _, state = make_processor(word_bank)

    assert processor.process_word("XYZ", 0) is GuessResult.INVALID_WORD
    assert state.misses == 0
    assert "XYZ" not in state.guessed_words


def test_duplicate_word_is_reported(word_bank):
    """Test a repeated wrong word is not penalised twice."""
    processor, _, state = make_processor(word_bank)
    processor.process_word("COT", 0)

    assert processor.process_word("cot", 0) is GuessResult.ALREADY_GUESSED
    assert state.misses == 2


def test_solving_a_word_upgrades_shared_letters(word_bank):
    """Test letters learned from a word upgrade partial cells of other words."""
    placements = [WordPlacement("CAT", 6, 0, 0), WordPlacement("TIGER", 6, 2, 0)]
    processor, target, _ = make_processor(word_bank, placements)
    processor.process_coordinate(2, 0)  # T in TIGER
    processor.process_coordinate(2, 1)  # I in TIGER

    processor.process_word("CAT", 0)

    assert target.state_at(2, 0) == CellState.REVEALED
    assert target.state_at(2, 1) == CellState.PARTIALLY_KNOWN


def test_guess_results_that_end_the_turn():
    """Test only processed guesses pass the turn."""
    assert GuessResult.HIT.ends_turn and GuessResult.MISS.ends_turn
    assert not GuessResult.ALREADY_GUESSED.ends_turn
    assert not GuessResult.INVALID_WORD.ends_turn
    assert not GuessResult.TURN_VIOLATION.ends_turn


# ============================================================================
# Win / lose
# ============================================================================

def test_win_requires_letters_and_positions(word_bank):
    """Test a fully known 3-letter word with 2 of 3 cells guessed is not a win."""
    placements = [WordPlacement("CAT", 6, 0, 0)]
    processor, _, state = make_processor(word_bank, placements)
    for letter in "CAT":
        processor.process_letter(letter)
    processor.process_coordinate(0, 0)
    processor.process_coordinate(0, 1)

    assert not check_win(state, placements)
    processor.process_coordinate(0, 2)
    assert check_win(state, placements)


def test_positions_without_letters_is_not_a_win(word_bank):
    """Test probing every cell without knowing the letters is not a win."""
    placements = [WordPlacement("CAT", 6, 0, 0)]
    processor, _, state = make_processor(word_bank, placements)
    for col in range(3):
        processor.process_coordinate(0, col)

    assert not check_win(state, placements)
    assert find_newly_revealed_word_rows(state, placements) == []


def test_lose_is_checked_before_win(word_bank):
    """Test finishing the board while reaching the miss limit is a loss."""
    placements = [WordPlacement("CAT", 6, 0, 0)]
    processor, _, state = make_processor(word_bank, placements, miss_limit=2)
    processor.process_letter("Z")
    for letter in "CAT":
        processor.process_letter(letter)
    processor.process_coordinate(0, 0)
    processor.process_coordinate(0, 1)
    processor.process_coordinate(5, 5)  # second miss reaches the limit
    processor.process_coordinate(0, 2)

    assert check_win(state, placements)
    assert check_lose(state)
    assert evaluate_outcome(state, placements) is GameOutcome.LOSE


def test_outcome_none_mid_game(word_bank):
    """Test an unfinished game has no outcome."""
    processor, target, state = make_processor(word_bank)
    processor.process_letter("A")

    assert evaluate_outcome(state, target.placements) is GameOutcome.NONE
    assert not check_win(state, [])


# ============================================================================
# Turns
# ============================================================================

def test_turn_tracker_alternates():
    """Test turn ownership and handoff."""
    turns = TurnTracker()
    assert not turns.can_take_action(TurnTracker.PLAYER)

    turns.start()
    assert turns.can_take_action(TurnTracker.PLAYER)
    assert not turns.can_take_action(TurnTracker.OPPONENT)

    assert turns.end_turn() == TurnTracker.OPPONENT
    assert turns.turn_number == 2
    assert turns.can_take_action(TurnTracker.OPPONENT)

    turns.stop()
    assert not turns.can_take_action(TurnTracker.OPPONENT)


def test_turn_tracker_rejects_unknown_player():
    """Test structural validation of player indices."""
    with pytest.raises(ValueError):
        TurnTracker().start(2)
