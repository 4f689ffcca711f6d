"""
Tests for agents.params and the three guess strategies.
"""

import pytest
import torch

from agents.params import (
    ExecutionerParams,
    SkillTable,
    StrategyWeightTable,
    ThresholdCurve,
    default_coordinate_pool_table,
    default_letter_pool_table,
)
from agents.strategies import (
    CoordinateGuessStrategy,
    GuessRecommendation,
    GuessType,
    LetterGuessStrategy,
    WordGuessStrategy,
    match_confidence,
    pick_from_pool,
)
from core.snapshot import GameSnapshot
from utils.wordlist import WordBank


def seeded(seed=0):
    g = torch.Generator()
    g.manual_seed(seed)
    return g


def pattern_snapshot(patterns, known=(), skill=0.5, solved=None, **kwargs):
    return GameSnapshot(
        grid_size=6,
        word_count=len(patterns),
        guessed_letters=frozenset(known),
        hit_letters=frozenset(known),
        word_patterns=tuple(patterns),
        words_solved=tuple(solved) if solved is not None else tuple(False for _ in patterns),
        skill_level=skill,
        **kwargs
    )


# ============================================================================
# Skill tables
# ============================================================================

def test_pool_shrinks_with_skill():
    """Test pool sizes are non-increasing as skill rises through 0.1, 0.5, 0.8, 0.95."""
    skills = [0.1, 0.5, 0.8, 0.95]
    for table in (default_letter_pool_table(), default_coordinate_pool_table()):
        sizes = [table(s) for s in skills]
        assert all(a >= b for a, b in zip(sizes, sizes[1:]))

    assert [default_letter_pool_table()(s) for s in skills] == [15, 8, 3, 1]
    assert [default_coordinate_pool_table()(s) for s in skills] == [18, 10, 4, 2]


def test_skill_table_rejects_growing_pools():
    """Test a table whose pool grows with skill is rejected."""
    with pytest.raises(ValueError):
        SkillTable([(0.9, 10), (0.5, 2)], fallback=20)
    with pytest.raises(ValueError):
        SkillTable([(0.5, 0)], fallback=3)


def test_threshold_curve_linear_and_step():
    """Test both interpolation modes and end clamping."""
    linear = ThresholdCurve.from_risk_factor(0.7)
    assert linear(0.5) == pytest.approx(0.65)
    assert linear(1.5) == pytest.approx(0.3)
    assert linear(-1.0) == pytest.approx(1.0)

    step = ThresholdCurve([(0.0, 0.9), (0.5, 0.6), (0.9, 0.3)], interpolation="step")
    assert step(0.4) == pytest.approx(0.9)
    assert step(0.5) == pytest.approx(0.6)
    assert step(0.95) == pytest.approx(0.3)


def test_threshold_curve_validation():
    """Test increasing curves and unknown modes are rejected."""
    with pytest.raises(ValueError):
        ThresholdCurve([(0.0, 0.2), (1.0, 0.8)])
    with pytest.raises(ValueError):
        ThresholdCurve([(0.0, 0.5)], interpolation="cubic")
    with pytest.raises(ValueError):
        ThresholdCurve([])


def test_strategy_weights_by_density():
    """Test sparse grids favour letters and dense grids favour coordinates."""
    table = StrategyWeightTable([(0.35, 0.4, 0.6), (0.12, 0.65, 0.35)], fallback=(0.8, 0.2))

    assert table.letter_chance(0.05) == pytest.approx(0.8)
    assert table.letter_chance(0.2) == pytest.approx(0.65)
    assert table.letter_chance(0.5) == pytest.approx(0.4)


def test_params_word_threshold_defaults_from_risk_factor():
    """Test the default word threshold curve follows the risk factor."""
    params = ExecutionerParams(word_guess_risk_factor=0.5)

    assert params.word_confidence_threshold(1.0) == pytest.approx(0.5)
    assert params.forget_chance(0.0) == pytest.approx(0.3)
    with pytest.raises(ValueError):
        ExecutionerParams(min_think_time=2.0, max_think_time=1.0)


def test_random_think_time_in_range():
    """Test think time draws stay within bounds."""
    params = ExecutionerParams(min_think_time=1.0, max_think_time=3.0)
    g = seeded(1)
    for _ in range(20):
        assert 1.0 <= params.random_think_time(g) <= 3.0


def test_pick_from_pool_bounds():
    """Test pool picks never exceed the available candidates."""
    g = seeded(2)
    for _ in range(20):
        assert 0 <= pick_from_pool(10, 3, g) < 3
    assert pick_from_pool(1, 5, g) == 0
    assert pick_from_pool(0, 5, g) == 0


def test_invalid_recommendation_has_no_payload():
    """Test invalid recommendations carry nothing to act on."""
    rec = GuessRecommendation.invalid()

    assert not rec.is_valid
    assert rec.letter is None and rec.word is None
    assert str(rec) == "Invalid recommendation"
    assert not GuessRecommendation.for_word("", 0, 0.9).is_valid


# ============================================================================
# Letter strategy
# ============================================================================

def test_letter_scoring_prefers_frequency_at_equal_bonus(word_bank):
    """Test that at equal pattern bonus the more frequent letter scores higher."""
    strategy = LetterGuessStrategy(word_bank, generator=seeded())
    snapshot = pattern_snapshot(["_AT"], known="AT")

    scores = dict(strategy.score_letters(snapshot))

    # B, C and H each complete one of BAT/CAT/HAT
    assert scores["H"] > scores["C"] > scores["B"]
    assert scores["C"] - scores["B"] == pytest.approx(2.8 - 1.5)


def test_letter_pattern_bonus(word_bank):
    """Test the discrimination bonus over matching completions."""
    strategy = LetterGuessStrategy(word_bank, generator=seeded())
    bonuses = strategy.pattern_bonuses(pattern_snapshot(["C_T"], known="CT"))

    assert bonuses[ord("A") - ord("A")] == pytest.approx(1 / 3)
    # Letters already in the pattern add nothing
    assert bonuses[ord("C") - ord("A")] == 0.0


def test_letter_solved_patterns_are_ignored(word_bank):
    """Test solved rows contribute no bonus."""
    strategy = LetterGuessStrategy(word_bank, generator=seeded())
    bonuses = strategy.pattern_bonuses(pattern_snapshot(["C_T"], known="CT", solved=[True]))

    assert not bonuses.any()


def test_letter_expert_picks_best(word_bank):
    """Test that at top skill the pool is one and the best letter is chosen."""
    strategy = LetterGuessStrategy(word_bank, generator=seeded())
    snapshot = pattern_snapshot(["_AT"], known="AT", skill=0.95)

    rec = strategy.evaluate(snapshot)

    assert rec.is_valid and rec.guess_type is GuessType.LETTER
    assert rec.letter == strategy.score_letters(snapshot)[0][0]
    assert rec.confidence == pytest.approx(1.0)


def test_letter_invalid_when_all_letters_found(word_bank):
    """Test nothing is suggested once every target letter is known."""
    strategy = LetterGuessStrategy(word_bank, generator=seeded())
    snapshot = pattern_snapshot(["CAT"], known="CAT", target_letter_count=3)

    assert not strategy.evaluate(snapshot).is_valid


# ============================================================================
# Coordinate strategy
# ============================================================================

def test_proximity_bonus_only_at_distance_two_or_three():
    """Test the far-end bonus skips adjacent and distant cells."""
    strategy = CoordinateGuessStrategy(generator=seeded())
    snapshot = GameSnapshot(grid_size=6, word_count=1, hit_coordinates=frozenset({(2, 2)}))

    bonus = strategy.proximity_bonus_map(snapshot)

    assert bonus[2, 3].item() == 0.0
    assert bonus[2, 4].item() == pytest.approx(0.3)
    assert bonus[4, 3].item() == pytest.approx(0.3)
    assert bonus[5, 5].item() == 0.0


def test_coordinates_near_hits_rank_first():
    """Test cells adjacent to a hit outrank the rest."""
    strategy = CoordinateGuessStrategy(generator=seeded())
    snapshot = GameSnapshot(
        grid_size=6,
        word_count=1,
        guessed_coordinates=frozenset({(2, 2)}),
        hit_coordinates=frozenset({(2, 2)}),
        fill_ratio=0.1,
    )

    ranked = [coord for coord, _ in strategy.score_coordinates(snapshot)]

    assert set(ranked[:4]) == {(1, 2), (3, 2), (2, 1), (2, 3)}
    assert (2, 2) not in ranked


def test_coordinate_pick_comes_from_pool():
    """Test the pick lies within the skill's pool and confidence is clamped."""
    strategy = CoordinateGuessStrategy(generator=seeded(4))
    snapshot = GameSnapshot(
        grid_size=6,
        word_count=1,
        guessed_coordinates=frozenset({(2, 2)}),
        hit_coordinates=frozenset({(2, 2)}),
        fill_ratio=0.1,
        skill_level=0.95,
    )
    top_two = [coord for coord, _ in strategy.score_coordinates(snapshot)[:2]]

    rec = strategy.evaluate(snapshot)

    assert rec.guess_type is GuessType.COORDINATE
    assert (rec.row, rec.col) in top_two
    assert 0.0 <= rec.confidence <= 1.0


def test_coordinate_invalid_when_all_cells_found():
    """Test nothing is suggested once every letter cell is hit."""
    strategy = CoordinateGuessStrategy(generator=seeded())
    snapshot = GameSnapshot(
        grid_size=6,
        word_count=1,
        guessed_coordinates=frozenset({(0, 0)}),
        hit_coordinates=frozenset({(0, 0)}),
        target_cell_count=1,
    )

    assert not strategy.evaluate(snapshot).is_valid


# ============================================================================
# Word strategy
# ============================================================================

def test_word_confidence_by_match_count():
    """Test confidence is non-increasing in the number of matches."""
    assert match_confidence(1) == pytest.approx(0.95)
    assert match_confidence(2) == pytest.approx(0.5)
    assert match_confidence(4) == pytest.approx(0.25)
    assert match_confidence(0) == 0.0
    counts = [1, 2, 3, 4, 10]
    values = [match_confidence(n) for n in counts]
    assert all(a >= b for a, b in zip(values, values[1:]))


def test_word_single_match_is_recommended(word_bank):
    """Test a pattern with one completion is guessed."""
    strategy = WordGuessStrategy(word_bank, generator=seeded())
    snapshot = pattern_snapshot(["C_T", "_IGER"], known="CTIGER")

    rec = strategy.evaluate(snapshot)

    assert rec.is_valid and rec.guess_type is GuessType.WORD
    assert rec.word == "TIGER" and rec.pattern_index == 1
    assert rec.confidence == pytest.approx(0.95)


def test_word_threshold_falls_with_skill(word_bank):
    """Test a three-way pattern is only guessed by a skilled opponent."""
    strategy = WordGuessStrategy(word_bank, generator=seeded())

    assert not strategy.evaluate(pattern_snapshot(["C_T"], known="CT", skill=0.5)).is_valid
    rec = strategy.evaluate(pattern_snapshot(["C_T"], known="CT", skill=1.0))
    assert rec.is_valid and rec.word == "CAT"


def test_word_floor_applies_at_any_skill():
    """Test candidates below the absolute floor are never guessed."""
    bank = WordBank(["CAT", "CET", "CIT", "COT", "CUT"])
    params = ExecutionerParams(word_threshold_curve=ThresholdCurve([(0.0, 0.0)]))
    strategy = WordGuessStrategy(bank, params, generator=seeded())
    snapshot = pattern_snapshot(["C_T"], known="CT", skill=1.0)

    assert strategy.best_candidate(snapshot)[2] == pytest.approx(0.2)
    assert not strategy.evaluate(snapshot).is_valid


def test_blind_and_solved_patterns_are_not_candidates(word_bank):
    """Test patterns with no revealed letter or already solved are skipped."""
    strategy = WordGuessStrategy(word_bank, generator=seeded())
    snapshot = pattern_snapshot(["_____", "CAT"], known="CAT", solved=[False, True])

    assert strategy.candidates(snapshot) == []
    assert not strategy.evaluate(snapshot).is_valid


def test_guessed_words_are_not_candidates(word_bank):
    """Test a word already guessed is dropped before confidence is computed."""
    strategy = WordGuessStrategy(word_bank, generator=seeded())
    snapshot = pattern_snapshot(["C_T"], known="CT", skill=0.5, guessed_words=frozenset({"CAT", "CUT"}))

    rec = strategy.evaluate(snapshot)

    assert rec.is_valid and rec.word == "COT"
    assert rec.confidence == pytest.approx(0.95)


def test_exhausted_pattern_gives_no_word(word_bank):
    """Test a pattern whose every match was guessed yields no word guess."""
    strategy = WordGuessStrategy(word_bank, generator=seeded())
    snapshot = pattern_snapshot(["_IGER"], known="IGER", guessed_words=frozenset({"TIGER"}))

    assert strategy.candidates(snapshot) == [(0, [])]
    assert not strategy.evaluate(snapshot).is_valid
