"""
Parameters for the computer opponent.

Skill-dependent choices (selection pool sizes, word-guess confidence
threshold, letter/coordinate weighting) are configuration tables so they can
be tuned and tested independently of the strategies that read them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

import torch

from core.difficulty import Difficulty


class SkillTable:
    """
    Step function from skill to an integer value.

    Breakpoints are (min_skill, value) pairs; the first pair whose min_skill
    is <= skill wins, otherwise `fallback` applies.

    Attributes:
        breakpoints: Pairs sorted by descending min_skill
        fallback: Value below the lowest breakpoint
    """

    def __init__(self, breakpoints: Sequence[tuple[float, int]], fallback: int):
        """
        Raises:
            ValueError: If values grow with skill or are not positive
        """
        self.breakpoints = tuple(sorted(breakpoints, key=lambda bp: bp[0], reverse=True))
        self.fallback = fallback

        values = [value for _, value in self.breakpoints] + [fallback]
        if any(v < 1 for v in values):
            raise ValueError(f"Pool sizes must be positive, got {values}")
        if any(a > b for a, b in zip(values, values[1:])):
            raise ValueError(f"Pool sizes must not grow with skill, got {values}")

    def __call__(self, skill: float) -> int:
        for min_skill, value in self.breakpoints:
            if skill >= min_skill:
                return value
        return self.fallback

    def __repr__(self) -> str:
        return f"SkillTable({list(self.breakpoints)}, fallback={self.fallback})"


class ThresholdCurve:
    """
    Monotonically non-increasing curve from skill to a confidence threshold.

    Higher-skill opponents commit to word guesses at lower certainty.
    Between points the curve is either linear or a step (holding the value of
    the nearest point at or below the skill). Outside the points the end
    values are held.

    Attributes:
        points: (skill, threshold) pairs sorted by skill
        interpolation: "linear" or "step"
    """

    def __init__(self, points: Sequence[tuple[float, float]], interpolation: str = "linear"):
        """
        Raises:
            ValueError: If the curve is empty, increases with skill, or the
                interpolation mode is unknown
        """
        if not points:
            raise ValueError("ThresholdCurve needs at least one point")
        if interpolation not in ("linear", "step"):
            raise ValueError(f"Unknown interpolation: {interpolation}")
        self.points = tuple(sorted((float(s), float(t)) for s, t in points))
        self.interpolation = interpolation

        thresholds = [t for _, t in self.points]
        if any(a < b for a, b in zip(thresholds, thresholds[1:])):
            raise ValueError(f"Thresholds must not increase with skill, got {list(self.points)}")

    @classmethod
    def from_risk_factor(cls, risk_factor: float) -> "ThresholdCurve":
        """Linear curve 1 - skill * risk_factor over skill in [0, 1]."""
        return cls([(0.0, 1.0), (1.0, 1.0 - risk_factor)])

    def __call__(self, skill: float) -> float:
        points = self.points
        if skill <= points[0][0]:
            return points[0][1]
        if skill >= points[-1][0]:
            return points[-1][1]
        for (s0, t0), (s1, t1) in zip(points, points[1:]):
            if s0 <= skill <= s1:
                if self.interpolation == "step" or s1 == s0:
                    return t1 if skill == s1 else t0
                return t0 + (t1 - t0) * (skill - s0) / (s1 - s0)
        return points[-1][1]

    def __repr__(self) -> str:
        return f"ThresholdCurve({list(self.points)}, interpolation={self.interpolation!r})"


class StrategyWeightTable:
    """
    Letter vs. coordinate weighting by grid fill ratio.

    Dense grids favor coordinate probing (hits are likely); sparse grids
    favor letters.

    Attributes:
        breakpoints: (min_fill_ratio, letter_weight, coordinate_weight),
            descending by fill ratio
        fallback: (letter_weight, coordinate_weight) below every breakpoint
    """

    def __init__(
        self,
        breakpoints: Sequence[tuple[float, float, float]],
        fallback: tuple[float, float]
    ):
        self.breakpoints = tuple(sorted(breakpoints, key=lambda bp: bp[0], reverse=True))
        self.fallback = fallback

    def __call__(self, fill_ratio: float) -> tuple[float, float]:
        for min_fill, letter_weight, coord_weight in self.breakpoints:
            if fill_ratio >= min_fill:
                return letter_weight, coord_weight
        return self.fallback

    def letter_chance(self, fill_ratio: float) -> float:
        """Normalized probability of choosing a letter guess."""
        letter_weight, coord_weight = self(fill_ratio)
        total = letter_weight + coord_weight
        return letter_weight / total if total > 0 else 0.5


def default_letter_pool_table() -> SkillTable:
    return SkillTable([(0.9, 1), (0.7, 3), (0.4, 8)], fallback=15)


def default_coordinate_pool_table() -> SkillTable:
    return SkillTable([(0.9, 2), (0.7, 4), (0.4, 10)], fallback=18)


def default_strategy_weight_table() -> StrategyWeightTable:
    return StrategyWeightTable(
        [(0.35, 0.4, 0.6), (0.20, 0.5, 0.5), (0.12, 0.65, 0.35)],
        fallback=(0.8, 0.2),
    )


@dataclass
class ExecutionerParams:
    """
    Parameters for the computer opponent.

    Attributes:
        min_skill: Lower skill bound
        max_skill: Upper skill bound
        skill_step: Skill change per rubber-band adjustment
        start_skill: Starting skill per (computer) difficulty
        hits_to_increase: Trailing player hits that raise skill, per difficulty
        misses_to_decrease: Trailing player misses that lower skill, per difficulty
        consecutive_adjustments_to_adapt: Same-direction adjustments before thresholds adapt
        min_threshold: Lower clamp for adaptive hit/miss thresholds
        max_threshold: Upper clamp for adaptive hit/miss thresholds
        recent_guesses_to_track: Window of player guesses for rubber-banding
        high_density_threshold: Fill ratio considered dense
        low_density_threshold: Fill ratio considered sparse
        word_guess_risk_factor: Slope of the default word threshold curve
        min_word_confidence: Absolute floor below which no word is guessed
        max_forget_chance: Forget chance at skill 0
        perfect_memory_skill: Skill at and above which nothing is forgotten
        always_remember_recent: Most recent items never forgotten
        min_think_time: Lower bound of the cosmetic think delay (seconds)
        max_think_time: Upper bound of the cosmetic think delay (seconds)
        letter_pool_table: Skill -> letter selection pool size
        coordinate_pool_table: Skill -> coordinate selection pool size
        word_threshold_curve: Skill -> word-guess confidence threshold
        strategy_weight_table: Fill ratio -> letter/coordinate weights
        seed: Random seed for reproducibility
    """
    min_skill: float = 0.15
    max_skill: float = 0.95
    skill_step: float = 0.15
    start_skill: dict[Difficulty, float] = field(default_factory=lambda: {
        Difficulty.EASY: 0.25, Difficulty.NORMAL: 0.5, Difficulty.HARD: 0.75,
    })
    hits_to_increase: dict[Difficulty, int] = field(default_factory=lambda: {
        Difficulty.EASY: 5, Difficulty.NORMAL: 3, Difficulty.HARD: 2,
    })
    misses_to_decrease: dict[Difficulty, int] = field(default_factory=lambda: {
        Difficulty.EASY: 2, Difficulty.NORMAL: 3, Difficulty.HARD: 5,
    })
    consecutive_adjustments_to_adapt: int = 2
    min_threshold: int = 1
    max_threshold: int = 7
    recent_guesses_to_track: int = 5
    high_density_threshold: float = 0.35
    low_density_threshold: float = 0.12
    word_guess_risk_factor: float = 0.7
    min_word_confidence: float = 0.25
    max_forget_chance: float = 0.3
    perfect_memory_skill: float = 0.8
    always_remember_recent: int = 3
    min_think_time: float = 1.0
    max_think_time: float = 3.0
    letter_pool_table: SkillTable = field(default_factory=default_letter_pool_table)
    coordinate_pool_table: SkillTable = field(default_factory=default_coordinate_pool_table)
    word_threshold_curve: Optional[ThresholdCurve] = None
    strategy_weight_table: StrategyWeightTable = field(default_factory=default_strategy_weight_table)
    seed: Optional[int] = None

    def __post_init__(self):
        if self.word_threshold_curve is None:
            self.word_threshold_curve = ThresholdCurve.from_risk_factor(self.word_guess_risk_factor)
        if self.min_think_time > self.max_think_time:
            raise ValueError("min_think_time must not exceed max_think_time")

    def clamp_skill(self, skill: float) -> float:
        return min(max(skill, self.min_skill), self.max_skill)

    def clamp_threshold(self, value: int) -> int:
        return min(max(value, self.min_threshold), self.max_threshold)

    def letter_pool_size(self, skill: float) -> int:
        return self.letter_pool_table(skill)

    def coordinate_pool_size(self, skill: float) -> int:
        return self.coordinate_pool_table(skill)

    def word_confidence_threshold(self, skill: float) -> float:
        return self.word_threshold_curve(skill)

    def strategy_weights(self, fill_ratio: float) -> tuple[float, float]:
        return self.strategy_weight_table(fill_ratio)

    def forget_chance(self, skill: float) -> float:
        return (1.0 - skill) * self.max_forget_chance

    def random_think_time(self, generator: torch.Generator) -> float:
        """Draw a think delay uniformly from [min_think_time, max_think_time]."""
        span = self.max_think_time - self.min_think_time
        if span <= 0:
            return self.min_think_time
        return self.min_think_time + span * float(torch.rand(1, generator=generator).item())
