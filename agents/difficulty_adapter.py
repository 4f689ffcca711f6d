"""
Runtime skill adjustment for the computer opponent (rubber-banding).
"""

from __future__ import annotations

from collections import deque
from typing import Optional
import logging

from agents.params import ExecutionerParams
from core.difficulty import Difficulty

logger = logging.getLogger(__name__)


class DifficultyAdapter:
    """
    Raises the opponent's skill when the player keeps hitting and lowers it
    when the player keeps missing.

    After `consecutive_adjustments_to_adapt` adjustments in the same
    direction, the hit/miss thresholds themselves shift so the opponent
    reacts faster to a dominating player (or slower to a struggling one).

    Attributes:
        params: ExecutionerParams
        difficulty: Difficulty the opponent plays at
        current_skill: Current skill in [min_skill, max_skill]
        hits_to_increase: Trailing player hits that raise skill
        misses_to_decrease: Trailing player misses that lower skill
        consecutive_increases: Increases since the last decrease or adaptation
        consecutive_decreases: Decreases since the last increase or adaptation
    """

    def __init__(self, difficulty: Difficulty, params: Optional[ExecutionerParams] = None):
        self.params = params if params is not None else ExecutionerParams()
        self._recent: deque[bool] = deque(maxlen=self.params.recent_guesses_to_track)
        self.reset(difficulty)

    def reset(self, difficulty: Optional[Difficulty] = None) -> None:
        """Restore starting skill and thresholds for a difficulty."""
        if difficulty is not None:
            self.difficulty = difficulty
        self.current_skill = self.params.start_skill[self.difficulty]
        self.hits_to_increase = self.params.hits_to_increase[self.difficulty]
        self.misses_to_decrease = self.params.misses_to_decrease[self.difficulty]
        self._recent.clear()
        self.consecutive_increases = 0
        self.consecutive_decreases = 0
        logger.debug(
            f"Difficulty adapter at {self.difficulty.value}: skill {self.current_skill:.2f}, "
            f"hits_to_increase {self.hits_to_increase}, misses_to_decrease {self.misses_to_decrease}"
        )

    @property
    def recent_guesses(self) -> list[bool]:
        return list(self._recent)

    def record_player_guess(self, was_hit: bool) -> None:
        """Record one player guess result and adjust skill if a streak is long enough."""
        self._recent.append(was_hit)

        if self._trailing(True) >= self.hits_to_increase:
            self._increase()
        elif self._trailing(False) >= self.misses_to_decrease:
            self._decrease()

    def _trailing(self, value: bool) -> int:
        count = 0
        for item in reversed(self._recent):
            if item != value:
                break
            count += 1
        return count

    def _increase(self) -> None:
        old = self.current_skill
        self.current_skill = self.params.clamp_skill(self.current_skill + self.params.skill_step)
        self.consecutive_increases += 1
        self.consecutive_decreases = 0
        logger.info(f"Opponent skill increased {old:.2f} -> {self.current_skill:.2f} (player doing well)")

        if self.consecutive_increases >= self.params.consecutive_adjustments_to_adapt:
            # Player dominating: easier to ramp up, harder to back off
            self.hits_to_increase = self.params.clamp_threshold(self.hits_to_increase - 1)
            self.misses_to_decrease = self.params.clamp_threshold(self.misses_to_decrease + 1)
            self.consecutive_increases = 0
            logger.debug(f"Thresholds adapted: hits {self.hits_to_increase}, misses {self.misses_to_decrease}")
        self._recent.clear()

    def _decrease(self) -> None:
        old = self.current_skill
        self.current_skill = self.params.clamp_skill(self.current_skill - self.params.skill_step)
        self.consecutive_decreases += 1
        self.consecutive_increases = 0
        logger.info(f"Opponent skill decreased {old:.2f} -> {self.current_skill:.2f} (player struggling)")

        if self.consecutive_decreases >= self.params.consecutive_adjustments_to_adapt:
            self.hits_to_increase = self.params.clamp_threshold(self.hits_to_increase + 1)
            self.misses_to_decrease = self.params.clamp_threshold(self.misses_to_decrease - 1)
            self.consecutive_decreases = 0
            logger.debug(f"Thresholds adapted: hits {self.hits_to_increase}, misses {self.misses_to_decrease}")
        self._recent.clear()

    def debug_summary(self) -> str:
        recent = "".join("H" if hit else "M" for hit in self._recent) or "(none)"
        return (
            f"Skill: {self.current_skill:.2f}\n"
            f"HitsToIncrease: {self.hits_to_increase}\n"
            f"MissesToDecrease: {self.misses_to_decrease}\n"
            f"Consec. Increases: {self.consecutive_increases}\n"
            f"Consec. Decreases: {self.consecutive_decreases}\n"
            f"Recent Guesses: {recent}"
        )
