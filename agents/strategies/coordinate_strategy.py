"""
Coordinate guess strategy: adjacency, line extension, center bias and a
proximity bonus for reaching the far end of partially found words.
"""

from __future__ import annotations

from typing import Optional
import logging

import torch

from agents.params import ExecutionerParams
from agents.strategies.base_strategy import (
    BaseStrategy,
    GuessRecommendation,
    GuessType,
    pick_from_pool,
)
from core.snapshot import GameSnapshot
from utils.grid_analysis import GridAnalyzer, lerp

logger = logging.getLogger(__name__)

PROXIMITY_BONUS = 0.3
PROXIMITY_MIN_DISTANCE = 2
PROXIMITY_MAX_DISTANCE = 3
# Fill ratio at which coordinate confidence stops being dampened
FULL_CONFIDENCE_FILL = 0.35


class CoordinateGuessStrategy(BaseStrategy):
    """
    Scores unguessed cells with the grid heuristic plus a proximity bonus.

    The proximity bonus (+0.3) applies only to cells not already adjacent to
    a hit whose Manhattan distance to the nearest hit is 2 or 3. Confidence
    is dampened on sparse grids, where hits are rarer signals.
    """

    guess_type = GuessType.COORDINATE

    def __init__(
        self,
        params: Optional[ExecutionerParams] = None,
        generator: Optional[torch.Generator] = None,
        analyzer: Optional[GridAnalyzer] = None
    ):
        super().__init__(params, generator)
        self.analyzer = analyzer if analyzer is not None else GridAnalyzer()

    def proximity_bonus_map(self, snapshot: GameSnapshot) -> torch.Tensor:
        """[N, N] proximity bonus; zero everywhere when there are no hits."""
        n = snapshot.grid_size
        hits = list(snapshot.hit_coordinates)
        if not hits:
            return torch.zeros((n, n), dtype=torch.float32)

        rows = torch.arange(n).view(n, 1, 1)
        cols = torch.arange(n).view(1, n, 1)
        hit_tensor = torch.tensor(hits, dtype=torch.int64)  # [H, 2]
        # Manhattan distance from every cell to every hit -> [N, N, H]
        distance = (rows - hit_tensor[:, 0]).abs() + (cols - hit_tensor[:, 1]).abs()
        nearest = distance.min(dim=2).values  # [N, N]

        in_range = (nearest >= PROXIMITY_MIN_DISTANCE) & (nearest <= PROXIMITY_MAX_DISTANCE)
        # Cells at distance 1 are adjacent; in_range already excludes them
        return in_range.to(torch.float32) * PROXIMITY_BONUS

    def score_coordinates(self, snapshot: GameSnapshot) -> list[tuple[tuple[int, int], float]]:
        """
        Score every unguessed coordinate.

        Returns:
            ((row, col), score) pairs sorted by descending score
        """
        candidates = snapshot.unguessed_coordinates()
        if not candidates:
            return []

        scores = self.analyzer.score_map(snapshot.hit_coordinates, snapshot.grid_size, snapshot.fill_ratio)
        scores = scores + self.proximity_bonus_map(snapshot)

        scored = [((row, col), float(scores[row, col].item())) for row, col in candidates]
        scored.sort(key=lambda item: item[1], reverse=True)
        return scored

    def evaluate(self, snapshot: GameSnapshot) -> GuessRecommendation:
        if snapshot.all_coordinates_found():
            logger.debug("All letter cells already found, skipping coordinate guess")
            return GuessRecommendation.invalid()

        scored = self.score_coordinates(snapshot)
        if not scored:
            logger.warning("No unguessed coordinates remaining")
            return GuessRecommendation.invalid()

        pool_size = self.params.coordinate_pool_size(snapshot.skill_level)
        index = pick_from_pool(pool_size, len(scored), self.generator)
        (row, col), score = scored[index]
        best = scored[0][1]

        base_confidence = score / best if best > 0 else 0.5
        density_factor = lerp(0.5, 1.0, snapshot.fill_ratio / FULL_CONFIDENCE_FILL)
        confidence = min(max(base_confidence * density_factor, 0.0), 1.0)

        logger.debug(f"Coordinate pick ({row}, {col}) from pool of {min(pool_size, len(scored))} (score {score:.2f})")
        return GuessRecommendation.for_coordinate(row, col, confidence)
