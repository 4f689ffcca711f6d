"""
Grid density and adjacency heuristics for coordinate guessing.

The scoring is computed for the whole board at once as a [N, N] tensor so the
coordinate strategy can rank every candidate cell with one pass.
"""

from __future__ import annotations

from typing import Iterable
import math

import torch
import torch.nn.functional as F

Coordinate = tuple[int, int]


def lerp(a: float, b: float, t: float) -> float:
    """Linear interpolation with t clamped to [0, 1]."""
    t = min(max(t, 0.0), 1.0)
    return a + (b - a) * t


def is_valid_coordinate(row: int, col: int, grid_size: int) -> bool:
    """Check that a coordinate lies inside an N x N grid."""
    return 0 <= row < grid_size and 0 <= col < grid_size


def density_category(fill_ratio: float) -> str:
    """Human-readable density bucket for a fill ratio."""
    if fill_ratio >= 0.35:
        return "High"
    elif fill_ratio >= 0.20:
        return "Medium"
    elif fill_ratio >= 0.12:
        return "Low"
    return "Very Low"


class GridAnalyzer:
    """
    Heuristic scorer for candidate coordinates.

    A cell scores higher when it touches known hits (weighted more on sparse
    grids, where each hit is a rarer signal), when it would extend a line of
    two hits, and when it sits near the middle of the board.

    Attributes:
        sparse_adjacency_weight: Adjacency multiplier on an empty grid
        dense_adjacency_weight: Adjacency multiplier on a full grid
        line_bonus: Bonus for extending or bridging a line of hits
        center_weight: Weight of the center bias term
    """

    def __init__(
        self,
        sparse_adjacency_weight: float = 3.0,
        dense_adjacency_weight: float = 1.0,
        line_bonus: float = 0.5,
        center_weight: float = 0.3
    ):
        self.sparse_adjacency_weight = sparse_adjacency_weight
        self.dense_adjacency_weight = dense_adjacency_weight
        self.line_bonus = line_bonus
        self.center_weight = center_weight

    def hit_mask(self, hits: Iterable[Coordinate], grid_size: int) -> torch.Tensor:
        """
        Build a [N, N] float mask with 1.0 at every hit.

        Raises:
            ValueError: If a hit lies outside the grid
        """
        mask = torch.zeros((grid_size, grid_size), dtype=torch.float32)
        for row, col in hits:
            if not is_valid_coordinate(row, col, grid_size):
                raise ValueError(f"Hit ({row}, {col}) outside {grid_size}x{grid_size} grid")
            mask[row, col] = 1.0
        return mask

    def center_bias_map(self, grid_size: int) -> torch.Tensor:
        """[N, N] map of 1 - distance/max_distance from the grid center."""
        center = (grid_size - 1) / 2.0
        max_distance = math.sqrt(2.0) * center
        if max_distance <= 0:
            return torch.ones((grid_size, grid_size), dtype=torch.float32)
        idx = torch.arange(grid_size, dtype=torch.float32) - center
        distance = torch.sqrt(idx.unsqueeze(1) ** 2 + idx.unsqueeze(0) ** 2)
        return 1.0 - distance / max_distance

    def score_map(self, hits: Iterable[Coordinate], grid_size: int, fill_ratio: float) -> torch.Tensor:
        """
        Score every cell of the grid.

        Args:
            hits: Known hit coordinates
            grid_size: Grid dimension N
            fill_ratio: Proportion of cells holding letters

        Returns:
            [N, N] float tensor of heuristic scores
        """
        mask = self.hit_mask(hits, grid_size)
        n = grid_size
        padded = F.pad(mask, (2, 2, 2, 2))

        def shifted(d_row: int, d_col: int) -> torch.Tensor:
            # Value of the mask at (row + d_row, col + d_col), zero off-grid
            return padded[2 + d_row:2 + d_row + n, 2 + d_col:2 + d_col + n]

        up, down = shifted(-1, 0), shifted(1, 0)
        left, right = shifted(0, -1), shifted(0, 1)
        adjacent = up + down + left + right

        extends = (
            (left * shifted(0, -2))
            + (right * shifted(0, 2))
            + (left * right)
            + (up * shifted(-2, 0))
            + (down * shifted(2, 0))
            + (up * down)
        ) > 0

        adjacency_weight = lerp(self.sparse_adjacency_weight, self.dense_adjacency_weight, fill_ratio)
        return (
            adjacent * adjacency_weight
            + extends.to(torch.float32) * self.line_bonus
            + self.center_bias_map(n) * self.center_weight
        )

