"""
Grid model for word-duel games: cell states, word placements and the hidden
target layout a guesser searches.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Iterable, Optional
import logging

import torch

logger = logging.getLogger(__name__)

Coordinate = tuple[int, int]


class CellState(IntEnum):
    """
    Visible state of one grid cell from the guesser's point of view.

    Transitions only move forward: HIDDEN -> MISS (terminal), or
    HIDDEN -> PARTIALLY_KNOWN -> REVEALED (HIDDEN -> REVEALED directly when the
    letter is already known).
    """
    HIDDEN = 0
    MISS = 1
    PARTIALLY_KNOWN = 2
    REVEALED = 3


_ALLOWED_TRANSITIONS = {
    CellState.HIDDEN: {CellState.MISS, CellState.PARTIALLY_KNOWN, CellState.REVEALED},
    CellState.MISS: set(),
    CellState.PARTIALLY_KNOWN: {CellState.REVEALED},
    CellState.REVEALED: set(),
}


def coordinate_to_string(row: int, col: int) -> str:
    """Format a coordinate as column letter plus 1-based row, e.g. (4, 2) -> "C5"."""
    return f"{chr(ord('A') + col)}{row + 1}"


@dataclass(frozen=True)
class WordPlacement:
    """
    A word laid out on the grid.

    Attributes:
        word: Uppercase word text
        grid_size: Dimension N of the N x N grid
        start_row: Row of the first letter
        start_col: Column of the first letter
        d_row: Row step per letter, in {-1, 0, 1}
        d_col: Column step per letter, in {-1, 0, 1}
        cells: Ordered occupied coordinates, one per letter
    """
    word: str
    grid_size: int
    start_row: int
    start_col: int
    d_row: int = 0
    d_col: int = 1
    cells: tuple[Coordinate, ...] = field(init=False, repr=False)

    def __post_init__(self):
        word = self.word.strip().upper()
        if not word or not word.isalpha():
            raise ValueError(f"Invalid placement word: {self.word!r}")
        if self.d_row not in (-1, 0, 1) or self.d_col not in (-1, 0, 1):
            raise ValueError(f"Direction steps must be in {{-1, 0, 1}}, got ({self.d_row}, {self.d_col})")
        if self.d_row == 0 and self.d_col == 0:
            raise ValueError("Direction steps cannot both be zero")

        cells = tuple(
            (self.start_row + i * self.d_row, self.start_col + i * self.d_col)
            for i in range(len(word))
        )
        for row, col in cells:
            if not (0 <= row < self.grid_size and 0 <= col < self.grid_size):
                raise ValueError(
                    f"Placement of {word} at ({self.start_row}, {self.start_col}) "
                    f"leaves the {self.grid_size}x{self.grid_size} grid"
                )

        object.__setattr__(self, "word", word)
        object.__setattr__(self, "cells", cells)

    @property
    def is_horizontal(self) -> bool:
        return self.d_row == 0 and self.d_col == 1

    @property
    def is_vertical(self) -> bool:
        return self.d_row == 1 and self.d_col == 0

    def letter_at(self, row: int, col: int) -> Optional[str]:
        """Letter of this word at a coordinate, or None if not covered."""
        for i, cell in enumerate(self.cells):
            if cell == (row, col):
                return self.word[i]
        return None

    def contains_letter(self, letter: str) -> bool:
        return letter.upper() in self.word


class TargetGrid:
    """
    Hidden word layout of one side, plus its visible cell states.

    The cell-to-letter lookup is the ground truth; `cells` holds what the
    guesser has uncovered so far as a [N, N] int8 tensor of CellState values.

    Attributes:
        grid_size: Dimension N
        placements: Placed words, in word-row order
        cells: [N, N] int8 tensor of CellState values
    """

    def __init__(self, grid_size: int, placements: Iterable[WordPlacement]):
        """
        Initialize target grid.

        Args:
            grid_size: Dimension N of the grid
            placements: Word placements (word-row order is preserved)

        Raises:
            ValueError: If a placement was made for a different grid size, or
                two placements put different letters on the same cell
        """
        self.grid_size = grid_size
        self.placements = list(placements)
        self._letters: dict[Coordinate, str] = {}

        for placement in self.placements:
            if placement.grid_size != grid_size:
                raise ValueError(
                    f"Placement {placement.word} was made for grid size {placement.grid_size}, "
                    f"expected {grid_size}"
                )
            for (row, col), letter in zip(placement.cells, placement.word):
                existing = self._letters.get((row, col))
                if existing is not None and existing != letter:
                    raise ValueError(
                        f"Conflicting letters {existing}/{letter} at {coordinate_to_string(row, col)}"
                    )
                self._letters[(row, col)] = letter

        self.cells = torch.full((grid_size, grid_size), int(CellState.HIDDEN), dtype=torch.int8)

    def reset(self) -> None:
        """Hide every cell again."""
        self.cells.fill_(int(CellState.HIDDEN))

    def check_bounds(self, row: int, col: int) -> None:
        """
        Raises:
            ValueError: If the coordinate lies outside the grid
        """
        if not (0 <= row < self.grid_size and 0 <= col < self.grid_size):
            raise ValueError(f"Coordinate ({row}, {col}) outside {self.grid_size}x{self.grid_size} grid")

    def letter_at(self, row: int, col: int) -> Optional[str]:
        """Hidden letter at a coordinate, or None for an empty cell."""
        self.check_bounds(row, col)
        return self._letters.get((row, col))

    def state_at(self, row: int, col: int) -> CellState:
        self.check_bounds(row, col)
        return CellState(int(self.cells[row, col].item()))

    def set_state(self, row: int, col: int, state: CellState) -> None:
        """
        Move a cell forward to a new state.

        Setting the current state again is a no-op.

        Raises:
            ValueError: If the transition would move the cell backwards
        """
        current = self.state_at(row, col)
        if current == state:
            return
        if state not in _ALLOWED_TRANSITIONS[current]:
            raise ValueError(
                f"Illegal cell transition {current.name} -> {state.name} at {coordinate_to_string(row, col)}"
            )
        self.cells[row, col] = int(state)

    def upgrade_letter(self, letter: str) -> list[Coordinate]:
        """
        Upgrade PARTIALLY_KNOWN cells holding a letter to REVEALED.

        Returns:
            Coordinates that were upgraded
        """
        letter = letter.upper()
        upgraded = []
        for (row, col), cell_letter in self._letters.items():
            if cell_letter == letter and self.state_at(row, col) == CellState.PARTIALLY_KNOWN:
                self.cells[row, col] = int(CellState.REVEALED)
                upgraded.append((row, col))
        if upgraded:
            logger.debug(f"Upgraded {len(upgraded)} cell(s) to revealed for letter '{letter}'")
        return upgraded

    def contains_letter(self, letter: str) -> bool:
        letter = letter.upper()
        return any(p.contains_letter(letter) for p in self.placements)

    @property
    def occupied(self) -> set[Coordinate]:
        """All coordinates holding a letter."""
        return set(self._letters)

    @property
    def letter_count(self) -> int:
        """Number of letter-bearing cells."""
        return len(self._letters)

    @property
    def unique_letters(self) -> set[str]:
        return set("".join(p.word for p in self.placements))

    @property
    def fill_ratio(self) -> float:
        return len(self._letters) / float(self.grid_size * self.grid_size)
