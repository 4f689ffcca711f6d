"""
Skill-filtered memory for the computer opponent.

Lower-skill opponents "forget" older hits and letters, which weakens their
scoring without ever letting them re-guess a cell.
"""

from __future__ import annotations

from typing import Optional
import logging

import torch

from agents.params import ExecutionerParams

logger = logging.getLogger(__name__)

Coordinate = tuple[int, int]


class MemoryManager:
    """
    Remembers every hit and revealed letter with the turn it was learned.

    Nothing is deleted; forgetting is applied when reading. At or above
    `perfect_memory_skill` everything is returned. Below it, each item older
    than the most recent `always_remember_recent` is dropped with chance
    `forget_chance(skill)`.

    Attributes:
        params: ExecutionerParams
        generator: Random generator for forgetting
        current_turn: Turn counter advanced by advance_turn()
    """

    def __init__(self, params: Optional[ExecutionerParams] = None, generator: Optional[torch.Generator] = None):
        self.params = params if params is not None else ExecutionerParams()
        self.generator = generator if generator is not None else torch.Generator()
        self._hits: list[Coordinate] = []
        self._hit_turn: dict[Coordinate, int] = {}
        self._letter_turn: dict[str, int] = {}
        self.current_turn = 0

    def record_hit(self, row: int, col: int) -> None:
        coord = (row, col)
        if coord not in self._hit_turn:
            self._hits.append(coord)
            self._hit_turn[coord] = self.current_turn

    def record_revealed_letter(self, letter: str) -> None:
        letter = letter.upper()
        if letter not in self._letter_turn:
            self._letter_turn[letter] = self.current_turn

    def advance_turn(self) -> None:
        self.current_turn += 1

    def reset(self) -> None:
        self._hits.clear()
        self._hit_turn.clear()
        self._letter_turn.clear()
        self.current_turn = 0

    @property
    def all_hits(self) -> set[Coordinate]:
        return set(self._hits)

    @property
    def all_letters(self) -> set[str]:
        return set(self._letter_turn)

    def _filter(self, items: list, skill: float) -> list:
        """Apply forgetting to items ordered oldest to newest."""
        if skill >= self.params.perfect_memory_skill:
            return list(items)
        forget_chance = self.params.forget_chance(skill)
        keep_from = len(items) - self.params.always_remember_recent
        kept = []
        for i, item in enumerate(items):
            if i >= keep_from:
                kept.append(item)
            elif float(torch.rand(1, generator=self.generator).item()) > forget_chance:
                kept.append(item)
        return kept

    def effective_hits(self, skill: float) -> set[Coordinate]:
        """Hits the opponent currently remembers."""
        return set(self._filter(self._hits, skill))

    def effective_letters(self, skill: float) -> set[str]:
        """Revealed letters the opponent currently remembers."""
        by_age = sorted(self._letter_turn, key=self._letter_turn.__getitem__)
        return set(self._filter(by_age, skill))

    def debug_summary(self, skill: float) -> str:
        return (
            f"Turn: {self.current_turn}\n"
            f"Total Hits: {len(self._hits)} (remembers {len(self.effective_hits(skill))})\n"
            f"Total Letters: {len(self._letter_turn)} (remembers {len(self.effective_letters(skill))})\n"
            f"Forget Chance: {self.params.forget_chance(skill):.1%}"
        )
