"""
Decision engine for the computer opponent ("The Executioner").
"""

from __future__ import annotations

from typing import Any, Optional
import logging

import torch

from agents.difficulty_adapter import DifficultyAdapter
from agents.memory import MemoryManager
from agents.params import ExecutionerParams
from agents.strategies import (
    CoordinateGuessStrategy,
    GuessRecommendation,
    LetterGuessStrategy,
    WordGuessStrategy,
)
from core.difficulty import Difficulty
from core.snapshot import GameSnapshot
from utils.grid_analysis import GridAnalyzer, density_category
from utils.wordlist import WordBank

logger = logging.getLogger(__name__)


class Executioner:
    """
    Chooses the computer opponent's next guess.

    The opponent plays at the inverse of the player's difficulty. Each
    decision:
        1. applies the adapted skill level and memory-filtered hits,
        2. takes a word guess if the word strategy is confident enough,
        3. otherwise picks letter or coordinate by fill-ratio weights and
           falls back to the other strategy when the chosen one has nothing.

    Attributes:
        player_difficulty: Difficulty the human player chose
        difficulty: Difficulty the opponent plays at
        params: ExecutionerParams
        generator: Shared random generator
        adapter: DifficultyAdapter (rubber-banding)
        memory: MemoryManager (skill-filtered forgetting)
    """

    def __init__(
        self,
        player_difficulty: Difficulty,
        word_bank: WordBank,
        params: Optional[ExecutionerParams] = None,
        generator: Optional[torch.Generator] = None,
        analyzer: Optional[GridAnalyzer] = None
    ):
        """
        Initialize decision engine.

        Args:
            player_difficulty: Difficulty chosen by the human player
            word_bank: Word bank for letter/word scoring
            params: ExecutionerParams (defaults if None)
            generator: Random generator (seeded from params.seed if None)
            analyzer: Grid heuristic for coordinate scoring
        """
        self.params = params if params is not None else ExecutionerParams()
        if generator is None:
            generator = torch.Generator()
            if self.params.seed is not None:
                generator.manual_seed(self.params.seed)
        self.generator = generator

        self.player_difficulty = player_difficulty
        self.difficulty = player_difficulty.inverse()

        self.adapter = DifficultyAdapter(self.difficulty, self.params)
        self.memory = MemoryManager(self.params, self.generator)
        self.letter_strategy = LetterGuessStrategy(word_bank, self.params, self.generator)
        self.coordinate_strategy = CoordinateGuessStrategy(self.params, self.generator, analyzer)
        self.word_strategy = WordGuessStrategy(word_bank, self.params, self.generator)

        logger.info(
            f"Executioner initialized - player: {player_difficulty.value}, "
            f"opponent: {self.difficulty.value}, skill {self.current_skill:.2f}"
        )

    @property
    def current_skill(self) -> float:
        return self.adapter.current_skill

    def reset(self) -> None:
        """Reset skill and memory for a new game."""
        self.adapter.reset(self.difficulty)
        self.memory.reset()
        logger.info("Executioner reset for new game")

    def prepare_snapshot(self, snapshot: GameSnapshot) -> GameSnapshot:
        """
        Apply current skill and memory filtering.

        Forgotten hits are removed from the hits used for scoring only; the
        guessed-coordinate set is untouched so nothing is ever re-guessed.
        """
        skill = self.current_skill
        forgotten = self.memory.all_hits - self.memory.effective_hits(skill)
        prepared = snapshot.with_skill(skill)
        if forgotten:
            logger.debug(f"Memory: forgot {len(forgotten)} hit coordinate(s)")
            prepared = prepared.with_hits(c for c in snapshot.hit_coordinates if c not in forgotten)
        return prepared

    def decide(self, snapshot: GameSnapshot) -> GuessRecommendation:
        """
        Choose the next guess.

        Args:
            snapshot: Opponent's knowledge of the player's grid

        Returns:
            GuessRecommendation (invalid only when no guess is possible)
        """
        snapshot = self.prepare_snapshot(snapshot)

        word_rec = self.word_strategy.evaluate(snapshot)
        if word_rec.is_valid:
            logger.debug(f"Word guess opportunity: {word_rec}")
            return word_rec

        letter_chance = self.params.strategy_weight_table.letter_chance(snapshot.fill_ratio)
        choose_letter = float(torch.rand(1, generator=self.generator).item()) < letter_chance
        logger.debug(
            f"Strategy weights ({density_category(snapshot.fill_ratio)} density) - "
            f"letter {letter_chance:.0%}, chose {'letter' if choose_letter else 'coordinate'}"
        )

        first, second = (
            (self.letter_strategy, self.coordinate_strategy) if choose_letter
            else (self.coordinate_strategy, self.letter_strategy)
        )
        recommendation = first.evaluate(snapshot)
        if recommendation.is_valid:
            return recommendation
        logger.debug(f"No valid {first.guess_type.value} guess, falling back to {second.guess_type.value}")
        return second.evaluate(snapshot)

    def record_player_guess(self, was_hit: bool) -> None:
        self.adapter.record_player_guess(was_hit)

    def record_hit(self, row: int, col: int) -> None:
        self.memory.record_hit(row, col)

    def record_revealed_letter(self, letter: str) -> None:
        self.memory.record_revealed_letter(letter)

    def advance_turn(self) -> None:
        self.memory.advance_turn()

    def strategy_analysis(self, snapshot: GameSnapshot, top_n: int = 5) -> dict[str, Any]:
        """
        Ranked strategy tables for inspection.

        Returns:
            Dict with "letters", "coordinates" (top_n (candidate, score)
            pairs each) and "word" (pattern_index, word, confidence)
        """
        snapshot = snapshot.with_skill(self.current_skill)
        return {
            "letters": self.letter_strategy.score_letters(snapshot)[:top_n],
            "coordinates": self.coordinate_strategy.score_coordinates(snapshot)[:top_n],
            "word": self.word_strategy.best_candidate(snapshot),
        }

    def debug_summary(self) -> str:
        return (
            "=== EXECUTIONER ===\n"
            f"Opponent difficulty: {self.difficulty.value} (inverted from {self.player_difficulty.value})\n\n"
            f"{self.adapter.debug_summary()}\n\n"
            f"{self.memory.debug_summary(self.current_skill)}"
        )
