"""
Letter guess strategy: frequency plus pattern discrimination.
"""

from __future__ import annotations

from typing import Optional
import logging

import numpy as np
import torch

from agents.params import ExecutionerParams
from agents.strategies.base_strategy import (
    BaseStrategy,
    GuessRecommendation,
    GuessType,
    pick_from_pool,
)
from core.snapshot import GameSnapshot
from utils.letter_frequency import get_frequency
from utils.wordlist import ALPHABET, WordBank

logger = logging.getLogger(__name__)

PATTERN_BONUS_WEIGHT = 2.0


class LetterGuessStrategy(BaseStrategy):
    """
    Scores unguessed letters by English frequency and by how many of the
    still-possible completions of each unsolved word pattern contain them.

    score(letter) = frequency(letter) + 2.0 * sum over unsolved patterns not
    already containing the letter of (matching words with letter / matching
    words). Patterns with no matching bank word contribute nothing.

    A skill-dependent pool of the top candidates is sampled uniformly, so
    higher skill means a pick closer to the best letter.
    """

    guess_type = GuessType.LETTER

    def __init__(
        self,
        word_bank: WordBank,
        params: Optional[ExecutionerParams] = None,
        generator: Optional[torch.Generator] = None
    ):
        super().__init__(params, generator)
        self.word_bank = word_bank

    def pattern_bonuses(self, snapshot: GameSnapshot) -> np.ndarray:
        """
        Pattern bonus for every letter A-Z.

        Returns:
            [26] float array, indexed like ALPHABET
        """
        bonus = np.zeros(len(ALPHABET), dtype=np.float64)
        for pattern, solved in zip(snapshot.word_patterns, snapshot.words_solved):
            if solved:
                continue
            total, with_letter = self.word_bank.letter_match_counts(pattern)
            if total == 0:
                continue
            proportion = with_letter / float(total)
            # Letters already placed in the pattern add nothing new
            in_pattern = np.array([c in pattern for c in ALPHABET])
            bonus += np.where(in_pattern, 0.0, proportion)
        return bonus

    def score_letters(self, snapshot: GameSnapshot) -> list[tuple[str, float]]:
        """
        Score every unguessed letter.

        Returns:
            (letter, score) pairs sorted by descending score
        """
        bonuses = self.pattern_bonuses(snapshot)
        scored = [
            (letter, get_frequency(letter) + PATTERN_BONUS_WEIGHT * float(bonuses[ALPHABET.index(letter)]))
            for letter in snapshot.unguessed_letters()
        ]
        # Stable sort keeps alphabetical order among equal scores
        scored.sort(key=lambda item: item[1], reverse=True)
        return scored

    def evaluate(self, snapshot: GameSnapshot) -> GuessRecommendation:
        if snapshot.all_letters_found():
            logger.debug("All letters already found, skipping letter guess")
            return GuessRecommendation.invalid()

        scored = self.score_letters(snapshot)
        if not scored:
            logger.warning("No unguessed letters remaining")
            return GuessRecommendation.invalid()

        pool_size = self.params.letter_pool_size(snapshot.skill_level)
        index = pick_from_pool(pool_size, len(scored), self.generator)
        letter, score = scored[index]
        best = scored[0][1]
        confidence = score / best if best > 0 else 0.5

        logger.debug(f"Letter pick '{letter}' from pool of {min(pool_size, len(scored))} (score {score:.2f}, best {best:.2f})")
        return GuessRecommendation.for_letter(letter, min(max(confidence, 0.0), 1.0))
