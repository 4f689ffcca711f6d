"""
Word guess strategy: commit to a whole word once a pattern narrows the bank
enough.
"""

from __future__ import annotations

from typing import Optional
import logging

import torch

from agents.params import ExecutionerParams
from agents.strategies.base_strategy import BaseStrategy, GuessRecommendation, GuessType
from core.snapshot import GameSnapshot
from utils.wordlist import WILDCARD, WordBank

logger = logging.getLogger(__name__)

# Never 1.0: the true word might be outside the bank
SINGLE_MATCH_CONFIDENCE = 0.95


def match_confidence(match_count: int) -> float:
    """Confidence for a pattern with match_count candidate words."""
    if match_count <= 0:
        return 0.0
    if match_count == 1:
        return SINGLE_MATCH_CONFIDENCE
    return 1.0 / match_count


class WordGuessStrategy(BaseStrategy):
    """
    Finds the single most certain word completion across all unsolved
    patterns and recommends it when confident enough.

    A pattern is a candidate only when unsolved and with at least one
    revealed letter; guessing blind is disallowed because a wrong word costs
    two misses. The recommendation must clear both the skill-derived
    threshold curve and the absolute floor.
    """

    guess_type = GuessType.WORD

    def __init__(
        self,
        word_bank: WordBank,
        params: Optional[ExecutionerParams] = None,
        generator: Optional[torch.Generator] = None
    ):
        super().__init__(params, generator)
        self.word_bank = word_bank

    def candidates(self, snapshot: GameSnapshot) -> list[tuple[int, list[str]]]:
        """
        Matching bank words for every eligible pattern.

        Words already guessed are not candidates; a wrong guess narrows the
        remaining matches instead.

        Returns:
            (pattern_index, matching words) pairs, in pattern order
        """
        result = []
        for index, (pattern, solved) in enumerate(zip(snapshot.word_patterns, snapshot.words_solved)):
            if solved or all(c == WILDCARD for c in pattern):
                continue
            matches = [w for w in self.word_bank.matching_words(pattern) if w not in snapshot.guessed_words]
            result.append((index, matches))
        return result

    def best_candidate(self, snapshot: GameSnapshot) -> tuple[Optional[int], Optional[str], float]:
        """
        Globally best (pattern_index, word, confidence); ties keep the first seen.
        """
        best_index, best_word, best_confidence = None, None, 0.0
        for index, matches in self.candidates(snapshot):
            confidence = match_confidence(len(matches))
            if confidence > best_confidence:
                best_index, best_word, best_confidence = index, matches[0], confidence
        return best_index, best_word, best_confidence

    def evaluate(self, snapshot: GameSnapshot) -> GuessRecommendation:
        index, word, confidence = self.best_candidate(snapshot)
        if word is None:
            return GuessRecommendation.invalid()

        threshold = self.params.word_confidence_threshold(snapshot.skill_level)
        if confidence < threshold or confidence < self.params.min_word_confidence:
            logger.debug(
                f"Best word '{word}' at {confidence:.2f} below threshold "
                f"{max(threshold, self.params.min_word_confidence):.2f}"
            )
            return GuessRecommendation.invalid()

        logger.debug(f"Word pick '{word}' for pattern {index} (confidence {confidence:.2f})")
        return GuessRecommendation.for_word(word, index, confidence)
