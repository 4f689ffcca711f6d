"""
Utility functions and constants for Word Duel.
"""

from utils.wordlist import load_wordlist, WordBank, WORD_POOL, default_word_bank
from utils.letter_frequency import LETTER_FREQUENCIES, get_frequency
from utils.grid_analysis import GridAnalyzer

__all__ = [
    "load_wordlist",
    "WordBank",
    "WORD_POOL",
    "default_word_bank",
    "LETTER_FREQUENCIES",
    "get_frequency",
    "GridAnalyzer",
]
