"""
Word bank utilities for word-duel games.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional
import logging
import os

import numpy as np

logger = logging.getLogger(__name__)
curr_dir = os.path.dirname(os.path.abspath(__file__))


# Default wordlist file
WORD_LIST_FILE = os.path.join(curr_dir, "wordlist.txt")

# Wildcard used in word patterns for unknown positions
WILDCARD = "_"

# Letters considered for guesses
ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def load_wordlist(filepath: str = "wordlist.txt") -> list[str]:
    """
    Load word list from file.

    Args:
        filepath: Path to wordlist file (one word per line).

    Returns:
        List of alphabetic words in uppercase.

    Raises:
        FileNotFoundError: If wordlist file doesn't exist.
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Wordlist file not found: {filepath}")

    words = []
    with open(path, 'r', encoding='utf-8') as f:
        for line in f:
            word = line.strip()
            if word and word.isalpha():  # Skip empty lines and phrases
                words.append(word.upper())

    return words


class WordBank:
    """
    Set of valid words, indexed by length.

    Backs word-guess validation and the pattern matching used by the letter
    and word strategies. For each word length a [n_words, length] numpy
    character matrix is built lazily so a pattern can be matched against
    every candidate at once.

    Attributes:
        words: Frozen set of uppercase words
    """

    def __init__(self, words: Iterable[str]):
        """
        Initialize word bank.

        Args:
            words: Words to include (case-insensitive, non-alphabetic skipped)
        """
        self.words = frozenset(
            w.strip().upper() for w in words if w and w.strip().isalpha()
        )
        self._by_length: dict[int, list[str]] = {}
        for word in sorted(self.words):
            self._by_length.setdefault(len(word), []).append(word)
        self._matrices: dict[int, np.ndarray] = {}

    @classmethod
    def from_file(cls, filepath: str) -> "WordBank":
        """Build a word bank from a one-word-per-line file."""
        return cls(load_wordlist(filepath))

    def __len__(self) -> int:
        return len(self.words)

    def __contains__(self, word: object) -> bool:
        return isinstance(word, str) and self.contains(word)

    def contains(self, word: str) -> bool:
        """Check whether a word (any case, surrounding whitespace ignored) is valid."""
        return word.strip().upper() in self.words

    def words_of_length(self, length: int) -> list[str]:
        """Return all bank words with the given length, sorted."""
        return list(self._by_length.get(length, []))

    def lengths(self) -> list[int]:
        """Return the word lengths present in the bank."""
        return sorted(self._by_length)

    def _matrix(self, length: int) -> np.ndarray:
        """Character matrix [n_words, length] for one word length."""
        matrix = self._matrices.get(length)
        if matrix is None:
            words = self._by_length.get(length, [])
            if words:
                matrix = np.array([list(w) for w in words], dtype="<U1")
            else:
                matrix = np.empty((0, length), dtype="<U1")
            self._matrices[length] = matrix
        return matrix

    def match_mask(self, pattern: str) -> np.ndarray:
        """
        Boolean mask over words_of_length(len(pattern)) matching a pattern.

        Args:
            pattern: Word-length string with WILDCARD at unknown positions

        Returns:
            [n_words] bool array
        """
        matrix = self._matrix(len(pattern))
        chars = np.array(list(pattern.upper()), dtype="<U1")
        known = chars != WILDCARD
        if matrix.shape[0] == 0:
            return np.zeros(0, dtype=bool)
        return np.all((matrix == chars) | ~known, axis=1)

    def matching_words(self, pattern: str) -> list[str]:
        """Return bank words whose revealed positions match the pattern."""
        mask = self.match_mask(pattern)
        candidates = self._by_length.get(len(pattern), [])
        return [w for w, keep in zip(candidates, mask) if keep]

    def letter_match_counts(self, pattern: str) -> tuple[int, np.ndarray]:
        """
        Count pattern matches and, per letter A-Z, matches containing it.

        Args:
            pattern: Word-length string with WILDCARD at unknown positions

        Returns:
            Tuple of (total matching words, [26] int array of matches
            containing each letter)
        """
        mask = self.match_mask(pattern)
        total = int(mask.sum())
        if total == 0:
            return 0, np.zeros(26, dtype=np.int64)

        matched = self._matrix(len(pattern))[mask]  # [M, L]
        alphabet = np.array(list(ALPHABET), dtype="<U1")
        # [M, L, 26] -> word contains letter -> [26]
        contains = (matched[:, :, None] == alphabet[None, None, :]).any(axis=1)
        return total, contains.sum(axis=0)


def _default_pool() -> list[str]:
    try:
        return load_wordlist(WORD_LIST_FILE)
    except FileNotFoundError:
        # If wordlist.txt doesn't exist, provide a minimal default
        logger.warning(f"{WORD_LIST_FILE} not found, using minimal default word pool")
        return list(_FALLBACK_WORDS)


_FALLBACK_WORDS = [
    # 3 letters
    "ACE", "AGE", "AIR", "ANT", "ARM", "ART", "BAT", "BED", "BOX", "BUG",
    "CAT", "COW", "CUP", "DOG", "EAR", "EGG", "ELF", "FAN", "FOX", "GEM",
    "HAT", "ICE", "INK", "JAR", "KEY", "LOG", "MAP", "NET", "OAK", "OWL",
    "PEN", "PIG", "RAT", "SUN", "TOP", "VAN", "WEB", "YAK", "ZIP", "AXE",
    # 4 letters
    "AXIS", "BARN", "BELL", "BIRD", "BOAT", "CAKE", "CAVE", "COIN", "CROW", "DEER",
    "DOOR", "DRUM", "DUCK", "FARM", "FIRE", "FISH", "FROG", "GATE", "GOAT", "HAWK",
    "HILL", "HORN", "KING", "KITE", "LAMP", "LION", "MASK", "MOON", "NEST", "OVEN",
    "PEAR", "ROPE", "ROSE", "SHIP", "SNOW", "STAR", "TREE", "WOLF", "YARN", "ZONE",
    # 5 letters
    "ANGEL", "APPLE", "BEACH", "BLADE", "BREAD", "CANDY", "CHAIR", "CLOCK", "CLOUD", "CROWN",
    "DREAM", "EAGLE", "FLAME", "GHOST", "GRAPE", "HEART", "HOUSE", "JEWEL", "KNIFE", "LEMON",
    "MAGIC", "MOUSE", "NIGHT", "OCEAN", "PIANO", "PLANT", "QUEEN", "RIVER", "ROBOT", "SNAKE",
    "STONE", "SWORD", "TIGER", "TOWER", "TRAIN", "WATER", "WHALE", "WITCH", "YACHT", "ZEBRA",
    # 6 letters
    "ANCHOR", "BASKET", "BRIDGE", "CANDLE", "CASTLE", "DRAGON", "FOREST", "GARDEN", "GUITAR", "HAMMER",
    "ISLAND", "JUNGLE", "KITTEN", "LADDER", "MIRROR", "MONKEY", "PALACE", "PARROT", "PENCIL", "PLANET",
    "RABBIT", "ROCKET", "SHADOW", "SPIDER", "SPIRIT", "THRONE", "TURTLE", "VALLEY", "WIZARD", "WINDOW",
]

# Load the default word pool
WORD_POOL = _default_pool()


def default_word_bank(extra_words: Optional[Iterable[str]] = None) -> WordBank:
    """
    Build a word bank from the default word pool.

    Args:
        extra_words: Optional additional words to include

    Returns:
        WordBank instance
    """
    words = list(WORD_POOL)
    if extra_words is not None:
        words.extend(extra_words)
    return WordBank(words)
