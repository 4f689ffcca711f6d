"""
Base class for opponents driven by the turn loop.

The turn loop talks only to this contract, so a computer opponent and a
remote human opponent are interchangeable. Both report their moves through
the same events.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, Optional
import logging
import time

from core.grid import WordPlacement
from core.setup import OpponentSetupData
from core.snapshot import GameSnapshot

logger = logging.getLogger(__name__)


class OpponentEvent(Enum):
    """
    Events an opponent emits. Callback arguments:

        THINKING_STARTED, THINKING_COMPLETE: none
        LETTER_GUESSED: letter
        COORDINATE_GUESSED: row, col
        WORD_GUESSED: word, pattern_index (word is "" when not disclosed)
        DISCONNECTED, RECONNECTED, TIMEOUT: none
        GAME_OVER: winner_key (the other side declared the game finished)
    """
    THINKING_STARTED = "thinking_started"
    THINKING_COMPLETE = "thinking_complete"
    LETTER_GUESSED = "letter_guessed"
    COORDINATE_GUESSED = "coordinate_guessed"
    WORD_GUESSED = "word_guessed"
    DISCONNECTED = "disconnected"
    RECONNECTED = "reconnected"
    TIMEOUT = "timeout"
    GAME_OVER = "game_over"


class BaseOpponent(ABC):
    """
    Abstract base class for opponents.

    Lifecycle: initialize(local_setup) -> ready; execute_turn(snapshot) starts
    the opponent's move; update(now) is ticked by the owner to let delayed or
    remote work progress; the record_* methods feed results back; reset()
    prepares a rematch; dispose() releases everything and silences events.

    Attributes:
        clock: Monotonic time source in seconds
    """

    is_ai: bool = False

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self.clock = clock if clock is not None else time.monotonic
        self._listeners: dict[OpponentEvent, list[Callable[..., None]]] = {e: [] for e in OpponentEvent}
        self._setup: Optional[OpponentSetupData] = None
        self._miss_limit = 0
        self._disposed = False

    def subscribe(self, event: OpponentEvent, callback: Callable[..., None]) -> None:
        self._listeners[event].append(callback)

    def unsubscribe(self, event: OpponentEvent, callback: Callable[..., None]) -> None:
        if callback in self._listeners[event]:
            self._listeners[event].remove(callback)

    def _emit(self, event: OpponentEvent, *args) -> None:
        if self._disposed:
            logger.debug(f"{event.value} suppressed after dispose")
            return
        for callback in list(self._listeners[event]):
            callback(*args)

    @property
    def setup(self) -> Optional[OpponentSetupData]:
        return self._setup

    @property
    def is_ready(self) -> bool:
        return self._setup is not None

    @property
    def name(self) -> str:
        return self._setup.name if self._setup is not None else ""

    @property
    def color(self) -> tuple[float, float, float]:
        return self._setup.color if self._setup is not None else (1.0, 1.0, 1.0)

    @property
    def grid_size(self) -> int:
        return self._setup.grid_size if self._setup is not None else 0

    @property
    def word_count(self) -> int:
        return self._setup.word_count if self._setup is not None else 0

    @property
    def placements(self) -> list[WordPlacement]:
        return list(self._setup.placements) if self._setup is not None else []

    @property
    def miss_limit(self) -> int:
        """Misses this opponent may make against the local player's grid."""
        return self._miss_limit

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    @property
    def reported_misses(self) -> Optional[int]:
        """Miss count published by the opponent itself, where one exists."""
        return None

    @property
    def reported_solved_rows(self) -> tuple[int, ...]:
        """Word rows the opponent itself published as solved."""
        return ()

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        pass

    @property
    @abstractmethod
    def is_thinking(self) -> bool:
        pass

    @abstractmethod
    def initialize(self, local_setup: OpponentSetupData) -> None:
        """
        Prepare the opponent for a game against the local player.

        Args:
            local_setup: The local player's setup (grid the opponent attacks)
        """
        pass

    @abstractmethod
    def execute_turn(self, snapshot: GameSnapshot) -> None:
        """
        Start the opponent's move.

        Args:
            snapshot: Opponent's knowledge of the local player's grid
        """
        pass

    def update(self, now: Optional[float] = None) -> None:
        """Cooperative tick; subclasses with delayed or remote work override."""
        pass

    def record_player_guess(self, was_hit: bool) -> None:
        """Feed back the local player's guess result."""
        pass

    def record_opponent_hit(self, row: int, col: int) -> None:
        """Feed back a coordinate this opponent hit."""
        pass

    def record_revealed_letter(self, letter: str) -> None:
        """Feed back a letter this opponent uncovered."""
        pass

    def advance_turn(self) -> None:
        pass

    def reset(self) -> None:
        """Prepare for a rematch."""
        pass

    def debug_summary(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, ready={self.is_ready})"

    def dispose(self) -> None:
        """Release resources and drop all listeners; no event fires afterwards."""
        self._disposed = True
        for callbacks in self._listeners.values():
            callbacks.clear()

    def _now(self, now: Optional[float]) -> float:
        return self.clock() if now is None else now
