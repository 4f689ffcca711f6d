"""
Remote turn-change detection by diffing successive session snapshots.

Snapshots carry no explicit "what happened" message, so the remote player's
action is inferred from which published array grew. Checks are length-only
and priority-ordered:

    1. revealed cells grew   -> coordinate guess (new tail cell)
    2. known letters grew    -> letter guess (new tail letter)
    3. solved rows grew      -> word guess (new tail row; text withheld)
    4. misses grew           -> silent miss (no guess event)

If more than one array grows in the same poll cycle, only the highest
priority change is reported and the others are absorbed without an event of
their own. A correct word guess, for example, also lengthens the revealed
cells and known letters, and is reported as a coordinate guess.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional
import copy
import logging

from network.snapshot import GameplayState, SessionSnapshot, other_player

logger = logging.getLogger(__name__)


class DetectedActionType(Enum):
    NONE = "none"
    COORDINATE = "coordinate"
    LETTER = "letter"
    WORD = "word"
    SILENT_MISS = "silent_miss"


@dataclass(frozen=True)
class DetectedAction:
    """
    Action inferred from a snapshot diff.

    Attributes:
        action_type: Kind of action
        row: Row of the new cell (COORDINATE)
        col: Column of the new cell (COORDINATE)
        letter: New letter (LETTER)
        word_row: Newly solved row (WORD)
    """
    action_type: DetectedActionType
    row: Optional[int] = None
    col: Optional[int] = None
    letter: Optional[str] = None
    word_row: Optional[int] = None

    @classmethod
    def none(cls) -> "DetectedAction":
        return cls(DetectedActionType.NONE)


class DetectorState(Enum):
    IDLE = "idle"
    WAITING_FOR_OPPONENT_TURN = "waiting_for_opponent_turn"


@dataclass(frozen=True)
class Observation:
    """
    Result of observing one snapshot.

    Attributes:
        action: Inferred opponent action (NONE on the first snapshot)
        turn_handed_off: Turn passed to the local player while waiting
    """
    action: DetectedAction
    turn_handed_off: bool = False


def diff_gameplay(previous: GameplayState, current: GameplayState) -> DetectedAction:
    """
    Infer the action between two gameplay states of the same player.

    Args:
        previous: Last seen state
        current: Newly fetched state

    Returns:
        DetectedAction for the highest-priority growth
    """
    if len(current.revealed_cells) > len(previous.revealed_cells):
        cell = current.revealed_cells[-1]
        return DetectedAction(DetectedActionType.COORDINATE, row=cell.row, col=cell.col)
    if len(current.known_letters) > len(previous.known_letters):
        return DetectedAction(DetectedActionType.LETTER, letter=current.known_letters[-1])
    if len(current.solved_word_rows) > len(previous.solved_word_rows):
        return DetectedAction(DetectedActionType.WORD, word_row=current.solved_word_rows[-1])
    if current.misses > previous.misses:
        return DetectedAction(DetectedActionType.SILENT_MISS)
    return DetectedAction.none()


class TurnChangeDetector:
    """
    Tracks the remote player's published progress and the turn marker.

    State machine: IDLE -> WAITING_FOR_OPPONENT_TURN (begin_waiting) -> IDLE
    once the turn marker names the local player.

    Attributes:
        local_key: Local player's key ("player1" or "player2")
        opponent_key: Remote player's key
        state: Current DetectorState
        last_seen: Last observed opponent gameplay state
    """

    def __init__(self, local_key: str):
        self.local_key = local_key
        self.opponent_key = other_player(local_key)
        self.state = DetectorState.IDLE
        self.last_seen: Optional[GameplayState] = None

    @property
    def is_waiting(self) -> bool:
        return self.state is DetectorState.WAITING_FOR_OPPONENT_TURN

    def begin_waiting(self) -> None:
        self.state = DetectorState.WAITING_FOR_OPPONENT_TURN

    def stop_waiting(self) -> None:
        self.state = DetectorState.IDLE

    def prime(self, snapshot: SessionSnapshot) -> None:
        """Set the baseline from a snapshot without reporting anything."""
        gameplay = snapshot.player(self.opponent_key).gameplay
        self.last_seen = copy.deepcopy(gameplay) if gameplay is not None else GameplayState()

    def observe(self, snapshot: SessionSnapshot) -> Observation:
        """
        Compare a new snapshot to the last seen one.

        Args:
            snapshot: Newly fetched session snapshot

        Returns:
            Observation with the inferred action and handoff flag
        """
        gameplay = snapshot.player(self.opponent_key).gameplay
        action = DetectedAction.none()
        if gameplay is not None:
            if self.last_seen is not None:
                action = diff_gameplay(self.last_seen, gameplay)
            self.last_seen = copy.deepcopy(gameplay)

        handed_off = False
        if self.is_waiting and snapshot.current_turn == self.local_key:
            self.stop_waiting()
            handed_off = True

        if action.action_type is not DetectedActionType.NONE:
            logger.debug(f"Detected opponent action {action.action_type.value} (turn {snapshot.turn_number})")
        return Observation(action, handed_off)

    def reset(self) -> None:
        self.state = DetectorState.IDLE
        self.last_seen = None
