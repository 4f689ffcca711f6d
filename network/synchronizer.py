"""
Publishing local progress to the session snapshot and filtering stale reads.
"""

from __future__ import annotations

from typing import Callable, Optional
import logging

from core.setup import OpponentSetupData
from network.snapshot import (
    PLAYER1,
    GameplayState,
    SessionSnapshot,
    SetupState,
    encode_placements,
    other_player,
    utc_now_iso,
)
from network.transport import BaseTransport

logger = logging.getLogger(__name__)


class StateSynchronizer:
    """
    Read-modify-write access to one session for the local player.

    Every gameplay push increments the turn counter; accept() lets only
    snapshots newer than the last synced turn through, so the local player's
    own echoes and out-of-order reads are dropped.

    Attributes:
        transport: Remote data store
        session_id: Session identifier
        local_key: Local player's key
        last_synced_turn: Highest turn number pushed or accepted
    """

    def __init__(
        self,
        transport: BaseTransport,
        session_id: str,
        local_key: str,
        timestamp: Optional[Callable[[], str]] = None
    ):
        other_player(local_key)
        self.transport = transport
        self.session_id = session_id
        self.local_key = local_key
        self.timestamp = timestamp if timestamp is not None else utc_now_iso
        self.last_synced_turn = 0

    def fetch(self) -> Optional[SessionSnapshot]:
        """Latest snapshot; ConnectionError propagates to the caller."""
        return self.transport.fetch_snapshot(self.session_id)

    def accept(self, snapshot: SessionSnapshot) -> bool:
        """
        Whether a fetched snapshot is newer than anything synced so far.
        """
        if snapshot.turn_number <= self.last_synced_turn:
            logger.debug(f"Ignoring stale snapshot turn {snapshot.turn_number} (synced {self.last_synced_turn})")
            return False
        self.last_synced_turn = snapshot.turn_number
        return True

    def mark_synced(self, snapshot: SessionSnapshot) -> None:
        self.last_synced_turn = max(self.last_synced_turn, snapshot.turn_number)

    def _load(self) -> SessionSnapshot:
        snapshot = self.fetch()
        if snapshot is None:
            now = self.timestamp()
            snapshot = SessionSnapshot(created_at=now, updated_at=now)
            logger.info(f"Creating session {self.session_id}")
        return snapshot

    def push_setup(self, setup: OpponentSetupData) -> SessionSnapshot:
        """
        Publish the local player's setup.

        When both players have published, the session moves to "playing" and
        the host takes the first turn.
        """
        snapshot = self._load()
        now = self.timestamp()
        slot = snapshot.player(self.local_key)
        slot.name = setup.name
        slot.color = tuple(setup.color)
        slot.ready = True
        slot.setup_complete = True
        slot.last_activity_at = now
        slot.setup = SetupState(
            grid_size=setup.grid_size,
            word_count=setup.word_count,
            difficulty=setup.difficulty.value,
            placements_encoded=encode_placements(setup.placements),
        )
        snapshot.updated_at = now
        if snapshot.player(other_player(self.local_key)).setup_complete:
            snapshot.status = "playing"
            if snapshot.current_turn is None:
                snapshot.current_turn = PLAYER1
        else:
            snapshot.status = "setup"
        self.transport.push_snapshot(self.session_id, snapshot)
        logger.info(f"Published setup for {self.local_key} in {self.session_id}")
        return snapshot

    def push_gameplay(self, gameplay: GameplayState, next_turn_key: str) -> SessionSnapshot:
        """
        Publish the local player's progress and hand the turn over.

        Args:
            gameplay: Local player's gameplay state
            next_turn_key: Player who moves next

        Returns:
            The pushed snapshot
        """
        other_player(next_turn_key)
        snapshot = self._load()
        now = self.timestamp()
        slot = snapshot.player(self.local_key)
        slot.gameplay = gameplay
        slot.last_activity_at = now
        if snapshot.status == "completed":
            # First move of a rematch reopens the session
            snapshot.status = "playing"
            snapshot.winner = None
        snapshot.turn_number += 1
        snapshot.current_turn = next_turn_key
        snapshot.updated_at = now
        self.transport.push_snapshot(self.session_id, snapshot)
        self.last_synced_turn = snapshot.turn_number
        logger.debug(f"Pushed turn {snapshot.turn_number}, next {next_turn_key}")
        return snapshot

    def set_winner(self, winner_key: str) -> SessionSnapshot:
        other_player(winner_key)
        snapshot = self._load()
        snapshot.winner = winner_key
        snapshot.status = "completed"
        snapshot.updated_at = self.timestamp()
        self.transport.push_snapshot(self.session_id, snapshot)
        logger.info(f"Session {self.session_id} completed, winner {winner_key}")
        return snapshot
