"""
Turn ownership for a two-sided game.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class TurnTracker:
    """
    Tracks which side holds the turn.

    Only the current holder may act; every other request is a turn
    violation, which callers report as a rejected guess with no state change.

    Attributes:
        PLAYER: Index of the local player
        OPPONENT: Index of the opponent
    """

    PLAYER = 0
    OPPONENT = 1

    def __init__(self):
        self.current_player = self.PLAYER
        self.turn_number = 0
        self.is_turn_in_progress = False

    def start(self, first_player: int = PLAYER) -> None:
        """Begin the first turn."""
        self._check_index(first_player)
        self.current_player = first_player
        self.turn_number = 1
        self.is_turn_in_progress = True
        logger.debug(f"Turn 1 started for player {first_player}")

    def can_take_action(self, player_index: int) -> bool:
        """Whether player_index may act right now."""
        return self.is_turn_in_progress and self.current_player == player_index

    def end_turn(self) -> int:
        """
        Pass the turn to the other side.

        Returns:
            Index of the new turn holder
        """
        if not self.is_turn_in_progress:
            logger.warning("end_turn called with no turn in progress")
            return self.current_player
        self.current_player = 1 - self.current_player
        self.turn_number += 1
        logger.debug(f"Turn {self.turn_number} started for player {self.current_player}")
        return self.current_player

    def stop(self) -> None:
        """Stop accepting actions (game over)."""
        self.is_turn_in_progress = False

    def _check_index(self, player_index: int) -> None:
        if player_index not in (self.PLAYER, self.OPPONENT):
            raise ValueError(f"Player index must be 0 or 1, got {player_index}")
