"""
Session supervision: disconnect grace period, inactivity and forfeits.

The session is the only place where a sustained failure (a disconnect that
outlasts its grace period, or inactivity beyond the timeout) becomes a
terminal outcome. Everything below it reports such conditions as events.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional, Union
import logging
import time

from agents.opponents.base_opponent import BaseOpponent, OpponentEvent
from agents.opponents.factory import GameMode
from network.params import SessionParams
from network.snapshot import PLAYER1, other_player, parse_iso

logger = logging.getLogger(__name__)


class EndReason(Enum):
    PLAYER_WIN = "player_win"
    OPPONENT_WIN = "opponent_win"
    PLAYER_FORFEIT = "player_forfeit"
    OPPONENT_FORFEIT = "opponent_forfeit"

    @property
    def local_player_won(self) -> bool:
        return self in (EndReason.PLAYER_WIN, EndReason.OPPONENT_FORFEIT)

    @property
    def is_forfeit(self) -> bool:
        return self in (EndReason.PLAYER_FORFEIT, EndReason.OPPONENT_FORFEIT)


@dataclass(frozen=True)
class GameEndResult:
    """
    Terminal outcome of a session.

    Attributes:
        reason: Why the game ended
        winner_key: Key of the winning player
        ended_at: Monotonic time of the decision
    """
    reason: EndReason
    winner_key: str
    ended_at: float


class SessionEvent(Enum):
    """
    Session-level events. Callback arguments:

        ENDED: GameEndResult
        DISCONNECTED, RECONNECTED, TIMEOUT: none
    """
    ENDED = "ended"
    DISCONNECTED = "disconnected"
    RECONNECTED = "reconnected"
    TIMEOUT = "timeout"


class GameSession:
    """
    Owns the opponent for one game and decides forfeits.

    A disconnect starts a grace timer; a reconnect within it cancels the
    timer and re-emits RECONNECTED; update() turns an expired grace period
    into an opponent forfeit. Inactivity is checked on demand against a
    persisted last-activity timestamp.

    Attributes:
        opponent: Opponent for this game (disposed when the game ends)
        mode: SINGLE_PLAYER or MULTIPLAYER
        params: SessionParams
        local_key: Local player's key
        opponent_key: Opponent's key
        result: GameEndResult once the game has ended
    """

    def __init__(
        self,
        opponent: BaseOpponent,
        mode: GameMode = GameMode.SINGLE_PLAYER,
        params: Optional[SessionParams] = None,
        local_key: str = PLAYER1,
        clock: Optional[Callable[[], float]] = None
    ):
        self.opponent = opponent
        self.mode = GameMode(mode)
        self.params = params if params is not None else SessionParams()
        self.local_key = local_key
        self.opponent_key = other_player(local_key)
        self.clock = clock if clock is not None else time.monotonic
        self.result: Optional[GameEndResult] = None

        self._disconnected_at: Optional[float] = None
        self._listeners: dict[SessionEvent, list[Callable[..., None]]] = {e: [] for e in SessionEvent}

        opponent.subscribe(OpponentEvent.DISCONNECTED, self._on_opponent_disconnected)
        opponent.subscribe(OpponentEvent.RECONNECTED, self._on_opponent_reconnected)
        opponent.subscribe(OpponentEvent.TIMEOUT, self._on_opponent_timeout)
        logger.info(f"Session started in {self.mode.value} mode as {local_key}")

    def subscribe(self, event: SessionEvent, callback: Callable[..., None]) -> None:
        self._listeners[event].append(callback)

    def unsubscribe(self, event: SessionEvent, callback: Callable[..., None]) -> None:
        if callback in self._listeners[event]:
            self._listeners[event].remove(callback)

    def _emit(self, event: SessionEvent, *args) -> None:
        for callback in list(self._listeners[event]):
            callback(*args)

    @property
    def is_ended(self) -> bool:
        return self.result is not None

    @property
    def is_opponent_disconnected(self) -> bool:
        return self._disconnected_at is not None

    def grace_remaining(self, now: Optional[float] = None) -> Optional[float]:
        """Seconds left before the disconnected opponent forfeits, if disconnected."""
        if self._disconnected_at is None:
            return None
        elapsed = self._now(now) - self._disconnected_at
        return max(0.0, self.params.disconnect_grace_period - elapsed)

    def mark_opponent_disconnected(self, now: Optional[float] = None) -> None:
        """Start the grace timer (no-op if already running or ended)."""
        if self.is_ended or self._disconnected_at is not None:
            return
        self._disconnected_at = self._now(now)
        logger.warning(
            f"{self.opponent_key} disconnected, forfeit in {self.params.disconnect_grace_period}s"
        )
        self._emit(SessionEvent.DISCONNECTED)

    def mark_opponent_reconnected(self, now: Optional[float] = None) -> None:
        """Cancel a pending forfeit and emit RECONNECTED."""
        if self.is_ended or self._disconnected_at is None:
            return
        away = self._now(now) - self._disconnected_at
        self._disconnected_at = None
        logger.info(f"{self.opponent_key} reconnected after {away:.1f}s")
        self._emit(SessionEvent.RECONNECTED)

    def _on_opponent_disconnected(self) -> None:
        self.mark_opponent_disconnected()

    def _on_opponent_reconnected(self) -> None:
        self.mark_opponent_reconnected()

    def _on_opponent_timeout(self) -> None:
        logger.warning(f"Timed out waiting for {self.opponent_key}")
        self._emit(SessionEvent.TIMEOUT)

    def update(self, now: Optional[float] = None) -> Optional[GameEndResult]:
        """
        Check the grace timer.

        Args:
            now: Current monotonic time (clock() if None)

        Returns:
            The end result if the game has ended
        """
        if self.is_ended:
            return self.result
        now = self._now(now)
        if self._disconnected_at is not None and now - self._disconnected_at >= self.params.disconnect_grace_period:
            logger.warning(f"{self.opponent_key} did not reconnect within the grace period")
            return self.end_game(EndReason.OPPONENT_FORFEIT, now)
        return None

    def check_inactivity(
        self,
        last_activity_at: Optional[Union[str, datetime]],
        now: Optional[datetime] = None,
        inactive_key: Optional[str] = None
    ) -> Optional[GameEndResult]:
        """
        Forfeit a side whose last activity is older than the inactivity timeout.

        Args:
            last_activity_at: Persisted ISO timestamp (or datetime) of the
                side's last action; None means unknown and never forfeits
            now: Current wall-clock time (UTC now if None)
            inactive_key: Side the timestamp belongs to (the opponent if None)

        Returns:
            The end result if the game has ended

        Raises:
            ValueError: If the timestamp is malformed or the key unknown
        """
        if self.is_ended:
            return self.result
        if last_activity_at is None:
            return None
        inactive_key = self.opponent_key if inactive_key is None else inactive_key
        other_player(inactive_key)

        last = parse_iso(last_activity_at) if isinstance(last_activity_at, str) else last_activity_at
        if last.tzinfo is None:
            last = last.replace(tzinfo=timezone.utc)
        now = datetime.now(timezone.utc) if now is None else now
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)

        idle = (now - last).total_seconds()
        if idle <= self.params.inactivity_timeout:
            return None
        logger.warning(f"{inactive_key} inactive for {idle:.0f}s")
        reason = EndReason.OPPONENT_FORFEIT if inactive_key == self.opponent_key else EndReason.PLAYER_FORFEIT
        return self.end_game(reason)

    def forfeit(self) -> GameEndResult:
        """The local player gives up."""
        return self.end_game(EndReason.PLAYER_FORFEIT)

    def winner_for(self, reason: EndReason) -> str:
        return self.local_key if reason.local_player_won else self.opponent_key

    def end_game(self, reason: EndReason, now: Optional[float] = None) -> GameEndResult:
        """
        End the game once; later calls return the first result unchanged.

        The opponent is disposed, so no opponent event fires afterwards.
        """
        if self.result is not None:
            return self.result
        self.result = GameEndResult(reason, self.winner_for(reason), self._now(now))
        self._disconnected_at = None
        logger.info(f"Game ended: {reason.value}, winner {self.result.winner_key}")
        self.opponent.dispose()
        self._emit(SessionEvent.ENDED, self.result)
        return self.result

    def _now(self, now: Optional[float]) -> float:
        return self.clock() if now is None else now
