"""
Change-feed subscription that survives transport outages.
"""

from __future__ import annotations

from typing import Callable, Optional
import logging
import time

from network.params import SessionParams
from network.snapshot import SessionSnapshot
from network.transport import BaseTransport, ChangeFeed

logger = logging.getLogger(__name__)


class ReconnectingSubscription:
    """
    Wraps a transport change feed and resubscribes after a connection loss.

    Reconnect attempt n is made reconnect_delay(n) seconds after the previous
    failure (exponential, capped). After max_reconnect_attempts failures the
    subscription gives up and stays disconnected; deciding what that means
    for the game is left to the session orchestrator.

    Attributes:
        transport: Remote data store
        session_id: Session to follow
        params: SessionParams with the reconnect policy
        attempts: Failed reconnect attempts since the connection was lost
        gave_up: Whether all reconnect attempts are used up
    """

    def __init__(
        self,
        transport: BaseTransport,
        session_id: str,
        params: Optional[SessionParams] = None,
        clock: Optional[Callable[[], float]] = None,
        on_connection_lost: Optional[Callable[[], None]] = None,
        on_reconnected: Optional[Callable[[], None]] = None
    ):
        self.transport = transport
        self.session_id = session_id
        self.params = params if params is not None else SessionParams()
        self.clock = clock if clock is not None else time.monotonic
        self.on_connection_lost = on_connection_lost
        self.on_reconnected = on_reconnected

        self.attempts = 0
        self.gave_up = False
        self._feed: Optional[ChangeFeed] = None
        self._lost = False
        self._next_attempt_at = 0.0
        self._closed = False

    @property
    def is_connected(self) -> bool:
        return self._feed is not None and self._feed.is_connected and not self._lost

    @property
    def is_closed(self) -> bool:
        return self._closed

    def connect(self, now: Optional[float] = None) -> bool:
        """
        Open the feed.

        Returns:
            True if connected; otherwise the loss handling and retry schedule
            have started
        """
        if self._closed:
            return False
        try:
            self._feed = self.transport.subscribe(self.session_id)
        except ConnectionError as e:
            logger.warning(f"Subscribe to {self.session_id} failed: {e}")
            self._mark_lost(self._now(now))
            return False
        logger.debug(f"Subscribed to session {self.session_id}")
        return True

    def tick(self, now: Optional[float] = None) -> list[SessionSnapshot]:
        """
        Drain pending notifications, detecting loss and retrying as due.

        Args:
            now: Current monotonic time (clock() if None)

        Returns:
            Change notifications received since the last tick
        """
        if self._closed:
            return []
        now = self._now(now)

        if not self._lost:
            if self._feed is not None and self._feed.is_connected:
                return self._feed.poll()
            self._mark_lost(now)

        if self.gave_up or now < self._next_attempt_at:
            return []
        return self._attempt(now)

    def _mark_lost(self, now: float) -> None:
        if self._lost:
            return
        self._lost = True
        self.attempts = 0
        self._next_attempt_at = now + self.params.reconnect_delay(1)
        logger.warning(f"Connection to session {self.session_id} lost")
        if self.on_connection_lost is not None:
            self.on_connection_lost()

    def _attempt(self, now: float) -> list[SessionSnapshot]:
        self.attempts += 1
        logger.info(f"Reconnect attempt {self.attempts}/{self.params.max_reconnect_attempts} to {self.session_id}")
        self._close_feed()
        try:
            self._feed = self.transport.subscribe(self.session_id)
        except ConnectionError as e:
            if self.attempts >= self.params.max_reconnect_attempts:
                self.gave_up = True
                logger.error(f"Giving up on session {self.session_id} after {self.attempts} attempts: {e}")
            else:
                self._next_attempt_at = now + self.params.reconnect_delay(self.attempts + 1)
            return []

        self._lost = False
        self.attempts = 0
        logger.info(f"Reconnected to session {self.session_id}")
        if self.on_reconnected is not None:
            self.on_reconnected()
        return self._feed.poll()

    def _close_feed(self) -> None:
        if self._feed is not None:
            self._feed.close()
            self._feed = None

    def close(self) -> None:
        self._close_feed()
        self._closed = True

    def _now(self, now: Optional[float]) -> float:
        return self.clock() if now is None else now
