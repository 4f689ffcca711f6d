"""
Remote transport contract and an in-memory implementation.

The transport is treated as eventually consistent: it is polled, and change
notifications are a hint to fetch sooner, never a guarantee of delivery.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import deque
from typing import Optional
import logging

from network.snapshot import SessionSnapshot

logger = logging.getLogger(__name__)


class ChangeFeed(ABC):
    """Stream of change notifications for one session."""

    @abstractmethod
    def poll(self) -> list[SessionSnapshot]:
        """Return and clear pending change notifications."""
        pass

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        pass

    @abstractmethod
    def close(self) -> None:
        pass


class BaseTransport(ABC):
    """
    Abstract remote data store for session snapshots.

    Implementations may raise ConnectionError when the store cannot be
    reached; callers surface that as a disconnect, not a failure.
    """

    @abstractmethod
    def fetch_snapshot(self, session_id: str) -> Optional[SessionSnapshot]:
        """Latest snapshot of a session, or None if it does not exist."""
        pass

    @abstractmethod
    def push_snapshot(self, session_id: str, snapshot: SessionSnapshot) -> None:
        """Store a snapshot as the latest state of a session."""
        pass

    @abstractmethod
    def subscribe(self, session_id: str) -> ChangeFeed:
        """Open a change feed for a session."""
        pass


class InMemoryFeed(ChangeFeed):
    """Change feed backed by an InMemoryTransport."""

    def __init__(self, transport: "InMemoryTransport", session_id: str):
        self.transport = transport
        self.session_id = session_id
        self.closed = False
        self._pending: deque[SessionSnapshot] = deque()

    def notify(self, snapshot: SessionSnapshot) -> None:
        if not self.closed:
            self._pending.append(snapshot.copy())

    def poll(self) -> list[SessionSnapshot]:
        if self.closed or not self.is_connected:
            return []
        items = list(self._pending)
        self._pending.clear()
        return items

    @property
    def is_connected(self) -> bool:
        return not self.closed and self.transport.connected

    def close(self) -> None:
        self.closed = True
        self._pending.clear()
        self.transport.detach(self)


class InMemoryTransport(BaseTransport):
    """
    Process-local transport, used for tests and hot-seat play.

    Snapshots are stored as JSON so every push and fetch goes through the
    same codec a networked store would. `connected` can be toggled to
    simulate an outage; while disconnected every call raises ConnectionError
    and feeds report themselves disconnected.

    Attributes:
        connected: Whether the store is reachable
    """

    def __init__(self):
        self.connected = True
        self._sessions: dict[str, str] = {}
        self._feeds: list[InMemoryFeed] = []

    def set_connected(self, connected: bool) -> None:
        self.connected = connected
        logger.debug(f"In-memory transport {'connected' if connected else 'disconnected'}")

    def _check(self) -> None:
        if not self.connected:
            raise ConnectionError("Transport is disconnected")

    def fetch_snapshot(self, session_id: str) -> Optional[SessionSnapshot]:
        self._check()
        payload = self._sessions.get(session_id)
        return SessionSnapshot.from_json(payload) if payload is not None else None

    def push_snapshot(self, session_id: str, snapshot: SessionSnapshot) -> None:
        self._check()
        self._sessions[session_id] = snapshot.to_json()
        for feed in list(self._feeds):
            if feed.session_id == session_id:
                feed.notify(snapshot)

    def subscribe(self, session_id: str) -> ChangeFeed:
        self._check()
        feed = InMemoryFeed(self, session_id)
        self._feeds.append(feed)
        return feed

    def detach(self, feed: InMemoryFeed) -> None:
        if feed in self._feeds:
            self._feeds.remove(feed)

    @property
    def feed_count(self) -> int:
        return len(self._feeds)
