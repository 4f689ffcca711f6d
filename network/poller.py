"""
Background thread that ticks a match or opponent at a fixed interval.
"""

from __future__ import annotations

from typing import Callable, Optional
import logging
import threading

logger = logging.getLogger(__name__)


class Poller(threading.Thread):
    """
    Daemon thread calling `tick()` every `interval` seconds until stopped.

    A tick that raises is logged and the thread keeps running. The game
    logic itself is single-threaded, so the tick must serialize access to
    the match (Match.start_polling ticks under the match lock).

    Attributes:
        tick: Callable run on each interval
        interval: Seconds between ticks
    """

    def __init__(self, tick: Callable[[], None], interval: float, name: str = "opponent-poller"):
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        super().__init__(name=name, daemon=True)
        self.tick = tick
        self.interval = interval
        self._stop_event = threading.Event()

    def run(self) -> None:
        logger.debug(f"{self.name} started ({self.interval}s)")
        while not self._stop_event.wait(self.interval):
            try:
                self.tick()
            except Exception:
                logger.exception(f"{self.name} tick failed")
        logger.debug(f"{self.name} stopped")

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop_event.set()
        if self.is_alive() and threading.current_thread() is not self:
            self.join(timeout)

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()
