"""
Timing parameters for remote play and session supervision.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Mapping, Optional
import logging
import os

logger = logging.getLogger(__name__)

ENV_PREFIX = "WORD_DUEL_"


@dataclass
class SessionParams:
    """
    Parameters for remote opponents and the session orchestrator.

    All durations are in seconds. Every field can be overridden from the
    environment as WORD_DUEL_<FIELD_NAME_UPPER>, e.g.
    WORD_DUEL_DISCONNECT_GRACE_PERIOD=30.

    Attributes:
        poll_interval: Delay between snapshot fetches while active
        max_wait: Ceiling on waiting for a remote turn before a timeout
        setup_wait: Ceiling on waiting for the remote player's setup
        disconnect_grace_period: Disconnect duration that forfeits the game
        inactivity_timeout: Time since last activity that forfeits the game
        max_reconnect_attempts: Reconnect attempts before giving up
        reconnect_base_delay: Delay before the first reconnect attempt
        reconnect_max_delay: Cap on the exponential reconnect delay
    """
    poll_interval: float = 0.5
    max_wait: float = 300.0
    setup_wait: float = 300.0
    disconnect_grace_period: float = 60.0
    inactivity_timeout: float = 3 * 24 * 60 * 60.0
    max_reconnect_attempts: int = 5
    reconnect_base_delay: float = 1.0
    reconnect_max_delay: float = 30.0

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "SessionParams":
        """
        Build parameters from environment variables, falling back to defaults.

        Args:
            environ: Mapping to read from (os.environ if None)

        Raises:
            ValueError: If a variable is set but not a number
        """
        environ = os.environ if environ is None else environ
        values = {}
        for f in fields(cls):
            key = ENV_PREFIX + f.name.upper()
            raw = environ.get(key)
            if raw is None or raw == "":
                continue
            cast = int if f.type in (int, "int") else float
            try:
                values[f.name] = cast(raw)
            except ValueError:
                raise ValueError(f"{key} must be a number, got {raw!r}") from None
            logger.debug(f"{key}={values[f.name]} from environment")
        return cls(**values)

    def reconnect_delay(self, attempt: int) -> float:
        """Delay before reconnect attempt number `attempt` (1-based)."""
        return min(self.reconnect_base_delay * (2 ** (attempt - 1)), self.reconnect_max_delay)
