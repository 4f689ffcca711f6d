"""
Opponent construction, chosen once per session.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, Optional
import logging

from agents.opponents.base_opponent import BaseOpponent
from agents.opponents.local_opponent import LocalOpponent
from agents.opponents.remote_opponent import RemoteOpponent
from agents.params import ExecutionerParams
from core.difficulty import Difficulty
from network.params import SessionParams
from network.transport import BaseTransport
from utils.wordlist import WordBank, default_word_bank

logger = logging.getLogger(__name__)


class GameMode(Enum):
    SINGLE_PLAYER = "single_player"
    MULTIPLAYER = "multiplayer"


def create_opponent(
    mode: GameMode,
    *,
    player_difficulty: Difficulty = Difficulty.NORMAL,
    word_bank: Optional[WordBank] = None,
    executioner_params: Optional[ExecutionerParams] = None,
    transport: Optional[BaseTransport] = None,
    session_id: Optional[str] = None,
    local_key: Optional[str] = None,
    session_params: Optional[SessionParams] = None,
    clock: Optional[Callable[[], float]] = None
) -> BaseOpponent:
    """
    Build the opponent for a session.

    Args:
        mode: SINGLE_PLAYER for the computer opponent, MULTIPLAYER for remote
        player_difficulty: Local player's difficulty (single player)
        word_bank: Word bank (single player; the default pool if None)
        executioner_params: Computer opponent tuning (single player)
        transport: Remote data store (multiplayer)
        session_id: Shared session identifier (multiplayer)
        local_key: Local player's key (multiplayer)
        session_params: Polling and timeout settings (multiplayer)
        clock: Monotonic time source

    Returns:
        LocalOpponent or RemoteOpponent

    Raises:
        ValueError: If the mode is unknown or multiplayer arguments are missing
    """
    mode = GameMode(mode)
    if mode is GameMode.SINGLE_PLAYER:
        if word_bank is None:
            word_bank = default_word_bank()
        logger.info(f"Creating computer opponent (player difficulty {player_difficulty.value})")
        return LocalOpponent(player_difficulty, word_bank, executioner_params, clock=clock)

    if transport is None or not session_id or local_key is None:
        raise ValueError("Multiplayer mode requires transport, session_id and local_key")
    logger.info(f"Creating remote opponent for {local_key} in session {session_id}")
    return RemoteOpponent(transport, session_id, local_key, session_params, clock=clock)
