"""
Game sessions: forfeit supervision and the headless turn loop.
"""

from agents.opponents.factory import GameMode
from session.game_session import EndReason, GameEndResult, GameSession, SessionEvent
from session.match import Match, MoveRecord

__all__ = [
    "GameMode",
    "EndReason",
    "GameEndResult",
    "GameSession",
    "SessionEvent",
    "Match",
    "MoveRecord",
]
