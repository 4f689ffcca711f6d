"""
Opponents driven by the turn loop: a computer opponent and a remote human,
behind one contract.
"""

from agents.opponents.base_opponent import BaseOpponent, OpponentEvent
from agents.opponents.local_opponent import LocalOpponent
from agents.opponents.remote_opponent import RemoteOpponent
from agents.opponents.factory import GameMode, create_opponent

__all__ = [
    "BaseOpponent",
    "OpponentEvent",
    "LocalOpponent",
    "RemoteOpponent",
    "GameMode",
    "create_opponent",
]
