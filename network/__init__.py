"""
Remote play support.

Session snapshot model and codec, transport contract, reconnecting change
subscription, state synchronizer, turn-change detector and a background
poller.
"""

from network.params import SessionParams
from network.snapshot import (
    PLAYER1,
    PLAYER2,
    GameplayState,
    PlayerSlot,
    RevealedCell,
    SessionSnapshot,
    SetupState,
    build_gameplay_state,
    decode_placements,
    encode_placements,
    other_player,
)
from network.detector import (
    DetectedAction,
    DetectedActionType,
    DetectorState,
    Observation,
    TurnChangeDetector,
    diff_gameplay,
)
from network.transport import BaseTransport, ChangeFeed, InMemoryTransport
from network.subscription import ReconnectingSubscription
from network.synchronizer import StateSynchronizer
from network.poller import Poller

__all__ = [
    "SessionParams",
    "PLAYER1",
    "PLAYER2",
    "GameplayState",
    "PlayerSlot",
    "RevealedCell",
    "SessionSnapshot",
    "SetupState",
    "build_gameplay_state",
    "decode_placements",
    "encode_placements",
    "other_player",
    "DetectedAction",
    "DetectedActionType",
    "DetectorState",
    "Observation",
    "TurnChangeDetector",
    "diff_gameplay",
    "BaseTransport",
    "ChangeFeed",
    "InMemoryTransport",
    "ReconnectingSubscription",
    "StateSynchronizer",
    "Poller",
]
