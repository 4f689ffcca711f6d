"""
Session snapshot model shared with the remote data store, and its codec.

Field names on the wire use the camelCase keys of persisted sessions. The
gameplay arrays (known letters, revealed cells, solved rows) only ever grow
within a game; the turn-change detector relies on that.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Optional, Sequence
import base64
import binascii
import copy
import json
import logging

from core.grid import TargetGrid, WordPlacement
from core.guess_state import GuessState

logger = logging.getLogger(__name__)

PLAYER1 = "player1"
PLAYER2 = "player2"
PLAYER_KEYS = (PLAYER1, PLAYER2)

SNAPSHOT_VERSION = 1


def other_player(key: str) -> str:
    """The other player's key."""
    if key == PLAYER1:
        return PLAYER2
    if key == PLAYER2:
        return PLAYER1
    raise ValueError(f"Unknown player key: {key!r}")


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def parse_iso(timestamp: str) -> datetime:
    """
    Parse an ISO 8601 timestamp; naive values are taken as UTC.

    Raises:
        ValueError: If the timestamp is malformed
    """
    parsed = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class RevealedCell:
    """A hit coordinate with its letter, if the guesser knows it."""
    row: int
    col: int
    letter: Optional[str] = None
    hit: bool = True


@dataclass
class GameplayState:
    """
    One player's guess progress as published to the other player.

    Attributes:
        known_letters: Letters found, in discovery order
        revealed_cells: Hit coordinates, in discovery order
        solved_word_rows: Solved word rows, in solve order
        misses: Misses so far
        miss_limit: Miss limit
    """
    known_letters: list[str] = field(default_factory=list)
    revealed_cells: list[RevealedCell] = field(default_factory=list)
    solved_word_rows: list[int] = field(default_factory=list)
    misses: int = 0
    miss_limit: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "knownLetters": list(self.known_letters),
            "revealedCells": [
                {"row": c.row, "col": c.col, "letter": c.letter, "hit": c.hit}
                for c in self.revealed_cells
            ],
            "solvedWordRows": list(self.solved_word_rows),
            "misses": self.misses,
            "missLimit": self.miss_limit,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GameplayState":
        cells = []
        for item in data.get("revealedCells", []):
            if isinstance(item, dict):
                cells.append(RevealedCell(int(item["row"]), int(item["col"]), item.get("letter"), bool(item.get("hit", True))))
            else:
                # Older sessions stored bare [row, col] pairs
                cells.append(RevealedCell(int(item[0]), int(item[1])))
        return cls(
            known_letters=[str(c).upper() for c in data.get("knownLetters", [])],
            revealed_cells=cells,
            solved_word_rows=[int(r) for r in data.get("solvedWordRows", [])],
            misses=int(data.get("misses", 0)),
            miss_limit=int(data.get("missLimit", 0)),
        )


@dataclass
class SetupState:
    """Published setup of one player; placements are encoded."""
    grid_size: int
    word_count: int
    difficulty: str
    placements_encoded: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "gridSize": self.grid_size,
            "wordCount": self.word_count,
            "difficulty": self.difficulty,
            "wordPlacementsEncrypted": self.placements_encoded,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SetupState":
        return cls(
            grid_size=int(data["gridSize"]),
            word_count=int(data["wordCount"]),
            difficulty=str(data.get("difficulty", "normal")),
            placements_encoded=data.get("wordPlacementsEncrypted", "") or "",
        )


@dataclass
class PlayerSlot:
    """One player's entry in the session snapshot."""
    name: str = ""
    color: tuple[float, float, float] = (1.0, 1.0, 1.0)
    ready: bool = False
    setup_complete: bool = False
    last_activity_at: Optional[str] = None
    setup: Optional[SetupState] = None
    gameplay: Optional[GameplayState] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "color": list(self.color),
            "ready": self.ready,
            "setupComplete": self.setup_complete,
            "lastActivityAt": self.last_activity_at,
            "setupData": self.setup.to_dict() if self.setup is not None else None,
            "gameplayState": self.gameplay.to_dict() if self.gameplay is not None else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PlayerSlot":
        setup = data.get("setupData")
        gameplay = data.get("gameplayState")
        color = data.get("color") or (1.0, 1.0, 1.0)
        return cls(
            name=data.get("name", ""),
            color=tuple(float(c) for c in color),
            ready=bool(data.get("ready", False)),
            setup_complete=bool(data.get("setupComplete", False)),
            last_activity_at=data.get("lastActivityAt"),
            setup=SetupState.from_dict(setup) if setup else None,
            gameplay=GameplayState.from_dict(gameplay) if gameplay else None,
        )


@dataclass
class SessionSnapshot:
    """
    Full state of a remote session as stored by the transport.

    Attributes:
        version: Snapshot format version
        status: "waiting", "setup", "playing" or "completed"
        current_turn: Key of the player whose turn it is
        turn_number: Incremented on every gameplay push
        created_at: ISO timestamp of creation
        updated_at: ISO timestamp of the last push
        player1: Host slot
        player2: Guest slot
        winner: Key of the winner once decided
    """
    version: int = SNAPSHOT_VERSION
    status: str = "waiting"
    current_turn: Optional[str] = None
    turn_number: int = 0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    player1: PlayerSlot = field(default_factory=PlayerSlot)
    player2: PlayerSlot = field(default_factory=PlayerSlot)
    winner: Optional[str] = None

    def player(self, key: str) -> PlayerSlot:
        if key == PLAYER1:
            return self.player1
        if key == PLAYER2:
            return self.player2
        raise ValueError(f"Unknown player key: {key!r}")

    def copy(self) -> "SessionSnapshot":
        return copy.deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "status": self.status,
            "currentTurn": self.current_turn,
            "turnNumber": self.turn_number,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "player1": self.player1.to_dict(),
            "player2": self.player2.to_dict(),
            "winner": self.winner,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SessionSnapshot":
        """
        Raises:
            ValueError: If required structure is missing or malformed
        """
        try:
            return cls(
                version=int(data.get("version", SNAPSHOT_VERSION)),
                status=data.get("status", "waiting"),
                current_turn=data.get("currentTurn"),
                turn_number=int(data.get("turnNumber", 0)),
                created_at=data.get("createdAt"),
                updated_at=data.get("updatedAt"),
                player1=PlayerSlot.from_dict(data.get("player1") or {}),
                player2=PlayerSlot.from_dict(data.get("player2") or {}),
                winner=data.get("winner"),
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise ValueError(f"Malformed session snapshot: {e}") from e

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, text: str) -> "SessionSnapshot":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(f"Session snapshot is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ValueError("Session snapshot must be a JSON object")
        return cls.from_dict(data)


def encode_placements(placements: Sequence[WordPlacement]) -> str:
    """
    Encode placements as base64 of "WORD:row,col,dRow,dCol;" entries.
    """
    raw = "".join(f"{p.word}:{p.start_row},{p.start_col},{p.d_row},{p.d_col};" for p in placements)
    return base64.b64encode(raw.encode("utf-8")).decode("ascii")


def decode_placements(encoded: str, grid_size: int) -> list[WordPlacement]:
    """
    Decode placements produced by encode_placements.

    Entries using the older "WORD:row,col,H" / "WORD:row,col,V" form are
    also accepted.

    Raises:
        ValueError: If the payload is not valid base64 or an entry is malformed
    """
    if not encoded:
        return []
    try:
        raw = base64.b64decode(encoded.encode("ascii"), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeError) as e:
        raise ValueError(f"Invalid placement encoding: {e}") from e

    placements = []
    for entry in filter(None, raw.split(";")):
        try:
            word, position = entry.split(":", 1)
            parts = position.split(",")
            row, col = int(parts[0]), int(parts[1])
            if len(parts) == 3:
                d_row, d_col = (0, 1) if parts[2].strip().upper() == "H" else (1, 0)
            else:
                d_row, d_col = int(parts[2]), int(parts[3])
        except (ValueError, IndexError) as e:
            raise ValueError(f"Malformed placement entry {entry!r}") from e
        placements.append(WordPlacement(word, grid_size, row, col, d_row, d_col))
    return placements


def build_gameplay_state(
    state: GuessState,
    target: TargetGrid,
    previous: Optional[GameplayState] = None
) -> GameplayState:
    """
    Publishable gameplay state for a guesser, extending `previous`.

    Existing entries keep their order and new ones are appended, so every
    array only grows. Only hit coordinates are published; a missed letter or
    coordinate changes nothing but the miss count.

    Args:
        state: Guesser's progress
        target: Opponent layout the guesser is searching
        previous: Last published gameplay state for this guesser

    Returns:
        New GameplayState
    """
    published = previous if previous is not None else GameplayState()
    known = list(published.known_letters)
    known.extend(sorted(c for c in state.known_letters if c not in known))

    def visible_letter(row: int, col: int) -> Optional[str]:
        letter = target.letter_at(row, col)
        return letter if letter in state.known_letters else None

    seen = {(c.row, c.col) for c in published.revealed_cells}
    # Letters learned since the last publish are filled in place
    cells = [
        replace(c, letter=c.letter or visible_letter(c.row, c.col))
        for c in published.revealed_cells
    ]
    for row, col in sorted(state.guessed_coordinates - seen):
        if target.letter_at(row, col) is None:
            continue
        cells.append(RevealedCell(row, col, visible_letter(row, col)))

    solved = list(published.solved_word_rows)
    solved.extend(sorted(r for r in state.solved_word_rows if r not in solved))

    return GameplayState(
        known_letters=known,
        revealed_cells=cells,
        solved_word_rows=solved,
        misses=state.misses,
        miss_limit=state.miss_limit,
    )
