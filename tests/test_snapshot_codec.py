"""
Tests for the session snapshot model, placement encoding and session params.
"""

import base64

import pytest

from core.grid import TargetGrid, WordPlacement
from core.guess_processor import GuessProcessor
from core.guess_state import GuessState
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
    parse_iso,
)


# ============================================================================
# Snapshot model
# ============================================================================

def test_snapshot_json_preserves_fields():
    """Test a populated snapshot survives JSON serialization."""
    snapshot = SessionSnapshot(status="playing", current_turn=PLAYER2, turn_number=4)
    snapshot.player1 = PlayerSlot(
        name="Ada",
        ready=True,
        setup=SetupState(6, 3, "hard", "abc"),
        gameplay=GameplayState(["A"], [RevealedCell(1, 2, "A")], [0], 2, 15),
    )

    restored = SessionSnapshot.from_json(snapshot.to_json())

    assert restored == snapshot
    assert restored.to_dict()["player1"]["setupData"]["wordPlacementsEncrypted"] == "abc"


def test_malformed_snapshot_raises_value_error():
    """Test bad payloads surface as ValueError."""
    with pytest.raises(ValueError):
        SessionSnapshot.from_json("{not json")
    with pytest.raises(ValueError):
        SessionSnapshot.from_json("[1, 2]")
    with pytest.raises(ValueError):
        SessionSnapshot.from_dict({"player1": {"setupData": {"wordCount": 3}}})


def test_gameplay_accepts_bare_cell_pairs():
    """Test older revealed-cell arrays of [row, col] pairs still load."""
    state = GameplayState.from_dict({"knownLetters": ["a"], "revealedCells": [[1, 2]], "misses": 3})

    assert state.known_letters == ["A"]
    assert state.revealed_cells == [RevealedCell(1, 2)]
    assert state.misses == 3


def test_player_keys():
    """Test key helpers and unknown-key errors."""
    assert other_player(PLAYER1) == PLAYER2
    assert SessionSnapshot().player(PLAYER2) is not None
    with pytest.raises(ValueError):
        other_player("player3")
    with pytest.raises(ValueError):
        SessionSnapshot().player("nobody")


def test_parse_iso_assumes_utc():
    """Test naive and Z-suffixed timestamps parse as UTC."""
    assert parse_iso("2024-01-01T00:00:00Z") == parse_iso("2024-01-01T00:00:00")
    with pytest.raises(ValueError):
        parse_iso("yesterday")


# ============================================================================
# Placement encoding
# ============================================================================

def test_placements_encode_and_decode():
    """Test directional placements survive encoding."""
    placements = [WordPlacement("CAT", 6, 0, 0), WordPlacement("DOG", 6, 1, 5, 1, 0)]

    assert decode_placements(encode_placements(placements), 6) == placements


def test_decode_accepts_letter_directions():
    """Test the H/V entry form decodes to across/down placements."""
    encoded = base64.b64encode(b"CAT:0,0,H;DOG:1,5,V;").decode("ascii")

    cat, dog = decode_placements(encoded, 6)

    assert cat.is_horizontal
    assert dog.cells == ((1, 5), (2, 5), (3, 5))


def test_decode_rejects_malformed_payloads():
    """Test bad base64 and bad entries raise ValueError."""
    assert decode_placements("", 6) == []
    with pytest.raises(ValueError):
        decode_placements("***", 6)
    with pytest.raises(ValueError):
        decode_placements(base64.b64encode(b"CAT:x,0,H;").decode("ascii"), 6)


# ============================================================================
# Publishing gameplay
# ============================================================================

def test_build_gameplay_state_is_append_only(word_bank):
    """Test published arrays keep order and only grow; misses are not cells."""
    target = TargetGrid(6, [WordPlacement("CAT", 6, 0, 0)])
    state = GuessState(miss_limit=10)
    processor = GuessProcessor(target, state, word_bank)

    processor.process_coordinate(0, 2)
    processor.process_coordinate(5, 5)
    first = build_gameplay_state(state, target)
    assert first.revealed_cells == [RevealedCell(0, 2, None)]
    assert first.misses == 1

    processor.process_letter("T")
    processor.process_letter("A")
    processor.process_coordinate(0, 0)
    second = build_gameplay_state(state, target, first)

    assert second.known_letters == ["A", "T"]
    assert [(c.row, c.col) for c in second.revealed_cells] == [(0, 2), (0, 0)]
    assert second.revealed_cells[0].letter == "T"
    assert second.revealed_cells[1].letter is None
    assert second.miss_limit == 10


def test_build_gameplay_state_records_solved_rows(word_bank):
    """Test a solved word publishes its row and every cell."""
    target = TargetGrid(6, [WordPlacement("CAT", 6, 0, 0), WordPlacement("DOG", 6, 2, 0)])
    state = GuessState(miss_limit=10)
    GuessProcessor(target, state, word_bank).process_word("DOG", 1)

    published = build_gameplay_state(state, target)

    assert published.solved_word_rows == [1]
    assert [(c.row, c.col) for c in published.revealed_cells] == [(2, 0), (2, 1), (2, 2)]


# ============================================================================
# Session params
# ============================================================================

def test_session_params_from_env():
    """Test environment overrides and validation."""
    params = SessionParams.from_env({
        "WORD_DUEL_DISCONNECT_GRACE_PERIOD": "30",
        "WORD_DUEL_MAX_RECONNECT_ATTEMPTS": "2",
        "WORD_DUEL_POLL_INTERVAL": "",
    })

    assert params.disconnect_grace_period == 30.0
    assert params.max_reconnect_attempts == 2
    assert isinstance(params.max_reconnect_attempts, int)
    assert params.poll_interval == 0.5

    with pytest.raises(ValueError):
        SessionParams.from_env({"WORD_DUEL_MAX_WAIT": "soon"})


def test_session_params_read_process_environment(monkeypatch):
    """Test from_env falls back to os.environ when no mapping is given."""
    monkeypatch.setenv("WORD_DUEL_POLL_INTERVAL", "0.25")
    monkeypatch.delenv("WORD_DUEL_MAX_WAIT", raising=False)

    params = SessionParams.from_env()

    assert params.poll_interval == 0.25
    assert params.max_wait == SessionParams().max_wait


def test_reconnect_delay_backs_off_and_caps():
    """Test exponential reconnect delays up to the cap."""
    params = SessionParams(reconnect_base_delay=1.0, reconnect_max_delay=5.0)

    assert [params.reconnect_delay(n) for n in range(1, 6)] == [1.0, 2.0, 4.0, 5.0, 5.0]
