"""
Tests for network.detector: snapshot diffing and turn handoff.
"""

from network.detector import (
    DetectedActionType,
    DetectorState,
    TurnChangeDetector,
    diff_gameplay,
)
from network.snapshot import PLAYER1, PLAYER2, GameplayState, RevealedCell, SessionSnapshot


def gameplay(letters=(), cells=(), rows=(), misses=0):
    return GameplayState(
        known_letters=list(letters),
        revealed_cells=[RevealedCell(r, c) for r, c in cells],
        solved_word_rows=list(rows),
        misses=misses,
        miss_limit=20,
    )


def snapshot_with(opponent_gameplay, current_turn=PLAYER2, turn_number=1):
    snapshot = SessionSnapshot(status="playing", current_turn=current_turn, turn_number=turn_number)
    snapshot.player2.gameplay = opponent_gameplay
    return snapshot


# ============================================================================
# Diffing
# ============================================================================

def test_coordinate_has_highest_priority():
    """Test several growing arrays in one cycle report only the coordinate."""
    previous = gameplay("ABC", [(0, 0), (0, 1)], misses=1)
    current = gameplay("ABCD", [(0, 0), (0, 1), (4, 3)], misses=1)

    action = diff_gameplay(previous, current)

    assert action.action_type is DetectedActionType.COORDINATE
    assert (action.row, action.col) == (4, 3)


def test_letter_then_word_then_silent_miss():
    """Test the remaining priority order."""
    base = gameplay("A", [(0, 0)], misses=1)

    letter = diff_gameplay(base, gameplay("AE", [(0, 0)], [0], misses=1))
    word = diff_gameplay(base, gameplay("A", [(0, 0)], [0], misses=1))
    miss = diff_gameplay(base, gameplay("A", [(0, 0)], misses=2))
    nothing = diff_gameplay(base, gameplay("A", [(0, 0)], misses=1))

    assert letter.action_type is DetectedActionType.LETTER and letter.letter == "E"
    assert word.action_type is DetectedActionType.WORD and word.word_row == 0
    assert miss.action_type is DetectedActionType.SILENT_MISS
    assert nothing.action_type is DetectedActionType.NONE


# ============================================================================
# Detector
# ============================================================================

def test_first_observation_sets_baseline_only():
    """Test nothing is reported before a baseline exists."""
    detector = TurnChangeDetector(PLAYER1)

    observation = detector.observe(snapshot_with(gameplay("AB", [(1, 1)])))

    assert observation.action.action_type is DetectedActionType.NONE
    assert detector.last_seen.known_letters == ["A", "B"]


def test_primed_detector_reports_next_change():
    """Test a primed baseline makes the next growth visible."""
    detector = TurnChangeDetector(PLAYER1)
    detector.prime(snapshot_with(None))
    assert detector.last_seen == GameplayState()

    observation = detector.observe(snapshot_with(gameplay("A")))

    assert observation.action.action_type is DetectedActionType.LETTER


def test_handoff_only_while_waiting():
    """Test the turn marker ends waiting exactly once."""
    detector = TurnChangeDetector(PLAYER1)
    detector.prime(snapshot_with(gameplay()))

    assert not detector.observe(snapshot_with(gameplay(), current_turn=PLAYER1)).turn_handed_off

    detector.begin_waiting()
    assert detector.state is DetectorState.WAITING_FOR_OPPONENT_TURN
    assert not detector.observe(snapshot_with(gameplay(), current_turn=PLAYER2)).turn_handed_off

    observation = detector.observe(snapshot_with(gameplay(misses=1), current_turn=PLAYER1, turn_number=2))
    assert observation.turn_handed_off
    assert observation.action.action_type is DetectedActionType.SILENT_MISS
    assert detector.state is DetectorState.IDLE


def test_baseline_is_a_copy():
    """Test later mutation of a fetched snapshot cannot change the baseline."""
    detector = TurnChangeDetector(PLAYER2)
    snapshot = SessionSnapshot()
    snapshot.player1.gameplay = gameplay("A")
    detector.prime(snapshot)

    snapshot.player1.gameplay.known_letters.append("B")

    assert detector.last_seen.known_letters == ["A"]
    detector.reset()
    assert detector.last_seen is None and not detector.is_waiting
