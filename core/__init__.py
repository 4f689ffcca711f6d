"""
Core game logic for Word Duel.

Grid and placements, per-side guess state, difficulty tables, the guess
processor shared by both sides, win/lose evaluation, turn ownership and the
computer opponent's setup generation.
"""

from core.grid import CellState, TargetGrid, WordPlacement
from core.guess_state import GuessState
from core.difficulty import Difficulty, calculate_miss_limit
from core.setup import ComputerSetup, OpponentSetupData
from core.snapshot import GameSnapshot, build_snapshot
from core.guess_processor import GuessProcessor, GuessResult
from core.win_checker import GameOutcome, check_lose, check_win, evaluate_outcome
from core.turns import TurnTracker

__all__ = [
    "CellState",
    "TargetGrid",
    "WordPlacement",
    "GuessState",
    "Difficulty",
    "calculate_miss_limit",
    "ComputerSetup",
    "OpponentSetupData",
    "GameSnapshot",
    "build_snapshot",
    "GuessProcessor",
    "GuessResult",
    "GameOutcome",
    "check_lose",
    "check_win",
    "evaluate_outcome",
    "TurnTracker",
]
