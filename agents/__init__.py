"""
Agents package for Word Duel.

This package provides the computer opponent's decision making and the
opponent contract the turn loop plays against.

Modules:
    strategies: Letter, coordinate and word guess strategies
    executioner: Decision engine combining the strategies
    difficulty_adapter: Rubber-banding of the computer opponent's skill
    memory: Skill-based forgetting of earlier discoveries
    opponents: Local (computer) and remote (human) opponents
"""

from agents.params import ExecutionerParams, SkillTable, StrategyWeightTable, ThresholdCurve
from agents.strategies import (
    CoordinateGuessStrategy,
    GuessRecommendation,
    GuessType,
    LetterGuessStrategy,
    WordGuessStrategy,
)
from agents.difficulty_adapter import DifficultyAdapter
from agents.memory import MemoryManager
from agents.executioner import Executioner
from agents.opponents import (
    BaseOpponent,
    GameMode,
    LocalOpponent,
    OpponentEvent,
    RemoteOpponent,
    create_opponent,
)

__all__ = [
    "ExecutionerParams",
    "SkillTable",
    "StrategyWeightTable",
    "ThresholdCurve",
    "CoordinateGuessStrategy",
    "GuessRecommendation",
    "GuessType",
    "LetterGuessStrategy",
    "WordGuessStrategy",
    "DifficultyAdapter",
    "MemoryManager",
    "Executioner",
    "BaseOpponent",
    "GameMode",
    "LocalOpponent",
    "OpponentEvent",
    "RemoteOpponent",
    "create_opponent",
]
