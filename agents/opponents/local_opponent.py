"""
Computer-controlled opponent.
"""

from __future__ import annotations

from typing import Callable, Optional
import logging

from agents.executioner import Executioner
from agents.opponents.base_opponent import BaseOpponent, OpponentEvent
from agents.params import ExecutionerParams
from agents.strategies import GuessRecommendation, GuessType
from core.difficulty import Difficulty, calculate_miss_limit
from core.setup import ComputerSetup, OpponentSetupData
from core.snapshot import GameSnapshot
from utils.wordlist import WordBank

logger = logging.getLogger(__name__)


class LocalOpponent(BaseOpponent):
    """
    Opponent driven by the Executioner decision engine.

    execute_turn() draws a cosmetic think delay. With no delay the decision
    and its guess event happen synchronously; otherwise nothing happens until
    update() is called at or after the due time.

    Attributes:
        executioner: Decision engine
        word_bank: Word bank for setup and scoring
    """

    is_ai = True

    def __init__(
        self,
        player_difficulty: Difficulty,
        word_bank: WordBank,
        params: Optional[ExecutionerParams] = None,
        clock: Optional[Callable[[], float]] = None,
        setup: Optional[OpponentSetupData] = None
    ):
        """
        Initialize local opponent.

        Args:
            player_difficulty: Difficulty chosen by the human player
            word_bank: Word bank for setup and scoring
            params: ExecutionerParams (defaults if None)
            clock: Monotonic time source
            setup: Fixed setup to use instead of generating one
        """
        super().__init__(clock)
        self.word_bank = word_bank
        self.executioner = Executioner(player_difficulty, word_bank, params)
        self._setup_builder = ComputerSetup(word_bank, generator=self.executioner.generator)
        self._fixed_setup = setup
        self._pending: Optional[tuple[float, GameSnapshot]] = None
        self._thinking = False

    @property
    def params(self) -> ExecutionerParams:
        return self.executioner.params

    @property
    def is_connected(self) -> bool:
        return True

    @property
    def is_thinking(self) -> bool:
        return self._thinking

    def initialize(self, local_setup: OpponentSetupData) -> None:
        difficulty = self.executioner.difficulty
        if self._fixed_setup is not None:
            self._setup = self._fixed_setup
        else:
            self._setup = self._setup_builder.generate(difficulty)
        self._miss_limit = calculate_miss_limit(local_setup.grid_size, local_setup.word_count, difficulty)
        logger.info(
            f"{self.name} ready: {self.grid_size}x{self.grid_size}, {self.word_count} words, "
            f"miss limit {self._miss_limit} against {local_setup.name}"
        )

    def execute_turn(self, snapshot: GameSnapshot) -> None:
        if self._disposed:
            return
        if self._thinking:
            logger.warning(f"{self.name} is already thinking, ignoring execute_turn")
            return

        self._thinking = True
        self._emit(OpponentEvent.THINKING_STARTED)

        think_time = self.params.random_think_time(self.executioner.generator)
        if think_time <= 0:
            self._complete(snapshot)
            return
        self._pending = (self.clock() + think_time, snapshot)
        logger.debug(f"{self.name} thinking for {think_time:.1f}s")

    def update(self, now: Optional[float] = None) -> None:
        if self._pending is None or self._disposed:
            return
        due, snapshot = self._pending
        if self._now(now) >= due:
            self._complete(snapshot)

    def _complete(self, snapshot: GameSnapshot) -> None:
        self._pending = None
        try:
            recommendation = self.executioner.decide(snapshot)
        finally:
            self._thinking = False
        self._emit(OpponentEvent.THINKING_COMPLETE)
        self._execute(recommendation)

    def _execute(self, recommendation: GuessRecommendation) -> None:
        if not recommendation.is_valid:
            logger.error(f"{self.name} has no valid guess to make")
            return
        if recommendation.guess_type is GuessType.LETTER:
            self._emit(OpponentEvent.LETTER_GUESSED, recommendation.letter)
        elif recommendation.guess_type is GuessType.COORDINATE:
            self._emit(OpponentEvent.COORDINATE_GUESSED, recommendation.row, recommendation.col)
        else:
            self._emit(OpponentEvent.WORD_GUESSED, recommendation.word, recommendation.pattern_index)

    def record_player_guess(self, was_hit: bool) -> None:
        self.executioner.record_player_guess(was_hit)

    def record_opponent_hit(self, row: int, col: int) -> None:
        self.executioner.record_hit(row, col)

    def record_revealed_letter(self, letter: str) -> None:
        self.executioner.record_revealed_letter(letter)

    def advance_turn(self) -> None:
        self.executioner.advance_turn()

    def reset(self) -> None:
        self._pending = None
        self._thinking = False
        self.executioner.reset()

    def debug_summary(self) -> str:
        return self.executioner.debug_summary()

    def dispose(self) -> None:
        self._pending = None
        self._thinking = False
        super().dispose()
