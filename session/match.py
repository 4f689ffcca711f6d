"""
Headless turn loop for one game between the local player and an opponent.

The loop owns both sides' guess state and is the only caller of the guess
processors. The opponent is driven through its contract only, so a computer
opponent and a remote player are handled by the same code.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Union
import logging
import threading

from agents.opponents.base_opponent import BaseOpponent, OpponentEvent
from core.difficulty import calculate_miss_limit
from core.grid import TargetGrid
from core.guess_processor import GuessProcessor, GuessResult
from core.guess_state import GuessState
from core.setup import OpponentSetupData
from core.snapshot import GameSnapshot, build_snapshot
from core.turns import TurnTracker
from core.win_checker import GameOutcome, evaluate_outcome
from network.params import SessionParams
from network.poller import Poller
from network.snapshot import PLAYER1, GameplayState, build_gameplay_state, other_player
from network.synchronizer import StateSynchronizer
from session.game_session import EndReason, GameEndResult, GameSession, SessionEvent
from utils.wordlist import WordBank

logger = logging.getLogger(__name__)

# Consecutive rejected guesses tolerated from the computer opponent in one turn
MAX_OPPONENT_RETRIES = 3


@dataclass(frozen=True)
class MoveRecord:
    """
    One processed or rejected guess.

    Attributes:
        side: TurnTracker.PLAYER or TurnTracker.OPPONENT
        kind: "letter", "coordinate" or "word"
        value: Letter, (row, col) or (word, row)
        result: GuessResult
    """
    side: int
    kind: str
    value: Union[str, tuple]
    result: GuessResult


class Match:
    """
    Runs a game: player guesses come in through guess_*(), opponent guesses
    arrive as opponent events.

    After every processed guess the mover's side is evaluated, lose before
    win. ALREADY_GUESSED and INVALID_WORD keep the turn; any other processed
    guess passes it. Guesses out of turn are rejected with TURN_VIOLATION and
    change nothing.

    Attributes:
        player_setup: Local player's setup (the grid the opponent attacks)
        opponent: Opponent for this game
        word_bank: Bank used to validate word guesses
        session: Optional GameSession deciding forfeits
        synchronizer: Optional StateSynchronizer publishing player progress
        turns: TurnTracker
        player_state: Local player's progress against the opponent's grid
        opponent_state: Opponent's progress against the local grid
        history: Every guess attempt, in order
        result: GameEndResult once the game has ended
    """

    def __init__(
        self,
        player_setup: OpponentSetupData,
        opponent: BaseOpponent,
        word_bank: Optional[WordBank] = None,
        session: Optional[GameSession] = None,
        synchronizer: Optional[StateSynchronizer] = None
    ):
        self.player_setup = player_setup
        self.opponent = opponent
        self.word_bank = word_bank
        self.session = session
        self.synchronizer = synchronizer
        self.local_key = session.local_key if session is not None else (
            synchronizer.local_key if synchronizer is not None else PLAYER1
        )

        self.turns = TurnTracker()
        self.player_state = GuessState()
        self.opponent_state = GuessState()
        self.player_target: Optional[TargetGrid] = None
        self.opponent_target: Optional[TargetGrid] = None
        self.player_processor: Optional[GuessProcessor] = None
        self.opponent_processor: Optional[GuessProcessor] = None

        self.history: list[MoveRecord] = []
        self.result: Optional[GameEndResult] = None
        self._published: Optional[GameplayState] = None
        self._unpublished: Optional[tuple[GameplayState, str]] = None
        self._opponent_retries = 0
        self._ended_listeners: list[Callable[[GameEndResult], None]] = []
        self._lock = threading.RLock()
        self._poller: Optional[Poller] = None

        opponent.subscribe(OpponentEvent.LETTER_GUESSED, self._on_opponent_letter)
        opponent.subscribe(OpponentEvent.COORDINATE_GUESSED, self._on_opponent_coordinate)
        opponent.subscribe(OpponentEvent.WORD_GUESSED, self._on_opponent_word)
        opponent.subscribe(OpponentEvent.THINKING_COMPLETE, self._on_opponent_thinking_complete)
        opponent.subscribe(OpponentEvent.GAME_OVER, self._on_opponent_game_over)
        if session is not None:
            session.subscribe(SessionEvent.ENDED, self._on_session_ended)

    @property
    def is_over(self) -> bool:
        return self.result is not None

    @property
    def is_player_turn(self) -> bool:
        return self.turns.can_take_action(TurnTracker.PLAYER)

    def on_ended(self, callback: Callable[[GameEndResult], None]) -> None:
        self._ended_listeners.append(callback)

    def start(self, first_player: int = TurnTracker.PLAYER) -> None:
        """
        Build both grids, compute miss limits and begin the first turn.

        Raises:
            ValueError: If the opponent's setup is not available yet
        """
        if not self.opponent.is_ready:
            raise ValueError("Opponent setup is not available yet")

        self.opponent_target = TargetGrid(self.opponent.grid_size, self.opponent.placements)
        self.player_target = TargetGrid(self.player_setup.grid_size, self.player_setup.placements)
        self.player_processor = GuessProcessor(self.opponent_target, self.player_state, self.word_bank, name="player")
        # Remote word guesses arrive already judged, so only the computer's are validated
        opponent_bank = self.word_bank if self.opponent.is_ai else None
        self.opponent_processor = GuessProcessor(
            self.player_target, self.opponent_state, opponent_bank, name=self.opponent.name or "opponent"
        )
        self._reset_sides()
        self.turns.start(first_player)
        logger.info(
            f"Match started: player miss limit {self.player_state.miss_limit}, "
            f"opponent miss limit {self.opponent_state.miss_limit}, first {first_player}"
        )
        if first_player == TurnTracker.OPPONENT:
            self._begin_opponent_turn()

    def _reset_sides(self) -> None:
        player_limit = calculate_miss_limit(
            self.opponent.grid_size, self.opponent.word_count, self.player_setup.difficulty
        )
        self.player_processor.reset(player_limit)
        self.opponent_processor.reset(self.opponent.miss_limit)
        self.history.clear()
        self.result = None
        self._published = None
        self._unpublished = None
        self._opponent_retries = 0

    def reset(self, first_player: int = TurnTracker.PLAYER) -> None:
        """Rematch with the same setups; miss limits are recomputed."""
        if self.session is not None and self.session.is_ended:
            logger.warning("Rematch requested after the session ended; the opponent is disposed")
        self.turns.stop()
        self.opponent.reset()
        self.start(first_player)

    def update(self, now: Optional[float] = None) -> None:
        """Tick the opponent and the session; retry an unpublished push."""
        with self._lock:
            if self._unpublished is not None and not self.is_over:
                self._publish(*self._unpublished)
            self.opponent.update(now)
            if self.session is not None:
                self.session.update(now)

    def start_polling(self, interval: Optional[float] = None) -> Poller:
        """
        Tick update() from a background thread until the match ends.

        Player guesses and forfeits take the same lock as the ticks, so they
        may be called from the caller's thread while polling runs.

        Args:
            interval: Seconds between ticks (session poll interval if None)

        Returns:
            The started Poller
        """
        if self._poller is not None and not self._poller.stopped:
            return self._poller
        if interval is None:
            params = self.session.params if self.session is not None else SessionParams()
            interval = params.poll_interval
        self._poller = Poller(self.update, interval, name="match-poller")
        self._poller.start()
        return self._poller

    def stop_polling(self, timeout: Optional[float] = None) -> None:
        if self._poller is not None:
            self._poller.stop(timeout)

    def snapshot_for_opponent(self) -> GameSnapshot:
        return build_snapshot(self.player_target, self.opponent_state)

    def snapshot_for_player(self) -> GameSnapshot:
        return build_snapshot(self.opponent_target, self.player_state)

    def guess_letter(self, letter: str) -> GuessResult:
        return self._player_guess("letter", letter, lambda: self.player_processor.process_letter(letter))

    def guess_coordinate(self, row: int, col: int) -> GuessResult:
        return self._player_guess(
            "coordinate", (row, col), lambda: self.player_processor.process_coordinate(row, col)
        )

    def guess_word(self, word: str, pattern_index: int) -> GuessResult:
        return self._player_guess(
            "word", (word, pattern_index), lambda: self.player_processor.process_word(word, pattern_index)
        )

    def _player_guess(self, kind: str, value, apply: Callable[[], GuessResult]) -> GuessResult:
        with self._lock:
            return self._apply_player_guess(kind, value, apply)

    def _apply_player_guess(self, kind: str, value, apply: Callable[[], GuessResult]) -> GuessResult:
        if self.is_over or not self.turns.can_take_action(TurnTracker.PLAYER):
            logger.warning(f"Player {kind} guess {value!r} rejected: not the player's turn")
            self.history.append(MoveRecord(TurnTracker.PLAYER, kind, value, GuessResult.TURN_VIOLATION))
            return GuessResult.TURN_VIOLATION

        result = apply()
        self.history.append(MoveRecord(TurnTracker.PLAYER, kind, value, result))
        if not result.ends_turn:
            return result

        self.opponent.record_player_guess(result is GuessResult.HIT)
        outcome = evaluate_outcome(self.player_state, self.opponent_target.placements)
        next_key = self.local_key if outcome is not GameOutcome.NONE else other_player(self.local_key)
        self._publish(build_gameplay_state(self.player_state, self.opponent_target, self._published), next_key)

        if outcome is GameOutcome.LOSE:
            self._finish(EndReason.OPPONENT_WIN)
        elif outcome is GameOutcome.WIN:
            self._finish(EndReason.PLAYER_WIN)
        else:
            self.turns.end_turn()
            self._begin_opponent_turn()
        return result

    def _publish(self, gameplay: GameplayState, next_key: str) -> None:
        if self.synchronizer is None:
            self._published = gameplay
            return
        try:
            self.synchronizer.push_gameplay(gameplay, next_key)
        except ConnectionError as e:
            logger.warning(f"Publishing progress failed, will retry: {e}")
            self._unpublished = (gameplay, next_key)
            return
        self._published = gameplay
        self._unpublished = None

    def _begin_opponent_turn(self) -> None:
        if self.is_over:
            return
        self.opponent.execute_turn(self.snapshot_for_opponent())

    def _opponent_may_act(self, kind: str, value) -> bool:
        if self.is_over or not self.turns.can_take_action(TurnTracker.OPPONENT):
            logger.warning(f"Opponent {kind} guess {value!r} ignored: not the opponent's turn")
            self.history.append(MoveRecord(TurnTracker.OPPONENT, kind, value, GuessResult.TURN_VIOLATION))
            return False
        return True

    def _on_opponent_letter(self, letter: str) -> None:
        if not self._opponent_may_act("letter", letter):
            return
        result = self.opponent_processor.process_letter(letter)
        if result is GuessResult.HIT:
            self.opponent.record_revealed_letter(letter.upper())
        self._after_opponent_guess("letter", letter, result)

    def _on_opponent_coordinate(self, row: int, col: int) -> None:
        if not self._opponent_may_act("coordinate", (row, col)):
            return
        result = self.opponent_processor.process_coordinate(row, col)
        if result is GuessResult.HIT:
            self.opponent.record_opponent_hit(row, col)
        self._after_opponent_guess("coordinate", (row, col), result)

    def _on_opponent_word(self, word: str, pattern_index: int) -> None:
        if not self._opponent_may_act("word", (word, pattern_index)):
            return
        placements = self.player_target.placements
        if not word and 0 <= pattern_index < len(placements):
            # Remote solves are reported by row only
            word = placements[pattern_index].word
        known_before = set(self.opponent_state.known_letters)
        result = self.opponent_processor.process_word(word, pattern_index)
        if result is GuessResult.HIT:
            placement = placements[pattern_index]
            for row, col in placement.cells:
                self.opponent.record_opponent_hit(row, col)
            for letter in sorted(set(placement.word) - known_before):
                self.opponent.record_revealed_letter(letter)
        self._after_opponent_guess("word", (word, pattern_index), result)

    def _after_opponent_guess(self, kind: str, value, result: GuessResult) -> None:
        self.history.append(MoveRecord(TurnTracker.OPPONENT, kind, value, result))
        if not result.ends_turn:
            self._retry_opponent(result)
            return
        self._opponent_retries = 0
        self.opponent.advance_turn()
        self._finish_opponent_turn()

    def _retry_opponent(self, result: GuessResult) -> None:
        if not self.opponent.is_ai:
            # A remote player keeps the turn until the handoff arrives
            return
        self._opponent_retries += 1
        if self._opponent_retries < MAX_OPPONENT_RETRIES:
            logger.warning(f"{self.opponent.name} guess rejected ({result.value}), asking again")
            self._begin_opponent_turn()
            return
        logger.error(f"{self.opponent.name} made {self._opponent_retries} rejected guesses, passing the turn")
        self._opponent_retries = 0
        self.opponent.advance_turn()
        self.turns.end_turn()

    def _finish_opponent_turn(self) -> None:
        outcome = evaluate_outcome(self.opponent_state, self.player_target.placements)
        if outcome is GameOutcome.LOSE:
            self._finish(EndReason.PLAYER_WIN)
        elif outcome is GameOutcome.WIN:
            self._finish(EndReason.OPPONENT_WIN)
        else:
            self.turns.end_turn()

    def _reconcile_remote_progress(self) -> None:
        """
        Bring the opponent's state up to what the remote player published.

        Only the highest-priority change of a poll becomes a guess event, so
        a word solve usually arrives as a coordinate hit and its row, like a
        silent miss, is applied here.
        """
        placements = self.player_target.placements
        for row in self.opponent.reported_solved_rows:
            if row in self.opponent_state.solved_word_rows or not 0 <= row < len(placements):
                continue
            word = placements[row].word
            result = self.opponent_processor.process_word(word, row)
            self.history.append(MoveRecord(TurnTracker.OPPONENT, "word", (word, row), result))
        reported = self.opponent.reported_misses
        if reported is not None and reported > self.opponent_state.misses:
            self.opponent_state.add_misses(reported - self.opponent_state.misses)

    def _on_opponent_thinking_complete(self) -> None:
        if self.opponent.is_ai or self.is_over:
            return
        self._reconcile_remote_progress()
        if self.turns.can_take_action(TurnTracker.OPPONENT):
            # Handoff without a guess event: the remote player missed
            self.history.append(MoveRecord(TurnTracker.OPPONENT, "miss", "", GuessResult.MISS))
            self.opponent.advance_turn()
            self._finish_opponent_turn()
            return
        outcome = evaluate_outcome(self.opponent_state, self.player_target.placements)
        if outcome is GameOutcome.LOSE:
            self._finish(EndReason.PLAYER_WIN)
        elif outcome is GameOutcome.WIN:
            self._finish(EndReason.OPPONENT_WIN)

    def _on_opponent_game_over(self, winner_key: str) -> None:
        if self.is_over:
            return
        self._reconcile_remote_progress()
        logger.info(f"{self.opponent.name} reported the game over, winner {winner_key}")
        self._finish(EndReason.PLAYER_WIN if winner_key == self.local_key else EndReason.OPPONENT_WIN)

    def forfeit(self) -> Optional[GameEndResult]:
        """The local player gives up."""
        with self._lock:
            if self.is_over:
                return self.result
            if self.session is not None:
                self.session.forfeit()
            else:
                self._finish(EndReason.PLAYER_FORFEIT)
            return self.result

    def _finish(self, reason: EndReason) -> None:
        if self.is_over:
            return
        if self.session is not None:
            # The session's ENDED event records the result
            self.session.end_game(reason)
        else:
            winner = self.local_key if reason.local_player_won else other_player(self.local_key)
            self._record_result(GameEndResult(reason, winner, self.opponent.clock()))

    def _on_session_ended(self, result: GameEndResult) -> None:
        self._record_result(result)

    def _record_result(self, result: GameEndResult) -> None:
        if self.result is not None:
            return
        self.result = result
        self.turns.stop()
        if self._poller is not None:
            # Signal only: a tick may be waiting on the lock held here
            self._poller.stop(timeout=0)
        logger.info(f"Match over: {result.reason.value}")
        if self.synchronizer is not None:
            try:
                if self._unpublished is not None:
                    # The final move goes out before the winner
                    self.synchronizer.push_gameplay(*self._unpublished)
                    self._unpublished = None
                self.synchronizer.set_winner(result.winner_key)
            except ConnectionError as e:
                logger.warning(f"Could not publish the winner: {e}")
        for callback in list(self._ended_listeners):
            callback(result)
