"""
Remote human opponent driven through session snapshots.
"""

from __future__ import annotations

from typing import Callable, Optional
import logging

from agents.opponents.base_opponent import BaseOpponent, OpponentEvent
from core.difficulty import Difficulty, calculate_miss_limit
from core.setup import OpponentSetupData
from core.snapshot import GameSnapshot
from network.detector import DetectedActionType, Observation, TurnChangeDetector
from network.params import SessionParams
from network.snapshot import SessionSnapshot, decode_placements, other_player
from network.subscription import ReconnectingSubscription
from network.synchronizer import StateSynchronizer
from network.transport import BaseTransport

logger = logging.getLogger(__name__)


class RemoteOpponent(BaseOpponent):
    """
    Opponent whose moves are made by another player elsewhere.

    It never decides anything. initialize() publishes the local setup and
    waits for the other player's; execute_turn() starts waiting for their
    move; update() fetches snapshots at the poll interval and lets the
    TurnChangeDetector work out what happened. The same guess events as the
    local opponent are emitted, so the turn loop cannot tell them apart.

    A silent miss emits no guess event; the published miss count is exposed
    through reported_misses for the turn loop to reconcile. Rows solved by
    word guesses are exposed the same way through reported_solved_rows. A
    winner written to the session by either side is reported once as
    GAME_OVER.

    Attributes:
        params: SessionParams (poll interval and wait ceilings)
        synchronizer: Session read/write access for the local player
        detector: Turn-change detector for the other player's progress
        subscription: Change feed with reconnect handling
    """

    is_ai = False

    def __init__(
        self,
        transport: BaseTransport,
        session_id: str,
        local_key: str,
        params: Optional[SessionParams] = None,
        clock: Optional[Callable[[], float]] = None
    ):
        """
        Initialize remote opponent.

        Args:
            transport: Remote data store
            session_id: Shared session identifier
            local_key: Local player's key ("player1" or "player2")
            params: SessionParams (defaults if None)
            clock: Monotonic time source
        """
        super().__init__(clock)
        self.params = params if params is not None else SessionParams()
        self.local_key = local_key
        self.opponent_key = other_player(local_key)
        self.synchronizer = StateSynchronizer(transport, session_id, local_key)
        self.detector = TurnChangeDetector(local_key)
        self.subscription = ReconnectingSubscription(
            transport,
            session_id,
            self.params,
            clock=self.clock,
            on_connection_lost=self._on_connection_lost,
            on_reconnected=self._on_reconnected,
        )

        self._local_setup: Optional[OpponentSetupData] = None
        self._setup_published = False
        self._setup_deadline: Optional[float] = None
        self._waiting_since: Optional[float] = None
        self._next_poll_at = 0.0
        self._seen_winner: Optional[str] = None

    @property
    def session_id(self) -> str:
        return self.synchronizer.session_id

    @property
    def is_connected(self) -> bool:
        return self.subscription.is_connected

    @property
    def is_thinking(self) -> bool:
        return self.detector.is_waiting

    @property
    def is_waiting_for_setup(self) -> bool:
        return self._setup_deadline is not None

    @property
    def reported_misses(self) -> Optional[int]:
        """Miss count the other player last published, if any."""
        if self.detector.last_seen is None:
            return None
        return self.detector.last_seen.misses

    @property
    def reported_solved_rows(self) -> tuple[int, ...]:
        """Word rows the other player last published as solved."""
        if self.detector.last_seen is None:
            return ()
        return tuple(self.detector.last_seen.solved_word_rows)

    def initialize(self, local_setup: OpponentSetupData, now: Optional[float] = None) -> None:
        now = self._now(now)
        self._local_setup = local_setup
        self._setup_deadline = now + self.params.setup_wait
        self._publish_setup()
        self.subscription.connect(now)
        self._poll(now)

    def _publish_setup(self) -> None:
        try:
            self.synchronizer.push_setup(self._local_setup)
        except ConnectionError as e:
            logger.warning(f"Could not publish setup to {self.session_id}: {e}")
            return
        self._setup_published = True

    def execute_turn(self, snapshot: GameSnapshot) -> None:
        if self._disposed:
            return
        if self.detector.is_waiting:
            logger.warning(f"{self.name} is already being waited on, ignoring execute_turn")
            return
        self.detector.begin_waiting()
        self._waiting_since = self.clock()
        self._next_poll_at = 0.0
        self._emit(OpponentEvent.THINKING_STARTED)

    def update(self, now: Optional[float] = None) -> None:
        """
        Tick the subscription, poll when due and enforce wait ceilings.

        Args:
            now: Current monotonic time (clock() if None)
        """
        if self._disposed:
            return
        now = self._now(now)

        for snapshot in self.subscription.tick(now):
            self._process(snapshot)
            if self._disposed:
                return

        if self._local_setup is not None and not self._setup_published and self.is_connected:
            self._publish_setup()

        if now >= self._next_poll_at:
            self._poll(now)
            if self._disposed:
                return

        if self._setup_deadline is not None and now >= self._setup_deadline:
            self._setup_deadline = None
            logger.warning(f"Timed out waiting for {self.opponent_key} setup in {self.session_id}")
            self._emit(OpponentEvent.TIMEOUT)

        if self._waiting_since is not None and now - self._waiting_since >= self.params.max_wait:
            self._waiting_since = None
            self.detector.stop_waiting()
            logger.warning(f"Timed out waiting for {self.name}'s turn after {self.params.max_wait}s")
            self._emit(OpponentEvent.TIMEOUT)

    def _poll(self, now: float) -> None:
        self._next_poll_at = now + self.params.poll_interval
        try:
            snapshot = self.synchronizer.fetch()
        except ConnectionError as e:
            logger.debug(f"Fetch of {self.session_id} failed: {e}")
            return
        if snapshot is not None:
            self._process(snapshot)

    def _process(self, snapshot: SessionSnapshot) -> None:
        if self._setup is None:
            if not self._discover_setup(snapshot):
                return
        if self.detector.last_seen is None:
            self.detector.prime(snapshot)
            self.synchronizer.mark_synced(snapshot)
            self._seen_winner = snapshot.winner
            return
        if self.synchronizer.accept(snapshot):
            self._handle(self.detector.observe(snapshot))
            if self._disposed:
                return
        self._check_winner(snapshot)

    def _check_winner(self, snapshot: SessionSnapshot) -> None:
        """
        Report a newly published winner once.

        The winner write does not advance the turn counter, so it is read
        from every snapshot, accepted or not. A winner left over from the
        previous game is cleared by the next gameplay push.
        """
        previous, self._seen_winner = self._seen_winner, snapshot.winner
        if snapshot.winner is None or previous is not None:
            return
        self._waiting_since = None
        self.detector.stop_waiting()
        logger.info(f"Session {self.session_id} completed, winner {snapshot.winner}")
        self._emit(OpponentEvent.GAME_OVER, snapshot.winner)

    def _discover_setup(self, snapshot: SessionSnapshot) -> bool:
        slot = snapshot.player(self.opponent_key)
        if not slot.setup_complete or slot.setup is None:
            return False
        try:
            placements = decode_placements(slot.setup.placements_encoded, slot.setup.grid_size)
            self._setup = OpponentSetupData(
                name=slot.name or self.opponent_key,
                color=slot.color,
                grid_size=slot.setup.grid_size,
                word_count=slot.setup.word_count,
                difficulty=Difficulty.parse(slot.setup.difficulty),
                word_lengths=tuple(len(p.word) for p in placements),
                placements=tuple(placements),
            )
        except ValueError as e:
            logger.error(f"Unusable setup from {self.opponent_key} in {self.session_id}: {e}")
            return False

        published = slot.gameplay.miss_limit if slot.gameplay is not None else 0
        if published > 0:
            self._miss_limit = published
        else:
            local = self._local_setup
            self._miss_limit = calculate_miss_limit(local.grid_size, local.word_count, local.difficulty.inverse())
        self._setup_deadline = None
        logger.info(
            f"{self.name} ready: {self.grid_size}x{self.grid_size}, {self.word_count} words, "
            f"miss limit {self._miss_limit}"
        )
        return True

    def _handle(self, observation: Observation) -> None:
        action = observation.action
        if action.action_type is DetectedActionType.COORDINATE:
            self._emit(OpponentEvent.COORDINATE_GUESSED, action.row, action.col)
        elif action.action_type is DetectedActionType.LETTER:
            self._emit(OpponentEvent.LETTER_GUESSED, action.letter)
        elif action.action_type is DetectedActionType.WORD:
            # Word text is not disclosed until the game ends
            self._emit(OpponentEvent.WORD_GUESSED, "", action.word_row)
        elif action.action_type is DetectedActionType.SILENT_MISS:
            logger.debug(f"{self.name} missed (misses now {self.reported_misses})")

        if observation.turn_handed_off:
            self._waiting_since = None
            self._emit(OpponentEvent.THINKING_COMPLETE)

    def _on_connection_lost(self) -> None:
        self._emit(OpponentEvent.DISCONNECTED)

    def _on_reconnected(self) -> None:
        self._next_poll_at = 0.0
        self._emit(OpponentEvent.RECONNECTED)

    def reset(self) -> None:
        self._waiting_since = None
        self.detector.reset()
        self._next_poll_at = 0.0

    def debug_summary(self) -> str:
        return (
            f"RemoteOpponent(name={self.name!r}, session={self.session_id}, "
            f"connected={self.is_connected}, state={self.detector.state.value}, "
            f"synced_turn={self.synchronizer.last_synced_turn})"
        )

    def dispose(self) -> None:
        self._waiting_since = None
        self._setup_deadline = None
        self.detector.stop_waiting()
        self.subscription.close()
        super().dispose()
