"""
Tests for the in-memory transport, reconnecting subscription, state
synchronizer and poller thread.
"""

import logging
import threading

import pytest

from network.params import SessionParams
from network.poller import Poller
from network.snapshot import PLAYER1, PLAYER2, GameplayState, SessionSnapshot
from network.subscription import ReconnectingSubscription
from network.synchronizer import StateSynchronizer
from network.transport import InMemoryTransport

STAMP = "2024-01-01T00:00:00+00:00"


def make_subscription(transport, **kwargs):
    events = []
    subscription = ReconnectingSubscription(
        transport,
        "s1",
        SessionParams(max_reconnect_attempts=3, reconnect_base_delay=1.0, reconnect_max_delay=30.0),
        clock=lambda: 0.0,
        on_connection_lost=lambda: events.append("lost"),
        on_reconnected=lambda: events.append("reconnected"),
        **kwargs
    )
    return subscription, events


# ============================================================================
# Transport
# ============================================================================

def test_transport_round_trips_through_json():
    """Test fetch returns an equal but distinct snapshot."""
    transport = InMemoryTransport()
    snapshot = SessionSnapshot(status="setup", turn_number=2)
    transport.push_snapshot("s1", snapshot)

    fetched = transport.fetch_snapshot("s1")

    assert fetched == snapshot and fetched is not snapshot
    assert transport.fetch_snapshot("missing") is None


def test_transport_raises_connection_error_when_down():
    """Test every call fails while disconnected."""
    transport = InMemoryTransport()
    transport.set_connected(False)

    with pytest.raises(ConnectionError):
        transport.fetch_snapshot("s1")
    with pytest.raises(ConnectionError):
        transport.push_snapshot("s1", SessionSnapshot())
    with pytest.raises(ConnectionError):
        transport.subscribe("s1")


def test_feed_only_sees_its_session():
    """Test notifications are routed by session and closed feeds detach."""
    transport = InMemoryTransport()
    feed = transport.subscribe("s1")
    transport.push_snapshot("s1", SessionSnapshot(turn_number=1))
    transport.push_snapshot("s2", SessionSnapshot(turn_number=9))

    assert [s.turn_number for s in feed.poll()] == [1]
    assert feed.poll() == []

    feed.close()
    assert transport.feed_count == 0


# ============================================================================
# Reconnecting subscription
# ============================================================================

def test_subscription_delivers_notifications():
    """Test a healthy subscription drains its feed."""
    transport = InMemoryTransport()
    subscription, events = make_subscription(transport)
    assert subscription.connect(0.0)

    transport.push_snapshot("s1", SessionSnapshot(turn_number=3))

    assert [s.turn_number for s in subscription.tick(0.5)] == [3]
    assert subscription.is_connected
    assert events == []


def test_subscription_backs_off_then_gives_up():
    """Test exponential retry timing and the attempt limit."""
    transport = InMemoryTransport()
    subscription, events = make_subscription(transport)
    subscription.connect(0.0)
    transport.set_connected(False)

    subscription.tick(0.0)
    assert events == ["lost"]
    assert not subscription.is_connected

    subscription.tick(0.9)
    assert subscription.attempts == 0
    subscription.tick(1.0)
    assert subscription.attempts == 1
    subscription.tick(2.9)
    assert subscription.attempts == 1
    subscription.tick(3.0)
    assert subscription.attempts == 2
    subscription.tick(7.0)
    assert subscription.attempts == 3
    assert subscription.gave_up

    transport.set_connected(True)
    subscription.tick(100.0)
    assert subscription.attempts == 3
    assert events == ["lost"]


def test_subscription_reconnects():
    """Test a successful attempt resets the attempt count and reports it once."""
    transport = InMemoryTransport()
    subscription, events = make_subscription(transport)
    subscription.connect(0.0)
    transport.set_connected(False)
    subscription.tick(0.0)

    transport.set_connected(True)
    subscription.tick(1.0)

    assert events == ["lost", "reconnected"]
    assert subscription.is_connected
    assert subscription.attempts == 0
    assert transport.feed_count == 1


def test_failed_initial_connect_schedules_retry():
    """Test a subscribe failure at connect time starts loss handling."""
    transport = InMemoryTransport()
    transport.set_connected(False)
    subscription, events = make_subscription(transport)

    assert not subscription.connect(0.0)
    assert events == ["lost"]

    transport.set_connected(True)
    subscription.tick(1.0)
    assert subscription.is_connected


def test_closed_subscription_is_inert():
    """Test close detaches the feed and stops delivery."""
    transport = InMemoryTransport()
    subscription, _ = make_subscription(transport)
    subscription.connect(0.0)

    subscription.close()
    transport.push_snapshot("s1", SessionSnapshot(turn_number=1))

    assert subscription.is_closed
    assert subscription.tick(1.0) == []
    assert not subscription.connect(1.0)
    assert transport.feed_count == 0


# ============================================================================
# State synchronizer
# ============================================================================

def test_setup_moves_session_to_playing(player_setup, opponent_setup):
    """Test the session starts once both players publish setups."""
    transport = InMemoryTransport()
    host = StateSynchronizer(transport, "s1", PLAYER1, timestamp=lambda: STAMP)
    guest = StateSynchronizer(transport, "s1", PLAYER2, timestamp=lambda: STAMP)

    first = host.push_setup(player_setup)
    assert first.status == "setup"
    assert first.created_at == STAMP

    second = guest.push_setup(opponent_setup)
    assert second.status == "playing"
    assert second.current_turn == PLAYER1
    assert second.player1.setup.grid_size == 8
    assert second.player2.name == "Opponent"
    assert second.player2.last_activity_at == STAMP


def test_accept_filters_stale_and_own_snapshots():
    """Test only snapshots newer than the last synced turn pass."""
    transport = InMemoryTransport()
    host = StateSynchronizer(transport, "s1", PLAYER1)
    guest = StateSynchronizer(transport, "s1", PLAYER2)

    pushed = host.push_gameplay(GameplayState(misses=1), PLAYER2)

    assert pushed.turn_number == 1
    assert not host.accept(host.fetch())
    assert guest.accept(guest.fetch())
    assert not guest.accept(guest.fetch())
    assert guest.last_synced_turn == 1


def test_push_gameplay_increments_turn():
    """Test each push bumps the turn counter and sets the turn marker."""
    transport = InMemoryTransport()
    host = StateSynchronizer(transport, "s1", PLAYER1)
    guest = StateSynchronizer(transport, "s1", PLAYER2)

    host.push_gameplay(GameplayState(), PLAYER2)
    snapshot = guest.push_gameplay(GameplayState(misses=2), PLAYER1)

    assert snapshot.turn_number == 2
    assert snapshot.current_turn == PLAYER1
    assert transport.fetch_snapshot("s1").player2.gameplay.misses == 2
    with pytest.raises(ValueError):
        host.push_gameplay(GameplayState(), "nobody")


def test_set_winner_completes_session():
    """Test recording the winner closes the session."""
    transport = InMemoryTransport()
    host = StateSynchronizer(transport, "s1", PLAYER1)

    host.set_winner(PLAYER2)

    stored = transport.fetch_snapshot("s1")
    assert stored.status == "completed" and stored.winner == PLAYER2


def test_rematch_push_reopens_session():
    """Test the first gameplay push after completion clears the winner."""
    transport = InMemoryTransport()
    host = StateSynchronizer(transport, "s1", PLAYER1)
    host.set_winner(PLAYER2)

    snapshot = host.push_gameplay(GameplayState(), PLAYER2)

    assert snapshot.status == "playing"
    assert snapshot.winner is None


def test_synchronizer_rejects_unknown_key():
    """Test the local key is validated."""
    with pytest.raises(ValueError):
        StateSynchronizer(InMemoryTransport(), "s1", "player3")


# ============================================================================
# Poller
# ============================================================================

def test_poller_ticks_until_stopped():
    """Test the thread ticks repeatedly and stops cleanly."""
    ticked = threading.Event()
    count = []

    def tick():
        count.append(1)
        if len(count) >= 2:
            ticked.set()

    poller = Poller(tick, interval=0.01)
    poller.start()
    assert ticked.wait(timeout=5.0)

    poller.stop(timeout=5.0)

    assert poller.stopped
    assert not poller.is_alive()
    assert poller.daemon


def test_poller_rejects_bad_interval():
    """Test a non-positive interval is rejected."""
    with pytest.raises(ValueError):
        Poller(lambda: None, interval=0)


def test_poller_survives_failing_tick(caplog):
    """Test an exception in one tick is logged and later ticks still run."""
    calls = []
    recovered = threading.Event()

    def tick():
        calls.append(1)
        if len(calls) == 1:
            raise RuntimeError("transport exploded")
        recovered.set()

    poller = Poller(tick, interval=0.01)
    with caplog.at_level(logging.ERROR, logger="network.poller"):
        poller.start()
        assert recovered.wait(timeout=5.0)
        poller.stop(timeout=5.0)

    assert "tick failed" in caplog.text
    assert not poller.is_alive()
