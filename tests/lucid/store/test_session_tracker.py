from __future__ import annotations

from lucid.models import IDLE, ActiveSession
from lucid.store import SessionTracker


def test_end_without_session_returns_none(clock) -> None:
    tracker = SessionTracker(clock)

    assert tracker.end() is None
    assert tracker.current is IDLE


def test_duration_is_whole_minutes_rounded_down(clock) -> None:
    tracker = SessionTracker(clock)
    tracker.start("node-1")
    clock.advance(minutes=25, seconds=59)

    record = tracker.end()

    assert record.duration == 25
    assert record.action == "read"
    assert record.node_id == "node-1"
    assert record.topic == "Learning Session"
    assert record.type == "session"
    assert tracker.current is IDLE


def test_clock_going_backwards_gives_zero_duration(clock) -> None:
    tracker = SessionTracker(clock)
    tracker.start("node-1")
    clock.advance(minutes=-5)

    assert tracker.end().duration == 0


def test_focus_and_interruptions_only_apply_while_active(clock) -> None:
    tracker = SessionTracker(clock)
    assert tracker.update_focus(40) is False
    assert tracker.record_interruption() is False

    tracker.start("node-1")
    assert tracker.update_focus(140) is True
    tracker.record_interruption()
    tracker.record_interruption()

    session = tracker.current
    assert isinstance(session, ActiveSession)
    assert session.focus_level == 100
    assert session.interruptions == 2

    record = tracker.end()
    assert record.focus_level == 100
    assert record.interruptions == 2


def test_start_while_active_discards_previous_session(clock) -> None:
    tracker = SessionTracker(clock)
    tracker.start("first")
    tracker.record_interruption()
    clock.advance(minutes=10)

    tracker.start("second")

    assert tracker.current.node_id == "second"
    assert tracker.current.interruptions == 0
    assert tracker.current.focus_level == 100
    assert tracker.current.start_time == clock.now
