from __future__ import annotations

import asyncio

from lucid.models import IDLE, ErrorKind, LearningRecord, ServiceResponse, UserProfile


class RecordingLearning:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.records = []

    async def get_records(self):
        return ServiceResponse.ok(list(self.records))

    async def add_record(self, record):
        await asyncio.sleep(0)
        if self.fail:
            return ServiceResponse.fail("learning service unavailable")
        self.records.append(record)
        return ServiceResponse.ok(record)


def test_end_without_session_is_a_noop(store, services) -> None:
    services.learning = RecordingLearning()

    assert asyncio.run(store.end_learning_session()) is None
    assert services.learning.records == []
    assert store.current_session is IDLE


def test_session_round_trip_records_duration(store, services, clock) -> None:
    services.learning = RecordingLearning()
    store.set_user(UserProfile(id="u1", name="Ada"))

    store.start_learning_session("node-1")
    store.update_session_focus(70)
    store.add_interruption()
    clock.advance(minutes=30, seconds=20)
    result = asyncio.run(store.end_learning_session())

    assert result.success
    record = result.data
    assert record.duration == 30
    assert record.action == "read"
    assert record.focus_level == 70
    assert record.interruptions == 1
    assert store.learning_records == [record]
    assert services.learning.records == [record]
    assert store.user.stats.total_learning_time == 30 * 60
    assert store.current_session is IDLE


def test_failed_submission_loses_record_but_returns_to_idle(store, services, clock) -> None:
    services.learning = RecordingLearning(fail=True)

    store.start_learning_session("node-1")
    clock.advance(minutes=5)
    result = asyncio.run(store.end_learning_session())

    assert result.success is False
    assert result.kind is ErrorKind.SERVICE_FAILURE
    assert store.error == "learning service unavailable"
    assert store.current_session is IDLE
    assert store.learning_records == []


def test_session_started_during_submission_is_kept(store, services) -> None:
    services.learning = RecordingLearning()
    store.start_learning_session("first")

    async def scenario():
        ending = asyncio.create_task(store.end_learning_session())
        await asyncio.sleep(0)
        store.start_learning_session("second")
        return await ending

    result = asyncio.run(scenario())

    assert result.success
    assert store.current_session.node_id == "second"


def test_focus_commands_are_ignored_when_idle(store) -> None:
    calls = []
    store.subscribe(lambda s, changed: calls.append(changed))

    store.update_session_focus(10)
    store.add_interruption()

    assert calls == []
    assert store.current_session is IDLE


def test_add_learning_record_validates_input(store) -> None:
    result = asyncio.run(store.add_learning_record({"duration": -3}))

    assert result.kind is ErrorKind.VALIDATION_FAILURE
    assert store.learning_records == []


def test_add_and_load_learning_records(store, services) -> None:
    services.learning = RecordingLearning()
    record = LearningRecord(node_id="n1", action="review", duration=12)

    asyncio.run(store.add_learning_record(record))
    assert store.learning_records == [record]

    store.collections["learning_records"].reset([])
    result = asyncio.run(store.load_learning_records())

    assert result.success
    assert store.learning_records == [record]
