from __future__ import annotations

import os
import socket
from datetime import date, datetime, timedelta, timezone
from typing import Any

import pytest

from lucid.services import (
    LocalAnalyticsService,
    LocalDataService,
    LocalFileService,
    LocalKnowledgeService,
    LocalLearningService,
    LocalUserService,
    MemoryStateStorage,
    MemoryStorage,
    ServiceRegistry,
)
from lucid.store import AppStore


class NetworkBlockedError(RuntimeError):
    pass


def _blocked(*_args: Any, **_kwargs: Any) -> Any:
    raise NetworkBlockedError(
        "Network access is disabled during tests. "
        "Mark the test with @pytest.mark.network or set ALLOW_NETWORK=1."
    )


@pytest.fixture(autouse=True)
def _disable_network(monkeypatch: pytest.MonkeyPatch, request: pytest.FixtureRequest) -> None:
    """Prevent accidental outbound network calls in unit tests."""

    if os.getenv("ALLOW_NETWORK") == "1":
        return

    if request.node.get_closest_marker("network"):
        return

    monkeypatch.setattr(socket, "create_connection", _blocked)
    monkeypatch.setattr(socket, "getaddrinfo", _blocked)


class FakeClock:
    """Settable clock for session timing"""

    def __init__(self, start: datetime = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> None:
        self.now += timedelta(**delta)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def services(tmp_path, clock) -> ServiceRegistry:
    return ServiceRegistry(
        knowledge=LocalKnowledgeService(MemoryStorage(), clock),
        learning=LocalLearningService(MemoryStorage()),
        user=LocalUserService(MemoryStorage()),
        files=LocalFileService(tmp_path / "uploads", chunk_size=4),
        data=LocalDataService(tmp_path / "exports"),
        analytics=LocalAnalyticsService(today=lambda: date(2025, 3, 1)),
        skill_storage=MemoryStorage(),
        achievement_storage=MemoryStorage(),
    )


@pytest.fixture()
def state_storage() -> MemoryStateStorage:
    return MemoryStateStorage()


@pytest.fixture()
def store(services, state_storage, clock) -> AppStore:
    return AppStore(services, state_storage, clock=clock)
