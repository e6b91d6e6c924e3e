"""
Learning session tracker

Idle -> Active(node_id, start_time) -> Idle. Duration comes from the wall
clock read at start and end; nothing runs while a session is active.
"""
import math
from typing import Callable, Optional

from loguru import logger

from lucid.models import IDLE, ActiveSession, LearningRecord, Session, utcnow
from lucid.models.base import clamp_percent

SESSION_TOPIC = "Learning Session"
SESSION_TYPE = "session"


class SessionTracker:
    def __init__(self, clock: Optional[Callable] = None):
        self.clock = clock or utcnow
        self._session: Session = IDLE

    @property
    def current(self) -> Session:
        return self._session

    @property
    def is_active(self) -> bool:
        return self._session.active

    def start(self, node_id: str) -> ActiveSession:
        """Begin a session; an active one is discarded without a record"""
        if isinstance(self._session, ActiveSession):
            logger.info(
                f"Discarding unfinished session on node {self._session.node_id} "
                f"({self._session.interruptions} interruptions)"
            )
        self._session = ActiveSession(node_id=node_id, start_time=self.clock())
        return self._session

    def update_focus(self, level: float) -> bool:
        """Set the focus level; returns False when idle"""
        if not isinstance(self._session, ActiveSession):
            return False
        self._session = ActiveSession(
            node_id=self._session.node_id,
            start_time=self._session.start_time,
            focus_level=clamp_percent(level),
            interruptions=self._session.interruptions,
        )
        return True

    def record_interruption(self) -> bool:
        if not isinstance(self._session, ActiveSession):
            return False
        self._session = ActiveSession(
            node_id=self._session.node_id,
            start_time=self._session.start_time,
            focus_level=self._session.focus_level,
            interruptions=self._session.interruptions + 1,
        )
        return True

    def end(self) -> Optional[LearningRecord]:
        """
        Finish the active session and return to idle

        Returns:
            The "read" record describing the session, or None when idle
        """
        session = self._session
        if not isinstance(session, ActiveSession):
            return None

        self._session = IDLE
        now = self.clock()
        elapsed = (now - session.start_time).total_seconds()
        duration = max(0, math.floor(elapsed / 60))

        return LearningRecord(
            node_id=session.node_id,
            action="read",
            duration=duration,
            timestamp=now,
            date=now,
            topic=SESSION_TOPIC,
            type=SESSION_TYPE,
            focus_level=session.focus_level,
            interruptions=session.interruptions,
        )
