"""
Learning session states
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Union


@dataclass(frozen=True)
class IdleSession:
    """No session in progress"""

    @property
    def active(self) -> bool:
        return False


@dataclass(frozen=True)
class ActiveSession:
    node_id: str
    start_time: datetime
    focus_level: float = 100.0
    interruptions: int = 0

    @property
    def active(self) -> bool:
        return True


IDLE = IdleSession()

Session = Union[IdleSession, ActiveSession]
