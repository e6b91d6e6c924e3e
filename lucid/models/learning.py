"""
Data models for learning records, skills and achievements
"""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from .base import clamp_percent, new_id, unique, utcnow

RecordAction = Literal["create", "read", "edit", "review"]
AchievementType = Literal["learning", "consistency", "milestone", "social"]


class LearningRecord(BaseModel):
    """One tracked interaction with a knowledge node"""
    id: str = Field(default_factory=new_id)
    node_id: str
    action: RecordAction = "read"
    duration: int = Field(default=0, ge=0, description="Duration in minutes")
    timestamp: datetime = Field(default_factory=utcnow)
    date: datetime = Field(default_factory=utcnow)
    topic: str = ""
    type: str = ""
    content: Optional[str] = None
    focus_level: float = Field(default=100.0, description="Focus level from 0 to 100")
    interruptions: int = Field(default=0, ge=0)
    notes: Optional[str] = None

    @field_validator("focus_level")
    @classmethod
    def _clamp_focus(cls, value: float) -> float:
        return clamp_percent(value)


class Skill(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str
    category: Optional[str] = None
    level: float = 0.0
    progress: float = 0.0
    experience: int = Field(default=0, ge=0)
    last_practiced: datetime = Field(default_factory=utcnow)
    related_nodes: List[str] = Field(default_factory=list)
    color: str = "#6366f1"

    @field_validator("level", "progress")
    @classmethod
    def _clamp(cls, value: float) -> float:
        return clamp_percent(value)

    @field_validator("related_nodes")
    @classmethod
    def _unique_nodes(cls, value: List[str]) -> List[str]:
        return unique(value)


class Requirement(BaseModel):
    type: str
    target: float
    current: float = 0.0


class Achievement(BaseModel):
    id: str = Field(default_factory=new_id)
    title: str
    description: str = ""
    icon: str = ""
    type: AchievementType = "learning"
    unlocked_at: Optional[datetime] = None
    progress: float = 0.0
    requirements: List[Requirement] = Field(default_factory=list)

    @field_validator("progress")
    @classmethod
    def _clamp(cls, value: float) -> float:
        return clamp_percent(value)

    @property
    def is_unlocked(self) -> bool:
        return self.unlocked_at is not None

    def unlock(self, at: datetime) -> "Achievement":
        """Return the unlocked copy; an already unlocked achievement is returned unchanged"""
        if self.is_unlocked:
            return self
        return self.model_copy(update={"unlocked_at": at, "progress": 100.0})
