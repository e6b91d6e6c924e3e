"""
Data models for the user profile
"""
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from .base import new_id, utcnow

Theme = Literal["light", "dark", "auto"]


class Preferences(BaseModel):
    theme: Theme = "dark"
    language: str = "zh-CN"
    notifications: bool = True
    auto_save: bool = True
    visual_effects: bool = True


class UserStats(BaseModel):
    """Denormalized counters kept in step with the collections"""
    total_nodes: int = Field(default=0, ge=0)
    total_learning_time: int = Field(default=0, ge=0, description="Total learning time in seconds")
    streak_days: int = Field(default=0, ge=0)
    skills_count: int = Field(default=0, ge=0)
    achievements_count: int = Field(default=0, ge=0)


class UserProfile(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str
    avatar: str = ""
    bio: str = ""
    email: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    github: Optional[str] = None
    twitter: Optional[str] = None
    linkedin: Optional[str] = None
    joined_at: datetime = Field(default_factory=utcnow)
    created_at: datetime = Field(default_factory=utcnow)
    preferences: Preferences = Field(default_factory=Preferences)
    stats: UserStats = Field(default_factory=UserStats)

    def with_stats(self, **changes) -> "UserProfile":
        """Return a copy with the given stats counters replaced"""
        return self.model_copy(update={"stats": self.stats.model_copy(update=changes)})
