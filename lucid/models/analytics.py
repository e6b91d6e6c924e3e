"""
Data models for learning analytics
"""
from typing import Dict, List

from pydantic import BaseModel, Field


class DailyStat(BaseModel):
    date: str
    duration: int = 0
    nodes_created: int = 0
    nodes_reviewed: int = 0
    focus_score: float = 0.0


class WeeklyStat(BaseModel):
    week: str
    total_time: int = 0
    avg_focus: float = 0.0
    sessions: int = 0


class MonthlyStat(BaseModel):
    month: str
    total_time: int = 0
    sessions: int = 0
    knowledge_growth: int = Field(default=0, description="Nodes created in the month")


class LearningStats(BaseModel):
    daily: List[DailyStat] = Field(default_factory=list)
    weekly: List[WeeklyStat] = Field(default_factory=list)
    monthly: List[MonthlyStat] = Field(default_factory=list)


class LearningReport(BaseModel):
    total_sessions: int = 0
    total_minutes: int = 0
    average_focus: float = 0.0
    total_interruptions: int = 0
    streak_days: int = 0
    minutes_by_topic: Dict[str, int] = Field(default_factory=dict)
    most_studied_nodes: List[str] = Field(default_factory=list)
