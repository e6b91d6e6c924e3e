"""
Data models module
"""
from .analytics import DailyStat, LearningReport, LearningStats, MonthlyStat, WeeklyStat
from .base import merge_fields, new_id, utcnow
from .files import FileUpload, ImportResult, UploadProgress
from .knowledge import KnowledgeNode, NodeMetadata, Position, SearchResult
from .learning import Achievement, LearningRecord, Requirement, Skill
from .result import ErrorKind, Failure, Result, ServiceResponse, Success
from .session import IDLE, ActiveSession, IdleSession, Session
from .user import Preferences, UserProfile, UserStats

__all__ = [
    "Achievement",
    "ActiveSession",
    "DailyStat",
    "ErrorKind",
    "Failure",
    "FileUpload",
    "IDLE",
    "IdleSession",
    "ImportResult",
    "KnowledgeNode",
    "LearningRecord",
    "LearningReport",
    "LearningStats",
    "MonthlyStat",
    "NodeMetadata",
    "Position",
    "Preferences",
    "Requirement",
    "Result",
    "SearchResult",
    "ServiceResponse",
    "Session",
    "Skill",
    "Success",
    "UploadProgress",
    "UserProfile",
    "UserStats",
    "WeeklyStat",
    "merge_fields",
    "new_id",
    "utcnow",
]
