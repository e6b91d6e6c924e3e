"""
Services module - External service contracts and local implementations
"""
from .analytics import LocalAnalyticsService
from .base import StorageError
from .files import LocalDataService, LocalFileService
from .knowledge import LocalKnowledgeService
from .learning import LocalLearningService, LocalUserService
from .registry import ServiceRegistry, build_services
from .storage import FileStateStorage, JsonFileStorage, MemoryStateStorage, MemoryStorage

__all__ = [
    "LocalAnalyticsService",
    "FileStateStorage",
    "JsonFileStorage",
    "LocalDataService",
    "LocalFileService",
    "LocalKnowledgeService",
    "LocalLearningService",
    "LocalUserService",
    "MemoryStateStorage",
    "MemoryStorage",
    "ServiceRegistry",
    "StorageError",
    "build_services",
]
