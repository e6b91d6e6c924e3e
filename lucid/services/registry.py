"""
Service wiring
"""
from dataclasses import dataclass
from typing import Optional

from loguru import logger

from lucid.config import Settings
from lucid.models import Achievement, KnowledgeNode, LearningRecord, Skill, UserProfile
from lucid.services.analytics import LocalAnalyticsService
from lucid.services.base import (
    AnalyticsService,
    DataService,
    FileService,
    KeyValueStorage,
    KnowledgeService,
    LearningService,
    UserService,
)
from lucid.services.files import LocalDataService, LocalFileService
from lucid.services.knowledge import LocalKnowledgeService
from lucid.services.learning import LocalLearningService, LocalUserService
from lucid.services.storage import JsonFileStorage


@dataclass
class ServiceRegistry:
    """Every external collaborator the store talks to"""
    knowledge: KnowledgeService
    learning: LearningService
    user: UserService
    files: FileService
    data: DataService
    analytics: AnalyticsService
    skill_storage: KeyValueStorage[Skill]
    achievement_storage: KeyValueStorage[Achievement]


def build_services(settings: Optional[Settings] = None) -> ServiceRegistry:
    """
    Build the service registry described by the settings

    Args:
        settings: Application settings (if None, will load from environment)

    Returns:
        ServiceRegistry with local services, and Notion for knowledge if configured
    """
    if settings is None:
        from lucid.config import get_settings
        settings = get_settings()

    storage_dir = settings.storage_dir
    if settings.knowledge_backend == "notion":
        from lucid.services.notion_storage import NotionKnowledgeService
        knowledge = NotionKnowledgeService(settings)
    else:
        knowledge = LocalKnowledgeService(JsonFileStorage(storage_dir / "knowledge_nodes.json", KnowledgeNode))

    logger.info(f"Using {settings.knowledge_backend} knowledge backend, data dir: {settings.data_dir}")

    return ServiceRegistry(
        knowledge=knowledge,
        learning=LocalLearningService(JsonFileStorage(storage_dir / "learning_records.json", LearningRecord)),
        user=LocalUserService(JsonFileStorage(storage_dir / "users.json", UserProfile)),
        files=LocalFileService(settings.upload_dir),
        data=LocalDataService(settings.export_dir),
        analytics=LocalAnalyticsService(),
        skill_storage=JsonFileStorage(storage_dir / "skills.json", Skill),
        achievement_storage=JsonFileStorage(storage_dir / "achievements.json", Achievement),
    )
