"""
Service contracts the store depends on

Every service method is a coroutine returning a ``ServiceResponse`` envelope,
except key-value storages, which return data directly and raise on failure.
"""
from pathlib import Path
from typing import Any, Callable, List, Mapping, Optional, Protocol, TypeVar

from pydantic import TypeAdapter

from lucid.models import (
    FileUpload,
    ImportResult,
    KnowledgeNode,
    LearningRecord,
    LearningReport,
    LearningStats,
    SearchResult,
    ServiceResponse,
    UploadProgress,
    UserProfile,
)

E = TypeVar("E")

ProgressCallback = Callable[[UploadProgress], None]

_ANY = TypeAdapter(Any)


class StorageError(Exception):
    """Raised by key-value storages when data cannot be read or written"""
    pass


class KeyValueStorage(Protocol[E]):
    async def get_all(self) -> List[E]: ...

    async def get(self, entity_id: str) -> Optional[E]: ...

    async def save(self, entity_id: str, entity: E) -> None: ...

    async def delete(self, entity_id: str) -> bool: ...


class StateStorage(Protocol):
    """Synchronous string key-value store for the persisted state subset"""

    def get_item(self, name: str) -> Optional[str]: ...

    def set_item(self, name: str, value: str) -> None: ...

    def remove_item(self, name: str) -> None: ...


class KnowledgeService(Protocol):
    async def get_nodes(self) -> ServiceResponse[List[KnowledgeNode]]: ...

    async def create_node(self, fields: Mapping[str, Any]) -> ServiceResponse[KnowledgeNode]: ...

    async def update_node(self, node_id: str, fields: Mapping[str, Any]) -> ServiceResponse[KnowledgeNode]: ...

    async def delete_node(self, node_id: str) -> ServiceResponse[None]: ...

    async def search_nodes(self, query: str) -> ServiceResponse[List[SearchResult]]: ...


class LearningService(Protocol):
    async def get_records(self) -> ServiceResponse[List[LearningRecord]]: ...

    async def add_record(self, record: LearningRecord) -> ServiceResponse[LearningRecord]: ...


class UserService(Protocol):
    async def login(self, profile: UserProfile) -> ServiceResponse[UserProfile]: ...

    async def logout(self) -> ServiceResponse[None]: ...

    async def update_profile(self, user_id: str, fields: Mapping[str, Any]) -> ServiceResponse[UserProfile]: ...


class FileService(Protocol):
    async def upload(
        self, path: Path, on_progress: Optional[ProgressCallback] = None
    ) -> ServiceResponse[FileUpload]: ...


class DataService(Protocol):
    async def import_nodes(self, path: Path) -> ImportResult: ...

    async def export_data(self, data: Any, filename: str) -> ServiceResponse[str]: ...


class AnalyticsService(Protocol):
    async def generate_report(self, records: List[LearningRecord]) -> ServiceResponse[LearningReport]: ...

    async def get_stats(self, records: List[LearningRecord]) -> ServiceResponse[LearningStats]: ...


def describe_error(error: Exception, default: str) -> str:
    """Human-readable message for an exception, falling back to ``default``"""
    message = str(error).strip()
    return message or default


def to_jsonable(data: Any) -> Any:
    """Convert models (or containers of models) into JSON-compatible data"""
    return _ANY.dump_python(data, mode="json")

