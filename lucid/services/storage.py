"""
Key-value storages

``JsonFileStorage`` keeps one JSON document per entity kind, mapping id to
entity, in insertion order. ``FileStateStorage`` is the string store backing
the persisted state subset.
"""
import asyncio
import json
from pathlib import Path
from typing import Dict, Generic, List, Optional, Type, TypeVar

from loguru import logger
from pydantic import BaseModel, ValidationError

from lucid.services.base import StorageError

E = TypeVar("E", bound=BaseModel)


class MemoryStorage(Generic[E]):
    """In-process storage, mainly for tests and ephemeral sessions"""

    def __init__(self, items: Optional[List[E]] = None):
        self._items: Dict[str, E] = {item.id: item for item in items or []}

    async def get_all(self) -> List[E]:
        return list(self._items.values())

    async def get(self, entity_id: str) -> Optional[E]:
        return self._items.get(entity_id)

    async def save(self, entity_id: str, entity: E) -> None:
        self._items[entity_id] = entity

    async def delete(self, entity_id: str) -> bool:
        return self._items.pop(entity_id, None) is not None


class JsonFileStorage(Generic[E]):
    """Storage for one entity kind in a single JSON file"""

    def __init__(self, path: Path, model: Type[E]):
        """
        Initialize JSON file storage

        Args:
            path: JSON document location (parent directories are created on write)
            model: Pydantic model used to validate stored entities
        """
        self.path = Path(path)
        self.model = model
        self._lock = asyncio.Lock()

    def _read(self) -> Dict[str, E]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise StorageError(f"Failed to read {self.path.name}: {e}") from e

        if not isinstance(raw, dict):
            raise StorageError(f"Invalid storage document {self.path.name}: expected an object")

        items: Dict[str, E] = {}
        for entity_id, data in raw.items():
            try:
                items[entity_id] = self.model.model_validate(data)
            except ValidationError as e:
                raise StorageError(f"Invalid {self.model.__name__} '{entity_id}' in {self.path.name}: {e}") from e
        return items

    def _write(self, items: Dict[str, E]) -> None:
        payload = {entity_id: item.model_dump(mode="json") for entity_id, item in items.items()}
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp_path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as e:
            raise StorageError(f"Failed to write {self.path.name}: {e}") from e

    async def get_all(self) -> List[E]:
        items = await asyncio.to_thread(self._read)
        return list(items.values())

    async def get(self, entity_id: str) -> Optional[E]:
        items = await asyncio.to_thread(self._read)
        return items.get(entity_id)

    async def save(self, entity_id: str, entity: E) -> None:
        async with self._lock:
            items = await asyncio.to_thread(self._read)
            items[entity_id] = entity
            await asyncio.to_thread(self._write, items)
        logger.debug(f"Saved {self.model.__name__} {entity_id} to {self.path}")

    async def delete(self, entity_id: str) -> bool:
        async with self._lock:
            items = await asyncio.to_thread(self._read)
            if items.pop(entity_id, None) is None:
                return False
            await asyncio.to_thread(self._write, items)
        logger.debug(f"Deleted {self.model.__name__} {entity_id} from {self.path}")
        return True


class MemoryStateStorage:
    def __init__(self, items: Optional[Dict[str, str]] = None):
        self.items: Dict[str, str] = dict(items or {})

    def get_item(self, name: str) -> Optional[str]:
        return self.items.get(name)

    def set_item(self, name: str, value: str) -> None:
        self.items[name] = value

    def remove_item(self, name: str) -> None:
        self.items.pop(name, None)


class FileStateStorage:
    """One file per state namespace under a directory"""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def _path(self, name: str) -> Path:
        return self.directory / f"{name}.json"

    def get_item(self, name: str) -> Optional[str]:
        path = self._path(name)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to read state '{name}': {e}") from e

    def set_item(self, name: str, value: str) -> None:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            self._path(name).write_text(value, encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to write state '{name}': {e}") from e

    def remove_item(self, name: str) -> None:
        try:
            self._path(name).unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to remove state '{name}': {e}") from e
