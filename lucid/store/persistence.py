"""
Persisted state subset

A fixed slice of the application state survives restarts. It is written as
one JSON document under a namespace key and restored before any service
call runs, so a returning user sees their profile and theme immediately.
"""
import json
from typing import Any, Dict, Mapping

from loguru import logger
from pydantic import TypeAdapter, ValidationError

from lucid.services.base import StateStorage, StorageError, to_jsonable

# State attribute -> key in the stored document
PERSISTED_KEYS = {
    "user": "user",
    "theme": "theme",
    "visual_effects": "visualEffects",
    "sidebar_collapsed": "sidebarCollapsed",
    "graph_view": "graphView",
}
PERSISTED_FIELDS = frozenset(PERSISTED_KEYS)


class PersistenceManager:
    def __init__(self, storage: StateStorage, namespace: str, field_types: Mapping[str, Any]):
        """
        Initialize persistence manager

        Args:
            storage: String key-value store holding the document
            namespace: Key the document is stored under
            field_types: Type annotation per persisted field, used to validate restored values
        """
        self.storage = storage
        self.namespace = namespace
        self._adapters = {field: TypeAdapter(field_types[field]) for field in PERSISTED_KEYS}

    def serialize(self, values: Mapping[str, Any]) -> str:
        state = {key: to_jsonable(values[field]) for field, key in PERSISTED_KEYS.items()}
        return json.dumps({"state": state}, ensure_ascii=False)

    def save(self, values: Mapping[str, Any]) -> None:
        """Write the subset; a storage failure is logged and the in-memory state kept"""
        try:
            self.storage.set_item(self.namespace, self.serialize(values))
        except StorageError as e:
            logger.error(f"Could not persist state '{self.namespace}': {e}")

    def load(self) -> Dict[str, Any]:
        """
        Read the stored subset

        Missing or invalid fields are left out so defaults apply. A payload that
        cannot be parsed at all is discarded.

        Returns:
            Mapping of state attribute -> restored value
        """
        try:
            raw = self.storage.get_item(self.namespace)
        except StorageError as e:
            logger.error(f"Could not read persisted state '{self.namespace}': {e}")
            return {}
        if raw is None:
            return {}

        try:
            payload = json.loads(raw)
        except ValueError as e:
            return self._discard(f"unparseable JSON ({e})")

        state = payload.get("state") if isinstance(payload, dict) else None
        if not isinstance(state, dict):
            return self._discard("missing state object")

        restored: Dict[str, Any] = {}
        for field, key in PERSISTED_KEYS.items():
            if key not in state:
                continue
            try:
                restored[field] = self._adapters[field].validate_python(state[key])
            except ValidationError as e:
                logger.warning(f"Ignoring persisted '{key}': {e.errors()[0]['msg']}")

        logger.info(f"Restored persisted state: {', '.join(sorted(restored)) or 'nothing'}")
        return restored

    def _discard(self, reason: str) -> Dict[str, Any]:
        logger.warning(f"Discarding corrupt persisted state '{self.namespace}': {reason}")
        try:
            self.storage.remove_item(self.namespace)
        except StorageError as e:
            logger.error(f"Could not remove corrupt state '{self.namespace}': {e}")
        return {}
