"""
Entity collections

Insertion-ordered, id-indexed mappings for every entity kind the store owns,
plus traversal helpers for the parent/child node graph.
"""
from enum import Enum
from typing import Any, Dict, Generic, Iterable, Iterator, List, Mapping, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from lucid.models import Achievement, KnowledgeNode, LearningRecord, Skill, merge_fields
from lucid.store.errors import DuplicateEntityError, EntityNotFoundError, EntityValidationError

E = TypeVar("E", bound=BaseModel)


class EntityKind(str, Enum):
    NODES = "knowledge_nodes"
    RECORDS = "learning_records"
    SKILLS = "skills"
    ACHIEVEMENTS = "achievements"


ENTITY_MODELS = {
    EntityKind.NODES: KnowledgeNode,
    EntityKind.RECORDS: LearningRecord,
    EntityKind.SKILLS: Skill,
    EntityKind.ACHIEVEMENTS: Achievement,
}


class EntityCollection(Generic[E]):
    """Ordered collection of one entity kind"""

    def __init__(self, kind: EntityKind, items: Iterable[E] = ()):
        self.kind = kind
        self._items: Dict[str, E] = {}
        self.reset(items)

    @property
    def label(self) -> str:
        return ENTITY_MODELS[self.kind].__name__

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._items

    def __iter__(self) -> Iterator[E]:
        return iter(list(self._items.values()))

    def ids(self) -> List[str]:
        return list(self._items)

    def list(self) -> List[E]:
        return list(self._items.values())

    def get(self, entity_id: str) -> Optional[E]:
        return self._items.get(entity_id)

    def require(self, entity_id: str) -> E:
        entity = self._items.get(entity_id)
        if entity is None:
            raise EntityNotFoundError(self.label, entity_id)
        return entity

    def add(self, entity: E) -> E:
        """Append an entity; its id must not be taken"""
        if entity.id in self._items:
            raise DuplicateEntityError(self.label, entity.id)
        self._items[entity.id] = entity
        return entity

    def extend(self, entities: Iterable[E]) -> List[E]:
        """Append several entities, all or nothing"""
        entities = list(entities)
        seen = set()
        for entity in entities:
            if entity.id in self._items or entity.id in seen:
                raise DuplicateEntityError(self.label, entity.id)
            seen.add(entity.id)
        for entity in entities:
            self._items[entity.id] = entity
        return entities

    def update(self, entity_id: str, fields: Mapping[str, Any]) -> E:
        """
        Merge a partial update into an entity, keeping its position

        Raises:
            EntityNotFoundError: If the id is absent
            EntityValidationError: If the merged entity is invalid
        """
        current = self.require(entity_id)
        try:
            merged = merge_fields(current, fields)
        except (KeyError, ValidationError) as e:
            raise EntityValidationError(f"Invalid update for {self.label} {entity_id}: {e}") from e
        self._items[entity_id] = merged
        return merged

    def replace(self, entity: E) -> E:
        """Swap in a new version of an existing entity"""
        self.require(entity.id)
        self._items[entity.id] = entity
        return entity

    def remove(self, entity_id: str) -> E:
        entity = self.require(entity_id)
        del self._items[entity_id]
        return entity

    def reset(self, entities: Iterable[E]) -> None:
        """Replace the whole collection; later duplicates win"""
        self._items = {entity.id: entity for entity in entities}


class EntityCollections:
    """All entity collections, addressed by kind"""

    def __init__(self):
        self._collections: Dict[EntityKind, EntityCollection] = {
            kind: EntityCollection(kind) for kind in EntityKind
        }

    def __getitem__(self, kind: EntityKind) -> EntityCollection:
        return self._collections[EntityKind(kind)]

    def list(self, kind: EntityKind) -> List[Any]:
        return self[kind].list()

    def get(self, kind: EntityKind, entity_id: str) -> Optional[Any]:
        return self[kind].get(entity_id)

    def add(self, kind: EntityKind, entity: Any) -> Any:
        return self[kind].add(entity)

    def update(self, kind: EntityKind, entity_id: str, fields: Mapping[str, Any]) -> Any:
        return self[kind].update(entity_id, fields)

    def remove(self, kind: EntityKind, entity_id: str) -> Any:
        return self[kind].remove(entity_id)


def children_of(nodes: EntityCollection, node_id: str) -> List[KnowledgeNode]:
    return [node for node in nodes if node.parent_id == node_id]


def ancestors_of(nodes: EntityCollection, node_id: str) -> List[KnowledgeNode]:
    """
    Walk parent links upwards from a node, nearest parent first

    Parent links are not checked for cycles when written, so the walk stops
    at the first node it has already visited.
    """
    ancestors: List[KnowledgeNode] = []
    visited = {node_id}
    node = nodes.get(node_id)
    while node is not None and node.parent_id and node.parent_id not in visited:
        visited.add(node.parent_id)
        node = nodes.get(node.parent_id)
        if node is not None:
            ancestors.append(node)
    return ancestors
