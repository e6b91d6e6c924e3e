"""
Store module - Application state coordinator and its building blocks
"""
from .app_store import DEFAULT_NAMESPACE, AppState, AppStore, NotificationSettings
from .collections import EntityCollection, EntityCollections, EntityKind
from .errors import (
    DuplicateEntityError,
    EntityNotFoundError,
    EntityValidationError,
    InvalidStateError,
    ServiceFailureError,
    StoreError,
)
from .loading import LoadingTracker
from .persistence import PERSISTED_FIELDS, PersistenceManager
from .search import SearchIndex
from .session import SessionTracker

__all__ = [
    "DEFAULT_NAMESPACE",
    "PERSISTED_FIELDS",
    "AppState",
    "AppStore",
    "DuplicateEntityError",
    "EntityCollection",
    "EntityCollections",
    "EntityKind",
    "EntityNotFoundError",
    "EntityValidationError",
    "InvalidStateError",
    "LoadingTracker",
    "NotificationSettings",
    "PersistenceManager",
    "SearchIndex",
    "ServiceFailureError",
    "SessionTracker",
    "StoreError",
]
