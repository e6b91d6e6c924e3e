"""
Application state coordinator

``AppStore`` owns every entity and session, exposes the command surface the
renderer drives, reconciles each command with the external services and keeps
a small state subset persisted across restarts.

Commands never raise: they return ``Success(data)`` or ``Failure(error, kind)``
and every failure also lands in the shared error slot.
"""
import asyncio
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, FrozenSet, List, Literal, Mapping, Optional, Set, Union

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from lucid.config import Settings
from lucid.models import (
    Achievement,
    ErrorKind,
    Failure,
    ImportResult,
    KnowledgeNode,
    LearningRecord,
    Result,
    SearchResult,
    ServiceResponse,
    Session,
    Skill,
    Success,
    UploadProgress,
    UserProfile,
    merge_fields,
    utcnow,
)
from lucid.models.user import Theme
from lucid.services import FileStateStorage, MemoryStateStorage, ServiceRegistry, build_services
from lucid.services.base import ProgressCallback, StateStorage, describe_error
from lucid.store.collections import EntityCollections, EntityKind, ancestors_of, children_of
from lucid.store.errors import (
    EntityNotFoundError,
    EntityValidationError,
    InvalidStateError,
    ServiceFailureError,
    StoreError,
)
from lucid.store.loading import LoadingTracker
from lucid.store.persistence import PERSISTED_FIELDS, PersistenceManager
from lucid.store.search import SearchIndex, normalize_query
from lucid.store.session import SessionTracker

DEFAULT_NAMESPACE = "modern-blog-store"

View = Literal["knowledge", "learning", "profile", "settings"]
GraphView = Literal["2d", "3d"]
ExportKind = Literal["all", "knowledge", "learning", "profile"]

Listener = Callable[["AppStore", FrozenSet[str]], None]


class NotificationSettings(BaseModel):
    email: bool = True
    push: bool = True
    desktop: bool = True
    sound: bool = True


class AppState(BaseModel):
    """Scalar and UI state; entity collections live beside it in the store"""
    model_config = ConfigDict(validate_assignment=True)

    user: Optional[UserProfile] = None
    is_authenticated: bool = False
    selected_node_id: Optional[str] = None
    search_query: str = ""
    search_results: List[SearchResult] = Field(default_factory=list)
    sidebar_collapsed: bool = False
    current_view: View = "knowledge"
    theme: Theme = "dark"
    visual_effects: bool = True
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)
    graph_view: GraphView = "3d"
    selected_connections: List[str] = Field(default_factory=list)
    upload_progress: Optional[UploadProgress] = None
    initialized: bool = False


def _as_fields(value: Union[BaseModel, Mapping[str, Any]]) -> Dict[str, Any]:
    if isinstance(value, BaseModel):
        return value.model_dump()
    return dict(value)


def _parents_first(nodes: List[KnowledgeNode]) -> List[int]:
    """Indices of ``nodes`` ordered so a parent in the batch precedes its children"""
    first_index: Dict[str, int] = {}
    for index, node in enumerate(nodes):
        first_index.setdefault(node.id, index)

    order: List[int] = []
    placed: Set[int] = set()
    for index in range(len(nodes)):
        chain: List[int] = []
        current: Optional[int] = index
        while current is not None and current not in placed and current not in chain:
            chain.append(current)
            parent_id = nodes[current].parent_id
            current = first_index.get(parent_id) if parent_id else None
        # in a cycle the member placed first has its parent link dropped
        for item in reversed(chain):
            placed.add(item)
            order.append(item)
    return order


class AppStore:
    """Single authoritative in-process model of the application"""

    def __init__(
        self,
        services: ServiceRegistry,
        state_storage: Optional[StateStorage] = None,
        namespace: str = DEFAULT_NAMESPACE,
        clock: Optional[Callable] = None,
    ):
        """
        Initialize the store and restore the persisted subset

        Args:
            services: External services every command goes through
            state_storage: Backend for the persisted subset (in-memory if None)
            namespace: Key the persisted subset is stored under
            clock: Returns the current time; drives session timing and unlock stamps
        """
        self.services = services
        self.clock = clock or utcnow

        self._listeners: List[Listener] = []
        self._pending: Set[str] = set()
        self._depth = 0

        self.state = AppState()
        self.collections = EntityCollections()
        self.session = SessionTracker(self.clock)
        self.search_index = SearchIndex()
        self.loading = LoadingTracker(on_change=self._touch)
        self.persistence = PersistenceManager(
            state_storage if state_storage is not None else MemoryStateStorage(),
            namespace,
            {field: AppState.model_fields[field].annotation for field in PERSISTED_FIELDS},
        )

        self._restore()

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "AppStore":
        if settings is None:
            from lucid.config import get_settings
            settings = get_settings()
        return cls(
            services=build_services(settings),
            state_storage=FileStateStorage(settings.state_dir),
            namespace=settings.state_namespace,
        )

    # ========== Read access ==========

    @property
    def user(self) -> Optional[UserProfile]:
        return self.state.user

    @property
    def is_authenticated(self) -> bool:
        return self.state.is_authenticated

    @property
    def knowledge_nodes(self) -> List[KnowledgeNode]:
        return self.collections.list(EntityKind.NODES)

    @property
    def selected_node(self) -> Optional[KnowledgeNode]:
        if self.state.selected_node_id is None:
            return None
        return self.collections.get(EntityKind.NODES, self.state.selected_node_id)

    @property
    def search_query(self) -> str:
        return self.state.search_query

    @property
    def search_results(self) -> List[SearchResult]:
        return list(self.state.search_results)

    @property
    def learning_records(self) -> List[LearningRecord]:
        return self.collections.list(EntityKind.RECORDS)

    @property
    def current_session(self) -> Session:
        return self.session.current

    @property
    def skills(self) -> List[Skill]:
        return self.collections.list(EntityKind.SKILLS)

    @property
    def achievements(self) -> List[Achievement]:
        return self.collections.list(EntityKind.ACHIEVEMENTS)

    @property
    def error(self) -> Optional[str]:
        return self.loading.error

    @property
    def initialized(self) -> bool:
        return self.state.initialized

    def node_children(self, node_id: str) -> List[KnowledgeNode]:
        return children_of(self.collections[EntityKind.NODES], node_id)

    def node_ancestors(self, node_id: str) -> List[KnowledgeNode]:
        return ancestors_of(self.collections[EntityKind.NODES], node_id)

    def persisted_values(self) -> Dict[str, Any]:
        return {field: getattr(self.state, field) for field in PERSISTED_FIELDS}

    # ========== Observation ==========

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener called once per logical state change

        Returns:
            Function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @contextmanager
    def _step(self):
        """Group mutations so persistence and listeners run once at the end"""
        self._depth += 1
        try:
            yield
        finally:
            self._depth -= 1
            if self._depth == 0:
                self._flush()

    def _touch(self, field: str) -> None:
        self._pending.add(field)
        if self._depth == 0:
            self._flush()

    def _set(self, **changes) -> None:
        """Apply changes together; nothing is written if any value is invalid"""
        candidate = self.state.model_copy()
        for field, value in changes.items():
            setattr(candidate, field, value)
        with self._step():
            self.state = candidate
            self._pending.update(changes)

    def _flush(self) -> None:
        if not self._pending:
            return
        changed = frozenset(self._pending)
        self._pending.clear()

        if changed & PERSISTED_FIELDS:
            self.persistence.save(self.persisted_values())

        for listener in list(self._listeners):
            try:
                listener(self, changed)
            except Exception as e:
                logger.exception(f"State listener failed: {e}")

    def _restore(self) -> None:
        restored = self.persistence.load()
        for field, value in restored.items():
            setattr(self.state, field, value)
        self.state.is_authenticated = self.state.user is not None

    # ========== Synchronization ==========

    def _fail(self, error: BaseException, default: str) -> Failure:
        """Record a failure in the error slot and build the failure result"""
        if isinstance(error, StoreError):
            kind = error.kind
            logger.warning(f"{default}: {error}")
        else:
            kind = ErrorKind.SERVICE_FAILURE
            logger.opt(exception=error).error(f"{default}: {error}")
        message = describe_error(error, default)
        self.loading.set_error(message)
        return Failure(error=message, kind=kind)

    async def _sync(
        self,
        call: Awaitable[ServiceResponse],
        default: str,
        apply: Optional[Callable[[Any], Any]] = None,
    ) -> Result:
        """
        Run one external call and apply its data on success

        The in-memory state is only touched after the service reports success.
        """
        try:
            response = await call
            if not response.success:
                raise ServiceFailureError(response.error or default)
            with self._step():
                data = apply(response.data) if apply else response.data
            return Success(data)
        except Exception as e:
            return self._fail(e, default)

    def _bump_stats(self, **deltas: int) -> None:
        user = self.state.user
        if user is None:
            return
        changes = {name: max(0, getattr(user.stats, name) + delta) for name, delta in deltas.items()}
        self._set(user=user.with_stats(**changes))

    def _set_stats(self, **values: int) -> None:
        if self.state.user is not None:
            self._set(user=self.state.user.with_stats(**values))

    # ========== User ==========

    def set_user(self, user: Optional[UserProfile]) -> Result:
        return self._set_ui(user=user, is_authenticated=user is not None)

    async def login(self, profile: UserProfile) -> Result:
        def apply(data):
            user = data if isinstance(data, UserProfile) else profile
            self._set(user=user, is_authenticated=True)
            return user

        logger.info(f"Logging in as {profile.name}")
        return await self._sync(self.services.user.login(profile), "Login failed", apply)

    async def logout(self) -> Result:
        def apply(_):
            self._set(user=None, is_authenticated=False)

        return await self._sync(self.services.user.logout(), "Logout failed", apply)

    async def update_user_profile(self, fields: Mapping[str, Any]) -> Result:
        user = self.state.user
        if user is None:
            return self._fail(InvalidStateError("No user is logged in"), "Failed to update profile")

        def apply(data: UserProfile) -> UserProfile:
            self._set(user=data)
            return data

        return await self._sync(
            self.services.user.update_profile(user.id, dict(fields)), "Failed to update profile", apply
        )

    def update_user(self, fields: Mapping[str, Any]) -> Result:
        """Merge fields into the profile locally, without calling the user service"""
        user = self.state.user
        if user is None:
            return self._fail(InvalidStateError("No user is logged in"), "Failed to update user")
        try:
            updated = merge_fields(user, fields)
        except (KeyError, ValidationError) as e:
            return self._fail(EntityValidationError(f"Invalid user update: {e}"), "Failed to update user")
        self._set(user=updated)
        return Success(updated)

    # ========== Knowledge nodes ==========

    def _nodes_changed(self) -> None:
        self.search_index.invalidate()
        self._touch("knowledge_nodes")

    def _apply_loaded_nodes(self, nodes: Optional[List[KnowledgeNode]]) -> List[KnowledgeNode]:
        nodes = list(nodes or [])
        self.collections[EntityKind.NODES].reset(nodes)
        self._nodes_changed()
        if self.state.selected_node_id and self.state.selected_node_id not in self.collections[EntityKind.NODES]:
            self._set(selected_node_id=None)
        return nodes

    async def load_knowledge_nodes(self) -> Result:
        with self.loading.busy("nodes"):
            return await self._sync(
                self.services.knowledge.get_nodes(), "Failed to load knowledge nodes", self._apply_loaded_nodes
            )

    def set_knowledge_nodes(self, nodes: List[KnowledgeNode]) -> None:
        with self._step():
            self._apply_loaded_nodes(nodes)

    def _check_parent(self, parent_id: Optional[str]) -> None:
        if parent_id and parent_id not in self.collections[EntityKind.NODES]:
            raise EntityValidationError(f"Parent node not found: {parent_id}")

    async def add_knowledge_node(self, node: Union[KnowledgeNode, Mapping[str, Any]]) -> Result:
        default = "Failed to create knowledge node"
        fields = _as_fields(node)
        try:
            self._check_parent(fields.get("parent_id"))
        except StoreError as e:
            return self._fail(e, default)

        def apply(created: KnowledgeNode) -> KnowledgeNode:
            self.collections.add(EntityKind.NODES, created)
            self._nodes_changed()
            self._bump_stats(total_nodes=1)
            return created

        return await self._sync(self.services.knowledge.create_node(fields), default, apply)

    async def update_knowledge_node(self, node_id: str, fields: Mapping[str, Any]) -> Result:
        default = "Failed to update knowledge node"
        fields = {key: value for key, value in _as_fields(fields).items() if key != "id"}
        try:
            self.collections[EntityKind.NODES].require(node_id)
            if "parent_id" in fields:
                self._check_parent(fields["parent_id"])
        except StoreError as e:
            return self._fail(e, default)

        def apply(updated: KnowledgeNode) -> KnowledgeNode:
            if updated.id != node_id:
                updated = updated.model_copy(update={"id": node_id})
            self.collections[EntityKind.NODES].replace(updated)
            self._nodes_changed()
            if self.state.selected_node_id == node_id:
                self._touch("selected_node_id")
            return updated

        return await self._sync(self.services.knowledge.update_node(node_id, fields), default, apply)

    async def delete_knowledge_node(self, node_id: str) -> Result:
        default = "Failed to delete knowledge node"
        nodes = self.collections[EntityKind.NODES]
        if node_id not in nodes:
            return self._fail(EntityNotFoundError("KnowledgeNode", node_id), default)

        def apply(_) -> None:
            nodes.remove(node_id)
            for child in children_of(nodes, node_id):
                nodes.replace(child.model_copy(update={"parent_id": None}))
            self._nodes_changed()
            if self.state.selected_node_id == node_id:
                self._set(selected_node_id=None)
            if any(result.node.id == node_id for result in self.state.search_results):
                self._set(search_results=[r for r in self.state.search_results if r.node.id != node_id])
            self._bump_stats(total_nodes=-1)

        return await self._sync(self.services.knowledge.delete_node(node_id), default, apply)

    def set_selected_node(self, node: Union[KnowledgeNode, str, None]) -> Result:
        node_id = node.id if isinstance(node, KnowledgeNode) else node
        if node_id is not None and node_id not in self.collections[EntityKind.NODES]:
            return self._fail(EntityNotFoundError("KnowledgeNode", node_id), "Cannot select node")
        self._set(selected_node_id=node_id)
        return Success(self.selected_node)

    # ========== Search ==========

    async def search_knowledge(self, query: str) -> Result:
        """
        Search the knowledge service and store the ranked results

        An empty query clears the results without calling the service. When two
        searches overlap, whichever completes last owns ``search_results``.
        """
        if not normalize_query(query):
            self.clear_search()
            return Success([])

        cached = self.search_index.cached(query)
        if cached is not None:
            logger.debug(f"Search cache hit: '{query}'")
            self._set(search_results=cached, search_query=query)
            return Success(cached)

        generation = self.search_index.generation

        def apply(results: Optional[List[SearchResult]]) -> List[SearchResult]:
            ranked = SearchIndex.rank(results or [], self.collections[EntityKind.NODES].ids())
            self.search_index.remember(query, ranked, generation)
            self._set(search_results=ranked, search_query=query)
            return ranked

        with self.loading.busy("search"):
            return await self._sync(self.services.knowledge.search_nodes(query), "Search failed", apply)

    def set_search_query(self, query: str) -> Result:
        return self._set_ui(search_query=query)

    def set_search_results(self, results: List[SearchResult]) -> Result:
        return self._set_ui(search_results=results)

    def clear_search(self) -> None:
        self._set(search_query="", search_results=[])

    # ========== Learning records and sessions ==========

    async def load_learning_records(self) -> Result:
        def apply(records: Optional[List[LearningRecord]]) -> List[LearningRecord]:
            records = list(records or [])
            self.collections[EntityKind.RECORDS].reset(records)
            self._touch("learning_records")
            return records

        with self.loading.busy("records"):
            return await self._sync(self.services.learning.get_records(), "Failed to load learning records", apply)

    def _apply_new_record(self, record: LearningRecord) -> LearningRecord:
        self.collections.add(EntityKind.RECORDS, record)
        self._touch("learning_records")
        return record

    async def add_learning_record(self, record: Union[LearningRecord, Mapping[str, Any]]) -> Result:
        default = "Failed to add learning record"
        try:
            if not isinstance(record, LearningRecord):
                record = LearningRecord.model_validate(dict(record))
        except ValidationError as e:
            return self._fail(EntityValidationError(f"Invalid learning record: {e}"), default)

        return await self._sync(self.services.learning.add_record(record), default, self._apply_new_record)

    def start_learning_session(self, node_id: str) -> Session:
        session = self.session.start(node_id)
        logger.info(f"Learning session started on node {node_id}")
        self._touch("current_session")
        return session

    async def end_learning_session(self) -> Optional[Result]:
        """
        End the active session and submit its record

        The tracker is idle again before the record is submitted; if the
        submission fails the record is dropped and the failure is returned.

        Returns:
            None when no session was active, otherwise the submission result
        """
        record = self.session.end()
        if record is None:
            return None
        self._touch("current_session")
        logger.info(f"Learning session ended on node {record.node_id}: {record.duration} min")

        def apply(saved: LearningRecord) -> LearningRecord:
            saved = saved or record
            self._apply_new_record(saved)
            self._bump_stats(total_learning_time=saved.duration * 60)
            return saved

        return await self._sync(self.services.learning.add_record(record), "Failed to save learning record", apply)

    def update_session_focus(self, focus_level: float) -> None:
        if self.session.update_focus(focus_level):
            self._touch("current_session")

    def add_interruption(self) -> None:
        if self.session.record_interruption():
            self._touch("current_session")

    # ========== Skills and achievements ==========

    async def load_skills_and_achievements(self) -> Result:
        default = "Failed to load skills and achievements"
        with self.loading.busy("skills"):
            try:
                skills, achievements = await asyncio.gather(
                    self.services.skill_storage.get_all(),
                    self.services.achievement_storage.get_all(),
                )
            except Exception as e:
                return self._fail(e, default)

            with self._step():
                self.collections[EntityKind.SKILLS].reset(skills or [])
                self.collections[EntityKind.ACHIEVEMENTS].reset(achievements or [])
                self._touch("skills")
                self._touch("achievements")
                self._set_stats(
                    skills_count=len(self.skills),
                    achievements_count=sum(1 for a in self.achievements if a.is_unlocked),
                )
            return Success({"skills": self.skills, "achievements": self.achievements})

    async def update_skill(self, skill_id: str, fields: Mapping[str, Any]) -> Result:
        default = "Failed to update skill"
        skills = self.collections[EntityKind.SKILLS]
        try:
            current = skills.require(skill_id)
            updated = merge_fields(current, fields)
        except (KeyError, ValidationError) as e:
            return self._fail(EntityValidationError(f"Invalid skill update: {e}"), default)
        except StoreError as e:
            return self._fail(e, default)

        try:
            await self.services.skill_storage.save(skill_id, updated)
            with self._step():
                skills.replace(updated)
                self._touch("skills")
        except Exception as e:
            return self._fail(e, default)
        return Success(updated)

    async def unlock_achievement(self, achievement_id: str) -> Result:
        default = "Failed to unlock achievement"
        achievements = self.collections[EntityKind.ACHIEVEMENTS]
        try:
            current = achievements.require(achievement_id)
        except StoreError as e:
            return self._fail(e, default)

        if current.is_unlocked:
            return Success(current)

        unlocked = current.unlock(self.clock())
        try:
            await self.services.achievement_storage.save(achievement_id, unlocked)
            with self._step():
                achievements.replace(unlocked)
                self._touch("achievements")
                self._bump_stats(achievements_count=1)
        except Exception as e:
            return self._fail(e, default)

        logger.info(f"Achievement unlocked: {unlocked.title}")
        return Success(unlocked)

    # ========== Files ==========

    async def upload_file(self, path: Union[str, Path], on_progress: Optional[ProgressCallback] = None) -> Result:
        def progress(update: UploadProgress) -> None:
            self._set(upload_progress=update)
            if on_progress:
                on_progress(update)

        with self.loading.busy("upload"):
            try:
                return await self._sync(self.services.files.upload(Path(path), progress), "File upload failed")
            finally:
                self._set(upload_progress=None)

    async def import_knowledge_nodes(self, path: Union[str, Path]) -> ImportResult:
        """
        Import nodes from a file and create each one through the knowledge service

        Nodes the service rejects, or whose id is already present, are reported
        in ``errors``; the rest are appended in file order. Parents in the file
        are created before their children and each child is linked to the id
        the service gave its parent. A child whose parent is neither in the
        store nor created by this import keeps no parent link.
        """
        default = "Import failed"
        try:
            parsed = await self.services.data.import_nodes(Path(path))
        except Exception as e:
            failure = self._fail(e, default)
            return ImportResult(success=False, error=failure.error, errors=[failure.error])

        if not parsed.success:
            self._fail(ServiceFailureError(parsed.error or default), default)
            return parsed

        nodes = self.collections[EntityKind.NODES]
        created: Dict[int, KnowledgeNode] = {}
        new_ids: Dict[str, str] = {}
        errors = list(parsed.errors)

        for index in _parents_first(parsed.nodes):
            node = parsed.nodes[index]
            if node.id in nodes:
                errors.append(f"Node {node.id} already exists")
                continue
            fields = node.model_dump()
            if node.parent_id:
                if node.parent_id in new_ids:
                    fields["parent_id"] = new_ids[node.parent_id]
                elif node.parent_id not in nodes:
                    errors.append(f"Node {node.id}: parent {node.parent_id} not found, link dropped")
                    fields["parent_id"] = None
            try:
                response = await self.services.knowledge.create_node(fields)
            except Exception as e:
                errors.append(f"Node {node.id}: {describe_error(e, 'create failed')}")
                continue
            if not response.success:
                errors.append(f"Node {node.id}: {response.error}")
                continue
            created[index] = response.data
            new_ids.setdefault(node.id, response.data.id)

        imported = [created[index] for index in sorted(created)]
        if imported:
            with self._step():
                nodes.extend(imported)
                self._nodes_changed()
                self._bump_stats(total_nodes=len(imported))

        logger.info(f"Imported {len(imported)} knowledge nodes ({len(errors)} problems)")
        success = bool(imported) or not errors
        if not success:
            self._fail(ServiceFailureError("No knowledge nodes were imported"), default)
        return ImportResult(
            success=success,
            nodes=imported,
            errors=errors,
            error=None if success else "No knowledge nodes were imported",
        )

    def _export_payload(self, kind: str):
        if kind == "knowledge":
            return self.knowledge_nodes, "knowledge-nodes.json"
        if kind == "learning":
            return self.learning_records, "learning-records.json"
        if kind == "profile":
            return self.user, "user-profile.json"
        if kind == "all":
            return {
                "user": self.user,
                "knowledgeNodes": self.knowledge_nodes,
                "learningRecords": self.learning_records,
                "skills": self.skills,
                "achievements": self.achievements,
            }, "complete-data.json"
        raise EntityValidationError(f"Unknown export type '{kind}'")

    async def export_data(self, kind: ExportKind = "all") -> Result:
        default = "Export failed"
        try:
            data, filename = self._export_payload(kind)
        except StoreError as e:
            return self._fail(e, default)

        with self.loading.busy("export"):
            return await self._sync(self.services.data.export_data(data, filename), default)

    # ========== Analytics ==========

    async def generate_learning_report(self) -> Result:
        return await self._sync(
            self.services.analytics.generate_report(self.learning_records), "Failed to generate report"
        )

    async def get_learning_stats(self) -> Result:
        return await self._sync(self.services.analytics.get_stats(self.learning_records), "Failed to get stats")

    # ========== UI state ==========

    def _set_ui(self, **changes) -> Result:
        try:
            self._set(**changes)
        except ValidationError as e:
            return self._fail(EntityValidationError(e.errors()[0]["msg"]), "Invalid setting")
        return Success(changes)

    def toggle_sidebar(self) -> None:
        self._set(sidebar_collapsed=not self.state.sidebar_collapsed)

    def set_current_view(self, view: View) -> Result:
        return self._set_ui(current_view=view)

    def set_theme(self, theme: Theme) -> Result:
        return self._set_ui(theme=theme)

    def toggle_visual_effects(self) -> None:
        self._set(visual_effects=not self.state.visual_effects)

    def set_visual_effects(self, enabled: bool) -> Result:
        return self._set_ui(visual_effects=enabled)

    def set_notifications(self, notifications: Union[NotificationSettings, Mapping[str, bool]]) -> Result:
        return self._set_ui(notifications=notifications)

    def set_graph_view(self, view: GraphView) -> Result:
        return self._set_ui(graph_view=view)

    def toggle_connection(self, connection_id: str) -> None:
        current = self.state.selected_connections
        if connection_id in current:
            self._set(selected_connections=[c for c in current if c != connection_id])
        else:
            self._set(selected_connections=[*current, connection_id])

    def set_loading(self, category: str, value: bool) -> Result:
        try:
            self.loading.set(category, value)
        except ValueError as e:
            return self._fail(EntityValidationError(str(e)), "Invalid setting")
        return Success({category: bool(value)})

    def set_error(self, message: Optional[str]) -> None:
        self.loading.set_error(message)

    def clear_error(self) -> None:
        self.loading.clear_error()

    # ========== Bootstrap ==========

    async def initialize(self) -> Dict[str, Result]:
        """
        Load nodes, records and skills/achievements concurrently

        Each load owns its busy flag and reports its own failure; the store is
        marked initialized once all three have settled, whatever their outcome.

        Returns:
            Result per resource: "nodes", "records", "skills"
        """
        logger.info("Initializing application state...")
        names = ("nodes", "records", "skills")
        outcomes = await asyncio.gather(
            self.load_knowledge_nodes(),
            self.load_learning_records(),
            self.load_skills_and_achievements(),
            return_exceptions=True,
        )

        results: Dict[str, Result] = {}
        for name, outcome in zip(names, outcomes):
            if isinstance(outcome, BaseException):
                outcome = self._fail(outcome, f"Failed to load {name}")
            results[name] = outcome

        self._set(initialized=True)
        failed = [name for name, result in results.items() if not result.success]
        if failed:
            logger.warning(f"Application initialized with failed loads: {', '.join(failed)}")
        else:
            logger.info("Application initialized")
        return results
