from __future__ import annotations

import asyncio

from lucid.models import ErrorKind, KnowledgeNode, ServiceResponse, UserProfile


class RejectingKnowledge:
    """Knowledge service whose writes always fail"""

    def __init__(self, nodes=()):
        self.nodes = list(nodes)
        self.calls = []

    async def get_nodes(self):
        return ServiceResponse.ok(self.nodes)

    async def create_node(self, fields):
        self.calls.append(("create", fields))
        return ServiceResponse.fail("knowledge backend offline")

    async def update_node(self, node_id, fields):
        self.calls.append(("update", node_id))
        return ServiceResponse.fail("knowledge backend offline")

    async def delete_node(self, node_id):
        self.calls.append(("delete", node_id))
        return ServiceResponse.fail("knowledge backend offline")

    async def search_nodes(self, query):
        return ServiceResponse.ok([])


def _add(store, **fields):
    result = asyncio.run(store.add_knowledge_node(fields))
    assert result.success, result
    return result.data


def test_add_node_appends_and_counts_for_user(store) -> None:
    store.set_user(UserProfile(id="u1", name="Ada"))

    node = _add(store, title="Graphs", content="nodes and edges")

    assert store.knowledge_nodes == [node]
    assert node.metadata.word_count == 3
    assert store.user.stats.total_nodes == 1


def test_add_without_user_leaves_stats_alone(store) -> None:
    _add(store, title="Graphs")

    assert store.user is None
    assert len(store.knowledge_nodes) == 1


def test_failed_add_leaves_collection_unchanged(store, services) -> None:
    services.knowledge = RejectingKnowledge()
    calls = []
    store.subscribe(lambda s, changed: calls.append(changed))

    result = asyncio.run(store.add_knowledge_node({"title": "Graphs"}))

    assert result.success is False
    assert result.kind is ErrorKind.SERVICE_FAILURE
    assert result.error == "knowledge backend offline"
    assert store.knowledge_nodes == []
    assert store.error == "knowledge backend offline"
    assert calls == [frozenset({"error"})]


def test_add_with_unknown_parent_fails_before_service_call(store, services) -> None:
    services.knowledge = RejectingKnowledge()

    result = asyncio.run(store.add_knowledge_node({"title": "Child", "parent_id": "ghost"}))

    assert result.kind is ErrorKind.VALIDATION_FAILURE
    assert services.knowledge.calls == []


def test_update_refreshes_selected_node(store) -> None:
    node = _add(store, title="Graphs")
    store.set_selected_node(node)

    result = asyncio.run(store.update_knowledge_node(node.id, {"title": "Graph theory", "content": "a b c d"}))

    assert result.success
    assert store.selected_node.title == "Graph theory"
    assert store.selected_node.metadata.word_count == 4
    assert store.knowledge_nodes[0].title == "Graph theory"


def test_update_cannot_change_the_id(store) -> None:
    node = _add(store, title="Graphs")

    asyncio.run(store.update_knowledge_node(node.id, {"id": "other", "title": "Renamed"}))

    assert [n.id for n in store.knowledge_nodes] == [node.id]


def test_update_missing_node_is_not_found(store) -> None:
    result = asyncio.run(store.update_knowledge_node("ghost", {"title": "x"}))

    assert result.kind is ErrorKind.NOT_FOUND
    assert store.error == "KnowledgeNode not found: ghost"


def test_delete_selected_node_clears_selection(store) -> None:
    store.set_user(UserProfile(id="u1", name="Ada"))
    keep = _add(store, title="Keep")
    gone = _add(store, title="Gone")
    store.set_selected_node(gone.id)

    result = asyncio.run(store.delete_knowledge_node(gone.id))

    assert result.success
    assert store.selected_node is None
    assert store.knowledge_nodes == [keep]
    assert store.user.stats.total_nodes == 1


def test_delete_unknown_node_changes_nothing(store) -> None:
    node = _add(store, title="Keep")
    store.set_selected_node(node)

    result = asyncio.run(store.delete_knowledge_node("ghost"))

    assert result.kind is ErrorKind.NOT_FOUND
    assert store.selected_node == node
    assert store.knowledge_nodes == [node]


def test_failed_delete_keeps_node_and_selection(store, services) -> None:
    node = KnowledgeNode(id="n1", title="Keep")
    services.knowledge = RejectingKnowledge([node])
    asyncio.run(store.load_knowledge_nodes())
    store.set_selected_node("n1")

    result = asyncio.run(store.delete_knowledge_node("n1"))

    assert result.success is False
    assert store.selected_node == node
    assert store.knowledge_nodes == [node]


def test_delete_floors_total_nodes_at_zero(store) -> None:
    node = _add(store, title="Before login")
    store.set_user(UserProfile(id="u1", name="Ada"))

    asyncio.run(store.delete_knowledge_node(node.id))

    assert store.user.stats.total_nodes == 0


def test_delete_detaches_children(store) -> None:
    parent = _add(store, title="Parent")
    child = _add(store, title="Child", parent_id=parent.id)
    assert store.node_children(parent.id) == [child]
    assert store.node_ancestors(child.id) == [parent]

    asyncio.run(store.delete_knowledge_node(parent.id))

    assert store.knowledge_nodes[0].parent_id is None


def test_select_unknown_node_fails(store) -> None:
    result = store.set_selected_node("ghost")

    assert result.kind is ErrorKind.NOT_FOUND
    assert store.selected_node is None


def test_listeners_get_one_notification_per_command(store) -> None:
    store.set_user(UserProfile(id="u1", name="Ada"))
    calls = []
    unsubscribe = store.subscribe(lambda s, changed: calls.append(changed))

    _add(store, title="Graphs")
    unsubscribe()
    store.toggle_sidebar()

    assert calls == [frozenset({"knowledge_nodes", "user"})]


def test_failing_listener_does_not_break_others(store) -> None:
    seen = []

    def broken(s, changed):
        raise RuntimeError("listener bug")

    store.subscribe(broken)
    store.subscribe(lambda s, changed: seen.append(changed))

    store.toggle_sidebar()

    assert seen == [frozenset({"sidebar_collapsed"})]
    assert store.state.sidebar_collapsed is True


def test_load_replaces_nodes_and_drops_stale_selection(store, services) -> None:
    node = _add(store, title="Local")
    store.set_selected_node(node)
    services.knowledge = RejectingKnowledge([KnowledgeNode(id="remote", title="Remote")])

    result = asyncio.run(store.load_knowledge_nodes())

    assert result.success
    assert [n.id for n in store.knowledge_nodes] == ["remote"]
    assert store.selected_node is None
    assert store.loading.is_busy("nodes") is False
