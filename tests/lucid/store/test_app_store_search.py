from __future__ import annotations

import asyncio

from lucid.models import KnowledgeNode, SearchResult, ServiceResponse


class CountingKnowledge:
    """Knowledge service returning canned search results"""

    def __init__(self, results):
        self.results = results
        self.queries = []

    async def search_nodes(self, query):
        self.queries.append(query)
        return ServiceResponse.ok(self.results)


class GatedKnowledge:
    """Search completes only when the test opens the gate for that query"""

    def __init__(self, fail: bool = False):
        self.gates = {}
        self.fail = fail

    async def search_nodes(self, query):
        await self.gates[query].wait()
        if self.fail:
            return ServiceResponse.fail(f"search for {query} failed")
        return ServiceResponse.ok([SearchResult(node=KnowledgeNode(id=query, title=query), score=1)])


def _add(store, **fields):
    return asyncio.run(store.add_knowledge_node(fields)).data


def test_empty_query_clears_without_calling_service(store, services) -> None:
    services.knowledge = CountingKnowledge([])
    store.set_search_query("old")
    store.set_search_results([SearchResult(node=KnowledgeNode(title="x"), score=1)])

    result = asyncio.run(store.search_knowledge("   "))

    assert result.success
    assert result.data == []
    assert store.search_query == ""
    assert store.search_results == []
    assert services.knowledge.queries == []


def test_results_are_ranked_by_score_then_collection_order(store) -> None:
    first = _add(store, title="Notes", content="python is mentioned once")
    second = _add(store, title="Python basics")
    third = _add(store, title="More notes", content="python again")

    result = asyncio.run(store.search_knowledge("python"))

    assert result.success
    assert [r.node.id for r in store.search_results] == [second.id, first.id, third.id]
    assert store.search_query == "python"
    assert store.loading.is_busy("search") is False


def test_repeated_query_is_served_from_cache(store, services) -> None:
    node = KnowledgeNode(id="n1", title="Python")
    services.knowledge = CountingKnowledge([SearchResult(node=node, score=3)])

    asyncio.run(store.search_knowledge("python"))
    asyncio.run(store.search_knowledge("  python "))

    assert services.knowledge.queries == ["python"]
    assert [r.node.id for r in store.search_results] == ["n1"]


def test_node_changes_invalidate_the_cache(store) -> None:
    _add(store, title="Python basics")
    asyncio.run(store.search_knowledge("python"))
    assert len(store.search_results) == 1

    _add(store, title="Advanced python")
    asyncio.run(store.search_knowledge("python"))

    assert len(store.search_results) == 2


def test_deleted_node_leaves_current_results(store) -> None:
    node = _add(store, title="Python basics")
    asyncio.run(store.search_knowledge("python"))

    asyncio.run(store.delete_knowledge_node(node.id))

    assert store.search_results == []


def test_overlapping_searches_last_to_complete_wins(store, services) -> None:
    services.knowledge = GatedKnowledge()

    async def scenario():
        services.knowledge.gates = {"alpha": asyncio.Event(), "beta": asyncio.Event()}
        first = asyncio.create_task(store.search_knowledge("alpha"))
        second = asyncio.create_task(store.search_knowledge("beta"))
        await asyncio.sleep(0)
        services.knowledge.gates["beta"].set()
        await second
        services.knowledge.gates["alpha"].set()
        await first

    asyncio.run(scenario())

    assert store.search_query == "alpha"
    assert [r.node.id for r in store.search_results] == ["alpha"]


def test_error_slot_keeps_the_last_failure_to_settle(store, services) -> None:
    services.knowledge = GatedKnowledge(fail=True)

    async def scenario():
        services.knowledge.gates = {"alpha": asyncio.Event(), "beta": asyncio.Event()}
        first = asyncio.create_task(store.search_knowledge("alpha"))
        second = asyncio.create_task(store.search_knowledge("beta"))
        await asyncio.sleep(0)
        services.knowledge.gates["alpha"].set()
        await first
        services.knowledge.gates["beta"].set()
        await second

    asyncio.run(scenario())

    assert store.error == "search for beta failed"
    assert store.search_results == []
