from __future__ import annotations

from lucid.models import KnowledgeNode, SearchResult
from lucid.store import SearchIndex
from lucid.store.search import normalize_query


def _result(node_id: str, score: float) -> SearchResult:
    return SearchResult(node=KnowledgeNode(id=node_id, title=node_id), score=score)


def test_queries_are_cached_by_normalized_text() -> None:
    index = SearchIndex()
    index.remember("  graph   theory ", [_result("a", 1)])

    assert normalize_query("  graph   theory ") == "graph theory"
    assert [r.node.id for r in index.cached("graph theory")] == ["a"]
    assert index.cached("graph") is None


def test_invalidate_drops_results_and_stale_generations() -> None:
    index = SearchIndex()
    started = index.generation
    index.invalidate()

    assert index.remember("graph", [_result("a", 1)], started) is False
    assert len(index) == 0
    assert index.remember("graph", [_result("a", 1)], index.generation) is True
    assert len(index) == 1


def test_rank_orders_by_score_then_collection_order() -> None:
    results = [_result("c", 2), _result("x", 5), _result("a", 2), _result("unknown", 2), _result("b", 5)]

    ranked = SearchIndex.rank(results, ["a", "b", "c", "x"])

    assert [r.node.id for r in ranked] == ["b", "x", "a", "c", "unknown"]
