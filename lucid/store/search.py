"""
Search result cache and ordering
"""
from typing import Dict, List, Optional, Sequence

from lucid.models import SearchResult


def normalize_query(query: str) -> str:
    return " ".join(query.split())


class SearchIndex:
    """Per-query cache of ranked results, dropped whenever the nodes change"""

    def __init__(self):
        self._cache: Dict[str, List[SearchResult]] = {}
        self.generation = 0

    def __len__(self) -> int:
        return len(self._cache)

    def cached(self, query: str) -> Optional[List[SearchResult]]:
        return self._cache.get(normalize_query(query))

    def remember(self, query: str, results: List[SearchResult], generation: Optional[int] = None) -> bool:
        """Cache results unless the nodes changed since the search started"""
        if generation is not None and generation != self.generation:
            return False
        self._cache[normalize_query(query)] = list(results)
        return True

    def invalidate(self) -> None:
        self._cache.clear()
        self.generation += 1

    @staticmethod
    def rank(results: Sequence[SearchResult], node_order: Sequence[str]) -> List[SearchResult]:
        """
        Order results by descending score

        Ties keep the order the nodes have in the collection; nodes the
        collection does not know yet go after known ones, in service order.
        """
        position = {node_id: index for index, node_id in enumerate(node_order)}
        fallback = len(position)
        return sorted(results, key=lambda result: (-result.score, position.get(result.node.id, fallback)))
