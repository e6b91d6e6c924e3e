"""
Local knowledge service
Stores knowledge nodes in a key-value storage and scores search matches
"""
import re
from typing import Any, Callable, List, Mapping, Optional

from loguru import logger
from pydantic import ValidationError

from lucid.models import KnowledgeNode, SearchResult, ServiceResponse, merge_fields, utcnow
from lucid.services.base import KeyValueStorage, describe_error

TITLE_WEIGHT = 3.0
TAG_WEIGHT = 2.0
CONTENT_WEIGHT = 1.0
MAX_CONTENT_HITS = 5
SNIPPET_RADIUS = 40


def _snippet(text: str, start: int, end: int) -> str:
    left = max(0, start - SNIPPET_RADIUS)
    right = min(len(text), end + SNIPPET_RADIUS)
    snippet = text[left:right].replace("\n", " ").strip()
    if left > 0:
        snippet = "..." + snippet
    if right < len(text):
        snippet = snippet + "..."
    return snippet


def score_node(node: KnowledgeNode, query: str) -> Optional[SearchResult]:
    """
    Score a node against a free-text query

    Every whitespace-separated term is matched case-insensitively against the
    title, the tags and the content. Title hits weigh 3, tag hits 2 and each
    content occurrence 1 (at most 5 per term).

    Returns:
        SearchResult, or None if nothing matched
    """
    terms = [term.lower() for term in query.split() if term]
    if not terms:
        return None

    score = 0.0
    highlights: List[str] = []
    context = ""
    title = node.title.lower()
    tags = [tag.lower() for tag in node.tags]

    for term in terms:
        if term in title:
            score += TITLE_WEIGHT
            highlights.append(node.title)
        if any(term in tag for tag in tags):
            score += TAG_WEIGHT
        matches = list(re.finditer(re.escape(term), node.content, flags=re.IGNORECASE))
        if matches:
            score += CONTENT_WEIGHT * min(len(matches), MAX_CONTENT_HITS)
            snippet = _snippet(node.content, matches[0].start(), matches[0].end())
            highlights.append(snippet)
            if not context:
                context = snippet

    if score <= 0:
        return None

    return SearchResult(node=node, score=score, highlights=list(dict.fromkeys(highlights)), context=context)


def rank_matches(nodes: List[KnowledgeNode], query: str) -> List[SearchResult]:
    """Score every node and keep the matches, best first (stable on ties)"""
    results = [result for result in (score_node(node, query) for node in nodes) if result]
    results.sort(key=lambda result: -result.score)
    return results


class LocalKnowledgeService:
    """Knowledge service backed by a local key-value storage"""

    def __init__(self, storage: KeyValueStorage[KnowledgeNode], clock: Optional[Callable] = None):
        """
        Initialize local knowledge service

        Args:
            storage: Storage holding the knowledge nodes
            clock: Returns the current time (defaults to UTC now)
        """
        self.storage = storage
        self.clock = clock or utcnow

    async def get_nodes(self) -> ServiceResponse:
        try:
            nodes = await self.storage.get_all()
            logger.debug(f"Loaded {len(nodes)} knowledge nodes")
            return ServiceResponse.ok(nodes)
        except Exception as e:
            logger.exception(f"Error loading knowledge nodes: {e}")
            return ServiceResponse.fail(describe_error(e, "Failed to load knowledge nodes"))

    async def create_node(self, fields: Mapping[str, Any]) -> ServiceResponse:
        try:
            now = self.clock()
            data = dict(fields)
            data.setdefault("created_at", now)
            data.setdefault("updated_at", now)
            node = KnowledgeNode.model_validate(data)
            if node.metadata.word_count == 0:
                node = node.with_content_metrics()

            if await self.storage.get(node.id) is not None:
                return ServiceResponse.fail(f"Knowledge node already exists: {node.id}")

            await self.storage.save(node.id, node)
            logger.info(f"Created knowledge node {node.id}: {node.title}")
            return ServiceResponse.ok(node)
        except ValidationError as e:
            logger.warning(f"Rejected invalid knowledge node: {e}")
            return ServiceResponse.fail(f"Invalid knowledge node: {e}")
        except Exception as e:
            logger.exception(f"Error creating knowledge node: {e}")
            return ServiceResponse.fail(describe_error(e, "Failed to create knowledge node"))

    async def update_node(self, node_id: str, fields: Mapping[str, Any]) -> ServiceResponse:
        try:
            node = await self.storage.get(node_id)
            if node is None:
                return ServiceResponse.fail(f"Knowledge node not found: {node_id}")

            updated = merge_fields(node, {**fields, "updated_at": self.clock()})
            if "content" in fields:
                updated = updated.with_content_metrics()

            await self.storage.save(node_id, updated)
            logger.info(f"Updated knowledge node {node_id}")
            return ServiceResponse.ok(updated)
        except (KeyError, ValidationError) as e:
            logger.warning(f"Rejected invalid update for node {node_id}: {e}")
            return ServiceResponse.fail(f"Invalid update for knowledge node {node_id}: {e}")
        except Exception as e:
            logger.exception(f"Error updating knowledge node {node_id}: {e}")
            return ServiceResponse.fail(describe_error(e, "Failed to update knowledge node"))

    async def delete_node(self, node_id: str) -> ServiceResponse:
        try:
            if not await self.storage.delete(node_id):
                return ServiceResponse.fail(f"Knowledge node not found: {node_id}")
            logger.info(f"Deleted knowledge node {node_id}")
            return ServiceResponse.ok()
        except Exception as e:
            logger.exception(f"Error deleting knowledge node {node_id}: {e}")
            return ServiceResponse.fail(describe_error(e, "Failed to delete knowledge node"))

    async def search_nodes(self, query: str) -> ServiceResponse:
        try:
            nodes = await self.storage.get_all()
            results = rank_matches(nodes, query)
            logger.debug(f"Search '{query}' matched {len(results)} of {len(nodes)} nodes")
            return ServiceResponse.ok(results)
        except Exception as e:
            logger.exception(f"Error searching knowledge nodes: {e}")
            return ServiceResponse.fail(describe_error(e, "Search failed"))
