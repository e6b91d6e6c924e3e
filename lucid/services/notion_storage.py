"""
Notion-backed knowledge service
Maps knowledge nodes onto pages of a Notion database

Reference: https://developers.notion.com/reference
"""
from typing import Any, Dict, List, Mapping, Optional

from loguru import logger
from notion_client import AsyncClient
from notion_client.errors import APIResponseError
from pydantic import ValidationError

from lucid.config import Settings
from lucid.models import KnowledgeNode, ServiceResponse
from lucid.services.base import describe_error
from lucid.services.knowledge import rank_matches

# Notion rejects rich_text items longer than this
RICH_TEXT_LIMIT = 2000
NODE_TYPES = ("markdown", "pdf", "mindmap", "note")


class NotionStorageError(Exception):
    """Custom exception for Notion storage operations"""
    pass


def _plain_text(items: List[Dict[str, Any]]) -> str:
    parts = []
    for item in items or []:
        text = item.get("plain_text")
        if text is None:
            text = item.get("text", {}).get("content", "")
        parts.append(text)
    return "".join(parts)


class NotionKnowledgeService:
    """Knowledge service storing nodes as pages in a Notion database"""

    def __init__(self, settings: Optional[Settings] = None, client: Optional[AsyncClient] = None):
        """
        Initialize Notion knowledge service

        Args:
            settings: Application settings (if None, will load from environment)
            client: Notion async client (if None, will create one from the token)

        Raises:
            NotionStorageError: If initialization fails
        """
        if settings is None:
            from lucid.config import get_settings
            settings = get_settings()

        self.settings = settings
        self.database_id = settings.notion_database_id

        try:
            self.client = client or AsyncClient(auth=settings.notion_token)
            self._database_schema: Optional[Dict[str, Any]] = None
            logger.info("Notion knowledge service initialized")
        except Exception as e:
            logger.exception(f"Failed to initialize Notion client: {e}")
            raise NotionStorageError(f"Failed to initialize Notion client: {str(e)}")

    # ========== Schema ==========

    async def get_database_schema(self) -> Dict[str, Any]:
        """
        Get database schema to understand available properties

        Returns:
            Dictionary mapping property names to their type information

        Raises:
            NotionStorageError: If schema retrieval fails
        """
        if self._database_schema is not None:
            return self._database_schema

        try:
            logger.info(f"Fetching database schema for: {self.database_id}")
            database = await self.client.databases.retrieve(database_id=self.database_id)

            if not isinstance(database, dict):
                raise NotionStorageError("Invalid database response format")

            schema = database.get("properties") or {}

            # Newer API versions keep properties on the data source instead
            data_sources = database.get("data_sources") or []
            if not schema and data_sources:
                data_source_id = data_sources[0].get("id")
                logger.info(f"Fetching properties from data source: {data_source_id}")
                data_source = await self.client.request(path=f"data_sources/{data_source_id}", method="GET")
                if isinstance(data_source, dict):
                    schema = data_source.get("properties") or {}

            if not schema:
                raise NotionStorageError(
                    f"Database {self.database_id} has no properties in response. "
                    f"Check that the integration is connected to the database."
                )

            logger.info(f"Found {len(schema)} properties in database")
            self._database_schema = schema
            return schema

        except APIResponseError as e:
            logger.exception(f"Notion API error fetching database schema: {e}")
            raise NotionStorageError(f"Failed to fetch database schema: {str(e)}")
        except NotionStorageError:
            raise
        except Exception as e:
            logger.exception(f"Unexpected error fetching database schema: {e}")
            raise NotionStorageError(f"Failed to fetch database schema: {str(e)}")

    async def _find_property(self, configured_name: str) -> Optional[tuple]:
        """
        Find the actual property name and type in the database (case-insensitive)

        Returns:
            (property_name, property_type) or None if not found
        """
        if not configured_name:
            return None

        schema = await self.get_database_schema()
        if configured_name in schema:
            return configured_name, schema[configured_name].get("type")

        configured_lower = configured_name.lower().strip()
        for actual_name, info in schema.items():
            if actual_name.lower().strip() == configured_lower:
                logger.debug(f"Found case-insensitive match: '{configured_name}' -> '{actual_name}'")
                return actual_name, info.get("type")
        return None

    def _property_mapping(self) -> Dict[str, str]:
        """Node field -> configured Notion property name"""
        return {
            "title": self.settings.notion_property_title,
            "content": self.settings.notion_property_content,
            "type": self.settings.notion_property_type,
            "tags": self.settings.notion_property_tags,
            "difficulty": self.settings.notion_property_difficulty,
            "mastery": self.settings.notion_property_mastery,
            "parent_id": self.settings.notion_property_parent,
        }

    # ========== Property builders ==========

    def _build_rich_text(self, value: str) -> List[Dict[str, Any]]:
        if not value:
            return []
        return [
            {"type": "text", "text": {"content": value[i:i + RICH_TEXT_LIMIT]}}
            for i in range(0, len(value), RICH_TEXT_LIMIT)
        ]

    def _build_property_value(self, property_name: str, property_type: str, value: Any) -> Optional[Dict[str, Any]]:
        """
        Build property value based on type

        Returns:
            Property value dict or None if type not supported
        """
        if property_type == "title":
            return {"title": self._build_rich_text(str(value))}
        elif property_type == "rich_text":
            return {"rich_text": self._build_rich_text("" if value is None else str(value))}
        elif property_type == "number":
            if not isinstance(value, (int, float)):
                logger.error(f"Cannot use '{value}' as number for property '{property_name}'")
                return None
            return {"number": value}
        elif property_type == "select":
            return {"select": {"name": str(value)} if value else None}
        elif property_type == "multi_select":
            if not isinstance(value, list):
                logger.warning(f"Multi-select property '{property_name}' expects list, got {type(value)}")
                return None
            return {"multi_select": [{"name": tag} for tag in value]}
        else:
            logger.warning(f"Unsupported property type '{property_type}' for property '{property_name}'")
            return None

    async def _build_properties(self, fields: Mapping[str, Any], require_title: bool = False) -> Dict[str, Any]:
        """
        Build Notion properties for the node fields present in ``fields``

        Raises:
            NotionStorageError: If the title property is required but missing
        """
        values = dict(fields)
        metadata = values.pop("metadata", None) or {}
        if not isinstance(metadata, Mapping):
            metadata = metadata.model_dump()
        for key in ("difficulty", "mastery"):
            if key in metadata:
                values[key] = metadata[key]

        properties: Dict[str, Any] = {}
        for field_name, configured in self._property_mapping().items():
            if field_name not in values:
                continue
            found = await self._find_property(configured)
            if not found:
                if field_name == "title" and require_title:
                    schema = await self.get_database_schema()
                    raise NotionStorageError(
                        f"Title property '{configured}' not found in database. "
                        f"Available properties: {list(schema.keys())}"
                    )
                logger.warning(f"Property '{configured}' not found in database, skipping {field_name}")
                continue
            actual_name, property_type = found
            value = self._build_property_value(actual_name, property_type, values[field_name])
            if value is not None:
                properties[actual_name] = value

        logger.debug(f"Built {len(properties)} properties for Notion page")
        return properties

    # ========== Page mapping ==========

    async def _page_to_node(self, page: Dict[str, Any]) -> KnowledgeNode:
        props = page.get("properties", {})
        data: Dict[str, Any] = {
            "id": page["id"],
            "created_at": page.get("created_time"),
            "updated_at": page.get("last_edited_time"),
        }
        metadata: Dict[str, Any] = {}

        for field_name, configured in self._property_mapping().items():
            found = await self._find_property(configured)
            if not found or found[0] not in props:
                continue
            prop = props[found[0]]
            kind = prop.get("type", found[1])

            if kind in ("title", "rich_text"):
                value = _plain_text(prop.get(kind))
            elif kind == "number":
                value = prop.get("number")
            elif kind == "select":
                value = (prop.get("select") or {}).get("name")
            elif kind == "multi_select":
                value = [option.get("name") for option in prop.get("multi_select") or []]
            else:
                continue

            if value is None or value == "":
                continue
            if field_name in ("difficulty", "mastery"):
                metadata[field_name] = value
            elif field_name == "type" and value not in NODE_TYPES:
                continue
            else:
                data[field_name] = value

        data = {key: value for key, value in data.items() if value is not None}
        data.setdefault("title", "Untitled")
        data["metadata"] = metadata
        return KnowledgeNode.model_validate(data).with_content_metrics()

    async def _query(self, filter: Optional[Dict[str, Any]] = None) -> List[KnowledgeNode]:
        nodes: List[KnowledgeNode] = []
        cursor = None
        while True:
            kwargs: Dict[str, Any] = {"database_id": self.database_id}
            if filter:
                kwargs["filter"] = filter
            if cursor:
                kwargs["start_cursor"] = cursor
            response = await self.client.databases.query(**kwargs)
            for page in response.get("results", []):
                if page.get("archived"):
                    continue
                nodes.append(await self._page_to_node(page))
            if not response.get("has_more"):
                return nodes
            cursor = response.get("next_cursor")

    # ========== Knowledge service contract ==========

    async def get_nodes(self) -> ServiceResponse:
        try:
            nodes = await self._query()
            logger.info(f"Loaded {len(nodes)} knowledge nodes from Notion")
            return ServiceResponse.ok(nodes)
        except Exception as e:
            logger.exception(f"Error loading nodes from Notion: {e}")
            return ServiceResponse.fail(describe_error(e, "Failed to load knowledge nodes"))

    async def create_node(self, fields: Mapping[str, Any]) -> ServiceResponse:
        try:
            node = KnowledgeNode.model_validate(dict(fields))
            logger.info(f"Creating Notion page for: {node.title}")
            properties = await self._build_properties(
                node.model_dump(include={"title", "content", "type", "tags", "metadata", "parent_id"}),
                require_title=True,
            )
            page = await self.client.pages.create(parent={"database_id": self.database_id}, properties=properties)
            if not isinstance(page, dict) or "id" not in page:
                raise NotionStorageError("Invalid response from Notion API")

            created = await self._page_to_node(page)
            # Fields Notion does not store are kept from the request
            created = created.model_copy(update={"position": node.position})
            logger.info(f"Created Notion page {created.id}")
            return ServiceResponse.ok(created)
        except ValidationError as e:
            return ServiceResponse.fail(f"Invalid knowledge node: {e}")
        except Exception as e:
            logger.exception(f"Error creating Notion page: {e}")
            return ServiceResponse.fail(describe_error(e, "Failed to create knowledge node"))

    async def update_node(self, node_id: str, fields: Mapping[str, Any]) -> ServiceResponse:
        try:
            properties = await self._build_properties(fields)
            page = await self.client.pages.update(page_id=node_id, properties=properties)
            updated = await self._page_to_node(page)
            logger.info(f"Updated Notion page {node_id}")
            return ServiceResponse.ok(updated)
        except APIResponseError as e:
            logger.warning(f"Notion API error updating {node_id}: {e}")
            return ServiceResponse.fail(f"Notion API error: {str(e)}")
        except Exception as e:
            logger.exception(f"Error updating Notion page {node_id}: {e}")
            return ServiceResponse.fail(describe_error(e, "Failed to update knowledge node"))

    async def delete_node(self, node_id: str) -> ServiceResponse:
        try:
            await self.client.pages.update(page_id=node_id, archived=True)
            logger.info(f"Archived Notion page {node_id}")
            return ServiceResponse.ok()
        except Exception as e:
            logger.exception(f"Error archiving Notion page {node_id}: {e}")
            return ServiceResponse.fail(describe_error(e, "Failed to delete knowledge node"))

    async def search_nodes(self, query: str) -> ServiceResponse:
        try:
            clauses = []
            for configured, kind in (
                (self.settings.notion_property_title, "title"),
                (self.settings.notion_property_content, "rich_text"),
            ):
                found = await self._find_property(configured)
                if found:
                    clauses.append({"property": found[0], kind: {"contains": query}})
            nodes = await self._query({"or": clauses} if clauses else None)
            return ServiceResponse.ok(rank_matches(nodes, query))
        except Exception as e:
            logger.exception(f"Error searching Notion: {e}")
            return ServiceResponse.fail(describe_error(e, "Search failed"))
