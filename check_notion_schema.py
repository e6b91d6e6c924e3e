"""
Tool script to check the Notion knowledge database schema
Run this script to see which node fields map onto properties of your database
"""
import asyncio
import sys

from lucid.utils.logger import setup_logger
from lucid.config import get_settings
from lucid.services.notion_storage import NotionKnowledgeService
from loguru import logger

# Property types each node field can be written to
SUPPORTED_TYPES = {
    "title": ("title",),
    "content": ("rich_text",),
    "type": ("select", "rich_text"),
    "tags": ("multi_select",),
    "difficulty": ("number",),
    "mastery": ("number",),
    "parent_id": ("rich_text",),
}


async def check_schema() -> None:
    settings = get_settings()
    if settings.knowledge_backend != "notion":
        logger.warning("LUCID_KNOWLEDGE_BACKEND is not 'notion'; checking the configured database anyway")

    logger.info("Loading Notion database schema...")
    service = NotionKnowledgeService(settings)
    schema = await service.get_database_schema()

    print("\n" + "=" * 60)
    print("Notion Database Schema")
    print("=" * 60)
    print(f"\nDatabase ID: {settings.notion_database_id}")
    print(f"\nAvailable Properties ({len(schema)}):\n")
    for prop_name, prop_info in schema.items():
        print(f"  • {prop_name}  ({prop_info.get('type', 'unknown')})")

    print("\n" + "=" * 60)
    print("Node field mapping:\n")
    for field, configured in service._property_mapping().items():
        found = await service._find_property(configured)
        if found is None:
            print(f"  {field:<10} -> '{configured}' not found (field will not be stored)")
            continue
        name, prop_type = found
        status = "ok" if prop_type in SUPPORTED_TYPES[field] else f"unsupported type, expected {'/'.join(SUPPORTED_TYPES[field])}"
        print(f"  {field:<10} -> '{name}' ({prop_type}) {status}")

    title = next((name for name, info in schema.items() if info.get("type") == "title"), None)
    print()
    if title:
        print(f"NOTION_PROPERTY_TITLE={title}")
    else:
        print("WARNING: No title property found! Database must have a title property.")
    print("=" * 60)


def main():
    """Check and display the Notion database schema"""
    setup_logger()

    try:
        asyncio.run(check_schema())
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        print("\nConfiguration error. Set NOTION_TOKEN and NOTION_DATABASE_ID in your .env file.")
        sys.exit(1)
    except Exception as e:
        logger.exception(f"Error: {e}")
        print(f"\nError: {e}")
        print("\nCheck that the integration is connected to the database and the database ID is correct.")
        sys.exit(1)


if __name__ == "__main__":
    main()
