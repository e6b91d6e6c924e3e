"""
Main entry point for the application state host
"""
import asyncio

from lucid.utils.logger import setup_logger
from lucid.config import get_settings
from lucid.store import AppStore
from loguru import logger


async def run(store: AppStore) -> None:
    results = await store.initialize()
    for name, result in results.items():
        if result.success:
            logger.info(f"Loaded {name}")
        else:
            logger.warning(f"Could not load {name}: {result.error}")

    user = store.user.name if store.user else "nobody"
    logger.info(
        f"Ready: {len(store.knowledge_nodes)} knowledge nodes, "
        f"{len(store.learning_records)} learning records, "
        f"{len(store.skills)} skills, {len(store.achievements)} achievements "
        f"(signed in as {user}, theme {store.state.theme})"
    )


def main():
    """Main entry point"""
    try:
        # Load settings
        settings = get_settings()
        setup_logger(settings.log_level)
        logger.info("Settings loaded successfully")

        store = AppStore.from_settings(settings)

        try:
            asyncio.run(run(store))
        except KeyboardInterrupt:
            logger.info("Received interrupt signal, stopping...")

    except ValueError as e:
        setup_logger()
        logger.error(f"Configuration error: {e}")
        logger.info("Please check your .env file or environment variables")
    except Exception as e:
        logger.exception(f"Fatal error: {e}")


if __name__ == "__main__":
    main()
