from __future__ import annotations

from loguru import logger

from lucid.utils import setup_logger


def test_setup_logger_filters_by_level() -> None:
    messages = []
    setup_logger("WARNING", sink=messages.append)

    logger.info("quiet")
    logger.warning("loud")

    assert len(messages) == 1
    assert "WARNING" in messages[0]
    assert "loud" in messages[0]
