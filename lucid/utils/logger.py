"""
Logger configuration utility
"""
import sys
from loguru import logger

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | <level>{message}</level>"
)


def setup_logger(level: str = "INFO", sink=None):
    """
    Setup loguru logger with custom format

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        sink: Destination for log records (defaults to stderr)
    """
    logger.remove()
    logger.add(
        sink or sys.stderr,
        format=LOG_FORMAT,
        level=level,
        colorize=sink is None,
        backtrace=True,
        diagnose=False,
    )
    return logger
