"""Logging setup for command line entry points using loguru."""

import sys

from loguru import logger

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


def configure_logging(level: str = "INFO") -> None:
    """
    Replace loguru's default handler with a single stderr sink

    The library itself never adds sinks; applications call this once at
    startup.

    Args:
        level: Minimum level name (DEBUG, INFO, WARNING, ...)
    """
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format=LOG_FORMAT, colorize=True)
