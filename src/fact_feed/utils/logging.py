"""
Logging configuration for the fact feed engine.

Every module logs through the shared loguru ``logger``; this module only
decides where those records go. ``FeedService.from_settings`` calls
``setup_logging`` once; applications embedding the engine with their own
loguru sinks can skip it.
"""

import sys
from typing import Optional

from loguru import logger

from ..config import Settings, get_settings

TEXT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{module}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


def setup_logging(settings: Optional[Settings] = None, log_level: Optional[str] = None) -> None:
    """
    Replace loguru's sinks with the ones configured for the engine.

    Args:
        settings: Settings to read level, format and log file from
        log_level: Override log level (DEBUG, INFO, WARNING, ERROR)
    """
    settings = settings or get_settings()
    level = (log_level or settings.log_level).upper()
    serialize = settings.log_format == "json"

    logger.remove()
    logger.add(
        sys.stderr,
        format=TEXT_FORMAT,
        level=level,
        colorize=not serialize,
        serialize=serialize,
        backtrace=settings.debug_mode,
        diagnose=settings.debug_mode,
    )

    # Debug runs stay on the console
    if settings.log_file and not settings.debug_mode:
        logger.add(
            settings.log_file,
            format=TEXT_FORMAT,
            level=level,
            serialize=serialize,
            rotation="1 day",
            retention="30 days",
            compression="gz",
        )

    logger.info(f"Logging initialized with level: {level}, format: {settings.log_format}")
