"""Logging configuration."""

import logging
import sys
from typing import Optional

from clubdash.config.settings import Settings, get_settings

# Producers run on worker threads, so the thread name is part of every line
LOG_FORMAT = "%(asctime)s - %(threadName)s - %(name)s - %(levelname)s - %(message)s"

# Modules whose DEBUG output is per cache read
CACHE_LOGGERS = ("clubdash.services.ttl_cache", "clubdash.services.priority_loader")


def _level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {name}")
    return level


def setup_logging(settings: Optional[Settings] = None) -> None:
    """
    Configure application logging.

    `cache_log_level` lets cache hit/miss tracing be switched on or off
    without changing the level of the rest of the application.
    """
    settings = settings or get_settings()
    level = _level(settings.log_level)

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    logging.getLogger("clubdash").setLevel(level)

    cache_level = _level(settings.cache_log_level) if settings.cache_log_level else logging.NOTSET
    for name in CACHE_LOGGERS:
        logging.getLogger(name).setLevel(cache_level)

    # Reduce noise from third-party libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
