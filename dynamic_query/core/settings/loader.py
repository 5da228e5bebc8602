"""Cached settings loaders.

Each loader builds its settings model once per process. Tests that change
the environment call ``cache_clear()`` on the loader.
"""

from __future__ import annotations

from functools import lru_cache

from .logs import LoggingSettings
from .pagination import PaginationSettings


@lru_cache(maxsize=1)
def get_pagination_settings() -> PaginationSettings:
    """Get cached pagination settings."""
    return PaginationSettings()


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    """Get cached logging settings."""
    return LoggingSettings()


def clear_settings_cache() -> None:
    """Drop every cached settings instance."""
    get_pagination_settings.cache_clear()
    get_logging_settings.cache_clear()
