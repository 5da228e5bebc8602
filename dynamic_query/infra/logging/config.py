"""Logging configuration setup.

Configures the root logger once via dictConfig. Library modules only ever
call ``logging.getLogger(__name__)``; handlers live on the root logger.
"""

from __future__ import annotations

import logging
import logging.config
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from dynamic_query.core.settings.logs import LoggingSettings

logger = logging.getLogger(__name__)
_LOGGING_INITIALIZED = False


def build_logging_config(log_settings: LoggingSettings) -> dict[str, Any]:
    """Build a dictConfig mapping from logging settings."""
    formatter = "json" if log_settings.json_format else "plain"
    handlers: dict[str, Any] = {}
    if log_settings.console_enabled:
        handlers["console"] = {
            "class": "logging.StreamHandler",
            "formatter": formatter,
            "stream": "ext://sys.stdout",
        }
    else:
        handlers["null"] = {"class": "logging.NullHandler"}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {"()": "dynamic_query.infra.logging.formatters.JSONFormatter"},
            "plain": {"format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s"},
        },
        "handlers": handlers,
        "root": {"level": log_settings.level, "handlers": list(handlers)},
    }


def setup_logging(log_settings: LoggingSettings | None = None, *, force: bool = False) -> None:
    """Ensure logging is configured once across entrypoints.

    Args:
        log_settings: Optional logging settings instance. If omitted, settings
            are loaded via get_logging_settings().
        force: Reconfigure logging even if it was already initialized.
    """
    global _LOGGING_INITIALIZED

    if _LOGGING_INITIALIZED and not force:
        return

    if log_settings is None:
        from dynamic_query.core.settings import get_logging_settings

        log_settings = get_logging_settings()

    logging.config.dictConfig(build_logging_config(log_settings))
    _LOGGING_INITIALIZED = True
    logger.debug("Logging configured", extra={"level": log_settings.level})
