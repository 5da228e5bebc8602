"""Logging infrastructure.

Basic usage:
    import logging

    from dynamic_query.infra.logging import get_lazy_logger, setup_logging

    setup_logging()  # once, at process start

    logger = logging.getLogger(__name__)
    lazy_logger = get_lazy_logger(__name__)
    lazy_logger.debug(lambda: f"Expensive: {render()}")  # only runs if DEBUG enabled
"""

from dynamic_query.infra.logging.config import build_logging_config, setup_logging
from dynamic_query.infra.logging.formatters import JSONFormatter
from dynamic_query.infra.logging.lazy import LazyLoggerAdapter, get_lazy_logger

__all__ = [
    "JSONFormatter",
    "LazyLoggerAdapter",
    "build_logging_config",
    "get_lazy_logger",
    "setup_logging",
]
