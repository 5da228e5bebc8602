"""Lazy evaluation support for logging.

Pagination diagnostics (rendered sort specs, anchor values, row counts)
are wrapped in callables so they cost nothing unless DEBUG is enabled.
"""

from __future__ import annotations

import logging
from typing import Any


def _render(value: Any) -> Any:
    return value() if callable(value) else value


class LazyLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter whose message and arguments may be zero-argument callables.

    Example:
        ```python
        _lazy = get_lazy_logger(__name__)
        _lazy.debug(lambda: f"paginate_cursor: sort={spec}")
        _lazy.debug("anchor: %s", lambda: payload.properties)
        ```
    """

    def log(self, level: int, msg: Any, *args: Any, **kwargs: Any) -> None:
        """Log at ``level``, rendering callables only when the level is enabled."""
        if not self.isEnabledFor(level):
            return
        super().log(level, _render(msg), *map(_render, args), **kwargs)

    def debug(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        self.log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        self.log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        self.log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        self.log(logging.ERROR, msg, *args, **kwargs)


def get_lazy_logger(name: str, **context: Any) -> LazyLoggerAdapter:
    """Get a lazy logger for ``name``, optionally bound to extra context."""
    return LazyLoggerAdapter(logging.getLogger(name), context or {})


__all__ = ["LazyLoggerAdapter", "get_lazy_logger"]
