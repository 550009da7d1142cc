"""Helpers for configuring consistent logging output."""

from __future__ import annotations

import logging
import os
from typing import Optional

_DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
LOG_LEVEL_ENV = "SCRIPTURE_SEARCH_LOG_LEVEL"
_CONFIGURED = False


def resolve_level(level: str | int | None) -> int:
    if level is None:
        return logging.INFO
    if isinstance(level, int):
        return level
    try:
        return int(level)
    except (TypeError, ValueError):
        normalized = str(level).strip().upper()
        return getattr(logging, normalized, logging.INFO)


def configure_logging(level: Optional[str | int] = None, *, force: bool = False) -> None:
    """Initialise root logging handlers for processes embedding the search service.

    The level comes from ``level`` when given, otherwise from the
    ``SCRIPTURE_SEARCH_LOG_LEVEL`` environment variable, defaulting to ``INFO``.
    """

    global _CONFIGURED

    if _CONFIGURED and not force:
        return

    resolved_level = resolve_level(level if level is not None else os.environ.get(LOG_LEVEL_ENV))

    logging.basicConfig(level=resolved_level, format=_DEFAULT_FORMAT, force=force)
    logging.getLogger("scripture_search").setLevel(resolved_level)
    _CONFIGURED = True


__all__ = ["configure_logging", "resolve_level", "LOG_LEVEL_ENV"]
