"""Runtime configuration for the search service, read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from scripture_search.core.search_types import (
    DEFAULT_PAGE_SIZE,
    REFERENCE_VERSION,
    BaseVersion,
    SearchType,
)
from scripture_search.utils.logging_config import LOG_LEVEL_ENV

ENV_PREFIX = "SCRIPTURE_SEARCH_"


def _positive_int(value: Optional[str], default: int) -> int:
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        return default
    return parsed if parsed > 0 else default


def _text(value: Optional[str], default: str) -> str:
    cleaned = str(value or "").strip()
    return cleaned or default


@dataclass(frozen=True)
class SearchSettings:
    default_version: str = REFERENCE_VERSION
    page_size: int = DEFAULT_PAGE_SIZE
    greek_base_version: str = BaseVersion.GREEK.value
    hebrew_base_version: str = BaseVersion.HEBREW.value
    log_level: str = "INFO"
    index_dir: str = "lexicon_index"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "SearchSettings":
        """Build settings from ``SCRIPTURE_SEARCH_*`` variables, falling back to defaults."""

        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            default_version=_text(env.get(ENV_PREFIX + "DEFAULT_VERSION"), defaults.default_version),
            page_size=_positive_int(env.get(ENV_PREFIX + "PAGE_SIZE"), defaults.page_size),
            greek_base_version=_text(env.get(ENV_PREFIX + "GREEK_BASE"), defaults.greek_base_version),
            hebrew_base_version=_text(env.get(ENV_PREFIX + "HEBREW_BASE"), defaults.hebrew_base_version),
            log_level=_text(env.get(LOG_LEVEL_ENV), defaults.log_level),
            index_dir=_text(env.get(ENV_PREFIX + "INDEX_DIR"), defaults.index_dir),
        )

    def base_version_for(self, search_type: SearchType) -> str:
        if BaseVersion.for_search_type(search_type) is BaseVersion.GREEK:
            return self.greek_base_version
        return self.hebrew_base_version


__all__ = ["SearchSettings", "ENV_PREFIX"]
