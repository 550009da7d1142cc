"""Turn client tokens into a refinement chain or a plain passage lookup."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from scripture_search.core.query import IndividualSearch, SearchQuery, SearchToken
from scripture_search.core.search_types import NO_INTERLINEAR, SearchType, SortOrder, TokenType
from scripture_search.utils.observability import get_logger

from ..settings import SearchSettings


@dataclass(frozen=True)
class PassageLookup:
    """A request that names no search at all: render the passage directly."""

    version: str
    references: str
    options: str
    extra_versions: str
    display_mode: str


Plan = Union[SearchQuery, PassageLookup]


def extra_versions(versions: Sequence[str]) -> str:
    """Comma-joined versions after the master version."""

    return ",".join(versions[1:])


def word_search_type(strong: str) -> SearchType:
    return SearchType.ORIGINAL_GREEK_FORMS if strong[:1].upper() == "G" else SearchType.ORIGINAL_HEBREW_FORMS


class QueryPlanner:
    """Classify tokens into typed stages, word searches first, then meanings, then text."""

    def __init__(self, settings: Optional[SearchSettings] = None) -> None:
        self.settings = settings or SearchSettings()
        self._logger = get_logger(__name__).bind(component="query_planner")

    def plan(
        self,
        tokens: Iterable[SearchToken],
        *,
        options: str = "",
        display: Optional[str] = None,
        page: int = 1,
        filter: Optional[str] = None,
        context: int = 0,
        page_size: Optional[int] = None,
        sort_order: Optional[Union[SortOrder, str]] = None,
    ) -> Plan:
        versions: List[str] = []
        references: List[str] = []
        strong_searches: List[str] = []
        text_searches: List[str] = []
        meaning_searches: List[str] = []

        for token in tokens:
            token_type = TokenType.parse(token.token_type)
            value = (token.token or "").strip()
            if token_type is None or not value:
                self._logger.debug(
                    "Ignoring token",
                    context={"token_type": str(token.token_type), "token": token.token},
                )
                continue
            if token_type is TokenType.VERSION:
                versions.append(value)
            elif token_type is TokenType.REFERENCE:
                references.append(value)
            elif token_type is TokenType.STRONG_NUMBER:
                strong_searches.append(value)
            elif token_type is TokenType.TEXT_SEARCH:
                text_searches.append(value)
            elif token_type is TokenType.MEANINGS:
                meaning_searches.append(value)

        if not versions:
            versions.append(self.settings.default_version)

        display_mode = display.strip() if display and display.strip() else NO_INTERLINEAR
        filters: Tuple[str, ...] = tuple(filter.split()) if filter and filter.strip() else ()
        range_text = ";".join(references)

        searches: List[IndividualSearch] = []
        for strong in strong_searches:
            searches.append(
                IndividualSearch.create(word_search_type(strong), versions, strong, range_text, filters)
            )
        for meaning in meaning_searches:
            searches.append(
                IndividualSearch.create(SearchType.ORIGINAL_MEANING, versions, meaning, range_text, filters)
            )
        for text in text_searches:
            searches.append(IndividualSearch.create(SearchType.TEXT, versions, text, range_text))

        if not searches:
            self._logger.info(
                "No searches requested; planning passage lookup",
                context={"version": versions[0], "references": range_text},
            )
            return PassageLookup(
                version=versions[0],
                references=range_text,
                options=options or "",
                extra_versions=extra_versions(versions),
                display_mode=display_mode,
            )

        self._logger.info(
            "Planned search",
            context={
                "stages": [search.type.name for search in searches],
                "versions": versions,
                "references": range_text,
            },
        )
        return SearchQuery(
            searches=searches,
            page_number=page,
            page_size=page_size or self.settings.page_size,
            context=context,
            display_mode=display_mode,
            sort_order=SortOrder.parse(sort_order),
        )


__all__ = ["QueryPlanner", "PassageLookup", "Plan", "extra_versions", "word_search_type"]
