"""Query model: tokens, individual search stages and the refinement chain."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable, List, Optional, Sequence, Tuple

from .lexicon import LexicalEntryDoc
from .search_types import DEFAULT_PAGE_SIZE, NO_INTERLINEAR, SearchType, SortOrder, TokenType


@dataclass(frozen=True)
class SearchToken:
    """A typed token submitted by the client."""

    token_type: TokenType
    token: str


def build_main_range(references: Optional[str]) -> Optional[str]:
    """Return the range clause prefixed to index queries for ``references``."""

    cleaned = (references or "").strip()
    if not cleaned:
        return None
    return f"+[{cleaned}] "


@dataclass(frozen=True)
class IndividualSearch:
    """One stage of a refinement chain.

    Stages are immutable: resolution produces a new stage through
    :meth:`with_query` or :meth:`with_versions` and the owning
    :class:`SearchQuery` swaps it in with :meth:`SearchQuery.replace_current`.
    """

    type: SearchType
    versions: Tuple[str, ...]
    query: str
    main_range: Optional[str] = None
    original_filter: Tuple[str, ...] = ()

    @classmethod
    def create(
        cls,
        search_type: SearchType,
        versions: Iterable[str],
        query: str,
        references: Optional[str] = None,
        original_filter: Optional[Iterable[str]] = None,
    ) -> "IndividualSearch":
        return cls(
            type=search_type,
            versions=tuple(versions),
            query=query or "",
            main_range=build_main_range(references),
            original_filter=tuple(value for value in (original_filter or ()) if value),
        )

    def with_query(self, query: str) -> "IndividualSearch":
        return replace(self, query=query)

    def with_versions(self, versions: Iterable[str]) -> "IndividualSearch":
        return replace(self, versions=tuple(versions))

    def allows(self, strong_number: str) -> bool:
        """True when no identifier restriction is active or it contains ``strong_number``."""

        return not self.original_filter or strong_number in self.original_filter


@dataclass
class SearchQuery:
    """A whole search request: paging, display options and the stage chain.

    Exactly one stage is current at a time; :meth:`has_more_searches` moves the
    cursor forward and never back.
    """

    searches: Sequence[IndividualSearch]
    page_number: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    context: int = 0
    display_mode: str = NO_INTERLINEAR
    original_query: Optional[str] = None
    sort_order: Optional[SortOrder] = None
    definitions: List[LexicalEntryDoc] = field(default_factory=list)
    all_keys: bool = True
    _cursor: int = field(default=0, init=False, repr=False)

    def __post_init__(self) -> None:
        self.searches = tuple(self.searches)
        if not self.searches:
            raise ValueError("A search query requires at least one individual search")
        self.page_number = max(1, int(self.page_number))
        self.page_size = max(1, int(self.page_size))
        self.sort_order = SortOrder.parse(self.sort_order)
        if self.original_query is None:
            self.original_query = "|".join(search.query for search in self.searches)

    @property
    def current_search(self) -> IndividualSearch:
        return self.searches[self._cursor]

    @property
    def last_search(self) -> IndividualSearch:
        return self.searches[-1]

    @property
    def cursor(self) -> int:
        return self._cursor

    def is_individual_search(self) -> bool:
        return len(self.searches) == 1

    def has_more_searches(self) -> bool:
        """Advance to the next stage, returning ``False`` once the chain is exhausted."""

        if self._cursor + 1 < len(self.searches):
            self._cursor += 1
            return True
        return False

    def replace_current(self, search: IndividualSearch) -> IndividualSearch:
        """Swap the current stage for ``search``, returning the stage it replaced."""

        previous = self.searches[self._cursor]
        stages = list(self.searches)
        stages[self._cursor] = search
        self.searches = tuple(stages)
        return previous

    def set_definitions(self, definitions: Iterable[LexicalEntryDoc]) -> None:
        self.definitions = list(definitions)


__all__ = ["SearchToken", "IndividualSearch", "SearchQuery", "build_main_range"]
