"""Contracts of the collaborators the search service orchestrates."""

from __future__ import annotations

from typing import Any, List, Mapping, Optional, Protocol, Sequence, Tuple

from .query import SearchQuery
from .results import SearchResult

IndexDocument = Mapping[str, str]


class EntityIndex(Protocol):
    """A full-text index over lexicon or timeline documents."""

    def search(self, query: str, default_fields: Sequence[str]) -> List[IndexDocument]:
        """Documents matching the query string in rank order."""

    def search_single_column(
        self,
        field_name: str,
        value: str,
        prefix_filter: Optional[Tuple[str, str]] = None,
    ) -> List[IndexDocument]:
        """Documents whose ``field_name`` equals ``value`` (trailing ``%`` for a prefix),
        optionally restricted to documents whose ``prefix_filter`` field starts with a prefix."""


class CorpusSearchService(Protocol):
    """The verse corpus: key searches, ranking and rendering."""

    def search(self, sq: SearchQuery, version: str) -> SearchResult:
        ...

    def search_keys(self, sq: SearchQuery) -> List[str]:
        ...

    def rank_and_trim_results(self, sq: SearchQuery, keys: Sequence[str]) -> List[str]:
        ...

    def get_results_from_trimmed_keys(
        self,
        sq: SearchQuery,
        versions: Sequence[str],
        total: int,
        paged_keys: Sequence[str],
    ) -> SearchResult:
        ...

    def get_total(self, keys: Sequence[str]) -> int:
        ...

    def estimate_search_results(self, sq: SearchQuery) -> int:
        ...


class MetadataService(Protocol):
    def get_languages(self, versions: Sequence[str]) -> List[str]:
        ...


class TimelineService(Protocol):
    def lookup_events_matching_reference(self, reference: str) -> List[IndexDocument]:
        ...


class SubjectSearchService(Protocol):
    def search(self, sq: SearchQuery) -> SearchResult:
        ...


class BibleInformationService(Protocol):
    def get_passage_text(
        self,
        version: str,
        references: str,
        options: str,
        extra_versions: str,
        display_mode: str,
    ) -> Any:
        ...


__all__ = [
    "IndexDocument",
    "EntityIndex",
    "CorpusSearchService",
    "MetadataService",
    "TimelineService",
    "SubjectSearchService",
    "BibleInformationService",
]
