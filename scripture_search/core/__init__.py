"""Core data model and query helpers for scripture searches."""

from .errors import (
    InvalidSearchError,
    QuerySyntaxError,
    ScriptureSearchError,
    TranslatedSearchError,
    UnknownSearchError,
    UnsupportedRefinementError,
)
from .keys import intersect
from .lexicon import LexicalEntryDoc, LexiconSuggestion
from .query import IndividualSearch, SearchQuery, SearchToken
from .query_syntax import escape
from .results import (
    KeyedSearchResultSearchEntry,
    KeyedVerseContent,
    SearchResult,
    TimelineEventSearchEntry,
    VerseSearchEntry,
)
from .search_types import BaseVersion, SearchType, SortOrder, TokenType
from .strongs import get_query_syntax_for_strongs, split_to_strongs

__all__ = [
    "BaseVersion",
    "IndividualSearch",
    "InvalidSearchError",
    "KeyedSearchResultSearchEntry",
    "KeyedVerseContent",
    "LexicalEntryDoc",
    "LexiconSuggestion",
    "QuerySyntaxError",
    "ScriptureSearchError",
    "SearchQuery",
    "SearchResult",
    "SearchToken",
    "SearchType",
    "SortOrder",
    "TimelineEventSearchEntry",
    "TokenType",
    "TranslatedSearchError",
    "UnknownSearchError",
    "UnsupportedRefinementError",
    "VerseSearchEntry",
    "escape",
    "get_query_syntax_for_strongs",
    "intersect",
    "split_to_strongs",
]
