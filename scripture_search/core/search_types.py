"""Enumerations and fixed constants describing search kinds."""

from __future__ import annotations

from enum import Enum
from typing import Optional

REFERENCE_VERSION = "KJV"
NO_INTERLINEAR = "NONE"
DEFAULT_PAGE_SIZE = 50


class SearchType(Enum):
    """Kinds of individual search, with their language affinity and display key."""

    TEXT = ("search_text", False, False)
    SUBJECT_SIMPLE = ("search_subject", False, False)
    SUBJECT_EXTENDED = ("search_subject_extended", False, False)
    SUBJECT_FULL = ("search_subject_full", False, False)
    SUBJECT_RELATED = ("search_subject_related", False, False)
    TIMELINE_DESCRIPTION = ("search_timeline_description", False, False)
    TIMELINE_REFERENCE = ("search_timeline_reference", False, False)
    ORIGINAL_GREEK_FORMS = ("search_greek_forms", True, False)
    ORIGINAL_HEBREW_FORMS = ("search_hebrew_forms", False, True)
    ORIGINAL_GREEK_RELATED = ("search_greek_related", True, False)
    ORIGINAL_HEBREW_RELATED = ("search_hebrew_related", False, True)
    ORIGINAL_GREEK_EXACT = ("search_greek_exact", True, False)
    ORIGINAL_HEBREW_EXACT = ("search_hebrew_exact", False, True)
    ORIGINAL_MEANING = ("search_meaning", False, False)

    def __init__(self, language_key: str, greek: bool, hebrew: bool) -> None:
        self.language_key = language_key
        self.is_greek = greek
        self.is_hebrew = hebrew

    @property
    def lemma_prefix(self) -> Optional[str]:
        """``G``/``H`` for the original-language types, ``None`` otherwise."""

        if self.is_greek:
            return "G"
        if self.is_hebrew:
            return "H"
        return None

    @property
    def is_subject(self) -> bool:
        return self in _SUBJECT_TYPES

    @property
    def is_original_forms(self) -> bool:
        return self in (SearchType.ORIGINAL_GREEK_FORMS, SearchType.ORIGINAL_HEBREW_FORMS)

    @property
    def is_related(self) -> bool:
        return self in (SearchType.ORIGINAL_GREEK_RELATED, SearchType.ORIGINAL_HEBREW_RELATED)

    @property
    def is_exact(self) -> bool:
        return self in (SearchType.ORIGINAL_GREEK_EXACT, SearchType.ORIGINAL_HEBREW_EXACT)

    @property
    def is_verse_based(self) -> bool:
        """Whether results of this type are verse keys that can be joined."""

        return self in _VERSE_BASED_TYPES


_SUBJECT_TYPES = frozenset(
    {
        SearchType.SUBJECT_SIMPLE,
        SearchType.SUBJECT_EXTENDED,
        SearchType.SUBJECT_FULL,
        SearchType.SUBJECT_RELATED,
    }
)

_VERSE_BASED_TYPES = frozenset(
    {
        SearchType.TEXT,
        SearchType.ORIGINAL_MEANING,
        SearchType.ORIGINAL_GREEK_EXACT,
        SearchType.ORIGINAL_GREEK_FORMS,
        SearchType.ORIGINAL_GREEK_RELATED,
        SearchType.ORIGINAL_HEBREW_EXACT,
        SearchType.ORIGINAL_HEBREW_FORMS,
        SearchType.ORIGINAL_HEBREW_RELATED,
    }
)


class SortOrder(Enum):
    """Special orderings applied when several lemma identifiers are highlighted."""

    VOCABULARY = "VOCABULARY"
    ORIGINAL_SPELLING = "ORIGINAL_SPELLING"

    @classmethod
    def parse(cls, value: "SortOrder | str | None") -> Optional["SortOrder"]:
        """Return the matching order, or ``None`` for blank and unknown values."""

        if value is None or isinstance(value, SortOrder):
            return value
        normalized = str(value).strip().upper()
        for member in cls:
            if member.value == normalized:
                return member
        return None


class BaseVersion(Enum):
    """Base original-language texts searched by exact-form searches."""

    GREEK = "WHNU"
    HEBREW = "OSMHB"

    @classmethod
    def for_search_type(cls, search_type: SearchType) -> "BaseVersion":
        return cls.GREEK if search_type.is_greek else cls.HEBREW


class TokenType(Enum):
    """Kinds of token submitted by the client to describe a search."""

    VERSION = "version"
    REFERENCE = "reference"
    STRONG_NUMBER = "strong"
    TEXT_SEARCH = "text"
    MEANINGS = "meanings"

    @classmethod
    def parse(cls, value: "TokenType | str") -> Optional["TokenType"]:
        if isinstance(value, TokenType):
            return value
        normalized = str(value or "").strip().lower()
        for member in cls:
            if member.value == normalized or member.name.lower() == normalized:
                return member
        return None


__all__ = [
    "REFERENCE_VERSION",
    "NO_INTERLINEAR",
    "DEFAULT_PAGE_SIZE",
    "SearchType",
    "SortOrder",
    "BaseVersion",
    "TokenType",
]
