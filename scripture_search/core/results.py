"""Search result model.

Entries form a closed set of variants. Each variant declares its ``kind`` and
whether it can carry a lexical annotation (gloss, transliteration and
accented spelling) stamped on during the special sort.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Sequence, Tuple

from .lexicon import LexiconSuggestion
from .search_types import SearchType, SortOrder


class EntryKind(Enum):
    VERSE = "verse"
    KEYED = "keyed"
    TIMELINE_EVENT = "timelineEvent"


@dataclass(frozen=True)
class LexicalAnnotation:
    gloss: str = ""
    transliteration: str = ""
    accented_unicode: str = ""


@dataclass
class SearchEntry:
    """Base for every result entry."""

    kind: ClassVar[EntryKind]
    is_lexical: ClassVar[bool] = False

    def preview_texts(self) -> Tuple[str, ...]:
        """Texts inspected when grouping entries by lemma identifier."""

        return ()

    def to_dict(self) -> Dict[str, Any]:
        raise NotImplementedError


@dataclass
class _LexicalEntry(SearchEntry):
    is_lexical: ClassVar[bool] = True

    annotation: Optional[LexicalAnnotation] = field(default=None, kw_only=True)

    def annotate(self, annotation: LexicalAnnotation) -> None:
        self.annotation = annotation

    def _annotation_dict(self) -> Dict[str, str]:
        if self.annotation is None:
            return {}
        return {
            "stepGloss": self.annotation.gloss,
            "stepTransliteration": self.annotation.transliteration,
            "accentedUnicode": self.annotation.accented_unicode,
        }


@dataclass
class VerseSearchEntry(_LexicalEntry):
    """A single verse reference and its rendered preview."""

    kind: ClassVar[EntryKind] = EntryKind.VERSE

    key: str = ""
    preview: str = ""

    def preview_texts(self) -> Tuple[str, ...]:
        return (self.preview,)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"kind": self.kind.value, "key": self.key, "preview": self.preview}
        payload.update(self._annotation_dict())
        return payload


@dataclass(frozen=True)
class KeyedVerseContent:
    """The text of one verse in one version."""

    version: str
    preview: str


@dataclass
class KeyedSearchResultSearchEntry(_LexicalEntry):
    """A verse key rendered in several versions side by side."""

    kind: ClassVar[EntryKind] = EntryKind.KEYED

    key: str = ""
    verse_content: List[KeyedVerseContent] = field(default_factory=list)

    def preview_texts(self) -> Tuple[str, ...]:
        return tuple(content.preview for content in self.verse_content)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "kind": self.kind.value,
            "key": self.key,
            "verseContent": [
                {"version": content.version, "preview": content.preview}
                for content in self.verse_content
            ],
        }
        payload.update(self._annotation_dict())
        return payload


@dataclass
class TimelineEventSearchEntry(SearchEntry):
    """A timeline event and the verses it refers to."""

    kind: ClassVar[EntryKind] = EntryKind.TIMELINE_EVENT

    id: str = ""
    description: str = ""
    verses: List[VerseSearchEntry] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "id": self.id,
            "description": self.description,
            "verses": [verse.to_dict() for verse in self.verses],
        }


@dataclass
class SearchResult:
    """A page of results with the metadata describing how it was produced."""

    results: List[SearchEntry] = field(default_factory=list)
    total: int = 0
    page_size: int = 0
    page_number: int = 0
    time_took_total: int = 0
    query: str = ""
    master_version: Optional[str] = None
    extra_versions: str = ""
    strong_highlights: Tuple[str, ...] = ()
    definitions: List[LexiconSuggestion] = field(default_factory=list)
    language_code: List[str] = field(default_factory=list)
    order: Optional[SortOrder] = None
    search_type: Optional[SearchType] = None

    @classmethod
    def empty(cls) -> "SearchResult":
        return cls()

    def set_strong_highlights(self, strongs: Sequence[str]) -> None:
        self.strong_highlights = tuple(dict.fromkeys(strongs))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "results": [entry.to_dict() for entry in self.results],
            "total": self.total,
            "pageSize": self.page_size,
            "pageNumber": self.page_number,
            "timeTookTotal": self.time_took_total,
            "query": self.query,
            "masterVersion": self.master_version,
            "extraVersions": self.extra_versions,
            "strongHighlights": list(self.strong_highlights),
            "definitions": [definition.to_dict() for definition in self.definitions],
            "languageCode": list(self.language_code),
            "order": self.order.value if self.order else None,
            "searchType": self.search_type.name if self.search_type else None,
        }


__all__ = [
    "EntryKind",
    "LexicalAnnotation",
    "SearchEntry",
    "VerseSearchEntry",
    "KeyedVerseContent",
    "KeyedSearchResultSearchEntry",
    "TimelineEventSearchEntry",
    "SearchResult",
]
