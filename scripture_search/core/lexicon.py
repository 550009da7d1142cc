"""Lexical entry documents resolved from the lexicon indexes."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

STRONG_NUMBER_FIELD = "strongNumber"
GLOSS_FIELD = "stepGloss"
TRANSLITERATION_FIELD = "stepTransliteration"
ACCENTED_UNICODE_FIELD = "accentedUnicode"
RELATED_NUMBERS_FIELD = "relatedNumbers"
STOP_WORD_FIELD = "stopWord"

_RELATED_SPLIT = re.compile(r"[,\s]+")


def _field(document: Any, name: str) -> Optional[str]:
    getter = getattr(document, "get", None)
    if getter is None:
        return None
    value = getter(name)
    return None if value is None else str(value)


@dataclass(frozen=True)
class LexicalEntryDoc:
    """A lexicon definition for one lemma identifier."""

    strong_number: str
    gloss: str = ""
    transliteration: str = ""
    accented_unicode: str = ""
    related_numbers: Tuple[str, ...] = ()
    fields: Mapping[str, str] = field(default_factory=dict, compare=False, hash=False, repr=False)

    @classmethod
    def from_document(cls, document: Any) -> "LexicalEntryDoc":
        """Build an entry from an index document exposing ``get(field)``."""

        if isinstance(document, LexicalEntryDoc):
            return document
        raw: Dict[str, str] = {}
        items = getattr(document, "items", None)
        if callable(items):
            raw = {str(key): str(value) for key, value in items() if value is not None}
        related = _field(document, RELATED_NUMBERS_FIELD) or ""
        return cls(
            strong_number=_field(document, STRONG_NUMBER_FIELD) or "",
            gloss=_field(document, GLOSS_FIELD) or "",
            transliteration=_field(document, TRANSLITERATION_FIELD) or "",
            accented_unicode=_field(document, ACCENTED_UNICODE_FIELD) or "",
            related_numbers=tuple(part for part in _RELATED_SPLIT.split(related) if part),
            fields=raw,
        )

    def get(self, name: str) -> Optional[str]:
        if name == STRONG_NUMBER_FIELD:
            return self.strong_number
        if name == GLOSS_FIELD:
            return self.gloss
        if name == TRANSLITERATION_FIELD:
            return self.transliteration
        if name == ACCENTED_UNICODE_FIELD:
            return self.accented_unicode
        if name == RELATED_NUMBERS_FIELD:
            return ",".join(self.related_numbers)
        return self.fields.get(name)


@dataclass(frozen=True)
class LexiconSuggestion:
    """Summary of a definition attached to a search result."""

    strong_number: str
    gloss: str
    transliteration: str
    accented_unicode: str

    @classmethod
    def from_entry(cls, entry: LexicalEntryDoc) -> "LexiconSuggestion":
        return cls(
            strong_number=entry.strong_number,
            gloss=entry.gloss,
            transliteration=entry.transliteration,
            accented_unicode=entry.accented_unicode,
        )

    def to_dict(self) -> Dict[str, str]:
        return {
            "strongNumber": self.strong_number,
            "gloss": self.gloss,
            "stepTransliteration": self.transliteration,
            "matchingForm": self.accented_unicode,
        }


__all__ = [
    "STRONG_NUMBER_FIELD",
    "GLOSS_FIELD",
    "TRANSLITERATION_FIELD",
    "ACCENTED_UNICODE_FIELD",
    "RELATED_NUMBERS_FIELD",
    "STOP_WORD_FIELD",
    "LexicalEntryDoc",
    "LexiconSuggestion",
]
