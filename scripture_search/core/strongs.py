"""Lemma identifier (Strong number) normalisation and query syntax helpers."""

from __future__ import annotations

import re
import unicodedata
from typing import Iterable, Optional, Tuple

from .search_types import SearchType

LEMMA_QUERY_FIELD = "lemma"
STRONG_PAD_WIDTH = 4

_STRONG_SPLIT = re.compile(r"[, ;]+")
_PREFIXED_STRONG = re.compile(r"^([GH])0*(\d+)(.*)$")
_HEBREW_MARKS = re.compile("[\u0591-\u05BD\u05BF\u05C1\u05C2\u05C4\u05C5\u05C7]")


def starts_like_strong_number(term: str) -> bool:
    """True when the first or second character of ``term`` is a digit."""

    if not term:
        return False
    return term[0].isdigit() or (len(term) > 1 and term[1].isdigit())


def pad_strong_number(strong: str, width: int = STRONG_PAD_WIDTH) -> str:
    """Zero-pad the numeric part of a prefixed identifier: ``G26`` -> ``G0026``.

    Values without a ``G``/``H`` prefix are returned unchanged.
    """

    match = _PREFIXED_STRONG.match(strong)
    if match is None:
        return strong
    prefix, digits, suffix = match.groups()
    return f"{prefix}{digits.zfill(width)}{suffix}"


def prefix_strong(term: str, search_type: SearchType) -> str:
    """Prefix a bare number with the language letter of ``search_type``."""

    prefix = search_type.lemma_prefix
    if prefix is None or not term[:1].isdigit():
        return term
    return prefix + term


def canonical_strong(term: str, search_type: SearchType) -> str:
    return pad_strong_number(prefix_strong(term, search_type).upper())


def split_to_strongs(query: str, search_type: SearchType) -> Tuple[str, ...]:
    """Split a list of identifiers into canonical form, keeping first-seen order."""

    seen: dict[str, None] = {}
    for part in _STRONG_SPLIT.split(query or ""):
        if not part:
            continue
        seen.setdefault(canonical_strong(part, search_type), None)
    return tuple(seen)


def get_query_syntax_for_strongs(strongs: Iterable[str], main_range: Optional[str] = None) -> str:
    """Build the corpus query selecting verses tagged with any of ``strongs``.

    The optional range clause is prepended; the result is trimmed and lower-cased.
    """

    query = " ".join(f"{LEMMA_QUERY_FIELD}:{strong}" for strong in strongs)
    if main_range and main_range.strip():
        query = f"{main_range.strip()} {query}"
    return query.strip().lower()


def strip_accents(text: str) -> str:
    """Remove accents, breathings and vowel points, keeping base letters."""

    decomposed = unicodedata.normalize("NFD", text or "")
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return unicodedata.normalize("NFC", stripped)


def unaccent(text: str, greek: bool = True) -> str:
    """Greek loses accents and breathings; Hebrew loses vowel points and cantillation."""

    if greek:
        return strip_accents(text)
    return _HEBREW_MARKS.sub("", unicodedata.normalize("NFD", text or ""))


__all__ = [
    "LEMMA_QUERY_FIELD",
    "STRONG_PAD_WIDTH",
    "starts_like_strong_number",
    "pad_strong_number",
    "prefix_strong",
    "canonical_strong",
    "split_to_strongs",
    "get_query_syntax_for_strongs",
    "strip_accents",
    "unaccent",
]
