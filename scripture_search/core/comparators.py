"""Sort keys for ordering lexicon definitions."""

from __future__ import annotations

from typing import Any, Callable, Tuple

from .lexicon import LexicalEntryDoc
from .search_types import SortOrder
from .strongs import strip_accents

DefinitionKey = Callable[[LexicalEntryDoc], Tuple[Any, ...]]


def gloss_key(definition: LexicalEntryDoc) -> Tuple[str, str]:
    """Order by English gloss, case-insensitively, then by identifier."""

    return (definition.gloss.casefold(), definition.strong_number)


def original_spelling_key(definition: LexicalEntryDoc) -> Tuple[str, str]:
    """Order by the unaccented original spelling, then by identifier."""

    return (strip_accents(definition.accented_unicode).casefold(), definition.strong_number)


def key_for(order: SortOrder) -> DefinitionKey:
    if order is SortOrder.VOCABULARY:
        return gloss_key
    if order is SortOrder.ORIGINAL_SPELLING:
        return original_spelling_key
    raise ValueError(f"No comparator for sort order {order!r}")


__all__ = ["DefinitionKey", "gloss_key", "original_spelling_key", "key_for"]
