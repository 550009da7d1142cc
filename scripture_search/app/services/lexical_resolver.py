"""Resolve user terms to lemma identifiers and rewrite stages into corpus queries."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple, Union

from scripture_search.core.interfaces import EntityIndex, IndexDocument
from scripture_search.core.lexicon import (
    ACCENTED_UNICODE_FIELD,
    STOP_WORD_FIELD,
    STRONG_NUMBER_FIELD,
    LexicalEntryDoc,
)
from scripture_search.core.query import IndividualSearch, SearchQuery
from scripture_search.core.query_syntax import escape
from scripture_search.core.strongs import (
    get_query_syntax_for_strongs,
    split_to_strongs,
    starts_like_strong_number,
    strip_accents,
)
from scripture_search.utils.observability import get_logger

SIMPLIFIED_TRANSLITERATION_FIELD = "simplifiedTransliteration"
STEP_TRANSLITERATION_FIELD = "stepTransliteration"
OTHER_TRANSLITERATION_FIELD = "otherTransliteration"
TRANSLATIONS_STEM_FIELD = "translationsStem"
GLOSS_STEM_FIELD = "stepGlossStem"
TRANSLITERATION_FIELDS = (
    SIMPLIFIED_TRANSLITERATION_FIELD,
    STEP_TRANSLITERATION_FIELD,
    OTHER_TRANSLITERATION_FIELD,
)

EXCLUDE_STOP_WORDS = f"-{STOP_WORD_FIELD}:true "

_NON_LETTERS = re.compile(r"[^a-z%]")
_REPEATED = re.compile(r"(.)\1+")


def simplify_transliteration(text: str) -> str:
    """Reduce a transliteration to the simplified form stored in the index.

    Accents and punctuation are dropped and doubled letters collapsed, so
    ``Agapē`` and ``agappe`` both become ``agape``.
    """

    lowered = strip_accents(text).lower()
    return _REPEATED.sub(r"\1", _NON_LETTERS.sub("", lowered))


def language_filter(greek: bool) -> Tuple[str, str]:
    """Prefix filter restricting matches to Greek or Hebrew identifiers."""

    return (STRONG_NUMBER_FIELD, "G" if greek else "H")


@dataclass(frozen=True)
class Resolved:
    """Identifiers found for a stage, with the stage rewritten as a corpus query.

    ``definitions`` is ``None`` when the resolution does not change the
    working set of lexicon definitions.
    """

    strongs: Tuple[str, ...]
    search: IndividualSearch
    definitions: Optional[Tuple[LexicalEntryDoc, ...]] = None


@dataclass(frozen=True)
class NoMatch:
    """Nothing in the lexicon matches the term; the search yields no results."""

    term: str
    reason: str


Resolution = Union[Resolved, NoMatch]


def _strong_lookup_query(strongs: Iterable[str]) -> str:
    return EXCLUDE_STOP_WORDS + " ".join(escape(strong) for strong in strongs)


def _unique_strongs(documents: Iterable[IndexDocument]) -> Tuple[str, ...]:
    seen: Dict[str, None] = {}
    for document in documents:
        strong = document.get(STRONG_NUMBER_FIELD)
        if strong:
            seen.setdefault(strong, None)
    return tuple(seen)


class LexicalResolver:
    """Looks terms up in the definition and specific-form indexes."""

    def __init__(self, definitions: EntityIndex, specific_forms: EntityIndex) -> None:
        self.definitions = definitions
        self.specific_forms = specific_forms
        self._logger = get_logger(__name__).bind(component="lexical_resolver")

    # Identifier lookup -----------------------------------------------------
    def strongs_from_text(self, search: IndividualSearch) -> Union[Tuple[str, ...], NoMatch]:
        """Work out whether the stage query is a lemma number, an original-language
        form or a transliteration, and return the identifiers it denotes."""

        query = search.query
        if not query:
            return ()

        wildcard = query.endswith("*")
        search_query = query.replace("*", "%") if wildcard else query

        if starts_like_strong_number(query):
            self._logger.debug("Resolving lemma numbers", context={"query": query})
            strongs: Tuple[str, ...] = split_to_strongs(query, search.type)
        else:
            strongs = self._search_text_fields(search_query)

        if not strongs and (search.type.is_greek or search.type.is_hebrew):
            return self._find_by_transliteration(search_query, search.type.is_greek)
        return strongs

    def _search_text_fields(self, search_query: str) -> Tuple[str, ...]:
        forms = self.specific_forms.search_single_column(ACCENTED_UNICODE_FIELD, search_query)
        if not forms:
            return self._lookup_from_lexicon(search_query)
        strongs = _unique_strongs(forms)
        if len(strongs) > 1:
            self._logger.debug(
                "Original form matched several lemmas",
                context={"query": search_query, "strongs": list(strongs)},
            )
        return strongs

    def _lookup_from_lexicon(self, search_query: str) -> Tuple[str, ...]:
        documents = self.definitions.search(escape(search_query), (ACCENTED_UNICODE_FIELD,))
        return _unique_strongs(documents)

    def _find_by_transliteration(self, search_query: str, greek: bool) -> Union[Tuple[str, ...], NoMatch]:
        lower_query = search_query.lower()

        forms = self.specific_forms.search_single_column(
            SIMPLIFIED_TRANSLITERATION_FIELD,
            simplify_transliteration(lower_query),
            language_filter(greek),
        )
        if forms:
            return _unique_strongs(forms)

        matches = self.definitions.search(EXCLUDE_STOP_WORDS + lower_query, TRANSLITERATION_FIELDS)
        if not matches:
            self._logger.info(
                "No lexicon entry matches term",
                context={"query": search_query, "greek": greek},
            )
            return NoMatch(search_query, "no definition or transliteration matches the term")
        return _unique_strongs(matches)

    # Stage rewriting -------------------------------------------------------
    def resolve_forms(self, sq: SearchQuery) -> Resolution:
        """Resolve every form of the lemma(s) named by the current stage."""

        search = sq.current_search
        found = self.strongs_from_text(search)
        if isinstance(found, NoMatch):
            return found

        strongs = tuple(strong for strong in found if search.allows(strong))
        return self._rewrite(search, strongs)

    def resolve_related(self, sq: SearchQuery) -> Resolution:
        """Resolve the stage's lemmas plus every lemma the lexicon lists as related."""

        search = sq.current_search
        found = self.strongs_from_text(search)
        if isinstance(found, NoMatch):
            return found

        kept: Dict[str, None] = {}
        direct = self._retrieve_definitions(search, _strong_lookup_query(found), kept)
        related_numbers: List[str] = []
        for document in direct:
            related_numbers.extend(LexicalEntryDoc.from_document(document).related_numbers)
        related = self._retrieve_definitions(search, _strong_lookup_query(related_numbers), kept)

        definitions: Dict[str, LexicalEntryDoc] = {}
        for document in list(direct) + list(related):
            entry = LexicalEntryDoc.from_document(document)
            definitions.setdefault(entry.strong_number, entry)

        return self._rewrite(search, tuple(kept), tuple(definitions.values()))

    def _retrieve_definitions(
        self,
        search: IndividualSearch,
        query: str,
        kept: Dict[str, None],
    ) -> List[IndexDocument]:
        documents = self.definitions.search(query, (STRONG_NUMBER_FIELD,))
        for document in documents:
            strong = document.get(STRONG_NUMBER_FIELD)
            if strong and search.allows(strong):
                kept.setdefault(strong, None)
        return documents

    def resolve_meaning(self, sq: SearchQuery) -> Resolution:
        """Resolve lemmas whose translations or gloss match the stage's English terms."""

        search = sq.current_search
        clauses = []
        for term in search.query.split():
            escaped = escape(term)
            clauses.append(f"{escaped} {GLOSS_STEM_FIELD}:{escaped}")
        if not clauses:
            return NoMatch(search.query, "no meaning terms supplied")

        documents = self.definitions.search(
            EXCLUDE_STOP_WORDS + " ".join(clauses), (TRANSLATIONS_STEM_FIELD,)
        )

        kept: Dict[str, None] = {}
        for document in documents:
            strong = document.get(STRONG_NUMBER_FIELD)
            if strong and search.allows(strong):
                kept.setdefault(strong, None)

        definitions = tuple(LexicalEntryDoc.from_document(document) for document in documents)
        return self._rewrite(search, tuple(kept), definitions)

    def _rewrite(
        self,
        search: IndividualSearch,
        strongs: Tuple[str, ...],
        definitions: Optional[Tuple[LexicalEntryDoc, ...]] = None,
    ) -> Resolution:
        # a lemma query without lemmas would select every verse in the range
        if not strongs:
            self._logger.info(
                "No lemma survives resolution",
                context={
                    "query": search.query,
                    "type": search.type.name,
                    "restriction": list(search.original_filter),
                },
            )
            return NoMatch(search.query, "no lemma matches the term and restriction")

        rewritten = search.with_query(get_query_syntax_for_strongs(strongs, search.main_range))
        return Resolved(strongs, rewritten, definitions)


__all__ = [
    "LexicalResolver",
    "Resolved",
    "NoMatch",
    "Resolution",
    "simplify_transliteration",
    "language_filter",
]
