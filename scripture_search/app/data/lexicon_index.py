"""Tantivy full-text indexes for the lexicon and timeline entities."""

from __future__ import annotations

import os
import re
import threading
import unicodedata
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import tantivy

from scripture_search.core.errors import QuerySyntaxError
from scripture_search.utils.observability import get_logger

DEFINITION_ENTITY = "definition"
SPECIFIC_FORM_ENTITY = "specificForm"
TIMELINE_EVENT_ENTITY = "timelineEvent"

LEXICON_FIELDS: Tuple[str, ...] = (
    "strongNumber",
    "stepGloss",
    "stepTransliteration",
    "simplifiedTransliteration",
    "otherTransliteration",
    "accentedUnicode",
    "relatedNumbers",
    "translationsStem",
    "stepGlossStem",
    "stopWord",
)
TIMELINE_FIELDS: Tuple[str, ...] = ("id", "name", "description", "storedReferences")

ENTITY_FIELDS: Dict[str, Tuple[str, ...]] = {
    DEFINITION_ENTITY: LEXICON_FIELDS,
    SPECIFIC_FORM_ENTITY: LEXICON_FIELDS,
    TIMELINE_EVENT_ENTITY: TIMELINE_FIELDS,
}

PREFIX_WILDCARD = "%"
EXACT_SUFFIX = "_exact"
WHITESPACE_TOKENIZER = "lexicon_whitespace"
# original-language spellings carry combining marks the default tokenizer splits on
WHITESPACE_FIELDS = frozenset({"accentedUnicode"})

_WRITER_HEAP_SIZE = 50_000_000


def _normalise_value(value: str) -> str:
    return unicodedata.normalize("NFC", str(value or "")).strip().lower()


def _tokenizer_for(field_name: str) -> str:
    if field_name.endswith("Stem"):
        return "en_stem"
    if field_name in WHITESPACE_FIELDS:
        return WHITESPACE_TOKENIZER
    return "default"


def _build_schema(fields: Sequence[str]) -> tantivy.Schema:
    builder = tantivy.SchemaBuilder()
    for name in fields:
        builder.add_text_field(name, stored=True, tokenizer_name=_tokenizer_for(name))
        builder.add_text_field(name + EXACT_SUFFIX, stored=False, tokenizer_name="raw")
    return builder.build()


class TantivyEntityIndex:
    """Ranked full-text search over the documents of one entity kind.

    Every field is stored and indexed twice: once analysed for query-string
    searches and once as a lower-cased raw term for single-column lookups.
    Without ``index_dir`` the index lives in memory.
    """

    def __init__(
        self,
        entity: str = DEFINITION_ENTITY,
        *,
        index_dir: Optional[str] = None,
        fields: Optional[Sequence[str]] = None,
    ) -> None:
        self.entity = entity
        self.fields: Tuple[str, ...] = tuple(fields or ENTITY_FIELDS.get(entity, LEXICON_FIELDS))
        self.path = os.path.join(index_dir, entity) if index_dir else None
        self._write_lock = threading.Lock()
        self._logger = get_logger(__name__).bind(
            component="entity_index",
            entity=entity,
            path=self.path or ":memory:",
        )

        schema = _build_schema(self.fields)
        if self.path is None:
            self._index = tantivy.Index(schema)
        else:
            os.makedirs(self.path, exist_ok=True)
            self._index = tantivy.Index(schema, path=self.path)
        self._index.register_tokenizer(
            WHITESPACE_TOKENIZER,
            tantivy.TextAnalyzerBuilder(tantivy.Tokenizer.whitespace())
            .filter(tantivy.Filter.lowercase())
            .build(),
        )
        self._logger.info("Entity index initialised", context={"fields": list(self.fields)})

    # Loading ---------------------------------------------------------------
    def load_documents(self, documents: Iterable[Mapping[str, str]]) -> int:
        """Add ``documents`` to the index; returns how many were stored."""

        stored = 0
        skipped_fields = set()
        with self._write_lock:
            writer = self._index.writer(heap_size=_WRITER_HEAP_SIZE, num_threads=1)
            for document in documents:
                tantivy_document = tantivy.Document()
                for name, value in document.items():
                    if value is None:
                        continue
                    if name not in self.fields:
                        skipped_fields.add(name)
                        continue
                    text = unicodedata.normalize("NFC", str(value))
                    tantivy_document.add_text(name, text)
                    tantivy_document.add_text(name + EXACT_SUFFIX, _normalise_value(text))
                writer.add_document(tantivy_document)
                stored += 1
            writer.commit()
            writer.wait_merging_threads()
        self._index.reload()

        if skipped_fields:
            self._logger.warning(
                "Document fields outside the schema were not indexed",
                context={"fields": sorted(skipped_fields)},
            )
        self._logger.info("Documents loaded", context={"count": stored})
        return stored

    def count(self) -> int:
        return int(self._index.searcher().num_docs)

    # Searching -------------------------------------------------------------
    def search(self, query: str, default_fields: Sequence[str]) -> List[Dict[str, str]]:
        """Documents matching the query string, best match first."""

        text = unicodedata.normalize("NFC", query or "")
        try:
            parsed = self._index.parse_query(text, list(default_fields))
        except ValueError as exc:
            raise QuerySyntaxError(str(exc), query=text) from exc

        documents = self._execute(parsed)
        self._logger.debug(
            "Index search",
            context={"query": text, "default_fields": list(default_fields), "matches": len(documents)},
        )
        return documents

    def search_single_column(
        self,
        field_name: str,
        value: str,
        prefix_filter: Optional[Tuple[str, str]] = None,
    ) -> List[Dict[str, str]]:
        """Documents whose ``field_name`` equals ``value``; a trailing ``%`` matches a prefix.

        ``prefix_filter`` is a ``(field, prefix)`` pair every match must also satisfy.
        """

        normalised = _normalise_value(value)
        if not normalised or normalised == PREFIX_WILDCARD:
            return []

        schema = self._index.schema
        exact_field = field_name + EXACT_SUFFIX
        if normalised.endswith(PREFIX_WILDCARD):
            lookup = tantivy.Query.regex_query(schema, exact_field, self._prefix_pattern(normalised))
        else:
            lookup = tantivy.Query.term_query(schema, exact_field, normalised)

        if prefix_filter is not None:
            filter_field, prefix = prefix_filter
            restriction = tantivy.Query.regex_query(
                schema, filter_field + EXACT_SUFFIX, self._prefix_pattern(_normalise_value(prefix))
            )
            lookup = tantivy.Query.boolean_query(
                [(tantivy.Occur.Must, lookup), (tantivy.Occur.Must, restriction)]
            )
        return self._execute(lookup)

    @staticmethod
    def _prefix_pattern(prefix: str) -> str:
        return re.escape(prefix.rstrip(PREFIX_WILDCARD)) + ".*"

    def _execute(self, query: tantivy.Query) -> List[Dict[str, str]]:
        searcher = self._index.searcher()
        total = searcher.num_docs
        if not total:
            return []
        hits = searcher.search(query, total).hits
        documents = []
        for _score, address in hits:
            stored = searcher.doc(address).to_dict()
            documents.append({name: values[0] for name, values in stored.items() if values})
        return documents


__all__ = [
    "TantivyEntityIndex",
    "DEFINITION_ENTITY",
    "SPECIFIC_FORM_ENTITY",
    "TIMELINE_EVENT_ENTITY",
    "ENTITY_FIELDS",
]
