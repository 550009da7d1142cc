"""Regroup verse results by the lemma they contain, then page them again.

The sort only applies when a result highlights more than one lemma. Each
entry is claimed by the first highlighted identifier found in its preview,
definitions are ordered by gloss or original spelling, and entries are laid
out definition by definition. The index has already ranked and paged the
results, so the regrouped list is paged a second time with the requested
page number and size.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from scripture_search.core.comparators import DefinitionKey, key_for
from scripture_search.core.lexicon import LexicalEntryDoc
from scripture_search.core.query import SearchQuery
from scripture_search.core.results import LexicalAnnotation, SearchEntry, SearchResult
from scripture_search.core.search_types import SortOrder
from scripture_search.utils.observability import create_counter, get_logger, start_span


@dataclass
class SortReport:
    """What a special sort did to a result page."""

    order: SortOrder
    grouped: Dict[str, int] = field(default_factory=dict)
    unmatched: int = 0
    dropped_entries: int = 0
    definitions_kept: int = 0


def special_page(sq: SearchQuery, entries: Sequence[SearchEntry]) -> List[SearchEntry]:
    """Slice ``entries`` to the requested page, clipped to the list length."""

    first = (sq.page_number - 1) * sq.page_size
    return list(entries[first : first + sq.page_size])


class SpecialSorter:
    def __init__(self) -> None:
        self._logger = get_logger(__name__).bind(component="special_sort")
        self._metric_dropped = create_counter(
            "scripture_search_special_sort_dropped_entries_total",
            "Result entries dropped by the special sort because they carry no lexical data.",
        )

    def sort(self, sq: SearchQuery, result: SearchResult) -> Optional[SortReport]:
        """Apply the requested special order to ``result`` in place.

        Returns ``None`` when no sort applied.
        """

        if len(result.strong_highlights) <= 1:
            return None

        result.order = sq.sort_order
        if sq.sort_order is None:
            return None

        with start_span(
            "search.special_sort",
            {"order": sq.sort_order.value, "highlights": len(result.strong_highlights)},
        ):
            return self._sort_by_strong_number(sq, result, sq.sort_order, key_for(sq.sort_order))

    def _sort_by_strong_number(
        self,
        sq: SearchQuery,
        result: SearchResult,
        order: SortOrder,
        sort_key: DefinitionKey,
    ) -> Optional[SortReport]:
        if not sq.definitions:
            self._logger.warning(
                "Sort by lemma requested but no definitions are available",
                context={"query": sq.original_query, "order": order.value},
            )
            return None

        report = SortReport(order=order)
        keyed, unmatched = self._group_entries(result.strong_highlights, result.results, report)

        definitions = sorted(sq.definitions, key=sort_key)
        definitions = self._filter_definitions(sq, definitions)
        report.definitions_kept = len(definitions)

        new_order = self._rebuild(definitions, keyed)
        if not sq.current_search.original_filter:
            new_order.extend(unmatched)
        report.unmatched = len(unmatched)

        result.results = special_page(sq, new_order)
        return report

    def _group_entries(
        self,
        strongs: Tuple[str, ...],
        entries: Sequence[SearchEntry],
        report: SortReport,
    ) -> Tuple[Dict[str, List[SearchEntry]], List[SearchEntry]]:
        keyed: Dict[str, List[SearchEntry]] = {}
        unmatched: List[SearchEntry] = []

        for entry in entries:
            if not entry.is_lexical:
                report.dropped_entries += 1
                self._metric_dropped.inc()
                self._logger.error(
                    "Dropping entry that cannot be sorted by lemma",
                    context={"kind": entry.kind.value},
                )
                continue

            owner = self._claiming_strong(strongs, entry.preview_texts())
            if owner is None:
                unmatched.append(entry)
                continue
            keyed.setdefault(owner, []).append(entry)
            report.grouped[owner] = report.grouped.get(owner, 0) + 1

        return keyed, unmatched

    @staticmethod
    def _claiming_strong(strongs: Tuple[str, ...], previews: Sequence[str]) -> Optional[str]:
        for preview in previews:
            for strong in strongs:
                if strong and strong in preview:
                    return strong
        return None

    @staticmethod
    def _filter_definitions(sq: SearchQuery, definitions: List[LexicalEntryDoc]) -> List[LexicalEntryDoc]:
        original_filter = sq.current_search.original_filter
        if not original_filter:
            return definitions
        # linear scan: only a handful of definitions are ever in play
        return [
            definition
            for definition in definitions
            if definition.accented_unicode in original_filter or definition.strong_number in original_filter
        ]

    @staticmethod
    def _rebuild(
        definitions: Sequence[LexicalEntryDoc],
        keyed: Dict[str, List[SearchEntry]],
    ) -> List[SearchEntry]:
        new_order: List[SearchEntry] = []
        for definition in definitions:
            entries = keyed.get(definition.strong_number)
            if not entries:
                continue
            annotation = LexicalAnnotation(
                gloss=definition.gloss,
                transliteration=definition.transliteration,
                accented_unicode=definition.accented_unicode,
            )
            for entry in entries:
                entry.annotate(annotation)  # type: ignore[attr-defined]
            new_order.extend(entries)
        return new_order


__all__ = ["SpecialSorter", "SortReport", "special_page"]
