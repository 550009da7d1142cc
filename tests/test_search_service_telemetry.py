from __future__ import annotations

import logging
from typing import List, Sequence

from scripture_search.app.services.search_service import SearchService
from scripture_search.core.query import IndividualSearch, SearchQuery
from scripture_search.core.results import SearchResult, VerseSearchEntry
from scripture_search.core.search_types import SearchType


class FakeClock:
    """Deterministic clock used to drive telemetry timers in tests."""

    def __init__(self, step: float = 0.01) -> None:
        self._current = 0.0
        self._step = step

    def __call__(self) -> float:
        value = self._current
        self._current += self._step
        return value


class DummyCorpus:
    def search_keys(self, sq: SearchQuery) -> List[str]:
        if "god" in sq.current_search.query:
            return ["John 3:16", "1John 4:8"]
        return ["1John 4:8", "Gen 1:1"]

    def search(self, sq: SearchQuery, version: str) -> SearchResult:
        keys = self.search_keys(sq)
        return SearchResult(results=[VerseSearchEntry(key=key) for key in keys], total=len(keys))

    def rank_and_trim_results(self, sq: SearchQuery, keys: Sequence[str]) -> List[str]:
        return list(keys)

    def get_results_from_trimmed_keys(self, sq, versions, total, paged_keys) -> SearchResult:
        return SearchResult(results=[VerseSearchEntry(key=key) for key in paged_keys], total=total)

    def get_total(self, keys: Sequence[str]) -> int:
        return len(keys)

    def estimate_search_results(self, sq: SearchQuery) -> int:
        return 0


def _service(definitions_index, specific_forms_index, **kwargs) -> SearchService:
    return SearchService(
        corpus=DummyCorpus(),
        definitions=definitions_index,
        specific_forms=specific_forms_index,
        time_fn=FakeClock(),
        **kwargs,
    )


def _text_query(*terms: str) -> SearchQuery:
    return SearchQuery(
        searches=[IndividualSearch.create(SearchType.TEXT, ["KJV"], term) for term in terms]
    )


def test_search_records_stage_timings(definitions_index, specific_forms_index) -> None:
    service = _service(definitions_index, specific_forms_index)

    result = service.search(_text_query("god", "love"))

    assert [entry.key for entry in result.results] == ["1John 4:8"]
    metrics = service.get_latest_telemetry()
    assert metrics["timings"]["search.execute"]["count"] == 1
    assert metrics["timings"]["search.join_stage"]["count"] == 2
    assert "search.special_sort" in metrics["timings"]
    assert metrics["metadata"]["input.stages"] == 2
    assert metrics["metadata"]["result.total"] == 1
    assert result.time_took_total > 0


def test_aborted_search_is_counted(definitions_index, specific_forms_index) -> None:
    service = _service(definitions_index, specific_forms_index)
    sq = SearchQuery(
        searches=[IndividualSearch.create(SearchType.ORIGINAL_GREEK_FORMS, ["KJV"], "abc123")]
    )

    service.search(sq)

    metrics = service.get_latest_telemetry()
    assert metrics["counters"]["search.aborted"] == 1


def test_listeners_receive_events(definitions_index, specific_forms_index) -> None:
    events: List[tuple] = []
    service = _service(
        definitions_index,
        specific_forms_index,
        telemetry_listeners=[lambda event_type, payload: events.append((event_type, payload))],
    )

    service.search(_text_query("god"))

    event_types = {event_type for event_type, _ in events}
    assert {"trace_started", "timing", "metadata"} <= event_types


def test_request_logging(caplog, definitions_index, specific_forms_index) -> None:
    service = _service(definitions_index, specific_forms_index)
    caplog.set_level(logging.INFO, logger="scripture_search.app.services.search_service")

    service.search(_text_query("god"))

    messages = [record.getMessage() for record in caplog.records]
    assert any(message.startswith("Search request received") for message in messages)
    assert any('"component": "search_service"' in message for message in messages)
    assert any(message.startswith("Search request completed") for message in messages)
