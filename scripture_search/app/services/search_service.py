"""Search service orchestrating planning, lexical resolution, joins and sorting."""

from __future__ import annotations

import logging
import re
import threading
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Union

from scripture_search.core.errors import (
    InvalidSearchError,
    QuerySyntaxError,
    UnknownSearchError,
    UnsupportedRefinementError,
)
from scripture_search.core.interfaces import (
    BibleInformationService,
    CorpusSearchService,
    EntityIndex,
    IndexDocument,
    MetadataService,
    SubjectSearchService,
    TimelineService,
)
from scripture_search.core.keys import intersect
from scripture_search.core.lexicon import LexiconSuggestion
from scripture_search.core.query import SearchQuery, SearchToken
from scripture_search.core.results import SearchResult, TimelineEventSearchEntry, VerseSearchEntry
from scripture_search.core.search_types import SearchType, SortOrder
from scripture_search.core.strongs import unaccent
from scripture_search.utils.observability import (
    add_span_attributes,
    create_counter,
    create_histogram,
    get_logger,
    record_exception,
    start_span,
)
from scripture_search.utils.telemetry import StructuredTelemetry, TelemetryListener

from ..settings import SearchSettings
from .lexical_resolver import LexicalResolver, NoMatch, Resolution, Resolved
from .query_planner import PassageLookup, QueryPlanner
from .special_sort import SpecialSorter

TIMELINE_NAME_FIELD = "name"
TIMELINE_ID_FIELD = "id"
TIMELINE_REFERENCES_FIELD = "storedReferences"

_REFERENCE_SPLIT = re.compile(r"\s+")

Outcome = Union[SearchResult, NoMatch]
Executor = Callable[[SearchQuery, StructuredTelemetry], Outcome]


class SearchService:
    """Runs searches against the verse corpus and the lexicon indexes.

    The service holds read-only references to its collaborators; everything
    that changes during a request lives in the request's :class:`SearchQuery`,
    so one instance can serve concurrent requests.
    """

    def __init__(
        self,
        *,
        corpus: CorpusSearchService,
        definitions: EntityIndex,
        specific_forms: EntityIndex,
        metadata: Optional[MetadataService] = None,
        subjects: Optional[SubjectSearchService] = None,
        timeline: Optional[TimelineService] = None,
        timeline_events: Optional[EntityIndex] = None,
        bible_info: Optional[BibleInformationService] = None,
        settings: Optional[SearchSettings] = None,
        planner: Optional[QueryPlanner] = None,
        resolver: Optional[LexicalResolver] = None,
        sorter: Optional[SpecialSorter] = None,
        telemetry_listeners: Optional[Iterable[TelemetryListener]] = None,
        time_fn: Optional[Callable[[], float]] = None,
    ) -> None:
        self.corpus = corpus
        self.metadata = metadata
        self.subjects = subjects
        self.timeline = timeline
        self.timeline_events = timeline_events
        self.bible_info = bible_info
        self.settings = settings or SearchSettings()
        self.planner = planner or QueryPlanner(self.settings)
        self.resolver = resolver or LexicalResolver(definitions, specific_forms)
        self.sorter = sorter or SpecialSorter()

        self._telemetry_listeners = tuple(telemetry_listeners or ())
        self._time_fn = time_fn
        self._trace_lock = threading.Lock()
        self._latest_trace: Dict[str, Any] = {}

        self._logger = get_logger(__name__).bind(component="search_service")

        self._metric_request_total = create_counter(
            "scripture_search_requests_total",
            "Total search requests received.",
        )
        self._metric_request_failures = create_counter(
            "scripture_search_request_failures_total",
            "Search requests that raised an error.",
            label_names=("error",),
        )
        self._metric_aborted = create_counter(
            "scripture_search_aborted_total",
            "Searches ended early because a term matched nothing in the lexicon.",
        )
        self._metric_request_duration = create_histogram(
            "scripture_search_request_seconds",
            "Latency of search requests.",
        )
        self._metric_stages = create_counter(
            "scripture_search_stages_total",
            "Individual search stages executed, by type.",
            label_names=("search_type",),
        )
        self._metric_estimate_failures = create_counter(
            "scripture_search_estimate_failures_total",
            "Result estimates that failed and returned the sentinel count.",
        )

        self._executors: Dict[SearchType, Executor] = self._build_executors()

        self._logger.info(
            "Search service initialised",
            context={
                "corpus": type(corpus).__name__,
                "default_version": self.settings.default_version,
                "single_search_types": sorted(search_type.name for search_type in self._executors),
            },
        )

    def _build_executors(self) -> Dict[SearchType, Executor]:
        executors: Dict[SearchType, Executor] = {
            SearchType.TEXT: self._run_text_search,
            SearchType.ORIGINAL_GREEK_FORMS: self._run_all_forms_strong_search,
            SearchType.ORIGINAL_HEBREW_FORMS: self._run_all_forms_strong_search,
            SearchType.ORIGINAL_GREEK_RELATED: self._run_related_strong_search,
            SearchType.ORIGINAL_HEBREW_RELATED: self._run_related_strong_search,
            SearchType.ORIGINAL_GREEK_EXACT: self._run_exact_original_text_search,
            SearchType.ORIGINAL_HEBREW_EXACT: self._run_exact_original_text_search,
            SearchType.ORIGINAL_MEANING: self._run_meaning_search,
        }
        if self.subjects is not None:
            for search_type in SearchType:
                if search_type.is_subject:
                    executors[search_type] = self._run_subject_search
        if self.timeline_events is not None:
            executors[SearchType.TIMELINE_DESCRIPTION] = self._run_timeline_description_search
        if self.timeline is not None:
            executors[SearchType.TIMELINE_REFERENCE] = self._run_timeline_reference_search
        return executors

    # Public API ------------------------------------------------------------
    def get_latest_telemetry(self) -> Dict[str, Any]:
        """Return the telemetry snapshot of the most recently finished search."""

        with self._trace_lock:
            return dict(self._latest_trace)

    def run_query(
        self,
        tokens: Iterable[SearchToken],
        options: str = "",
        display: Optional[str] = None,
        page: int = 1,
        filter: Optional[str] = None,
        context: int = 0,
        *,
        page_size: Optional[int] = None,
        sort_order: Optional[Union[SortOrder, str]] = None,
    ) -> Any:
        """Plan ``tokens`` and run the search, or render the passage when no search is named."""

        plan = self.planner.plan(
            tokens,
            options=options,
            display=display,
            page=page,
            filter=filter,
            context=context,
            page_size=page_size,
            sort_order=sort_order,
        )
        if isinstance(plan, PassageLookup):
            if self.bible_info is None:
                raise UnknownSearchError()
            return self.bible_info.get_passage_text(
                plan.version,
                plan.references,
                plan.options,
                plan.extra_versions,
                plan.display_mode,
            )
        return self.search(plan)

    def estimate_search(self, sq: SearchQuery) -> int:
        """Approximate result count, or ``-1`` when the corpus cannot estimate."""

        try:
            return int(self.corpus.estimate_search_results(sq))
        except Exception as exc:
            self._metric_estimate_failures.inc()
            self._logger.warning(
                "Unable to estimate query",
                context={"query": sq.original_query, "error": str(exc)},
            )
            self._logger.debug("Estimate failure detail", exc_info=exc)
            return -1

    def search(self, sq: SearchQuery) -> SearchResult:
        """Run ``sq`` and return one page of results.

        Query syntax failures are reported as :class:`InvalidSearchError`.
        Terms that match nothing in the lexicon produce an empty result.
        """

        request_context: Dict[str, Any] = {
            "query": sq.original_query,
            "stages": [search.type.name for search in sq.searches],
            "page": sq.page_number,
            "page_size": sq.page_size,
        }
        self._metric_request_total.inc()
        self._logger.info("Search request received", context=request_context)

        with start_span("search.request", request_context) as request_span:
            try:
                with self._metric_request_duration.time():
                    result = self._do_search(sq)
            except QuerySyntaxError as exc:
                self._record_failure(request_span, exc, request_context, logging.WARNING)
                raise InvalidSearchError(sq.original_query, original_query=sq.original_query) from exc
            except Exception as exc:
                self._record_failure(request_span, exc, request_context, logging.ERROR)
                raise

            self._logger.info(
                "Search request completed",
                context={"query": sq.original_query, "total": result.total, "returned": len(result.results)},
            )
            add_span_attributes(
                request_span,
                {"search.success": True, "result.total": result.total, "result.returned": len(result.results)},
            )
            return result

    # Orchestration ---------------------------------------------------------
    def _record_failure(
        self,
        span: Any,
        error: Exception,
        request_context: Dict[str, Any],
        level: int,
    ) -> None:
        self._metric_request_failures.labels(error=type(error).__name__).inc()
        failure_context = dict(request_context)
        failure_context["error"] = str(error)
        self._logger.log(level, "Search request failed", context=failure_context)
        record_exception(span, error)

    def _new_telemetry(self) -> StructuredTelemetry:
        return StructuredTelemetry(
            "search",
            time_fn=self._time_fn,
            listeners=self._telemetry_listeners,
        )

    def _do_search(self, sq: SearchQuery) -> SearchResult:
        telemetry = self._new_telemetry()
        telemetry.annotate("input.query", sq.original_query)
        telemetry.annotate("input.stages", len(sq.searches))

        try:
            with telemetry.timer("search.execute"):
                if sq.is_individual_search():
                    outcome = self._execute_one_search(sq, telemetry)
                else:
                    outcome = self._execute_joining_searches(sq, telemetry)

            if isinstance(outcome, NoMatch):
                self._metric_aborted.inc()
                telemetry.increment("search.aborted")
                self._logger.info(
                    "Search ended without lexicon match",
                    context={"query": sq.original_query, "term": outcome.term, "reason": outcome.reason},
                )
                result = SearchResult.empty()
            else:
                result = outcome

            result.search_type = sq.searches[0].type
            result.page_size = sq.page_size
            result.page_number = sq.page_number
            result.query = sq.original_query or ""

            versions = sq.current_search.versions
            result.master_version = versions[0] if versions else None
            result.extra_versions = ",".join(versions[1:])

            with telemetry.timer("search.special_sort") as sort_meta:
                report = self.sorter.sort(sq, result)
                if report is not None:
                    sort_meta["dropped_entries"] = report.dropped_entries
                    sort_meta["unmatched"] = report.unmatched

            self._enrich_with_languages(sq, result)
            result.time_took_total = int(round(telemetry.elapsed() * 1000))
            telemetry.annotate("result.total", result.total)
        finally:
            with self._trace_lock:
                self._latest_trace = telemetry.snapshot()

        return result

    def _enrich_with_languages(self, sq: SearchQuery, result: SearchResult) -> None:
        if self.metadata is None:
            return
        result.language_code = list(self.metadata.get_languages(sq.current_search.versions))

    def _apply(self, sq: SearchQuery, resolution: Resolution) -> Resolution:
        """Thread a resolution's rewritten stage and definitions into the query."""

        if isinstance(resolution, Resolved):
            previous = sq.replace_current(resolution.search)
            if resolution.definitions is not None:
                sq.set_definitions(resolution.definitions)
            self._logger.debug(
                "Stage rewritten",
                context={
                    "type": previous.type.name,
                    "from": previous.query,
                    "to": resolution.search.query,
                    "strongs": list(resolution.strongs),
                },
            )
        return resolution

    def _execute_one_search(self, sq: SearchQuery, telemetry: StructuredTelemetry) -> Outcome:
        search_type = sq.current_search.type
        executor = self._executors.get(search_type)
        if executor is None:
            self._logger.error(
                "No executor for search type",
                context={"type": search_type.name, "query": sq.original_query},
            )
            raise UnknownSearchError(original_query=sq.original_query)
        self._metric_stages.labels(search_type=search_type.name).inc()
        with start_span("search.stage", {"search_type": search_type.name, "joined": False}):
            return executor(sq, telemetry)

    def _execute_joining_searches(self, sq: SearchQuery, telemetry: StructuredTelemetry) -> Outcome:
        keys = self._run_joining_searches(sq, telemetry)
        if isinstance(keys, NoMatch):
            return keys

        # the page is now retrieved for the final stage only
        sq.all_keys = False
        return self._extract_search_results(sq, keys)

    def _run_joining_searches(
        self,
        sq: SearchQuery,
        telemetry: StructuredTelemetry,
    ) -> Union[List[str], NoMatch]:
        results: Optional[List[str]] = None
        while True:
            search_type = sq.current_search.type
            self._metric_stages.labels(search_type=search_type.name).inc()
            with telemetry.timer("search.join_stage", {"search_type": search_type.name}) as stage_meta:
                with start_span("search.stage", {"search_type": search_type.name, "joined": True}):
                    stage_keys = self._keys_for_stage(sq, search_type)
                if isinstance(stage_keys, NoMatch):
                    return stage_keys
                results = intersect(results, stage_keys)
                stage_meta["remaining"] = len(results)

            if not sq.has_more_searches():
                break
        return results if results is not None else []

    def _keys_for_stage(self, sq: SearchQuery, search_type: SearchType) -> Union[List[str], NoMatch]:
        if search_type is SearchType.TEXT:
            return list(self.corpus.search_keys(sq))

        if search_type.is_exact:
            return self._get_keys_from_original_text(sq)

        resolution: Optional[Resolution] = None
        if search_type.is_original_forms:
            resolution = self.resolver.resolve_forms(sq)
        elif search_type.is_related:
            resolution = self.resolver.resolve_related(sq)
        elif search_type is SearchType.ORIGINAL_MEANING:
            resolution = self.resolver.resolve_meaning(sq)

        if resolution is None:
            self._logger.error(
                "Search type cannot be used as a refinement",
                context={"type": search_type.name, "query": sq.original_query},
            )
            raise UnsupportedRefinementError(
                sq.original_query, search_type.language_key, original_query=sq.original_query
            )

        resolution = self._apply(sq, resolution)
        if isinstance(resolution, NoMatch):
            return resolution
        return list(self.corpus.search_keys(sq))

    def _extract_search_results(self, sq: SearchQuery, keys: Sequence[str]) -> SearchResult:
        last_search = sq.last_search
        if not last_search.type.is_verse_based:
            self._logger.error(
                "Final stage does not produce verses",
                context={"type": last_search.type.name, "query": sq.original_query},
            )
            raise UnsupportedRefinementError(
                sq.original_query, last_search.type.language_key, original_query=sq.original_query
            )
        return self._build_combined_verse_based_results(sq, keys)

    def _build_combined_verse_based_results(self, sq: SearchQuery, keys: Sequence[str]) -> SearchResult:
        current_search = sq.current_search
        paged_keys = self.corpus.rank_and_trim_results(sq, keys)
        result = self.corpus.get_results_from_trimmed_keys(
            sq, current_search.versions, len(keys), paged_keys
        )
        result.total = self.corpus.get_total(keys)
        result.query = sq.original_query or ""
        return result

    # Single-stage executors ------------------------------------------------
    def _run_text_search(self, sq: SearchQuery, telemetry: Optional[StructuredTelemetry] = None) -> SearchResult:
        versions = sq.current_search.versions
        if len(versions) == 1:
            return self.corpus.search(sq, versions[0])
        return self._build_combined_verse_based_results(sq, self.corpus.search_keys(sq))

    def _run_subject_search(self, sq: SearchQuery, telemetry: StructuredTelemetry) -> SearchResult:
        return self.subjects.search(sq)  # type: ignore[union-attr]

    def _run_strong_text_search(self, sq: SearchQuery, strongs: Sequence[str]) -> SearchResult:
        result = self._run_text_search(sq)
        result.set_strong_highlights(strongs)
        return result

    def _definitions_for_result(self, sq: SearchQuery) -> List[LexiconSuggestion]:
        return [LexiconSuggestion.from_entry(entry) for entry in sq.definitions]

    def _run_all_forms_strong_search(self, sq: SearchQuery, telemetry: StructuredTelemetry) -> Outcome:
        with telemetry.timer("search.resolve", {"variant": "forms"}):
            resolution = self._apply(sq, self.resolver.resolve_forms(sq))
        if isinstance(resolution, NoMatch):
            return resolution
        return self._run_strong_text_search(sq, resolution.strongs)

    def _run_related_strong_search(self, sq: SearchQuery, telemetry: StructuredTelemetry) -> Outcome:
        with telemetry.timer("search.resolve", {"variant": "related"}):
            resolution = self._apply(sq, self.resolver.resolve_related(sq))
        if isinstance(resolution, NoMatch):
            return resolution
        result = self._run_strong_text_search(sq, resolution.strongs)
        result.definitions = self._definitions_for_result(sq)
        return result

    def _run_meaning_search(self, sq: SearchQuery, telemetry: StructuredTelemetry) -> Outcome:
        with telemetry.timer("search.resolve", {"variant": "meaning"}):
            resolution = self._apply(sq, self.resolver.resolve_meaning(sq))
        if isinstance(resolution, NoMatch):
            return resolution
        result = self._run_strong_text_search(sq, resolution.strongs)
        result.definitions = self._definitions_for_result(sq)
        return result

    def _run_exact_original_text_search(self, sq: SearchQuery, telemetry: StructuredTelemetry) -> SearchResult:
        return self._extract_search_results(sq, self._get_keys_from_original_text(sq))

    def _get_keys_from_original_text(self, sq: SearchQuery) -> List[str]:
        """Search the base Greek or Hebrew text, then put the requested versions back."""

        current = sq.current_search
        base_search = current.with_versions([self.settings.base_version_for(current.type)])
        if current.type is SearchType.ORIGINAL_GREEK_EXACT:
            base_search = base_search.with_query(unaccent(base_search.query, greek=True))

        sq.replace_current(base_search)
        try:
            return list(self.corpus.search_keys(sq))
        finally:
            sq.replace_current(current)

    def _run_timeline_description_search(self, sq: SearchQuery, telemetry: StructuredTelemetry) -> SearchResult:
        events = self.timeline_events.search_single_column(  # type: ignore[union-attr]
            TIMELINE_NAME_FIELD, sq.current_search.query
        )
        return self._build_timeline_search_results(events)

    def _run_timeline_reference_search(self, sq: SearchQuery, telemetry: StructuredTelemetry) -> SearchResult:
        events = self.timeline.lookup_events_matching_reference(  # type: ignore[union-attr]
            sq.current_search.query
        )
        return self._build_timeline_search_results(events)

    @staticmethod
    def _build_timeline_search_results(events: Iterable[IndexDocument]) -> SearchResult:
        entries: List[TimelineEventSearchEntry] = []
        for event in events:
            references = event.get(TIMELINE_REFERENCES_FIELD) or ""
            verses = [VerseSearchEntry(key=reference) for reference in _REFERENCE_SPLIT.split(references) if reference]
            entries.append(
                TimelineEventSearchEntry(
                    id=event.get(TIMELINE_ID_FIELD) or "",
                    description=event.get(TIMELINE_NAME_FIELD) or "",
                    verses=verses,
                )
            )
        return SearchResult(results=list(entries), total=len(entries))


__all__ = ["SearchService", "Outcome"]
