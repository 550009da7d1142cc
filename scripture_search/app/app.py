"""Application wiring for the scripture search service."""

from __future__ import annotations

from typing import Iterable, Mapping, Optional

from scripture_search.core.interfaces import (
    BibleInformationService,
    CorpusSearchService,
    MetadataService,
    SubjectSearchService,
    TimelineService,
)
from scripture_search.utils.logging_config import configure_logging
from scripture_search.utils.observability import get_logger
from scripture_search.utils.telemetry import TelemetryListener

from scripture_search.app.data.lexicon_index import (
    DEFINITION_ENTITY,
    SPECIFIC_FORM_ENTITY,
    TIMELINE_EVENT_ENTITY,
    TantivyEntityIndex,
)
from scripture_search.app.services.search_service import SearchService
from scripture_search.app.settings import SearchSettings


def create_search_service(
    settings: Optional[SearchSettings] = None,
    *,
    corpus: CorpusSearchService,
    metadata: Optional[MetadataService] = None,
    subjects: Optional[SubjectSearchService] = None,
    timeline: Optional[TimelineService] = None,
    bible_info: Optional[BibleInformationService] = None,
    lexicon_documents: Optional[Mapping[str, Iterable[Mapping[str, str]]]] = None,
    telemetry_listeners: Optional[Iterable[TelemetryListener]] = None,
) -> SearchService:
    """Build a :class:`SearchService` with logging and indexes configured from ``settings``.

    The definition, specific-form and timeline-event indexes live under
    ``settings.index_dir``. ``lexicon_documents`` maps an entity name to
    documents loaded into that index before the service is returned.
    """

    settings = settings or SearchSettings.from_env()
    configure_logging(settings.log_level)

    logger = get_logger(__name__).bind(component="app_factory")
    logger.info(
        "Initialising search service",
        context={"index_dir": settings.index_dir, "log_level": settings.log_level},
    )

    indexes = {
        entity: TantivyEntityIndex(entity, index_dir=settings.index_dir)
        for entity in (DEFINITION_ENTITY, SPECIFIC_FORM_ENTITY, TIMELINE_EVENT_ENTITY)
    }
    for entity, documents in (lexicon_documents or {}).items():
        if entity not in indexes:
            raise ValueError(f"Unknown index entity: {entity}")
        indexes[entity].load_documents(documents)

    counts = {entity: index.count() for entity, index in indexes.items()}
    logger.info("Indexes ready", context={"documents": counts})

    return SearchService(
        corpus=corpus,
        definitions=indexes[DEFINITION_ENTITY],
        specific_forms=indexes[SPECIFIC_FORM_ENTITY],
        timeline_events=indexes[TIMELINE_EVENT_ENTITY],
        metadata=metadata,
        subjects=subjects,
        timeline=timeline,
        bible_info=bible_info,
        settings=settings,
        telemetry_listeners=telemetry_listeners,
    )


__all__ = ["create_search_service"]
