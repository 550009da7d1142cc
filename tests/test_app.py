from __future__ import annotations

import os
from typing import List

import pytest

from scripture_search.app import app as app_module
from scripture_search.app.app import create_search_service
from scripture_search.app.data.lexicon_index import (
    DEFINITION_ENTITY,
    SPECIFIC_FORM_ENTITY,
    TIMELINE_EVENT_ENTITY,
    TantivyEntityIndex,
)
from scripture_search.app.settings import SearchSettings
from scripture_search.core.query import IndividualSearch, SearchQuery
from scripture_search.core.results import SearchResult, VerseSearchEntry
from scripture_search.core.search_types import SearchType

from conftest import DEFINITIONS, SPECIFIC_FORMS, TIMELINE_EVENTS


class DummyCorpus:
    def __init__(self) -> None:
        self.queries: List[str] = []

    def search(self, sq: SearchQuery, version: str) -> SearchResult:
        self.queries.append(sq.current_search.query)
        return SearchResult(results=[VerseSearchEntry(key="John 15:13")], total=1)


@pytest.fixture
def logging_levels(monkeypatch):
    levels: List[str] = []
    monkeypatch.setattr(app_module, "configure_logging", lambda level=None: levels.append(level))
    return levels


def test_factory_wires_settings_into_logging_and_indexes(tmp_path, logging_levels):
    settings = SearchSettings(index_dir=str(tmp_path / "indexes"), log_level="DEBUG")
    corpus = DummyCorpus()

    service = create_search_service(
        settings,
        corpus=corpus,
        lexicon_documents={
            DEFINITION_ENTITY: DEFINITIONS,
            SPECIFIC_FORM_ENTITY: SPECIFIC_FORMS,
            TIMELINE_EVENT_ENTITY: TIMELINE_EVENTS,
        },
    )

    assert logging_levels == ["DEBUG"]
    assert service.settings is settings
    assert isinstance(service.resolver.definitions, TantivyEntityIndex)
    assert service.resolver.definitions.count() == len(DEFINITIONS)
    assert isinstance(service.timeline_events, TantivyEntityIndex)
    for entity in (DEFINITION_ENTITY, SPECIFIC_FORM_ENTITY, TIMELINE_EVENT_ENTITY):
        assert os.path.isdir(tmp_path / "indexes" / entity)

    result = service.search(
        SearchQuery(searches=[IndividualSearch.create(SearchType.ORIGINAL_GREEK_FORMS, ["KJV"], "ἀγάπην")])
    )

    assert corpus.queries == ["lemma:g0026"]
    assert result.strong_highlights == ("G0026",)


def test_factory_reads_settings_from_environment(tmp_path, monkeypatch, logging_levels):
    monkeypatch.setenv("SCRIPTURE_SEARCH_INDEX_DIR", str(tmp_path / "env-indexes"))
    monkeypatch.setenv("SCRIPTURE_SEARCH_LOG_LEVEL", "WARNING")

    service = create_search_service(corpus=DummyCorpus())

    assert logging_levels == ["WARNING"]
    assert service.settings.index_dir == str(tmp_path / "env-indexes")
    assert service.resolver.specific_forms.count() == 0


def test_factory_rejects_unknown_entities(tmp_path, logging_levels):
    settings = SearchSettings(index_dir=str(tmp_path / "indexes"))

    with pytest.raises(ValueError):
        create_search_service(settings, corpus=DummyCorpus(), lexicon_documents={"verse": []})
