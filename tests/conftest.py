import sys
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from scripture_search.app.data.lexicon_index import (
    DEFINITION_ENTITY,
    SPECIFIC_FORM_ENTITY,
    TIMELINE_EVENT_ENTITY,
    TantivyEntityIndex,
)

DEFINITIONS = [
    {
        "strongNumber": "G0026",
        "stepGloss": "love",
        "stepTransliteration": "agapē",
        "simplifiedTransliteration": "agape",
        "accentedUnicode": "ἀγάπη",
        "relatedNumbers": "G0025",
        "translationsStem": "love charity",
        "stepGlossStem": "love",
    },
    {
        "strongNumber": "G0025",
        "stepGloss": "to love",
        "stepTransliteration": "agapaō",
        "simplifiedTransliteration": "agapao",
        "accentedUnicode": "ἀγαπάω",
        "relatedNumbers": "G0026",
        "translationsStem": "love",
        "stepGlossStem": "love",
    },
    {
        "strongNumber": "G5368",
        "stepGloss": "to kiss",
        "stepTransliteration": "phileō",
        "simplifiedTransliteration": "phileo",
        "accentedUnicode": "φιλέω",
        "translationsStem": "kiss",
        "stepGlossStem": "kiss",
    },
    {
        "strongNumber": "H0157",
        "stepGloss": "to love",
        "stepTransliteration": "ʾāhav",
        "simplifiedTransliteration": "ahav",
        "accentedUnicode": "אָהַב",
        "translationsStem": "love",
        "stepGlossStem": "love",
    },
    {
        "strongNumber": "G3588",
        "stepGloss": "the",
        "stepTransliteration": "ho",
        "simplifiedTransliteration": "ho",
        "accentedUnicode": "ὁ",
        "translationsStem": "the love",
        "stepGlossStem": "the",
        "stopWord": "true",
    },
]

SPECIFIC_FORMS = [
    {"strongNumber": "G0026", "accentedUnicode": "ἀγάπην", "simplifiedTransliteration": "agapen"},
    {"strongNumber": "G0025", "accentedUnicode": "ἠγάπησεν", "simplifiedTransliteration": "egapesen"},
    {"strongNumber": "H0157", "accentedUnicode": "אָהַבְתָּ", "simplifiedTransliteration": "ahavta"},
]

TIMELINE_EVENTS = [
    {"id": "e1", "name": "Crucifixion", "storedReferences": "Matt.27.35 Mark.15.24"},
]


class RecordingIndex(TantivyEntityIndex):
    """In-memory entity index remembering the lookups it served."""

    def __init__(self, entity: str, documents: Iterable[Mapping[str, str]]) -> None:
        super().__init__(entity)
        self.load_documents(documents)
        self.queries: List[str] = []
        self.single_column_calls: List[tuple] = []

    def search(self, query: str, default_fields: Sequence[str]) -> List[Dict[str, str]]:
        self.queries.append(query)
        return super().search(query, default_fields)

    def search_single_column(
        self,
        field_name: str,
        value: str,
        prefix_filter: Optional[Tuple[str, str]] = None,
    ) -> List[Dict[str, str]]:
        self.single_column_calls.append((field_name, value, prefix_filter))
        return super().search_single_column(field_name, value, prefix_filter)


@pytest.fixture
def definitions_index() -> RecordingIndex:
    return RecordingIndex(DEFINITION_ENTITY, DEFINITIONS)


@pytest.fixture
def specific_forms_index() -> RecordingIndex:
    return RecordingIndex(SPECIFIC_FORM_ENTITY, SPECIFIC_FORMS)


@pytest.fixture
def timeline_events_index() -> RecordingIndex:
    return RecordingIndex(TIMELINE_EVENT_ENTITY, TIMELINE_EVENTS)
