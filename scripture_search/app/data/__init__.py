from .lexicon_index import (
    DEFINITION_ENTITY,
    ENTITY_FIELDS,
    SPECIFIC_FORM_ENTITY,
    TIMELINE_EVENT_ENTITY,
    TantivyEntityIndex,
)

__all__ = [
    "TantivyEntityIndex",
    "DEFINITION_ENTITY",
    "ENTITY_FIELDS",
    "SPECIFIC_FORM_ENTITY",
    "TIMELINE_EVENT_ENTITY",
]
