"""Error taxonomy for search planning, resolution and joining."""

from __future__ import annotations

from typing import Any, Dict, Optional

MESSAGES: Dict[str, str] = {
    "search_invalid": "Your search could not be understood. Please check the syntax of: {0}",
    "refinement_not_supported": "The search '{0}' cannot be refined with a {1}.",
    "search_unknown": "This kind of search is not supported.",
    "search_text": "text search",
    "search_subject": "subject search",
    "search_subject_extended": "extended subject search",
    "search_subject_full": "full subject search",
    "search_subject_related": "related subject search",
    "search_timeline_description": "timeline description search",
    "search_timeline_reference": "timeline reference search",
    "search_greek_forms": "Greek word search",
    "search_hebrew_forms": "Hebrew word search",
    "search_greek_related": "related Greek word search",
    "search_hebrew_related": "related Hebrew word search",
    "search_greek_exact": "exact Greek text search",
    "search_hebrew_exact": "exact Hebrew text search",
    "search_meaning": "meaning search",
}


def translate(key: str, *args: Any) -> str:
    """Render the catalogue message for ``key``; unknown keys render as themselves."""

    template = MESSAGES.get(key)
    if template is None:
        return key
    return template.format(*(MESSAGES.get(str(arg), arg) for arg in args))


class ScriptureSearchError(Exception):
    """Base class for every error raised by the search package."""


class QuerySyntaxError(ScriptureSearchError):
    """An index query could not be parsed."""

    def __init__(self, message: str, *, query: Optional[str] = None, position: Optional[int] = None) -> None:
        self.query = query
        self.position = position
        detail = message
        if query is not None:
            detail = f"{message} in query [{query}]"
            if position is not None:
                detail = f"{detail} at position {position}"
        super().__init__(detail)


class TranslatedSearchError(ScriptureSearchError):
    """An error carrying a message key and arguments for user-facing display."""

    message_key = "search_unknown"

    def __init__(self, *args: Any, original_query: Optional[str] = None) -> None:
        self.args_for_message = tuple(args)
        self.original_query = original_query
        super().__init__(self.message)

    @property
    def message(self) -> str:
        return translate(self.message_key, *self.args_for_message)


class InvalidSearchError(TranslatedSearchError):
    """The submitted search has invalid query syntax."""

    message_key = "search_invalid"


class UnsupportedRefinementError(TranslatedSearchError):
    """A search type reached the join stage without a way to produce verse keys."""

    message_key = "refinement_not_supported"


class UnknownSearchError(TranslatedSearchError):
    """A single search had a type with no executor."""

    message_key = "search_unknown"


__all__ = [
    "MESSAGES",
    "translate",
    "ScriptureSearchError",
    "QuerySyntaxError",
    "TranslatedSearchError",
    "InvalidSearchError",
    "UnsupportedRefinementError",
    "UnknownSearchError",
]
