from .lexical_resolver import LexicalResolver, NoMatch, Resolved
from .query_planner import PassageLookup, QueryPlanner
from .search_service import SearchService
from .special_sort import SortReport, SpecialSorter

__all__ = [
    "LexicalResolver",
    "NoMatch",
    "Resolved",
    "PassageLookup",
    "QueryPlanner",
    "SearchService",
    "SortReport",
    "SpecialSorter",
]
