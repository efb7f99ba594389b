"""Search core: ranking, aggregation, query control and section ordering."""

from quicksearch.search.aggregator import SourceAggregator
from quicksearch.search.app_cache import AppCache
from quicksearch.search.controller import QueryController
from quicksearch.search.interface import SearchSource
from quicksearch.search.query import Query
from quicksearch.search.ranking import RankingEngine
from quicksearch.search.sections import SectionOrderer
from quicksearch.search.shortcuts import ShortcutConfigError, ShortcutTable

__all__ = [
    "AppCache",
    "Query",
    "QueryController",
    "RankingEngine",
    "SearchSource",
    "SectionOrderer",
    "ShortcutConfigError",
    "ShortcutTable",
    "SourceAggregator",
]
