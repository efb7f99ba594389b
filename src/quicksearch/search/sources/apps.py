"""Installed apps, served from the in-memory AppCache."""

from collections.abc import Sequence

from quicksearch.contracts.search_v1 import Candidate, SearchFilters, SourceType
from quicksearch.search.app_cache import AppCache
from quicksearch.search.sources.base import ProviderSource
from quicksearch.utils.text import normalize_for_search, tokenize


class AppsSource(ProviderSource):
    """Primary source: cached, fast enough to rank on the controller's turn."""

    min_query_length = 1

    def __init__(self, cache: AppCache) -> None:
        super().__init__()
        self.cache = cache

    @property
    def source_type(self) -> SourceType:
        return SourceType.APPS

    def search(self, query: str, filters: SearchFilters) -> list[Candidate]:
        tokens = tokenize(normalize_for_search(query))
        if not tokens:
            return []
        return self._guarded(
            "search",
            lambda: [
                app
                for app in self.cache.snapshot()
                if all(t in normalize_for_search(app.name) for t in tokens)
            ],
        )

    def fetch_by_ids(self, keys: Sequence[str], filters: SearchFilters) -> list[Candidate]:
        return self._guarded("fetch_by_ids", lambda: self.cache.get(keys))

    @property
    def version(self) -> int | None:
        return self.cache.version
