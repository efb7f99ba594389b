"""Device settings screens: a small fixed catalog."""

from collections.abc import Sequence
from typing import Protocol

from quicksearch.contracts.search_v1 import Candidate, SearchFilters, SourceType
from quicksearch.search.sources.base import ProviderSource


class SettingsProvider(Protocol):
    def search_settings(self, query: str) -> list[Candidate]: ...

    def get_by_ids(self, ids: Sequence[str]) -> list[Candidate]: ...


class SettingsSource(ProviderSource):
    min_query_length = 2

    def __init__(self, provider: SettingsProvider) -> None:
        super().__init__()
        self.provider = provider

    @property
    def source_type(self) -> SourceType:
        return SourceType.SETTINGS

    def search(self, query: str, filters: SearchFilters) -> list[Candidate]:
        return self._guarded("search", lambda: self.provider.search_settings(query))

    def fetch_by_ids(self, keys: Sequence[str], filters: SearchFilters) -> list[Candidate]:
        return self._guarded("fetch_by_ids", lambda: self.provider.get_by_ids(keys))
