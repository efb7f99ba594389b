"""Contacts, gated by the contacts permission."""

from collections.abc import Sequence
from typing import Protocol

from quicksearch.contracts.search_v1 import Candidate, SearchFilters, SourceType
from quicksearch.preferences.permissions import Permission, PermissionProvider
from quicksearch.search.sources.base import ProviderSource


class ContactProvider(Protocol):
    def search_contacts(self, query: str, limit: int) -> list[Candidate]: ...

    def get_by_ids(self, ids: Sequence[str]) -> list[Candidate]: ...


class ContactsSource(ProviderSource):
    min_query_length = 2
    required_permission = Permission.CONTACTS

    def __init__(
        self, provider: ContactProvider, permissions: PermissionProvider | None = None
    ) -> None:
        super().__init__(permissions)
        self.provider = provider

    @property
    def source_type(self) -> SourceType:
        return SourceType.CONTACTS

    def search(self, query: str, filters: SearchFilters) -> list[Candidate]:
        return self._guarded(
            "search", lambda: self.provider.search_contacts(query, filters.contact_limit)
        )

    def fetch_by_ids(self, keys: Sequence[str], filters: SearchFilters) -> list[Candidate]:
        return self._guarded("fetch_by_ids", lambda: self.provider.get_by_ids(keys))
