"""In-memory providers backing the CLI, the YAML catalog and tests.

One class serves every provider protocol so a catalog section can be plugged
into any adapter.
"""

import time
from collections.abc import Iterable, Sequence

from quicksearch.contracts.search_v1 import Candidate, FileType
from quicksearch.utils.text import normalize_for_search, tokenize


def matches_name(candidate: Candidate, tokens: Sequence[str]) -> bool:
    """Loose provider-side filter: every query token appears in the name."""
    name = normalize_for_search(candidate.name)
    return bool(tokens) and all(token in name for token in tokens)


class InMemoryProvider:
    def __init__(self, items: Iterable[Candidate] = (), *, delay_seconds: float = 0.0) -> None:
        self._items: dict[str, Candidate] = {item.key: item for item in items}
        self.delay_seconds = delay_seconds
        self.calls: list[str] = []

    @property
    def items(self) -> list[Candidate]:
        return list(self._items.values())

    def add(self, item: Candidate) -> None:
        self._items[item.key] = item

    def _search(self, op: str, query: str, limit: int | None = None) -> list[Candidate]:
        self.calls.append(f"{op}:{query}")
        if self.delay_seconds:
            time.sleep(self.delay_seconds)
        tokens = tokenize(normalize_for_search(query))
        found = [c for c in self._items.values() if matches_name(c, tokens)]
        return found[:limit] if limit is not None else found

    def get_by_ids(self, ids: Sequence[str]) -> list[Candidate]:
        self.calls.append(f"get_by_ids:{','.join(ids)}")
        return [self._items[i] for i in ids if i in self._items]

    # Protocol-specific entry points

    def search_contacts(self, query: str, limit: int) -> list[Candidate]:
        return self._search("search_contacts", query, limit)

    def search_files(
        self,
        query: str,
        type_filters: frozenset[FileType],
        show_folders: bool,
        show_system: bool,
        show_hidden: bool,
    ) -> list[Candidate]:
        return self._search("search_files", query)

    def get_by_uris(self, uris: Sequence[str]) -> list[Candidate]:
        return self.get_by_ids(uris)

    def search_settings(self, query: str) -> list[Candidate]:
        return self._search("search_settings", query)

    def search_shortcuts(self, query: str) -> list[Candidate]:
        return self._search("search_shortcuts", query)
