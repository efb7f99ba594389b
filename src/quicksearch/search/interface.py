"""Standard interface for search sources used by the aggregator.

All sources (apps, app shortcuts, contacts, files, settings) implement
SearchSource and return Candidates. Implementations are blocking; the
aggregator runs them on worker threads.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from quicksearch.contracts.search_v1 import Candidate, SearchFilters, SourceType


class SearchSource(ABC):
    """Base class for all search sources."""

    #: Queries shorter than this never reach the source.
    min_query_length: int = 1

    @property
    @abstractmethod
    def source_type(self) -> SourceType:
        """Which section this source feeds."""

    @abstractmethod
    def search(self, query: str, filters: SearchFilters) -> list[Candidate]:
        """Direct name search. Must not raise; failures return []."""

    @abstractmethod
    def fetch_by_ids(self, keys: Sequence[str], filters: SearchFilters) -> list[Candidate]:
        """Resolve identity keys (pins, nickname matches) to Candidates."""

    def is_available(self) -> bool:
        """False when a runtime permission is missing."""
        return True

    @property
    def version(self) -> int | None:
        """Data version for sources backed by a refreshable cache, else None."""
        return None
