"""Preference store: pins, exclusions, nicknames, section layout and recent queries.

The search core only reads through `PreferenceStore`. Mutations are issued by
the surrounding application and serialized by the store itself.
"""

import logging
import threading
from collections.abc import Sequence
from typing import Protocol

from quicksearch.contracts.search_v1 import ExclusionPurpose, SectionId, SourceType
from quicksearch.core.config import MAX_RECENT_QUERIES
from quicksearch.utils.text import nickname_matches, normalize_for_search, tokenize

logger = logging.getLogger(__name__)


class PreferenceStore(Protocol):
    """Read contract consumed by the aggregator, controller and section orderer."""

    def get_pinned(self, source_type: SourceType) -> frozenset[str]: ...

    def get_excluded(
        self, source_type: SourceType, purpose: ExclusionPurpose
    ) -> frozenset[str]: ...

    def get_nickname(self, source_type: SourceType, key: str) -> str | None: ...

    def get_nicknames(self, source_type: SourceType) -> dict[str, str]: ...

    def find_by_nickname_match(self, source_type: SourceType, query: str) -> list[str]: ...

    def get_section_order(self) -> list[SectionId]: ...

    def get_disabled_sections(self) -> frozenset[SectionId]: ...

    def get_recent_queries(self) -> list[str]: ...


class InMemoryPreferenceStore:
    """Thread-safe PreferenceStore. Every read returns a snapshot copy."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._pinned: dict[SourceType, set[str]] = {}
        self._excluded: dict[tuple[SourceType, ExclusionPurpose], set[str]] = {}
        self._nicknames: dict[SourceType, dict[str, str]] = {}
        self._section_order: list[SectionId] = []
        self._disabled_sections: set[SectionId] = set()
        self._recent_queries: list[str] = []

    # -- reads -------------------------------------------------------------

    def get_pinned(self, source_type: SourceType) -> frozenset[str]:
        with self._lock:
            return frozenset(self._pinned.get(source_type, ()))

    def get_excluded(
        self, source_type: SourceType, purpose: ExclusionPurpose
    ) -> frozenset[str]:
        with self._lock:
            return frozenset(self._excluded.get((source_type, purpose), ()))

    def get_nickname(self, source_type: SourceType, key: str) -> str | None:
        with self._lock:
            return self._nicknames.get(source_type, {}).get(key)

    def get_nicknames(self, source_type: SourceType) -> dict[str, str]:
        with self._lock:
            return dict(self._nicknames.get(source_type, {}))

    def find_by_nickname_match(self, source_type: SourceType, query: str) -> list[str]:
        """Keys whose nickname would rank for `query`.

        Same rule as the ranking nickname tier, so anything this misses could
        never have scored on its nickname.
        """
        needle = normalize_for_search(" ".join(query.split()))
        if not needle:
            return []
        tokens = tokenize(needle)
        with self._lock:
            nicknames = dict(self._nicknames.get(source_type, {}))
        return sorted(
            key
            for key, nick in nicknames.items()
            if nickname_matches(needle, tokens, normalize_for_search(nick))
        )

    def get_section_order(self) -> list[SectionId]:
        with self._lock:
            return list(self._section_order)

    def get_disabled_sections(self) -> frozenset[SectionId]:
        with self._lock:
            return frozenset(self._disabled_sections)

    def get_recent_queries(self) -> list[str]:
        """Newest first."""
        with self._lock:
            return list(self._recent_queries)

    # -- mutations ---------------------------------------------------------

    def pin(self, source_type: SourceType, key: str) -> None:
        with self._lock:
            self._pinned.setdefault(source_type, set()).add(key)
        logger.debug("Pinned %s:%s", source_type, key)

    def unpin(self, source_type: SourceType, key: str) -> None:
        with self._lock:
            self._pinned.get(source_type, set()).discard(key)

    def exclude(
        self,
        source_type: SourceType,
        key: str,
        purpose: ExclusionPurpose = ExclusionPurpose.RESULTS,
    ) -> None:
        with self._lock:
            self._excluded.setdefault((source_type, purpose), set()).add(key)
            if purpose == ExclusionPurpose.SUGGESTIONS:
                # a suggestion-excluded item is no longer offered as pinned
                self._pinned.get(source_type, set()).discard(key)
        logger.debug("Excluded %s:%s from %s", source_type, key, purpose)

    def include(
        self,
        source_type: SourceType,
        key: str,
        purpose: ExclusionPurpose = ExclusionPurpose.RESULTS,
    ) -> None:
        with self._lock:
            self._excluded.get((source_type, purpose), set()).discard(key)

    def clear_exclusions(self, purpose: ExclusionPurpose | None = None) -> None:
        with self._lock:
            if purpose is None:
                self._excluded.clear()
                return
            for store_key in [k for k in self._excluded if k[1] == purpose]:
                del self._excluded[store_key]

    def set_nickname(self, source_type: SourceType, key: str, nickname: str | None) -> None:
        """Assign an alias; a blank or None nickname removes it."""
        cleaned = (nickname or "").strip()
        with self._lock:
            bucket = self._nicknames.setdefault(source_type, {})
            if cleaned:
                bucket[key] = cleaned
            else:
                bucket.pop(key, None)

    def set_section_order(self, order: Sequence[SectionId]) -> None:
        with self._lock:
            self._section_order = list(order)

    def set_section_enabled(self, section: SectionId, enabled: bool) -> None:
        with self._lock:
            if enabled:
                self._disabled_sections.discard(section)
            else:
                self._disabled_sections.add(section)

    def add_recent_query(self, query: str) -> None:
        """Record a submitted query at the front; an equal earlier entry moves up."""
        cleaned = " ".join(query.split())
        if not cleaned:
            return
        folded = normalize_for_search(cleaned)
        with self._lock:
            kept = [q for q in self._recent_queries if normalize_for_search(q) != folded]
            self._recent_queries = [cleaned, *kept][:MAX_RECENT_QUERIES]

    def delete_recent_query(self, query: str) -> None:
        folded = normalize_for_search(" ".join(query.split()))
        with self._lock:
            self._recent_queries = [
                q for q in self._recent_queries if normalize_for_search(q) != folded
            ]

    def clear_recent_queries(self) -> None:
        with self._lock:
            self._recent_queries = []
