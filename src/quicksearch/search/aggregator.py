"""Source aggregator: concurrent fan-out, nickname supplementation, exclusion, ranking.

One call to `search` covers one query generation. Each source runs on a
worker thread and fails in isolation: an exception anywhere in its pipeline
yields an empty ResultSet for that source only.
"""

import asyncio
import logging
import time
from collections.abc import Mapping, Sequence

from quicksearch.contracts.search_v1 import (
    Candidate,
    ExclusionPurpose,
    ResultSet,
    SearchFilters,
    SourceType,
)
from quicksearch.core.config import DEFAULT_MIN_QUERY_LENGTHS, DEFAULT_RESULT_LIMITS
from quicksearch.core.logger import logger as event_logger
from quicksearch.preferences.store import PreferenceStore
from quicksearch.search.interface import SearchSource
from quicksearch.search.query import Query
from quicksearch.search.ranking import RankingEngine

logger = logging.getLogger(__name__)


class SourceAggregator:
    """Merges, deduplicates and ranks candidates per source for one generation."""

    def __init__(
        self,
        preferences: PreferenceStore,
        ranking: RankingEngine | None = None,
        *,
        min_query_lengths: Mapping[str, int] | None = None,
        result_limits: Mapping[str, int] | None = None,
        sort_by_usage: bool = False,
    ) -> None:
        self._prefs = preferences
        self._ranking = ranking or RankingEngine()
        self._min_lengths = dict(DEFAULT_MIN_QUERY_LENGTHS)
        self._min_lengths.update(min_query_lengths or {})
        self._limits = dict(DEFAULT_RESULT_LIMITS)
        self._limits.update(result_limits or {})
        self.sort_by_usage = sort_by_usage

    def min_length_for(self, source: SearchSource) -> int:
        return self._min_lengths.get(source.source_type.value, source.min_query_length)

    def limit_for(self, source_type: SourceType) -> int | None:
        return self._limits.get(source_type.value)

    async def search(
        self,
        query: Query,
        sources: Sequence[SearchSource],
        filters: SearchFilters | None = None,
    ) -> dict[SourceType, ResultSet]:
        """Query every source concurrently and wait for all of them.

        The controller publishes per source as each finishes and calls
        `search_source` directly; this is the all-at-once form.
        """
        filters = filters or SearchFilters()
        tasks = [self.search_source(query, source, filters) for source in sources]
        results_list = await asyncio.gather(*tasks, return_exceptions=True)

        out: dict[SourceType, ResultSet] = {}
        for source, result in zip(sources, results_list):
            if isinstance(result, Exception):
                event_logger.source_failed(source.source_type.value, str(result))
                out[source.source_type] = ResultSet.empty(
                    source.source_type, query.generation, query.normalized
                )
                continue
            out[source.source_type] = result
        return out

    async def search_source(
        self,
        query: Query,
        source: SearchSource,
        filters: SearchFilters | None = None,
    ) -> ResultSet:
        """Gate on query length, then run the blocking pipeline on a worker thread."""
        filters = filters or SearchFilters()
        source_type = source.source_type
        if len(query.normalized) < self.min_length_for(source):
            logger.debug(
                "Skipping %s: query '%s' below minimum length", source_type, query.normalized
            )
            return ResultSet.empty(source_type, query.generation, query.normalized)

        t0 = time.monotonic()
        try:
            result = await asyncio.to_thread(self.collect, query, source, filters)
        except Exception as e:
            event_logger.source_failed(source_type.value, str(e))
            return ResultSet.empty(source_type, query.generation, query.normalized)
        logger.debug(
            "Aggregator: %s returned %s result(s) in %.1fms",
            source_type,
            len(result),
            (time.monotonic() - t0) * 1000,
        )
        return result

    def collect(self, query: Query, source: SearchSource, filters: SearchFilters) -> ResultSet:
        """Synchronous per-source pipeline.

        direct search + nickname-only supplementation -> dedupe by identity
        -> drop result exclusions -> attach nicknames -> rank -> truncate.
        """
        source_type = source.source_type
        direct = source.search(query.trimmed, filters)

        seen = {c.key for c in direct}
        nickname_keys = self._prefs.find_by_nickname_match(source_type, query.trimmed)
        missing = [key for key in nickname_keys if key not in seen]
        supplemented = source.fetch_by_ids(missing, filters) if missing else []

        merged: dict[str, Candidate] = {}
        for candidate in [*direct, *supplemented]:
            if candidate.source_type != source_type:
                logger.warning(
                    "%s returned a %s candidate '%s', dropping",
                    source_type,
                    candidate.source_type,
                    candidate.key,
                )
                continue
            merged.setdefault(candidate.key, candidate)

        excluded = self._prefs.get_excluded(source_type, ExclusionPurpose.RESULTS)
        nicknames = self._prefs.get_nicknames(source_type)
        candidates = [
            _with_nickname(c, nicknames) for key, c in merged.items() if key not in excluded
        ]

        ranked = self._ranking.rank(
            candidates, query.normalized, query.tokens, sort_by_usage=self.sort_by_usage
        )
        limit = self.limit_for(source_type)
        if limit is not None:
            ranked = ranked[:limit]

        if supplemented:
            logger.debug(
                "%s: %s direct, %s via nickname, %s excluded",
                source_type,
                len(direct),
                len(supplemented),
                len(merged) - len(candidates),
            )
        return ResultSet(
            source_type=source_type,
            generation=query.generation,
            query=query.normalized,
            items=tuple(ranked),
        )

    def load_pinned(
        self, source: SearchSource, filters: SearchFilters | None = None
    ) -> list[Candidate]:
        """Pinned items for the idle layout, minus suggestion exclusions, by name."""
        filters = filters or SearchFilters()
        source_type = source.source_type
        pinned = self._prefs.get_pinned(source_type)
        hidden = self._prefs.get_excluded(source_type, ExclusionPurpose.SUGGESTIONS)
        keys = sorted(pinned - hidden)
        if not keys:
            return []
        nicknames = self._prefs.get_nicknames(source_type)
        items = [
            _with_nickname(c, nicknames)
            for c in source.fetch_by_ids(keys, filters)
            if c.key not in hidden
        ]
        items.sort(key=lambda c: (c.name.casefold(), c.key))
        return items

    async def load_pinned_async(
        self, source: SearchSource, filters: SearchFilters | None = None
    ) -> list[Candidate]:
        try:
            return await asyncio.to_thread(self.load_pinned, source, filters)
        except Exception as e:
            event_logger.source_failed(source.source_type.value, f"pinned: {e}")
            return []


def _with_nickname(candidate: Candidate, nicknames: Mapping[str, str]) -> Candidate:
    nickname = nicknames.get(candidate.key)
    if nickname is None or nickname == candidate.nickname:
        return candidate
    return candidate.model_copy(update={"nickname": nickname})
