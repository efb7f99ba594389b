"""Nickname-aware match scoring and deterministic result ordering.

Tiers (first rule wins, lower is better):
  EXACT_NAME > NAME_PREFIX > EXACT_NICKNAME > ALL_TOKENS_PREFIX
  > NICKNAME_TOKEN > NAME_CONTAINS > NO_MATCH

Everything here is pure: no I/O, no preference reads, no clock.
"""

import logging
from collections.abc import Iterable, Sequence

from quicksearch.contracts.search_v1 import Candidate, MatchPriority, RankedCandidate
from quicksearch.utils.text import (
    all_tokens_prefix,
    nickname_matches,
    normalize_for_search,
    tokenize,
)

logger = logging.getLogger(__name__)


class RankingEngine:
    """Scores candidates against a query and sorts them into a total order."""

    def score(
        self,
        name: str,
        nickname: str | None,
        query: str,
        query_tokens: Sequence[str],
    ) -> MatchPriority:
        """Match tier for one candidate.

        `query` must already be normalized and `query_tokens` derived from it
        once per batch; name and nickname are normalized here.
        """
        if not query:
            return MatchPriority.NO_MATCH

        norm_name = normalize_for_search(name)
        norm_nick = normalize_for_search(nickname)

        if norm_name == query:
            return MatchPriority.EXACT_NAME
        if norm_name.startswith(query):
            return MatchPriority.NAME_PREFIX
        if norm_nick and norm_nick == query:
            return MatchPriority.EXACT_NICKNAME
        if query_tokens and all_tokens_prefix(query_tokens, norm_name.split()):
            return MatchPriority.ALL_TOKENS_PREFIX
        if nickname_matches(query, query_tokens, norm_nick):
            return MatchPriority.NICKNAME_TOKEN
        if query in norm_name:
            return MatchPriority.NAME_CONTAINS
        return MatchPriority.NO_MATCH

    def rank(
        self,
        candidates: Iterable[Candidate],
        query: str,
        query_tokens: Sequence[str] | None = None,
        *,
        sort_by_usage: bool = False,
    ) -> list[RankedCandidate]:
        """Score, drop NO_MATCH, and sort.

        Within a tier: descending last_used when `sort_by_usage` (unknown usage
        sorts last), otherwise case-insensitive name. Name then key settle the
        rest so input order never leaks into the output.
        """
        tokens = list(query_tokens) if query_tokens is not None else tokenize(query)
        ranked: list[RankedCandidate] = []
        dropped = 0
        for candidate in candidates:
            priority = self.score(candidate.name, candidate.nickname, query, tokens)
            if priority == MatchPriority.NO_MATCH:
                dropped += 1
                continue
            ranked.append(RankedCandidate(candidate=candidate, priority=priority))

        ranked.sort(key=lambda rc: _sort_key(rc, sort_by_usage))
        if dropped:
            logger.debug("Ranking '%s': kept %s, dropped %s", query, len(ranked), dropped)
        return ranked


def _sort_key(ranked: RankedCandidate, sort_by_usage: bool) -> tuple:
    candidate = ranked.candidate
    folded = candidate.name.casefold()
    if sort_by_usage:
        used = candidate.last_used
        usage_key = (1, 0.0) if used is None else (0, -used)
        return (int(ranked.priority), usage_key, folded, candidate.name, candidate.key)
    return (int(ranked.priority), folded, candidate.name, candidate.key)


def match_priority(name: str, nickname: str | None, raw_query: str) -> MatchPriority:
    """One-off scoring from raw text; batch callers should use RankingEngine.rank."""
    normalized = normalize_for_search(raw_query.strip())
    return RankingEngine().score(name, nickname, normalized, tokenize(normalized))
