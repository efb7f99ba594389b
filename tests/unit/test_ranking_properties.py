from __future__ import annotations

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from quicksearch.contracts.search_v1 import Candidate, MatchPriority, SourceType
from quicksearch.search.ranking import RankingEngine
from quicksearch.utils.text import normalize_for_search, tokenize

WORDS = ["map", "maps", "spot", "sparrow", "photo", "edit", "cafe", "calc", "gear", "sp"]

names = st.lists(st.sampled_from(WORDS), min_size=1, max_size=3).map(" ".join)


@st.composite
def candidates_strategy(draw: st.DrawFn) -> list[Candidate]:
    count = draw(st.integers(min_value=0, max_value=8))
    out: list[Candidate] = []
    for idx in range(count):
        out.append(
            Candidate(
                source_type=SourceType.APPS,
                key=f"k{idx}",
                name=draw(names),
                nickname=draw(st.none() | st.sampled_from(WORDS)),
                last_used=draw(st.none() | st.floats(min_value=0, max_value=1e9)),
            )
        )
    return out


@pytest.mark.property
@settings(max_examples=200, deadline=None)
@given(
    candidates=candidates_strategy(),
    raw_query=names,
    sort_by_usage=st.booleans(),
)
def test_rank_never_returns_no_match_and_is_sorted_by_tier(
    candidates, raw_query, sort_by_usage
):
    query = normalize_for_search(raw_query)
    ranked = RankingEngine().rank(candidates, query, tokenize(query), sort_by_usage=sort_by_usage)

    assert all(r.priority != MatchPriority.NO_MATCH for r in ranked)
    priorities = [int(r.priority) for r in ranked]
    assert priorities == sorted(priorities)


@pytest.mark.property
@settings(max_examples=200, deadline=None)
@given(data=st.data(), raw_query=names, sort_by_usage=st.booleans())
def test_rank_is_independent_of_input_order(data, raw_query, sort_by_usage):
    candidates = data.draw(candidates_strategy())
    shuffled = data.draw(st.permutations(candidates))
    engine = RankingEngine()

    first = engine.rank(candidates, raw_query, sort_by_usage=sort_by_usage)
    second = engine.rank(shuffled, raw_query, sort_by_usage=sort_by_usage)

    assert [r.candidate.key for r in first] == [r.candidate.key for r in second]


@pytest.mark.property
@given(name=names, nickname=st.none() | st.sampled_from(WORDS))
def test_identical_name_is_always_exact(name, nickname):
    query = normalize_for_search(name)
    assert RankingEngine().score(name, nickname, query, tokenize(query)) == MatchPriority.EXACT_NAME


@pytest.mark.property
@given(name=names, nickname=st.sampled_from(WORDS), query=st.sampled_from(WORDS))
def test_nickname_only_affects_tiers_below_name_prefix(name, nickname, query):
    engine = RankingEngine()
    with_nick = engine.score(name, nickname, query, [query])
    without = engine.score(name, None, query, [query])
    assert with_nick <= without
    if without <= MatchPriority.NAME_PREFIX:
        assert with_nick == without
