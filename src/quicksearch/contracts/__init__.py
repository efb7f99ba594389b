"""Contracts: canonical search data types shared by sources, core and callers."""

from quicksearch.contracts.search_v1 import (
    BrowserTarget,
    CalculatorResult,
    Candidate,
    EngineTarget,
    ExclusionPurpose,
    FileType,
    Layout,
    MatchPriority,
    RankedCandidate,
    ResultSet,
    SearchFilters,
    SearchMode,
    SearchSnapshot,
    SearchTarget,
    SectionId,
    SectionState,
    ShortcutNavigation,
    SourceType,
)

__all__ = [
    "BrowserTarget",
    "CalculatorResult",
    "Candidate",
    "EngineTarget",
    "ExclusionPurpose",
    "FileType",
    "Layout",
    "MatchPriority",
    "RankedCandidate",
    "ResultSet",
    "SearchFilters",
    "SearchMode",
    "SearchSnapshot",
    "SearchTarget",
    "SectionId",
    "SectionState",
    "ShortcutNavigation",
    "SourceType",
]
