"""QuickSearch Contract v1.

Defines the canonical types for:
  - Candidates and match tiers (Candidate, MatchPriority, RankedCandidate)
  - Per-source ranked output (ResultSet)
  - Section layout state (SectionId, Layout, SectionState)
  - Short-circuit answers and shortcut targets (CalculatorResult, SearchTarget)
  - The published state snapshot handed to the presentation layer (SearchSnapshot)

Every source adapter returns Candidates; the aggregator turns them into
ResultSets; the controller publishes SearchSnapshots.
"""

from __future__ import annotations

from enum import IntEnum, StrEnum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ---------------------------------------------------------------------------
# Sources and sections
# ---------------------------------------------------------------------------


class SourceType(StrEnum):
    APPS = "apps"
    APP_SHORTCUTS = "app_shortcuts"
    CONTACTS = "contacts"
    FILES = "files"
    SETTINGS = "settings"


class SectionId(StrEnum):
    """UI-facing result groupings. One section per source type."""

    APPS = "apps"
    APP_SHORTCUTS = "app_shortcuts"
    FILES = "files"
    CONTACTS = "contacts"
    SETTINGS = "settings"

    @property
    def source_type(self) -> SourceType:
        return SourceType(self.value)

    @classmethod
    def for_source(cls, source_type: SourceType) -> SectionId:
        return cls(source_type.value)


class ExclusionPurpose(StrEnum):
    """Independent exclusion lists: hidden from idle suggestions vs. from search results."""

    SUGGESTIONS = "suggestions"
    RESULTS = "results"


class Layout(StrEnum):
    SEARCHING = "searching"  # query is non-blank
    IDLE = "idle"  # query is blank


class SearchMode(StrEnum):
    """Controller states."""

    IDLE = "idle"
    EVALUATING = "evaluating"
    SHORT_CIRCUITED = "short_circuited"


# ---------------------------------------------------------------------------
# Candidates and ranking
# ---------------------------------------------------------------------------


class MatchPriority(IntEnum):
    """Match tier between a query and a candidate. Lower is better."""

    EXACT_NAME = 0
    NAME_PREFIX = 1
    EXACT_NICKNAME = 2
    ALL_TOKENS_PREFIX = 3
    NICKNAME_TOKEN = 4
    NAME_CONTAINS = 5
    NO_MATCH = 6  # sentinel, never published


class Candidate(BaseModel):
    """One searchable item from any source."""

    model_config = ConfigDict(frozen=True)

    source_type: SourceType
    key: str = Field(
        description="Source-scoped stable identity: package name, contact id, file URI, setting id"
    )
    name: str = Field(description="Display name")
    nickname: str | None = Field(default=None, description="User-assigned alias")
    last_used: float | None = Field(
        default=None,
        description="Recency-of-use metric (epoch seconds); higher is more recent",
    )
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Source-specific extras (mime_type, phone numbers, intent action, ...)",
    )

    @field_validator("key")
    @classmethod
    def _validate_key(cls, value: str) -> str:
        if not str(value).strip():
            raise ValueError("key must not be blank")
        return str(value)

    @property
    def identity(self) -> tuple[SourceType, str]:
        return (self.source_type, self.key)


class RankedCandidate(BaseModel):
    model_config = ConfigDict(frozen=True)

    candidate: Candidate
    priority: MatchPriority


class ResultSet(BaseModel):
    """Ranked output of one source for one query generation. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    source_type: SourceType
    generation: int = Field(ge=0)
    query: str = Field(default="", description="Normalized query the set was ranked for")
    items: tuple[RankedCandidate, ...] = Field(default_factory=tuple)

    @field_validator("items")
    @classmethod
    def _reject_no_match(
        cls, value: tuple[RankedCandidate, ...]
    ) -> tuple[RankedCandidate, ...]:
        for item in value:
            if item.priority == MatchPriority.NO_MATCH:
                raise ValueError(
                    f"NO_MATCH candidate '{item.candidate.key}' cannot enter a result set"
                )
        return value

    @classmethod
    def empty(cls, source_type: SourceType, generation: int, query: str = "") -> ResultSet:
        return cls(source_type=source_type, generation=generation, query=query)

    @property
    def candidates(self) -> list[Candidate]:
        return [item.candidate for item in self.items]

    def __len__(self) -> int:
        return len(self.items)


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


class SectionState(BaseModel):
    model_config = ConfigDict(frozen=True)

    section: SectionId
    enabled: bool
    position: int = Field(ge=0)


class ItemSlot(StrEnum):
    """Fixed, non-section slots of a layout template."""

    ERROR_BANNER = "error_banner"
    CALCULATOR_RESULT = "calculator_result"
    DIRECT_SEARCH_RESULT = "direct_search_result"
    SECTIONS = "sections"  # placeholder expanded into the ordered sections
    WEB_SUGGESTIONS = "web_suggestions"
    SEARCH_ENGINES_INLINE = "search_engines_inline"
    NO_RESULTS_MESSAGE = "no_results_message"
    RECENT_QUERIES = "recent_queries"


class SlotItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["slot"] = "slot"
    slot: ItemSlot


class SectionItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["section"] = "section"
    section: SectionId


LayoutItem = Annotated[SlotItem | SectionItem, Field(discriminator="kind")]


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------


class FileType(StrEnum):
    PHOTOS_AND_VIDEOS = "photos_and_videos"
    DOCUMENTS = "documents"
    OTHER = "other"


class SearchFilters(BaseModel):
    """Per-query source filters. Sources ignore fields that do not apply to them."""

    model_config = ConfigDict(frozen=True)

    file_types: frozenset[FileType] = Field(default_factory=lambda: frozenset(FileType))
    show_folders: bool = True
    show_system: bool = False
    show_hidden: bool = False
    contact_limit: int = Field(default=20, ge=1)


# ---------------------------------------------------------------------------
# Short-circuits
# ---------------------------------------------------------------------------


class CalculatorResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    expression: str
    result: str


class EngineTarget(BaseModel):
    """A web search engine, e.g. google, youtube."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["engine"] = "engine"
    engine: str

    @property
    def target_id(self) -> str:
        return self.engine


class BrowserTarget(BaseModel):
    """An installed browser app used as a search target."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["browser"] = "browser"
    package_name: str
    label: str = ""

    @property
    def target_id(self) -> str:
        return f"browser:{self.package_name}"


SearchTarget = Annotated[EngineTarget | BrowserTarget, Field(discriminator="kind")]


class ShortcutNavigation(BaseModel):
    """Side effect: open `target` with `query` (the query minus its trailing code)."""

    model_config = ConfigDict(frozen=True)

    target: SearchTarget
    query: str


# ---------------------------------------------------------------------------
# Published state
# ---------------------------------------------------------------------------


class SearchSnapshot(BaseModel):
    """Per-generation published state handed to the presentation layer."""

    model_config = ConfigDict(frozen=True)

    generation: int = Field(default=0, ge=0)
    query: str = Field(default="", description="Raw query text as typed")
    mode: SearchMode = SearchMode.IDLE
    layout: Layout = Layout.IDLE
    sections: tuple[SectionState, ...] = Field(
        default_factory=tuple, description="Enabled sections in display order"
    )
    results: dict[SourceType, ResultSet] = Field(default_factory=dict)
    pinned: dict[SourceType, tuple[Candidate, ...]] = Field(default_factory=dict)
    calculator: CalculatorResult | None = None
    navigation: ShortcutNavigation | None = None
    locked_target: SearchTarget | None = Field(
        default=None, description="Target chosen by a leading shortcut code, held until clear()"
    )
    recent_queries: tuple[str, ...] = Field(
        default_factory=tuple, description="Recent submitted queries for the idle layout"
    )

    def results_for(self, source_type: SourceType) -> list[Candidate]:
        result_set = self.results.get(source_type)
        return result_set.candidates if result_set else []

    @property
    def section_ids(self) -> list[SectionId]:
        return [s.section for s in self.sections]

    @property
    def has_results(self) -> bool:
        return any(len(rs) > 0 for rs in self.results.values())
