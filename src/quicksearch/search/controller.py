"""Query controller: the single owner of query state.

Flow per input change:
  blank         -> IDLE: new generation, clear results, publish, load pinned items
                   and recent queries
  leading code  -> lock the target (until clear()), re-enter with the residual
  trailing code -> navigation event, then re-enter with the residual query
  locked target -> new generation, empty results: the text is for the target
  calculator    -> SHORT_CIRCUITED: new generation, primary ranked, secondary cleared
  otherwise     -> EVALUATING: new generation, primary ranked inline, secondary
                   sources dispatched after the debounce

Every mutation of controller state happens on the event loop that calls
`on_query_change`. Source work runs on worker threads via the aggregator.
Completions publish only while their generation is still current; anything
older is dropped. In-flight work is never interrupted.
"""

import asyncio
import time
from collections.abc import Callable, Sequence
from typing import Protocol

from quicksearch.contracts.search_v1 import (
    CalculatorResult,
    Candidate,
    Layout,
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
from quicksearch.core.logger import logger
from quicksearch.preferences.permissions import PermissionProvider
from quicksearch.preferences.store import PreferenceStore
from quicksearch.search.aggregator import SourceAggregator
from quicksearch.search.interface import SearchSource
from quicksearch.search.query import Query
from quicksearch.search.sections import SectionOrderer, forced_disabled

CalculatorClassifier = Callable[[str], str | None]
PublishListener = Callable[[SearchSnapshot], None]
NavigateListener = Callable[[ShortcutNavigation], None]


class ShortcutResolver(Protocol):
    def detect_leading_code(self, text: str) -> tuple[str, SearchTarget] | None: ...

    def detect_trailing_code(self, text: str) -> tuple[str, SearchTarget] | None: ...


class QueryController:
    def __init__(
        self,
        aggregator: SourceAggregator,
        sources: Sequence[SearchSource],
        preferences: PreferenceStore,
        *,
        permissions: PermissionProvider | None = None,
        orderer: SectionOrderer | None = None,
        calculator: CalculatorClassifier | None = None,
        shortcuts: ShortcutResolver | None = None,
        filters: SearchFilters | None = None,
        debounce_ms: int = 150,
        primary: SourceType = SourceType.APPS,
        no_match_prefix_skip: bool = False,
        recent_limit: int = 3,
    ) -> None:
        self._aggregator = aggregator
        self._sources: dict[SourceType, SearchSource] = {s.source_type: s for s in sources}
        self._prefs = preferences
        self._permissions = permissions
        self._orderer = orderer or SectionOrderer()
        self._calculator = calculator
        self._shortcuts = shortcuts
        self.filters = filters or SearchFilters()
        self._debounce = max(debounce_ms, 0) / 1000
        self._primary = primary
        self._no_match_prefix_skip = no_match_prefix_skip
        # (normalized prefix, source version) that produced zero primary results
        self._no_match_prefix: tuple[str, int | None] | None = None
        self._recent_limit = max(recent_limit, 0)

        self._generation = 0
        self._raw = ""
        self._mode = SearchMode.IDLE
        self._layout = Layout.IDLE
        self._results: dict[SourceType, ResultSet] = {}
        self._pinned: dict[SourceType, tuple[Candidate, ...]] = {}
        self._calculator_result: CalculatorResult | None = None
        self._pending_navigation: ShortcutNavigation | None = None
        self._locked_target: SearchTarget | None = None
        self._state = SearchSnapshot()

        self._tasks: set[asyncio.Task] = set()
        self._publish_listeners: list[PublishListener] = []
        self._navigate_listeners: list[NavigateListener] = []

    # -- public surface ----------------------------------------------------

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def mode(self) -> SearchMode:
        return self._mode

    @property
    def locked_target(self) -> SearchTarget | None:
        return self._locked_target

    @property
    def state(self) -> SearchSnapshot:
        """Most recently published snapshot."""
        return self._state

    def on_publish(self, listener: PublishListener) -> None:
        self._publish_listeners.append(listener)

    def on_navigate(self, listener: NavigateListener) -> None:
        self._navigate_listeners.append(listener)

    def on_query_change(self, raw: str) -> None:
        """Entry point for every keystroke. Returns immediately."""
        self._apply(raw, force=False)

    def clear(self) -> None:
        """Empty the query and release any locked shortcut target."""
        self._locked_target = None
        self._apply("", force=True)

    def clear_locked_target(self) -> None:
        self._locked_target = None
        self.refresh()

    def refresh(self) -> None:
        """Re-run the current query under a new generation (after pin/exclude/nickname changes)."""
        # preferences may have changed, so an earlier empty primary result proves nothing
        self._no_match_prefix = None
        self._apply(self._raw, force=True)

    async def wait_idle(self) -> None:
        """Wait until every dispatched task (including debounced ones) has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # -- state machine -----------------------------------------------------

    def _apply(self, raw: str, *, force: bool) -> None:
        if not force and raw == self._raw and self._generation > 0:
            return
        self._raw = raw
        trimmed = raw.strip()

        if not trimmed:
            self._enter_idle()
            return

        if self._shortcuts is not None:
            leading = self._shortcuts.detect_leading_code(trimmed)
            if leading is not None:
                residual, target = leading
                self._locked_target = target
                logger.info(f"Locked onto {target.target_id}")
                self._apply(residual, force=True)
                return

            match = self._shortcuts.detect_trailing_code(trimmed)
            if match is not None:
                residual, target = match
                self._navigate(ShortcutNavigation(target=target, query=residual.strip()))
                self._apply(residual, force=True)
                return

        if self._locked_target is not None:
            self._enter_locked(raw)
            return

        calculated = self._evaluate_calculator(trimmed)
        if calculated is not None:
            self._enter_short_circuit(raw, calculated)
            return

        self._enter_evaluating(raw)

    def _next_generation(self) -> int:
        self._generation += 1
        return self._generation

    def _enter_idle(self) -> None:
        generation = self._next_generation()
        self._mode = SearchMode.IDLE
        self._layout = Layout.IDLE
        self._results = {}
        self._calculator_result = None
        self._no_match_prefix = None
        logger.query_changed(self._raw, generation, self._mode.value)
        self._publish()
        self._spawn(self._load_pinned(generation))

    def _enter_short_circuit(self, raw: str, value: str) -> None:
        query = Query.parse(raw, self._next_generation())
        self._mode = SearchMode.SHORT_CIRCUITED
        self._layout = Layout.SEARCHING
        self._pinned = {}
        self._calculator_result = CalculatorResult(expression=query.trimmed, result=value)
        logger.query_changed(raw, query.generation, self._mode.value)
        logger.short_circuit(query.generation, "calculator", value)
        self._results = {}
        primary = self._rank_primary(query)
        if primary is not None:
            self._results[self._primary] = primary
        self._publish()

    def _enter_locked(self, raw: str) -> None:
        # the query belongs to the locked target: no local matching, no calculator
        query = Query.parse(raw, self._next_generation())
        self._mode = SearchMode.EVALUATING
        self._layout = Layout.SEARCHING
        self._pinned = {}
        self._calculator_result = None
        self._results = {}
        logger.query_changed(raw, query.generation, self._mode.value)
        self._publish()

    def _enter_evaluating(self, raw: str) -> None:
        query = Query.parse(raw, self._next_generation())
        self._mode = SearchMode.EVALUATING
        self._layout = Layout.SEARCHING
        self._pinned = {}
        self._calculator_result = None
        logger.query_changed(raw, query.generation, self._mode.value)

        t0 = time.monotonic()
        primary = self._rank_primary(query)
        if primary is not None:
            self._results[self._primary] = primary
            logger.publish(
                query.generation,
                self._primary.value,
                len(primary),
                duration_seconds=time.monotonic() - t0,
            )
        self._publish()

        secondary = [
            s
            for s in self._enabled_sources()
            if s.source_type != self._primary and s.is_available()
        ]
        if secondary:
            self._spawn(self._dispatch(query, secondary))

    # -- primary source ----------------------------------------------------

    def _rank_primary(self, query: Query) -> ResultSet | None:
        source = self._sources.get(self._primary)
        if source is None or SectionId.for_source(self._primary) not in self._enabled_sections():
            return None
        if len(query.normalized) < self._aggregator.min_length_for(source):
            return ResultSet.empty(self._primary, query.generation, query.normalized)
        if self._skip_by_no_match_prefix(query.normalized, source):
            logger.debug(f"#{query.generation} {self._primary} skipped: no-match prefix")
            return ResultSet.empty(self._primary, query.generation, query.normalized)
        try:
            result = self._aggregator.collect(query, source, self.filters)
        except Exception as e:
            logger.source_failed(self._primary.value, str(e))
            return ResultSet.empty(self._primary, query.generation, query.normalized)
        if self._no_match_prefix_skip and not result.items:
            self._no_match_prefix = (query.normalized, source.version)
        return result

    def _skip_by_no_match_prefix(self, normalized: str, source: SearchSource) -> bool:
        if not self._no_match_prefix_skip or self._no_match_prefix is None:
            return False
        prefix, version = self._no_match_prefix
        if version != source.version or not normalized.startswith(prefix):
            self._no_match_prefix = None
            return False
        # nicknames are not prefix-monotonic: a longer query can hit one
        if self._prefs.find_by_nickname_match(source.source_type, normalized):
            return False
        return True

    # -- secondary sources -------------------------------------------------

    async def _dispatch(self, query: Query, sources: list[SearchSource]) -> None:
        if self._debounce:
            await asyncio.sleep(self._debounce)
        if query.generation != self._generation:
            logger.stale_discarded(query.generation, self._generation, "dispatch")
            return
        logger.dispatch(query.generation, [s.source_type.value for s in sources])
        await asyncio.gather(
            *(self._run_source(query, source) for source in sources),
            return_exceptions=True,
        )

    async def _run_source(self, query: Query, source: SearchSource) -> None:
        t0 = time.monotonic()
        result = await self._aggregator.search_source(query, source, self.filters)
        if result.generation != self._generation:
            logger.stale_discarded(result.generation, self._generation, source.source_type.value)
            return
        self._results[source.source_type] = result
        logger.publish(
            result.generation,
            source.source_type.value,
            len(result),
            duration_seconds=time.monotonic() - t0,
        )
        self._publish()

    async def _load_pinned(self, generation: int) -> None:
        sources = [s for s in self._enabled_sources() if s.is_available()]
        loaded = await asyncio.gather(
            *(self._aggregator.load_pinned_async(s, self.filters) for s in sources)
        )
        if generation != self._generation:
            logger.stale_discarded(generation, self._generation, "pinned")
            return
        self._pinned = {
            s.source_type: tuple(items) for s, items in zip(sources, loaded) if items
        }
        self._publish()

    # -- helpers -----------------------------------------------------------

    def _evaluate_calculator(self, text: str) -> str | None:
        if self._calculator is None:
            return None
        try:
            return self._calculator(text)
        except Exception as e:
            logger.warning(f"Calculator failed on '{text}': {e}")
            return None

    def _navigate(self, navigation: ShortcutNavigation) -> None:
        self._pending_navigation = navigation
        logger.shortcut_navigation(navigation.target.target_id, navigation.query)
        for listener in list(self._navigate_listeners):
            try:
                listener(navigation)
            except Exception as e:
                logger.error("Navigation listener failed", exception=e)

    def _section_states(self) -> list[SectionState]:
        granted = self._permissions.granted() if self._permissions is not None else None
        return self._orderer.order(
            self._layout,
            self._prefs.get_section_order(),
            self._prefs.get_disabled_sections(),
            forced_disabled(granted) if granted is not None else (),
        )

    def _enabled_sections(self) -> list[SectionId]:
        return [s.section for s in self._section_states()]

    def _enabled_sources(self) -> list[SearchSource]:
        return [
            self._sources[section.source_type]
            for section in self._enabled_sections()
            if section.source_type in self._sources
        ]

    def _recent_queries(self) -> tuple[str, ...]:
        if self._layout != Layout.IDLE or not self._recent_limit:
            return ()
        return tuple(self._prefs.get_recent_queries()[: self._recent_limit])

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _publish(self) -> None:
        sections = self._section_states()
        visible = {s.section.source_type for s in sections}
        snapshot = SearchSnapshot(
            generation=self._generation,
            query=self._raw,
            mode=self._mode,
            layout=self._layout,
            sections=tuple(sections),
            results={st: rs for st, rs in self._results.items() if st in visible},
            pinned={st: items for st, items in self._pinned.items() if st in visible},
            calculator=self._calculator_result,
            navigation=self._pending_navigation,
            locked_target=self._locked_target,
            recent_queries=self._recent_queries(),
        )
        self._pending_navigation = None
        self._state = snapshot
        for listener in list(self._publish_listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.error("Publish listener failed", exception=e)
