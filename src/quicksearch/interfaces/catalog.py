"""YAML catalog: seed data for the in-memory sources, preferences and shortcuts.

Layout:

    apps: [{key, name, last_used?, metadata?}, ...]
    app_shortcuts / contacts / files / settings: same item shape
    shortcuts: [{code, target: {kind: engine, engine} | {kind: browser, package_name}}]
    permissions: [contacts, files]          # granted; omitted means all
    preferences:
      pinned: {apps: [key, ...]}
      nicknames: {settings: {key: nickname}}
      excluded: {results: {apps: [key]}, suggestions: {...}}
      section_order: [files, apps, ...]
      disabled_sections: [settings]
      recent_queries: [newest, ..., oldest]
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]
from pydantic import ValidationError

from quicksearch.contracts.search_v1 import (
    Candidate,
    ExclusionPurpose,
    SearchFilters,
    SectionId,
    SourceType,
)
from quicksearch.core.config import Config, config
from quicksearch.core.logger import logger
from quicksearch.preferences.permissions import Permission, StaticPermissions
from quicksearch.preferences.store import InMemoryPreferenceStore
from quicksearch.search.aggregator import SourceAggregator
from quicksearch.search.app_cache import AppCache
from quicksearch.search.controller import CalculatorClassifier, QueryController
from quicksearch.search.shortcuts import ShortcutTable, load_shortcut_resolver
from quicksearch.search.sources import (
    AppShortcutsSource,
    AppsSource,
    ContactsSource,
    FilesSource,
    InMemoryProvider,
    SettingsSource,
)


class CatalogError(ValueError):
    """Raised when a catalog file is missing or malformed."""


@dataclass
class Catalog:
    items: dict[SourceType, list[Candidate]] = field(default_factory=dict)
    shortcuts: list[dict[str, Any]] = field(default_factory=list)
    permissions: list[Permission] | None = None
    preferences: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def load(cls, path: str | Path) -> Catalog:
        path = Path(path)
        try:
            with path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise CatalogError(f"Cannot read catalog {path}: {e}") from e
        except yaml.YAMLError as e:
            raise CatalogError(f"Invalid YAML in {path}: {e}") from e
        return cls.from_dict(data or {})

    @classmethod
    def from_dict(cls, data: Any) -> Catalog:
        if not isinstance(data, dict):
            raise CatalogError("Catalog must be a mapping")

        items: dict[SourceType, list[Candidate]] = {}
        for source_type in SourceType:
            raw_items = data.get(source_type.value) or []
            if not isinstance(raw_items, list):
                raise CatalogError(f"'{source_type.value}' must be a list")
            items[source_type] = [_candidate(source_type, raw) for raw in raw_items]

        shortcuts = data.get("shortcuts") or []
        if not isinstance(shortcuts, list):
            raise CatalogError("'shortcuts' must be a list")

        permissions = None
        if "permissions" in data:
            try:
                permissions = [Permission(str(p)) for p in data.get("permissions") or []]
            except ValueError as e:
                raise CatalogError(f"Unknown permission: {e}") from e

        preferences = data.get("preferences") or {}
        if not isinstance(preferences, dict):
            raise CatalogError("'preferences' must be a mapping")

        return cls(
            items=items,
            shortcuts=shortcuts,
            permissions=permissions,
            preferences=preferences,
        )

    def apply_preferences(self, store: InMemoryPreferenceStore) -> None:
        prefs = self.preferences
        try:
            for source, keys in (prefs.get("pinned") or {}).items():
                for key in keys or []:
                    store.pin(SourceType(source), str(key))
            for source, mapping in (prefs.get("nicknames") or {}).items():
                for key, nickname in (mapping or {}).items():
                    store.set_nickname(SourceType(source), str(key), str(nickname))
            for purpose, by_source in (prefs.get("excluded") or {}).items():
                for source, keys in (by_source or {}).items():
                    for key in keys or []:
                        store.exclude(SourceType(source), str(key), ExclusionPurpose(purpose))
            if prefs.get("section_order"):
                store.set_section_order([SectionId(s) for s in prefs["section_order"]])
            for section in prefs.get("disabled_sections") or []:
                store.set_section_enabled(SectionId(section), False)
            for query in reversed(prefs.get("recent_queries") or []):
                store.add_recent_query(str(query))
        except (ValueError, AttributeError, TypeError) as e:
            raise CatalogError(f"Invalid preferences: {e}") from e


def _candidate(source_type: SourceType, raw: Any) -> Candidate:
    if not isinstance(raw, dict):
        raise CatalogError(f"Each '{source_type.value}' entry must be a mapping")
    try:
        return Candidate(
            source_type=source_type,
            key=str(raw.get("key", "")),
            name=str(raw.get("name", "")),
            nickname=raw.get("nickname"),
            last_used=raw.get("last_used"),
            metadata=dict(raw.get("metadata") or {}),
        )
    except ValidationError as e:
        raise CatalogError(f"Invalid {source_type.value} entry {raw!r}: {e}") from e


@dataclass
class SearchStack:
    """Everything the CLI and tests need, wired together."""

    app_cache: AppCache
    providers: dict[SourceType, InMemoryProvider]
    preferences: InMemoryPreferenceStore
    permissions: StaticPermissions
    aggregator: SourceAggregator
    controller: QueryController
    shortcuts: ShortcutTable | None


def build_stack(
    catalog: Catalog,
    *,
    settings: Config | None = None,
    calculator: CalculatorClassifier | None = None,
    debounce_ms: int | None = None,
    filters: SearchFilters | None = None,
) -> SearchStack:
    settings = settings or config

    app_cache = AppCache()
    app_cache.replace(catalog.items.get(SourceType.APPS, []))
    providers = {
        st: InMemoryProvider(catalog.items.get(st, []))
        for st in SourceType
        if st != SourceType.APPS
    }

    preferences = InMemoryPreferenceStore()
    catalog.apply_preferences(preferences)
    permissions = StaticPermissions(catalog.permissions)

    sources = [
        AppsSource(app_cache),
        AppShortcutsSource(providers[SourceType.APP_SHORTCUTS]),
        ContactsSource(providers[SourceType.CONTACTS], permissions),
        FilesSource(providers[SourceType.FILES], permissions),
        SettingsSource(providers[SourceType.SETTINGS]),
    ]
    aggregator = SourceAggregator(
        preferences,
        min_query_lengths=settings.min_query_lengths,
        result_limits=settings.result_limits,
        sort_by_usage=settings.sort_by_usage,
    )
    shortcuts = load_shortcut_resolver(catalog.shortcuts)
    controller = QueryController(
        aggregator,
        sources,
        preferences,
        permissions=permissions,
        calculator=calculator,
        shortcuts=shortcuts,
        filters=filters,
        debounce_ms=settings.debounce_ms if debounce_ms is None else debounce_ms,
        no_match_prefix_skip=settings.no_match_prefix_skip,
        recent_limit=settings.recent_queries_count,
    )
    logger.debug(
        f"Search stack ready: {sum(len(v) for v in catalog.items.values())} items, "
        f"{len(catalog.shortcuts)} shortcut(s)"
    )
    return SearchStack(
        app_cache=app_cache,
        providers=providers,
        preferences=preferences,
        permissions=permissions,
        aggregator=aggregator,
        controller=controller,
        shortcuts=shortcuts,
    )
