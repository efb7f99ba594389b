"""Versioned in-memory cache of installed apps.

Owned by whoever builds the search stack and passed into the apps source.
The version increments on every replace/invalidate so dependents (the
no-match-prefix memo in the controller) can tell when their view is stale.
"""

import logging
import threading
from collections.abc import Callable, Iterable

from quicksearch.contracts.search_v1 import Candidate, SourceType

logger = logging.getLogger(__name__)

AppLoader = Callable[[], Iterable[Candidate]]


class AppCache:
    def __init__(self, loader: AppLoader | None = None) -> None:
        self._loader = loader
        self._lock = threading.Lock()
        self._apps: dict[str, Candidate] | None = None
        self._version = 0

    @property
    def version(self) -> int:
        with self._lock:
            return self._version

    def replace(self, apps: Iterable[Candidate]) -> None:
        indexed: dict[str, Candidate] = {}
        for app in apps:
            if app.source_type != SourceType.APPS:
                raise ValueError(f"AppCache only holds apps, got {app.source_type}")
            indexed[app.key] = app
        with self._lock:
            self._apps = indexed
            self._version += 1
        logger.debug("App cache replaced: %s apps", len(indexed))

    def invalidate(self) -> None:
        """Drop the snapshot; the next read reloads through the loader."""
        with self._lock:
            self._apps = None
            self._version += 1

    def snapshot(self) -> list[Candidate]:
        with self._lock:
            apps = self._apps
        if apps is None:
            apps = self._reload()
        return list(apps.values())

    def get(self, keys: Iterable[str]) -> list[Candidate]:
        with self._lock:
            apps = self._apps
        if apps is None:
            apps = self._reload()
        return [apps[key] for key in keys if key in apps]

    def _reload(self) -> dict[str, Candidate]:
        if self._loader is None:
            with self._lock:
                self._apps = {}
                return self._apps
        loaded = {app.key: app for app in self._loader()}
        with self._lock:
            self._apps = loaded
        logger.debug("App cache loaded: %s apps", len(loaded))
        return loaded
