"""Shared adapter plumbing: permission gating and failure translation."""

import logging
from collections.abc import Callable

from quicksearch.contracts.search_v1 import Candidate
from quicksearch.preferences.permissions import Permission, PermissionProvider
from quicksearch.search.interface import SearchSource

logger = logging.getLogger(__name__)


class ProviderSource(SearchSource):
    """SearchSource over a blocking provider, optionally gated by a permission."""

    required_permission: Permission | None = None

    def __init__(self, permissions: PermissionProvider | None = None) -> None:
        self._permissions = permissions

    def is_available(self) -> bool:
        if self.required_permission is None or self._permissions is None:
            return True
        return self._permissions.has(self.required_permission)

    def _guarded(self, op: str, call: Callable[[], list[Candidate]]) -> list[Candidate]:
        if not self.is_available():
            logger.debug("%s.%s skipped: permission missing", self.source_type, op)
            return []
        try:
            return list(call())
        except Exception as e:
            logger.warning("%s.%s failed: %s", self.source_type, op, e)
            return []
