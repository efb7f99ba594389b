"""Device files, gated by the files permission.

Candidates carry `mime_type`, `is_directory`, `is_system` and `path` in their
metadata; the type, folder, system and hidden filters are applied here so
every provider gets the same behavior.
"""

from collections.abc import Sequence
from typing import Protocol

from quicksearch.contracts.search_v1 import Candidate, FileType, SearchFilters, SourceType
from quicksearch.preferences.permissions import Permission, PermissionProvider
from quicksearch.search.sources.base import ProviderSource

MEDIA_PREFIXES = ("image/", "video/")

DOCUMENT_PREFIXES = (
    "application/pdf",
    "application/msword",
    "application/vnd.ms-word",
    "application/vnd.openxmlformats-officedocument.wordprocessingml",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml",
    "application/vnd.ms-powerpoint",
    "application/vnd.openxmlformats-officedocument.presentationml",
    "application/vnd.oasis.opendocument",
    "application/rtf",
    "application/x-rtf",
    "text/",
)

TRASH_MARKERS = ("/.trash", "/.trashed")


def classify_mime(mime_type: str | None) -> FileType:
    if not mime_type:
        return FileType.OTHER
    mime = mime_type.lower()
    if mime.startswith(MEDIA_PREFIXES):
        return FileType.PHOTOS_AND_VIDEOS
    if mime.startswith(DOCUMENT_PREFIXES):
        return FileType.DOCUMENTS
    return FileType.OTHER


def passes_filters(candidate: Candidate, filters: SearchFilters) -> bool:
    meta = candidate.metadata
    if meta.get("is_directory"):
        if not filters.show_folders:
            return False
    elif classify_mime(meta.get("mime_type")) not in filters.file_types:
        return False
    if meta.get("is_system") and not filters.show_system:
        return False
    if not filters.show_hidden:
        if candidate.name.startswith("."):
            return False
        path = str(meta.get("path", "")).lower()
        if any(marker in path for marker in TRASH_MARKERS):
            return False
    return True


class FileProvider(Protocol):
    def search_files(
        self,
        query: str,
        type_filters: frozenset[FileType],
        show_folders: bool,
        show_system: bool,
        show_hidden: bool,
    ) -> list[Candidate]: ...

    def get_by_uris(self, uris: Sequence[str]) -> list[Candidate]: ...


class FilesSource(ProviderSource):
    min_query_length = 2
    required_permission = Permission.FILES

    def __init__(
        self, provider: FileProvider, permissions: PermissionProvider | None = None
    ) -> None:
        super().__init__(permissions)
        self.provider = provider

    @property
    def source_type(self) -> SourceType:
        return SourceType.FILES

    def search(self, query: str, filters: SearchFilters) -> list[Candidate]:
        found = self._guarded(
            "search",
            lambda: self.provider.search_files(
                query,
                filters.file_types,
                filters.show_folders,
                filters.show_system,
                filters.show_hidden,
            ),
        )
        return [c for c in found if passes_filters(c, filters)]

    def fetch_by_ids(self, keys: Sequence[str], filters: SearchFilters) -> list[Candidate]:
        found = self._guarded("fetch_by_ids", lambda: self.provider.get_by_uris(keys))
        return [c for c in found if passes_filters(c, filters)]
