"""User preferences and runtime permissions consumed by the search core."""

from quicksearch.preferences.permissions import Permission, PermissionProvider, StaticPermissions
from quicksearch.preferences.store import InMemoryPreferenceStore, PreferenceStore

__all__ = [
    "InMemoryPreferenceStore",
    "Permission",
    "PermissionProvider",
    "PreferenceStore",
    "StaticPermissions",
]
