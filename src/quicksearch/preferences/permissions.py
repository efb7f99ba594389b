"""Runtime permissions that gate sources and force-disable sections."""

import threading
from collections.abc import Iterable
from enum import StrEnum
from typing import Protocol


class Permission(StrEnum):
    CONTACTS = "contacts"
    FILES = "files"


class PermissionProvider(Protocol):
    def has(self, permission: Permission) -> bool: ...

    def granted(self) -> frozenset[Permission]: ...


class StaticPermissions:
    """In-process permission state; grant/revoke stand in for the platform dialog."""

    def __init__(self, granted: Iterable[Permission] | None = None) -> None:
        self._lock = threading.Lock()
        self._granted: set[Permission] = (
            set(Permission) if granted is None else set(granted)
        )

    def has(self, permission: Permission) -> bool:
        with self._lock:
            return permission in self._granted

    def granted(self) -> frozenset[Permission]:
        with self._lock:
            return frozenset(self._granted)

    def grant(self, permission: Permission) -> None:
        with self._lock:
            self._granted.add(permission)

    def revoke(self, permission: Permission) -> None:
        with self._lock:
            self._granted.discard(permission)
