"""Search-engine shortcut codes.

A trailing code ("cats yt") opens YouTube with "cats" right away. A leading
code ("yt cats") locks the query onto YouTube until the query is cleared.

Codes are validated once, when the table is built. Detection at query time
assumes a clean table: unique codes, none a prefix of another.
"""

import logging
import re
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from quicksearch.contracts.search_v1 import SearchTarget

logger = logging.getLogger(__name__)

MIN_CODE_LENGTH = 2
MAX_CODE_LENGTH = 5

_WHITESPACE = re.compile(r"\s+")


class ShortcutConfigError(ValueError):
    """Raised when a shortcut table cannot be used as configured."""


def normalize_code(raw: str) -> str:
    """Trim, lowercase and keep letters and digits only."""
    return "".join(ch for ch in raw.strip().lower() if ch.isalnum())


def is_valid_code(code: str) -> bool:
    return MIN_CODE_LENGTH <= len(code) <= MAX_CODE_LENGTH and code.isalnum()


class ShortcutEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    target: SearchTarget
    enabled: bool = Field(default=True)


class ShortcutTable:
    """Validated code -> target table with leading and trailing code detection."""

    def __init__(self, entries: Iterable[ShortcutEntry]) -> None:
        self._by_code: dict[str, ShortcutEntry] = {}
        for entry in entries:
            code = normalize_code(entry.code)
            if not is_valid_code(code):
                raise ShortcutConfigError(
                    f"Shortcut code '{entry.code}' must be {MIN_CODE_LENGTH}-{MAX_CODE_LENGTH} letters or digits"
                )
            if code in self._by_code:
                raise ShortcutConfigError(f"Duplicate shortcut code '{code}'")
            self._by_code[code] = entry.model_copy(update={"code": code})
        self._check_prefixes()

    def _check_prefixes(self) -> None:
        codes = sorted(self._by_code)
        for shorter, longer in zip(codes, codes[1:]):
            # sorted order puts any prefix directly before a code that extends it
            if longer.startswith(shorter):
                raise ShortcutConfigError(
                    f"Shortcut code '{shorter}' is a prefix of '{longer}'"
                )

    @classmethod
    def from_config(cls, raw: Iterable[Mapping[str, Any]] | None) -> "ShortcutTable":
        try:
            entries = [ShortcutEntry.model_validate(item) for item in raw or ()]
        except ValidationError as e:
            raise ShortcutConfigError(f"Malformed shortcut entry: {e}") from e
        return cls(entries)

    @property
    def codes(self) -> dict[str, ShortcutEntry]:
        return dict(self._by_code)

    def detect_trailing_code(self, text: str) -> tuple[str, SearchTarget] | None:
        """Split 'query words code' into ('query words', target).

        Needs at least two whitespace-separated words and an enabled code as
        the last word.
        """
        words = _WHITESPACE.split(text.strip())
        if len(words) < 2:
            return None
        entry = self._by_code.get(words[-1].lower())
        if entry is None or not entry.enabled:
            return None
        return " ".join(words[:-1]), entry.target

    def detect_leading_code(self, text: str) -> tuple[str, SearchTarget] | None:
        """Split 'code query words' into ('query words', target).

        The code alone is enough; the residual is then empty.
        """
        words = _WHITESPACE.split(text.strip())
        if not words[0]:
            return None
        entry = self._by_code.get(words[0].lower())
        if entry is None or not entry.enabled:
            return None
        return " ".join(words[1:]), entry.target


def load_shortcut_resolver(raw: Iterable[Mapping[str, Any]] | None) -> ShortcutTable | None:
    """Build a table, or None (no shortcut detection) if the config is invalid."""
    try:
        return ShortcutTable.from_config(raw)
    except ShortcutConfigError as e:
        logger.error("Shortcut configuration rejected, shortcuts disabled: %s", e)
        return None
