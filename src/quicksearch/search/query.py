"""Immutable query value handed from the controller to the aggregator."""

from dataclasses import dataclass, field

from quicksearch.utils.text import normalize_for_search, tokenize


@dataclass(frozen=True)
class Query:
    raw: str
    trimmed: str
    normalized: str
    tokens: tuple[str, ...] = field(default_factory=tuple)
    generation: int = 0

    @classmethod
    def parse(cls, raw: str, generation: int = 0) -> "Query":
        trimmed = " ".join(raw.split())
        normalized = normalize_for_search(trimmed)
        return cls(
            raw=raw,
            trimmed=trimmed,
            normalized=normalized,
            tokens=tuple(tokenize(normalized)),
            generation=generation,
        )

    @property
    def is_blank(self) -> bool:
        return not self.trimmed
