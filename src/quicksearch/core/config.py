"""Configuration from environment variables (.env)."""

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int_map(name: str, default: dict[str, int]) -> dict[str, int]:
    """Parse 'apps=1,contacts=2' into a dict, keeping defaults for missing keys."""
    merged = dict(default)
    for part in os.getenv(name, "").split(","):
        if "=" not in part:
            continue
        key, _, value = part.partition("=")
        key = key.strip().lower()
        try:
            merged[key] = int(value.strip())
        except ValueError:
            continue
    return merged


DEFAULT_MIN_QUERY_LENGTHS: dict[str, int] = {
    "apps": 1,
    "app_shortcuts": 1,
    "contacts": 2,
    "files": 2,
    "settings": 2,
}

MAX_RECENT_QUERIES = 10

DEFAULT_RESULT_LIMITS: dict[str, int] = {
    "apps": 10,
    "app_shortcuts": 10,
    "contacts": 20,
    "files": 25,
    "settings": 10,
}


@dataclass
class Config:
    project_root: Path
    logs_dir: Path
    event_log_enabled: bool
    log_level: str
    debounce_ms: int
    sort_by_usage: bool
    no_match_prefix_skip: bool
    recent_queries_count: int
    catalog_path: Path | None
    min_query_lengths: dict[str, int] = field(default_factory=dict)
    result_limits: dict[str, int] = field(default_factory=dict)

    @classmethod
    def load(cls) -> "Config":
        project_root = Path(__file__).parent.parent.parent.parent
        catalog = os.getenv("QUICKSEARCH_CATALOG", "").strip()
        return cls(
            project_root=project_root,
            logs_dir=Path(os.getenv("QUICKSEARCH_LOGS_DIR", str(project_root / "logs"))),
            event_log_enabled=_env_bool("QUICKSEARCH_EVENT_LOG", True),
            log_level=os.getenv("QUICKSEARCH_LOG_LEVEL", "INFO").strip().upper() or "INFO",
            debounce_ms=int(os.getenv("QUICKSEARCH_DEBOUNCE_MS", "150")),
            sort_by_usage=_env_bool("QUICKSEARCH_SORT_BY_USAGE", False),
            no_match_prefix_skip=_env_bool("QUICKSEARCH_NO_MATCH_PREFIX_SKIP", False),
            recent_queries_count=int(os.getenv("QUICKSEARCH_RECENT_QUERIES", "3")),
            catalog_path=Path(catalog) if catalog else None,
            min_query_lengths=_env_int_map("QUICKSEARCH_MIN_QUERY_LENGTHS", DEFAULT_MIN_QUERY_LENGTHS),
            result_limits=_env_int_map("QUICKSEARCH_RESULT_LIMITS", DEFAULT_RESULT_LIMITS),
        )

    def validate(self) -> list[str]:
        errors = []
        if self.debounce_ms < 0:
            errors.append(f"QUICKSEARCH_DEBOUNCE_MS must be >= 0, got {self.debounce_ms}")
        if not 0 <= self.recent_queries_count <= MAX_RECENT_QUERIES:
            errors.append(
                f"QUICKSEARCH_RECENT_QUERIES must be 0-{MAX_RECENT_QUERIES}, got {self.recent_queries_count}"
            )
        for name, length in self.min_query_lengths.items():
            if length < 1:
                errors.append(f"Minimum query length for '{name}' must be >= 1, got {length}")
        for name, limit in self.result_limits.items():
            if limit < 1:
                errors.append(f"Result limit for '{name}' must be >= 1, got {limit}")
        if self.catalog_path is not None and not self.catalog_path.exists():
            errors.append(f"Catalog file not found: {self.catalog_path}")
        return errors


config = Config.load()
