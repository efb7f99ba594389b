"""One-shot interface: run a single query, print the published snapshot as JSON, exit."""

from __future__ import annotations

import asyncio
from pathlib import Path

from quicksearch.core.config import config
from quicksearch.interfaces.catalog import Catalog, CatalogError, build_stack


def resolve_catalog_path(path: str | Path | None) -> Path:
    if path:
        return Path(path)
    if config.catalog_path is not None:
        return config.catalog_path
    return config.project_root / "catalog.sample.yaml"


async def run_oneshot(query: str, catalog_path: str | Path | None = None) -> int:
    text = (query or "").strip()
    if not text:
        print("Error: query must not be empty")
        return 2

    try:
        catalog = Catalog.load(resolve_catalog_path(catalog_path))
        stack = build_stack(catalog, debounce_ms=0)
    except CatalogError as e:
        print(f"Error: {e}")
        return 2

    stack.controller.on_query_change(text)
    await stack.controller.wait_idle()
    print(stack.controller.state.model_dump_json(indent=2))
    return 0


def main(query: str, catalog_path: str | Path | None = None) -> int:
    return asyncio.run(run_oneshot(query=query, catalog_path=catalog_path))
