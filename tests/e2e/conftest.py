from collections.abc import AsyncIterator

import pytest_asyncio

from quicksearch.contracts.search_v1 import SearchSnapshot
from quicksearch.interfaces.catalog import Catalog, SearchStack, build_stack

_ANSWERS = {"2+2": "4", "12*3": "36", "1/4": "0.25"}


def table_calculator(text: str) -> str | None:
    """Stand-in classifier: answers a fixed set of expressions."""
    return _ANSWERS.get(text.replace(" ", ""))


class Recorder:
    def __init__(self) -> None:
        self.snapshots: list[SearchSnapshot] = []
        self.navigations = []

    @property
    def generations(self) -> list[int]:
        return [s.generation for s in self.snapshots]


@pytest_asyncio.fixture
async def journey(catalog: Catalog) -> AsyncIterator[tuple[SearchStack, Recorder]]:
    """Catalog-backed stack with a calculator, recording everything it publishes."""
    stack = build_stack(catalog, calculator=table_calculator, debounce_ms=0)
    recorder = Recorder()
    stack.controller.on_publish(recorder.snapshots.append)
    stack.controller.on_navigate(recorder.navigations.append)
    try:
        yield stack, recorder
    finally:
        await stack.controller.wait_idle()
