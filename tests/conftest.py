import os
from collections.abc import Sequence
from pathlib import Path

# keep the JSONL event log out of test runs
os.environ.setdefault("QUICKSEARCH_EVENT_LOG", "false")

import pytest  # noqa: E402

from quicksearch.interfaces.catalog import Catalog, SearchStack, build_stack  # noqa: E402

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def catalog_path() -> Path:
    return FIXTURES / "catalog.yaml"


@pytest.fixture
def catalog(catalog_path: Path) -> Catalog:
    return Catalog.load(catalog_path)


@pytest.fixture
def stack(catalog: Catalog) -> SearchStack:
    """Fully wired stack over the fixture catalog, no debounce."""
    return build_stack(catalog, debounce_ms=0)


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run integration tests that need the package installed as a distribution.",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers", "integration: requires an installed package or a subprocess"
    )
    config.addinivalue_line("markers", "e2e: end-to-end journeys over the catalog")
    config.addinivalue_line("markers", "property: property-based deterministic tests")


def pytest_collection_modifyitems(
    config: pytest.Config,
    items: Sequence[pytest.Item],
) -> None:
    run_integration = config.getoption("--run-integration")
    skip_integration = pytest.mark.skip(
        reason="integration is opt-in; rerun with --run-integration"
    )

    for item in items:
        if "tests/e2e/" in item.nodeid:
            item.add_marker("e2e")
        if item.get_closest_marker("integration") and not run_integration:
            item.add_marker(skip_integration)
