import json
import logging
import os
import subprocess
import sys
from pathlib import Path

import pytest

from quicksearch.contracts.search_v1 import (
    EngineTarget,
    Layout,
    MatchPriority,
    SearchMode,
    SectionId,
    SourceType,
)

logger = logging.getLogger(__name__)

ROOT = Path(__file__).resolve().parents[2]


async def _search(journey, text: str):
    stack, recorder = journey
    stack.controller.on_query_change(text)
    await stack.controller.wait_idle()
    return stack.controller.state


@pytest.mark.asyncio
async def test_nickname_finds_contact(journey):
    state = await _search(journey, "mother")

    contacts = state.results[SourceType.CONTACTS]
    assert [c.name for c in contacts.candidates] == ["Mom"]
    assert contacts.items[0].priority == MatchPriority.EXACT_NICKNAME


@pytest.mark.asyncio
async def test_files_ranked_and_hidden_filtered(journey):
    state = await _search(journey, "report")

    names = [c.name for c in state.results_for(SourceType.FILES)]
    assert names == ["Reports", "Quarterly report.pdf"]
    assert ".report-cache" not in names
    assert state.section_ids == [
        SectionId.APPS,
        SectionId.CONTACTS,
        SectionId.FILES,
        SectionId.SETTINGS,
        SectionId.APP_SHORTCUTS,
    ]


@pytest.mark.asyncio
async def test_two_letter_settings_query(journey):
    state = await _search(journey, "wi")
    assert [c.key for c in state.results_for(SourceType.SETTINGS)] == ["wifi"]


@pytest.mark.asyncio
async def test_accent_insensitive_app_match(journey):
    state = await _search(journey, "cafe")
    assert [c.name for c in state.results_for(SourceType.APPS)] == ["Café Finder"]


@pytest.mark.asyncio
async def test_trailing_engine_code_navigates(journey):
    _, recorder = journey
    state = await _search(journey, "bluetooth gg")

    assert len(recorder.navigations) == 1
    navigation = recorder.navigations[0]
    assert navigation.target == EngineTarget(engine="google")
    assert navigation.query == "bluetooth"
    assert state.query == "bluetooth"
    settings = state.results[SourceType.SETTINGS]
    assert settings.items[0].priority == MatchPriority.EXACT_NAME


@pytest.mark.asyncio
async def test_keystrokes_publish_in_generation_order(journey):
    stack, recorder = journey
    for text in ["m", "ma", "map", "maps"]:
        stack.controller.on_query_change(text)
    await stack.controller.wait_idle()

    logger.info(f"Published generations: {recorder.generations}")
    assert recorder.generations == sorted(recorder.generations)
    final = stack.controller.state
    assert final.generation == stack.controller.generation
    assert [c.name for c in final.results_for(SourceType.APPS)] == ["Maps", "Offline Maps"]
    for snapshot in recorder.snapshots:
        for result_set in snapshot.results.values():
            assert result_set.generation <= snapshot.generation


@pytest.mark.asyncio
async def test_clearing_returns_to_pinned_items(journey):
    stack, _ = journey
    await _search(journey, "spotify")
    stack.controller.clear()
    await stack.controller.wait_idle()

    state = stack.controller.state
    assert state.mode == SearchMode.IDLE
    assert state.layout == Layout.IDLE
    assert [c.name for c in state.pinned[SourceType.APPS]] == ["Maps", "Spotify"]
    assert [c.nickname for c in state.pinned[SourceType.CONTACTS]] == ["mother"]


@pytest.mark.asyncio
async def test_calculator_suppresses_other_sections(journey):
    state = await _search(journey, "12 * 3")

    assert state.mode == SearchMode.SHORT_CIRCUITED
    assert state.calculator.result == "36"
    for source_type in (SourceType.CONTACTS, SourceType.FILES, SourceType.SETTINGS):
        assert state.results_for(source_type) == []


@pytest.mark.asyncio
async def test_app_found_by_nickname_only(journey):
    state = await _search(journey, "gear")
    apps = state.results[SourceType.APPS]
    assert [c.key for c in apps.candidates] == ["com.android.settings"]


@pytest.mark.asyncio
async def test_leading_engine_code_locks_until_cleared(journey):
    stack, recorder = journey
    state = await _search(journey, "gg bluetooth")

    assert recorder.navigations == []
    assert state.locked_target == EngineTarget(engine="google")
    assert state.query == "bluetooth"
    assert state.results_for(SourceType.SETTINGS) == []

    stack.controller.clear()
    await stack.controller.wait_idle()
    idle = stack.controller.state
    assert idle.locked_target is None
    assert idle.recent_queries == ("weather tomorrow", "alice")


@pytest.mark.integration
def test_oneshot_subprocess_outputs_json():
    env = {
        **os.environ,
        "PYTHONPATH": str(ROOT / "src"),
        "QUICKSEARCH_EVENT_LOG": "false",
    }
    proc = subprocess.run(
        [
            sys.executable,
            "-m",
            "quicksearch.main",
            "oneshot",
            "--catalog",
            str(ROOT / "tests" / "fixtures" / "catalog.yaml"),
            "bluetooth",
        ],
        capture_output=True,
        text=True,
        env=env,
        timeout=30,
        check=False,
    )
    assert proc.returncode == 0, proc.stderr
    snapshot = json.loads(proc.stdout)
    assert snapshot["results"]["settings"]["items"][0]["candidate"]["key"] == "bluetooth"
