import pytest

from quicksearch.contracts.search_v1 import BrowserTarget, EngineTarget
from quicksearch.search.shortcuts import (
    ShortcutConfigError,
    ShortcutTable,
    is_valid_code,
    load_shortcut_resolver,
    normalize_code,
)

CONFIG = [
    {"code": "yt", "target": {"kind": "engine", "engine": "youtube"}},
    {"code": "gg", "target": {"kind": "engine", "engine": "google"}},
    {"code": "ff", "target": {"kind": "browser", "package_name": "org.mozilla.firefox"}},
    {"code": "wk", "target": {"kind": "engine", "engine": "wikipedia"}, "enabled": False},
]


@pytest.fixture
def table() -> ShortcutTable:
    return ShortcutTable.from_config(CONFIG)


def test_trailing_code_is_split_off(table):
    residual, target = table.detect_trailing_code("funny cats yt")
    assert residual == "funny cats"
    assert target == EngineTarget(engine="youtube")


def test_detection_is_case_insensitive_and_trims(table):
    residual, target = table.detect_trailing_code("  news   GG ")
    assert residual == "news"
    assert target.target_id == "google"


def test_browser_target(table):
    _, target = table.detect_trailing_code("docs ff")
    assert isinstance(target, BrowserTarget)
    assert target.target_id == "browser:org.mozilla.firefox"


def test_code_alone_is_not_a_shortcut(table):
    assert table.detect_trailing_code("yt") is None


def test_code_must_be_whole_last_word(table):
    assert table.detect_trailing_code("cats ytx") is None
    assert table.detect_trailing_code("yt cats") is None


def test_disabled_code_is_ignored(table):
    assert table.detect_trailing_code("python wk") is None


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(" YT ", "yt"), ("g-g", "gg"), ("a b1", "ab1")],
)
def test_normalize_code(raw, expected):
    assert normalize_code(raw) == expected


def test_code_length_bounds():
    assert not is_valid_code("y")
    assert is_valid_code("yt")
    assert is_valid_code("abcde")
    assert not is_valid_code("abcdef")


def test_prefix_collision_is_rejected():
    with pytest.raises(ShortcutConfigError, match="prefix"):
        ShortcutTable.from_config(
            [
                {"code": "gg", "target": {"kind": "engine", "engine": "google"}},
                {"code": "ggl", "target": {"kind": "engine", "engine": "google_lens"}},
            ]
        )


def test_duplicate_after_normalization_is_rejected():
    with pytest.raises(ShortcutConfigError, match="Duplicate"):
        ShortcutTable.from_config(
            [
                {"code": "yt", "target": {"kind": "engine", "engine": "youtube"}},
                {"code": "Y-T", "target": {"kind": "engine", "engine": "youtube_music"}},
            ]
        )


def test_invalid_length_is_rejected():
    with pytest.raises(ShortcutConfigError):
        ShortcutTable.from_config([{"code": "y", "target": {"kind": "engine", "engine": "youtube"}}])


def test_malformed_target_is_rejected():
    with pytest.raises(ShortcutConfigError, match="Malformed"):
        ShortcutTable.from_config([{"code": "yt", "target": {"kind": "rocket"}}])


def test_loader_degrades_to_no_detection():
    resolver = load_shortcut_resolver(
        [
            {"code": "gg", "target": {"kind": "engine", "engine": "google"}},
            {"code": "ggl", "target": {"kind": "engine", "engine": "google_lens"}},
        ]
    )
    assert resolver is None


def test_loader_accepts_empty_config():
    resolver = load_shortcut_resolver(None)
    assert resolver is not None
    assert resolver.detect_trailing_code("cats yt") is None


def test_leading_code_is_split_off(table):
    residual, target = table.detect_leading_code("YT  funny cats ")
    assert residual == "funny cats"
    assert target == EngineTarget(engine="youtube")


def test_leading_code_alone_leaves_empty_residual(table):
    assert table.detect_leading_code("gg") == ("", EngineTarget(engine="google"))


def test_leading_code_must_be_whole_first_word(table):
    assert table.detect_leading_code("ytm cats") is None
    assert table.detect_leading_code("cats") is None
    assert table.detect_leading_code("   ") is None


def test_disabled_leading_code_is_ignored(table):
    assert table.detect_leading_code("wk python") is None
