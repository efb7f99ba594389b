from quicksearch.core.config import DEFAULT_MIN_QUERY_LENGTHS, Config


def test_defaults(monkeypatch):
    for name in (
        "QUICKSEARCH_DEBOUNCE_MS",
        "QUICKSEARCH_MIN_QUERY_LENGTHS",
        "QUICKSEARCH_RESULT_LIMITS",
        "QUICKSEARCH_CATALOG",
        "QUICKSEARCH_NO_MATCH_PREFIX_SKIP",
        "QUICKSEARCH_RECENT_QUERIES",
    ):
        monkeypatch.delenv(name, raising=False)

    cfg = Config.load()
    assert cfg.debounce_ms == 150
    assert cfg.min_query_lengths == DEFAULT_MIN_QUERY_LENGTHS
    assert cfg.result_limits["files"] == 25
    assert cfg.no_match_prefix_skip is False
    assert cfg.catalog_path is None
    assert cfg.recent_queries_count == 3
    assert cfg.validate() == []


def test_per_source_overrides_merge_with_defaults(monkeypatch):
    monkeypatch.setenv("QUICKSEARCH_MIN_QUERY_LENGTHS", "contacts=3, files=x,bogus")
    monkeypatch.setenv("QUICKSEARCH_SORT_BY_USAGE", "yes")

    cfg = Config.load()
    assert cfg.min_query_lengths["contacts"] == 3
    assert cfg.min_query_lengths["files"] == 2
    assert cfg.sort_by_usage is True


def test_validate_reports_problems(monkeypatch, tmp_path):
    monkeypatch.setenv("QUICKSEARCH_DEBOUNCE_MS", "-5")
    monkeypatch.setenv("QUICKSEARCH_RESULT_LIMITS", "apps=0")
    monkeypatch.setenv("QUICKSEARCH_CATALOG", str(tmp_path / "missing.yaml"))

    errors = Config.load().validate()
    assert len(errors) == 3
    assert any("DEBOUNCE" in e for e in errors)
    assert any("missing.yaml" in e for e in errors)


def test_validate_rejects_recent_queries_over_stored_maximum(monkeypatch):
    monkeypatch.setenv("QUICKSEARCH_RECENT_QUERIES", "11")
    for name in (
        "QUICKSEARCH_DEBOUNCE_MS",
        "QUICKSEARCH_MIN_QUERY_LENGTHS",
        "QUICKSEARCH_RESULT_LIMITS",
        "QUICKSEARCH_CATALOG",
    ):
        monkeypatch.delenv(name, raising=False)

    errors = Config.load().validate()
    assert len(errors) == 1
    assert "QUICKSEARCH_RECENT_QUERIES" in errors[0]
