import pytest
from pydantic import TypeAdapter, ValidationError

from quicksearch.contracts.search_v1 import (
    BrowserTarget,
    Candidate,
    EngineTarget,
    FileType,
    MatchPriority,
    RankedCandidate,
    ResultSet,
    SearchFilters,
    SearchSnapshot,
    SearchTarget,
    SectionId,
    SourceType,
)


def _ranked(name: str, priority: MatchPriority) -> RankedCandidate:
    return RankedCandidate(
        candidate=Candidate(source_type=SourceType.APPS, key=name.lower(), name=name),
        priority=priority,
    )


def test_result_set_rejects_no_match():
    with pytest.raises(ValidationError):
        ResultSet(
            source_type=SourceType.APPS,
            generation=1,
            items=(_ranked("Photos", MatchPriority.NO_MATCH),),
        )


def test_result_set_is_immutable():
    rs = ResultSet(
        source_type=SourceType.APPS,
        generation=1,
        items=(_ranked("Maps", MatchPriority.EXACT_NAME),),
    )
    assert len(rs) == 1
    assert rs.candidates[0].name == "Maps"
    with pytest.raises(ValidationError):
        rs.generation = 2


def test_candidate_requires_key():
    with pytest.raises(ValidationError):
        Candidate(source_type=SourceType.APPS, key="  ", name="Maps")


def test_candidate_identity_is_source_scoped():
    app = Candidate(source_type=SourceType.APPS, key="x", name="X")
    contact = Candidate(source_type=SourceType.CONTACTS, key="x", name="X")
    assert app.identity != contact.identity


def test_search_target_is_discriminated_by_kind():
    adapter = TypeAdapter(SearchTarget)
    assert adapter.validate_python({"kind": "engine", "engine": "google"}) == EngineTarget(
        engine="google"
    )
    browser = adapter.validate_python({"kind": "browser", "package_name": "org.mozilla.firefox"})
    assert isinstance(browser, BrowserTarget)
    with pytest.raises(ValidationError):
        adapter.validate_python({"kind": "rocket"})


def test_section_maps_to_source():
    for section in SectionId:
        assert SectionId.for_source(section.source_type) == section


def test_filters_default_to_every_file_type():
    filters = SearchFilters()
    assert filters.file_types == frozenset(FileType)
    assert filters.show_folders is True
    assert filters.show_hidden is False


def test_snapshot_results_for_missing_source_is_empty():
    snapshot = SearchSnapshot()
    assert snapshot.results_for(SourceType.FILES) == []
    assert snapshot.has_results is False
