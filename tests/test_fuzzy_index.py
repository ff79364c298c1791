from __future__ import annotations

import pytest
from pydantic import ValidationError

from tzsearch.fuzzy.index import DEFAULT_WEIGHTS, FuzzyIndex, IndexConfig, IndexedField, _Entry
from tzsearch.fuzzy.matcher import EPSILON, field_score, weighted_score
from tzsearch.fuzzy.normalize import normalize_text
from tzsearch.schemas import TimezoneRecord


def rec(iana, city, code="", country="", abbrs=""):
    return TimezoneRecord(
        iana=iana,
        city=city,
        country_code=code,
        country_name=country,
        utc_offset=0,
        utc_offset_str="+00:00",
        abbreviations=abbrs,
    )


# -----------------------------
# normalize
# -----------------------------

def test_normalize_case_accents_underscores():
    assert normalize_text("  São_Paulo ") == "sao paulo"
    assert normalize_text("New   York") == "new york"
    assert normalize_text("America/New_York") == "america/new york"
    assert normalize_text("ZÜRICH") == "zurich"
    assert normalize_text("   ") == ""


# -----------------------------
# matcher
# -----------------------------

def test_field_score_exact_and_positional():
    assert field_score("new york", "new york") == 0.0
    assert field_score("tokyo", "asia/tokyo") == pytest.approx(0.05)
    # later alignment costs more
    assert field_score("tokyo", "asia/tokyo", distance=10) == pytest.approx(0.5)


def test_field_score_typo_within_threshold():
    s = field_score("new yrok", "new york")
    assert 0.0 < s <= 0.4


def test_field_score_empty_and_unrelated():
    assert field_score("tokyo", "") is None
    assert field_score("", "tokyo") is None
    assert field_score("a" * 50, "utc") == 1.0


def test_weighted_score():
    assert weighted_score(0.25, 1.0) == pytest.approx(0.25)
    assert weighted_score(0.25, 0.5) == pytest.approx(0.5)
    assert weighted_score(0.0, 1.0) == EPSILON
    # exact hit on a heavier field beats exact hit on a lighter one
    assert weighted_score(0.0, 1.0) < weighted_score(0.0, 0.3)


# -----------------------------
# config
# -----------------------------

def test_config_defaults():
    cfg = IndexConfig()
    assert cfg.weights == DEFAULT_WEIGHTS
    assert cfg.threshold == 0.4
    assert cfg.distance == 100
    assert list(cfg.weights) == list(IndexedField)


def test_config_accepts_field_names():
    cfg = IndexConfig(
        weights={"countryCode": 0.5, "abbreviations": 1, "city": 0.5, "iana": 0.5, "countryName": 0.5}
    )
    assert cfg.weights[IndexedField.CITY] == 0.5
    assert list(cfg.weights) == list(IndexedField)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"weights": {"city": 1.0}},
        {"weights": dict(DEFAULT_WEIGHTS, city=0.0)},
        {"weights": {**DEFAULT_WEIGHTS, IndexedField.IANA: 1.5}},
        {"weights": {**DEFAULT_WEIGHTS, "timezone": 1.0}},
        {"threshold": 1.5},
        {"threshold": -0.1},
        {"distance": 0},
    ],
)
def test_config_rejects_invalid(kwargs):
    with pytest.raises(ValidationError):
        IndexConfig(**kwargs)


def test_config_from_env(monkeypatch):
    monkeypatch.setenv("TZSEARCH_WEIGHT_CITY", "0.9")
    monkeypatch.setenv("TZSEARCH_WEIGHT_COUNTRY_CODE", "0.2")
    monkeypatch.setenv("TZSEARCH_THRESHOLD", "0.3")
    monkeypatch.setenv("TZSEARCH_DISTANCE", "50")
    cfg = IndexConfig.from_env()
    assert cfg.weights[IndexedField.CITY] == 0.9
    assert cfg.weights[IndexedField.COUNTRY_CODE] == 0.2
    assert cfg.weights[IndexedField.IANA] == DEFAULT_WEIGHTS[IndexedField.IANA]
    assert cfg.threshold == 0.3
    assert cfg.distance == 50


def test_config_from_env_ignores_bad_values(monkeypatch):
    monkeypatch.setenv("TZSEARCH_WEIGHT_IANA", "abc")
    monkeypatch.setenv("TZSEARCH_WEIGHT_CITY", "7")
    monkeypatch.setenv("TZSEARCH_THRESHOLD", "2")
    monkeypatch.setenv("TZSEARCH_DISTANCE", "-1")
    assert IndexConfig.from_env() == IndexConfig()


# -----------------------------
# index
# -----------------------------

def test_index_country_query(sample_store):
    index = FuzzyIndex.build(sample_store.load())
    assert len(index) == len(sample_store.load())
    hits = index.query("Japan")
    assert hits
    assert hits[0][0].iana == "Asia/Tokyo"
    scores = [s for _, s in hits]
    assert scores == sorted(scores)


def test_index_no_match_and_blank(sample_store):
    index = FuzzyIndex.build(sample_store.load())
    assert index.query("zzzzqqqxx") == []
    assert index.query("   ") == []


def test_index_typo_tolerance(sample_store):
    index = FuzzyIndex.build(sample_store.load())
    ianas = [r.iana for r, _ in index.query("New Yrok")]
    assert "America/New_York" in ianas


def test_index_threshold_excludes():
    records = [rec("Asia/Tokyo", "Tokyo", "JP", "Japan", "JST,JDT")]
    loose = FuzzyIndex.build(records, IndexConfig())
    strict = FuzzyIndex.build(records, IndexConfig(threshold=0.0))
    assert [r.iana for r, _ in loose.query("Tokio")] == ["Asia/Tokyo"]
    assert strict.query("Tokio") == []
    assert [r.iana for r, _ in strict.query("Tokyo")] == ["Asia/Tokyo"]


def test_index_weights_order_exact_hits():
    by_abbr = rec("Zone/One", "One", abbrs="ABC")
    by_code = rec("Zone/Two", "Two", code="ABC")
    index = FuzzyIndex.build([by_code, by_abbr])
    assert [r.iana for r, _ in index.query("abc")] == ["Zone/One", "Zone/Two"]


def test_index_ties_keep_insertion_order():
    a = rec("Foo/Alpha", "Alpha")
    b = rec("Bar/Alpha", "Alpha")
    assert [r.iana for r, _ in FuzzyIndex.build([a, b]).query("alpha")] == ["Foo/Alpha", "Bar/Alpha"]
    assert [r.iana for r, _ in FuzzyIndex.build([b, a]).query("alpha")] == ["Bar/Alpha", "Foo/Alpha"]


def test_index_bad_entry_is_no_match():
    good = rec("Asia/Tokyo", "Tokyo")
    broken = _Entry(rec("Broken/Zone", "Tokyo"), ((1.0, 12345),))
    index = FuzzyIndex([broken], IndexConfig())
    assert index.query("tokyo") == []
    index = FuzzyIndex.build([good])
    assert [r.iana for r, _ in index.query("tokyo")] == ["Asia/Tokyo"]
