"""Tiered re-ranking of fuzzy hits.

Raw fuzzy similarity under-ranks short, specific tokens such as "EST"
against longer names that happen to share characters, so a fixed ladder of
domain rules decides the composite score first and the raw score only
breaks ties inside a tier. Lower composite score ranks first.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from .schemas import TimezoneRecord

EXACT_ABBREVIATION = 0.01
PARTIAL_ABBREVIATION = 0.1
EXACT_CITY = 0.5
EXACT_COUNTRY = 0.6
EXACT_IANA = 0.7
FALLBACK = 1.0
# share of the raw score kept inside the exact/partial tiers
TIER_RAW_FACTOR = 0.1
DEFAULT_RAW_SCORE = 1.0


@dataclass(frozen=True)
class ScoredCandidate:
    record: TimezoneRecord
    raw_score: float
    composite: float
    rule: str


def composite_score(query: str, record: TimezoneRecord, raw_score: Optional[float] = None) -> Tuple[float, str]:
    """Return (composite score, rule name) for the first rule that fires."""
    raw = DEFAULT_RAW_SCORE if raw_score is None else raw_score
    query_lower = query.lower()
    query_upper = query.upper()
    tokens = record.abbreviation_tokens()

    if query_upper in tokens:
        return EXACT_ABBREVIATION, "exact_abbreviation"

    for abbr in tokens:
        abbr_lower = abbr.lower()
        if query_lower in abbr_lower or abbr_lower in query_lower:
            return PARTIAL_ABBREVIATION + raw * TIER_RAW_FACTOR, "partial_abbreviation"

    if record.city.lower() == query_lower:
        return EXACT_CITY + raw * TIER_RAW_FACTOR, "exact_city"
    if record.country_name.lower() == query_lower:
        return EXACT_COUNTRY + raw * TIER_RAW_FACTOR, "exact_country"
    if record.iana.lower() == query_lower:
        return EXACT_IANA + raw * TIER_RAW_FACTOR, "exact_iana"

    return FALLBACK + raw, "fuzzy"


def rank_candidates(
    query: str, candidates: Iterable[Tuple[TimezoneRecord, Optional[float]]]
) -> List[ScoredCandidate]:
    scored: List[ScoredCandidate] = []
    for record, raw in candidates:
        composite, rule = composite_score(query, record, raw)
        scored.append(
            ScoredCandidate(
                record=record,
                raw_score=DEFAULT_RAW_SCORE if raw is None else raw,
                composite=composite,
                rule=rule,
            )
        )
    # list.sort is stable: equal composites keep the index order
    scored.sort(key=lambda c: c.composite)
    return scored


def rank(
    query: str, candidates: Iterable[Tuple[TimezoneRecord, Optional[float]]], limit: int
) -> List[TimezoneRecord]:
    if limit <= 0:
        return []
    # sort everything first, then cut
    return [c.record for c in rank_candidates(query, candidates)[:limit]]


__all__ = ["rank", "rank_candidates", "composite_score", "ScoredCandidate"]
