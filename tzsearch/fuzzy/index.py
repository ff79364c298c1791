from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..schemas import TimezoneRecord
from .matcher import field_score, weighted_score
from .normalize import normalize_text

logger = logging.getLogger(__name__)


class IndexedField(str, Enum):
    ABBREVIATIONS = "abbreviations"
    CITY = "city"
    IANA = "iana"
    COUNTRY_NAME = "countryName"
    COUNTRY_CODE = "countryCode"


# IndexedField -> TimezoneRecord attribute
FIELD_ATTRS: Dict[IndexedField, str] = {
    IndexedField.ABBREVIATIONS: "abbreviations",
    IndexedField.CITY: "city",
    IndexedField.IANA: "iana",
    IndexedField.COUNTRY_NAME: "country_name",
    IndexedField.COUNTRY_CODE: "country_code",
}

DEFAULT_WEIGHTS: Dict[IndexedField, float] = {
    IndexedField.ABBREVIATIONS: 1.0,
    IndexedField.CITY: 0.8,
    IndexedField.IANA: 0.6,
    IndexedField.COUNTRY_NAME: 0.4,
    IndexedField.COUNTRY_CODE: 0.3,
}

DEFAULT_THRESHOLD = 0.4
DEFAULT_DISTANCE = 100


class IndexConfig(BaseModel):
    weights: Dict[IndexedField, float] = Field(default_factory=lambda: dict(DEFAULT_WEIGHTS))
    threshold: float = Field(default=DEFAULT_THRESHOLD, ge=0.0, le=1.0, description="0 exact .. 1 anything")
    distance: int = Field(default=DEFAULT_DISTANCE, gt=0, description="Offset at which a match costs a full point")

    model_config = ConfigDict(frozen=True)

    @field_validator("weights")
    @classmethod
    def _validate_weights(cls, v: Dict[IndexedField, float]) -> Dict[IndexedField, float]:
        missing = [f.value for f in IndexedField if f not in v]
        if missing:
            raise ValueError(f"missing weights for: {', '.join(missing)}")
        for f, w in v.items():
            if not 0.0 < w <= 1.0:
                raise ValueError(f"weight for {f.value} must be in (0, 1], got {w}")
        # fixed field order regardless of input order
        return {f: float(v[f]) for f in IndexedField}

    @classmethod
    def from_env(cls) -> "IndexConfig":
        """Defaults with overrides like TZSEARCH_WEIGHT_CITY=0.9, TZSEARCH_THRESHOLD=0.3."""
        weights = dict(DEFAULT_WEIGHTS)
        for f in IndexedField:
            w = _env_number(f"TZSEARCH_WEIGHT_{f.name}", float)
            if w is None:
                continue
            if 0.0 < w <= 1.0:
                weights[f] = w
            else:
                logger.warning("ignoring TZSEARCH_WEIGHT_%s=%s: must be in (0, 1]", f.name, w)

        threshold = _env_number("TZSEARCH_THRESHOLD", float)
        if threshold is not None and not 0.0 <= threshold <= 1.0:
            logger.warning("ignoring TZSEARCH_THRESHOLD=%s: must be in [0, 1]", threshold)
            threshold = None
        distance = _env_number("TZSEARCH_DISTANCE", int)
        if distance is not None and distance <= 0:
            logger.warning("ignoring TZSEARCH_DISTANCE=%s: must be positive", distance)
            distance = None

        return cls(
            weights=weights,
            threshold=DEFAULT_THRESHOLD if threshold is None else threshold,
            distance=DEFAULT_DISTANCE if distance is None else distance,
        )


def _env_number(key: str, kind):
    raw = os.environ.get(key)
    if raw is None or not raw.strip():
        return None
    try:
        return kind(raw)
    except ValueError:
        logger.warning("ignoring %s=%r: not a number", key, raw)
        return None


@dataclass(frozen=True)
class _Entry:
    record: TimezoneRecord
    values: Tuple[Tuple[float, str], ...]  # (weight, normalized value) per indexed field


class FuzzyIndex:
    """Query-only index; a data change needs a new ``build``."""

    def __init__(self, entries: Sequence[_Entry], config: IndexConfig):
        self._entries = tuple(entries)
        self.config = config

    @classmethod
    def build(cls, records: Iterable[TimezoneRecord], config: Optional[IndexConfig] = None) -> "FuzzyIndex":
        config = config or IndexConfig()
        entries: List[_Entry] = []
        for rec in records:
            values = tuple(
                (config.weights[f], normalize_text(getattr(rec, FIELD_ATTRS[f])))
                for f in IndexedField
            )
            entries.append(_Entry(rec, values))
        logger.debug("fuzzy index built", extra={"records": len(entries)})
        return cls(entries, config)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def records(self) -> Tuple[TimezoneRecord, ...]:
        return tuple(e.record for e in self._entries)

    def query(self, text: str) -> List[Tuple[TimezoneRecord, float]]:
        """Return (record, raw score) pairs, best first; ties keep insertion order."""
        q = normalize_text(text)
        if not q:
            return []
        hits: List[Tuple[float, int, TimezoneRecord]] = []
        for pos, entry in enumerate(self._entries):
            try:
                score = self._score_entry(q, entry)
            except (TypeError, ValueError) as e:
                logger.debug("no match for %s: scoring failed: %s", entry.record.iana, e)
                continue
            if score is not None:
                hits.append((score, pos, entry.record))
        hits.sort(key=lambda h: (h[0], h[1]))
        return [(rec, score) for score, _, rec in hits]

    def _score_entry(self, q: str, entry: _Entry) -> Optional[float]:
        best: Optional[float] = None
        for weight, value in entry.values:
            s = field_score(q, value, self.config.distance)
            if s is None or s > self.config.threshold:
                continue
            w = weighted_score(s, weight)
            if best is None or w < best:
                best = w
        return best


__all__ = ["FuzzyIndex", "IndexConfig", "IndexedField", "DEFAULT_WEIGHTS", "FIELD_ATTRS"]
