from __future__ import annotations

import sys
from typing import Optional

from rapidfuzz import fuzz

# Floor for exact matches so the field weight still separates them
EPSILON = sys.float_info.epsilon


def field_score(query: str, value: str, distance: int = 100) -> Optional[float]:
    """Score a normalized query against one normalized field value.

    0.0 is an exact (sub)string hit at the start of the value, 1.0 means
    nothing in common. ``None`` when the field is empty.

    A query no longer than the value is aligned against its best matching
    substring, and the alignment start costs ``start / distance`` on top of
    the dissimilarity. A longer query is compared as a whole string.
    """
    if not value or not query:
        return None
    if len(query) <= len(value):
        alignment = fuzz.partial_ratio_alignment(query, value)
        if alignment is None:
            return 1.0
        score = 1.0 - alignment.score / 100.0 + alignment.dest_start / float(distance)
    else:
        score = 1.0 - fuzz.ratio(query, value) / 100.0
    return min(max(score, 0.0), 1.0)


def weighted_score(score: float, weight: float) -> float:
    # weight in (0, 1]: lighter fields push the same score towards 1
    return max(score, EPSILON) ** weight


__all__ = ["field_score", "weighted_score", "EPSILON"]
