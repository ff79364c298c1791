"""Weighted multi-field approximate matching over timezone records.

Modules:
 - normalize: case/diacritic/whitespace folding shared by query and index
 - matcher: per-field similarity scoring on top of rapidfuzz
 - index: IndexConfig (field weights, threshold) and the FuzzyIndex itself
"""

from .index import FuzzyIndex, IndexConfig, IndexedField, DEFAULT_WEIGHTS

__all__ = [
    "FuzzyIndex",
    "IndexConfig",
    "IndexedField",
    "DEFAULT_WEIGHTS",
]
