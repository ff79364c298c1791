from __future__ import annotations

import logging
import threading
from time import perf_counter
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError

from .fuzzy.index import FuzzyIndex, IndexConfig
from .ranker import rank, rank_candidates
from .schemas import SearchOptions, TimezoneRecord
from .store import RecordStore

logger = logging.getLogger(__name__)

OptionsLike = Union[SearchOptions, Mapping[str, Any], None]


def _coerce_options(options: OptionsLike, overrides: Dict[str, Any]) -> Optional[SearchOptions]:
    if isinstance(options, SearchOptions) and not overrides:
        return options
    data: Dict[str, Any] = {}
    if isinstance(options, SearchOptions):
        data.update(options.model_dump())
    elif options is not None:
        if not isinstance(options, Mapping):
            logger.debug("ignoring search: options must be a mapping, got %s", type(options).__name__)
            return None
        data.update(options)
    data.update(overrides)
    try:
        return SearchOptions(**data)
    except (ValidationError, TypeError) as e:
        logger.debug("ignoring search: invalid options: %s", e)
        return None


def _usable_query(query: Any) -> bool:
    return isinstance(query, str) and bool(query.strip())


class TimezoneSearcher:
    """Owns one record store and the fuzzy index built from it.

    The index is built on first use (or by ``warm()``) under a lock, so
    concurrent first searches share a single build.
    """

    def __init__(
        self,
        store: Optional[RecordStore] = None,
        config: Optional[IndexConfig] = None,
        data_path: Optional[str] = None,
    ):
        self.store = store if store is not None else RecordStore(data_path)
        self.config = config or IndexConfig.from_env()
        self._index: Optional[FuzzyIndex] = None
        self._lock = threading.Lock()

    @property
    def index(self) -> FuzzyIndex:
        if self._index is None:
            with self._lock:
                if self._index is None:
                    self._index = FuzzyIndex.build(self.store.load(), self.config)
        return self._index

    def warm(self) -> "TimezoneSearcher":
        _ = self.index
        return self

    def search(self, query: Any, options: OptionsLike = None, **option_overrides: Any) -> List[TimezoneRecord]:
        """Return records matching ``query``, best first.

        Never raises for bad input: a non-string or blank query, invalid
        options or ``limit <= 0`` all give an empty list.
        """
        opts = _coerce_options(options, option_overrides)
        if opts is None or opts.limit <= 0 or not _usable_query(query):
            return []

        start = perf_counter()
        hits = self.index.query(query)
        if opts.ranked:
            results = rank(query, hits, opts.limit)
        else:
            results = [rec for rec, _ in hits[: opts.limit]]
        logger.debug(
            "search",
            extra={
                "query": query,
                "limit": opts.limit,
                "results": len(results),
                "duration_ms": round((perf_counter() - start) * 1000.0, 2),
            },
        )
        return results

    def explain(self, query: Any, options: OptionsLike = None, **option_overrides: Any) -> List[Dict[str, Any]]:
        """Same candidates and order as ``search`` with the scores behind them."""
        opts = _coerce_options(options, option_overrides)
        if opts is None or opts.limit <= 0 or not _usable_query(query):
            return []
        hits = self.index.query(query)
        if not opts.ranked:
            return [
                {"iana": rec.iana, "rawScore": raw, "compositeScore": None, "rule": "fuzzy"}
                for rec, raw in hits[: opts.limit]
            ]
        return [
            {
                "iana": c.record.iana,
                "rawScore": c.raw_score,
                "compositeScore": c.composite,
                "rule": c.rule,
            }
            for c in rank_candidates(query, hits)[: opts.limit]
        ]


_default: Optional[TimezoneSearcher] = None
_default_lock = threading.Lock()


def get_default_searcher() -> TimezoneSearcher:
    global _default
    if _default is None:
        with _default_lock:
            if _default is None:
                _default = TimezoneSearcher()
    return _default


def reset_default_searcher() -> None:
    global _default
    with _default_lock:
        _default = None


def search(query: Any, options: OptionsLike = None, **option_overrides: Any) -> List[TimezoneRecord]:
    return get_default_searcher().search(query, options, **option_overrides)


__all__ = ["TimezoneSearcher", "search", "get_default_searcher", "reset_default_searcher"]
