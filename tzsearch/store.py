"""Read-only store of timezone records backed by a JSON artifact.

Usage:
    from tzsearch.store import RecordStore
    store = RecordStore()          # TZSEARCH_DATA_PATH or the packaged file
    records = store.load()         # tuple, loaded once

A missing or corrupt artifact is logged once and degrades to an empty tuple;
the load is not retried for the lifetime of the store.
"""
from __future__ import annotations

import json
import logging
import os
import threading
from typing import Any, Iterable, List, Optional, Tuple

from pydantic import ValidationError

from .schemas import TimezoneRecord

logger = logging.getLogger(__name__)

DEFAULT_DATA_PATH = os.path.join(os.path.dirname(__file__), "data", "timezone-data.json")


class DataUnavailableError(RuntimeError):
    """The data artifact could not be read or is not a JSON array."""


def resolve_data_path(path: Optional[str] = None) -> str:
    if path:
        return path
    return os.getenv("TZSEARCH_DATA_PATH") or DEFAULT_DATA_PATH


def read_raw_records(path: str) -> List[Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except OSError as e:
        raise DataUnavailableError(f"cannot read {path}: {e}") from e
    except ValueError as e:  # JSONDecodeError, bad encoding
        raise DataUnavailableError(f"invalid JSON in {path}: {e}") from e
    if not isinstance(raw, list):
        raise DataUnavailableError(f"expected a JSON array in {path}, got {type(raw).__name__}")
    return raw


def validate_records(items: Iterable[Any]) -> Tuple[Tuple[TimezoneRecord, ...], int]:
    """Validate items and drop duplicates by ``iana``.

    Returns (records, skipped) where skipped counts invalid and duplicate items.
    """
    out: List[TimezoneRecord] = []
    seen = set()
    skipped = 0
    for i, item in enumerate(items):
        if isinstance(item, TimezoneRecord):
            rec = item
        else:
            try:
                rec = TimezoneRecord.model_validate(item)
            except ValidationError as e:
                skipped += 1
                logger.debug("skipping invalid record #%d: %s", i, e.errors(include_url=False))
                continue
        if rec.iana in seen:
            skipped += 1
            logger.debug("skipping duplicate record %s", rec.iana)
            continue
        seen.add(rec.iana)
        out.append(rec)
    return tuple(out), skipped


class RecordStore:
    def __init__(self, path: Optional[str] = None):
        self.path = resolve_data_path(path)
        self._records: Optional[Tuple[TimezoneRecord, ...]] = None
        self._lock = threading.Lock()

    @classmethod
    def from_records(cls, items: Iterable[Any]) -> "RecordStore":
        store = cls(path="<memory>")
        records, skipped = validate_records(items)
        if skipped:
            logger.warning("skipped invalid records", extra={"skipped": skipped, "records": len(records)})
        store._records = records
        return store

    @property
    def loaded(self) -> bool:
        return self._records is not None

    def load(self) -> Tuple[TimezoneRecord, ...]:
        if self._records is not None:
            return self._records
        with self._lock:
            if self._records is None:
                self._records = self._load_once()
        return self._records

    def _load_once(self) -> Tuple[TimezoneRecord, ...]:
        try:
            raw = read_raw_records(self.path)
        except DataUnavailableError as e:
            logger.error("timezone data unavailable; searches will return nothing: %s", e, extra={"path": self.path})
            return ()
        records, skipped = validate_records(raw)
        if skipped:
            logger.warning(
                "skipped invalid records",
                extra={"path": self.path, "skipped": skipped, "records": len(records)},
            )
        logger.info("timezone data loaded", extra={"path": self.path, "records": len(records)})
        return records

    def __len__(self) -> int:
        return len(self.load())


__all__ = ["RecordStore", "DataUnavailableError", "DEFAULT_DATA_PATH", "read_raw_records", "validate_records"]
