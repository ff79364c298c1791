"""Structured logging configuration.

Provides JSON log formatting when ENABLE_JSON_LOGS=1 (default), otherwise a
concise human formatter. Fields: timestamp, level, msg, logger, plus the
search/load extras query, limit, results, duration_ms, path, records, skipped.

The library itself only logs through ``logging.getLogger(__name__)``; call
``configure_logging()`` from an entry point (e.g. the data generator).
"""
from __future__ import annotations

import json
import logging
import os
import sys
from typing import Any, Iterator, Tuple

EXTRA_FIELDS = ("query", "limit", "results", "duration_ms", "path", "records", "skipped")


def _extras(record: logging.LogRecord) -> Iterator[Tuple[str, Any]]:
    for attr in EXTRA_FIELDS:
        if hasattr(record, attr):
            yield attr, getattr(record, attr)


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        base = {
            "ts": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "msg": record.getMessage(),
            "logger": record.name,
        }
        base.update(_extras(record))
        if record.exc_info:
            base["exc_type"] = record.exc_info[0].__name__ if record.exc_info[0] else None
        return json.dumps(base, ensure_ascii=False, default=str)


class _PlainFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        head = f"{self.formatTime(record, datefmt='%H:%M:%S')} {record.levelname[0]} {record.name}: {record.getMessage()}"
        tail = " ".join(f"{k}={v}" for k, v in _extras(record))
        return f"{head} {tail}" if tail else head


def configure_logging() -> None:
    if getattr(configure_logging, "_configured", False):  # idempotent
        return
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    json_enabled = os.getenv("ENABLE_JSON_LOGS", "1") == "1"
    root = logging.getLogger()
    root.setLevel(level)
    for h in list(root.handlers):
        root.removeHandler(h)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_JsonFormatter() if json_enabled else _PlainFormatter())
    root.addHandler(handler)
    configure_logging._configured = True  # type: ignore[attr-defined]


__all__ = ["configure_logging"]
