"""
tzsearch: fuzzy lookup of IANA timezone records

Find timezones by city, country, IANA identifier or abbreviation, with
typo tolerance and a ranking that puts exact abbreviation and name hits
ahead of loose fuzzy matches.

Quick start
-----------
  from tzsearch import search
  search("New Yrok")              # -> [TimezoneRecord(iana='America/New_York', ...), ...]
  search("JST", limit=5)
  search("Europe", {"limit": 1000})

For explicit lifecycle control build a ``TimezoneSearcher`` yourself:

  searcher = TimezoneSearcher(data_path="/srv/tz/timezone-data.json").warm()
  searcher.search("Budapest")
"""

from tzsearch.fuzzy import FuzzyIndex, IndexConfig, IndexedField
from tzsearch.schemas import SearchOptions, TimezoneRecord
from tzsearch.service import TimezoneSearcher, get_default_searcher, reset_default_searcher, search
from tzsearch.store import DataUnavailableError, RecordStore

__all__ = [
    "search",
    "TimezoneSearcher",
    "get_default_searcher",
    "reset_default_searcher",
    "TimezoneRecord",
    "SearchOptions",
    "RecordStore",
    "DataUnavailableError",
    "FuzzyIndex",
    "IndexConfig",
    "IndexedField",
]
__version__ = "1.0.0"
