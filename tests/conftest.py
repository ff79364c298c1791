import os
import sys

import pytest

# Ensure `import tzsearch` works when pytest is run from the repo root without an install
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from tzsearch.service import TimezoneSearcher, reset_default_searcher  # noqa: E402
from tzsearch.store import RecordStore  # noqa: E402
from tzsearch.fuzzy.index import IndexConfig  # noqa: E402


def make_record(iana, city=None, code="", country="", offset=0, offset_str="+00:00", abbrs=""):
    return {
        "iana": iana,
        "city": city if city is not None else iana.split("/")[-1].replace("_", " "),
        "countryCode": code,
        "countryName": country,
        "utcOffset": offset,
        "utcOffsetStr": offset_str,
        "abbreviations": abbrs,
    }


SAMPLE_RECORDS = [
    make_record("America/New_York", code="US", country="United States", offset=-300, offset_str="-05:00", abbrs="EST,EDT,EWT,EPT"),
    make_record("America/Chicago", code="US", country="United States", offset=-360, offset_str="-06:00", abbrs="CST,CDT,EST,CWT,CPT"),
    make_record("America/North_Dakota/New_Salem", code="US", country="United States", offset=-360, offset_str="-06:00", abbrs="MST,MDT,CST,CDT"),
    make_record("Asia/Tokyo", code="JP", country="Japan", offset=540, offset_str="+09:00", abbrs="JST,JDT"),
    make_record("Asia/Jakarta", code="ID", country="Indonesia", offset=420, offset_str="+07:00", abbrs="BMT,WIB"),
    make_record("Europe/London", code="GB", country="Britain (UK)", abbrs="GMT,BST,BDST"),
    make_record("Europe/Budapest", code="HU", country="Hungary", offset=60, offset_str="+01:00", abbrs="CET,CEST"),
    make_record("Europe/Paris", code="FR", country="France", offset=60, offset_str="+01:00", abbrs="PMT,WET,WEST,CEST,CET,WEMT"),
    make_record("America/Sao_Paulo", code="BR", country="Brazil", offset=-180, offset_str="-03:00"),
    make_record("Asia/Dubai", code="AE", country="United Arab Emirates", offset=240, offset_str="+04:00"),
    make_record("Etc/UTC", city="UTC", abbrs="UTC"),
]


@pytest.fixture
def sample_records():
    return [dict(r) for r in SAMPLE_RECORDS]


@pytest.fixture
def sample_store(sample_records):
    return RecordStore.from_records(sample_records)


@pytest.fixture
def searcher(sample_store):
    return TimezoneSearcher(store=sample_store, config=IndexConfig())


@pytest.fixture
def bundled_searcher():
    """Searcher over the packaged data file, independent of the environment."""
    return TimezoneSearcher(store=RecordStore(), config=IndexConfig())


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith("TZSEARCH_"):
            monkeypatch.delenv(key, raising=False)
    reset_default_searcher()
    yield
    reset_default_searcher()
