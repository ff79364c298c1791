#!/usr/bin/env python3
"""Rebuild tzsearch/data/timezone-data.json from the tz database shipped with pytz.

    python scripts/generate_timezone_data.py
    python scripts/generate_timezone_data.py --at 2026-01-15T00:00:00Z --output /tmp/tz.json

Zone names, zone -> country mapping and country names all come from pytz
(zone.tab / iso3166.tab, with aliases resolved through tzdata.zi); offsets
are taken at the reference instant.
"""
from __future__ import annotations

import argparse
import json
import logging
import os
import re
import sys
from datetime import datetime, timezone
from typing import Dict, List, Optional

import pytz

# Make the package importable when run from a checkout
THIS_DIR = os.path.dirname(__file__)
ROOT_DIR = os.path.abspath(os.path.join(THIS_DIR, ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from tzsearch.logging_setup import configure_logging  # type: ignore
from tzsearch.store import DEFAULT_DATA_PATH  # type: ignore

logger = logging.getLogger("generate_timezone_data")

CITY_PREFERENCES: Dict[str, str] = {
    "London": "GB",
    "Tokyo": "JP",
    "Brussels": "BE",
    "Colombo": "LK",
    "Dublin": "IE",
    "Paris": "FR",
    "Berlin": "DE",
    "Rome": "IT",
    "Madrid": "ES",
    "Amsterdam": "NL",
    "Vienna": "AT",
    "Prague": "CZ",
    "Budapest": "HU",
    "Warsaw": "PL",
    "Stockholm": "SE",
    "Oslo": "NO",
    "Copenhagen": "DK",
    "Helsinki": "FI",
    "Athens": "GR",
    "Zurich": "CH",
    "Lisbon": "PT",
}
# Guernsey, Isle of Man, Jersey, Aland
EUROPEAN_TERRITORIES = ("GG", "IM", "JE", "AX")

ABBR_RE = re.compile(r"^[A-Z]+$")
MAX_ABBR_LEN = 6
MAX_ABBRS = 8


def select_primary_country(iana: str, codes: List[str]) -> str:
    if not codes:
        return ""
    if len(codes) == 1:
        return codes[0]
    parts = iana.split("/")
    region = parts[0]
    city = parts[1] if len(parts) > 1 else None

    preferred = CITY_PREFERENCES.get(city) if city else None
    if preferred and preferred in codes:
        return preferred
    if region == "Europe":
        main = [c for c in codes if c not in EUROPEAN_TERRITORIES]
        if main:
            return main[0]
    if region == "America":
        for c in ("US", "CA"):
            if c in codes:
                return c
    return codes[0]


def filter_abbreviations(names: List[str]) -> List[str]:
    out: List[str] = []
    for n in names:
        if not n or n in out or n == "LMT":
            continue
        if n[0] in "+-" or len(n) > MAX_ABBR_LEN or not ABBR_RE.match(n):
            continue
        out.append(n)
    return out[:MAX_ABBRS]


def format_offset(minutes: int) -> str:
    sign = "-" if minutes < 0 else "+"
    hh, mm = divmod(abs(minutes), 60)
    return f"{sign}{hh:02d}:{mm:02d}"


def city_from_iana(iana: str) -> str:
    return iana.split("/")[-1].replace("_", " ")


def zone_abbreviations(tz) -> List[str]:
    """Historical abbreviations of ``tz`` in transition order, filtered.

    pytz has no public listing of a zone's past names, so this reads its
    private tables: ``_transition_info`` on DstTzInfo zones and ``_tzname``
    on StaticTzInfo ones. Re-check after a pytz major upgrade.
    """
    info = getattr(tz, "_transition_info", None)
    if info:
        names = [tzname for _, _, tzname in info]
    else:
        names = [getattr(tz, "_tzname", None) or tz.tzname(None) or ""]
    return filter_abbreviations(names)


def zone_links() -> Dict[str, str]:
    """Alias -> target zone, from the ``L`` lines of pytz's bundled tzdata.zi."""
    links: Dict[str, str] = {}
    try:
        fp = pytz.open_resource("tzdata.zi")
    except (OSError, ValueError) as e:
        logger.warning("tzdata.zi unavailable, aliases get no country: %s", e)
        return links
    with fp:
        for raw in fp:
            parts = raw.decode("utf-8").split()
            if len(parts) == 3 and parts[0] == "L":
                links[parts[2]] = parts[1]
    return links


def zone_countries(links: Optional[Dict[str, str]] = None) -> Dict[str, List[str]]:
    out: Dict[str, List[str]] = {}
    for code in pytz.country_timezones:
        for name in pytz.country_timezones[code]:
            out.setdefault(name, []).append(code.upper())
    # zone.tab only names canonical zones; aliases inherit their target's countries
    if links is None:
        links = zone_links()
    for alias, target in links.items():
        if alias not in out and target in out:
            out[alias] = list(out[target])
    return out


def build_record(iana: str, countries: Dict[str, List[str]], at: datetime) -> dict:
    tz = pytz.timezone(iana)
    offset = at.astimezone(tz).utcoffset()
    minutes = int(offset.total_seconds() // 60) if offset is not None else 0
    code = select_primary_country(iana, countries.get(iana, []))
    return {
        "iana": iana,
        "city": city_from_iana(iana),
        "countryCode": code,
        "countryName": pytz.country_names.get(code, "") if code else "",
        "utcOffset": minutes,
        "utcOffsetStr": format_offset(minutes),
        "abbreviations": ",".join(zone_abbreviations(tz)),
    }


def generate(at: datetime) -> List[dict]:
    countries = zone_countries()
    seen = set()
    records: List[dict] = []
    for iana in pytz.all_timezones:
        if iana in seen:
            continue
        seen.add(iana)
        records.append(build_record(iana, countries, at))
    return records


def _parse_at(value: Optional[str]) -> datetime:
    if not value:
        return datetime.now(timezone.utc)
    dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Generate the timezone search data file from pytz")
    ap.add_argument("--output", default=DEFAULT_DATA_PATH, help="Where to write the JSON array")
    ap.add_argument("--at", default=None, help="Reference instant for offsets (ISO 8601, default now)")
    args = ap.parse_args(argv)

    configure_logging()
    try:
        at = _parse_at(args.at)
    except ValueError as e:
        logger.error("invalid --at value: %s", e)
        return 2

    records = generate(at)
    os.makedirs(os.path.dirname(os.path.abspath(args.output)), exist_ok=True)
    with open(args.output, "w", encoding="utf-8") as f:
        json.dump(records, f, indent=2, ensure_ascii=False)
        f.write("\n")

    with_country = sum(1 for r in records if r["countryName"])
    with_abbrs = sum(1 for r in records if r["abbreviations"])
    logger.info(
        "wrote %d zones (%d with country names, %d with abbreviations) at %s",
        len(records),
        with_country,
        with_abbrs,
        at.isoformat(),
        extra={"path": args.output, "records": len(records)},
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
