"""
Parsing (dates-of-term HTML -> terms.json).

- Reads the cached dates-of-term page from data/raw/
- Extracts the Full Term start date (a Sunday) of every term listed
- Expands each term into weeks 0-12 and writes data/terms.json

Week rules:
- week 1 starts on the Full Term Sunday
- week n starts 7 * (n - 1) days later (week 0 is the week before)
- every week ends on the Saturday six days after it starts
"""

from __future__ import annotations

import argparse
import logging
import re
from datetime import date, timedelta
from pathlib import Path
from typing import Any, Dict, Tuple

from bs4 import BeautifulSoup

from oxterm import config
from oxterm.dates import MONTH_NAMES, day_index
from oxterm.model import MAX_WEEK, MIN_WEEK, TERMS, academic_year
from oxterm.storage import save_terms_json
from oxterm.termdata import table_from_json


logger = logging.getLogger(__name__)

# (term, calendar year) -> Full Term start
FullTermStarts = Dict[Tuple[str, int], date]

_MONTHS = {name.lower(): i for i, name in enumerate(MONTH_NAMES, start=1)}

# "Michaelmas 2024   Sunday 13 October   Saturday 7 December"
TERM_START_RE = re.compile(
    r"\b(michaelmas|hilary|trinity)(?:\s+term)?\s+(\d{4})\b"
    r"\W+(?:[a-z]+day\s+)?(\d{1,2})(?:st|nd|rd|th)?\s+(" + "|".join(_MONTHS) + r")\b"
    r"(?:\s+(\d{4}))?",
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _normalize_text(text: str) -> str:
    return " ".join(text.replace("\xa0", " ").split()).lower()


def _starts_from_text(text: str) -> FullTermStarts:
    starts: FullTermStarts = {}
    for m in TERM_START_RE.finditer(_normalize_text(text)):
        term = m.group(1)
        term_year = int(m.group(2))
        day = int(m.group(3))
        month = _MONTHS[m.group(4)]
        year = int(m.group(5)) if m.group(5) else term_year
        try:
            start = date(year, month, day)
        except ValueError:
            logger.warning("Skipping impossible date for %s %s: %s", term, term_year, m.group(0))
            continue
        if day_index(start) != 0:
            logger.warning("%s %s Full Term starts on %s, which is not a Sunday", term, term_year, start)
        starts.setdefault((term, term_year), start)
    return starts


# ---------------------------------------------------------------------------
# Dates-of-term parsing (CORE LOGIC)
# ---------------------------------------------------------------------------


def parse_full_term_starts(html: str) -> FullTermStarts:
    """
    Extract Full Term start dates from the dates-of-term page.

    Table rows are read first (one term per row). Pages without tables are
    scanned as plain text.
    """
    soup = BeautifulSoup(html, "html.parser")

    starts: FullTermStarts = {}
    for row in soup.select("tr"):
        cells = [c.get_text(" ", strip=True) for c in row.find_all(["td", "th"])]
        if not cells:
            continue
        for key, value in _starts_from_text(" ".join(cells)).items():
            starts.setdefault(key, value)

    if not starts:
        starts = _starts_from_text(soup.get_text(" ", strip=True))

    logger.info("Found %d Full Term start dates", len(starts))
    return starts


def build_term_table(starts: FullTermStarts) -> dict[str, Any]:
    """
    Expand Full Term starts into the terms.json document.

    Michaelmas Y belongs to academic year Y-(Y+1); Hilary and Trinity Y
    belong to (Y-1)-Y.
    """
    by_year: dict[str, dict[str, Any]] = {}
    for (term, term_year), first in starts.items():
        start_year = term_year if term == "michaelmas" else term_year - 1
        year = academic_year(start_year)
        weeks: dict[str, dict[str, str]] = {}
        for n in range(MIN_WEEK, MAX_WEEK + 1):
            week_start = first + timedelta(days=7 * (n - 1))
            weeks[f"week{n}"] = {
                "start": week_start.isoformat(),
                "end": (week_start + timedelta(days=6)).isoformat(),
            }
        by_year.setdefault(year, {"year": year})[term] = weeks

    out: list[dict[str, Any]] = []
    for year in sorted(by_year):
        record = by_year[year]
        # Keep term keys in calendar order regardless of page order.
        out.append({"year": year, **{t: record[t] for t in TERMS if t in record}})
    return {"terms": out}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_all(
    raw_file: Path = config.RAW_DIR / "dates-of-term.html",
    out_file: Path = config.BUNDLED_TERMS_PATH,
) -> int:
    """
    Parse the cached page and write terms.json. Returns the number of
    academic years written.

    The document is validated with the same rules used when loading, so a
    bad page never replaces a good table.
    """
    html = raw_file.resolve().read_text(encoding="utf-8")
    data = build_term_table(parse_full_term_starts(html))
    if not data["terms"]:
        raise ValueError(f"No term dates found in {raw_file}")

    table_from_json(data)
    save_terms_json(data, out_file)
    return len(data["terms"])


# ---------------------------------------------------------------------------
# CLI connection
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="oxterm.parse",
        description="Parse the cached dates-of-term HTML into terms.json",
    )
    p.add_argument("--raw-file", type=Path, default=config.RAW_DIR / "dates-of-term.html")
    p.add_argument("--out", type=Path, default=config.BUNDLED_TERMS_PATH)
    return p


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(name)s:%(message)s")

    n = parse_all(raw_file=args.raw_file, out_file=args.out)
    print(f"Parsing finished. {n} academic years written to {args.out.resolve()}")


if __name__ == "__main__":
    main()
