"""
Query parsing (free text -> structured query).

Three grammars overlap, so they are tried in a fixed order, most specific
first. Each grammar is a pure function returning a parsed query when it
applies, or None when the text is not in its shape:

1. day-term-week   "Tuesday Week 2 Trinity 2025"
2. term-week       "Week 5 Michaelmas 2026", "mt wk 3 2024-25"
3. date            "2027-03-25", "25 March 2027", "March 25, 2027", "25/03/2027"

A grammar may also return InvalidQuery when the text is clearly in its shape
but a value is wrong (week 13, academic year 2024-26). That failure is final:
it is returned as-is, including from inside the day-term-week wrapper.

Input is trimmed, lowercased and whitespace-collapsed first, so queries that
differ only in case or spacing parse identically.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Callable, Optional

from oxterm.model import (
    MAX_WEEK,
    MIN_WEEK,
    TERM_ABBREVIATIONS,
    TERMS,
    DateQuery,
    DayTermWeekQuery,
    InvalidQuery,
    ParsedQuery,
    TermWeekQuery,
    academic_year,
)

logger = logging.getLogger(__name__)

WEEK_RANGE_ERROR = f"Week number must be between {MIN_WEEK} and {MAX_WEEK}"
UNPARSEABLE_ERROR = "Could not parse query"


# ---------------------------------------------------------------------------
# Vocabulary
# ---------------------------------------------------------------------------

TERM_NAMES: dict[str, str] = {}
for _term in TERMS:
    TERM_NAMES[_term] = _term
    for _abbrev in TERM_ABBREVIATIONS[_term]:
        TERM_NAMES[_abbrev] = _term

DAY_NAMES = {
    "sunday": 0,
    "sun": 0,
    "monday": 1,
    "mon": 1,
    "tuesday": 2,
    "tues": 2,
    "tue": 2,
    "wednesday": 3,
    "weds": 3,
    "wed": 3,
    "thursday": 4,
    "thurs": 4,
    "thur": 4,
    "thu": 4,
    "friday": 5,
    "fri": 5,
    "saturday": 6,
    "sat": 6,
}

MONTH_NAMES = {
    "january": 1,
    "jan": 1,
    "february": 2,
    "feb": 2,
    "march": 3,
    "mar": 3,
    "april": 4,
    "apr": 4,
    "may": 5,
    "june": 6,
    "jun": 6,
    "july": 7,
    "jul": 7,
    "august": 8,
    "aug": 8,
    "september": 9,
    "sept": 9,
    "sep": 9,
    "october": 10,
    "oct": 10,
    "november": 11,
    "nov": 11,
    "december": 12,
    "dec": 12,
}


def _words(names: dict[str, Any]) -> str:
    # Longest first so "tuesday" wins over "tue".
    return "|".join(sorted(names, key=len, reverse=True))


DAY_RE = re.compile(rf"\b({_words(DAY_NAMES)})\b")
TERM_RE = re.compile(rf"\b({_words(TERM_NAMES)})\b")
MONTH_RE = re.compile(rf"\b({_words(MONTH_NAMES)})\b")

# "week 5", "wk5", "w 5", "week -1"  /  "5 week", "5th wk"
WEEK_BEFORE_RE = re.compile(r"\b(?:week|wk|w)\s*(-?\d+)\b")
WEEK_AFTER_RE = re.compile(r"\b(\d{1,2})(?:st|nd|rd|th)?\s*(?:week|wk)\b")

# "2025", "2024-25", "2024/25", "2024-2025"
ACADEMIC_YEAR_RE = re.compile(r"\b(\d{4})(?:\s*[-/]\s*(\d{4}|\d{2}))?\b")

ISO_DATE_RE = re.compile(r"\b(\d{4})-(\d{1,2})-(\d{1,2})\b")
UK_DATE_RE = re.compile(r"\b(\d{1,2})/(\d{1,2})/(\d{4})\b")
YEAR_RE = re.compile(r"\b(\d{4})\b")
DAY_OF_MONTH_RE = re.compile(r"\b(\d{1,2})(?:st|nd|rd|th)?\b")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def normalize_query(query: str) -> str:
    return " ".join(query.split()).lower()


def _cut(text: str, match: re.Match) -> str:
    """Remove a matched token so later patterns cannot reuse its digits."""
    start, end = match.span()
    return " ".join((text[:start] + " " + text[end:]).split())


def _iso(year: int, month: int, day: int) -> str:
    return f"{year:04d}-{month:02d}-{day:02d}"


def _resolve_academic_year(match: re.Match, term: str) -> str | InvalidQuery:
    """
    A bare year is anchored by the term: Michaelmas Y is in Y-(Y+1), Hilary
    and Trinity Y are in (Y-1)-Y. An explicit range must be consecutive years.
    """
    start = int(match.group(1))
    suffix = match.group(2)
    if suffix is None:
        return academic_year(start if term == "michaelmas" else start - 1)

    if len(suffix) == 4:
        consecutive = int(suffix) == start + 1
    else:
        consecutive = int(suffix) == (start + 1) % 100
    if not consecutive:
        return InvalidQuery(f"Invalid academic year: {start}-{suffix}")
    return academic_year(start)


# ---------------------------------------------------------------------------
# Grammars
# ---------------------------------------------------------------------------


def parse_term_week(text: str) -> Optional[ParsedQuery]:
    """
    Needs a week token, a term name (or abbreviation) and a year, in any
    order. Returns None if any of the three is missing.
    """
    week_match = WEEK_BEFORE_RE.search(text) or WEEK_AFTER_RE.search(text)
    term_match = TERM_RE.search(text)
    if week_match is None or term_match is None:
        return None

    year_match = ACADEMIC_YEAR_RE.search(_cut(text, week_match))
    if year_match is None:
        return None

    week = int(week_match.group(1))
    if not (MIN_WEEK <= week <= MAX_WEEK):
        return InvalidQuery(WEEK_RANGE_ERROR)

    term = TERM_NAMES[term_match.group(1)]
    year = _resolve_academic_year(year_match, term)
    if isinstance(year, InvalidQuery):
        return year

    return TermWeekQuery(term=term, week=week, year=year)


def parse_day_term_week(text: str) -> Optional[ParsedQuery]:
    """
    A day name anywhere, plus a term-week in what is left once the day name
    is removed. Errors from the term-week grammar are passed through.
    """
    day_match = DAY_RE.search(text)
    if day_match is None:
        return None

    inner = parse_term_week(_cut(text, day_match))
    if inner is None or isinstance(inner, InvalidQuery):
        return inner
    assert isinstance(inner, TermWeekQuery)

    return DayTermWeekQuery(
        day_of_week=DAY_NAMES[day_match.group(1)],
        term=inner.term,
        week=inner.week,
        year=inner.year,
    )


def _parse_iso_date(text: str) -> Optional[ParsedQuery]:
    m = ISO_DATE_RE.search(text)
    if m is None:
        return None
    year, month, day = (int(g) for g in m.groups())
    if not (1 <= month <= 12 and 1 <= day <= 31):
        return None
    return DateQuery(_iso(year, month, day))


def _parse_named_month_date(text: str) -> Optional[ParsedQuery]:
    month_match = MONTH_RE.search(text)
    if month_match is None:
        return None
    rest = _cut(text, month_match)

    year_match = YEAR_RE.search(rest)
    if year_match is None:
        return None
    rest = _cut(rest, year_match)

    day_match = DAY_OF_MONTH_RE.search(rest)
    if day_match is None:
        return None

    day = int(day_match.group(1))
    if not (1 <= day <= 31):
        return None
    return DateQuery(_iso(int(year_match.group(1)), MONTH_NAMES[month_match.group(1)], day))


def _parse_uk_date(text: str) -> Optional[ParsedQuery]:
    m = UK_DATE_RE.search(text)
    if m is None:
        return None
    day, month, year = (int(g) for g in m.groups())
    if not (1 <= month <= 12 and 1 <= day <= 31):
        return None
    return DateQuery(_iso(year, month, day))


def parse_date(text: str) -> Optional[ParsedQuery]:
    """
    ISO first, then "25 March 2027" / "March 25, 2027", then DD/MM/YYYY.

    Days are only checked against 1-31; whether the day exists in that month
    is decided when the date is built.
    """
    for grammar in (_parse_iso_date, _parse_named_month_date, _parse_uk_date):
        result = grammar(text)
        if result is not None:
            return result
    return None


GRAMMARS: tuple[Callable[[str], Optional[ParsedQuery]], ...] = (
    parse_day_term_week,
    parse_term_week,
    parse_date,
)


def parse_query(query: Any) -> ParsedQuery:
    """
    Parse user input into exactly one of InvalidQuery, DateQuery,
    TermWeekQuery or DayTermWeekQuery. Never raises.
    """
    if not isinstance(query, str):
        return InvalidQuery(f"Invalid query: expected text, got {type(query).__name__}")

    text = normalize_query(query)
    if not text:
        return InvalidQuery("Empty query")

    for grammar in GRAMMARS:
        result = grammar(text)
        if result is not None:
            logger.debug("Parsed %r with %s: %r", text, grammar.__name__, result)
            return result

    return InvalidQuery(UNPARSEABLE_ERROR)
