"""
Central data model definitions used across the project.

This module defines the canonical structure of term-table records, parsed
queries, search results and suggestions so that:
- the parser, lookup service and search engine share the same types
- results can be rendered by the CLI or serialized to JSON without guesswork
- every record is immutable once created
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, ClassVar, Optional, Union


TERMS = ("michaelmas", "hilary", "trinity")

TERM_ABBREVIATIONS = {
    "michaelmas": ("mich", "mt"),
    "hilary": ("hil", "ht"),
    "trinity": ("trin", "tt"),
}

MIN_WEEK = 0
MAX_WEEK = 12
FULL_TERM_WEEKS = (1, 8)


def academic_year(start_year: int) -> str:
    """
    Build the "YYYY-YY" name of the academic year starting in start_year.

    The suffix is always derived, never supplied: 2024 -> "2024-25",
    1999 -> "1999-00".
    """
    return f"{start_year}-{(start_year + 1) % 100:02d}"


def is_valid_academic_year(year: str) -> bool:
    parts = year.split("-")
    if len(parts) != 2 or len(parts[0]) != 4 or len(parts[1]) != 2:
        return False
    if not (parts[0].isdigit() and parts[1].isdigit()):
        return False
    return academic_year(int(parts[0])) == year


def academic_year_for_date(d: date) -> str:
    """
    Calendar convention used when a date is outside every term:
    July-December belong to the year starting now, January-June to the one
    that started last calendar year.
    """
    if d.month >= 7:
        return academic_year(d.year)
    return academic_year(d.year - 1)


def term_label(term: str) -> str:
    return term[:1].upper() + term[1:] if term else ""


# ---------------------------------------------------------------------------
# Term table
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class WeekEntry:
    """
    One week of one term: Sunday start to Saturday end, both inclusive.
    """

    start: date
    end: date

    def contains(self, d: date) -> bool:
        return self.start <= d <= self.end

    def days(self) -> list[date]:
        out: list[date] = []
        current = self.start
        while current <= self.end:
            out.append(current)
            current += timedelta(days=1)
        return out

    def to_dict(self) -> dict[str, str]:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


@dataclass(frozen=True)
class YearRecord:
    """
    Represents one academic year as stored in terms.json.

    terms maps a term name to its weeks (week number -> WeekEntry). Any term,
    and any week inside a term, may be missing.
    """

    year: str
    terms: dict[str, dict[int, WeekEntry]] = field(default_factory=dict)

    def term(self, name: str) -> Optional[dict[int, WeekEntry]]:
        return self.terms.get(name.lower())


@dataclass(frozen=True)
class TermTable:
    """All loaded academic years, in document order."""

    years: tuple[YearRecord, ...] = ()


@dataclass(frozen=True)
class TermWeek:
    """Result of a reverse lookup: the week a date falls into."""

    year: str
    term: str
    week: int
    entry: WeekEntry


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date


# ---------------------------------------------------------------------------
# Parsed queries
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class InvalidQuery:
    kind: ClassVar[str] = "invalid"

    error: str


@dataclass(frozen=True)
class DateQuery:
    kind: ClassVar[str] = "date"

    iso_date: str


@dataclass(frozen=True)
class TermWeekQuery:
    kind: ClassVar[str] = "term-week"

    term: str
    week: int
    year: str


@dataclass(frozen=True)
class DayTermWeekQuery:
    """day_of_week counts from the week's Sunday: 0=Sunday .. 6=Saturday."""

    kind: ClassVar[str] = "day-term-week"

    day_of_week: int
    term: str
    week: int
    year: str


ParsedQuery = Union[InvalidQuery, DateQuery, TermWeekQuery, DayTermWeekQuery]


# ---------------------------------------------------------------------------
# Search results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class WeekRangeResult:
    kind: ClassVar[str] = "week-range"
    success: ClassVar[bool] = True

    term: str
    week: int
    year: str
    start_date: date
    end_date: date
    dates: tuple[date, ...]
    display_text: str
    detail_text: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": True,
            "type": self.kind,
            "term": self.term,
            "week": self.week,
            "year": self.year,
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "dates": [d.isoformat() for d in self.dates],
            "displayText": self.display_text,
            "detailText": self.detail_text,
        }


@dataclass(frozen=True)
class SingleDateResult:
    kind: ClassVar[str] = "single-date"
    success: ClassVar[bool] = True

    iso_date: str
    display_text: str
    detail_text: str
    term: Optional[str] = None
    week: Optional[int] = None
    year: Optional[str] = None
    day_of_week: Optional[int] = None

    @property
    def dates(self) -> tuple[date, ...]:
        return (date.fromisoformat(self.iso_date),)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "success": True,
            "type": self.kind,
            "date": self.iso_date,
            "displayText": self.display_text,
            "detailText": self.detail_text,
        }
        for key, value in (
            ("term", self.term),
            ("week", self.week),
            ("year", self.year),
            ("dayOfWeek", self.day_of_week),
        ):
            if value is not None:
                out[key] = value
        return out


@dataclass(frozen=True)
class SearchFailure:
    kind: ClassVar[str] = "error"
    success: ClassVar[bool] = False

    error: str
    query: Any = None

    @property
    def dates(self) -> tuple[date, ...]:
        return ()

    def to_dict(self) -> dict[str, Any]:
        query = self.query if isinstance(self.query, (str, type(None))) else repr(self.query)
        return {"success": False, "error": self.error, "query": query}


SearchResult = Union[WeekRangeResult, SingleDateResult, SearchFailure]


# ---------------------------------------------------------------------------
# Suggestions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Suggestion:
    """
    One advisory completion for partial input.

    type is one of: example, term, term-week, week, week-partial,
    day-partial, day-week, date.
    """

    text: str
    type: str
    description: str
