"""
Search engine: parsed query + term lookups -> displayable result.

search() never raises for bad user input; it returns SearchFailure with a
message instead. Using the engine before its TermService is loaded is a
programming error and raises TermDataNotLoadedError.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from oxterm.dates import DAY_NAMES, add_days, format_date, parse_iso_date, to_iso_date
from oxterm.model import (
    DateQuery,
    DayTermWeekQuery,
    InvalidQuery,
    SearchFailure,
    SearchResult,
    SingleDateResult,
    TermWeekQuery,
    WeekEntry,
    WeekRangeResult,
    term_label,
)
from oxterm.query import parse_query
from oxterm.termdata import TermService

logger = logging.getLogger(__name__)


def week_title(term: str, week: int, year: str) -> str:
    return f"{term_label(term)} Term {year}, Week {week}"


def week_not_found(term: str, week: int, year: str) -> str:
    return f"Week {week} of {term_label(term)} {year} not found"


class SearchEngine:
    def __init__(self, service: TermService) -> None:
        self.service = service

    def search(self, query: Any) -> SearchResult:
        parsed = parse_query(query)

        if isinstance(parsed, InvalidQuery):
            return SearchFailure(error=parsed.error or "Invalid query", query=query)
        if isinstance(parsed, TermWeekQuery):
            return self._search_term_week(parsed, query)
        if isinstance(parsed, DateQuery):
            return self._search_date(parsed, query)
        if isinstance(parsed, DayTermWeekQuery):
            return self._search_day_term_week(parsed, query)

        return SearchFailure(error="Unknown query type", query=query)

    def search_multiple(self, queries: Iterable[Any]) -> list[SearchResult]:
        return [self.search(q) for q in queries]

    def _lookup_week(self, term: str, week: int, year: str) -> WeekEntry | None:
        entry = self.service.get_week(year, term, week)
        if entry is None:
            logger.debug("No week %s of %s %s in table", week, term, year)
        return entry

    def _search_term_week(self, parsed: TermWeekQuery, query: Any) -> SearchResult:
        entry = self._lookup_week(parsed.term, parsed.week, parsed.year)
        if entry is None:
            return SearchFailure(error=week_not_found(parsed.term, parsed.week, parsed.year), query=query)

        return WeekRangeResult(
            term=parsed.term,
            week=parsed.week,
            year=parsed.year,
            start_date=entry.start,
            end_date=entry.end,
            dates=tuple(entry.days()),
            display_text=week_title(parsed.term, parsed.week, parsed.year),
            detail_text=f"{format_date(entry.start, 'full')} - {format_date(entry.end, 'full')}",
        )

    def _search_date(self, parsed: DateQuery, query: Any) -> SearchResult:
        try:
            d = parse_iso_date(parsed.iso_date)
        except ValueError:
            return SearchFailure(error=f"Invalid date: {parsed.iso_date}", query=query)

        found = self.service.find_term_week(d)
        if found is None:
            return SingleDateResult(
                iso_date=to_iso_date(d),
                display_text=format_date(d, "full"),
                detail_text="Outside term time",
            )

        return SingleDateResult(
            iso_date=to_iso_date(d),
            display_text=format_date(d, "full"),
            detail_text=week_title(found.term, found.week, found.year),
            term=found.term,
            week=found.week,
            year=found.year,
        )

    def _search_day_term_week(self, parsed: DayTermWeekQuery, query: Any) -> SearchResult:
        entry = self._lookup_week(parsed.term, parsed.week, parsed.year)
        if entry is None:
            return SearchFailure(error=week_not_found(parsed.term, parsed.week, parsed.year), query=query)

        # Weeks start on Sunday, so the day index is the offset.
        target = add_days(entry.start, parsed.day_of_week)
        if target > entry.end:
            return SearchFailure(error="Date falls outside the specified week", query=query)

        return SingleDateResult(
            iso_date=to_iso_date(target),
            display_text=format_date(target, "full"),
            detail_text=(
                f"{DAY_NAMES[parsed.day_of_week]}, Week {parsed.week} of "
                f"{term_label(parsed.term)} Term {parsed.year}"
            ),
            term=parsed.term,
            week=parsed.week,
            year=parsed.year,
            day_of_week=parsed.day_of_week,
        )


def summarize(result: SearchResult) -> str:
    if isinstance(result, SearchFailure):
        return f"Error: {result.error}"
    return f"{result.display_text}\n{result.detail_text}"
