"""
Term table loading and lookups.

The table is loaded once from an abstract "fetch" collaborator (a file read
or an HTTP call, see oxterm.storage) and is read-only afterwards. Lifecycle:

    service = TermService(file_fetcher(path))
    await service.load()        # or service.load_sync()
    service.get_week("2024-25", "michaelmas", 1)

Querying before load() is a programming error and raises
TermDataNotLoadedError. Lookups for years/terms/weeks that are not in the
table return None.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import re
from datetime import date
from typing import Any, Awaitable, Callable, Optional, Union

from oxterm.dates import DateLike, coerce_date, day_index, parse_iso_date, today
from oxterm.model import (
    FULL_TERM_WEEKS,
    MAX_WEEK,
    MIN_WEEK,
    TERMS,
    DateRange,
    TermTable,
    TermWeek,
    WeekEntry,
    YearRecord,
    academic_year_for_date,
    is_valid_academic_year,
)

logger = logging.getLogger(__name__)

Fetcher = Callable[[], Union[Any, Awaitable[Any]]]
LoadListener = Callable[[TermTable], None]

_WEEK_KEY_RE = re.compile(r"^week(\d{1,2})$")


class TermDataError(Exception):
    """Base class for term table errors."""


class TermDataNotLoadedError(TermDataError, RuntimeError):
    def __init__(self) -> None:
        super().__init__("Term data not loaded. Call load() first.")


class TermDataLoadError(TermDataError):
    """The backing resource could not be fetched or is malformed."""


# ---------------------------------------------------------------------------
# Document <-> table
# ---------------------------------------------------------------------------


def _parse_week(year: str, term: str, key: str, raw: Any) -> WeekEntry:
    where = f"{year} {term} {key}"
    if not isinstance(raw, dict):
        raise TermDataLoadError(f"{where}: expected an object with start/end")
    try:
        start = parse_iso_date(str(raw["start"]))
        end = parse_iso_date(str(raw["end"]))
    except KeyError as exc:
        raise TermDataLoadError(f"{where}: missing {exc.args[0]!r}") from exc
    except ValueError as exc:
        raise TermDataLoadError(f"{where}: {exc}") from exc
    if start > end:
        raise TermDataLoadError(f"{where}: start {start} is after end {end}")
    if (end - start).days != 6 or day_index(start) != 0:
        logger.warning("%s: %s..%s is not a Sunday-Saturday week", where, start, end)
    return WeekEntry(start=start, end=end)


def _parse_term(year: str, term: str, raw: Any) -> dict[int, WeekEntry]:
    if not isinstance(raw, dict):
        raise TermDataLoadError(f"{year} {term}: expected an object of weeks")
    weeks: dict[int, WeekEntry] = {}
    for key, value in raw.items():
        m = _WEEK_KEY_RE.match(str(key))
        if not m or not (MIN_WEEK <= int(m.group(1)) <= MAX_WEEK):
            raise TermDataLoadError(f"{year} {term}: unexpected week key {key!r}")
        weeks[int(m.group(1))] = _parse_week(year, term, key, value)
    ordered = dict(sorted(weeks.items()))

    # Later weeks must start after earlier ones end.
    previous: Optional[tuple[int, WeekEntry]] = None
    for number, entry in ordered.items():
        if previous is not None and entry.start <= previous[1].end:
            raise TermDataLoadError(
                f"{year} {term}: week{number} starts {entry.start}, "
                f"before week{previous[0]} ends {previous[1].end}"
            )
        previous = (number, entry)
    return ordered


def table_from_json(data: Any) -> TermTable:
    """
    Validate a terms.json document and build the immutable table.

    Raises TermDataLoadError describing the first problem found.
    """
    if not isinstance(data, dict) or not isinstance(data.get("terms"), list):
        raise TermDataLoadError("Term data must be an object with a 'terms' list")

    years: list[YearRecord] = []
    seen: set[str] = set()
    for item in data["terms"]:
        if not isinstance(item, dict):
            raise TermDataLoadError("Each entry in 'terms' must be an object")
        year = str(item.get("year", ""))
        if not is_valid_academic_year(year):
            raise TermDataLoadError(f"Invalid academic year: {year!r}")
        if year in seen:
            raise TermDataLoadError(f"Duplicate academic year: {year}")
        seen.add(year)

        terms: dict[str, dict[int, WeekEntry]] = {}
        for key, value in item.items():
            if key == "year":
                continue
            name = str(key).lower()
            if name not in TERMS:
                logger.warning("%s: ignoring unknown term %r", year, key)
                continue
            terms[name] = _parse_term(year, name, value)
        years.append(YearRecord(year=year, terms=terms))

    return TermTable(years=tuple(years))


def table_to_json(table: TermTable) -> dict[str, Any]:
    out: list[dict[str, Any]] = []
    for record in table.years:
        item: dict[str, Any] = {"year": record.year}
        for term in TERMS:
            weeks = record.terms.get(term)
            if weeks is None:
                continue
            item[term] = {f"week{n}": entry.to_dict() for n, entry in weeks.items()}
        out.append(item)
    return {"terms": out}


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class TermService:
    """
    Owns the term table and answers forward/reverse week lookups.

    load() is memoized: concurrent callers share one fetch, later callers get
    the same TermTable instance. A failed load is raised to every waiting
    caller and leaves the service unloaded, so the next call retries.
    """

    def __init__(self, fetcher: Fetcher) -> None:
        self._fetcher = fetcher
        self._table: Optional[TermTable] = None
        self._pending: Optional[asyncio.Future] = None
        self._listeners: list[LoadListener] = []

    @classmethod
    def from_table(cls, table: TermTable) -> "TermService":
        def _already_loaded() -> Any:
            raise TermDataLoadError("Service was built from an in-memory table")

        service = cls(_already_loaded)
        service._table = table
        return service

    @property
    def loaded(self) -> bool:
        return self._table is not None

    @property
    def table(self) -> TermTable:
        if self._table is None:
            raise TermDataNotLoadedError()
        return self._table

    def add_load_listener(self, callback: LoadListener) -> None:
        """Call callback(table) once the table is loaded (now, if it already is)."""
        if self._table is not None:
            callback(self._table)
            return
        self._listeners.append(callback)

    async def load(self) -> TermTable:
        if self._table is not None:
            return self._table

        if self._pending is None:
            self._pending = asyncio.ensure_future(self._fetch())
        pending = self._pending
        try:
            return await asyncio.shield(pending)
        finally:
            if pending.done() and self._pending is pending:
                self._pending = None

    def load_sync(self) -> TermTable:
        if self._table is not None:
            return self._table
        return asyncio.run(self.load())

    async def _fetch(self) -> TermTable:
        logger.debug("Loading term data")
        try:
            raw = self._fetcher()
            if inspect.isawaitable(raw):
                raw = await raw
        except TermDataLoadError:
            raise
        except Exception as exc:
            raise TermDataLoadError(f"Failed to load term data: {exc}") from exc

        table = table_from_json(raw)
        self._table = table
        logger.info("Loaded term data for %d academic years", len(table.years))

        listeners, self._listeners = self._listeners, []
        for callback in listeners:
            try:
                callback(table)
            except Exception:
                logger.exception("Term data load listener %r failed", callback)
        return table

    # -- forward lookups ---------------------------------------------------

    def get_year(self, year: str) -> Optional[YearRecord]:
        for record in self.table.years:
            if record.year == year:
                return record
        return None

    def get_term(self, year: str, term: str) -> Optional[dict[int, WeekEntry]]:
        record = self.get_year(year)
        if record is None:
            return None
        return record.term(term)

    def get_week(self, year: str, term: str, week: int) -> Optional[WeekEntry]:
        weeks = self.get_term(year, term)
        if weeks is None:
            return None
        if isinstance(week, bool) or not isinstance(week, int) or not (MIN_WEEK <= week <= MAX_WEEK):
            return None
        return weeks.get(week)

    def get_full_term_range(self, year: str, term: str) -> Optional[DateRange]:
        """Start of week 1 to end of week 8."""
        first_week, last_week = FULL_TERM_WEEKS
        first = self.get_week(year, term, first_week)
        last = self.get_week(year, term, last_week)
        if first is None or last is None:
            return None
        return DateRange(start=first.start, end=last.end)

    def list_years(self) -> list[str]:
        return [record.year for record in self.table.years]

    # -- reverse lookups ---------------------------------------------------

    def find_term_week(self, value: DateLike) -> Optional[TermWeek]:
        """
        Return the first week whose inclusive range contains the date.

        Linear scan over years x terms x weeks 0-12; the table is small.
        """
        d = coerce_date(value)
        for record in self.table.years:
            for term in TERMS:
                weeks = record.terms.get(term)
                if not weeks:
                    continue
                for number in range(MIN_WEEK, MAX_WEEK + 1):
                    entry = weeks.get(number)
                    if entry is not None and entry.contains(d):
                        return TermWeek(year=record.year, term=term, week=number, entry=entry)
        return None

    def get_current_academic_year(self, reference: Optional[date] = None) -> str:
        d = reference or today()
        found = self.find_term_week(d)
        if found is not None:
            return found.year
        return academic_year_for_date(d)
