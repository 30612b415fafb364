"""
CLI (Command Line Interface).

This module provides quick terminal commands, e.g.:

    oxterm search week 5 michaelmas 2026
    oxterm search "Tuesday Week 2 Trinity 2025"
    oxterm lookup 2025-05-06
    oxterm week 2024-25 hilary 3
    oxterm full-term 2024-25 trinity
    oxterm years
    oxterm current
    oxterm suggest mich
    oxterm update
    oxterm interactive

Note:
- The interactive prompt lives in oxterm/interactive.py
- The term table is read from --data / $OXTERM_DATA (default: bundled copy),
  or downloaded from --url / $OXTERM_URL
"""

from __future__ import annotations

import argparse
import json
import logging
from datetime import date
from pathlib import Path
from typing import Any

import requests
from rich import box
from rich.console import Console
from rich.table import Table

from oxterm import config
from oxterm.dates import day_name, format_date, parse_iso_date, to_iso_date, today
from oxterm.model import TERMS, term_label
from oxterm.search import SearchEngine, summarize, week_title
from oxterm.storage import file_fetcher, url_fetcher
from oxterm.suggestions import generate_suggestions
from oxterm.termdata import TermDataLoadError, TermService

console = Console()


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s:%(name)s:%(message)s")


def _println(msg: str = "") -> None:
    # User text may contain [brackets]; never treat it as rich markup.
    console.print(msg, markup=False, highlight=False)


def build_service(args: argparse.Namespace) -> TermService:
    """
    Pick the term table source: --url, then $OXTERM_URL, then the data file.
    """
    url = args.url or config.terms_url()
    if url:
        return TermService(url_fetcher(url, timeout=config.http_timeout()))
    path = Path(args.data) if args.data else config.terms_path()
    return TermService(file_fetcher(path))


def _parse_date_arg(value: str) -> date | None:
    value = (value or "").strip().lower()
    if value == "today":
        return today()
    try:
        return parse_iso_date(value)
    except ValueError:
        return None


def _check_term(term: str) -> str | None:
    t = (term or "").strip().lower()
    return t if t in TERMS else None


def _week_table(title: str, days: list[date]) -> Table:
    table = Table(title=title, box=box.SIMPLE)
    table.add_column("Day")
    table.add_column("Date")
    for d in days:
        table.add_row(day_name(d), to_iso_date(d))
    return table


def _cmd_search(args: argparse.Namespace, service: TermService) -> int:
    """
    Resolve a free-text query into a date or week range.
    """
    query = " ".join(args.query).strip()
    if not query:
        _println("Please provide a query.")
        return 1

    result = SearchEngine(service).search(query)
    if args.json:
        _println(json.dumps(result.to_dict(), indent=2))
    else:
        _println(summarize(result))
    return 0 if result.success else 1


def _cmd_lookup(args: argparse.Namespace, service: TermService) -> int:
    """
    Which term and week does a date fall in?
    """
    d = _parse_date_arg(args.date)
    if d is None:
        _println(f"Invalid date: {args.date!r} (use YYYY-MM-DD or 'today')")
        return 1

    found = service.find_term_week(d)
    _println(format_date(d, "full"))
    if found is None:
        _println("Outside term time")
    else:
        _println(week_title(found.term, found.week, found.year))
    return 0


def _cmd_week(args: argparse.Namespace, service: TermService) -> int:
    term = _check_term(args.term)
    if term is None:
        _println(f"Unknown term: {args.term!r} (choose from {', '.join(TERMS)})")
        return 1

    entry = service.get_week(args.year, term, args.week)
    if entry is None:
        _println(f"Week {args.week} of {term_label(term)} {args.year} not found")
        return 1

    console.print(_week_table(week_title(term, args.week, args.year), entry.days()))
    return 0


def _cmd_full_term(args: argparse.Namespace, service: TermService) -> int:
    term = _check_term(args.term)
    if term is None:
        _println(f"Unknown term: {args.term!r} (choose from {', '.join(TERMS)})")
        return 1

    span = service.get_full_term_range(args.year, term)
    if span is None:
        _println(f"Full Term dates for {term_label(term)} {args.year} not found")
        return 1

    _println(f"{term_label(term)} Term {args.year} (Full Term, weeks 1-8)")
    _println(f"{format_date(span.start, 'full')} - {format_date(span.end, 'full')}")
    return 0


def _cmd_years(args: argparse.Namespace, service: TermService) -> int:
    years = service.list_years()
    if not years:
        _println("No academic years loaded.")
        return 0

    table = Table(title="Academic years", box=box.SIMPLE)
    table.add_column("Year")
    for term in TERMS:
        table.add_column(f"{term_label(term)} (Full Term)")
    for year in years:
        row: list[str] = [year]
        for term in TERMS:
            span = service.get_full_term_range(year, term)
            row.append(f"{format_date(span.start, 'day-month')} - {format_date(span.end, 'day-month')}" if span else "-")
        table.add_row(*row)
    console.print(table)
    return 0


def _cmd_current(args: argparse.Namespace, service: TermService) -> int:
    ref = today()
    if args.date:
        parsed = _parse_date_arg(args.date)
        if parsed is None:
            _println(f"Invalid date: {args.date!r} (use YYYY-MM-DD or 'today')")
            return 1
        ref = parsed
    _println(service.get_current_academic_year(ref))
    return 0


def _cmd_suggest(args: argparse.Namespace, service: TermService) -> int:
    text = " ".join(args.text)
    suggestions = generate_suggestions(
        text,
        current_year=service.get_current_academic_year(),
        max_suggestions=args.max if args.max is not None else config.max_suggestions(),
    )
    if not suggestions:
        _println("No suggestions.")
        return 0

    for s in suggestions:
        _println(f"{s.text}  ({s.description})")
    return 0


def _cmd_update(args: argparse.Namespace) -> int:
    """
    Re-download the dates-of-term page and rebuild the term table file.
    """
    from oxterm.parse import parse_all
    from oxterm.scrape import fetch_dates_of_term

    out = Path(args.data) if args.data else config.terms_path()
    try:
        raw_file = fetch_dates_of_term(args.source, refresh=args.refresh)
        n = parse_all(raw_file=raw_file, out_file=out)
    except (requests.RequestException, OSError, ValueError, TermDataLoadError) as e:
        _println(f"Update failed: {e}")
        return 1

    _println(f"Update done. {n} academic years written to {out}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="oxterm", description="Oxford term dates")
    parser.add_argument("--data", type=str, default=None, help="Path to terms.json (default: $OXTERM_DATA or bundled)")
    parser.add_argument("--url", type=str, default=None, help="Fetch terms.json from this URL instead")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_search = sub.add_parser("search", help="Resolve a term week, date or day-in-week query")
    p_search.add_argument("query", nargs="*", help="Query text (e.g. Week 5 Michaelmas 2026)")
    p_search.add_argument("--json", action="store_true", help="Print the result as JSON")

    p_lookup = sub.add_parser("lookup", help="Find the term and week of a date")
    p_lookup.add_argument("date", type=str, help="YYYY-MM-DD or 'today'")

    p_week = sub.add_parser("week", help="Show the dates of one term week")
    p_week.add_argument("year", type=str, help="Academic year (e.g. 2024-25)")
    p_week.add_argument("term", type=str, help="michaelmas, hilary or trinity")
    p_week.add_argument("week", type=int, help="Week number (0-12)")

    p_full = sub.add_parser("full-term", help="Show Full Term (weeks 1-8) dates")
    p_full.add_argument("year", type=str, help="Academic year (e.g. 2024-25)")
    p_full.add_argument("term", type=str, help="michaelmas, hilary or trinity")

    sub.add_parser("years", help="List loaded academic years")

    p_current = sub.add_parser("current", help="Show the current academic year")
    p_current.add_argument("--date", type=str, default=None, help="Reference date (default: today)")

    p_suggest = sub.add_parser("suggest", help="Suggest query completions")
    p_suggest.add_argument("text", nargs="*", help="Partial input")
    p_suggest.add_argument("--max", type=int, default=None, help="Maximum number of suggestions")

    p_update = sub.add_parser("update", help="Re-scrape dates of term and rebuild terms.json")
    p_update.add_argument("--source", type=str, default=config.DATES_OF_TERM_URL, help="Dates-of-term page URL")
    p_update.add_argument("--refresh", action="store_true", help="Ignore the cached HTML")

    sub.add_parser("interactive", help="Interactive query prompt")

    return parser


COMMANDS = {
    "search": _cmd_search,
    "lookup": _cmd_lookup,
    "week": _cmd_week,
    "full-term": _cmd_full_term,
    "years": _cmd_years,
    "current": _cmd_current,
    "suggest": _cmd_suggest,
}


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, loads the term table, dispatches to
    command handlers, and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if args.command == "update":
        raise SystemExit(_cmd_update(args))

    service = build_service(args)
    try:
        service.load_sync()
    except TermDataLoadError as e:
        _println(f"Could not load term data: {e}")
        raise SystemExit(1)

    if args.command == "interactive":
        from oxterm.interactive import run_interactive

        run_interactive(service)
        raise SystemExit(0)

    handler: Any = COMMANDS.get(args.command)
    if handler is None:
        raise SystemExit(2)
    raise SystemExit(handler(args, service))
