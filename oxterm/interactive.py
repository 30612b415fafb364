from __future__ import annotations

from typing import Callable, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from oxterm.dates import day_name, format_date, to_iso_date, today
from oxterm.model import SearchFailure, WeekRangeResult
from oxterm.search import SearchEngine, summarize, week_title
from oxterm.suggestions import generate_suggestions
from oxterm.termdata import TermService

console = Console()

HELP = (
    "Type a query, e.g. 'Week 5 Michaelmas 2026', 'Tuesday Week 2 Trinity 2025' or '25 March 2027'.\n"
    "  ?text   suggestions for partial input\n"
    "  :today  where today falls\n"
    "  :years  loaded academic years\n"
    "  :help   this message\n"
    "  blank   exit"
)


def _println(msg: str = "") -> None:
    console.print(msg, markup=False, highlight=False)


def _prompt(msg: str) -> str:
    return console.input(msg)


def _show_result(engine: SearchEngine, query: str) -> None:
    result = engine.search(query)

    if isinstance(result, SearchFailure):
        _println(summarize(result))
        return

    if isinstance(result, WeekRangeResult):
        table = Table(title=result.display_text, caption=result.detail_text, box=box.SIMPLE)
        table.add_column("Day")
        table.add_column("Date")
        for d in result.dates:
            table.add_row(day_name(d), to_iso_date(d))
        console.print(table)
        return

    _println(summarize(result))


def _show_suggestions(service: TermService, text: str) -> None:
    suggestions = generate_suggestions(text, current_year=service.get_current_academic_year())
    if not suggestions:
        _println("No suggestions.")
        return

    table = Table(title="Suggestions", box=box.SIMPLE)
    table.add_column("#", justify="right")
    table.add_column("Query")
    table.add_column("Description")
    for i, s in enumerate(suggestions, start=1):
        table.add_row(str(i), s.text, s.description)
    console.print(table)


def _show_today(service: TermService) -> None:
    d = today()
    found = service.find_term_week(d)
    _println(format_date(d, "full"))
    _println(week_title(found.term, found.week, found.year) if found else "Outside term time")


def _show_years(service: TermService) -> None:
    years = service.list_years()
    _println(", ".join(years) if years else "No academic years loaded.")


def run_interactive(
    service: TermService,
    prompt_fn: Optional[Callable[[str], str]] = None,
) -> None:
    """
    Read-eval-print loop over the search engine. Ends on blank input or EOF.
    """
    ask = prompt_fn or _prompt
    engine = SearchEngine(service)

    _println("=== Oxford term dates (interactive) ===")
    _println(f"Loaded years: {', '.join(service.list_years())}")
    _println("Type :help for examples.")

    while True:
        try:
            line = ask("\nQuery: ").strip()
        except EOFError:
            line = ""

        if not line:
            _println("Bye.")
            return

        if line.startswith("?"):
            _show_suggestions(service, line[1:])
        elif line == ":today":
            _show_today(service)
        elif line == ":years":
            _show_years(service)
        elif line == ":help":
            _println(HELP)
        else:
            _show_result(engine, line)
