"""
Search suggestions for partial input.

Suggestions are advisory: over-suggesting is fine, raising is not. Every
source below may contribute; the combined list is de-duplicated by text
(first occurrence wins) and capped.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Optional

from oxterm.dates import DAY_NAMES, MONTH_NAMES, today as _today
from oxterm.model import MAX_WEEK, MIN_WEEK, TERM_ABBREVIATIONS, TERMS, Suggestion, academic_year_for_date, term_label

MIN_INPUT_LENGTH = 2
DEFAULT_MAX_SUGGESTIONS = 8
SHORT_INPUT_LENGTH = 3

_WEEK_NUMBER_RE = re.compile(r"w(?:ee)?k?\s*(\d+)")
_LEADING_DAY_RE = re.compile(r"^(\d{1,2})\b")

# Monday first reads more naturally in a list than the Sunday-first index.
_DAYS_FOR_SUGGESTIONS = DAY_NAMES[1:] + DAY_NAMES[:1]


def _term_suggestions(text: str, year: str) -> list[Suggestion]:
    out: list[Suggestion] = []
    for term in TERMS:
        name = term_label(term)
        if not (term.startswith(text) or any(a.startswith(text) for a in TERM_ABBREVIATIONS[term])):
            continue
        out.append(Suggestion(f"{name} {year}", "term", f"{name} term of {year}"))
        out.append(Suggestion(f"Week 1 {name} {year}", "term-week", f"First week of {name} term"))
        if len(text) > 2:
            out.append(Suggestion(f"Week 5 {name} {year}", "term-week", f"Fifth week of {name} term"))
    return out


def _week_suggestions(text: str, year: str) -> list[Suggestion]:
    if not text.startswith("w"):
        return []

    m = _WEEK_NUMBER_RE.match(text)
    week = int(m.group(1)) if m else None
    if week is not None and MIN_WEEK <= week <= MAX_WEEK:
        return [
            Suggestion(f"Week {week} {term_label(t)} {year}", "week", f"Week {week} of {term_label(t)} term")
            for t in TERMS
        ]

    out: list[Suggestion] = []
    for n in (0, 1, 4, 5, 8):
        if n == 0:
            description = "Week before full term"
        elif n == 8:
            description = "Last week of full term"
        else:
            description = f"Week {n} of term"
        out.append(Suggestion(f"Week {n}", "week-partial", description))
    return out


def _day_suggestions(text: str, year: str) -> list[Suggestion]:
    out: list[Suggestion] = []
    for day in _DAYS_FOR_SUGGESTIONS:
        if not day.lower().startswith(text):
            continue
        out.append(Suggestion(f"{day} Week 1", "day-partial", f"{day} of Week 1"))
        if len(text) > 2:
            out.append(
                Suggestion(
                    f"{day} Week 5 Michaelmas {year}",
                    "day-week",
                    f"{day} of Week 5, Michaelmas term",
                )
            )
    return out


def _date_suggestions(text: str, on: date) -> list[Suggestion]:
    out: list[Suggestion] = []

    m = _LEADING_DAY_RE.match(text)
    if m and 1 <= int(m.group(1)) <= 31:
        day = int(m.group(1))
        # Current month and the next three.
        for i in range(4):
            month = MONTH_NAMES[(on.month - 1 + i) % 12]
            out.append(Suggestion(f"{day} {month} {on.year}", "date", f"Date in {month}"))

    for month in MONTH_NAMES:
        if month.lower().startswith(text):
            out.append(Suggestion(f"15 {month} {on.year}", "date", f"Mid-{month} date"))
    return out


def _example_suggestions(year: str) -> list[Suggestion]:
    return [
        Suggestion(f"Week 1 Michaelmas {year}", "example", "First week of Michaelmas term"),
        Suggestion(f"Week 5 Hilary {year}", "example", "Fifth week of Hilary term"),
        Suggestion(f"Trinity {year} Week 8", "example", "Last week of Trinity full term"),
        Suggestion(f"Tuesday Week 2 Trinity {year}", "example", "Specific day in a term week"),
        Suggestion(f"25 March {year[:4]}", "example", "Which week is a date in"),
    ]


def generate_suggestions(
    text: Optional[str],
    *,
    current_year: Optional[str] = None,
    max_suggestions: Optional[int] = None,
    min_length: int = MIN_INPUT_LENGTH,
    today: Optional[date] = None,
) -> list[Suggestion]:
    """
    Suggest completions for partially typed input.

    current_year defaults to the academic year of today by calendar
    convention; callers with a loaded TermService should pass
    service.get_current_academic_year().
    """
    if not isinstance(text, str):
        return []
    normalized = " ".join(text.split()).lower()
    if len(normalized) < min_length:
        return []

    on = today or _today()
    year = current_year or academic_year_for_date(on)
    cap = max_suggestions if max_suggestions is not None else DEFAULT_MAX_SUGGESTIONS

    candidates: list[Suggestion] = []
    candidates.extend(_term_suggestions(normalized, year))
    candidates.extend(_week_suggestions(normalized, year))
    candidates.extend(_day_suggestions(normalized, year))
    candidates.extend(_date_suggestions(normalized, on))
    if len(normalized) <= SHORT_INPUT_LENGTH:
        candidates.extend(_example_suggestions(year))

    unique: dict[str, Suggestion] = {}
    for s in candidates:
        unique.setdefault(s.text, s)

    return list(unique.values())[: max(cap, 0)]


def format_suggestions_for_display(suggestions: list[Suggestion]) -> list[str]:
    return [s.text for s in suggestions]
