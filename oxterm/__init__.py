"""
oxterm - Oxford term dates: week lookups and natural-language date queries.
"""

from oxterm.query import parse_query
from oxterm.search import SearchEngine, summarize
from oxterm.suggestions import generate_suggestions
from oxterm.termdata import (
    TermDataError,
    TermDataLoadError,
    TermDataNotLoadedError,
    TermService,
)

__all__ = [
    "SearchEngine",
    "TermDataError",
    "TermDataLoadError",
    "TermDataNotLoadedError",
    "TermService",
    "generate_suggestions",
    "parse_query",
    "summarize",
]
