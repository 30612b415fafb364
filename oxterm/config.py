"""
Runtime configuration.

Paths are derived from the package location so nothing is hard-coded to a
machine. Every setting can be overridden through an environment variable;
command line options take precedence over both.
"""

from __future__ import annotations

import os
from pathlib import Path


PACKAGE_DIR = Path(__file__).resolve().parent
DATA_DIR = PACKAGE_DIR / "data"
RAW_DIR = DATA_DIR / "raw"
BUNDLED_TERMS_PATH = DATA_DIR / "terms.json"

DATES_OF_TERM_URL = "https://www.ox.ac.uk/about/facts-and-figures/dates-of-term"


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def terms_path() -> Path:
    """Term table file: $OXTERM_DATA or the bundled copy."""
    raw = os.environ.get("OXTERM_DATA", "").strip()
    return Path(raw) if raw else BUNDLED_TERMS_PATH


def terms_url() -> str | None:
    """When set, the term table is fetched over HTTP instead of read from disk."""
    raw = os.environ.get("OXTERM_URL", "").strip()
    return raw or None


def http_timeout() -> int:
    return _env_int("OXTERM_TIMEOUT", 30)


def max_suggestions() -> int:
    return _env_int("OXTERM_MAX_SUGGESTIONS", 8)
