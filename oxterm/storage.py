"""
Term table resource: reading and writing terms.json.

This module provides the "fetch and parse" collaborators handed to
TermService:

    file_fetcher(path)  -> reads a local JSON document
    url_fetcher(url)    -> downloads the document over HTTP

Unlike a cache of user preferences, a missing or corrupted term table is not
silently replaced by an empty one: failures are raised as TermDataLoadError
so the caller knows no table was installed.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Awaitable, Callable

import requests

from oxterm import config
from oxterm.termdata import TermDataLoadError

logger = logging.getLogger(__name__)


def default_terms_path() -> Path:
    """
    Return the term table path: $OXTERM_DATA, else the copy shipped in
    oxterm/data/terms.json.

    Using a function instead of a constant makes testing easier,
    because tests can override the environment.
    """
    return config.terms_path()


def load_terms_json(path: str | Path | None = None) -> Any:
    terms_path = Path(path) if path is not None else default_terms_path()
    logger.debug("Reading term data from %s", terms_path)
    try:
        return json.loads(terms_path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise TermDataLoadError(f"Term data file not found: {terms_path}") from exc
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise TermDataLoadError(f"Could not read term data from {terms_path}: {exc}") from exc


def save_terms_json(data: dict[str, Any], path: str | Path | None = None) -> Path:
    """
    Write a terms.json document, creating parent directories if needed.
    """
    terms_path = Path(path) if path is not None else default_terms_path()
    terms_path.parent.mkdir(parents=True, exist_ok=True)
    terms_path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    logger.info("Wrote term data to %s", terms_path)
    return terms_path


def download_terms_json(url: str, timeout: float | None = None) -> Any:
    logger.info("Fetching term data from %s", url)
    try:
        resp = requests.get(url, timeout=timeout if timeout is not None else config.http_timeout())
        resp.raise_for_status()
        return resp.json()
    except requests.RequestException as exc:
        raise TermDataLoadError(f"Failed to fetch term data from {url}: {exc}") from exc
    except ValueError as exc:
        raise TermDataLoadError(f"Term data at {url} is not valid JSON") from exc


def file_fetcher(path: str | Path | None = None) -> Callable[[], Any]:
    def fetch() -> Any:
        return load_terms_json(path)

    return fetch


def url_fetcher(url: str, timeout: float | None = None) -> Callable[[], Awaitable[Any]]:
    """The blocking download runs in a worker thread so load() stays awaitable."""

    async def fetch() -> Any:
        return await asyncio.to_thread(download_terms_json, url, timeout)

    return fetch
