from __future__ import annotations

import argparse
import logging
from pathlib import Path

import requests

from oxterm import config


logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Paths & URLs
# ---------------------------------------------------------------------------

RAW_DIR = config.RAW_DIR
RAW_FILENAME = "dates-of-term.html"


# ---------------------------------------------------------------------------
# Core logic
# ---------------------------------------------------------------------------


def fetch_dates_of_term(
    url: str = config.DATES_OF_TERM_URL,
    raw_dir: Path = RAW_DIR,
    refresh: bool = False,
    timeout: float | None = None,
) -> Path:
    """
    Download the University's dates-of-term page and cache it as HTML.

    Returns the cached file path. An existing cache is reused unless
    refresh is set.
    """
    raw_dir.mkdir(parents=True, exist_ok=True)
    out_file = raw_dir / RAW_FILENAME

    if out_file.exists() and not refresh:
        logger.info("SKIP  %s (cached at %s)", url, out_file)
        return out_file

    logger.info("FETCH %s", url)
    resp = requests.get(url, timeout=timeout if timeout is not None else config.http_timeout())
    resp.raise_for_status()

    out_file.write_text(resp.text, encoding="utf-8")
    logger.info("Saved %d bytes to %s", len(resp.text), out_file)
    return out_file


# ---------------------------------------------------------------------------
# CLI entry
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="oxterm.scrape", description="Download the Oxford dates-of-term page (cache HTML)")
    p.add_argument("--url", type=str, default=config.DATES_OF_TERM_URL, help="Dates-of-term page URL")
    p.add_argument("--raw-dir", type=Path, default=RAW_DIR, help="Directory for the cached HTML")
    p.add_argument("--refresh", action="store_true", help="Re-fetch and overwrite the cached HTML")
    return p


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(name)s:%(message)s")
    fetch_dates_of_term(args.url.strip(), raw_dir=args.raw_dir, refresh=args.refresh)


if __name__ == "__main__":
    main()
