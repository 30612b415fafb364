"""
Unit tests for reading, writing and downloading terms.json.

Storage contract:
- Missing/invalid file -> TermDataLoadError (never an empty table)
- Saved documents are pretty-printed JSON ending in a newline
- HTTP and JSON failures are reported as TermDataLoadError
"""

import asyncio
import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

import requests

from oxterm.storage import (
    download_terms_json,
    file_fetcher,
    load_terms_json,
    save_terms_json,
    url_fetcher,
)
from oxterm.termdata import TermDataLoadError, TermService

FIXTURE = Path(__file__).resolve().parent / "fixtures" / "terms_sample.json"


def fake_response(payload=None, status=200, bad_json=False) -> mock.Mock:
    resp = mock.Mock()
    resp.status_code = status
    if status >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status} Error")
    if bad_json:
        resp.json.side_effect = ValueError("Expecting value")
    else:
        resp.json.return_value = payload
    return resp


class TestFileStorage(unittest.TestCase):
    def test_load_missing_file_raises(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "missing.json"
            with self.assertRaises(TermDataLoadError) as ctx:
                load_terms_json(p)
            self.assertIn("not found", str(ctx.exception))

    def test_load_invalid_json_raises(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "terms.json"
            p.write_text("{not json", encoding="utf-8")
            with self.assertRaises(TermDataLoadError):
                load_terms_json(p)

    def test_save_and_load_roundtrip(self) -> None:
        data = json.loads(FIXTURE.read_text(encoding="utf-8"))
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "nested" / "terms.json"
            written = save_terms_json(data, p)
            self.assertEqual(written, p)
            self.assertTrue(p.read_text(encoding="utf-8").endswith("}\n"))
            self.assertEqual(load_terms_json(p), data)

    def test_env_override(self) -> None:
        with mock.patch.dict("os.environ", {"OXTERM_DATA": str(FIXTURE)}):
            data = file_fetcher()()
        self.assertEqual(data["terms"][0]["year"], "2024-25")


class TestDownload(unittest.TestCase):
    def test_download(self) -> None:
        payload = {"terms": []}
        with mock.patch("oxterm.storage.requests.get", return_value=fake_response(payload)) as get:
            self.assertEqual(download_terms_json("https://example.org/terms.json", timeout=5), payload)
        get.assert_called_once_with("https://example.org/terms.json", timeout=5)

    def test_http_error(self) -> None:
        with mock.patch("oxterm.storage.requests.get", return_value=fake_response(status=404)):
            with self.assertRaises(TermDataLoadError):
                download_terms_json("https://example.org/terms.json", timeout=5)

    def test_connection_error(self) -> None:
        with mock.patch("oxterm.storage.requests.get", side_effect=requests.ConnectionError("refused")):
            with self.assertRaises(TermDataLoadError):
                download_terms_json("https://example.org/terms.json", timeout=5)

    def test_not_json(self) -> None:
        with mock.patch("oxterm.storage.requests.get", return_value=fake_response(bad_json=True)):
            with self.assertRaises(TermDataLoadError) as ctx:
                download_terms_json("https://example.org/terms.json", timeout=5)
            self.assertIn("not valid JSON", str(ctx.exception))


class TestUrlFetcher(unittest.TestCase):
    def test_service_loads_over_http(self) -> None:
        payload = json.loads(FIXTURE.read_text(encoding="utf-8"))
        with mock.patch("oxterm.storage.requests.get", return_value=fake_response(payload)):
            service = TermService(url_fetcher("https://example.org/terms.json", timeout=5))
            service.load_sync()
        self.assertEqual(service.list_years(), ["2024-25", "2025-26"])

    def test_fetcher_is_awaitable(self) -> None:
        with mock.patch("oxterm.storage.requests.get", return_value=fake_response({"terms": []})):
            data = asyncio.run(url_fetcher("https://example.org/terms.json", timeout=5)())
        self.assertEqual(data, {"terms": []})


if __name__ == "__main__":
    unittest.main()
