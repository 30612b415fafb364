import json
import tempfile
import unittest
from datetime import date
from pathlib import Path

from oxterm.parse import build_term_table, parse_all, parse_full_term_starts

PAGE = """
<html><body>
<h2>Dates of term</h2>
<table>
  <tr><th>Term</th><th>Start of Full Term</th><th>End of Full Term</th></tr>
  <tr><td>Michaelmas 2024</td><td>Sunday 13 October</td><td>Saturday 7 December</td></tr>
  <tr><td>Hilary 2025</td><td>Sunday&nbsp;19 January</td><td>Saturday 15 March</td></tr>
  <tr><td>Trinity 2025</td><td>Sunday 27 April</td><td>Saturday 21 June</td></tr>
  <tr><td>Michaelmas 2025</td><td>Sunday 12th October</td><td>Saturday 6 December</td></tr>
</table>
</body></html>
"""

PLAIN_PAGE = """
<html><body>
<p>Michaelmas Term 2026: Sunday 11 October 2026 to Saturday 5 December 2026.</p>
<p>Hilary Term 2027: Sunday 17 January 2027 to Saturday 13 March 2027.</p>
</body></html>
"""


class TestFullTermStarts(unittest.TestCase):
    def test_table_rows(self) -> None:
        starts = parse_full_term_starts(PAGE)
        self.assertEqual(
            starts,
            {
                ("michaelmas", 2024): date(2024, 10, 13),
                ("hilary", 2025): date(2025, 1, 19),
                ("trinity", 2025): date(2025, 4, 27),
                ("michaelmas", 2025): date(2025, 10, 12),
            },
        )

    def test_plain_text_fallback(self) -> None:
        starts = parse_full_term_starts(PLAIN_PAGE)
        self.assertEqual(starts[("michaelmas", 2026)], date(2026, 10, 11))
        self.assertEqual(starts[("hilary", 2027)], date(2027, 1, 17))

    def test_page_without_terms(self) -> None:
        self.assertEqual(parse_full_term_starts("<html><body><p>Nothing here</p></body></html>"), {})

    def test_start_not_on_sunday_is_logged(self) -> None:
        html = "<p>Trinity 2025 Monday 28 April</p>"
        with self.assertLogs("oxterm.parse", level="WARNING"):
            starts = parse_full_term_starts(html)
        self.assertEqual(starts[("trinity", 2025)], date(2025, 4, 28))


class TestBuildTermTable(unittest.TestCase):
    def test_weeks_and_academic_years(self) -> None:
        data = build_term_table(parse_full_term_starts(PAGE))
        self.assertEqual([y["year"] for y in data["terms"]], ["2024-25", "2025-26"])

        first = data["terms"][0]
        self.assertEqual(list(first)[1:], ["michaelmas", "hilary", "trinity"])
        mich = first["michaelmas"]
        self.assertEqual(len(mich), 13)
        self.assertEqual(mich["week0"], {"start": "2024-10-06", "end": "2024-10-12"})
        self.assertEqual(mich["week1"], {"start": "2024-10-13", "end": "2024-10-19"})
        self.assertEqual(mich["week8"], {"start": "2024-12-01", "end": "2024-12-07"})
        self.assertEqual(first["trinity"]["week12"]["end"], "2025-07-19")

    def test_empty(self) -> None:
        self.assertEqual(build_term_table({}), {"terms": []})


class TestParseAll(unittest.TestCase):
    def test_writes_validated_table(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            raw = Path(d) / "dates-of-term.html"
            out = Path(d) / "terms.json"
            raw.write_text(PAGE, encoding="utf-8")

            self.assertEqual(parse_all(raw_file=raw, out_file=out), 2)
            data = json.loads(out.read_text(encoding="utf-8"))
            self.assertEqual(data["terms"][1]["michaelmas"]["week1"]["start"], "2025-10-12")

    def test_page_without_terms_does_not_overwrite(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            raw = Path(d) / "dates-of-term.html"
            out = Path(d) / "terms.json"
            raw.write_text("<p>Maintenance</p>", encoding="utf-8")
            out.write_text("{}", encoding="utf-8")

            with self.assertRaises(ValueError):
                parse_all(raw_file=raw, out_file=out)
            self.assertEqual(out.read_text(encoding="utf-8"), "{}")


if __name__ == "__main__":
    unittest.main()
