"""
Unit tests for query parsing.

Grammar order:
- day-term-week first, then term-week, then absolute dates
- out-of-range week numbers are a typed failure, even inside day-term-week
- parsing is case and whitespace insensitive
"""

import unittest

from oxterm.model import DateQuery, DayTermWeekQuery, InvalidQuery, TermWeekQuery
from oxterm.query import normalize_query, parse_query


class TestTermWeekQueries(unittest.TestCase):
    def test_week_term_year(self) -> None:
        self.assertEqual(
            parse_query("Week 5 Michaelmas 2026"),
            TermWeekQuery(term="michaelmas", week=5, year="2026-27"),
        )

    def test_term_first(self) -> None:
        self.assertEqual(
            parse_query("michaelmas week 3 2025"),
            TermWeekQuery(term="michaelmas", week=3, year="2025-26"),
        )

    def test_abbreviations(self) -> None:
        self.assertEqual(parse_query("mich wk 5 2026"), TermWeekQuery("michaelmas", 5, "2026-27"))
        self.assertEqual(parse_query("w5 hil 2025"), TermWeekQuery("hilary", 5, "2024-25"))
        self.assertEqual(parse_query("tt wk2 2025"), TermWeekQuery("trinity", 2, "2024-25"))

    def test_hilary_and_trinity_anchor_end_year(self) -> None:
        self.assertEqual(parse_query("hilary week 2 2025"), TermWeekQuery("hilary", 2, "2024-25"))
        self.assertEqual(parse_query("Trinity 2025 Week 8"), TermWeekQuery("trinity", 8, "2024-25"))

    def test_explicit_academic_year(self) -> None:
        self.assertEqual(parse_query("Week 0 HT 2024-25"), TermWeekQuery("hilary", 0, "2024-25"))
        self.assertEqual(parse_query("week 1 mt 2024/2025"), TermWeekQuery("michaelmas", 1, "2024-25"))

    def test_explicit_year_suffix_must_follow_start(self) -> None:
        result = parse_query("Week 1 MT 2024-26")
        self.assertIsInstance(result, InvalidQuery)
        assert isinstance(result, InvalidQuery)
        self.assertIn("Invalid academic year", result.error)

    def test_number_before_week(self) -> None:
        self.assertEqual(parse_query("5th week trinity 2026"), TermWeekQuery("trinity", 5, "2025-26"))

    def test_week_out_of_range(self) -> None:
        result = parse_query("Week 13 Michaelmas 2026")
        self.assertIsInstance(result, InvalidQuery)
        assert isinstance(result, InvalidQuery)
        self.assertIn("Week number must be between 0 and 12", result.error)

    def test_missing_year_is_not_a_term_week(self) -> None:
        result = parse_query("week 5 michaelmas")
        self.assertEqual(result, InvalidQuery("Could not parse query"))


class TestDateQueries(unittest.TestCase):
    def test_day_month_year(self) -> None:
        self.assertEqual(parse_query("25 March 2027"), DateQuery("2027-03-25"))

    def test_month_day_year(self) -> None:
        self.assertEqual(parse_query("March 25, 2027"), DateQuery("2027-03-25"))

    def test_iso(self) -> None:
        self.assertEqual(parse_query("2027-03-25"), DateQuery("2027-03-25"))
        self.assertEqual(parse_query("2027-3-5"), DateQuery("2027-03-05"))

    def test_uk_slashes(self) -> None:
        self.assertEqual(parse_query("25/03/2027"), DateQuery("2027-03-25"))

    def test_abbreviated_month(self) -> None:
        self.assertEqual(parse_query("1 Jan 2025"), DateQuery("2025-01-01"))
        self.assertEqual(parse_query("3 sept 2025"), DateQuery("2025-09-03"))

    def test_day_out_of_range(self) -> None:
        self.assertIsInstance(parse_query("32 March 2027"), InvalidQuery)

    def test_day_not_checked_against_month(self) -> None:
        # 31 February is caught when the date is built, not here.
        self.assertEqual(parse_query("31 February 2025"), DateQuery("2025-02-31"))

    def test_day_name_with_plain_date_is_still_a_date(self) -> None:
        self.assertEqual(parse_query("Tuesday 6 May 2025"), DateQuery("2025-05-06"))


class TestDayTermWeekQueries(unittest.TestCase):
    def test_full_day_name(self) -> None:
        self.assertEqual(
            parse_query("Tuesday Week 2 Trinity 2025"),
            DayTermWeekQuery(day_of_week=2, term="trinity", week=2, year="2024-25"),
        )

    def test_monday(self) -> None:
        self.assertEqual(
            parse_query("Monday week 1 Michaelmas 2026"),
            DayTermWeekQuery(day_of_week=1, term="michaelmas", week=1, year="2026-27"),
        )

    def test_abbreviated_day(self) -> None:
        self.assertEqual(parse_query("Fri Week 5 HT 2025"), DayTermWeekQuery(5, "hilary", 5, "2024-25"))
        self.assertEqual(parse_query("week 3 tues mt 2024"), DayTermWeekQuery(2, "michaelmas", 3, "2024-25"))

    def test_sunday_week_zero(self) -> None:
        self.assertEqual(
            parse_query("Sunday Week 0 Michaelmas 2025"),
            DayTermWeekQuery(day_of_week=0, term="michaelmas", week=0, year="2025-26"),
        )

    def test_week_error_propagates_through_day(self) -> None:
        result = parse_query("Thursday Week 14 Hilary 2025")
        self.assertIsInstance(result, InvalidQuery)
        assert isinstance(result, InvalidQuery)
        self.assertIn("Week number must be between 0 and 12", result.error)

    def test_negative_week_is_out_of_range(self) -> None:
        for q in ("Week -1 Michaelmas 2026", "Tuesday Week -3 Trinity 2025", "mt wk -2 2024-25"):
            result = parse_query(q)
            self.assertIsInstance(result, InvalidQuery, q)
            assert isinstance(result, InvalidQuery)
            self.assertIn("Week number must be between 0 and 12", result.error)


class TestEdgeCases(unittest.TestCase):
    def test_empty_query(self) -> None:
        for q in ("", "   "):
            result = parse_query(q)
            self.assertIsInstance(result, InvalidQuery)
            assert isinstance(result, InvalidQuery)
            self.assertIn("empty", result.error.lower())

    def test_none_query(self) -> None:
        result = parse_query(None)
        self.assertIsInstance(result, InvalidQuery)
        assert isinstance(result, InvalidQuery)
        self.assertIn("invalid", result.error.lower())

    def test_non_string_query(self) -> None:
        self.assertIsInstance(parse_query(42), InvalidQuery)

    def test_unrecognized(self) -> None:
        result = parse_query("something random")
        self.assertEqual(result, InvalidQuery("Could not parse query"))

    def test_case_insensitive(self) -> None:
        self.assertEqual(parse_query("WEEK 5 MICHAELMAS 2026"), parse_query("week 5 michaelmas 2026"))

    def test_extra_whitespace(self) -> None:
        self.assertEqual(
            parse_query("  Week   5   Michaelmas   2026  "),
            TermWeekQuery("michaelmas", 5, "2026-27"),
        )

    def test_normalized_form_parses_the_same(self) -> None:
        for q in ("  TUESDAY  week 2  Trinity 2025", "25  MARCH 2027", "Week\t13 mt 2026"):
            self.assertEqual(parse_query(q), parse_query(normalize_query(q)))


if __name__ == "__main__":
    unittest.main()
