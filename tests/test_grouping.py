import unittest

import pandas as pd

from csv_MultiMetricIngest.core.grouping import (
    aggregate,
    format_timestamp,
    prepare_aggregation,
    week_number,
    weekday_index,
)
from csv_MultiMetricIngest.loaders.csv_loader import parse


def _rows(pairs, col="V"):
    return [{"TIME": t, col: v} for t, v in pairs]


class PassThroughTests(unittest.TestCase):
    def test_timestamps_are_reformatted(self):
        rows = _rows([("2025-01-06 08:05:09", 1.0), ("garbage", 2.0)])
        out = aggregate(rows, "TIME", "none", ["V"], "sum")
        self.assertEqual(2, len(out))
        self.assertEqual("01/06 08:05:09", out[0]["TIME"])
        self.assertEqual("garbage", out[1]["TIME"])
        self.assertEqual(2.0, out[1]["V"])
        # input rows untouched
        self.assertEqual("2025-01-06 08:05:09", rows[0]["TIME"])

    def test_offset_timestamps_shown_as_utc(self):
        rows = _rows([("2025-01-06T23:30:00+02:00", 1.0), ("2025-01-06T08:00:00Z", 2.0)])
        out = aggregate(rows, "TIME", "none", ["V"], "sum")
        self.assertEqual(["01/06 21:30:00", "01/06 08:00:00"], [r["TIME"] for r in out])

    def test_non_date_column_is_capped(self):
        rows = [{"id": f"row{i}", "V": float(i)} for i in range(60)]
        out = aggregate(rows, "id", "none", ["V"], "sum")
        self.assertEqual(50, len(out))
        self.assertEqual(rows[:50], out)
        self.assertEqual(10, len(aggregate(rows, "id", "none", ["V"], "sum", raw_row_limit=10)))


class DayGroupingTests(unittest.TestCase):
    def test_monday_average(self):
        rows = _rows([("2025-01-06 09:00:00", 10.0), ("2025-01-06 17:00:00", 20.0)])
        out = aggregate(rows, "TIME", "days", ["V"], "average")
        self.assertEqual([{"TIME": "Mon", "V": 15.0}], out)

    def test_int_values_are_aggregated(self):
        rows = _rows([("2025-01-06 09:00:00", 10), ("2025-01-06 17:00:00", 20)])
        self.assertEqual([{"TIME": "Mon", "V": 15.0}], aggregate(rows, "TIME", "days", ["V"], "average"))
        self.assertEqual([{"TIME": "Mon", "V": 30.0}], aggregate(rows, "TIME", "days", ["V"], "sum"))

    def test_bool_values_are_not_numbers(self):
        rows = _rows([("2025-01-06 09:00:00", True), ("2025-01-06 17:00:00", 4.0)])
        self.assertEqual([{"TIME": "Mon", "V": 4.0}], aggregate(rows, "TIME", "days", ["V"], "sum"))

    def test_clock_only_times_are_not_grouped(self):
        res = parse("Clock,V\n12:30:00,1\n13:30:00,2")
        self.assertEqual([], aggregate(res.rows, "Clock", "days", ["V"], "sum"))
        self.assertEqual([], aggregate(res.rows, "Clock", "weeks", ["V"], "sum"))
        out = aggregate(res.rows, "Clock", "none", ["V"], "sum")
        self.assertEqual(["12:30:00", "13:30:00"], [r["Clock"] for r in out])

    def test_sorted_by_weekday_index(self):
        rows = _rows([
            ("2025-01-11 00:00:00", 1.0),   # Sat
            ("2025-01-06 00:00:00", 2.0),   # Mon
            ("2025-01-05 00:00:00", 3.0),   # Sun
            ("2025-01-13 00:00:00", 4.0),   # Mon
        ])
        out = aggregate(rows, "TIME", "days", "V", "sum")
        self.assertEqual(["Sun", "Mon", "Sat"], [r["TIME"] for r in out])
        self.assertEqual([3.0, 6.0, 1.0], [r["V"] for r in out])

    def test_non_numeric_values_skip_column_only(self):
        rows = [
            {"TIME": "2025-01-06 00:00:00", "A": 1.0, "B": "n/a"},
            {"TIME": "2025-01-06 01:00:00", "A": 3.0, "B": 4.0},
            {"TIME": "not a date", "A": 100.0, "B": 100.0},
        ]
        avg = aggregate(rows, "TIME", "days", ["A", "B", "Missing"], "average")
        self.assertEqual([{"TIME": "Mon", "A": 2.0, "B": 4.0, "Missing": 0.0}], avg)
        cnt = aggregate(rows, "TIME", "days", ["A", "B", "Missing"], "count")
        self.assertEqual([{"TIME": "Mon", "A": 2.0, "B": 2.0, "Missing": 0.0}], cnt)

    def test_rounding_to_two_decimals(self):
        rows = _rows([("2025-01-06", 1.0), ("2025-01-06", 1.0), ("2025-01-06", 2.0)])
        out = aggregate(rows, "TIME", "days", ["V"], "average")
        self.assertEqual(1.33, out[0]["V"])


class WeekAndMonthTests(unittest.TestCase):
    def test_iso_week_numbers(self):
        self.assertEqual(1, week_number(pd.Timestamp("2025-01-01")))
        self.assertEqual(1, week_number(pd.Timestamp("2024-12-30")))
        self.assertEqual(53, week_number(pd.Timestamp("2021-01-03")))
        self.assertEqual(0, weekday_index(pd.Timestamp("2025-01-05")))
        self.assertEqual("12/31 23:59:01", format_timestamp(pd.Timestamp("2024-12-31 23:59:01")))

    def test_week_keys_sort_lexicographically_by_default(self):
        rows = _rows([("2025-01-07", 1.0), ("2025-03-04", 2.0), ("2025-03-05", 3.0)])
        out = aggregate(rows, "TIME", "weeks", ["V"], "sum")
        self.assertEqual(["Week 10", "Week 2"], [r["TIME"] for r in out])
        self.assertEqual([5.0, 1.0], [r["V"] for r in out])

    def test_week_chronological_order(self):
        rows = _rows([("2025-03-04", 2.0), ("2025-01-07", 1.0)])
        out = aggregate(rows, "TIME", "weeks", ["V"], "sum", sort_order="chronological")
        self.assertEqual(["Week 2", "Week 10"], [r["TIME"] for r in out])

    def test_months_ignore_year_by_default(self):
        rows = _rows([("2024-12-15", 1.0), ("2025-01-15", 2.0), ("2025-12-01", 4.0)])
        out = aggregate(rows, "TIME", "months", ["V"], "sum")
        self.assertEqual(["Jan", "Dec", "Dec"], [r["TIME"] for r in out])
        self.assertEqual([2.0, 1.0, 4.0], [r["V"] for r in out])

    def test_months_chronological_order(self):
        rows = _rows([("2025-01-15", 2.0), ("2024-12-15", 1.0)])
        out = aggregate(rows, "TIME", "months", ["V"], "sum", sort_order="chronological")
        self.assertEqual(["Dec", "Jan"], [r["TIME"] for r in out])


class ConservationTests(unittest.TestCase):
    def setUp(self):
        lines = ["TIME;A;B"]
        for day in range(1, 29):
            for hour in (0, 12):
                lines.append(f"2025-02-{day:02d} {hour:02d}:00:00;{day}.25;{hour}")
        lines.append("bad time;1000;1000")
        self.res = parse("\n".join(lines))

    def test_sum_is_conserved(self):
        valid_total = sum(r["A"] for r in self.res.rows if r["TIME"] != "bad time")
        for gran in ("days", "weeks", "months"):
            out = aggregate(self.res.rows, "TIME", gran, ["A", "B"], "sum")
            self.assertAlmostEqual(valid_total, sum(r["A"] for r in out), places=6)

    def test_counts_cover_valid_rows(self):
        n_valid = len(self.res.rows) - 1
        for gran in ("days", "weeks", "months"):
            out = aggregate(self.res.rows, "TIME", gran, ["A"], "count")
            self.assertEqual(n_valid, sum(r["A"] for r in out))
            self.assertTrue(all(r["A"] <= len(self.res.rows) for r in out))

    def test_invalid_arguments_raise(self):
        with self.assertRaises(ValueError):
            aggregate(self.res.rows, "TIME", "hours", ["A"], "sum")
        with self.assertRaises(ValueError):
            aggregate(self.res.rows, "TIME", "days", ["A"], "median")
        with self.assertRaises(ValueError):
            aggregate(self.res.rows, "TIME", "days", ["A"], "sum", sort_order="random")


class AggregationConfigTests(unittest.TestCase):
    def test_defaults_and_overrides(self):
        prep = prepare_aggregation({})
        self.assertEqual(("none", "average", "within_year", 50), (prep.granularity, prep.method,
                                                                   prep.sort_order, prep.raw_row_limit))
        prep = prepare_aggregation({"aggregation": {
            "granularity": "Weeks", "method": "SUM", "sort_order": "chronological",
            "value_columns": "A", "time_column": "TIME",
        }})
        self.assertEqual("weeks", prep.granularity)
        self.assertEqual("sum", prep.method)
        self.assertEqual(("A",), prep.value_columns)
        self.assertEqual("TIME", prep.time_column)

    def test_unknown_values_fall_back(self):
        prep = prepare_aggregation({"aggregation": {"granularity": "hourly", "method": "max"}})
        self.assertEqual("none", prep.granularity)
        self.assertEqual("average", prep.method)
