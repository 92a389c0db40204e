"""Tests for daily, rolling weekly and period-average volume aggregation."""

import unittest
from datetime import date, datetime

import pandas as pd

from exercise_volume.volume_aggregator import (
    EMPTY_SERIES,
    VolumePeriod,
    aggregate,
    bucket_rolling_series_to_weeks,
    check_window_days,
    coerce_period,
    compute_daily_volumes,
    compute_period_average_volumes,
    compute_rolling_weekly_volumes,
    day_timestamp,
    format_day_label,
    format_month_label,
    format_week_label,
    identify_break_days,
    latest_rolling_weekly_volume,
    series_to_dataframe,
    timestamp_to_day,
)

JAN_1_2024_MS = 1704067200000
DAY_MS = 86400000


def rec(day, *contributions):
    return {"date": day, "contributions": list(contributions)}


def chest(day, sets):
    return rec(day, ("Chest", float(sets)))


class DateHelpersTests(unittest.TestCase):

    def test_timestamps_are_utc_midnight(self):
        self.assertEqual(day_timestamp(date(2024, 1, 1)), JAN_1_2024_MS)
        self.assertEqual(timestamp_to_day(JAN_1_2024_MS + 3 * DAY_MS), date(2024, 1, 4))

    def test_labels(self):
        self.assertEqual(format_day_label(date(2024, 1, 5)), "Jan 5")
        self.assertEqual(format_week_label(date(2024, 1, 1)), "wk Jan 1")
        self.assertEqual(format_month_label(date(2024, 1, 1)), "Jan 2024")

    def test_coerce_period(self):
        self.assertIs(coerce_period("Monthly"), VolumePeriod.MONTHLY)
        self.assertIs(coerce_period(VolumePeriod.DAILY), VolumePeriod.DAILY)
        with self.assertRaises(ValueError):
            coerce_period("hourly")

    def test_window_validation(self):
        self.assertEqual(check_window_days(7), 7)
        self.assertEqual(check_window_days(7.0), 7)
        for bad in (0, -1, float("nan"), 2.5, True, "7"):
            with self.assertRaises(ValueError):
                check_window_days(bad)


class DailyVolumesTests(unittest.TestCase):

    def test_sums_per_day(self):
        daily = compute_daily_volumes([
            rec(datetime(2024, 1, 1, 18, 30), ("Chest", 1.0), ("Triceps", 0.5)),
            rec(date(2024, 1, 1), ("Chest", 1.0)),
            rec(date(2024, 1, 3), ("Back", 1.0)),
        ])
        self.assertEqual([d.day for d in daily], [date(2024, 1, 1), date(2024, 1, 3)])
        self.assertEqual(daily[0].muscles, {"Chest": 2.0, "Triceps": 0.5})

    def test_records_without_date_or_contributions_skipped(self):
        daily = compute_daily_volumes([
            rec(None, ("Chest", 1.0)),
            rec("2024-01-01", ("Chest", 1.0)),
            rec(date(2024, 1, 2)),
        ])
        self.assertEqual(daily, [])

    def test_daily_series(self):
        series = aggregate([
            rec(date(2024, 1, 3), ("Back", 1.0)),
            rec(datetime(2024, 1, 1, 7, 0), ("Chest", 1.0), ("Triceps", 0.5)),
            rec(date(2024, 1, 1), ("Chest", 1.0)),
        ], "daily")

        self.assertEqual(series.keys, ("Chest", "Triceps", "Back"))
        self.assertEqual([e.timestamp for e in series.entries], [JAN_1_2024_MS, JAN_1_2024_MS + 2 * DAY_MS])
        self.assertEqual([e.label for e in series.entries], ["Jan 1", "Jan 3"])
        self.assertEqual(series.entries[0].volumes, {"Back": 0.0, "Chest": 2.0, "Triceps": 0.5})
        self.assertEqual(series.entries[1].volumes, {"Back": 1.0, "Chest": 0.0, "Triceps": 0.0})


class RollingWeeklyTests(unittest.TestCase):

    def setUp(self):
        self.records = [
            chest(date(2024, 1, 1), 3),
            chest(date(2024, 1, 4), 2),
            chest(date(2024, 1, 8), 1),
        ]

    def test_trailing_window_sums(self):
        rolling = compute_rolling_weekly_volumes(compute_daily_volumes(self.records))
        self.assertEqual([r.muscles["Chest"] for r in rolling], [3.0, 5.0, 3.0])
        self.assertEqual(rolling[2].week_start, date(2024, 1, 2))
        self.assertEqual(rolling[1].total_sets, 5.0)

    def test_weekly_series(self):
        series = aggregate(self.records, VolumePeriod.WEEKLY)
        self.assertEqual([e.volumes["Chest"] for e in series.entries], [3.0, 5.0, 3.0])
        self.assertEqual([e.label for e in series.entries], ["Jan 1", "Jan 4", "Jan 8"])

    def test_custom_window(self):
        series = aggregate(self.records, "weekly", {"rolling_window_days": 3})
        self.assertEqual([e.volumes["Chest"] for e in series.entries], [3.0, 2.0, 1.0])

    def test_string_window_accepted(self):
        series = aggregate(self.records, "weekly", {"rolling_window_days": "3"})
        self.assertEqual([e.volumes["Chest"] for e in series.entries], [3.0, 2.0, 1.0])

    def test_invalid_window_rejected(self):
        with self.assertRaises(ValueError):
            aggregate(self.records, "weekly", {"rolling_window_days": 0})
        with self.assertRaises(ValueError):
            aggregate(self.records, "weekly", {"rolling_window_days": "seven"})
        with self.assertRaises(ValueError):
            compute_rolling_weekly_volumes(compute_daily_volumes(self.records), window_days=-1)

    def test_break_return_day_kept_in_series(self):
        series = aggregate([chest(date(2024, 1, 1), 3), chest(date(2024, 1, 20), 2)], "weekly")
        self.assertEqual([e.volumes["Chest"] for e in series.entries], [3.0, 2.0])

    def test_bucket_to_weeks_keeps_last_value(self):
        weeks = bucket_rolling_series_to_weeks(aggregate(self.records, "weekly"))
        self.assertEqual([e.label for e in weeks.entries], ["wk Jan 1", "wk Jan 8"])
        self.assertEqual([e.timestamp for e in weeks.entries], [JAN_1_2024_MS, JAN_1_2024_MS + 7 * DAY_MS])
        self.assertEqual([e.volumes["Chest"] for e in weeks.entries], [5.0, 3.0])
        self.assertIs(bucket_rolling_series_to_weeks(EMPTY_SERIES), EMPTY_SERIES)


class BreaksTests(unittest.TestCase):

    def setUp(self):
        self.daily = compute_daily_volumes([
            chest(date(2024, 1, 1), 2),
            chest(date(2024, 1, 5), 2),
            chest(date(2024, 1, 20), 2),
        ])

    def test_identify_break_days(self):
        self.assertEqual(identify_break_days(self.daily, 7), {date(2024, 1, 20)})
        self.assertEqual(identify_break_days(self.daily, 14), {date(2024, 1, 20)})
        self.assertEqual(identify_break_days(self.daily, 15), set())
        with self.assertRaises(ValueError):
            identify_break_days(self.daily, -1)

    def test_latest_snapshot_skips_break_return(self):
        rolling = compute_rolling_weekly_volumes(self.daily, 7, identify_break_days(self.daily))
        self.assertTrue(rolling[2].is_in_break)
        latest = latest_rolling_weekly_volume(rolling)
        self.assertEqual(latest.day, date(2024, 1, 5))
        self.assertEqual(latest.total_sets, 4.0)

    def test_latest_snapshot_edge_cases(self):
        self.assertIsNone(latest_rolling_weekly_volume([]))
        rolling = compute_rolling_weekly_volumes(self.daily)
        self.assertEqual(latest_rolling_weekly_volume(rolling).day, date(2024, 1, 20))


class PeriodAveragesTests(unittest.TestCase):

    def test_break_weeks_excluded_from_denominator(self):
        daily = compute_daily_volumes([
            rec(date(2024, 1, 1), ("Chest", 4.0), ("Legs", 2.0)),
            chest(date(2024, 2, 9), 3),
        ])
        jan, feb = compute_period_average_volumes(daily, "monthly")

        self.assertEqual(jan.period_key, "2024-01")
        self.assertEqual(jan.label, "Jan 2024")
        self.assertEqual((jan.start, jan.end), (date(2024, 1, 1), date(2024, 1, 31)))
        self.assertEqual(jan.avg_weekly_sets, {"Chest": 4.0, "Legs": 2.0})
        self.assertEqual(jan.total_avg_sets, 6.0)
        self.assertEqual(jan.weeks_included, 1)
        self.assertEqual(jan.training_days, 1)

        self.assertEqual(feb.period_key, "2024-02")
        self.assertEqual(feb.avg_weekly_sets, {"Chest": 3.0})
        self.assertEqual(feb.weeks_included, 1)

    def test_regular_training_counts_every_week(self):
        records = [chest(date(2024, 1, day), 2) for day in (1, 8, 15, 22, 29)]
        (jan,) = compute_period_average_volumes(compute_daily_volumes(records), VolumePeriod.MONTHLY)
        self.assertEqual(jan.weeks_included, 5)
        self.assertEqual(jan.avg_weekly_sets["Chest"], 2.0)

    def test_break_threshold_controls_gap_tolerance(self):
        records = [chest(date(2024, 1, 1), 3), chest(date(2024, 1, 15), 3)]
        strict = aggregate(records, "monthly", {"break_threshold_days": 7})
        lenient = aggregate(records, "monthly", {"break_threshold_days": 14})
        self.assertEqual(strict.entries[0].volumes["Chest"], 3.0)
        self.assertEqual(lenient.entries[0].volumes["Chest"], 2.0)

    def test_yearly_average(self):
        records = [chest(date(2024, 1, 1), 2), chest(date(2024, 1, 8), 2), chest(date(2024, 3, 4), 2)]
        series = aggregate(records, "yearly")
        (entry,) = series.entries
        self.assertEqual(entry.label, "2024")
        self.assertEqual(entry.timestamp, JAN_1_2024_MS)
        self.assertEqual(entry.volumes, {"Chest": 2.0})

    def test_entries_sorted_across_years(self):
        records = [chest(date(2024, 1, 3), 1), chest(date(2023, 12, 15), 1)]
        monthly = aggregate(records, "monthly")
        self.assertEqual([e.label for e in monthly.entries], ["Dec 2023", "Jan 2024"])
        self.assertEqual(monthly.entries[0].timestamp, JAN_1_2024_MS - 31 * DAY_MS)
        yearly = aggregate(records, "yearly")
        self.assertEqual([e.label for e in yearly.entries], ["2023", "2024"])

    def test_rounding(self):
        records = [chest(date(2024, 1, 1), 0.5), chest(date(2024, 1, 15), 0.5)]
        settings = {"break_threshold_days": 14}
        self.assertEqual(aggregate(records, "monthly", settings).entries[0].volumes["Chest"], 0.3)
        settings["round_digits"] = 3
        self.assertEqual(aggregate(records, "monthly", settings).entries[0].volumes["Chest"], 0.333)

    def test_non_average_period_rejected(self):
        with self.assertRaises(ValueError):
            compute_period_average_volumes([], "weekly")


class AggregateEdgeCasesTests(unittest.TestCase):

    def test_empty_input(self):
        for period in ("daily", "weekly", "monthly", "yearly"):
            self.assertEqual(aggregate([], period), EMPTY_SERIES)
        self.assertEqual(aggregate([rec(date(2024, 1, 1))], "weekly"), EMPTY_SERIES)

    def test_unknown_period(self):
        with self.assertRaises(ValueError):
            aggregate([chest(date(2024, 1, 1), 1)], "fortnightly")


class SeriesToDataFrameTests(unittest.TestCase):

    def test_frame_layout(self):
        series = aggregate([
            rec(date(2024, 1, 1), ("Chest", 1.0)),
            rec(date(2024, 1, 2), ("Back", 1.0)),
        ], "daily")
        frame = series_to_dataframe(series)

        self.assertEqual(list(frame.columns), ["label", "Chest", "Back"])
        self.assertEqual(frame.index.name, "date")
        self.assertEqual(frame.index[0], pd.Timestamp("2024-01-01"))
        self.assertEqual(frame.loc[pd.Timestamp("2024-01-02"), "Back"], 1.0)
        self.assertEqual(frame["label"].tolist(), ["Jan 1", "Jan 2"])

    def test_empty_series(self):
        frame = series_to_dataframe(EMPTY_SERIES)
        self.assertTrue(frame.empty)
        self.assertEqual(list(frame.columns), ["label"])


if __name__ == "__main__":
    unittest.main()
