"""
Rolling muscle volume aggregation.

Turns dated muscle contributions into chart-ready time series:
- daily: per-day sums
- weekly: trailing 7-day sums anchored at every training day, so weekly
  volume is not cut at calendar boundaries
- monthly / yearly: average weekly sets, where weeks lost to a training
  break (an idle gap longer than the break threshold) are left out of the
  denominator
"""

import calendar
import math
from collections import namedtuple
from datetime import date, datetime, timedelta, timezone
from enum import Enum

import pandas as pd
from loguru import logger

from exercise_volume.settings import resolve_settings, validate_settings


class VolumePeriod(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


DailyVolume = namedtuple("DailyVolume", ["day", "muscles"])

RollingWeeklyVolume = namedtuple(
    "RollingWeeklyVolume",
    ["day", "week_start", "muscles", "total_sets", "is_in_break"],
)

PeriodAverageVolume = namedtuple(
    "PeriodAverageVolume",
    [
        "period_key",
        "label",
        "start",
        "end",
        "avg_weekly_sets",
        "total_avg_sets",
        "training_days",
        "weeks_included",
    ],
)

VolumeTimeSeriesEntry = namedtuple("VolumeTimeSeriesEntry", ["timestamp", "label", "volumes"])

VolumeTimeSeries = namedtuple("VolumeTimeSeries", ["entries", "keys"])

EMPTY_SERIES = VolumeTimeSeries((), ())


# ---------------------------------------------------------------------------
# Date helpers
# ---------------------------------------------------------------------------

def to_day(value):
    """Return the calendar day of a date/datetime, or None for anything else."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return None


def week_start(day):
    """Monday of the week containing day."""
    return day - timedelta(days=day.weekday())


def day_timestamp(day):
    """Epoch milliseconds of UTC midnight on day."""
    return calendar.timegm(day.timetuple()) * 1000


def timestamp_to_day(timestamp):
    return datetime.fromtimestamp(timestamp / 1000, tz=timezone.utc).date()


def format_day_label(day):
    return f"{day.strftime('%b')} {day.day}"


def format_week_label(day):
    return f"wk {format_day_label(day)}"


def format_month_label(day):
    return day.strftime("%b %Y")


def format_year_label(day):
    return str(day.year)


def coerce_period(period):
    """Accept a VolumePeriod or its string value."""
    if isinstance(period, VolumePeriod):
        return period
    try:
        return VolumePeriod(str(period).strip().lower())
    except ValueError:
        raise ValueError(f"Unknown volume period: {period!r}") from None


def check_window_days(window_days):
    """Validate a rolling window size (positive whole number of days)."""
    try:
        valid = (
            not isinstance(window_days, bool)
            and window_days > 0
            and not math.isnan(window_days)
            and float(window_days).is_integer()
        )
    except TypeError:
        valid = False
    if not valid:
        raise ValueError(f"Rolling window must be a positive whole number of days, got {window_days!r}")
    return int(window_days)


def check_break_threshold(threshold_days):
    try:
        valid = not isinstance(threshold_days, bool) and threshold_days >= 0 and not math.isnan(threshold_days)
    except TypeError:
        valid = False
    if not valid:
        raise ValueError(f"Break threshold must be a non-negative number of days, got {threshold_days!r}")
    return threshold_days


# ---------------------------------------------------------------------------
# Daily volume
# ---------------------------------------------------------------------------

def compute_daily_volumes(records):
    """
    Sum contributions per training day.

    Args:
        records: Iterable of mappings {"date": date|datetime,
            "contributions": [(muscle, sets), ...]}.

    Returns:
        List of DailyVolume sorted by day. Days without any contribution
        are not training days and are left out.
    """
    by_day = {}
    skipped = 0
    for record in records:
        day = to_day(record.get("date"))
        contributions = record.get("contributions") or ()
        if day is None:
            skipped += 1
            continue
        if not contributions:
            continue

        muscles = by_day.setdefault(day, {})
        for muscle, sets in contributions:
            muscles[muscle] = muscles.get(muscle, 0.0) + sets

    if skipped:
        logger.debug(f"daily_volume_skipped_records count={skipped} reason=no_date")

    return [DailyVolume(day, by_day[day]) for day in sorted(by_day)]


def identify_break_days(daily_volumes, threshold_days=7):
    """
    Training days that come right after a break.

    A break is a gap of more than threshold_days between consecutive
    training days.
    """
    threshold_days = check_break_threshold(threshold_days)
    breaks = set()
    for prev, curr in zip(daily_volumes, daily_volumes[1:]):
        if (curr.day - prev.day).days > threshold_days:
            breaks.add(curr.day)
    return breaks


# ---------------------------------------------------------------------------
# Rolling window
# ---------------------------------------------------------------------------

def compute_rolling_weekly_volumes(daily_volumes, window_days=7, break_days=None):
    """
    Trailing window sums for every training day.

    Each snapshot sums the training days in [day - (window_days - 1), day].

    Returns:
        List of RollingWeeklyVolume, one per training day, in day order.
    """
    window_days = check_window_days(window_days)
    break_days = break_days or set()

    rolling = []
    start_idx = 0
    for idx, current in enumerate(daily_volumes):
        window_start = current.day - timedelta(days=window_days - 1)
        while daily_volumes[start_idx].day < window_start:
            start_idx += 1

        muscles = {}
        for daily in daily_volumes[start_idx:idx + 1]:
            for muscle, sets in daily.muscles.items():
                muscles[muscle] = muscles.get(muscle, 0.0) + sets

        rolling.append(RollingWeeklyVolume(
            day=current.day,
            week_start=window_start,
            muscles=muscles,
            total_sets=sum(muscles.values()),
            is_in_break=current.day in break_days,
        ))
    return rolling


def latest_rolling_weekly_volume(rolling_volumes):
    """Most recent snapshot not coming out of a break; the most recent one otherwise."""
    for rolling in reversed(rolling_volumes):
        if not rolling.is_in_break:
            return rolling
    return rolling_volumes[-1] if rolling_volumes else None


# ---------------------------------------------------------------------------
# Monthly / yearly averages
# ---------------------------------------------------------------------------

def _period_bounds(day, period):
    if period is VolumePeriod.MONTHLY:
        start = day.replace(day=1)
        end = day.replace(day=calendar.monthrange(day.year, day.month)[1])
        return start.strftime("%Y-%m"), format_month_label(start), start, end
    start = date(day.year, 1, 1)
    return str(day.year), format_year_label(start), start, date(day.year, 12, 31)


def covered_days(daily_volumes, threshold_days=7):
    """
    Training days plus the idle days of every gap no longer than threshold_days.

    Idle stretches longer than the threshold are breaks and cover nothing.
    """
    threshold_days = check_break_threshold(threshold_days)
    covered = {daily.day for daily in daily_volumes}
    for prev, curr in zip(daily_volumes, daily_volumes[1:]):
        gap = (curr.day - prev.day).days
        if gap <= threshold_days:
            covered.update(prev.day + timedelta(days=offset) for offset in range(1, gap))
    return covered


def compute_period_average_volumes(daily_volumes, period, threshold_days=7):
    """
    Average weekly sets per muscle for each month or year with training.

    The average is the period total divided by the number of counted weeks:
    Monday-start weeks (clipped to the period) holding at least one covered
    day. Weeks that fall entirely inside a break are not counted, so a
    layoff does not drag the average down.

    Returns:
        List of PeriodAverageVolume sorted by period.
    """
    period = coerce_period(period)
    if period not in (VolumePeriod.MONTHLY, VolumePeriod.YEARLY):
        raise ValueError(f"Period averages need a monthly or yearly period, got {period.value!r}")

    covered = covered_days(daily_volumes, threshold_days)

    groups = {}
    for daily in daily_volumes:
        key, label, start, end = _period_bounds(daily.day, period)
        group = groups.get(key)
        if group is None:
            group = groups[key] = {"label": label, "start": start, "end": end, "totals": {}, "days": 0}
        group["days"] += 1
        for muscle, sets in daily.muscles.items():
            group["totals"][muscle] = group["totals"].get(muscle, 0.0) + sets

    averages = []
    for key in sorted(groups):
        group = groups[key]
        weeks = {
            week_start(day)
            for day in covered
            if group["start"] <= day <= group["end"]
        }
        weeks_included = max(len(weeks), 1)
        avg = {muscle: total / weeks_included for muscle, total in group["totals"].items()}
        averages.append(PeriodAverageVolume(
            period_key=key,
            label=group["label"],
            start=group["start"],
            end=group["end"],
            avg_weekly_sets=avg,
            total_avg_sets=sum(avg.values()),
            training_days=group["days"],
            weeks_included=weeks_included,
        ))
    return averages


# ---------------------------------------------------------------------------
# Time series builders
# ---------------------------------------------------------------------------

def _round(value, digits):
    return round(value, digits) if digits is not None else value


def build_time_series(rows, round_digits=None):
    """
    Build a VolumeTimeSeries from (day, label, muscles) rows.

    Every entry carries every muscle key seen in any row (0.0 when absent),
    with keys in first-seen order.
    """
    keys = []
    seen = set()
    for _, _, muscles in rows:
        for muscle in muscles:
            if muscle not in seen:
                seen.add(muscle)
                keys.append(muscle)

    entries = tuple(
        VolumeTimeSeriesEntry(
            timestamp=day_timestamp(day),
            label=label,
            volumes={key: _round(muscles.get(key, 0.0), round_digits) for key in keys},
        )
        for day, label, muscles in sorted(rows, key=lambda row: row[0])
    )
    return VolumeTimeSeries(entries, tuple(keys))


def bucket_rolling_series_to_weeks(series):
    """
    Collapse a rolling weekly series to one point per Monday-start week.

    Keeps the last rolling value observed in each week.
    """
    if not series.entries:
        return series

    by_week = {}
    for entry in series.entries:
        monday = week_start(timestamp_to_day(entry.timestamp))
        by_week[monday] = VolumeTimeSeriesEntry(
            timestamp=day_timestamp(monday),
            label=format_week_label(monday),
            volumes=dict(entry.volumes),
        )
    return VolumeTimeSeries(tuple(by_week[monday] for monday in sorted(by_week)), series.keys)


def series_to_dataframe(series):
    """Time series as a DataFrame indexed by date, one column per muscle plus "label"."""
    columns = ["label", *series.keys]
    if not series.entries:
        return pd.DataFrame(columns=columns)

    frame = pd.DataFrame(
        [{"label": entry.label, **entry.volumes} for entry in series.entries],
        index=pd.to_datetime([entry.timestamp for entry in series.entries], unit="ms"),
        columns=columns,
    )
    frame.index.name = "date"
    return frame


def aggregate(records, period=VolumePeriod.WEEKLY, settings=None):
    """
    Aggregate dated muscle contributions into a volume time series.

    Args:
        records: Iterable of {"date": ..., "contributions": [...]} mappings.
        period: "daily", "weekly", "monthly" or "yearly".
        settings: Optional settings dict (window, break threshold, rounding).

    Returns:
        VolumeTimeSeries with chronologically ordered entries.

    Raises:
        ValueError: unknown period or invalid window/threshold settings.
    """
    period = coerce_period(period)
    settings = validate_settings(resolve_settings(settings))
    digits = settings["round_digits"]

    daily = compute_daily_volumes(records)
    if not daily:
        return EMPTY_SERIES

    if period is VolumePeriod.DAILY:
        rows = [(d.day, format_day_label(d.day), d.muscles) for d in daily]
    elif period is VolumePeriod.WEEKLY:
        break_days = identify_break_days(daily, settings["break_threshold_days"])
        rolling = compute_rolling_weekly_volumes(daily, settings["rolling_window_days"], break_days)
        rows = [(r.day, format_day_label(r.day), r.muscles) for r in rolling]
    else:
        averages = compute_period_average_volumes(daily, period, settings["break_threshold_days"])
        rows = [(a.start, a.label, a.avg_weekly_sets) for a in averages]

    series = build_time_series(rows, digits)
    logger.debug(
        f"volume_aggregated period={period.value} training_days={len(daily)} entries={len(series.entries)}"
    )
    return series
