"""
Entry points: raw workout records in, muscle volume time series out.
"""

from collections import Counter, namedtuple

from loguru import logger

from exercise_volume.exercise_matcher import ExerciseResolver, MatchMethod, get_resolver
from exercise_volume.muscle_attribution import SECONDARY_SETS, attribute_muscle_volume
from exercise_volume.settings import resolve_settings
from exercise_volume.volume_aggregator import (
    VolumePeriod,
    aggregate,
    compute_daily_volumes,
    compute_rolling_weekly_volumes,
    identify_break_days,
    latest_rolling_weekly_volume,
    to_day,
)


WARMUP_SET_TYPES = frozenset({"w", "warmup", "warm-up", "warm up", "warmup_set"})

ExerciseSets = namedtuple("ExerciseSets", ["sets", "primary_sets", "secondary_sets"])

ExerciseBreakdown = namedtuple("ExerciseBreakdown", ["total_sets", "exercises"])


def is_warmup_set(record):
    """True when a record's set_type marks a warm-up set."""
    set_type = str(record.get("set_type") or "").strip().lower()
    if not set_type:
        return False
    return set_type in WARMUP_SET_TYPES or "warmup" in set_type.replace("-", "").replace(" ", "")


def resolve_exercise_name(raw_name, catalog, resolver=None):
    """
    Resolve a free-form exercise name against a catalog.

    Args:
        raw_name: Name as typed or exported by another app.
        catalog: Sequence of CatalogEntry (or bare names). The index built
            for it is reused as long as the same catalog object is passed.
        resolver: Optional ExerciseResolver; the module-level one by default.

    Returns:
        MatchResult(name, method, confidence).
    """
    return (resolver or get_resolver()).resolve(raw_name, catalog)


class MuscleVolumeAnalytics:
    """Attribute raw workout records to muscles and build volume series."""

    def __init__(self, catalog, resolver=None, settings=None):
        """
        Args:
            catalog: Sequence of CatalogEntry with muscle data.
            resolver: Optional ExerciseResolver (module-level one by default).
            settings: Optional settings dict; defaults when omitted.
        """
        if catalog is None:
            raise ValueError("Catalog reference cannot be None")
        self.catalog = catalog
        self.settings = resolve_settings(settings)
        if resolver is None:
            resolver = ExerciseResolver(self.settings) if settings else get_resolver()
        self.resolver = resolver
        self.unresolved = Counter()

    def attribute_records(self, records, grouped=None):
        """
        Turn raw records into dated contributions.

        Args:
            records: Iterable of mappings with "exercise_name" and "date"
                (and optionally "set_type").
            grouped: Macro groups instead of catalog muscle names; defaults
                to the "grouped" setting.

        Returns:
            List of {"date", "name", "exercise", "match", "contributions"}
            dicts, one per attributable record. Unresolved names of this
            call are tallied in self.unresolved.
        """
        if grouped is None:
            grouped = self.settings["grouped"]

        self.unresolved = Counter()
        attributed = []
        for record in records:
            if self.settings["skip_warmup_sets"] and is_warmup_set(record):
                continue

            raw_name = record.get("exercise_name")
            raw_name = raw_name.strip() if isinstance(raw_name, str) else ""
            entry, match = self.resolver.lookup_entry(raw_name, self.catalog)
            if entry is None:
                if raw_name and match.method is MatchMethod.NONE:
                    self.unresolved[raw_name] += 1
                continue

            contributions = attribute_muscle_volume(entry, grouped=grouped)
            if not contributions:
                continue
            attributed.append({
                "date": record.get("date"),
                "name": raw_name,
                "exercise": entry.name,
                "match": match,
                "contributions": contributions,
            })

        if self.unresolved:
            logger.debug(
                f"unresolved_exercises distinct={len(self.unresolved)} "
                f"records={sum(self.unresolved.values())}"
            )
        return attributed

    def get_volume_series(self, records, period=VolumePeriod.WEEKLY, grouped=None):
        """Muscle volume time series for the given period."""
        return aggregate(self.attribute_records(records, grouped), period, self.settings)

    def get_latest_weekly_volume(self, records, grouped=None):
        """Latest rolling 7-day volume snapshot, or None without data."""
        daily = compute_daily_volumes(self.attribute_records(records, grouped))
        if not daily:
            return None
        break_days = identify_break_days(daily, self.settings["break_threshold_days"])
        rolling = compute_rolling_weekly_volumes(daily, self.settings["rolling_window_days"], break_days)
        return latest_rolling_weekly_volume(rolling)

    def get_muscle_composition_latest(self, records, grouped=False):
        """
        Current rolling 7-day volume per muscle, largest first.

        Returns:
            List of (muscle, sets) pairs rounded to the "round_digits"
            setting, with zero entries dropped. Empty without data.
        """
        latest = self.get_latest_weekly_volume(records, grouped)
        if latest is None:
            return []

        digits = self.settings["round_digits"]
        composition = [
            (muscle, round(sets, digits))
            for muscle, sets in latest.muscles.items()
            if round(sets, digits) > 0
        ]
        # sorted() is stable, so ties keep first-seen order
        return sorted(composition, key=lambda pair: -pair[1])

    def get_exercise_breakdown(self, records, start, end, grouped=None, selected=None):
        """
        Which exercises fed which muscles inside a date window.

        Args:
            records: Raw workout records, as for attribute_records().
            start, end: Inclusive window bounds (date or datetime).
            grouped: Macro groups instead of catalog muscle names.
            selected: Optional muscles or groups to count (case-insensitive);
                everything counts when empty.

        Returns:
            ExerciseBreakdown(total_sets, exercises) where exercises maps the
            logged exercise name to ExerciseSets(sets, primary_sets,
            secondary_sets), in first-seen order.
        """
        start, end = to_day(start), to_day(end)
        if start is None or end is None:
            raise ValueError("Breakdown window needs start and end dates")
        wanted = {str(muscle).lower() for muscle in selected} if selected else None

        total = 0.0
        exercises = {}
        for item in self.attribute_records(records, grouped):
            day = to_day(item["date"])
            if day is None or day < start or day > end:
                continue

            primary = secondary = 0.0
            for muscle, sets in item["contributions"]:
                if wanted is not None and muscle.lower() not in wanted:
                    continue
                if sets == SECONDARY_SETS:
                    secondary += sets
                else:
                    primary += sets
            if primary + secondary <= 0:
                continue

            total += primary + secondary
            prev = exercises.get(item["name"], ExerciseSets(0.0, 0.0, 0.0))
            exercises[item["name"]] = ExerciseSets(
                prev.sets + primary + secondary,
                prev.primary_sets + primary,
                prev.secondary_sets + secondary,
            )

        return ExerciseBreakdown(total, exercises)


def attribute_and_aggregate(records, catalog, period=VolumePeriod.WEEKLY, grouped=None,
                            resolver=None, settings=None):
    """
    Resolve, attribute and aggregate raw records in one call.

    Records whose exercise cannot be resolved, cardio records, warm-up sets
    and records without a date are skipped for attribution.
    """
    analytics = MuscleVolumeAnalytics(catalog, resolver=resolver, settings=settings)
    return analytics.get_volume_series(records, period=period, grouped=grouped)
