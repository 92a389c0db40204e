"""Exercise identity resolution and muscle volume attribution."""

from exercise_volume.catalog import CatalogEntry, catalog_from_rows, load_catalog_csv
from exercise_volume.catalog_index import CatalogIndex, build_catalog_index
from exercise_volume.engine import (
    ExerciseBreakdown,
    ExerciseSets,
    MuscleVolumeAnalytics,
    attribute_and_aggregate,
    resolve_exercise_name,
)
from exercise_volume.exercise_matcher import (
    ExerciseResolver,
    MatchMethod,
    MatchResult,
    find_best_match,
    get_resolver,
    reset_resolver,
)
from exercise_volume.exercise_normalizer import (
    extract_equipment,
    fingerprint,
    fingerprint_equipment_agnostic,
    normalize_name,
)
from exercise_volume.muscle_attribution import MuscleContribution, attribute_muscle_volume
from exercise_volume.settings import load_settings
from exercise_volume.volume_aggregator import (
    VolumePeriod,
    VolumeTimeSeries,
    VolumeTimeSeriesEntry,
    aggregate,
    series_to_dataframe,
)

__all__ = [
    "CatalogEntry",
    "CatalogIndex",
    "ExerciseBreakdown",
    "ExerciseResolver",
    "ExerciseSets",
    "MatchMethod",
    "MatchResult",
    "MuscleContribution",
    "MuscleVolumeAnalytics",
    "VolumePeriod",
    "VolumeTimeSeries",
    "VolumeTimeSeriesEntry",
    "aggregate",
    "attribute_and_aggregate",
    "attribute_muscle_volume",
    "build_catalog_index",
    "catalog_from_rows",
    "extract_equipment",
    "find_best_match",
    "fingerprint",
    "fingerprint_equipment_agnostic",
    "get_resolver",
    "load_catalog_csv",
    "load_settings",
    "normalize_name",
    "reset_resolver",
    "resolve_exercise_name",
    "series_to_dataframe",
]
