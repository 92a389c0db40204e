"""
Muscle volume attribution for resolved exercises.

Set counting rules:
- Primary muscle: 1 set
- Each secondary muscle: 0.5 sets
- Full Body: 1 set to each of Chest, Back, Legs, Shoulders, Arms, Core
- Cardio: ignored entirely
"""

from collections import namedtuple

from exercise_volume.catalog import split_muscle_list
from exercise_volume.muscle_groups import (
    FULL_BODY_GROUPS,
    is_cardio,
    is_empty_muscle,
    is_full_body,
    normalize_muscle_group,
)


MuscleContribution = namedtuple("MuscleContribution", ["muscle", "sets"])

PRIMARY_SETS = 1.0
SECONDARY_SETS = 0.5
FULL_BODY_SETS = 1.0


def valid_secondary_muscles(entry):
    """Secondary muscles that count toward volume, in catalog order."""
    valid = []
    for muscle in split_muscle_list(entry.secondary_muscles):
        if is_empty_muscle(muscle) or is_cardio(muscle) or is_full_body(muscle):
            continue
        valid.append(muscle)
    return valid


def count_valid_secondary_muscles(entry):
    return len(valid_secondary_muscles(entry))


def attribute_muscle_volume(entry, grouped=False):
    """
    Split one set of an exercise into per-muscle set contributions.

    Args:
        entry: CatalogEntry of the resolved exercise.
        grouped: Report macro groups ("Arms") instead of the catalog's
            muscle names ("Biceps").

    Returns:
        List of MuscleContribution; empty for cardio or a missing primary.
    """
    if entry is None:
        return []

    primary = str(entry.primary_muscle or "").strip()
    if is_empty_muscle(primary) or is_cardio(primary):
        return []

    if is_full_body(primary):
        return [MuscleContribution(group, FULL_BODY_SETS) for group in FULL_BODY_GROUPS]

    contributions = [
        MuscleContribution(normalize_muscle_group(primary) if grouped else primary, PRIMARY_SETS)
    ]
    for muscle in valid_secondary_muscles(entry):
        key = normalize_muscle_group(muscle) if grouped else muscle
        contributions.append(MuscleContribution(key, SECONDARY_SETS))
    return contributions


def total_sets(contributions):
    """Sum of the set weights in a contribution list."""
    return sum(c.sets for c in contributions)
