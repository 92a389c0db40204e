"""
Muscle name -> macro muscle group normalization.

Accepts generic names ("Biceps", "Lower Back"), anatomical names
("deltoid_anterior", "latissimus dorsi") and comma-separated lists.
"""

import re


CHEST = "Chest"
BACK = "Back"
SHOULDERS = "Shoulders"
ARMS = "Arms"
LEGS = "Legs"
CORE = "Core"
CARDIO = "Cardio"
FULL_BODY = "Full Body"
OTHER = "Other"

# Display order of the trainable groups
MUSCLE_GROUP_ORDER = (CHEST, BACK, SHOULDERS, ARMS, LEGS, CORE)

# A full-body exercise counts once for each of these
FULL_BODY_GROUPS = (CHEST, BACK, LEGS, SHOULDERS, ARMS, CORE)

# ---------------------------------------------------------------------------
# Patterns per group. The longest matching pattern wins, so
# "lateral_deltoid" lands in Shoulders rather than Back via "lat", and
# "biceps_femoris" lands in Legs rather than Arms.
# ---------------------------------------------------------------------------
MUSCLE_GROUP_PATTERNS = (
    (CHEST, (
        "chest", "pec", "pecs", "pectoral", "pectoralis", "pectoralis_major",
        "pectoralis_minor", "chest_clavicular", "chest_sternal",
        "clavicular_head", "sternal_head",
    )),
    (BACK, (
        "lat", "lats", "latissimus", "latissimus_dorsi",
        "upper_back", "back", "lower_back", "lowerback",
        "trap", "traps", "trapezius",
        "rhomboid", "rhomboids", "erector", "erector_spinae", "spinal_erector",
        "teres", "teres_major", "teres_minor", "infraspinatus", "supraspinatus",
        "rear_delt", "rear_delts", "posterior_deltoid",
    )),
    (SHOULDERS, (
        "shoulder", "shoulders", "delt", "delts", "deltoid", "deltoids",
        "deltoid_anterior", "deltoid_lateral", "anterior_deltoid",
        "lateral_deltoid", "front_delt", "side_delt", "rotator", "rotator_cuff",
    )),
    (ARMS, (
        "bicep", "biceps", "biceps_brachii", "tricep", "triceps",
        "triceps_brachii", "forearm", "forearms", "brachialis",
        "brachioradialis", "arm", "arms", "wrist", "wrist_flexor",
        "wrist_extensor", "pronator", "supinator", "grip",
    )),
    (LEGS, (
        "quad", "quads", "quadriceps", "quadricep", "rectus_femoris",
        "vastus", "hamstring", "hamstrings", "biceps_femoris",
        "semitendinosus", "semimembranosus", "glute", "glutes", "gluteus",
        "gluteus_maximus", "gluteus_medius", "gluteus_minimus", "calf",
        "calves", "gastrocnemius", "soleus", "tibialis", "thigh", "thighs",
        "hip", "hips", "hip_flexor", "hip_flexors", "iliopsoas", "psoas",
        "adductor", "adductors", "abductor", "abductors", "leg", "legs",
        "sartorius", "gracilis", "tensor_fasciae_latae", "piriformis",
    )),
    (CORE, (
        "abdom", "abs", "abdominal", "abdominals", "rectus_abdominis",
        "transverse_abdominis", "core", "waist", "oblique", "obliques",
        "serratus", "serratus_anterior",
    )),
    (CARDIO, ("cardio", "cardiovascular", "aerobic", "conditioning")),
    (FULL_BODY, ("full_body", "fullbody", "total_body", "whole_body")),
)

SEPARATORS = re.compile(r"[\s\-]+")
FULL_BODY_TEXT = re.compile(r"full[\s_-]*body", re.IGNORECASE)
CARDIO_TEXT = re.compile(r"cardio", re.IGNORECASE)

# Values that stand for "no muscle"
EMPTY_MARKERS = frozenset({"", "none", "other", "n/a", "na", "-"})


def _match_single(name):
    key = SEPARATORS.sub("_", name.strip().lower())
    if key in EMPTY_MARKERS:
        return None

    best_group = None
    best_length = 0
    for group, patterns in MUSCLE_GROUP_PATTERNS:
        for pattern in patterns:
            if pattern in key and len(pattern) > best_length:
                best_group, best_length = group, len(pattern)
    return best_group


def normalize_muscle_group(muscle):
    """
    Map a muscle name (or comma-separated list) to a macro group.

    For a list, the first part that maps to a group wins.

    Examples:
        "biceps" -> "Arms"
        "deltoid_anterior" -> "Shoulders"
        "None" / "" / None -> "Other"
    """
    if muscle is None:
        return OTHER
    for part in str(muscle).split(","):
        group = _match_single(part)
        if group:
            return group
    return OTHER


def is_cardio(muscle):
    """True when a muscle label names cardio work."""
    if not muscle:
        return False
    return bool(CARDIO_TEXT.search(str(muscle))) or normalize_muscle_group(muscle) == CARDIO


def is_full_body(muscle):
    """True when a muscle label names a full-body movement."""
    if not muscle:
        return False
    return bool(FULL_BODY_TEXT.search(str(muscle))) or normalize_muscle_group(muscle) == FULL_BODY


def is_empty_muscle(muscle):
    """True for blank values and sentinels like "None"."""
    return muscle is None or str(muscle).strip().lower() in EMPTY_MARKERS
