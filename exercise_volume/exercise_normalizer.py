"""
Exercise name normalization and fingerprinting.

Every name that enters the engine (catalog names and logged names alike) goes
through the same pipeline, so two spellings of one exercise collapse to the
same fingerprint regardless of word order, plurals, abbreviations or
equipment suffix placement.
"""

import re
from types import MappingProxyType


# ---------------------------------------------------------------------------
# Parenthetical qualifiers to STRIP (logged set annotations, not identity)
# ---------------------------------------------------------------------------
STRIP_PAREN_PATTERNS = (
    re.compile(r"\s*\(warm-?up(?:\s+set)?\s*\d*\)", re.IGNORECASE),
    re.compile(r"\s*\(working(?:\s+set)?\)", re.IGNORECASE),
    re.compile(r"\s*\(back-?off\)", re.IGNORECASE),
    re.compile(r"\s*\(max\)", re.IGNORECASE),
    re.compile(r"\s*\(myo-?rep(?:\s+finisher)?\)", re.IGNORECASE),
    re.compile(r"\s*\(last\s+set\s*=\s*myo-?rep\)", re.IGNORECASE),
    re.compile(r"\s*\(drop\s*set\)", re.IGNORECASE),
    re.compile(r"\s*\(finisher\)", re.IGNORECASE),
)

APOSTROPHES = re.compile(r"['‘’`]")
NON_ALNUM = re.compile(r"[^a-z0-9]+")

# ---------------------------------------------------------------------------
# Compound tokens: multi-word spellings that collapse into one token.
# Applied after punctuation is replaced by spaces, so "Push-Down",
# "push down" and "pushdown" all meet here.
# ---------------------------------------------------------------------------
COMPOUND_PATTERNS = (
    (re.compile(r"\bpull downs?\b"), "pulldown"),
    (re.compile(r"\bpush downs?\b"), "pushdown"),
    (re.compile(r"\bpush ups?\b"), "pushup"),
    (re.compile(r"\bpull ups?\b"), "pullup"),
    (re.compile(r"\bchin ups?\b"), "chinup"),
    (re.compile(r"\bsit ups?\b"), "situp"),
    (re.compile(r"\bstep ups?\b"), "stepup"),
    (re.compile(r"\bdead lifts?\b"), "deadlift"),
    (re.compile(r"\bez bar\b"), "ezbar"),
    (re.compile(r"\bcurl bar\b"), "ezbar"),
    (re.compile(r"\bbody ?weight\b"), "bodyweight"),
    (re.compile(r"\bstiff legged?\b"), "stiffleg"),
    (re.compile(r"\bskull crushers?\b"), "skullcrusher"),
    (re.compile(r"\bjump ropes?\b"), "jumprope"),
    (re.compile(r"\bt bar\b"), "tbar"),
)

# ---------------------------------------------------------------------------
# Single-token synonyms (plural -> singular, abbreviation -> full word)
# ---------------------------------------------------------------------------
WORD_SYNONYMS = MappingProxyType({
    # Body parts
    "bicep": "biceps",
    "tricep": "triceps",
    "lat": "lats",
    "pec": "chest",
    "pecs": "chest",
    "pectoral": "chest",
    "quad": "quadriceps",
    "quads": "quadriceps",
    "hamstring": "hamstrings",
    "glute": "glutes",
    "calf": "calves",
    "ab": "abdominals",
    "abs": "abdominals",
    "abdominal": "abdominals",
    "delt": "deltoid",
    "delts": "deltoid",
    "deltoids": "deltoid",
    "trap": "traps",
    "trapezius": "traps",
    # Movements written as one word or abbreviated
    "pulldowns": "pulldown",
    "pushdowns": "pushdown",
    "pushups": "pushup",
    "pullups": "pullup",
    "chinups": "chinup",
    "situps": "situp",
    "deadlifts": "deadlift",
    "skullcrushers": "skullcrusher",
    "rdl": "romanian deadlift",
    "rdls": "romanian deadlift",
    "sldl": "stiffleg deadlift",
    "ohp": "overhead press",
    # Equipment
    "db": "dumbbell",
    "dbs": "dumbbell",
    "dumbbells": "dumbbell",
    "bb": "barbell",
    "barbells": "barbell",
    "kb": "kettlebell",
    "kettlebells": "kettlebell",
    "ez": "ezbar",
    "curlbar": "ezbar",
    "bw": "bodyweight",
    "cables": "cable",
    "machines": "machine",
    "bands": "band",
    "smiths": "smith",
    "plates": "plate",
    # Descriptors
    "inclined": "incline",
    "declined": "decline",
    "sitting": "seated",
    "prone": "lying",
    "supine": "lying",
    "one": "single",
    "unilateral": "single",
    "two": "double",
    "bilateral": "double",
    "alternate": "alternating",
    "alternated": "alternating",
    "reversed": "reverse",
    "side": "lateral",
    "posterior": "rear",
    "anterior": "front",
    "narrow": "close",
    "supinated": "underhand",
    "pronated": "overhand",
    "stiff": "stiffleg",
    # Actions (plural -> singular)
    "curls": "curl",
    "presses": "press",
    "rows": "row",
    "raises": "raise",
    "flys": "fly",
    "flies": "fly",
    "flyes": "fly",
    "extensions": "extension",
    "extend": "extension",
    "squats": "squat",
    "lunges": "lunge",
    "crunches": "crunch",
    "kickbacks": "kickback",
    "shrugs": "shrug",
    "twists": "twist",
    "rotations": "rotation",
    "pullovers": "pullover",
    "planks": "plank",
    "planking": "plank",
    "dips": "dip",
    "hips": "hip",
    "legs": "leg",
    "arms": "arm",
    "skipping": "jumprope",
    "jumping": "jump",
})

# Articles, prepositions, variant markers and roman numerals.
FILLER_WORDS = frozenset({
    "a", "an", "the", "with", "and", "or", "to", "on", "in", "of", "for",
    "at", "from", "by", "using", "version", "variation", "var", "style",
    "type", "v", "i", "ii", "iii", "iv", "vi", "vii", "viii", "ix",
})

# ---------------------------------------------------------------------------
# Equipment words: canonical token -> equipment tag
# ---------------------------------------------------------------------------
EQUIPMENT_TAGS = MappingProxyType({
    "dumbbell": "dumbbell",
    "barbell": "barbell",
    "kettlebell": "kettlebell",
    "cable": "cable",
    "machine": "machine",
    "lever": "machine",
    "selectorized": "machine",
    "band": "band",
    "resistance": "band",
    "bodyweight": "bodyweight",
    "smith": "smith",
    "ezbar": "ezbar",
    "suspension": "suspension",
    "trx": "suspension",
    "plate": "plate",
    "weighted": "plate",
    "assisted": "machine",
})

# Equipment words that only describe a missing tag; stripped, never extracted.
EQUIPMENT_PLACEHOLDERS = frozenset({"none", "other"})

PARENTHETICAL = re.compile(r"\(([^)]*)\)")


def strip_set_qualifiers(raw):
    """Remove parenthetical set annotations like "(Warm-up Set 2)"."""
    if not raw:
        return ""
    result = str(raw)
    for pattern in STRIP_PAREN_PATTERNS:
        result = pattern.sub("", result)
    return result


def _tokens(raw):
    """Run the full normalization pipeline and return the token list in order."""
    if not raw:
        return []

    text = strip_set_qualifiers(raw).lower()
    text = APOSTROPHES.sub("", text)
    text = NON_ALNUM.sub(" ", text).strip()
    if not text:
        return []

    for pattern, replacement in COMPOUND_PATTERNS:
        text = pattern.sub(replacement, text)

    tokens = []
    for word in text.split():
        if word in FILLER_WORDS:
            continue
        # Multi-word synonyms (e.g. 'rdl' -> 'romanian deadlift') expand in place
        tokens.extend(WORD_SYNONYMS.get(word, word).split())
    return tokens


def normalize_name(raw):
    """
    Normalize an exercise name into a lowercase, synonym-canonical string.

    Word order is preserved; use fingerprint() for an order-invariant key.
    Total over its input: None, empty or punctuation-only names yield "".
    """
    return " ".join(_tokens(raw))


def tokenize(raw):
    """Return the set of canonical tokens of a name."""
    return frozenset(_tokens(raw))


def fingerprint(raw):
    """
    Order-invariant signature of an exercise name.

    "Dumbbell Bicep Curl" and "Bicep Curl (DB)" both become
    "biceps curl dumbbell".
    """
    return " ".join(sorted(_tokens(raw)))


def fingerprint_equipment_agnostic(raw):
    """Fingerprint with every equipment word removed."""
    return " ".join(
        sorted(
            token
            for token in _tokens(raw)
            if token not in EQUIPMENT_TAGS and token not in EQUIPMENT_PLACEHOLDERS
        )
    )


def extract_equipment(raw):
    """
    Return the canonical equipment tag named in an exercise name, or None.

    Tokens are scanned in their written order, so "Bench Press (Smith Machine)"
    yields "smith". Parenthetical suffixes of the raw text are scanned as a
    fallback for equipment written in a form the tokenizer splits apart.
    """
    for token in _tokens(raw):
        tag = EQUIPMENT_TAGS.get(token)
        if tag:
            return tag

    if not raw:
        return None
    for content in PARENTHETICAL.findall(str(raw)):
        lowered = content.lower()
        for word, tag in EQUIPMENT_TAGS.items():
            if word in lowered:
                return tag
    return None
