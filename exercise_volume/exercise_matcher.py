"""
Waterfall exercise matcher.

Resolves a free-form exercise name against a CatalogIndex by trying, in
order: exact fingerprint, subset fingerprint, equipment-agnostic fingerprint
and fuzzy token overlap. The first tier that yields a candidate wins. A
query that matches nothing gets a NONE result, never an exception.
"""

import threading
from collections import namedtuple
from enum import Enum

from loguru import logger

from exercise_volume.catalog_index import CatalogIndex
from exercise_volume.exercise_normalizer import (
    extract_equipment,
    fingerprint,
    fingerprint_equipment_agnostic,
    tokenize,
)
from exercise_volume.settings import resolve_settings


class MatchMethod(str, Enum):
    EXACT = "exact"
    SUBSET = "subset"
    EQUIPMENT_AGNOSTIC = "equipment_agnostic"
    FUZZY = "fuzzy"
    NONE = "none"


MatchResult = namedtuple("MatchResult", ["name", "method", "confidence"])

NO_MATCH = MatchResult("", MatchMethod.NONE, 0.0)

EQUIPMENT_MATCH_CONFIDENCE = 0.95
EQUIPMENT_FALLBACK_CONFIDENCE = 0.85

# Preferred variant when the query does not name equipment
EQUIPMENT_PRIORITY = {
    "dumbbell": 3,
    "barbell": 2,
    "machine": 1,
    "cable": 1,
}

# Exercise action words: sharing one boosts a fuzzy candidate
IMPORTANT_WORDS = frozenset({
    "curl", "press", "row", "squat", "deadlift", "raise", "fly",
    "extension", "pulldown", "pushdown", "pullup", "chinup", "lunge",
    "crunch", "plank",
})


def _match_subset(query_fp, index):
    best = None
    for master_fp, master_name in index.exact_map.items():
        if query_fp not in master_fp and master_fp not in query_fp:
            continue
        score = 1 - abs(len(master_fp) - len(query_fp)) / max(len(master_fp), len(query_fp))
        # Highest score, then shortest name, then alphabetical
        key = (-score, len(master_name), master_name)
        if best is None or key < best[0]:
            best = (key, master_name, score)

    if best is None:
        return None
    return MatchResult(best[1], MatchMethod.SUBSET, best[2])


def _match_equipment_agnostic(query, index):
    variants = index.agnostic_map.get(fingerprint_equipment_agnostic(query))
    if not variants:
        return None

    wanted = extract_equipment(query)
    if wanted:
        for name in variants:
            if extract_equipment(name) == wanted:
                return MatchResult(name, MatchMethod.EQUIPMENT_AGNOSTIC, EQUIPMENT_MATCH_CONFIDENCE)

    # sorted() is stable, so catalog order breaks priority ties
    ranked = sorted(
        variants,
        key=lambda name: -EQUIPMENT_PRIORITY.get(extract_equipment(name), 0),
    )
    return MatchResult(ranked[0], MatchMethod.EQUIPMENT_AGNOSTIC, EQUIPMENT_FALLBACK_CONFIDENCE)


def _match_fuzzy(query, index, settings):
    query_tokens = tokenize(query)
    if not query_tokens:
        return None
    query_important = query_tokens & IMPORTANT_WORDS

    best_name = None
    best_score = 0.0
    for name, tokens in index.token_sets:
        union = len(query_tokens | tokens)
        jaccard = len(query_tokens & tokens) / union
        if query_important & tokens:
            score = jaccard * settings["fuzzy_boost"]
        else:
            score = jaccard
        if score > best_score:
            best_name, best_score = name, score

    if best_name is None or best_score <= settings["fuzzy_threshold"]:
        return None
    confidence = min(best_score, settings["fuzzy_confidence_cap"])
    return MatchResult(best_name, MatchMethod.FUZZY, confidence)


def find_best_match(query, index, settings=None):
    """
    Resolve a raw exercise name to the best catalog name.

    Args:
        query: Raw exercise name as logged or exported.
        index: CatalogIndex built from the catalog names.
        settings: Optional settings dict (fuzzy thresholds).

    Returns:
        MatchResult(name, method, confidence). NO_MATCH when nothing fits.
    """
    if not query or not str(query).strip():
        return NO_MATCH

    query_fp = fingerprint(query)
    if not query_fp:
        return NO_MATCH

    exact = index.exact_map.get(query_fp)
    if exact:
        return MatchResult(exact, MatchMethod.EXACT, 1.0)

    settings = resolve_settings(settings)
    for tier in (
        lambda: _match_subset(query_fp, index),
        lambda: _match_equipment_agnostic(query, index),
        lambda: _match_fuzzy(query, index, settings),
    ):
        result = tier()
        if result is not None:
            return result

    return NO_MATCH


class ExerciseResolver:
    """
    Resolves exercise names against a catalog, caching one CatalogIndex.

    The cache holds a single slot keyed by the identity of the catalog
    object: passing a different catalog object rebuilds the index and
    discards the old one. Rebuilds happen under a lock; a built index is
    immutable and read without locking.

    Usage:
        resolver = ExerciseResolver()
        resolver.resolve("DB Bench Press", catalog)
        entry, match = resolver.lookup_entry("barbell bench press", catalog)
    """

    def __init__(self, settings=None):
        self.settings = resolve_settings(settings)
        self._lock = threading.Lock()
        self._slot = None

    def index_for(self, catalog):
        """Return the CatalogIndex for a catalog, building it if the reference changed."""
        if catalog is None:
            raise ValueError("Catalog reference cannot be None")

        slot = self._slot
        if slot is not None and slot[0] is catalog:
            return slot[1]

        with self._lock:
            slot = self._slot
            if slot is not None and slot[0] is catalog:
                return slot[1]
            index = CatalogIndex.from_entries(catalog)
            self._slot = (catalog, index)
            logger.debug(f"catalog_index_built entries={len(index)}")
            return index

    def invalidate(self):
        """Drop the cached index."""
        with self._lock:
            self._slot = None

    def resolve(self, raw_name, catalog):
        """Resolve a raw name to a MatchResult against the catalog."""
        return find_best_match(raw_name, self.index_for(catalog), self.settings)

    def lookup_entry(self, raw_name, catalog):
        """
        Find the catalog entry for a raw name.

        Tries the exact catalog name, then a case-insensitive name, then the
        fingerprint waterfall.

        Returns:
            (CatalogEntry or None, MatchResult)
        """
        index = self.index_for(catalog)
        # Blank cells from spreadsheet exports arrive as NaN or None
        if not isinstance(raw_name, str) or not raw_name.strip():
            return None, NO_MATCH
        raw_name = raw_name.strip()

        entry = index.entries_by_name.get(raw_name) or index.entries_by_lower.get(raw_name.lower())
        if entry is not None:
            return entry, MatchResult(entry.name, MatchMethod.EXACT, 1.0)

        match = find_best_match(raw_name, index, self.settings)
        if match.method is MatchMethod.NONE:
            return None, match
        return index.entry_for(match.name), match


# ---------------------------------------------------------------------------
# Module-level resolver for convenience
# ---------------------------------------------------------------------------
_default_resolver = None
_default_resolver_lock = threading.Lock()


def get_resolver():
    """Get or create the module-level resolver."""
    global _default_resolver
    with _default_resolver_lock:
        if _default_resolver is None:
            _default_resolver = ExerciseResolver()
        return _default_resolver


def reset_resolver():
    """Reset the module-level resolver (useful for testing)."""
    global _default_resolver
    with _default_resolver_lock:
        _default_resolver = None
