"""
Fingerprint index over a catalog of exercise names.

Built once per catalog snapshot and never mutated afterwards, so a built
index can be shared between readers without locking.
"""

from types import MappingProxyType

from exercise_volume.exercise_normalizer import (
    fingerprint,
    fingerprint_equipment_agnostic,
    tokenize,
)


class CatalogIndex:
    """
    Read-only lookup structures for the waterfall matcher.

    Attributes:
        exact_map: fingerprint -> catalog name (first name wins on collisions)
        agnostic_map: equipment-agnostic fingerprint -> tuple of names, catalog order
        token_sets: tuple of (name, frozenset of tokens), catalog order
        name_to_fingerprint: catalog name -> fingerprint
        entries_by_name / entries_by_lower: only populated by from_entries()
    """

    __slots__ = (
        "exact_map",
        "agnostic_map",
        "token_sets",
        "name_to_fingerprint",
        "entries_by_name",
        "entries_by_lower",
    )

    def __init__(self, exact_map, agnostic_map, token_sets, name_to_fingerprint,
                 entries_by_name=None, entries_by_lower=None):
        self.exact_map = MappingProxyType(exact_map)
        self.agnostic_map = MappingProxyType(
            {key: tuple(names) for key, names in agnostic_map.items()}
        )
        self.token_sets = tuple(token_sets)
        self.name_to_fingerprint = MappingProxyType(name_to_fingerprint)
        self.entries_by_name = MappingProxyType(entries_by_name or {})
        self.entries_by_lower = MappingProxyType(entries_by_lower or {})

    def __len__(self):
        return len(self.token_sets)

    @classmethod
    def from_entries(cls, entries):
        """Build an index from CatalogEntry values (or bare names), keeping name -> entry maps."""
        if entries is None:
            raise ValueError("Cannot build a catalog index from None")

        names = []
        by_name = {}
        by_lower = {}
        for entry in entries:
            # Bare names are indexed for matching but carry no entry
            if isinstance(entry, str):
                names.append(entry)
                continue
            names.append(entry.name)
            by_name.setdefault(entry.name, entry)
            by_lower.setdefault(entry.name.lower(), entry)

        base = build_catalog_index(names)
        return cls(
            dict(base.exact_map),
            dict(base.agnostic_map),
            base.token_sets,
            dict(base.name_to_fingerprint),
            entries_by_name=by_name,
            entries_by_lower=by_lower,
        )

    def entry_for(self, name):
        """Return the catalog entry for an exact catalog name, if indexed."""
        if not name:
            return None
        return self.entries_by_name.get(name) or self.entries_by_lower.get(name.lower())


def build_catalog_index(names):
    """
    Build a CatalogIndex from catalog names. O(n), no I/O.

    Args:
        names: Sequence of catalog display names, in catalog order.

    Raises:
        ValueError: names is None.
    """
    if names is None:
        raise ValueError("Cannot build a catalog index from None")

    exact_map = {}
    agnostic_map = {}
    token_sets = []
    name_to_fingerprint = {}

    for name in names:
        exact = fingerprint(name)
        agnostic = fingerprint_equipment_agnostic(name)
        name_to_fingerprint[name] = exact

        if exact and exact not in exact_map:
            exact_map[exact] = name
        if agnostic:
            agnostic_map.setdefault(agnostic, []).append(name)

        tokens = tokenize(name)
        if tokens:
            token_sets.append((name, tokens))

    return CatalogIndex(exact_map, agnostic_map, token_sets, name_to_fingerprint)
