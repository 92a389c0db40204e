"""
Exercise catalog entries and loaders.

The catalog itself is owned by the caller (usually loaded once from the
exercise asset CSV); the engine only reads it.
"""

from collections import namedtuple

import pandas as pd
from loguru import logger


CatalogEntry = namedtuple(
    "CatalogEntry",
    ["name", "equipment", "primary_muscle", "secondary_muscles"],
)
CatalogEntry.__new__.__defaults__ = (None, "", ())

CATALOG_COLUMNS = ("name", "equipment", "primary_muscle", "secondary_muscle")


def split_muscle_list(value):
    """Split a comma-joined muscle list into a tuple of trimmed names."""
    if value is None:
        return ()
    if isinstance(value, (list, tuple)):
        parts = value
    else:
        parts = str(value).split(",")
    return tuple(str(part).strip() for part in parts if str(part).strip())


def _clean(value):
    if value is None:
        return ""
    text = str(value).strip()
    return "" if text.lower() == "nan" else text


def entry_from_row(row):
    """
    Build a CatalogEntry from a mapping with the asset CSV columns.

    Accepts either "secondary_muscle" (CSV spelling) or "secondary_muscles".

    Returns:
        CatalogEntry, or None when the row has no name.
    """
    name = _clean(row.get("name"))
    if not name:
        return None
    secondary = row.get("secondary_muscles")
    if secondary is None:
        secondary = row.get("secondary_muscle")
    return CatalogEntry(
        name=name,
        equipment=_clean(row.get("equipment")) or None,
        primary_muscle=_clean(row.get("primary_muscle")),
        secondary_muscles=split_muscle_list(secondary),
    )


def catalog_from_rows(rows):
    """Build a catalog (tuple of entries) from row mappings, skipping nameless rows."""
    entries = []
    for row in rows:
        entry = entry_from_row(row)
        if entry is not None:
            entries.append(entry)
    return tuple(entries)


def load_catalog_csv(path):
    """
    Load an exercise asset CSV into a catalog.

    Args:
        path: CSV file with at least a "name" column; "equipment",
            "primary_muscle" and "secondary_muscle" are read when present.

    Returns:
        Tuple of CatalogEntry in file order.
    """
    frame = pd.read_csv(path, dtype=str, keep_default_na=False)
    missing = [col for col in CATALOG_COLUMNS if col not in frame.columns]
    if "name" in missing:
        raise ValueError(f"Catalog file {path} has no 'name' column")
    for col in missing:
        frame[col] = ""

    catalog = catalog_from_rows(frame[list(CATALOG_COLUMNS)].to_dict("records"))
    logger.debug(f"catalog_loaded path={path} entries={len(catalog)}")
    return catalog
