#!/usr/bin/env python3
"""
Resolve exercise names against a catalog CSV and report match quality.

Reads one exercise name per line from a text file (or the "exercise_name" /
"exercise_title" column of a CSV export), runs every distinct name through
the waterfall matcher, and prints per-tier statistics plus the weakest and
unresolved names.

Usage:
    python3 scripts/resolve_catalog_report.py --catalog exercises.csv --names names.txt
"""

import argparse
import os
import sys
from collections import Counter

import pandas as pd


ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from exercise_volume.catalog import load_catalog_csv
from exercise_volume.exercise_matcher import ExerciseResolver, MatchMethod
from exercise_volume.settings import load_settings


NAME_COLUMNS = ("exercise_name", "exercise_title", "Exercise Name", "name")


def parse_args():
    parser = argparse.ArgumentParser(
        description="Report how exercise names resolve against an exercise catalog."
    )
    parser.add_argument("--catalog", required=True, help="Exercise asset CSV")
    parser.add_argument(
        "--names",
        required=True,
        help="Text file with one name per line, or a CSV export with an exercise name column",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Optional settings YAML (default: $EXERCISE_VOLUME_CONFIG or config.yaml)",
    )
    parser.add_argument("--show", type=int, default=20, help="How many weak matches to list")
    return parser.parse_args()


def read_names(path):
    """Read exercise names from a CSV export or a plain list."""
    if path.lower().endswith(".csv"):
        frame = pd.read_csv(path, dtype=str, keep_default_na=False)
        for column in NAME_COLUMNS:
            if column in frame.columns:
                return [name for name in frame[column].tolist() if name.strip()]
        raise ValueError(f"No exercise name column in {path} (looked for {', '.join(NAME_COLUMNS)})")

    with open(path, "r") as f:
        return [line.strip() for line in f if line.strip()]


def main():
    args = parse_args()
    settings = load_settings(args.config)
    catalog = load_catalog_csv(args.catalog)
    resolver = ExerciseResolver(settings)

    occurrences = Counter(read_names(args.names))
    results = {name: resolver.resolve(name, catalog) for name in occurrences}

    by_method = Counter(match.method for match in results.values())
    print(f"\nResolved {len(results)} distinct names ({sum(occurrences.values())} rows)")
    print(f"  Catalog entries: {len(catalog)}")
    for method in MatchMethod:
        print(f"  {method.value:<20} {by_method.get(method, 0)}")

    weak = sorted(
        (item for item in results.items() if item[1].method not in (MatchMethod.EXACT, MatchMethod.NONE)),
        key=lambda item: item[1].confidence,
    )
    if weak:
        print(f"\nWeakest matches ({min(len(weak), args.show)} of {len(weak)}):")
        for name, match in weak[:args.show]:
            print(f"  {name!r} -> {match.name!r} [{match.method.value} {match.confidence:.2f}]")

    unresolved = [name for name, match in results.items() if match.method is MatchMethod.NONE]
    if unresolved:
        print(f"\nUnresolved ({len(unresolved)}):")
        for name in sorted(unresolved, key=lambda n: -occurrences[n]):
            print(f"  {name} ({occurrences[name]} rows)")


if __name__ == "__main__":
    main()
