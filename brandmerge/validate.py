"""
Check a produced brands.json before it is published.

Structural problems (missing file, bad JSON, not an array) stop at once.
Field problems are collected so every one is reported in a single run.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, List, Optional

from .errors import DatasetError
from .models import DatasetSummary
from .rules import DEFAULT_DATASET_PATH


def load_dataset(path: Path) -> List[Any]:
    path = Path(path)
    if not path.exists():
        raise DatasetError(f"brands.json not found at {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise DatasetError(f"Error parsing {path.name}: {exc}") from exc
    if not isinstance(data, list):
        raise DatasetError(f"{path.name} must contain an array of brands")
    return data


def has_testing_notes(brand: Any) -> bool:
    notes = brand.get("testing_qa_notes") if isinstance(brand, dict) else None
    return isinstance(notes, str) and notes.strip() != ""


def validate_brands(brands: List[Any]) -> DatasetSummary:
    summary = DatasetSummary(total=len(brands))
    for position, brand in enumerate(brands):
        if not isinstance(brand, dict):
            summary.issues.append(f"Entry {position} is not an object")
            continue
        slug = brand.get("slug")
        if not slug:
            summary.issues.append('Brand missing required "slug" field')
            continue
        if "testing_qa_notes" not in brand:
            continue

        notes = brand["testing_qa_notes"]
        if not isinstance(notes, str):
            summary.issues.append(
                f"{slug}: testing_qa_notes must be a string, got {type(notes).__name__}"
            )
        elif notes.strip() == "":
            summary.issues.append(f"{slug}: testing_qa_notes cannot be empty or whitespace-only")
        else:
            summary.with_testing_notes += 1
    return summary


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="brandmerge-validate", description="Validate brands.json")
    parser.add_argument("path", nargs="?", default=DEFAULT_DATASET_PATH)
    args = parser.parse_args(argv)

    print("Validating brand data...")
    try:
        brands = load_dataset(Path(args.path))
    except DatasetError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    summary = validate_brands(brands)
    print("Validation Summary:")
    print(f"   Total brands: {summary.total}")
    print(f"   Brands with testing_qa_notes: {summary.with_testing_notes}")

    if summary.issues:
        print(f"\nValidation failed with {len(summary.issues)} error(s):", file=sys.stderr)
        for issue in summary.issues:
            print(f"   • {issue}", file=sys.stderr)
        return 1

    print("\nAll brand data validation passed!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
