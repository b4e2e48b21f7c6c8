"""
Serialize the merged brand list and print the run report.
"""

from __future__ import annotations

import json
import logging
import sys
import unicodedata
from pathlib import Path
from typing import List, Optional, Sequence, TextIO, Tuple

from .errors import OutputError
from .ingest import Brand
from .models import MergeReport
from .rules import DRY_RUN_PREFIX, OUTPUT_INDENT

logger = logging.getLogger(__name__)


def _collation_key(name: str) -> Tuple[str, str, str]:
    # accent- and case-insensitive first, then accents, then lower case before upper
    folded = unicodedata.normalize("NFKD", name.casefold())
    base = "".join(ch for ch in folded if not unicodedata.combining(ch))
    return base, name.casefold(), name.swapcase()


def sort_brands(brands: Sequence[Brand]) -> List[Brand]:
    return sorted(brands, key=lambda b: _collation_key(b.get("brand") or ""))


def serialize_brands(brands: Sequence[Brand]) -> str:
    return json.dumps(list(brands), indent=OUTPUT_INDENT, ensure_ascii=False) + "\n"


def dry_run_path(out: Path) -> Path:
    out = Path(out)
    return out.with_name(f"{DRY_RUN_PREFIX}{out.name}")


def write_output(brands: Sequence[Brand], out: Path, dry_run: bool = False) -> Path:
    """Write the JSON array, creating parent directories. Returns the path written."""
    target = dry_run_path(out) if dry_run else Path(out)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(serialize_brands(brands), encoding="utf-8")
    except OSError as exc:
        raise OutputError(f"Could not write output to {target}: {exc.strerror or exc}") from exc
    logger.info("Output written to %s", target)
    return target


def print_report(
    report: MergeReport,
    out: Optional[TextIO] = None,
    warn_stream: Optional[TextIO] = None,
    err_stream: Optional[TextIO] = None,
) -> None:
    out = out or sys.stdout
    warn_stream = warn_stream or sys.stderr
    err_stream = err_stream or sys.stderr
    stats = report.stats

    if report.output_path is not None:
        if report.dry_run:
            print(f"Output written to temporary file: {report.output_path}", file=out)
        else:
            print(f"Output written to: {report.output_path}", file=out)

    for item in report.notices:
        print(f"Info: {item.message}", file=out)
    for item in report.warnings:
        print(f"Warning: {item.message}", file=warn_stream)
    for item in report.errors:
        print(f"Error: {item.message}", file=err_stream)

    print("\nSummary:", file=out)
    print(f"Brands processed: {stats.brands_processed}", file=out)
    print(f"Brands kept: {stats.brands_kept}", file=out)
    print(f"Brands skipped: {stats.brands_skipped}", file=out)
    print(f"Sources processed: {stats.sources_processed}", file=out)
    print(f"Sources orphaned: {stats.sources_orphaned}", file=out)
    if report.verifications_supplied:
        print(f"Verifications processed: {stats.verifications_processed}", file=out)
        print(f"Verifications orphaned: {stats.verifications_orphaned}", file=out)
    print(f"Duplicate slugs: {stats.duplicate_slugs}", file=out)
    print(
        f"testing_qa_notes present for {report.brands_with_testing_notes}/{report.brands_total} brands",
        file=out,
    )
    if report.strict and report.warnings:
        print(f"Strict mode: {len(report.warnings)} warning(s) treated as fatal", file=err_stream)
