"""
Merge pipeline: brands -> sources -> verifications -> sorted JSON.

Each stage returns its own StageReport; this module folds them into one
MergeReport. Brand records are handed from stage to stage and only one
stage touches them at a time.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from .errors import OptionsError
from .ingest import Brand, ingest_brands
from .models import MergeOptions, MergeReport, StageReport
from .reader import CsvTable, read_csv
from .schema import SchemaRevision, get_revision
from .sources import merge_sources
from .verify import resolve_verifications
from .writer import sort_brands, write_output


def _read_stage(*tables: Optional[CsvTable]) -> StageReport:
    report = StageReport(stage="read")
    for table in tables:
        if table is not None:
            report.warnings.extend(table.warnings)
    return report


def merge_tables(
    brands: CsvTable,
    sources: CsvTable,
    verifications: Optional[CsvTable] = None,
    brand_key: Optional[str] = None,
    schema: Optional[SchemaRevision] = None,
) -> Tuple[List[Brand], MergeReport]:
    """Run every stage over already-loaded tables. No files are touched."""
    report = MergeReport(verifications_supplied=verifications is not None)
    report.absorb(_read_stage(brands, sources, verifications))

    ingested = ingest_brands(brands.rows, brands.headers, schema)
    report.absorb(ingested.report)

    report.absorb(merge_sources(sources.rows, ingested.index, sources.headers, brand_key))

    if verifications is not None:
        report.absorb(
            resolve_verifications(verifications.rows, ingested.index, verifications.headers, brand_key)
        )

    merged = sort_brands(ingested.brands)
    report.brands_total = len(merged)
    report.brands_with_testing_notes = sum(1 for b in merged if b.get("testing_qa_notes"))
    return merged, report


def run_merge(options: MergeOptions) -> Tuple[List[Brand], MergeReport]:
    """
    Read the CSVs named in ``options``, merge them and write the output.

    Raises OptionsError / CsvReadError before anything is written.
    """
    missing = options.missing_required()
    if missing:
        raise OptionsError(f"{', '.join(missing)} is required")
    try:
        schema = get_revision(options.schema_revision)
    except ValueError as exc:
        raise OptionsError(str(exc)) from exc

    brands = read_csv(options.brands, "brands")
    sources = read_csv(options.sources, "sources")
    verifications = read_csv(options.verifications, "verifications") if options.verifications else None

    merged, report = merge_tables(brands, sources, verifications, options.brand_key, schema)
    report.strict = options.strict
    report.dry_run = options.dry_run
    report.output_path = write_output(merged, options.out, options.dry_run)
    return merged, report
