"""
Brand ingestion: one validated, normalized record per unique slug.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .models import StageReport
from .normalize import (
    normalize_brand_ref,
    normalize_testing_notes,
    normalize_text,
    normalize_whitespace,
    parse_array,
    parse_boolean,
    parse_integer,
)
from .schema import FieldSpec, SchemaRevision, get_revision

logger = logging.getLogger(__name__)

Brand = Dict[str, Any]

_ID_RE = re.compile("id", re.IGNORECASE)
_SLUG_RE = re.compile("slug", re.IGNORECASE)


def is_id_column(header: str) -> bool:
    """Relation-style ID column, e.g. 'notion_id' or 'Page ID' but not 'slug_id'."""
    return bool(_ID_RE.search(header)) and not _SLUG_RE.search(header)


@dataclass
class BrandIndex:
    by_slug: Dict[str, Brand] = field(default_factory=dict)
    by_name: Dict[str, Brand] = field(default_factory=dict)
    by_id: Dict[str, Brand] = field(default_factory=dict)

    def resolve(self, raw_ref: Optional[str]) -> Optional[Brand]:
        """Slug first, then display name, then raw relation ID."""
        ref = normalize_brand_ref(raw_ref)
        if not ref:
            return None
        return (
            self.by_slug.get(ref)
            or self.by_name.get(ref)
            or self.by_id.get((raw_ref or "").strip())
        )


@dataclass
class IngestResult:
    brands: List[Brand]
    index: BrandIndex
    report: StageReport
    id_columns: List[str] = field(default_factory=list)


def _raw_value(row: Mapping[str, str], spec: FieldSpec):
    """Return (value, column) preferring the canonical column over aliases."""
    value = row.get(spec.name)
    if value and value.strip():
        return value, spec.name
    for alias in spec.aliases:
        value = row.get(alias)
        if value and value.strip():
            return value, alias
    return None, None


def _coerce(spec: FieldSpec, value: str, brand_name: str, row_no: int, report: StageReport):
    if spec.kind == "boolean":
        parsed = parse_boolean(value)
        if parsed is None:
            report.warn(
                "unparseable_boolean",
                f'Could not parse boolean value "{value}" for field "{spec.name}" in brand "{brand_name}"',
                row=row_no, column=spec.name, value=value,
            )
        return parsed
    if spec.kind == "integer":
        parsed = parse_integer(value)
        if parsed is None:
            report.warn(
                "unparseable_integer",
                f'Could not parse number value "{value}" for field "{spec.name}" in brand "{brand_name}"',
                row=row_no, column=spec.name, value=value,
            )
        return parsed
    if spec.kind == "array":
        return parse_array(value) or None
    if spec.kind == "notes":
        return normalize_testing_notes(value)
    return normalize_text(value) or None


def build_brand(
    row: Mapping[str, str],
    schema: SchemaRevision,
    report: StageReport,
    row_no: int,
) -> Brand:
    brand_name = normalize_whitespace(row.get("brand"))
    record: Brand = {}
    for spec in schema.fields:
        if spec.kind == "derived":
            continue
        if spec.name in ("brand", "slug"):
            record[spec.name] = normalize_text(row.get(spec.name))
            continue

        value, column = _raw_value(row, spec)
        if not value:
            continue
        parsed = _coerce(spec, value, brand_name, row_no, report)
        if parsed is None:
            continue
        record[spec.name] = parsed

        if column != spec.name:
            report.notice(
                "legacy_column",
                f'Migrated "{brand_name}" {column} -> {spec.name}',
                row=row_no, column=column,
            )
            logger.info("Migrated %r %s -> %s", brand_name, column, spec.name)
    return record


def ingest_brands(
    rows: Sequence[Mapping[str, str]],
    headers: Optional[Sequence[str]] = None,
    schema: Optional[SchemaRevision] = None,
) -> IngestResult:
    """
    Validate and normalize brand rows.

    Rows missing ``brand`` or ``slug`` are errors; repeated slugs
    (case-insensitive) are warnings. Both are skipped and counted, and
    processing continues with the next row.
    """
    schema = schema or get_revision()
    report = StageReport(stage="brands")
    stats = report.stats
    if headers is None:
        headers = list(rows[0].keys()) if rows else []

    known = schema.known_columns()
    unknown = [h for h in headers if h not in known]
    if unknown:
        report.warn(
            "unknown_columns",
            f"Unknown columns in brands CSV will be ignored: {', '.join(unknown)}",
            value=", ".join(unknown),
        )

    id_columns = [h for h in headers if is_id_column(h)]
    brands: List[Brand] = []
    index = BrandIndex()

    for row_no, row in enumerate(rows, start=2):
        stats.brands_processed += 1
        # keys use the stored (punctuation-harmonized) form
        brand_name = normalize_text(row.get("brand"))
        slug = normalize_text(row.get("slug"))

        if not brand_name or not slug:
            missing = [name for name, val in (("brand", brand_name), ("slug", slug)) if not val]
            report.error(
                "missing_required",
                f"Row {row_no} missing required field(s): {', '.join(missing)}",
                row=row_no, column=missing[0],
            )
            stats.brands_skipped += 1
            continue

        slug_key = slug.lower()
        if slug_key in index.by_slug:
            report.warn(
                "duplicate_slug",
                f'Duplicate slug "{slug}" found, skipping',
                action="skipped", row=row_no, column="slug", value=slug,
            )
            stats.duplicate_slugs += 1
            stats.brands_skipped += 1
            continue

        record = build_brand(row, schema, report, row_no)
        brands.append(record)
        index.by_slug[slug_key] = record
        index.by_name.setdefault(brand_name.lower(), record)
        # references are matched with any "(...)" suffix stripped
        index.by_name.setdefault(normalize_brand_ref(brand_name), record)
        for column in id_columns:
            id_value = (row.get(column) or "").strip()
            if id_value:
                index.by_id[id_value] = record
        stats.brands_kept += 1

    logger.debug(
        "Ingested %d/%d brands (id columns: %s)",
        stats.brands_kept, stats.brands_processed, ", ".join(id_columns) or "none",
    )
    return IngestResult(brands=brands, index=index, report=report, id_columns=id_columns)
