"""
Attach source URLs to ingested brands.
"""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional, Sequence

from .ingest import Brand, BrandIndex, is_id_column
from .models import SourceEntry, StageReport
from .normalize import get_canonical_url_key, normalize_text, normalize_url
from .rules import BRAND_REF_CANDIDATES, TITLE_COLUMNS, URL_COLUMNS

logger = logging.getLogger(__name__)


def find_brand_ref_key(headers: Sequence[str], preferred: Optional[str] = None) -> Optional[str]:
    """
    Pick the column that references a brand.

    An explicit --brand-key wins when the file has it; otherwise
    brand_slug, slug, brand, then the first relation-style ID column.
    """
    if preferred and preferred in headers:
        return preferred
    for key in BRAND_REF_CANDIDATES:
        if key in headers:
            return key
    for header in headers:
        if is_id_column(header):
            return header
    return None


def _first_value(row: Mapping[str, str], columns: Sequence[str]) -> str:
    for column in columns:
        value = row.get(column)
        if value:
            return value
    return ""


def source_url(entry: Any) -> str:
    if isinstance(entry, str):
        return entry
    if isinstance(entry, Mapping) and isinstance(entry.get("url"), str):
        return entry["url"]
    return ""


def merge_sources(
    rows: Sequence[Mapping[str, str]],
    index: BrandIndex,
    headers: Optional[Sequence[str]] = None,
    brand_key: Optional[str] = None,
) -> StageReport:
    """
    Append de-duplicated sources to the brands in ``index``.

    Records are updated in place; the returned report carries counts,
    warnings for invalid URLs and an error when no reference column exists.
    """
    report = StageReport(stage="sources")
    stats = report.stats
    if headers is None:
        headers = list(rows[0].keys()) if rows else []

    ref_key = find_brand_ref_key(headers, brand_key)
    if ref_key is None:
        report.error(
            "missing_reference_column",
            "Could not find a suitable brand reference column in sources CSV",
            action="orphaned",
        )
        # no row can be joined to a brand
        stats.sources_processed += len(rows)
        stats.sources_orphaned += len(rows)
        return report
    logger.debug("Sources joined on column %r", ref_key)

    for row_no, row in enumerate(rows, start=2):
        stats.sources_processed += 1
        raw_ref = row.get(ref_key)
        brand = index.resolve(raw_ref)
        if brand is None:
            stats.sources_orphaned += 1
            logger.debug("Orphaned source row %d (reference %r)", row_no, raw_ref)
            continue

        url = _first_value(row, URL_COLUMNS)
        if not url:
            continue

        normalized = normalize_url(url)
        if normalized is None:
            report.warn(
                "invalid_url",
                f'Invalid URL "{url}" for brand "{brand.get("brand")}"',
                row=row_no, column="url", value=url,
            )
            continue

        if add_source(brand, normalized, _first_value(row, TITLE_COLUMNS)):
            logger.debug("Added source %s to %s", normalized, brand.get("slug"))

    return report


def add_source(brand: Brand, url: str, raw_title: str = "") -> bool:
    """
    Append ``url`` to the brand's sources unless its canonical key is taken.

    A title that is not just the URL again is kept as ``{url, title}``.
    """
    sources: List[Any] = brand.setdefault("sources", [])
    key = get_canonical_url_key(url)
    if any(get_canonical_url_key(source_url(existing)) == key for existing in sources):
        return False

    title = normalize_text(raw_title)
    if title and title.lower() != url.lower():
        sources.append(SourceEntry(url=url, title=title).model_dump())
    else:
        sources.append(url)
    return True
