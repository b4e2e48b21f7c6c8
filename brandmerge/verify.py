"""
Resolve the latest verification event per brand.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Sequence

from .ingest import Brand, BrandIndex
from .models import StageReport, VerificationEvent
from .normalize import normalize_whitespace, parse_date
from .rules import DATE_COLUMN, STATUS_COLUMN
from .sources import find_brand_ref_key

logger = logging.getLogger(__name__)


def latest_event(events: Sequence[VerificationEvent]) -> VerificationEvent:
    """
    Most recent event; undated events sort last.

    Ties (same date, or all undated) keep file order, so the first-seen
    row wins.
    """
    # sorted() is stable under reverse=True; "" sorts below any ISO date
    return sorted(events, key=lambda e: e.date or "", reverse=True)[0]


def resolve_verifications(
    rows: Sequence[Mapping[str, str]],
    index: BrandIndex,
    headers: Optional[Sequence[str]] = None,
    brand_key: Optional[str] = None,
) -> StageReport:
    report = StageReport(stage="verifications")
    stats = report.stats
    if headers is None:
        headers = list(rows[0].keys()) if rows else []

    ref_key = find_brand_ref_key(headers, brand_key)
    if ref_key is None:
        report.warn(
            "missing_reference_column",
            "Could not find a suitable brand reference column in verifications CSV",
            action="stage_skipped",
        )
        return report
    logger.debug("Verifications joined on column %r", ref_key)

    # keyed by record identity; records are plain dicts
    grouped: Dict[int, List[VerificationEvent]] = {}
    owners: Dict[int, Brand] = {}

    for row_no, row in enumerate(rows, start=2):
        stats.verifications_processed += 1
        raw_ref = row.get(ref_key)
        if not normalize_whitespace(raw_ref):
            stats.verifications_orphaned += 1
            continue

        status = normalize_whitespace(row.get(STATUS_COLUMN))
        date_text = normalize_whitespace(row.get(DATE_COLUMN))
        date = parse_date(date_text)
        if date_text and date is None:
            report.warn(
                "unparseable_date",
                f'Could not parse date "{date_text}" for brand reference "{raw_ref}"',
                action="kept_without_date", row=row_no, column=DATE_COLUMN, value=date_text,
            )

        if not status:
            continue

        brand = index.resolve(raw_ref)
        if brand is None:
            stats.verifications_orphaned += 1
            report.warn(
                "orphaned_verification",
                f'Orphaned verification for brand reference "{raw_ref}"',
                row=row_no, column=ref_key, value=raw_ref,
            )
            continue

        owners[id(brand)] = brand
        grouped.setdefault(id(brand), []).append(
            VerificationEvent(status=status, date=date)
        )

    for key, events in grouped.items():
        brand = owners[key]
        winner = latest_event(events)
        brand["verification_status"] = winner.status
        if winner.date:
            brand["last_verified"] = winner.date
        logger.debug(
            "%s: %s (%s) from %d event(s)",
            brand["slug"], winner.status, winner.date or "undated", len(events),
        )

    return report
