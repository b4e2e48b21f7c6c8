"""
testing_qa_notes coverage report over a produced brands.json.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, List, Optional

from pydantic import BaseModel, Field

from .errors import DatasetError
from .rules import COVERAGE_GOOD, COVERAGE_LIST_LIMIT, COVERAGE_MODERATE, DEFAULT_DATASET_PATH
from .validate import has_testing_notes, load_dataset


class BrandRef(BaseModel):
    slug: str
    brand: str


class CoverageReport(BaseModel):
    total: int = 0
    with_notes: List[BrandRef] = Field(default_factory=list)
    missing_notes: List[BrandRef] = Field(default_factory=list)

    @property
    def percent(self) -> int:
        if not self.total:
            return 0
        # round half up
        return int(len(self.with_notes) * 100 / self.total + 0.5)

    @property
    def status(self) -> str:
        if self.percent >= COVERAGE_GOOD:
            return "Good coverage"
        if self.percent >= COVERAGE_MODERATE:
            return "Moderate coverage"
        return "Low coverage"


def build_coverage(brands: List[Any]) -> CoverageReport:
    report = CoverageReport(total=len(brands))
    for brand in brands:
        if not isinstance(brand, dict) or not brand.get("slug") or not brand.get("brand"):
            continue
        ref = BrandRef(slug=str(brand["slug"]), brand=str(brand["brand"]))
        if has_testing_notes(brand):
            report.with_notes.append(ref)
        else:
            report.missing_notes.append(ref)
    return report


def format_brand_list(brands: List[BrandRef], limit: int = COVERAGE_LIST_LIMIT) -> str:
    if not brands:
        return "   (none)"
    shown = sorted(brands, key=lambda b: b.slug)[:limit]
    lines = [f"   • {b.slug} ({b.brand})" for b in shown]
    remaining = len(brands) - len(shown)
    if remaining > 0:
        lines.append(f"   … and {remaining} more")
    return "\n".join(lines)


def render(report: CoverageReport) -> str:
    return "\n".join([
        f"Brands with testing_qa_notes ({len(report.with_notes)}):",
        format_brand_list(report.with_notes),
        "",
        f"Brands missing testing_qa_notes ({len(report.missing_notes)}):",
        format_brand_list(report.missing_notes),
        "",
        "Summary:",
        f"   Total brands: {report.total}",
        f"   Coverage: {len(report.with_notes)}/{report.total} ({report.percent}%)",
        f"   Status: {report.status}",
    ])


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="brandmerge-coverage", description="Report testing_qa_notes coverage"
    )
    parser.add_argument("path", nargs="?", default=DEFAULT_DATASET_PATH)
    args = parser.parse_args(argv)

    print("Testing Details Coverage Report\n")
    try:
        brands = load_dataset(Path(args.path))
    except DatasetError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(render(build_coverage(brands)))
    print("\nReport complete")
    return 0


if __name__ == "__main__":
    sys.exit(main())
