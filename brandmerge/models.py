from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field

from .schema import DEFAULT_REVISION


class ReportItem(BaseModel):
    row: Optional[int] = None
    column: Optional[str] = None
    issue: str
    value: Optional[str] = None
    action: str
    message: str


class MergeStats(BaseModel):
    brands_processed: int = 0
    brands_kept: int = 0
    brands_skipped: int = 0
    duplicate_slugs: int = 0
    sources_processed: int = 0
    sources_orphaned: int = 0
    verifications_processed: int = 0
    verifications_orphaned: int = 0

    def combined(self, other: "MergeStats") -> "MergeStats":
        return MergeStats(
            **{name: getattr(self, name) + getattr(other, name) for name in type(self).model_fields}
        )


class StageReport(BaseModel):
    """What one pipeline stage observed. Stages never share a report."""

    stage: str
    warnings: List[ReportItem] = Field(default_factory=list)
    errors: List[ReportItem] = Field(default_factory=list)
    notices: List[ReportItem] = Field(default_factory=list)
    stats: MergeStats = Field(default_factory=MergeStats)

    def warn(self, issue: str, message: str, action: str = "ignored", **where) -> None:
        self.warnings.append(ReportItem(issue=issue, message=message, action=action, **where))

    def error(self, issue: str, message: str, action: str = "skipped", **where) -> None:
        self.errors.append(ReportItem(issue=issue, message=message, action=action, **where))

    def notice(self, issue: str, message: str, action: str = "applied", **where) -> None:
        self.notices.append(ReportItem(issue=issue, message=message, action=action, **where))


class MergeReport(BaseModel):
    stats: MergeStats = Field(default_factory=MergeStats)
    warnings: List[ReportItem] = Field(default_factory=list)
    errors: List[ReportItem] = Field(default_factory=list)
    notices: List[ReportItem] = Field(default_factory=list)
    stages: List[str] = Field(default_factory=list)
    brands_total: int = 0
    brands_with_testing_notes: int = 0
    output_path: Optional[Path] = None
    dry_run: bool = False
    strict: bool = False
    verifications_supplied: bool = False

    def absorb(self, stage: StageReport) -> None:
        self.stages.append(stage.stage)
        self.warnings.extend(stage.warnings)
        self.errors.extend(stage.errors)
        self.notices.extend(stage.notices)
        self.stats = self.stats.combined(stage.stats)

    @property
    def exit_code(self) -> int:
        if self.errors:
            return 1
        if self.strict and self.warnings:
            return 1
        return 0


class MergeOptions(BaseModel):
    brands: Optional[Path] = None
    sources: Optional[Path] = None
    verifications: Optional[Path] = None
    out: Optional[Path] = None
    dry_run: bool = False
    strict: bool = False
    brand_key: Optional[str] = None
    self_test: bool = False
    schema_revision: str = DEFAULT_REVISION
    verbose: bool = False

    def missing_required(self) -> List[str]:
        if self.self_test:
            return []
        return [f"--{name}" for name in ("brands", "sources", "out") if getattr(self, name) is None]


class SourceEntry(BaseModel):
    url: str
    title: str


class VerificationEvent(BaseModel):
    status: str
    date: Optional[str] = None


class DatasetSummary(BaseModel):
    total: int = 0
    with_testing_notes: int = 0
    issues: List[str] = Field(default_factory=list)
