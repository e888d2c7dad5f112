"""
Analytics Aggregator - Derived Report Statistics.

Folds over every stored report on each call. Nothing here is cached or
persisted, so results always reflect the store's current contents.
"""

from collections import Counter
from datetime import timedelta
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from src.analysis.schemas import Conflict, ConflictSeverity, ConflictStatus, UsageStats
from src.utils.ids import Clock, utc_now

if TYPE_CHECKING:
    from src.storage.repositories import ReportRepository, UsageRepository

TREND_WINDOW_DAYS = 30


# ============================================================================
# Schemas
# ============================================================================


class SeverityBreakdown(BaseModel):
    high: int = 0
    medium: int = 0
    low: int = 0
    total: int = 0


class ResolutionBreakdown(BaseModel):
    resolved: int = 0
    open: int = 0
    ignored: int = 0
    total: int = 0

    @property
    def resolution_rate(self) -> float:
        """Resolved share of all conflicts (0 when there are none)."""
        return self.resolved / self.total if self.total else 0.0


class ConflictTrend(BaseModel):
    window_days: int = TREND_WINDOW_DAYS
    total_reports: int = 0
    total_conflicts: int = 0
    avg_conflicts_per_report: float = 0.0


class DocumentTypeCount(BaseModel):
    type: str
    count: int


class AnalyticsSnapshot(BaseModel):
    """Everything the analytics view shows, computed in one pass."""

    usage: UsageStats
    live_open_conflicts: int = Field(
        ...,
        description="Conflicts currently open (usage.open_conflicts only ever grows)",
    )
    severity: SeverityBreakdown
    resolution: ResolutionBreakdown
    resolution_rate: float
    trend: ConflictTrend
    document_types: list[DocumentTypeCount]


# ============================================================================
# Aggregator
# ============================================================================


class AnalyticsAggregator:
    """
    Read-side statistics over the report repository.

    Usage:
        analytics = AnalyticsAggregator(report_repository)
        print(analytics.severity_breakdown().total)
    """

    def __init__(
        self,
        reports: "ReportRepository",
        usage: "UsageRepository | None" = None,
        clock: Clock | None = None,
        trend_window_days: int = TREND_WINDOW_DAYS,
    ) -> None:
        self.reports = reports
        self.usage = usage or reports.usage
        self.clock = clock or utc_now
        self.trend_window_days = trend_window_days

    def _all_conflicts(self) -> list[Conflict]:
        return [c for report in self.reports.list_all() for c in report.conflicts]

    def severity_breakdown(self) -> SeverityBreakdown:
        conflicts = self._all_conflicts()
        counts = Counter(c.severity for c in conflicts)
        return SeverityBreakdown(
            high=counts[ConflictSeverity.HIGH],
            medium=counts[ConflictSeverity.MEDIUM],
            low=counts[ConflictSeverity.LOW],
            total=len(conflicts),
        )

    def resolution_breakdown(self) -> ResolutionBreakdown:
        conflicts = self._all_conflicts()
        counts = Counter(c.status for c in conflicts)
        return ResolutionBreakdown(
            resolved=counts[ConflictStatus.RESOLVED],
            open=counts[ConflictStatus.OPEN],
            ignored=counts[ConflictStatus.IGNORED],
            total=len(conflicts),
        )

    def conflict_trend(self, days: int | None = None) -> ConflictTrend:
        """Reports created within the trailing window and their conflict counts."""
        days = self.trend_window_days if days is None else days
        cutoff = self.clock() - timedelta(days=days)

        recent = [r for r in self.reports.list_all() if r.created_at >= cutoff]
        total_conflicts = sum(r.total_conflicts for r in recent)
        average = total_conflicts / len(recent) if recent else 0.0

        return ConflictTrend(
            window_days=days,
            total_reports=len(recent),
            total_conflicts=total_conflicts,
            avg_conflicts_per_report=round(average, 1),
        )

    def document_types(self) -> list[DocumentTypeCount]:
        """Document counts per file extension, most common first."""
        counts: Counter[str] = Counter(
            doc.extension for report in self.reports.list_all() for doc in report.documents
        )
        ranked = sorted(counts.items(), key=lambda item: -item[1])
        return [DocumentTypeCount(type=ext, count=count) for ext, count in ranked]

    def snapshot(self) -> AnalyticsSnapshot:
        resolution = self.resolution_breakdown()
        return AnalyticsSnapshot(
            usage=self.usage.get(),
            live_open_conflicts=resolution.open,
            severity=self.severity_breakdown(),
            resolution=resolution,
            resolution_rate=resolution.resolution_rate,
            trend=self.conflict_trend(),
            document_types=self.document_types(),
        )
