"""
Pydantic Schemas for the Analysis Layer.

Models for uploaded documents, detected conflicts, reports, usage
counters and external monitors. Records serialize to camelCase JSON
(the persisted layout) while Python code uses snake_case names.
"""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from src.utils.ids import utc_now


class RecordModel(BaseModel):
    """Base model for persisted records (camelCase on the wire)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_record(self) -> dict:
        """JSON-compatible dict in the persisted layout."""
        return self.model_dump(mode="json", by_alias=True)


# ============================================================================
# Enumerations
# ============================================================================


class ConflictType(str, Enum):
    """Categories of discrepancy between two documents."""

    CONTRADICTION = "contradiction"
    OVERLAP = "overlap"
    INCONSISTENCY = "inconsistency"


class ConflictSeverity(str, Enum):
    """Severity levels for conflicts."""

    LOW = "low"        # Cosmetic or easily reconciled
    MEDIUM = "medium"  # Needs review
    HIGH = "high"      # Directly contradictory requirements


class ConflictStatus(str, Enum):
    """Lifecycle of a conflict. Any state may move to any other."""

    OPEN = "open"
    RESOLVED = "resolved"
    IGNORED = "ignored"


class ReportStatus(str, Enum):
    """Status of a persisted report."""

    COMPLETED = "completed"
    NEEDS_REVIEW = "needs_review"
    RESOLVED = "resolved"


class AnalysisSensitivity(str, Enum):
    """Requested analysis sensitivity."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class MonitorFrequency(str, Enum):
    """How often an external URL is polled (scheduling is external)."""

    DAILY = "daily"
    WEEKLY = "weekly"
    CUSTOM = "custom"


class MonitorStatus(str, Enum):
    """Whether a monitor is being polled."""

    ACTIVE = "active"
    INACTIVE = "inactive"


SEVERITY_RANK = {
    ConflictSeverity.LOW: 0,
    ConflictSeverity.MEDIUM: 1,
    ConflictSeverity.HIGH: 2,
}


# ============================================================================
# Documents & Conflicts
# ============================================================================


class Document(RecordModel):
    """Metadata for one uploaded file. Content is opaque to the pipeline."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Caller-generated unique token")
    name: str = Field(..., description="Original filename")
    size: int = Field(default=0, ge=0, description="Size in bytes")
    type: str = Field(default="", description="MIME type")
    uploaded_at: datetime = Field(default_factory=utc_now)
    content: str | None = Field(default=None)

    @property
    def extension(self) -> str:
        """Lower-cased extension after the last dot, or 'unknown'."""
        if "." not in self.name:
            return "unknown"
        return self.name.rsplit(".", 1)[1].lower() or "unknown"


class ConflictSource(RecordModel):
    """A located textual excerpt in one document."""

    name: str = Field(..., description="Document name the excerpt came from")
    page: int | None = Field(default=None, ge=1)
    line: int | None = Field(default=None, ge=1)
    text: str = Field(..., description="The excerpt itself")


class ConflictSources(RecordModel):
    """Both sides of a conflict."""

    source1: ConflictSource
    source2: ConflictSource


class Conflict(RecordModel):
    """A detected discrepancy between two documents."""

    id: str
    conflict_type: ConflictType = Field(..., alias="type")
    severity: ConflictSeverity = Field(default=ConflictSeverity.MEDIUM)
    title: str
    description: str
    documents: ConflictSources
    suggestion: str
    status: ConflictStatus = Field(default=ConflictStatus.OPEN)
    notes: str | None = Field(default=None)


# ============================================================================
# Reports & Usage
# ============================================================================


class Report(RecordModel):
    """The persisted result of one analysis run over a document batch."""

    id: str
    documents: list[Document] = Field(default_factory=list)
    conflicts: list[Conflict] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    status: ReportStatus = Field(default=ReportStatus.COMPLETED)
    total_conflicts: int = Field(default=0, ge=0)

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Naive timestamps are treated as UTC so trend windows compare cleanly
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)

    @classmethod
    def from_conflicts(
        cls,
        report_id: str,
        documents: list[Document],
        conflicts: list[Conflict],
        created_at: datetime | None = None,
    ) -> "Report":
        """Build a report, deriving status and totals from the conflicts."""
        return cls(
            id=report_id,
            documents=list(documents),
            conflicts=list(conflicts),
            created_at=created_at or utc_now(),
            status=ReportStatus.NEEDS_REVIEW if conflicts else ReportStatus.COMPLETED,
            total_conflicts=len(conflicts),
        )

    @property
    def open_conflicts(self) -> list[Conflict]:
        return [c for c in self.conflicts if c.status == ConflictStatus.OPEN]

    def get_conflict(self, conflict_id: str) -> Conflict | None:
        for conflict in self.conflicts:
            if conflict.id == conflict_id:
                return conflict
        return None

    def to_summary(self) -> str:
        """One-line human summary."""
        names = ", ".join(d.name for d in self.documents) or "no documents"
        return (
            f"Report {self.id}: {self.total_conflicts} conflicts across "
            f"{len(self.documents)} documents ({names}) - {self.status.value}"
        )


def with_conflict_status(
    report: Report,
    conflict_id: str,
    status: ConflictStatus,
    notes: str | None = None,
) -> Report:
    """
    Return a copy of `report` with one conflict's status and notes changed.

    Transitions are not restricted. Notes replace the previous notes when
    given and are kept otherwise. Unknown conflict ids leave the report
    unchanged.
    """
    conflicts = []
    for conflict in report.conflicts:
        if conflict.id == conflict_id:
            update: dict = {"status": status}
            if notes is not None:
                update["notes"] = notes
            conflict = conflict.model_copy(update=update)
        conflicts.append(conflict)

    return report.model_copy(update={"conflicts": conflicts})


class UsageStats(RecordModel):
    """Process-wide activity counters, incremented on each report save."""

    documents_analyzed: int = Field(default=0, ge=0)
    reports_generated: int = Field(default=0, ge=0)
    open_conflicts: int = Field(
        default=0,
        ge=0,
        description="Conflicts opened to date (historical, never decremented)",
    )


class AnalysisSettings(RecordModel):
    """Settings submitted together with a document batch."""

    generate_detailed_report: bool = True
    analysis_sensitivity: AnalysisSensitivity = AnalysisSensitivity.MEDIUM


# ============================================================================
# External Monitors
# ============================================================================


class ExternalMonitor(RecordModel):
    """An external URL watched for content changes."""

    id: str
    url: str
    frequency: MonitorFrequency = Field(default=MonitorFrequency.DAILY)
    status: MonitorStatus = Field(default=MonitorStatus.ACTIVE)
    last_checked: datetime = Field(default_factory=utc_now)
    last_update: datetime | None = Field(default=None)
    documents: list[Document] = Field(
        default_factory=list,
        description="Batch re-analyzed when the monitored content changes",
    )

    @property
    def is_active(self) -> bool:
        return self.status == MonitorStatus.ACTIVE
