"""
Repositories over the Record Store.

Narrow get/save/update/delete contracts for reports, usage counters and
external monitors. Lookup misses return None/False, never raise.
"""

from src.analysis.schemas import ConflictStatus, ExternalMonitor, Report, UsageStats
from src.storage.record_store import MONITORS_KEY, REPORTS_KEY, USAGE_KEY, RecordStore
from src.utils.logger import get_logger

logger = get_logger(__name__)


class UsageRepository:
    """Singleton usage counters stored as one object."""

    def __init__(self, store: RecordStore) -> None:
        self.store = store

    def get(self) -> UsageStats:
        """Current counters; zeros if nothing was recorded yet."""
        raw = self.store.read(USAGE_KEY)
        return UsageStats.model_validate(raw) if raw else UsageStats()

    def save(self, stats: UsageStats) -> None:
        self.store.write(USAGE_KEY, stats.to_record())

    def record_report(self, report: Report) -> UsageStats:
        """Increment counters for a newly saved report."""
        stats = self.get()
        updated = UsageStats(
            documents_analyzed=stats.documents_analyzed + len(report.documents),
            reports_generated=stats.reports_generated + 1,
            open_conflicts=stats.open_conflicts
            + sum(1 for c in report.conflicts if c.status == ConflictStatus.OPEN),
        )
        self.save(updated)
        return updated


class ReportRepository:
    """
    Report persistence.

    Usage:
        reports = ReportRepository(store)
        reports.save(report)
        report = reports.get_by_id(report.id)
    """

    def __init__(self, store: RecordStore, usage: UsageRepository | None = None) -> None:
        self.store = store
        self.usage = usage or UsageRepository(store)

    def list_all(self) -> list[Report]:
        return [Report.model_validate(r) for r in self.store.read(REPORTS_KEY, [])]

    def get_by_id(self, report_id: str) -> Report | None:
        for raw in self.store.read(REPORTS_KEY, []):
            if raw.get("id") == report_id:
                return Report.model_validate(raw)
        return None

    def save(self, report: Report) -> None:
        """Append a report and bump usage counters in one transaction."""
        with self.store.transaction():
            records = self.store.read(REPORTS_KEY, [])
            records.append(report.to_record())
            self.store.write(REPORTS_KEY, records)
            stats = self.usage.record_report(report)

        logger.info(
            f"Saved report {report.id} ({report.total_conflicts} conflicts); "
            f"reports generated: {stats.reports_generated}"
        )

    def update(self, report_id: str, report: Report) -> bool:
        """
        Replace a stored report in place.

        Returns:
            False (and changes nothing) if `report_id` is unknown
        """
        with self.store.transaction():
            records = self.store.read(REPORTS_KEY, [])
            for index, raw in enumerate(records):
                if raw.get("id") == report_id:
                    records[index] = report.to_record()
                    self.store.write(REPORTS_KEY, records)
                    return True

        logger.debug(f"Update skipped: report {report_id} not found")
        return False


class MonitorRepository:
    """External monitor persistence."""

    def __init__(self, store: RecordStore) -> None:
        self.store = store

    def list_all(self) -> list[ExternalMonitor]:
        return [ExternalMonitor.model_validate(m) for m in self.store.read(MONITORS_KEY, [])]

    def get_by_id(self, monitor_id: str) -> ExternalMonitor | None:
        for raw in self.store.read(MONITORS_KEY, []):
            if raw.get("id") == monitor_id:
                return ExternalMonitor.model_validate(raw)
        return None

    def save(self, monitor: ExternalMonitor) -> None:
        with self.store.transaction():
            records = self.store.read(MONITORS_KEY, [])
            records.append(monitor.to_record())
            self.store.write(MONITORS_KEY, records)

    def update(self, monitor_id: str, monitor: ExternalMonitor) -> bool:
        with self.store.transaction():
            records = self.store.read(MONITORS_KEY, [])
            for index, raw in enumerate(records):
                if raw.get("id") == monitor_id:
                    records[index] = monitor.to_record()
                    self.store.write(MONITORS_KEY, records)
                    return True
        return False

    def delete(self, monitor_id: str) -> bool:
        with self.store.transaction():
            records = self.store.read(MONITORS_KEY, [])
            remaining = [m for m in records if m.get("id") != monitor_id]
            if len(remaining) == len(records):
                return False
            self.store.write(MONITORS_KEY, remaining)
        return True
