"""
Storage Layer - Record Store and Repositories.

Reports, monitors and usage counters persisted as JSON collections.
"""

from src.storage.record_store import (
    MONITORS_KEY,
    REPORTS_KEY,
    USAGE_KEY,
    RecordStore,
    RecordStoreError,
)
from src.storage.repositories import (
    MonitorRepository,
    ReportRepository,
    UsageRepository,
)

__all__ = [
    "RecordStore",
    "RecordStoreError",
    "REPORTS_KEY",
    "MONITORS_KEY",
    "USAGE_KEY",
    "ReportRepository",
    "UsageRepository",
    "MonitorRepository",
]
