"""
Document Conflict Checker - Source Package.

This package contains the core functionality for:
- Upload intake and document metadata
- Pairwise conflict classification and staged analysis runs
- Report, usage and monitor persistence
- Analytics over stored reports
- Utility functions
"""

from src.analysis import (
    AnalysisRun,
    AnalysisRunner,
    AnalysisService,
    AnalyticsAggregator,
    ConflictClassifier,
    PairwiseAnalyzer,
)
from src.intake import DocumentIntake
from src.monitoring import MonitorRegistry
from src.storage import (
    MonitorRepository,
    RecordStore,
    ReportRepository,
    UsageRepository,
)

__all__ = [
    # Intake
    "DocumentIntake",
    # Analysis
    "ConflictClassifier",
    "PairwiseAnalyzer",
    "AnalysisRun",
    "AnalysisRunner",
    "AnalysisService",
    "AnalyticsAggregator",
    # Storage
    "RecordStore",
    "ReportRepository",
    "UsageRepository",
    "MonitorRepository",
    # Monitoring
    "MonitorRegistry",
]
