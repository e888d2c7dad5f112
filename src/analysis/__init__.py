"""
Analysis Layer - Conflict Detection & Reporting.

Pipeline:
1. Conflict Classifier - synthesizes conflicts for one document pair
2. Pairwise Analyzer - runs the classifier over every pair of a batch
3. Analysis Run - staged state machine that persists the final Report

Plus the analytics aggregator over stored reports.
"""

from src.analysis.analytics import (
    AnalyticsAggregator,
    AnalyticsSnapshot,
    ConflictTrend,
    DocumentTypeCount,
    ResolutionBreakdown,
    SeverityBreakdown,
)
from src.analysis.classifier import (
    ConflictClassifier,
    ConflictTemplate,
    DocumentCategory,
    categorize,
    matches_category,
)
from src.analysis.pairwise import PairwiseAnalyzer, iter_pairs
from src.analysis.run import (
    AnalysisRun,
    AnalysisRunError,
    AnalysisRunner,
    AnalysisRunStatus,
    AnalysisService,
    AnalysisStage,
)
from src.analysis.schemas import (
    AnalysisSensitivity,
    AnalysisSettings,
    Conflict,
    ConflictSeverity,
    ConflictSource,
    ConflictSources,
    ConflictStatus,
    ConflictType,
    Document,
    ExternalMonitor,
    MonitorFrequency,
    MonitorStatus,
    Report,
    ReportStatus,
    UsageStats,
    with_conflict_status,
)

__all__ = [
    # Classifier
    "ConflictClassifier",
    "ConflictTemplate",
    "DocumentCategory",
    "categorize",
    "matches_category",
    # Pairwise
    "PairwiseAnalyzer",
    "iter_pairs",
    # Runs
    "AnalysisRun",
    "AnalysisRunError",
    "AnalysisRunner",
    "AnalysisRunStatus",
    "AnalysisService",
    "AnalysisStage",
    # Analytics
    "AnalyticsAggregator",
    "AnalyticsSnapshot",
    "ConflictTrend",
    "DocumentTypeCount",
    "ResolutionBreakdown",
    "SeverityBreakdown",
    # Schemas
    "AnalysisSensitivity",
    "AnalysisSettings",
    "Conflict",
    "ConflictSeverity",
    "ConflictSource",
    "ConflictSources",
    "ConflictStatus",
    "ConflictType",
    "Document",
    "ExternalMonitor",
    "MonitorFrequency",
    "MonitorStatus",
    "Report",
    "ReportStatus",
    "UsageStats",
    "with_conflict_status",
]
