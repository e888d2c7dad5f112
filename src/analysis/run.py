"""
Analysis Run - Staged Conflict Analysis Pipeline.

An explicit finite-state machine that advances through fixed analysis
stages on each tick, then finalizes into a persisted Report. The FSM
never sleeps itself: tests single-step it with `tick()`, and the async
`AnalysisRunner` drives it with cooperative sleeps.
"""

import asyncio
import random
from collections import OrderedDict
from enum import Enum
from typing import TYPE_CHECKING, Callable, Sequence

from pydantic import BaseModel, Field

from src.analysis.pairwise import PairwiseAnalyzer
from src.analysis.schemas import AnalysisSettings, Document, Report
from src.utils.ids import Clock, RandomSource, new_token, utc_now
from src.utils.logger import LogContext, get_logger

if TYPE_CHECKING:
    from src.storage.repositories import MonitorRepository, ReportRepository

logger = get_logger(__name__)

DEFAULT_INCREMENT_RANGE = (8.0, 20.0)
DEFAULT_POLL_INTERVAL = 1.2
DEFAULT_SETTLE_DELAY = 2.0
DEFAULT_MAX_TRACKED_RUNS = 100


class AnalysisRunError(Exception):
    """Raised when a run is finalized out of order or after cancellation."""
    pass


class AnalysisStage(str, Enum):
    """Stages of an analysis run, in order."""

    INITIALIZING = "initializing"
    READING_METADATA = "reading_metadata"
    ANALYZING_CONTENT = "analyzing_content"
    COMPARING_STRUCTURES = "comparing_structures"
    IDENTIFYING_CONFLICTS = "identifying_conflicts"
    GENERATING_RECOMMENDATIONS = "generating_recommendations"
    FINALIZING = "finalizing"
    COMPLETE = "complete"

    @property
    def label(self) -> str:
        return STAGE_LABELS[self]


STAGES: tuple[AnalysisStage, ...] = tuple(AnalysisStage)

STAGE_LABELS = {
    AnalysisStage.INITIALIZING: "Initializing analysis...",
    AnalysisStage.READING_METADATA: "Reading document metadata...",
    AnalysisStage.ANALYZING_CONTENT: "Analyzing document types and content...",
    AnalysisStage.COMPARING_STRUCTURES: "Comparing document structures...",
    AnalysisStage.IDENTIFYING_CONFLICTS: "Identifying potential conflicts...",
    AnalysisStage.GENERATING_RECOMMENDATIONS: "Generating AI recommendations...",
    AnalysisStage.FINALIZING: "Finalizing comprehensive report...",
    AnalysisStage.COMPLETE: "Analysis complete!",
}


def stage_for_progress(progress: float) -> AnalysisStage:
    """Stage whose threshold (index / 7 * 100) was last crossed."""
    if progress >= 100:
        return AnalysisStage.COMPLETE
    last = len(STAGES) - 1
    index = int(max(progress, 0.0) * last / 100)
    return STAGES[min(index, last - 1)]


class AnalysisRunStatus(BaseModel):
    """Point-in-time view of a run."""

    run_id: str
    stage: AnalysisStage
    label: str
    progress: float = Field(..., ge=0.0, le=100.0)
    document_count: int
    cancelled: bool = False
    report_id: str | None = None


class AnalysisRun:
    """
    One analysis of a document batch.

    Progress only grows, stages only move forward, and at most one
    Report is persisted per run.

    Usage:
        run = AnalysisRun(documents, reports)
        while not run.is_complete:
            run.tick()
        report = run.finalize()
    """

    def __init__(
        self,
        documents: Sequence[Document],
        reports: "ReportRepository",
        analyzer: PairwiseAnalyzer | None = None,
        settings: AnalysisSettings | None = None,
        rng: RandomSource | None = None,
        clock: Clock | None = None,
        increment_range: tuple[float, float] = DEFAULT_INCREMENT_RANGE,
        run_id: str | None = None,
    ) -> None:
        """
        Initialize the run.

        Args:
            documents: Batch handed over by intake (not mutated)
            reports: Where the finished report is saved
            analyzer: Pairwise analyzer (default classifier if omitted)
            settings: Batch settings (sensitivity is forwarded)
            rng: Random source for progress increments and ids
            clock: Clock for report timestamps
            increment_range: Bounds of each progress step
            run_id: Explicit id (fresh token if omitted)
        """
        self.rng = rng or random.Random()
        self.clock = clock or utc_now
        self.documents: tuple[Document, ...] = tuple(documents)
        self.reports = reports
        self.analyzer = analyzer or PairwiseAnalyzer()
        self.settings = settings or AnalysisSettings()
        self.increment_range = increment_range
        self.run_id = run_id or new_token(rng=self.rng, clock=self.clock)

        self.progress: float = 0.0
        self.cancelled = False
        self.report: Report | None = None

    @property
    def stage(self) -> AnalysisStage:
        return stage_for_progress(self.progress)

    @property
    def is_complete(self) -> bool:
        return self.progress >= 100

    @property
    def is_finished(self) -> bool:
        """True once a report was saved or the run was cancelled."""
        return self.report is not None or self.cancelled

    def tick(self) -> AnalysisStage:
        """Advance progress by one random increment, clamped at 100."""
        if self.cancelled or self.is_complete:
            return self.stage

        previous = self.stage
        low, high = self.increment_range
        self.progress = min(100.0, self.progress + self.rng.uniform(low, high))

        if self.stage != previous:
            logger.debug(f"Run {self.run_id}: {self.stage.label} ({self.progress:.0f}%)")

        return self.stage

    def run_to_completion(self) -> Report:
        """Tick until complete and finalize, without waiting."""
        while not self.is_complete:
            if self.cancelled:
                raise AnalysisRunError(f"Run {self.run_id} was cancelled")
            self.tick()
        return self.finalize()

    def cancel(self) -> None:
        """Stop the run. A cancelled run never persists a report."""
        if self.report is not None:
            return
        self.cancelled = True
        logger.info(f"Run {self.run_id} cancelled at {self.progress:.0f}%")

    def finalize(self) -> Report:
        """
        Analyze the batch and persist the report.

        Any failure while classifying, assembling or saving falls back
        once to an empty, completed report.

        Returns:
            The saved report (the same one on repeated calls)

        Raises:
            AnalysisRunError: If the run is cancelled or not at 100%
        """
        if self.report is not None:
            return self.report
        if self.cancelled:
            raise AnalysisRunError(f"Run {self.run_id} was cancelled")
        if not self.is_complete:
            raise AnalysisRunError(
                f"Run {self.run_id} cannot finalize at {self.progress:.0f}% progress"
            )

        with LogContext(logger, run_id=self.run_id):
            try:
                conflicts = self.analyzer.analyze_batch(
                    self.documents,
                    self.settings.analysis_sensitivity,
                )
                report = Report.from_conflicts(
                    new_token(rng=self.rng, clock=self.clock),
                    list(self.documents),
                    conflicts,
                    created_at=self.clock(),
                )
                self.reports.save(report)
            except Exception:
                logger.exception(f"Analysis failed for run {self.run_id}; saving empty report")
                report = Report.from_conflicts(
                    new_token(rng=self.rng, clock=self.clock),
                    list(self.documents),
                    [],
                    created_at=self.clock(),
                )
                self.reports.save(report)

        self.report = report
        logger.info(
            f"Run {self.run_id} finished: report {report.id} "
            f"({report.total_conflicts} conflicts, {report.status.value})"
        )
        return report

    def snapshot(self) -> AnalysisRunStatus:
        stage = self.stage
        return AnalysisRunStatus(
            run_id=self.run_id,
            stage=stage,
            label=stage.label,
            progress=round(self.progress, 1),
            document_count=len(self.documents),
            cancelled=self.cancelled,
            report_id=self.report.id if self.report else None,
        )


class AnalysisRunner:
    """
    Cooperative async driver for an AnalysisRun.

    Sleeps `poll_interval` between ticks and `settle_delay` once the
    run reaches 100%, then finalizes. Task cancellation cancels the run.
    """

    def __init__(
        self,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        settle_delay: float = DEFAULT_SETTLE_DELAY,
        on_progress: Callable[[AnalysisRunStatus], None] | None = None,
    ) -> None:
        self.poll_interval = poll_interval
        self.settle_delay = settle_delay
        self.on_progress = on_progress

    async def drive(self, run: AnalysisRun) -> Report | None:
        """
        Drive `run` to a persisted report.

        Returns:
            The report, or None if the run was cancelled meanwhile
        """
        logger.info(f"Starting analysis run {run.run_id} over {len(run.documents)} documents")

        try:
            while not run.is_complete:
                if run.cancelled:
                    return None
                await asyncio.sleep(self.poll_interval)
                if run.cancelled:
                    return None
                run.tick()
                if self.on_progress:
                    self.on_progress(run.snapshot())

            await asyncio.sleep(self.settle_delay)
            if run.cancelled:
                return None
            # Store writes block, so keep them off the event loop
            return await asyncio.to_thread(run.finalize)

        except asyncio.CancelledError:
            run.cancel()
            raise


class AnalysisService:
    """
    Creates and tracks analysis runs.

    The run table keeps at most `max_tracked_runs` entries. Finished and
    cancelled runs are evicted oldest-first; runs still in flight are kept.

    Usage:
        service = AnalysisService(reports, monitors)
        run = service.create_run(documents)
        report = await service.execute(run)
    """

    def __init__(
        self,
        reports: "ReportRepository",
        monitors: "MonitorRepository | None" = None,
        analyzer: PairwiseAnalyzer | None = None,
        runner: AnalysisRunner | None = None,
        rng: RandomSource | None = None,
        clock: Clock | None = None,
        increment_range: tuple[float, float] = DEFAULT_INCREMENT_RANGE,
        max_tracked_runs: int = DEFAULT_MAX_TRACKED_RUNS,
    ) -> None:
        self.reports = reports
        self.monitors = monitors
        self.analyzer = analyzer or PairwiseAnalyzer()
        self.runner = runner or AnalysisRunner()
        self.rng = rng or random.Random()
        self.clock = clock or utc_now
        self.increment_range = increment_range
        self.max_tracked_runs = max_tracked_runs
        self._runs: OrderedDict[str, AnalysisRun] = OrderedDict()

    def create_run(
        self,
        documents: Sequence[Document],
        settings: AnalysisSettings | None = None,
    ) -> AnalysisRun:
        """Register a new run without starting it."""
        run = AnalysisRun(
            documents,
            self.reports,
            analyzer=self.analyzer,
            settings=settings,
            rng=self.rng,
            clock=self.clock,
            increment_range=self.increment_range,
        )
        self._runs[run.run_id] = run
        self._evict_finished()
        return run

    async def execute(self, run: AnalysisRun) -> Report | None:
        return await self.runner.drive(run)

    def get_run(self, run_id: str) -> AnalysisRun | None:
        return self._runs.get(run_id)

    @property
    def tracked_runs(self) -> int:
        return len(self._runs)

    def _evict_finished(self) -> None:
        excess = len(self._runs) - self.max_tracked_runs
        if excess <= 0:
            return

        stale = [run_id for run_id, run in self._runs.items() if run.is_finished][:excess]
        for run_id in stale:
            del self._runs[run_id]
        if stale:
            logger.debug(f"Evicted {len(stale)} finished runs from the run table")

    def cancel(self, run_id: str) -> bool:
        run = self._runs.get(run_id)
        if run is None or run.report is not None:
            return False
        run.cancel()
        return True

    def trigger_from_monitor(
        self,
        monitor_id: str,
        settings: AnalysisSettings | None = None,
    ) -> AnalysisRun | None:
        """
        Create a run for the documents attached to a changed monitor.

        Returns:
            The new run, or None if the monitor is unknown or has no documents
        """
        if self.monitors is None:
            return None

        monitor = self.monitors.get_by_id(monitor_id)
        if monitor is None or not monitor.documents:
            logger.info(f"Monitor {monitor_id} has no documents to re-analyze")
            return None

        logger.info(f"Monitor {monitor_id} changed; re-analyzing {len(monitor.documents)} documents")
        return self.create_run(monitor.documents, settings)
