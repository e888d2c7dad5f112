"""
FastAPI Application Entry Point.

Document Conflict Checker API.
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, AsyncGenerator

from fastapi import BackgroundTasks, Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from app.config import Settings, get_settings
from src.accounts import (
    EXPORT_FILENAME,
    IdentityProvider,
    StaticIdentityProvider,
    User,
    UserPreferences,
    build_export,
)
from src.analysis import (
    AnalysisRunner,
    AnalysisService,
    AnalysisSettings,
    AnalyticsAggregator,
    ConflictStatus,
    Document,
    MonitorFrequency,
    with_conflict_status,
)
from src.intake import DocumentIntake, IntakeError, UploadedFile, require_documents
from src.monitoring import MonitorRegistry
from src.storage import MonitorRepository, RecordStore, ReportRepository, UsageRepository
from src.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)
settings = get_settings()

API_VERSION = "0.1.0"


# ============================================================================
# Service Wiring
# ============================================================================


@dataclass
class Services:
    """Process-wide collaborators, constructed once and shared by reference."""

    store: RecordStore
    reports: ReportRepository
    usage: UsageRepository
    monitors: MonitorRepository
    registry: MonitorRegistry
    analysis: AnalysisService
    analytics: AnalyticsAggregator
    intake: DocumentIntake
    identity: IdentityProvider
    settings: Settings


def build_services(config: Settings, store: RecordStore | None = None) -> Services:
    """Wire repositories and services around one record store."""
    store = store if store is not None else RecordStore(config.store_path)
    usage = UsageRepository(store)
    reports = ReportRepository(store, usage)
    monitors = MonitorRepository(store)

    return Services(
        store=store,
        reports=reports,
        usage=usage,
        monitors=monitors,
        registry=MonitorRegistry(
            monitors,
            change_probability=config.monitor_change_probability,
        ),
        analysis=AnalysisService(
            reports,
            monitors,
            runner=AnalysisRunner(
                poll_interval=config.poll_interval_seconds,
                settle_delay=config.settle_delay_seconds,
            ),
            increment_range=config.increment_range,
            max_tracked_runs=config.max_tracked_runs,
        ),
        analytics=AnalyticsAggregator(
            reports,
            usage,
            trend_window_days=config.trend_window_days,
        ),
        intake=DocumentIntake(max_files=config.max_upload_files),
        identity=StaticIdentityProvider(),
        settings=config,
    )


@lru_cache
def get_services() -> Services:
    """Get the shared service container."""
    return build_services(get_settings())


# ============================================================================
# Request Models
# ============================================================================


class AnalysisRequest(BaseModel):
    documents: list[Document] = Field(default_factory=list)
    settings: AnalysisSettings | None = None


class ConflictUpdate(BaseModel):
    status: ConflictStatus
    notes: str | None = None


class MonitorCreate(BaseModel):
    url: str = Field(..., min_length=1)
    frequency: MonitorFrequency = MonitorFrequency.DAILY
    documents: list[Document] = Field(default_factory=list)


class MonitorCheckRequest(BaseModel):
    changed: bool | None = Field(
        default=None,
        description="Change signal from the poller; simulated when omitted",
    )


class ExportRequest(BaseModel):
    user: User | None = None
    settings: UserPreferences | None = None


def _dump(model: BaseModel) -> dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True)


# ============================================================================
# Application
# ============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan events."""
    # Startup
    setup_logging(settings.log_level)
    logger.info("Starting Document Conflict Checker API...")
    logger.info(f"Record store: {settings.store_path}")
    settings.ensure_directories()
    yield
    # Shutdown
    logger.info("Shutting down Document Conflict Checker API...")


app = FastAPI(
    title="Document Conflict Checker",
    description="Detects contradictions, overlaps and inconsistencies across uploaded documents",
    version=API_VERSION,
    lifespan=lifespan,
)

# CORS middleware for frontend integration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "version": API_VERSION}


@app.get("/config")
async def get_config(services: Services = Depends(get_services)) -> dict[str, Any]:
    """Get current configuration (non-sensitive values only)."""
    config = services.settings
    return {
        "max_upload_files": config.max_upload_files,
        "default_sensitivity": config.default_sensitivity.value,
        "poll_interval_seconds": config.poll_interval_seconds,
        "settle_delay_seconds": config.settle_delay_seconds,
        "trend_window_days": config.trend_window_days,
    }


# ============================================================================
# Intake & Analysis Runs
# ============================================================================


@app.post("/documents")
async def intake_documents(
    files: list[UploadedFile],
    existing_count: int = 0,
    services: Services = Depends(get_services),
) -> dict[str, Any]:
    """
    Validate uploaded file metadata and return Document records.

    The whole batch is rejected if any file is unsupported.
    """
    try:
        documents = services.intake.accept(files, existing_count=existing_count)
    except IntakeError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {"status": "success", "documents": [_dump(d) for d in documents]}


@app.post("/analyses")
async def start_analysis(
    request: AnalysisRequest,
    background_tasks: BackgroundTasks,
    services: Services = Depends(get_services),
) -> dict[str, Any]:
    """
    Start a staged analysis run over a document batch.

    The run advances in the background; poll GET /analyses/{run_id}.
    """
    try:
        require_documents(request.documents)
        services.intake.validate(request.documents)
    except IntakeError as e:
        raise HTTPException(status_code=400, detail=str(e))

    run_settings = request.settings or AnalysisSettings(
        analysis_sensitivity=services.settings.default_sensitivity,
    )
    run = services.analysis.create_run(request.documents, run_settings)
    background_tasks.add_task(services.analysis.execute, run)

    logger.info(f"Analysis run {run.run_id} queued for {len(request.documents)} documents")
    return {"status": "accepted", "run": _dump(run.snapshot())}


@app.get("/analyses/{run_id}")
async def get_analysis(run_id: str, services: Services = Depends(get_services)) -> dict[str, Any]:
    """Current stage and progress of a run."""
    run = services.analysis.get_run(run_id)
    if run is None:
        raise HTTPException(status_code=404, detail=f"Analysis run not found: {run_id}")
    return _dump(run.snapshot())


@app.delete("/analyses/{run_id}")
async def cancel_analysis(run_id: str, services: Services = Depends(get_services)) -> dict[str, Any]:
    """Cancel a run that has not produced its report yet."""
    run = services.analysis.get_run(run_id)
    if run is None:
        raise HTTPException(status_code=404, detail=f"Analysis run not found: {run_id}")
    if not services.analysis.cancel(run_id):
        raise HTTPException(status_code=409, detail="Analysis run already finished")
    return {"status": "cancelled", "run": _dump(run.snapshot())}


# ============================================================================
# Reports & Conflict Lifecycle
# ============================================================================


@app.get("/reports")
async def list_reports(services: Services = Depends(get_services)) -> dict[str, Any]:
    """All reports, newest first."""
    reports = sorted(services.reports.list_all(), key=lambda r: r.created_at, reverse=True)
    return {
        "status": "success",
        "count": len(reports),
        "reports": [
            {
                "id": r.id,
                "createdAt": r.created_at.isoformat(),
                "status": r.status.value,
                "totalConflicts": r.total_conflicts,
                "documents": [d.name for d in r.documents],
                "summary": r.to_summary(),
            }
            for r in reports
        ],
    }


@app.get("/reports/{report_id}")
async def get_report(report_id: str, services: Services = Depends(get_services)) -> dict[str, Any]:
    report = services.reports.get_by_id(report_id)
    if report is None:
        raise HTTPException(status_code=404, detail=f"Report not found: {report_id}")
    return _dump(report)


@app.patch("/reports/{report_id}/conflicts/{conflict_id}")
async def update_conflict(
    report_id: str,
    conflict_id: str,
    change: ConflictUpdate,
    services: Services = Depends(get_services),
) -> dict[str, Any]:
    """Set a conflict's status (any transition) and notes."""
    report = services.reports.get_by_id(report_id)
    if report is None:
        raise HTTPException(status_code=404, detail=f"Report not found: {report_id}")
    if report.get_conflict(conflict_id) is None:
        raise HTTPException(status_code=404, detail=f"Conflict not found: {conflict_id}")

    updated = with_conflict_status(report, conflict_id, change.status, change.notes)
    services.reports.update(report_id, updated)

    logger.info(f"Conflict {conflict_id} in report {report_id} -> {change.status.value}")
    return _dump(updated.get_conflict(conflict_id))


# ============================================================================
# Usage & Analytics
# ============================================================================


@app.get("/usage")
async def get_usage(services: Services = Depends(get_services)) -> dict[str, Any]:
    return _dump(services.usage.get())


@app.get("/analytics")
async def get_analytics(services: Services = Depends(get_services)) -> dict[str, Any]:
    """Severity, resolution, trend and document-type statistics."""
    return _dump(services.analytics.snapshot())


# ============================================================================
# External Monitors
# ============================================================================


@app.get("/monitors")
async def list_monitors(services: Services = Depends(get_services)) -> dict[str, Any]:
    monitors = services.registry.list_all()
    return {
        "status": "success",
        "count": len(monitors),
        "monitors": [_dump(m) for m in monitors],
    }


@app.post("/monitors")
async def create_monitor(
    request: MonitorCreate,
    services: Services = Depends(get_services),
) -> dict[str, Any]:
    if request.documents:
        try:
            services.intake.validate(request.documents)
        except IntakeError as e:
            raise HTTPException(status_code=400, detail=str(e))

    monitor = services.registry.add(request.url, request.frequency, request.documents)
    return _dump(monitor)


@app.delete("/monitors/{monitor_id}")
async def delete_monitor(monitor_id: str, services: Services = Depends(get_services)) -> dict[str, Any]:
    """Delete a monitor. Unknown ids are a no-op."""
    deleted = services.registry.delete(monitor_id)
    return {"status": "success", "deleted": deleted}


@app.post("/monitors/{monitor_id}/toggle")
async def toggle_monitor(monitor_id: str, services: Services = Depends(get_services)) -> dict[str, Any]:
    monitor = services.registry.toggle(monitor_id)
    if monitor is None:
        raise HTTPException(status_code=404, detail=f"Monitor not found: {monitor_id}")
    return _dump(monitor)


@app.post("/monitors/{monitor_id}/check")
async def check_monitor(
    monitor_id: str,
    background_tasks: BackgroundTasks,
    request: MonitorCheckRequest | None = None,
    services: Services = Depends(get_services),
) -> dict[str, Any]:
    """
    Force a check of a monitored URL.

    A detected change re-analyzes the documents attached to the monitor.
    """
    changed = request.changed if request else None
    check = services.registry.force_check(monitor_id, changed=changed)
    if check is None:
        raise HTTPException(status_code=404, detail=f"Monitor not found: {monitor_id}")

    run_id = None
    if check.changed:
        run = services.analysis.trigger_from_monitor(monitor_id)
        if run is not None:
            background_tasks.add_task(services.analysis.execute, run)
            run_id = run.run_id

    return {
        "status": "success",
        "changed": check.changed,
        "run_id": run_id,
        "monitor": _dump(check.monitor),
    }


# ============================================================================
# Export
# ============================================================================


@app.post("/export")
async def export_data(
    request: ExportRequest | None = None,
    services: Services = Depends(get_services),
) -> JSONResponse:
    """Downloadable snapshot of the user profile and preferences."""
    user = request.user if request and request.user else services.identity.current_user()
    preferences = request.settings if request else None

    snapshot = build_export(user, preferences)
    return JSONResponse(
        content=_dump(snapshot),
        headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True,
    )
