#!/usr/bin/env python3
"""
CLI Script for Conflict Detection.

Usage:
    python scripts/detect_conflicts.py leave_policy.pdf hr_handbook.docx
    python scripts/detect_conflicts.py a.pdf b.pdf c.txt --sensitivity low --fast
"""

import argparse
import asyncio
import mimetypes
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

console = Console()

SEVERITY_STYLES = {
    "high": "red bold",
    "medium": "yellow",
    "low": "dim",
}


def describe_files(paths: list[Path]) -> list:
    """Build upload metadata for local files."""
    from src.intake import UploadedFile

    files = []
    for path in paths:
        mime_type, _ = mimetypes.guess_type(path.name)
        size = path.stat().st_size if path.exists() else 0
        files.append(UploadedFile(name=path.name, size=size, type=mime_type or ""))
    return files


async def run_detection(
    paths: list[Path],
    sensitivity: str,
    store_path: Path | None,
    fast: bool,
) -> None:
    """Run the analysis pipeline over local files."""
    from app.config import get_settings
    from src.analysis import AnalysisRun, AnalysisRunner, AnalysisSensitivity, AnalysisSettings
    from src.intake import DocumentIntake, IntakeError, require_documents
    from src.storage import RecordStore, ReportRepository, UsageRepository

    settings = get_settings()

    store = RecordStore(store_path)
    reports = ReportRepository(store, UsageRepository(store))

    intake = DocumentIntake(max_files=settings.max_upload_files)
    try:
        documents = intake.accept(describe_files(paths))
        require_documents(documents)
    except IntakeError as e:
        console.print(f"[red]{e}[/]")
        sys.exit(1)

    console.print(f"\n[bold blue]Analyzing {len(documents)} documents...[/]")
    for doc in documents:
        console.print(f"  {doc.name} [dim]({doc.type or 'unknown type'}, {doc.size} bytes)[/]")

    run = AnalysisRun(
        documents,
        reports,
        settings=AnalysisSettings(analysis_sensitivity=AnalysisSensitivity(sensitivity)),
        increment_range=settings.increment_range,
    )

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
        console=console,
    ) as progress:
        task = progress.add_task(run.stage.label, total=100)

        def on_progress(status) -> None:
            progress.update(task, completed=status.progress, description=status.label)

        if fast:
            runner = AnalysisRunner(poll_interval=0, settle_delay=0, on_progress=on_progress)
        else:
            runner = AnalysisRunner(
                poll_interval=settings.poll_interval_seconds,
                settle_delay=settings.settle_delay_seconds,
                on_progress=on_progress,
            )
        report = await runner.drive(run)

    if report is None:
        console.print("[yellow]Analysis cancelled.[/]")
        return

    # Display results
    console.print("\n[bold green]" + "=" * 60 + "[/]")
    console.print("[bold green]CONFLICT ANALYSIS REPORT[/]")
    console.print("[bold green]" + "=" * 60 + "[/]")

    console.print(f"\n{report.to_summary()}")

    if not report.conflicts:
        console.print("\n[green]✓ No conflicts detected between documents.[/]")
        return

    table = Table(title="Conflicts", show_header=True, header_style="bold red")
    table.add_column("#", style="dim", width=3)
    table.add_column("Severity", width=10)
    table.add_column("Type", width=14)
    table.add_column("Title", width=40)
    table.add_column("Documents", width=40)

    for i, conflict in enumerate(report.conflicts, 1):
        severity_style = SEVERITY_STYLES.get(conflict.severity.value, "white")
        table.add_row(
            str(i),
            f"[{severity_style}]{conflict.severity.value.upper()}[/]",
            conflict.conflict_type.value.title(),
            conflict.title,
            f"{conflict.documents.source1.name} vs {conflict.documents.source2.name}",
        )

    console.print(table)

    console.print("\n[bold]Detailed Findings:[/]\n")
    for i, conflict in enumerate(report.conflicts, 1):
        source1 = conflict.documents.source1
        source2 = conflict.documents.source2
        console.print(Panel(
            f"[bold]{conflict.description}[/]\n\n"
            f"**{source1.name} (Page {source1.page}, Line {source1.line}):**\n"
            f"  {source1.text}\n\n"
            f"**{source2.name} (Page {source2.page}, Line {source2.line}):**\n"
            f"  {source2.text}\n\n"
            f"**Suggestion:** {conflict.suggestion}",
            title=f"[red]#{i} {conflict.title}[/]",
            border_style="red" if conflict.severity.value == "high" else "yellow",
        ))

    if store_path:
        console.print(f"\n[dim]Report {report.id} saved to {store_path}[/]")


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Detect conflicts across documents"
    )
    parser.add_argument(
        "files",
        type=Path,
        nargs="+",
        help="Documents to analyze (PDF, DOCX, TXT, PPT)",
    )
    parser.add_argument(
        "--sensitivity", "-s",
        choices=["low", "medium", "high"],
        default="medium",
        help="Analysis sensitivity (default: medium)",
    )
    parser.add_argument(
        "--store",
        type=Path,
        default=None,
        help="Record store file to save the report into (in-memory if omitted)",
    )
    parser.add_argument(
        "--fast",
        action="store_true",
        help="Skip the pacing delays between stages",
    )

    args = parser.parse_args()

    console.print("[bold]Document Conflict Checker[/]")
    console.print("=" * 50)
    console.print(f"Documents to analyze: {len(args.files)}")

    asyncio.run(run_detection(
        args.files,
        args.sensitivity,
        args.store,
        args.fast,
    ))


if __name__ == "__main__":
    main()
