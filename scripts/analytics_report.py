#!/usr/bin/env python3
"""
CLI Script for Report Analytics.

Usage:
    python scripts/analytics_report.py
    python scripts/analytics_report.py --store ./data/doc_checker.json --days 7
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from rich.console import Console
from rich.table import Table

from app.config import get_settings
from src.analysis import AnalyticsAggregator
from src.storage import RecordStore, ReportRepository, UsageRepository

console = Console()


def show_analytics(store_path: Path, days: int) -> None:
    """Print usage counters and derived statistics for a record store."""
    store = RecordStore(store_path)
    reports = ReportRepository(store, UsageRepository(store))
    analytics = AnalyticsAggregator(reports, trend_window_days=days)
    snapshot = analytics.snapshot()

    usage_table = Table(title="Usage")
    usage_table.add_column("Metric", style="cyan")
    usage_table.add_column("Value", style="green", justify="right")
    usage_table.add_row("Documents analyzed", str(snapshot.usage.documents_analyzed))
    usage_table.add_row("Reports generated", str(snapshot.usage.reports_generated))
    usage_table.add_row("Open conflicts (recorded)", str(snapshot.usage.open_conflicts))
    usage_table.add_row("Open conflicts (current)", str(snapshot.live_open_conflicts))
    console.print(usage_table)

    severity_table = Table(title="Severity")
    severity_table.add_column("Severity", style="cyan")
    severity_table.add_column("Count", justify="right")
    severity_table.add_row("[red bold]High[/]", str(snapshot.severity.high))
    severity_table.add_row("[yellow]Medium[/]", str(snapshot.severity.medium))
    severity_table.add_row("[dim]Low[/]", str(snapshot.severity.low))
    severity_table.add_row("Total", str(snapshot.severity.total))
    console.print(severity_table)

    resolution = snapshot.resolution
    console.print(
        f"\n[bold]Resolution:[/] {resolution.resolved} resolved, "
        f"{resolution.open} open, {resolution.ignored} ignored "
        f"({snapshot.resolution_rate:.0%} resolved)"
    )

    trend = snapshot.trend
    console.print(
        f"[bold]Last {trend.window_days} days:[/] {trend.total_reports} reports, "
        f"{trend.total_conflicts} conflicts, "
        f"{trend.avg_conflicts_per_report} per report on average"
    )

    if snapshot.document_types:
        type_table = Table(title="Document Types")
        type_table.add_column("Extension", style="cyan")
        type_table.add_column("Documents", justify="right")
        for entry in snapshot.document_types:
            type_table.add_row(entry.type.upper(), str(entry.count))
        console.print(type_table)
    else:
        console.print("\n[yellow]No reports stored yet.[/]")


def main() -> None:
    """Main entry point."""
    settings = get_settings()

    parser = argparse.ArgumentParser(
        description="Show analytics over stored conflict reports"
    )
    parser.add_argument(
        "--store",
        type=Path,
        default=settings.store_path,
        help=f"Record store file (default: {settings.store_path})",
    )
    parser.add_argument(
        "--days",
        type=int,
        default=settings.trend_window_days,
        help=f"Trend window in days (default: {settings.trend_window_days})",
    )

    args = parser.parse_args()

    if not args.store.exists():
        console.print(f"[red]Record store not found: {args.store}[/]")
        sys.exit(1)

    show_analytics(args.store, args.days)


if __name__ == "__main__":
    main()
