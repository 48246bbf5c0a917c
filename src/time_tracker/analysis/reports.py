"""Terminal rendering of stats and entry lists returned by the API."""

from datetime import datetime
from typing import Any, Optional

from rich.console import Console  # type: ignore[import-not-found]
from rich.panel import Panel  # type: ignore[import-not-found]
from rich.table import Table  # type: ignore[import-not-found]

from time_tracker.client.timer import format_duration
from time_tracker.core.models import parse_timestamp


def format_datetime(value: Optional[str]) -> str:
    """Format an ISO timestamp from the API for display."""
    if not value:
        return "-"
    dt: datetime = parse_timestamp(value)
    return dt.strftime("%Y-%m-%d %H:%M:%S")


class ReportGenerator:
    """Render API payloads with rich."""

    def __init__(self, console: Optional[Console] = None):
        """Initialize report generator.

        Args:
            console: Rich console for output. Creates default if None.
        """
        self.console = console or Console()

    def stats_report(self, stats: dict[str, Any]) -> None:
        """Display the ``/api/stats`` payload.

        Args:
            stats: Stats object as returned by the API
        """
        overview_table = Table(show_header=False, box=None, padding=(0, 2))
        overview_table.add_column(style="dim")
        overview_table.add_column(style="bold")

        overview_table.add_row("Today:", format_duration(stats["todayTotal"]))
        overview_table.add_row("This week:", format_duration(stats["weekTotal"]))
        overview_table.add_row("Entries today:", str(stats["todayEntries"]))
        overview_table.add_row("Total entries:", str(stats["totalEntries"]))
        overview_table.add_row("Projects:", str(stats["projectCount"]))

        self.console.print("\n[bold cyan]Time Tracker - Today[/bold cyan]\n")
        self.console.print(overview_table)
        self.console.print()

        active = stats.get("activeTimer")
        if active:
            self.console.print(
                f"[green]▶[/green] Running: {active.get('projectName') or active['projectId']} "
                f"since {format_datetime(active['startTime'])}"
            )
            self.console.print()

        breakdown = stats.get("projectBreakdown") or []
        if not breakdown:
            self.console.print("[yellow]No completed entries today[/yellow]")
            return

        today_total = stats["todayTotal"] or 0
        project_table = Table(title="Time by Project")
        project_table.add_column("Project", style="cyan")
        project_table.add_column("Entries", justify="right")
        project_table.add_column("Duration", style="magenta", justify="right")
        project_table.add_column("% Today", style="green", justify="right")
        project_table.add_column("Bar", style="blue")

        for item in breakdown:
            pct = (item["total"] / today_total) * 100 if today_total > 0 else 0
            bar = "█" * int(pct / 5)
            project_table.add_row(
                item["projectName"],
                str(item["entries"]),
                format_duration(item["total"]),
                f"{pct:.1f}%",
                bar,
            )

        self.console.print(project_table)

    def entries_table(self, entries: list[dict[str, Any]]) -> None:
        """Display a list of entries, newest first."""
        if not entries:
            self.console.print("[yellow]No time entries yet[/yellow]")
            return

        table = Table(title=f"Time Entries (showing {len(entries)})")
        table.add_column("Start", style="cyan")
        table.add_column("Duration", style="magenta")
        table.add_column("Project", style="bold")
        table.add_column("Description")
        table.add_column("ID", style="dim")

        for entry in entries:
            running = entry["status"] == "running"
            icon = "▶" if running else "■"
            table.add_row(
                format_datetime(entry["startTime"]),
                "running" if running else format_duration(entry["duration"]),
                f"{icon} {entry.get('projectName') or entry['projectId']}",
                entry.get("description") or "-",
                entry["id"][:8],
            )

        self.console.print(table)

    def running_panel(self, entry: dict[str, Any], now: datetime) -> None:
        """Display the running timer."""
        started = parse_timestamp(entry["startTime"])
        elapsed_ms = int((now - started).total_seconds() * 1000)
        content = (
            f"[bold]{entry.get('projectName') or entry['projectId']}[/bold]\n\n"
            f"[dim]Started:[/dim] {format_datetime(entry['startTime'])}\n"
            f"[dim]Elapsed:[/dim] {format_duration(elapsed_ms)}"
        )
        if entry.get("description"):
            content += f"\n[dim]Description:[/dim] {entry['description']}"
        content += f"\n[dim]Entry ID:[/dim] {entry['id']}"
        self.console.print(Panel(content, title="Currently Tracking", border_style="green"))
