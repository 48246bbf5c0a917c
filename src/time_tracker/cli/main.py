"""Main CLI application."""

import json
import sys
from pathlib import Path
from typing import Any, NoReturn, Optional

import click
from rich.console import Console
from rich.table import Table

from time_tracker import __version__
from time_tracker.analysis.reports import ReportGenerator
from time_tracker.cli.config_commands import config, load_config
from time_tracker.client.api import ApiError, TrackerClient
from time_tracker.client.timer import (
    TimerError,
    TimerSession,
    TimerState,
    format_duration,
    format_elapsed,
)
from time_tracker.core.log import setup_logging
from time_tracker.core.models import now_local

console = Console()
error_console = Console(stderr=True)


def get_client(ctx: click.Context) -> TrackerClient:
    """Get an API client for ``--server`` or ``client.base_url``."""
    if "client" not in ctx.obj:
        config_mgr = load_config(ctx)
        ctx.obj["client"] = TrackerClient(
            base_url=ctx.obj.get("server") or config_mgr.get("client.base_url"),
            timeout=config_mgr.get("client.timeout", 10.0),
        )
    client: TrackerClient = ctx.obj["client"]
    return client


def fail(message: Any) -> NoReturn:
    """Print an error and exit with status 1."""
    error_console.print(f"[red]Error:[/red] {message}")
    sys.exit(1)


def resolve_project(client: TrackerClient, project: str) -> dict[str, Any]:
    """Find a project by id or by exact name."""
    for item in client.list_projects():
        if project in (item["id"], item["name"]):
            return item
    fail(f"Unknown project: {project}")


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "config_path", help="Path to config file", type=click.Path())
@click.option("--server", help="API server URL (default: client.base_url)")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Optional[str],
    server: Optional[str],
    verbose: bool,
    no_color: bool,
) -> None:
    """Time Tracker - project timers backed by a small JSON API.

    Run the server with `time-tracker serve`, then track time from here,
    the web client or the browser extension.
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["server"] = server

    if no_color:
        console.no_color = True

    try:
        setup_logging(load_config(ctx), level="DEBUG" if verbose else None)
    except ValueError as e:
        fail(e)


cli.add_command(config)


@cli.command()
@click.option("--host", default=None, help="Host address (default: from config)")
@click.option("--port", type=int, default=None, help="Port number (default: from config)")
@click.option("--reload", is_flag=True, help="Enable auto-reload for development")
@click.pass_context
def serve(ctx: click.Context, host: Optional[str], port: Optional[int], reload: bool) -> None:
    """Start the API server.

    Examples:
        time-tracker serve
        time-tracker serve --host 0.0.0.0 --port 8080
    """
    from time_tracker.api.server import run_server

    config_mgr = load_config(ctx)
    final_host = host or config_mgr.get("api.host", "localhost")
    final_port = port or config_mgr.get("api.port", 3000)

    console.print("🚀 Starting Time Tracker API server...")
    console.print(f"   URL: http://{final_host}:{final_port}")
    console.print(f"   Docs: http://{final_host}:{final_port}/docs")
    console.print(f"   Data: {config_mgr.data_dir}")

    try:
        run_server(host=final_host, port=final_port, reload=reload, config=config_mgr)
    except KeyboardInterrupt:
        console.print("\n👋 Shutting down API server...")


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def projects(ctx: click.Context, as_json: bool) -> None:
    """List projects."""
    try:
        items = get_client(ctx).list_projects()
    except ApiError as e:
        fail(e)

    if as_json:
        print(json.dumps(items, indent=2))
        return

    table = Table(title="Projects")
    table.add_column("Name", style="bold")
    table.add_column("Color")
    table.add_column("ID", style="dim")
    for item in items:
        table.add_row(item["name"], f"[{item['color']}]●[/] {item['color']}", item["id"])
    console.print(table)


@cli.command("add-project")
@click.argument("name")
@click.option("--color", help="Hex color, e.g. #9b59b6")
@click.pass_context
def add_project(ctx: click.Context, name: str, color: Optional[str]) -> None:
    """Create a project.

    Example:
        time-tracker add-project "Research" --color "#9b59b6"
    """
    try:
        project = get_client(ctx).create_project(name, color)
    except ApiError as e:
        fail(e)
    console.print(f"[green]✓[/green] Project added: {project['name']} ({project['id']})")


@cli.command()
@click.option("-n", "--count", default=10, help="Number of entries to show")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def entries(ctx: click.Context, count: int, as_json: bool) -> None:
    """List recent time entries."""
    try:
        items = get_client(ctx).list_entries(limit=count)
    except ApiError as e:
        fail(e)

    if as_json:
        print(json.dumps(items, indent=2))
        return
    ReportGenerator(console).entries_table(items)


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def stats(ctx: click.Context, as_json: bool) -> None:
    """Show today's and this week's totals."""
    try:
        data = get_client(ctx).stats()
    except ApiError as e:
        fail(e)

    if as_json:
        print(json.dumps(data, indent=2))
        return
    ReportGenerator(console).stats_report(data)


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show the running timer, if any."""
    try:
        data = get_client(ctx).status()
    except ApiError as e:
        fail(e)

    if not data["isRunning"]:
        console.print("[yellow]No timer running[/yellow]")
        console.print('\nStart one with: [cyan]time-tracker start "Project name"[/cyan]')
        return
    ReportGenerator(console).running_panel(data["activeTimer"], now_local())


@cli.command()
@click.argument("project")
@click.option("-d", "--description", help="Description for the entry")
@click.pass_context
def start(ctx: click.Context, project: str, description: Optional[str]) -> None:
    """Start the server-side timer, stopping any running one.

    Example:
        time-tracker start "Client A - Bookkeeping" -d "Invoices"
    """
    client = get_client(ctx)
    try:
        target = resolve_project(client, project)
        result = client.start_timer(target["id"], description)
    except ApiError as e:
        fail(e)

    stopped = result.get("stoppedEntry")
    if stopped:
        console.print(
            f"[yellow]⏹[/yellow]  Stopped: {stopped.get('projectName')} "
            f"({format_duration(stopped['duration'])})"
        )
    console.print(f"[green]▶[/green]  Started: {target['name']}")


@cli.command()
@click.option("-d", "--description", help="Description for the entry")
@click.pass_context
def stop(ctx: click.Context, description: Optional[str]) -> None:
    """Stop the server-side timer."""
    try:
        result = get_client(ctx).stop_timer(description)
    except ApiError as e:
        fail(e)

    entry = result["entry"]
    console.print(f"[green]✓[/green] Stopped: {entry.get('projectName') or entry['projectId']}")
    console.print(f"  Duration: {format_duration(entry['duration'])}")


@cli.command()
@click.argument("project")
@click.option("-d", "--description", help="Description for the saved entry")
@click.pass_context
def track(ctx: click.Context, project: str, description: Optional[str]) -> None:
    """Run a local timer and save it as an entry when stopped.

    Type `p` + Enter to pause or resume, `s` + Enter (or Ctrl+C) to stop.

    Example:
        time-tracker track "Client B - Tax Prep"
    """
    client = get_client(ctx)
    config_mgr = load_config(ctx)
    try:
        target = resolve_project(client, project)
    except ApiError as e:
        fail(e)

    session = TimerSession(
        client,
        tick_interval=config_mgr.get("client.tick_interval", 1.0),
        on_tick=lambda ms: console.print(f"⏱  {format_elapsed(ms)}", end="\r"),
    )
    session.start(target["id"])
    console.print(f"[green]▶[/green]  Tracking: {target['name']}")
    console.print("   [bold]p[/bold] pause/resume, [bold]s[/bold] stop")

    stdin = click.get_text_stream("stdin")
    try:
        while True:
            line = stdin.readline()
            command = line.strip().lower()
            if not line or command in ("s", "stop", "q"):
                break
            try:
                if command in ("p", "pause"):
                    if session.state is TimerState.RUNNING:
                        session.pause()
                        console.print(f"⏸  Paused at {session.display}")
                    else:
                        session.start()
                        console.print(f"▶  Resumed at {session.display}")
            except TimerError as e:
                error_console.print(f"[red]Error:[/red] {e}")
    except KeyboardInterrupt:
        console.print()

    elapsed = session.display
    try:
        entry = session.stop(description)
    except ApiError as e:
        error_console.print(f"[red]Failed to save time entry:[/red] {e}")
        while session.pending and click.confirm("Retry saving?", default=True):
            try:
                entry = session.retry_commit()
            except ApiError as retry_error:
                error_console.print(f"[red]Still failing:[/red] {retry_error}")
        if session.pending:
            lost = session.discard_pending()
            fail(f"Entry not saved ({format_duration(sum(p.duration_ms for p in lost))} discarded)")

    if entry is None:
        console.print("[yellow]Nothing tracked[/yellow]")
        return
    console.print(f"[green]✓[/green] Time entry saved: {elapsed} on {target['name']}")


@cli.command()
@click.option("-o", "--output", type=click.Path(), help="Output file (default: dated name)")
@click.pass_context
def export(ctx: click.Context, output: Optional[str]) -> None:
    """Export all projects and entries to a JSON file."""
    try:
        data = get_client(ctx).export()
    except ApiError as e:
        fail(e)

    path = Path(output) if output else Path(f"time-tracker-export-{now_local().date()}.json")
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
    console.print(
        f"[green]✓[/green] Exported {len(data['projects'])} projects and "
        f"{len(data['entries'])} entries to {path}"
    )


@cli.command()
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_context
def reset(ctx: click.Context, yes: bool) -> None:
    """Delete all data and restore the default projects."""
    if not yes:
        console.print("[yellow]Warning:[/yellow] This deletes every project and time entry.")
        if not click.confirm("Continue?"):
            console.print("Cancelled")
            return

    try:
        result = get_client(ctx).reset()
    except ApiError as e:
        fail(e)
    console.print(f"[green]✓[/green] Data reset ({len(result['projects'])} default projects)")


if __name__ == "__main__":
    cli(obj={})
