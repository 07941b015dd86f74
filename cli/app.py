from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.controller import TrafficDataController
from cli.render import render_records, render_series, render_stats
from models.errors import ConflictError, TrafficError
from models.records import TrafficEntry
from services.aggregator import Aggregator, ViewMode
from services.validation import validate


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient
    controller: TrafficDataController


app = typer.Typer(
    help="Utilities for recording and charting daily traffic through the traffic API.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


def _fail(message: Optional[str]) -> None:
    typer.secho(message or "Request failed.", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


def _load_range(state: CLIState, start: Optional[str], end: Optional[str]) -> TrafficDataController:
    controller = state.controller
    try:
        controller.set_range(start, end)
    except TrafficError as exc:
        _fail(exc.message)
    if not controller.refresh():
        _fail(controller.error)
    return controller


_FROM_OPTION = typer.Option(None, "--from", help="First day to include (YYYY-MM-DD).")
_TO_OPTION = typer.Option(None, "--to", help="Last day to include (YYYY-MM-DD).")


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Traffic API base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    token: Optional[str] = typer.Option(
        None,
        "--token",
        "-t",
        help="Bearer token (defaults to TRAFFIC_API_TOKEN env).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for each API response.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, token=token, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client, controller=TrafficDataController(client))
    ctx.call_on_close(client.close)


@app.command("list")
def list_command(
    ctx: typer.Context,
    start: Optional[str] = _FROM_OPTION,
    end: Optional[str] = _TO_OPTION,
) -> None:
    """List traffic entries, newest first."""
    controller = _load_range(_get_state(ctx), start, end)
    render_records(controller.filtered_records)


@app.command("stats")
def stats_command(
    ctx: typer.Context,
    start: Optional[str] = _FROM_OPTION,
    end: Optional[str] = _TO_OPTION,
) -> None:
    """Show summary statistics for all entries and for the selected range."""
    controller = _load_range(_get_state(ctx), start, end)
    render_stats(controller.stats, title="All Time")
    if start or end:
        typer.echo()
        render_stats(controller.filtered_stats, title="Selected Range")


@app.command("chart")
def chart_command(
    ctx: typer.Context,
    view: ViewMode = typer.Option(ViewMode.daily, "--view", "-v", help="Bucket size."),
    start: Optional[str] = _FROM_OPTION,
    end: Optional[str] = _TO_OPTION,
) -> None:
    """Draw a bar chart of visits per day, week or month."""
    controller = _load_range(_get_state(ctx), start, end)
    render_series(controller.series(view), title=f"Traffic Analytics ({view.value})")


@app.command("add")
def add_command(
    ctx: typer.Context,
    date: str = typer.Argument(..., help="Day of the entry (YYYY-MM-DD)."),
    visits: int = typer.Argument(..., help="Visit count for that day."),
) -> None:
    """Record visits for a day that has no entry yet."""
    controller = _get_state(ctx).controller
    if not controller.add_entry(date, visits):
        _fail(controller.error)
    typer.secho(f"Added {visits:,} visits for {date}.", fg=typer.colors.GREEN)


@app.command("update")
def update_command(
    ctx: typer.Context,
    record_id: str = typer.Argument(..., help="Identifier of the entry."),
    date: Optional[str] = typer.Option(None, "--date", help="New day (YYYY-MM-DD)."),
    visits: Optional[int] = typer.Option(None, "--visits", help="New visit count."),
) -> None:
    """Change the day and/or visit count of an entry."""
    controller = _get_state(ctx).controller
    if not controller.update_entry(record_id, date=date, visits=visits):
        _fail(controller.error)
    typer.secho(f"Updated entry {record_id}.", fg=typer.colors.GREEN)


@app.command("delete")
def delete_command(
    ctx: typer.Context,
    record_id: str = typer.Argument(..., help="Identifier of the entry."),
) -> None:
    """Permanently remove an entry."""
    controller = _get_state(ctx).controller
    if not controller.delete_entry(record_id):
        _fail(controller.error)
    typer.secho(f"Deleted entry {record_id}.", fg=typer.colors.GREEN)


def _read_entries(path: Path) -> list:
    try:
        data = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as exc:
        raise typer.BadParameter(f"Could not read {path}: {exc}") from exc
    if not isinstance(data, list):
        raise typer.BadParameter(f"{path} must contain a JSON array of {{date, visits}} objects.")
    return data


@app.command("import")
def import_command(
    ctx: typer.Context,
    file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="JSON file to import."),
    replace: bool = typer.Option(
        False,
        "--replace/--keep",
        help="Delete every existing entry before importing.",
    ),
) -> None:
    """Bulk-create entries from a JSON array of {date, visits} objects."""
    state = _get_state(ctx)
    entries = _read_entries(file)

    try:
        if replace:
            existing = state.client.list_records()
            for record in existing:
                state.client.delete_record(record.id)
            typer.echo(f"Deleted {len(existing)} existing entries.")

        imported: List[TrafficEntry] = []
        invalid = 0
        conflicts = 0
        for raw in entries:
            if not isinstance(raw, dict) or not validate(raw).ok:
                invalid += 1
                continue
            try:
                record = state.client.create_record(raw["date"], int(raw["visits"]))
            except ConflictError:
                conflicts += 1
                continue
            imported.append(TrafficEntry(date=record.date, visits=record.visits))
    except TrafficError as exc:
        _fail(exc.message)

    summary = Aggregator().compute_stats(imported)
    typer.secho(f"Imported {len(imported)} entries.", fg=typer.colors.GREEN)
    typer.echo(f"Skipped {invalid} invalid and {conflicts} duplicate entries.")
    if summary.count:
        typer.echo(f"Total visits: {summary.total:,} (average {summary.average:,.0f})")
