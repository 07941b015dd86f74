from __future__ import annotations

from typing import Any, Iterable, Sequence

import typer

from app.schemas import TrafficRecord
from services.aggregator import AggregatedPoint, TrafficStats

_BAR_WIDTH = 40


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_records(records: Sequence[TrafficRecord]) -> None:
    echo_heading("Traffic Entries")
    if not records:
        typer.echo("No traffic data available.")
        return
    typer.echo(f"{'id':<36}  {'date':<10}  {'visits':>9}")
    for record in records:
        typer.echo(f"{record.id:<36}  {record.date:<10}  {record.visits:>9,}")


def render_stats(stats: TrafficStats, title: str = "Summary") -> None:
    echo_heading(title)
    if not stats.count:
        typer.echo("No traffic data available.")
        return
    echo_key_values(
        [
            ("total", f"{stats.total:,}"),
            ("average", f"{stats.average:,.1f}"),
            ("highest", f"{stats.highest:,}"),
            ("lowest", f"{stats.lowest:,}"),
            ("count", stats.count),
            ("period", f"{stats.period.start} .. {stats.period.end}"),
        ]
    )


def render_series(points: Sequence[AggregatedPoint], title: str = "Traffic Analytics") -> None:
    echo_heading(title)
    if not points:
        typer.echo("No traffic data available.")
        return
    peak = max(point.visits for point in points) or 1
    label_width = max(len(point.label) for point in points)
    for point in points:
        bar = "#" * round(point.visits / peak * _BAR_WIDTH)
        typer.echo(f"{point.label:<{label_width}}  {bar} {point.visits:,}")
