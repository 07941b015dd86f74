"""Aggregation logic for traffic records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import Callable, Dict, Iterable, List, Tuple

from models.records import DatedVisits
from services.filters import parse_calendar_date


class ViewMode(str, Enum):
    """Bucket sizes offered for charting."""

    daily = "daily"
    weekly = "weekly"
    monthly = "monthly"


@dataclass
class StatsPeriod:
    start: str = ""
    end: str = ""


@dataclass
class TrafficStats:
    """Summary statistics for a set of traffic records."""

    total: int = 0
    average: float = 0.0
    highest: int = 0
    lowest: int = 0
    count: int = 0
    period: StatsPeriod = field(default_factory=StatsPeriod)


@dataclass(frozen=True)
class AggregatedPoint:
    """One chart point: a bucket and the visits summed into it."""

    bucket_key: str
    visits: int
    label: str


def short_label(day: date) -> str:
    return f"{day:%b} {day.day}"


def week_start(day: date) -> date:
    """Sunday on or before ``day``."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def _daily_bucket(day: date) -> Tuple[str, str]:
    return day.isoformat(), short_label(day)


def _weekly_bucket(day: date) -> Tuple[str, str]:
    start = week_start(day)
    return start.isoformat(), f"Week of {short_label(start)}"


def _monthly_bucket(day: date) -> Tuple[str, str]:
    return f"{day:%Y-%m}", f"{day:%B %Y}"


_BUCKETERS: Dict[ViewMode, Callable[[date], Tuple[str, str]]] = {
    ViewMode.weekly: _weekly_bucket,
    ViewMode.monthly: _monthly_bucket,
}


class Aggregator:
    """Pure aggregation component that can be unit tested in isolation."""

    def compute_stats(self, records: Iterable[DatedVisits]) -> TrafficStats:
        stats = TrafficStats()
        start = ""
        end = ""

        for record in records:
            visits = record.visits
            if stats.count == 0:
                stats.highest = visits
                stats.lowest = visits
                start = end = record.date
            else:
                stats.highest = max(stats.highest, visits)
                stats.lowest = min(stats.lowest, visits)
                # canonical YYYY-MM-DD strings order the same as the dates
                start = min(start, record.date)
                end = max(end, record.date)
            stats.total += visits
            stats.count += 1

        if stats.count:
            stats.average = stats.total / stats.count
            stats.period = StatsPeriod(start=start, end=end)

        return stats

    def aggregate_by_period(
        self,
        records: Iterable[DatedVisits],
        view: ViewMode | str = ViewMode.daily,
    ) -> List[AggregatedPoint]:
        """Group records into day, week or month buckets in date order.

        Daily view keeps one point per record. Other views sum visits per
        bucket; periods without records are not emitted.
        """
        mode = ViewMode(view)
        dated = sorted(
            ((parse_calendar_date(record.date), record.visits) for record in records),
            key=lambda item: item[0],
        )

        if mode is ViewMode.daily:
            points: List[AggregatedPoint] = []
            for day, visits in dated:
                key, label = _daily_bucket(day)
                points.append(AggregatedPoint(bucket_key=key, visits=visits, label=label))
            return points

        bucketer = _BUCKETERS[mode]
        sums: Dict[str, int] = {}
        labels: Dict[str, str] = {}
        for day, visits in dated:
            key, label = bucketer(day)
            if key not in sums:
                sums[key] = 0
                labels[key] = label
            sums[key] += visits

        return [
            AggregatedPoint(bucket_key=key, visits=total, label=labels[key])
            for key, total in sums.items()
        ]
