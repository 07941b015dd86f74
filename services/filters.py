"""Date-range selection over traffic records."""

from __future__ import annotations

from datetime import date
from typing import Iterable, List, Optional, TypeVar, Union

from models.errors import ValidationError
from models.records import DatedVisits

DateBound = Union[date, str, None]

_R = TypeVar("_R", bound=DatedVisits)


def parse_calendar_date(value: Union[date, str]) -> date:
    """Parse ``YYYY-M-D`` style strings, tolerating missing zero padding."""
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Invalid date {value!r}")
    parts = value.strip().split("-")
    if len(parts) != 3:
        raise ValueError(f"Invalid date {value!r}")
    try:
        year, month, day = (int(part) for part in parts)
        return date(year, month, day)
    except ValueError as exc:
        raise ValueError(f"Invalid date {value!r}") from exc


def _parse_bound(value: DateBound) -> Optional[date]:
    if value is None or value == "":
        return None
    try:
        return parse_calendar_date(value)
    except ValueError as exc:
        raise ValidationError(f"Invalid date range bound: {value!r}") from exc


def filter_by_range(
    records: Iterable[_R],
    start: DateBound = None,
    end: DateBound = None,
) -> List[_R]:
    """Return the records whose date falls inside the inclusive bounds.

    Missing bounds are open ended; with neither bound the records come back
    as given. Records with an unparseable date never match a bounded range.
    """
    lower = _parse_bound(start)
    upper = _parse_bound(end)
    if lower is None and upper is None:
        return list(records)

    selected: List[_R] = []
    for record in records:
        try:
            day = parse_calendar_date(record.date)
        except ValueError:
            continue
        if lower is not None and day < lower:
            continue
        if upper is not None and day > upper:
            continue
        selected.append(record)
    return selected
