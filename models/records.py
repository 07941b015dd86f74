"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


class DatedVisits(Protocol):
    """Anything carrying a canonical date string and a visits count."""

    date: str
    visits: int


@dataclass(slots=True)
class TrafficEntry:
    """A bare (date, visits) pair, e.g. a row read from an import file."""

    date: str
    visits: int
