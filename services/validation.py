"""Field rules for traffic entries.

The same rules back the request schemas on the server and the pre-flight
checks in the CLI controller, so a payload rejected locally is one the API
would reject as well.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any, List, Mapping

MIN_VISITS = 0
MAX_VISITS = 1_000_000

_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

DATE_FORMAT_MESSAGE = 'Invalid date format. Required format: YYYY-MM-DD (e.g., "2025-03-01")'
VISITS_MESSAGE = f"Invalid visits value. Must be an integer between {MIN_VISITS:,} and {MAX_VISITS:,}"
EMPTY_UPDATE_MESSAGE = "At least one field (date or visits) must be provided"


@dataclass
class ValidationResult:
    ok: bool = True
    errors: List[str] = field(default_factory=list)

    def add(self, message: str) -> None:
        self.ok = False
        self.errors.append(message)


def parse_canonical_date(value: Any) -> date:
    """Parse a ``YYYY-MM-DD`` string that names a real calendar day.

    The parsed date must format back to the exact input, which rules out
    values such as ``2025-02-30``.
    """
    if not isinstance(value, str) or not _DATE_PATTERN.match(value):
        raise ValueError(DATE_FORMAT_MESSAGE)
    try:
        parsed = date.fromisoformat(value)
    except ValueError as exc:
        raise ValueError(DATE_FORMAT_MESSAGE) from exc
    if parsed.isoformat() != value:
        raise ValueError(DATE_FORMAT_MESSAGE)
    return parsed


def check_date(value: Any) -> str:
    parse_canonical_date(value)
    return value


def check_visits(value: Any) -> int:
    # bool is an int subclass; JSON true must not count as one visit
    if isinstance(value, bool):
        raise ValueError(VISITS_MESSAGE)
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(VISITS_MESSAGE)
        value = int(value)
    if not isinstance(value, int):
        raise ValueError(VISITS_MESSAGE)
    if value < MIN_VISITS or value > MAX_VISITS:
        raise ValueError(VISITS_MESSAGE)
    return value


def validate(payload: Mapping[str, Any], partial: bool = False) -> ValidationResult:
    """Check a create (or, with ``partial``, update) payload.

    Every rule runs so that the result lists all failures at once.
    """
    result = ValidationResult()
    has_date = payload.get("date") is not None
    has_visits = payload.get("visits") is not None

    if partial and not has_date and not has_visits:
        result.add(EMPTY_UPDATE_MESSAGE)
        return result

    if has_date:
        try:
            check_date(payload["date"])
        except ValueError as exc:
            result.add(f"date: {exc}")
    elif not partial:
        result.add("date: Field required")

    if has_visits:
        try:
            check_visits(payload["visits"])
        except ValueError as exc:
            result.add(f"visits: {exc}")
    elif not partial:
        result.add("visits: Field required")

    return result
