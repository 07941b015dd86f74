from __future__ import annotations

from datetime import date

import pytest

from models.errors import ValidationError
from models.records import TrafficEntry
from services.filters import filter_by_range, parse_calendar_date

RECORDS = [
    TrafficEntry(date="2025-03-03", visits=30),
    TrafficEntry(date="2025-03-01", visits=10),
    TrafficEntry(date="2025-03-02", visits=20),
    TrafficEntry(date="2025-03-10", visits=100),
]


def _dates(records) -> list[str]:
    return [record.date for record in records]


def test_no_bounds_returns_all_records_in_input_order() -> None:
    result = filter_by_range(RECORDS)

    assert result == RECORDS
    assert result is not RECORDS


def test_both_bounds_are_inclusive() -> None:
    result = filter_by_range(RECORDS, "2025-03-01", "2025-03-03")

    assert _dates(result) == ["2025-03-03", "2025-03-01", "2025-03-02"]


def test_only_lower_bound() -> None:
    assert _dates(filter_by_range(RECORDS, start="2025-03-03")) == ["2025-03-03", "2025-03-10"]


def test_only_upper_bound() -> None:
    assert _dates(filter_by_range(RECORDS, end="2025-03-01")) == ["2025-03-01"]


def test_bounds_without_zero_padding_compare_as_dates() -> None:
    # "2025-3-9" sorts after "2025-03-10" as a string but not as a date
    result = filter_by_range(RECORDS, "2025-3-2", "2025-3-9")

    assert _dates(result) == ["2025-03-03", "2025-03-02"]


def test_date_objects_are_accepted_as_bounds() -> None:
    result = filter_by_range(RECORDS, date(2025, 3, 10), None)

    assert _dates(result) == ["2025-03-10"]


def test_empty_string_bound_is_treated_as_absent() -> None:
    assert filter_by_range(RECORDS, "", "") == RECORDS


def test_inverted_range_selects_nothing() -> None:
    assert filter_by_range(RECORDS, "2025-03-05", "2025-03-01") == []


def test_invalid_bound_raises_validation_error() -> None:
    with pytest.raises(ValidationError):
        filter_by_range(RECORDS, "March 1st")


def test_unparseable_record_dates_never_match_a_bounded_range() -> None:
    records = RECORDS + [TrafficEntry(date="not-a-date", visits=1)]

    assert len(filter_by_range(records, "2000-01-01")) == len(RECORDS)


def test_parse_calendar_date_rejects_impossible_day() -> None:
    with pytest.raises(ValueError):
        parse_calendar_date("2025-02-30")
