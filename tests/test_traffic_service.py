from __future__ import annotations

import pytest

from app.schemas import TrafficCreateRequest, TrafficUpdateRequest
from datastore.traffic_table import TrafficTable
from models.errors import ConflictError, NotFoundError
from services.traffic import TrafficService


@pytest.fixture
def service() -> TrafficService:
    return TrafficService(table=TrafficTable(name="test"))


def _create(service: TrafficService, day: str, visits: int = 10):
    return service.create_record(TrafficCreateRequest(date=day, visits=visits))


def test_create_assigns_id_and_timestamps(service: TrafficService) -> None:
    record = _create(service, "2025-03-01", 100)

    assert record.id
    assert record.created_at == record.updated_at
    assert service.table.get_item(record.id) == record


def test_duplicate_date_is_rejected_and_not_written(service: TrafficService) -> None:
    _create(service, "2025-03-01")

    with pytest.raises(ConflictError):
        _create(service, "2025-03-01", 999)

    assert len(service.list_records()) == 1


def test_list_records_orders_newest_date_first(service: TrafficService) -> None:
    for day in ("2025-03-02", "2025-03-03", "2025-03-01"):
        _create(service, day)

    assert [r.date for r in service.list_records()] == ["2025-03-03", "2025-03-02", "2025-03-01"]


def test_update_changes_visits_and_refreshes_updated_at(service: TrafficService) -> None:
    record = _create(service, "2025-03-01", 100)

    updated = service.update_record(record.id, TrafficUpdateRequest(visits=250))

    assert updated.visits == 250
    assert updated.date == "2025-03-01"
    assert updated.created_at == record.created_at
    assert updated.updated_at >= record.updated_at
    assert service.table.get_item(record.id).visits == 250


def test_update_to_taken_date_conflicts(service: TrafficService) -> None:
    first = _create(service, "2025-03-01", 1)
    _create(service, "2025-03-02", 2)

    with pytest.raises(ConflictError):
        service.update_record(first.id, TrafficUpdateRequest(date="2025-03-02"))

    assert service.table.get_item(first.id).date == "2025-03-01"


def test_update_keeping_own_date_is_not_a_conflict(service: TrafficService) -> None:
    record = _create(service, "2025-03-01", 1)

    updated = service.update_record(record.id, TrafficUpdateRequest(date="2025-03-01", visits=5))

    assert updated.visits == 5


def test_update_unknown_id_raises_not_found_without_writing(service: TrafficService) -> None:
    with pytest.raises(NotFoundError):
        service.update_record("missing", TrafficUpdateRequest(visits=5))

    assert service.list_records() == []


def test_delete_twice_raises_not_found_the_second_time(service: TrafficService) -> None:
    record = _create(service, "2025-03-01")

    service.delete_record(record.id)
    with pytest.raises(NotFoundError):
        service.delete_record(record.id)


def test_date_is_reusable_after_delete(service: TrafficService) -> None:
    record = _create(service, "2025-03-01")
    service.delete_record(record.id)

    assert _create(service, "2025-03-01").date == "2025-03-01"


class CountingTable(TrafficTable):
    def __init__(self) -> None:
        super().__init__(name="test")
        self.limits = []

    def query_by_date(self, day, limit=None):
        self.limits.append(limit)
        return super().query_by_date(day, limit=limit)


def test_date_check_bounds_its_store_query() -> None:
    table = CountingTable()
    service = TrafficService(table=table)
    first = _create(service, "2025-03-01")
    _create(service, "2025-03-02")

    with pytest.raises(ConflictError):
        service.update_record(first.id, TrafficUpdateRequest(date="2025-03-02"))

    assert table.limits == [2, 2, 2]
