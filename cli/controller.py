"""Client-side state for the traffic dashboard.

The controller owns the record set fetched from the API and derives the
filtered subset, summary statistics and chart series from it. Mutations never
patch local state: they go to the API and, once accepted, the whole record set
is fetched again.
"""

from __future__ import annotations

import logging
from enum import Enum
from itertools import count
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple, Type

from app.schemas import TrafficRecord
from models.errors import NotFoundError, TrafficError, ValidationError
from services.aggregator import AggregatedPoint, Aggregator, TrafficStats, ViewMode
from services.filters import DateBound, filter_by_range
from services.validation import validate

logger = logging.getLogger(__name__)


class TrafficApi(Protocol):
    def list_records(self) -> List[TrafficRecord]: ...

    def create_record(self, date: str, visits: int) -> TrafficRecord: ...

    def update_record(
        self, record_id: str, date: Optional[str] = None, visits: Optional[int] = None
    ) -> TrafficRecord: ...

    def delete_record(self, record_id: str) -> None: ...


class MutationState(str, Enum):
    idle = "idle"
    validating = "validating"
    submitting = "submitting"
    refetching = "refetching"


class TrafficDataController:
    def __init__(
        self,
        api: TrafficApi,
        start: DateBound = None,
        end: DateBound = None,
        aggregator: Optional[Aggregator] = None,
    ) -> None:
        self._api = api
        self._aggregator = aggregator or Aggregator()
        self._records: Tuple[TrafficRecord, ...] = ()
        self._records_version = 0
        self._start = start
        self._end = end
        self._derived: Dict[Any, Any] = {}
        self._derived_key: Optional[Tuple[Any, ...]] = None
        self._tokens = count(1)
        self._latest_token = 0
        self.state = MutationState.idle
        self.loading = False
        self.error: Optional[str] = None
        self.error_kind: Optional[Type[TrafficError]] = None

    @property
    def records(self) -> Tuple[TrafficRecord, ...]:
        return self._records

    @property
    def date_range(self) -> Tuple[DateBound, DateBound]:
        return self._start, self._end

    def set_range(self, start: DateBound = None, end: DateBound = None) -> None:
        # reject bad bounds up front so derived values never see them
        filter_by_range((), start, end)
        self._start = start
        self._end = end

    @property
    def filtered_records(self) -> List[TrafficRecord]:
        return self._cached("filtered", lambda: filter_by_range(self._records, self._start, self._end))

    @property
    def stats(self) -> TrafficStats:
        return self._cached("stats", lambda: self._aggregator.compute_stats(self._records))

    @property
    def filtered_stats(self) -> TrafficStats:
        return self._cached("filtered_stats", lambda: self._aggregator.compute_stats(self.filtered_records))

    def series(self, view: ViewMode | str = ViewMode.daily, filtered: bool = True) -> List[AggregatedPoint]:
        mode = ViewMode(view)
        source = self.filtered_records if filtered else list(self._records)
        return self._cached(
            ("series", mode, filtered),
            lambda: self._aggregator.aggregate_by_period(source, mode),
        )

    def refresh(self) -> bool:
        """Fetch the full record set; on failure keep the previous one."""
        token = next(self._tokens)
        self._latest_token = token
        self.loading = True
        try:
            records = self._api.list_records()
        except TrafficError as exc:
            if token == self._latest_token:
                self.loading = False
                self._fail(exc)
            return False

        if token != self._latest_token:
            logger.debug("Discarded stale traffic fetch", extra={"record_count": len(records)})
            return False
        self._records = tuple(records)
        self._records_version += 1
        self.loading = False
        self._clear_error()
        return True

    def add_entry(self, date: str, visits: int) -> bool:
        payload = {"date": date, "visits": visits}
        return self._mutate(payload, partial=False, submit=lambda: self._api.create_record(date, visits))

    def update_entry(
        self,
        record_id: str,
        date: Optional[str] = None,
        visits: Optional[int] = None,
    ) -> bool:
        payload = {"date": date, "visits": visits}
        return self._mutate(
            payload,
            partial=True,
            submit=lambda: self._api.update_record(record_id, date=date, visits=visits),
        )

    def delete_entry(self, record_id: str) -> bool:
        self.state = MutationState.submitting
        return self._submit(lambda: self._api.delete_record(record_id))

    def _mutate(self, payload: Dict[str, Any], partial: bool, submit: Callable[[], Any]) -> bool:
        self.state = MutationState.validating
        result = validate(payload, partial=partial)
        if not result.ok:
            self.state = MutationState.idle
            self._fail(ValidationError(errors=result.errors))
            return False
        self.state = MutationState.submitting
        return self._submit(submit)

    def _submit(self, submit: Callable[[], Any]) -> bool:
        self._clear_error()
        try:
            submit()
        except TrafficError as exc:
            self._fail(exc)
            if isinstance(exc, NotFoundError):
                self._refetch_keeping_error()
            self.state = MutationState.idle
            return False

        self.state = MutationState.refetching
        self.refresh()
        self.state = MutationState.idle
        return True

    def _refetch_keeping_error(self) -> None:
        error, kind = self.error, self.error_kind
        self.state = MutationState.refetching
        self.refresh()
        self.error, self.error_kind = error, kind

    def _fail(self, exc: TrafficError) -> None:
        self.error = exc.message
        self.error_kind = type(exc)
        logger.debug("Traffic operation failed", extra={"reason": self.error})

    def _clear_error(self) -> None:
        self.error = None
        self.error_kind = None

    def _cached(self, name: Any, factory: Callable[[], Any]) -> Any:
        key = (self._records_version, self._start, self._end)
        if key != self._derived_key:
            self._derived = {}
            self._derived_key = key
        if name not in self._derived:
            self._derived[name] = factory()
        return self._derived[name]
