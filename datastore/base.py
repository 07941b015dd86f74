"""Interface the service layer expects from a record store."""

from __future__ import annotations

from typing import List, Optional, Protocol

from app.schemas import TrafficRecord


class RecordStore(Protocol):
    """Document collection of traffic records keyed by id.

    Implementations return copies; mutating a returned record never changes
    stored state.
    """

    name: str

    def put_item(self, item: TrafficRecord) -> None:
        """Insert or replace the record stored under ``item.id``."""
        ...

    def get_item(self, key: str) -> Optional[TrafficRecord]:
        ...

    def delete_item(self, key: str) -> bool:
        """Remove a record; ``False`` when the id was unknown."""
        ...

    def scan(self) -> List[TrafficRecord]:
        ...

    def query_by_date(self, day: str, limit: Optional[int] = None) -> List[TrafficRecord]:
        """Records whose ``date`` equals ``day``."""
        ...
