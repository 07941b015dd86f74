"""Write path for traffic records: conflict checks in front of the store."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from functools import lru_cache
from threading import Lock
from typing import List, Optional
from uuid import uuid4

from app.schemas import TrafficCreateRequest, TrafficRecord, TrafficUpdateRequest
from datastore.base import RecordStore
from datastore.traffic_table import build_default_table
from models.errors import ConflictError, NotFoundError

logger = logging.getLogger(__name__)


class TrafficService:
    """Coordinates validated writes and reads against the record store.

    Uniqueness of ``date`` is enforced by querying the store before each
    write. Writes issued through one service instance are serialised, but
    the store itself has no unique constraint: two processes sharing a store
    can still both pass the check for the same date.
    """

    def __init__(self, table: RecordStore) -> None:
        self.table = table
        self._write_lock = Lock()

    def list_records(self) -> List[TrafficRecord]:
        """All records, newest date first."""
        records = sorted(self.table.scan(), key=lambda record: record.date, reverse=True)
        logger.debug("Listed traffic records", extra={"record_count": len(records)})
        return records

    def create_record(self, payload: TrafficCreateRequest) -> TrafficRecord:
        with self._write_lock:
            self._ensure_date_free(payload.date)
            now = datetime.now(timezone.utc)
            record = TrafficRecord(
                id=str(uuid4()),
                date=payload.date,
                visits=payload.visits,
                created_at=now,
                updated_at=now,
            )
            self.table.put_item(record)

        logger.info(
            "Traffic record created",
            extra={"record_id": record.id, "entry_date": record.date, "visits": record.visits},
        )
        return record

    def update_record(self, record_id: str, payload: TrafficUpdateRequest) -> TrafficRecord:
        with self._write_lock:
            existing = self.table.get_item(record_id)
            if existing is None:
                logger.warning("Update of unknown traffic record", extra={"record_id": record_id})
                raise NotFoundError()

            changes = {"updated_at": datetime.now(timezone.utc)}
            if payload.date is not None and payload.date != existing.date:
                self._ensure_date_free(payload.date, exclude_id=record_id)
                changes["date"] = payload.date
            if payload.visits is not None:
                changes["visits"] = payload.visits

            updated = existing.model_copy(update=changes)
            self.table.put_item(updated)

        logger.info(
            "Traffic record updated",
            extra={"record_id": record_id, "entry_date": updated.date, "visits": updated.visits},
        )
        return updated

    def delete_record(self, record_id: str) -> None:
        with self._write_lock:
            removed = self.table.delete_item(record_id)
        if not removed:
            logger.warning("Delete of unknown traffic record", extra={"record_id": record_id})
            raise NotFoundError()
        logger.info("Traffic record deleted", extra={"record_id": record_id})

    def _ensure_date_free(self, day: str, exclude_id: Optional[str] = None) -> None:
        # dates are unique, so two matches are enough to find one that is not exclude_id
        matches = self.table.query_by_date(day, limit=2)
        clashes = [record for record in matches if record.id != exclude_id]
        if clashes:
            logger.warning(
                "Rejected duplicate traffic date",
                extra={"entry_date": day, "record_id": clashes[0].id},
            )
            raise ConflictError()


@lru_cache
def build_default_service() -> TrafficService:
    """Factory that wires the service with the configured table."""
    return TrafficService(table=build_default_table())
