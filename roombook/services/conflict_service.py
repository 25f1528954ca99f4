"""Overlap detection between a candidate reservation and approved bookings."""

from __future__ import annotations

from typing import Optional

from roombook.domain.models import BookingRequest, TimeInterval
from roombook.domain.slots import overlaps
from roombook.repository.ledger_store import RequestLedger


class ConflictDetector:
    """Pure query over the ledger; pending and rejected requests never block."""

    def __init__(self, store: RequestLedger) -> None:
        self._store = store

    def find_conflict(
        self,
        resource_id: str,
        date: str,
        start_time: str,
        end_time: str,
    ) -> Optional[BookingRequest]:
        if start_time >= end_time:
            raise ValueError("start_time must be before end_time")
        candidate = TimeInterval(start_time, end_time)
        for booking in self._store.approved_for(resource_id, date):
            if overlaps(candidate, booking.interval):
                return booking
        return None
