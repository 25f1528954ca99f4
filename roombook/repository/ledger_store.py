"""In-memory request ledger held by one actor (its local cache)."""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Optional

from roombook.domain.models import BookingRequest, RequestStatus


class RequestLedger:
    """Explicit store handle passed to every core component.

    Read access is open. Writes are reserved for the lifecycle service
    (`insert`/`replace`) and the synchronization layer (`replace_all`).
    Insertion order is preserved and doubles as the stable scan order.

    Static bookings (the legacy `bookings.json` snapshot) occupy time like
    approved requests but are not ledger entries: reloads never touch them,
    and a ledger entry with the same id takes precedence.
    """

    def __init__(self, requests: Iterable[BookingRequest] = ()) -> None:
        self._requests: dict[str, BookingRequest] = {}
        self._static: dict[str, BookingRequest] = {}
        for request in requests:
            self._requests[request.request_id] = request

    def __len__(self) -> int:
        return len(self._requests)

    def __contains__(self, request_id: object) -> bool:
        return request_id in self._requests

    def get(self, request_id: str) -> Optional[BookingRequest]:
        return self._requests.get(request_id)

    def all(self) -> list[BookingRequest]:
        return list(self._requests.values())

    def with_status(self, status: RequestStatus) -> list[BookingRequest]:
        return [request for request in self._requests.values() if request.status is status]

    def set_static_bookings(self, bookings: Iterable[BookingRequest]) -> None:
        self._static = {
            booking.request_id: replace(booking, status=RequestStatus.APPROVED)
            for booking in bookings
        }

    def static_bookings(self) -> list[BookingRequest]:
        return list(self._static.values())

    def approved_for(self, resource_id: str, date: str) -> list[BookingRequest]:
        static = [
            booking
            for booking_id, booking in self._static.items()
            if booking_id not in self._requests
        ]
        return [
            request
            for request in [*static, *self._requests.values()]
            if request.status is RequestStatus.APPROVED
            and request.resource_id == resource_id
            and request.date == date
        ]

    def insert(self, request: BookingRequest) -> None:
        if request.request_id in self._requests:
            raise KeyError(f"request {request.request_id} already exists")
        self._requests[request.request_id] = request

    def replace(self, request: BookingRequest) -> None:
        if request.request_id not in self._requests:
            raise KeyError(f"request {request.request_id} does not exist")
        self._requests[request.request_id] = request

    def replace_all(self, requests: Iterable[BookingRequest]) -> None:
        self._requests = {request.request_id: request for request in requests}
