"""Admin dashboard counters derived from the ledger."""

from __future__ import annotations

from collections import Counter
from datetime import date as date_type
from typing import Iterable

from roombook.domain.models import BookingRequest, LedgerSummary, PaymentStatus, RequestStatus


def summarize_ledger(requests: Iterable[BookingRequest], today: date_type) -> LedgerSummary:
    items = list(requests)
    statuses = Counter(request.status for request in items)
    payments = Counter(request.payment_status for request in items)
    today_iso = today.isoformat()
    upcoming = sum(
        1
        for request in items
        if request.status is RequestStatus.APPROVED and request.date >= today_iso
    )
    return LedgerSummary(
        total=len(items),
        pending=statuses[RequestStatus.PENDING],
        approved=statuses[RequestStatus.APPROVED],
        rejected=statuses[RequestStatus.REJECTED],
        paid=payments[PaymentStatus.PAID],
        unpaid=payments[PaymentStatus.UNPAID],
        upcoming=upcoming,
    )
