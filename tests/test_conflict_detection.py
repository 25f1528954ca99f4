from __future__ import annotations

from dataclasses import replace

import pytest

from roombook.domain.models import BookingRequest, PaymentStatus, RequestStatus
from roombook.repository.ledger_store import RequestLedger
from roombook.services.conflict_service import ConflictDetector


def make_request(request_id: str, **overrides) -> BookingRequest:
    base = BookingRequest(
        request_id=request_id,
        resource_id="library",
        requester_name="Alice",
        requester_contact="555-0100",
        requester_email="alice@example.com",
        date="2025-06-10",
        start_time="09:00",
        end_time="11:00",
        attendee_count=50,
        purpose="Seminar",
        status=RequestStatus.APPROVED,
        payment_status=PaymentStatus.PENDING,
        submitted_at="2025-06-01T08:00:00",
    )
    return replace(base, **overrides)


def test_overlapping_approved_request_is_returned() -> None:
    approved = make_request("req_a")
    detector = ConflictDetector(RequestLedger([approved]))

    assert detector.find_conflict("library", "2025-06-10", "10:00", "12:00") == approved


def test_touching_endpoints_do_not_conflict() -> None:
    detector = ConflictDetector(RequestLedger([make_request("req_a")]))

    assert detector.find_conflict("library", "2025-06-10", "11:00", "12:00") is None
    assert detector.find_conflict("library", "2025-06-10", "07:00", "09:00") is None


def test_pending_and_rejected_requests_never_block() -> None:
    store = RequestLedger(
        [
            make_request("req_p", status=RequestStatus.PENDING),
            make_request("req_r", status=RequestStatus.REJECTED),
        ]
    )

    assert ConflictDetector(store).find_conflict("library", "2025-06-10", "09:00", "11:00") is None


def test_other_room_or_day_does_not_conflict() -> None:
    detector = ConflictDetector(RequestLedger([make_request("req_a")]))

    assert detector.find_conflict("gym", "2025-06-10", "09:00", "11:00") is None
    assert detector.find_conflict("library", "2025-06-11", "09:00", "11:00") is None


def test_first_matching_request_in_ledger_order_wins() -> None:
    first = make_request("req_1", start_time="09:00", end_time="10:00")
    second = make_request("req_2", start_time="10:00", end_time="11:00")
    detector = ConflictDetector(RequestLedger([first, second]))

    assert detector.find_conflict("library", "2025-06-10", "09:00", "11:00") == first


def test_empty_or_inverted_interval_raises() -> None:
    detector = ConflictDetector(RequestLedger())

    with pytest.raises(ValueError):
        detector.find_conflict("library", "2025-06-10", "11:00", "11:00")
    with pytest.raises(ValueError):
        detector.find_conflict("library", "2025-06-10", "12:00", "11:00")
