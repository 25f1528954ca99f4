from __future__ import annotations

from dataclasses import replace
from datetime import date

from roombook.domain.models import (
    BookingRequest,
    Density,
    PaymentStatus,
    RequestStatus,
    ResourceCatalog,
)
from roombook.domain.slots import SlotModel
from roombook.repository.ledger_store import RequestLedger
from roombook.repository.snapshot_repository import FALLBACK_RESOURCES
from roombook.services.availability_service import AvailabilityProjector


CATALOG = ResourceCatalog(resources=FALLBACK_RESOURCES)
TUESDAY = "2025-06-10"
SATURDAY = "2025-06-14"


def make_request(request_id: str, start: str, end: str, **overrides) -> BookingRequest:
    base = BookingRequest(
        request_id=request_id,
        resource_id="library",
        requester_name="Alice",
        requester_contact="555-0100",
        requester_email="alice@example.com",
        date=TUESDAY,
        start_time=start,
        end_time=end,
        attendee_count=20,
        purpose="Study group",
        status=RequestStatus.APPROVED,
        payment_status=PaymentStatus.PENDING,
        submitted_at="2025-06-01T08:00:00",
    )
    return replace(base, **overrides)


def build_projector(*requests: BookingRequest) -> AvailabilityProjector:
    return AvailabilityProjector(store=RequestLedger(requests), catalog=CATALOG, slot_model=SlotModel())


def test_empty_day_has_no_density_and_all_slots_free() -> None:
    projector = build_projector()

    assert projector.get_density("library", TUESDAY) is Density.NONE
    assert len(projector.get_free_slots("library", TUESDAY)) == 11
    assert projector.get_occupied_slots("library", TUESDAY) == frozenset()


def test_density_buckets_follow_booked_hours() -> None:
    five_hours = build_projector(make_request("req_a", "07:00", "12:00"))
    eight_hours = build_projector(make_request("req_a", "07:00", "15:00"))
    full_day = build_projector(make_request("req_a", "07:00", "18:00"))
    one_hour = build_projector(make_request("req_a", "09:00", "10:00"))

    assert one_hour.get_density("library", TUESDAY) is Density.LIGHT
    assert five_hours.get_density("library", TUESDAY) is Density.BUSY
    assert eight_hours.get_density("library", TUESDAY) is Density.FULL
    assert full_day.get_density("library", TUESDAY) is Density.FULL


def test_booked_fraction_is_capped_at_one() -> None:
    projector = build_projector(
        make_request("req_a", "07:00", "18:00"),
        make_request("req_b", "07:00", "18:00"),
    )

    assert projector.get_booked_fraction("library", TUESDAY) == 1.0


def test_occupied_and_free_slots_partition_the_day() -> None:
    projector = build_projector(
        make_request("req_a", "09:00", "11:00"),
        make_request("req_b", "14:00", "15:00"),
    )
    occupied = projector.get_occupied_slots("library", TUESDAY)
    free = projector.get_free_slots("library", TUESDAY)

    assert {slot.start for slot in occupied} == {"09:00", "10:00", "14:00"}
    assert occupied.isdisjoint(free)
    assert occupied | free == frozenset(SlotModel().slots_for_day())


def test_pending_requests_do_not_occupy_slots() -> None:
    projector = build_projector(
        make_request("req_a", "09:00", "11:00", status=RequestStatus.PENDING)
    )

    assert projector.get_occupied_slots("library", TUESDAY) == frozenset()


def test_closed_weekday_marks_every_slot_occupied() -> None:
    projector = build_projector()

    assert projector.is_closed("grounds", SATURDAY)
    assert len(projector.get_occupied_slots("grounds", SATURDAY)) == 11
    assert projector.get_free_slots("grounds", SATURDAY) == frozenset()
    assert not projector.is_closed("grounds", TUESDAY)


def test_calendar_month_marks_past_and_closed_days() -> None:
    projector = build_projector(make_request("req_a", "07:00", "15:00", resource_id="grounds"))
    days = projector.calendar_month("grounds", 2025, 6, today=date(2025, 6, 5))

    by_date = {day.date: day for day in days}
    assert len(days) == 30
    assert by_date["2025-06-01"].past
    assert not by_date["2025-06-01"].selectable
    assert by_date[SATURDAY].closed
    assert by_date[TUESDAY].density is Density.FULL
    assert by_date["2025-06-11"].selectable


def test_static_bookings_occupy_slots_until_the_ledger_overrides_them() -> None:
    store = RequestLedger()
    store.set_static_bookings([make_request("bk_1", "09:00", "11:00", status=RequestStatus.PENDING)])
    projector = AvailabilityProjector(store=store, catalog=CATALOG, slot_model=SlotModel())

    occupied = {slot.label for slot in projector.get_occupied_slots("library", TUESDAY)}
    assert occupied == {"09:00-10:00", "10:00-11:00"}
    assert len(store) == 0

    store.replace_all([make_request("bk_1", "09:00", "11:00", status=RequestStatus.REJECTED)])

    assert projector.get_occupied_slots("library", TUESDAY) == frozenset()
    assert [item.request_id for item in store.static_bookings()] == ["bk_1"]
