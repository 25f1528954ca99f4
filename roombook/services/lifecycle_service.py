"""Request lifecycle: submission, admin accept/reject, and corrective edits.

This service is the only writer of individual ledger entries. Every rule is
checked synchronously against the in-memory ledger before anything is
mutated, so a failed operation leaves the ledger untouched.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date as date_type
from datetime import datetime
from typing import Callable, Optional
from uuid import uuid4

from roombook.domain.models import (
    BookingRequest,
    ConfirmationMeeting,
    PaymentStatus,
    RequestStatus,
    ResourceCatalog,
    TimeInterval,
)
from roombook.domain.slots import SlotModel, parse_clock
from roombook.repository.ledger_store import RequestLedger
from roombook.services.conflict_service import ConflictDetector
from roombook.utils.logger import get_logger


logger = get_logger(__name__)


class BookingError(Exception):
    """Base exception for lifecycle failures."""


class BookingValidationError(BookingError):
    """Raised when submitted fields are invalid."""


class PastDateError(BookingValidationError):
    """Raised when the requested day has already elapsed."""


class CapacityExceededError(BookingValidationError):
    """Raised when attendees exceed the room capacity."""


class InvalidIntervalError(BookingValidationError):
    """Raised when start/end times do not form a bookable interval."""


class ResourceClosedError(BookingValidationError):
    """Raised when the room is closed on the requested weekday."""


class UnknownResourceError(BookingValidationError):
    """Raised when the room id is not in the catalog."""


class ConfirmationDayError(BookingValidationError):
    """Raised when the confirmation meeting falls on a weekend."""


class ConflictError(BookingError):
    """Raised when the interval overlaps an approved booking."""

    def __init__(self, conflict: BookingRequest) -> None:
        super().__init__(
            f"Time slot conflicts with approved booking {conflict.request_id} "
            f"({conflict.start_time}-{conflict.end_time})"
        )
        self.conflict = conflict


class RequestNotFoundError(BookingError):
    """Raised when a request id does not resolve to a ledger entry."""


class InvalidTransitionError(BookingError):
    """Raised when accept/reject targets a request that is not pending."""


class ConfirmationRequiredError(BookingError):
    """Raised when an admin transition is attempted without confirmation."""


@dataclass(frozen=True)
class RequestDraft:
    resource_id: str
    requester_name: str
    requester_contact: str
    requester_email: str
    date: str
    start_time: str
    end_time: str
    attendee_count: int
    purpose: str
    confirmation_meeting: Optional[ConfirmationMeeting] = None


@dataclass(frozen=True)
class RequestEdit:
    """Full mutable field set submitted from the admin edit form."""

    resource_id: str
    requester_name: str
    requester_contact: str
    requester_email: str
    date: str
    start_time: str
    end_time: str
    attendee_count: int
    purpose: str
    status: RequestStatus
    payment_status: PaymentStatus
    confirmation_meeting: Optional[ConfirmationMeeting] = None
    notes: str = ""


def generate_request_id() -> str:
    return f"req_{uuid4().hex}"


def _parse_date(value: str) -> date_type:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError) as exc:
        raise BookingValidationError("date must follow YYYY-MM-DD format") from exc


class RequestLifecycleService:
    """State machine over pending -> approved | rejected."""

    def __init__(
        self,
        store: RequestLedger,
        catalog: ResourceCatalog,
        detector: ConflictDetector,
        slot_model: SlotModel,
        today_provider: Optional[Callable[[], date_type]] = None,
        now_provider: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._store = store
        self._catalog = catalog
        self._detector = detector
        self._slot_model = slot_model
        self._today = today_provider or date_type.today
        self._now = now_provider or datetime.now

    def _validate_interval(self, start_time: str, end_time: str) -> None:
        try:
            start_minutes = parse_clock(start_time)
            end_minutes = parse_clock(end_time)
        except ValueError as exc:
            raise InvalidIntervalError(str(exc)) from exc
        if start_minutes % 60 or end_minutes % 60:
            raise InvalidIntervalError("times must fall on the hour")
        if start_minutes >= end_minutes:
            raise InvalidIntervalError("start_time must be before end_time")
        window = self._slot_model.window
        if start_time < window.start or end_time > window.end:
            raise InvalidIntervalError(
                f"interval must fall within {window.start}-{window.end}"
            )

    def _validate_confirmation(self, meeting: Optional[ConfirmationMeeting]) -> None:
        if meeting is None:
            return
        meeting_day = _parse_date(meeting.date)
        if meeting_day.weekday() >= 5:
            raise ConfirmationDayError(
                "Confirmation visits are only available on weekdays (Mon-Fri)"
            )
        if meeting.time:
            try:
                parse_clock(meeting.time)
            except ValueError as exc:
                raise BookingValidationError(str(exc)) from exc

    def submit(self, draft: RequestDraft) -> BookingRequest:
        resource = self._catalog.get(draft.resource_id)
        if resource is None:
            raise UnknownResourceError(f"Room {draft.resource_id} does not exist")

        requested_day = _parse_date(draft.date)
        if requested_day < self._today():
            raise PastDateError("Cannot book for past dates")
        if resource.is_closed_on(requested_day.weekday()):
            raise ResourceClosedError(f"{resource.name} is closed on {draft.date}")

        self._validate_interval(draft.start_time, draft.end_time)

        if draft.attendee_count < 1:
            raise BookingValidationError("attendee_count must be a positive integer")
        if draft.attendee_count > resource.capacity:
            raise CapacityExceededError(
                f"Attendees exceed room capacity ({resource.capacity})"
            )
        self._validate_confirmation(draft.confirmation_meeting)

        conflict = self._detector.find_conflict(
            draft.resource_id,
            draft.date,
            draft.start_time,
            draft.end_time,
        )
        if conflict is not None:
            logger.info(
                "Submission blocked by conflict | room_id=%s | date=%s | conflict_id=%s",
                draft.resource_id,
                draft.date,
                conflict.request_id,
            )
            raise ConflictError(conflict)

        request = BookingRequest(
            request_id=generate_request_id(),
            resource_id=draft.resource_id,
            requester_name=draft.requester_name,
            requester_contact=draft.requester_contact,
            requester_email=draft.requester_email,
            date=draft.date,
            start_time=draft.start_time,
            end_time=draft.end_time,
            attendee_count=draft.attendee_count,
            purpose=draft.purpose,
            status=RequestStatus.PENDING,
            payment_status=PaymentStatus.PENDING,
            submitted_at=self._now().isoformat(timespec="seconds"),
            confirmation_meeting=draft.confirmation_meeting,
            resource_name=resource.name,
        )
        self._store.insert(request)
        logger.info(
            "Request submitted | request_id=%s | room_id=%s | date=%s | interval=%s",
            request.request_id,
            request.resource_id,
            request.date,
            TimeInterval(request.start_time, request.end_time).label,
        )
        return request

    def _require(self, request_id: str) -> BookingRequest:
        request = self._store.get(request_id)
        if request is None:
            raise RequestNotFoundError(f"Request {request_id} not found")
        return request

    def _transition(
        self,
        request_id: str,
        target: RequestStatus,
        confirmed: bool,
    ) -> BookingRequest:
        request = self._require(request_id)
        if not confirmed:
            raise ConfirmationRequiredError(
                f"Explicit confirmation is required to mark {request_id} {target.value}"
            )
        if request.status is not RequestStatus.PENDING:
            raise InvalidTransitionError(
                f"Request {request_id} is already {request.status.value}"
            )
        # Conflicts are intentionally not re-checked here; two overlapping
        # pending requests can both be approved.
        updated = replace(request, status=target)
        self._store.replace(updated)
        logger.info(
            "Request transitioned | request_id=%s | status=%s",
            request_id,
            target.value,
        )
        return updated

    def accept(self, request_id: str, *, confirmed: bool = False) -> BookingRequest:
        return self._transition(request_id, RequestStatus.APPROVED, confirmed)

    def reject(self, request_id: str, *, confirmed: bool = False) -> BookingRequest:
        return self._transition(request_id, RequestStatus.REJECTED, confirmed)

    def edit(self, request_id: str, edit: RequestEdit) -> BookingRequest:
        current = self._require(request_id)
        resource = self._catalog.get(edit.resource_id)
        updated = replace(
            current,
            resource_id=edit.resource_id,
            resource_name=resource.name if resource else edit.resource_id,
            requester_name=edit.requester_name,
            requester_contact=edit.requester_contact,
            requester_email=edit.requester_email,
            date=edit.date,
            start_time=edit.start_time,
            end_time=edit.end_time,
            attendee_count=edit.attendee_count,
            purpose=edit.purpose,
            status=edit.status,
            payment_status=edit.payment_status,
            confirmation_meeting=edit.confirmation_meeting,
            notes=edit.notes,
        )
        self._store.replace(updated)
        logger.info(
            "Request edited | request_id=%s | status=%s | payment_status=%s",
            request_id,
            updated.status.value,
            updated.payment_status.value,
        )
        return updated
