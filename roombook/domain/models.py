"""Domain models for room booking requests, resources, and occupancy."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class RequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    @classmethod
    def parse(cls, value: Any) -> "RequestStatus":
        """Accept legacy admin labels alongside canonical values."""
        normalized = str(value or "").strip().lower()
        aliases = {"accepted": cls.APPROVED, "refused": cls.REJECTED}
        if normalized in aliases:
            return aliases[normalized]
        return cls(normalized)


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    UNPAID = "unpaid"

    @classmethod
    def parse(cls, value: Any) -> "PaymentStatus":
        normalized = str(value or "").strip().lower()
        if not normalized:
            return cls.PENDING
        return cls(normalized)


class Density(str, Enum):
    NONE = "none"
    LIGHT = "light"
    BUSY = "busy"
    FULL = "full"


@dataclass(frozen=True)
class Resource:
    resource_id: str
    name: str
    capacity: int
    closed_weekdays: frozenset[int] = frozenset()

    def is_closed_on(self, weekday: int) -> bool:
        return weekday in self.closed_weekdays

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.resource_id,
            "name": self.name,
            "capacity": self.capacity,
            "closedWeekdays": sorted(self.closed_weekdays),
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "Resource":
        return Resource(
            resource_id=str(data["id"]),
            name=str(data.get("name") or data["id"]),
            capacity=int(data["capacity"]),
            closed_weekdays=frozenset(int(day) for day in data.get("closedWeekdays") or ()),
        )


@dataclass(frozen=True, order=True)
class TimeInterval:
    """Half-open wall-clock interval with zero-padded ``HH:MM`` bounds."""

    start: str
    end: str

    @property
    def label(self) -> str:
        return f"{self.start}-{self.end}"

    @property
    def hours(self) -> float:
        start_hour, start_minute = (int(part) for part in self.start.split(":"))
        end_hour, end_minute = (int(part) for part in self.end.split(":"))
        return ((end_hour * 60 + end_minute) - (start_hour * 60 + start_minute)) / 60.0


@dataclass(frozen=True)
class ConfirmationMeeting:
    date: str
    time: str


@dataclass(frozen=True)
class BookingRequest:
    """A reservation record. Instances are replaced, never mutated in place."""

    request_id: str
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
    submitted_at: str
    confirmation_meeting: Optional[ConfirmationMeeting] = None
    notes: str = ""
    resource_name: str = ""

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval(self.start_time, self.end_time)

    @property
    def is_approved(self) -> bool:
        return self.status is RequestStatus.APPROVED

    def to_dict(self) -> dict[str, Any]:
        meeting = self.confirmation_meeting
        return {
            "id": self.request_id,
            "roomId": self.resource_id,
            "roomName": self.resource_name,
            "name": self.requester_name,
            "contact": self.requester_contact,
            "email": self.requester_email,
            "date": self.date,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "attendees": self.attendee_count,
            "purpose": self.purpose,
            "appointmentDate": meeting.date if meeting else "",
            "appointmentTime": meeting.time if meeting else "",
            "status": self.status.value,
            "paymentStatus": self.payment_status.value,
            "additionalNotes": self.notes,
            "submittedAt": self.submitted_at,
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "BookingRequest":
        appointment_date = str(data.get("appointmentDate") or "")
        appointment_time = str(data.get("appointmentTime") or "")
        meeting = (
            ConfirmationMeeting(date=appointment_date, time=appointment_time)
            if appointment_date
            else None
        )
        return BookingRequest(
            request_id=str(data["id"]),
            resource_id=str(data.get("roomId") or ""),
            requester_name=str(data.get("name") or ""),
            requester_contact=str(data.get("contact") or data.get("phone") or ""),
            requester_email=str(data.get("email") or ""),
            date=str(data["date"]),
            start_time=str(data["startTime"]),
            end_time=str(data["endTime"]),
            attendee_count=int(data.get("attendees") or 0),
            purpose=str(data.get("purpose") or ""),
            status=RequestStatus.parse(data.get("status") or RequestStatus.PENDING.value),
            payment_status=PaymentStatus.parse(data.get("paymentStatus")),
            submitted_at=str(data.get("submittedAt") or ""),
            confirmation_meeting=meeting,
            notes=str(data.get("additionalNotes") or ""),
            resource_name=str(data.get("roomName") or ""),
        )


@dataclass(frozen=True)
class CalendarDay:
    date: str
    density: Density
    closed: bool
    past: bool

    @property
    def selectable(self) -> bool:
        return not self.closed and not self.past


@dataclass(frozen=True)
class LedgerSummary:
    total: int
    pending: int
    approved: int
    rejected: int
    paid: int
    unpaid: int
    upcoming: int

    def to_dict(self) -> dict[str, int]:
        return {
            "total": self.total,
            "pending": self.pending,
            "approved": self.approved,
            "rejected": self.rejected,
            "paid": self.paid,
            "unpaid": self.unpaid,
            "upcoming": self.upcoming,
        }


@dataclass(frozen=True)
class ConflictWarning:
    conflict: BookingRequest
    message: str


@dataclass(frozen=True)
class ResourceCatalog:
    """Read-only resource reference data loaded once per session."""

    resources: tuple[Resource, ...] = field(default_factory=tuple)

    def get(self, resource_id: str) -> Optional[Resource]:
        for resource in self.resources:
            if resource.resource_id == resource_id:
                return resource
        return None

    def ids(self) -> list[str]:
        return [resource.resource_id for resource in self.resources]
