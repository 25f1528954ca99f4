"""User-facing and admin-facing app instances over one shared booking core.

Each actor owns a private ledger cache and the full component set wired
around it. Actors never share in-memory state; they converge only through
the synchronization layer.
"""

from __future__ import annotations

import json
from datetime import date as date_type
from datetime import datetime
from typing import Any, Callable, Optional

import httpx

from roombook.domain.models import (
    BookingRequest,
    CalendarDay,
    ConflictWarning,
    Density,
    LedgerSummary,
    RequestStatus,
    ResourceCatalog,
    TimeInterval,
)
from roombook.domain.slots import format_12_hour, parse_clock
from roombook.repository.ledger_store import RequestLedger
from roombook.repository.shared_storage import SharedStorage
from roombook.repository.snapshot_repository import SnapshotRepository
from roombook.services.auth_service import AuthService
from roombook.services.availability_service import AvailabilityProjector, slot_model_from_settings
from roombook.services.conflict_service import ConflictDetector
from roombook.services.lifecycle_service import (
    InvalidIntervalError,
    RequestDraft,
    RequestEdit,
    RequestLifecycleService,
    RequestNotFoundError,
)
from roombook.services.remote_client import RemoteLedgerClient, TransportError
from roombook.services.report_service import summarize_ledger
from roombook.services.sync_service import LedgerSource, SynchronizationService
from roombook.utils.config import Settings, get_settings
from roombook.utils.logger import get_logger


logger = get_logger(__name__)


class LedgerActor:
    """Wires store, detector, projector, lifecycle, and sync for one app."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        store: Optional[RequestLedger] = None,
        catalog: Optional[ResourceCatalog] = None,
        remote: Optional[RemoteLedgerClient] = None,
        shared_storage: Optional[SharedStorage] = None,
        snapshots: Optional[SnapshotRepository] = None,
        today_provider: Optional[Callable[[], date_type]] = None,
        now_provider: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._snapshots = snapshots or SnapshotRepository(self._settings)
        self._catalog = catalog or self._snapshots.load_resources()
        self._store = store if store is not None else RequestLedger()
        self._store.set_static_bookings(self._snapshots.load_bookings())
        self._remote = remote or RemoteLedgerClient(self._settings)
        self._shared_storage = shared_storage or SharedStorage(self._settings)
        self._today = today_provider or date_type.today

        slot_model = slot_model_from_settings(self._settings)
        self.detector = ConflictDetector(self._store)
        self.projector = AvailabilityProjector(
            store=self._store,
            catalog=self._catalog,
            slot_model=slot_model,
            settings=self._settings,
        )
        self.lifecycle = RequestLifecycleService(
            store=self._store,
            catalog=self._catalog,
            detector=self.detector,
            slot_model=slot_model,
            today_provider=self._today,
            now_provider=now_provider,
        )
        self.sync = SynchronizationService(
            store=self._store,
            remote=self._remote,
            shared_storage=self._shared_storage,
            snapshots=self._snapshots,
            settings=self._settings,
        )

    @property
    def catalog(self) -> ResourceCatalog:
        return self._catalog

    @property
    def requests(self) -> list[BookingRequest]:
        return self._store.all()

    @property
    def data_available(self) -> bool:
        return self.sync.data_available

    def get_request(self, request_id: str) -> Optional[BookingRequest]:
        return self._store.get(request_id)

    async def load(self) -> LedgerSource:
        return await self.sync.refresh()

    def occupied_slots(self, resource_id: str, date: str) -> frozenset[TimeInterval]:
        return self.projector.get_occupied_slots(resource_id, date)

    def free_slots(self, resource_id: str, date: str) -> frozenset[TimeInterval]:
        return self.projector.get_free_slots(resource_id, date)

    def bookings_for_date(self, resource_id: str, date: str) -> list[BookingRequest]:
        return self.projector.get_bookings_for_date(resource_id, date)

    def density(self, resource_id: str, date: str) -> Density:
        return self.projector.get_density(resource_id, date)

    def calendar_month(self, resource_id: str, year: int, month: int) -> list[CalendarDay]:
        return self.projector.calendar_month(resource_id, year, month, self._today())

    def export_requests_json(self) -> str:
        return json.dumps(
            {"requests": [request.to_dict() for request in self._store.all()]},
            indent=2,
        )

    async def aclose(self) -> None:
        await self.sync.stop_polling()
        await self._remote.aclose()

    async def __aenter__(self) -> "LedgerActor":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


class UserActor(LedgerActor):
    """Calendar browsing and request submission."""

    def check_conflict(
        self,
        resource_id: str,
        date: str,
        start_time: str,
        end_time: str,
    ) -> Optional[ConflictWarning]:
        """Live warning while the form is edited; incomplete input yields none.

        Malformed times raise `InvalidIntervalError`, as on submission.
        """
        if not (date and start_time and end_time):
            return None
        try:
            if parse_clock(start_time) >= parse_clock(end_time):
                return None
        except ValueError as exc:
            raise InvalidIntervalError(str(exc)) from exc
        conflict = self.detector.find_conflict(resource_id, date, start_time, end_time)
        if conflict is None:
            return None
        return ConflictWarning(
            conflict=conflict,
            message=(
                f"Room is booked by {conflict.requester_name} from "
                f"{format_12_hour(conflict.start_time)} to {format_12_hour(conflict.end_time)}."
            ),
        )

    async def submit(self, draft: RequestDraft) -> BookingRequest:
        request = self.lifecycle.submit(draft)
        await self.sync.record_created(request)
        return request

    def events(self) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
        """Snapshot events split into (upcoming, past) relative to today."""
        today_iso = self._today().isoformat()
        upcoming: list[dict[str, Any]] = []
        past: list[dict[str, Any]] = []
        for event in self._snapshots.load_events():
            event_day = str(event.get("date") or "")[:10]
            (upcoming if event_day >= today_iso else past).append(event)
        return upcoming, past

    def forecast(self) -> Optional[dict[str, Any]]:
        return self._snapshots.load_forecast()


class AdminActor(LedgerActor):
    """Review queue, history, transitions, and corrective edits."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        auth_service: Optional[AuthService] = None,
        **kwargs,
    ) -> None:
        super().__init__(settings=settings, **kwargs)
        self._auth = auth_service or AuthService(self._settings)

    @property
    def logged_in(self) -> bool:
        return self._auth.logged_in

    async def login(self, admin_token: str) -> None:
        self._auth.login(admin_token)
        try:
            await self._remote.login(admin_token)
        except TransportError as exc:
            logger.warning("Remote admin login failed; writes stay local | reason=%s", exc)

    def logout(self) -> None:
        self._auth.logout()

    def _before(self, request_id: str) -> BookingRequest:
        request = self._store.get(request_id)
        if request is None:
            raise RequestNotFoundError(f"Request {request_id} not found")
        return request

    async def accept(self, request_id: str, *, confirmed: bool = False) -> BookingRequest:
        self._auth.require_session()
        before = self._before(request_id)
        after = self.lifecycle.accept(request_id, confirmed=confirmed)
        await self.sync.record_updated(before, after)
        return after

    async def reject(self, request_id: str, *, confirmed: bool = False) -> BookingRequest:
        self._auth.require_session()
        before = self._before(request_id)
        after = self.lifecycle.reject(request_id, confirmed=confirmed)
        await self.sync.record_updated(before, after)
        return after

    async def edit(self, request_id: str, edit: RequestEdit) -> BookingRequest:
        self._auth.require_session()
        before = self._before(request_id)
        after = self.lifecycle.edit(request_id, edit)
        await self.sync.record_updated(before, after)
        return after

    def _matches(self, request: BookingRequest, resource_id: Optional[str], search: str) -> bool:
        if resource_id and request.resource_id != resource_id:
            return False
        needle = search.strip().lower()
        if not needle:
            return True
        return needle in request.requester_name.lower() or needle in request.purpose.lower()

    def queue(self, resource_id: Optional[str] = None, search: str = "") -> list[BookingRequest]:
        return [
            request
            for request in self._store.with_status(RequestStatus.PENDING)
            if self._matches(request, resource_id, search)
        ]

    def history(
        self,
        resource_id: Optional[str] = None,
        status: Optional[RequestStatus] = None,
        search: str = "",
    ) -> list[BookingRequest]:
        return [
            request
            for request in self._store.all()
            if request.status is not RequestStatus.PENDING
            and (status is None or request.status is status)
            and self._matches(request, resource_id, search)
        ]

    def day_details(self, date: str) -> list[BookingRequest]:
        return sorted(
            (
                request
                for request in self._store.with_status(RequestStatus.APPROVED)
                if request.date == date
            ),
            key=lambda request: (request.start_time, request.resource_id),
        )

    def summary(self, today: Optional[date_type] = None) -> LedgerSummary:
        return summarize_ledger(self._store.all(), today or self._today())

    def import_requests_json(self, payload: str) -> int:
        """Replace the ledger from an exported document; returns the row count."""
        self._auth.require_session()
        data = json.loads(payload)
        items = data.get("requests") if isinstance(data, dict) else data
        if not isinstance(items, list):
            raise ValueError("Invalid JSON format. Expected an array of requests.")
        requests = [BookingRequest.from_dict(item) for item in items]
        self.sync.replace_ledger(requests)
        logger.info("Ledger imported | requests=%s", len(requests))
        return len(requests)


def build_user_actor(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    **kwargs,
) -> UserActor:
    resolved = settings or get_settings()
    return UserActor(
        settings=resolved,
        remote=RemoteLedgerClient(resolved, transport=transport),
        **kwargs,
    )


def build_admin_actor(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    **kwargs,
) -> AdminActor:
    resolved = settings or get_settings()
    return AdminActor(
        settings=resolved,
        remote=RemoteLedgerClient(resolved, transport=transport),
        **kwargs,
    )
