"""Ledger synchronization between the local cache and the remote source of truth.

Reads walk three tiers in strict order (remote, shared storage, snapshot) and
the first success replaces the local cache. Writes land in the cache and the
shared storage first and are then mirrored to the remote on a best-effort
basis. Local writes the remote has not acknowledged yet are laid over every
reload and re-sent after the next successful remote read. There is no
versioning: whichever actor writes last wins.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from roombook.domain.models import BookingRequest, RequestStatus
from roombook.repository.ledger_store import RequestLedger
from roombook.repository.shared_storage import SharedStorage
from roombook.repository.snapshot_repository import SnapshotRepository
from roombook.services.remote_client import RemoteLedgerClient, TransportError
from roombook.utils.config import Settings, get_settings
from roombook.utils.logger import get_logger


logger = get_logger(__name__)

RefreshListener = Callable[["LedgerSource"], None]


class LedgerSource(str, Enum):
    REMOTE = "remote"
    SHARED_STORAGE = "shared_storage"
    SNAPSHOT = "snapshot"
    UNAVAILABLE = "unavailable"


def diff_fields(before: BookingRequest, after: BookingRequest) -> dict[str, Any]:
    """Wire-format fields whose value changed, for PATCH bodies."""
    old = before.to_dict()
    return {key: value for key, value in after.to_dict().items() if old.get(key) != value}


class SynchronizationService:
    """Keeps one actor's ledger cache aligned with shared and remote copies."""

    def __init__(
        self,
        store: RequestLedger,
        remote: RemoteLedgerClient,
        shared_storage: SharedStorage,
        snapshots: SnapshotRepository,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._store = store
        self._remote = remote
        self._shared_storage = shared_storage
        self._snapshots = snapshots
        self._listeners: list[RefreshListener] = []
        self._poll_task: Optional[asyncio.Task[None]] = None
        self._ever_loaded = False
        # Local versions not yet acknowledged by the remote, keyed by id,
        # paired with the remote copy they were derived from.
        self._unmirrored: dict[str, tuple[Optional[BookingRequest], BookingRequest]] = {}
        self._in_flight: set[str] = set()
        self.last_source: Optional[LedgerSource] = None

    @property
    def data_available(self) -> bool:
        """False only when nothing has ever loaded and the cache is empty."""
        return self._ever_loaded or len(self._store) > 0

    @property
    def polling(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    @property
    def unmirrored_ids(self) -> frozenset[str]:
        return frozenset(self._unmirrored)

    def subscribe(self, listener: RefreshListener) -> None:
        self._listeners.append(listener)

    def _notify(self, source: LedgerSource) -> None:
        for listener in list(self._listeners):
            try:
                listener(source)
            except Exception:  # pragma: no cover
                logger.exception("Refresh listener failed")

    def _persist_locally(self) -> bool:
        try:
            self._shared_storage.write_requests(self._store.all())
            return True
        except RuntimeError as exc:
            logger.error("Shared storage write failed | reason=%s", exc)
            return False

    async def _read_remote(self) -> Optional[list[BookingRequest]]:
        try:
            return await self._remote.fetch_requests()
        except TransportError as exc:
            logger.warning("Remote ledger unavailable; trying shared storage | reason=%s", exc)
            return None

    def _read_shared_storage(self) -> Optional[list[BookingRequest]]:
        try:
            requests = self._shared_storage.read_requests()
        except RuntimeError as exc:
            logger.warning("Shared storage unreadable; trying snapshot | reason=%s", exc)
            return None
        if requests is None:
            logger.warning("Shared storage empty; trying snapshot")
        return requests

    def _overlay_unmirrored(self, fetched: list[BookingRequest]) -> list[BookingRequest]:
        if not self._unmirrored:
            return fetched
        merged = {request.request_id: request for request in fetched}
        merged.update((request_id, local) for request_id, (_, local) in self._unmirrored.items())
        return list(merged.values())

    async def refresh(self) -> LedgerSource:
        """Reload the whole ledger from the first tier that answers."""
        source = LedgerSource.UNAVAILABLE
        remote_view: dict[str, BookingRequest] = {}
        requests = await self._read_remote()
        if requests is not None:
            source = LedgerSource.REMOTE
            remote_view = {request.request_id: request for request in requests}
        else:
            requests = self._read_shared_storage()
            if requests is not None:
                source = LedgerSource.SHARED_STORAGE
            else:
                requests = self._snapshots.load_requests()
                if requests is not None:
                    source = LedgerSource.SNAPSHOT

        if requests is not None:
            self._store.replace_all(self._overlay_unmirrored(requests))
            self._ever_loaded = True
            if source is LedgerSource.REMOTE:
                self._persist_locally()
        elif self.data_available:
            logger.warning(
                "All ledger tiers failed; continuing with local cache | cached=%s",
                len(self._store),
            )
        else:
            logger.error("All ledger tiers failed and no data is cached")

        if source is LedgerSource.REMOTE:
            await self._retry_unmirrored(remote_view)

        self.last_source = source
        logger.info("Ledger refreshed | source=%s | requests=%s", source.value, len(self._store))
        self._notify(source)
        return source

    async def _mirror(self, description: str, call: Awaitable[Any]) -> bool:
        try:
            await call
            return True
        except TransportError as exc:
            logger.warning("Remote mirror failed; kept local write | op=%s | reason=%s", description, exc)
            return False

    async def _push(self, remote_copy: Optional[BookingRequest], local: BookingRequest) -> bool:
        """Send one local version to the remote, relative to what it last held."""
        request_id = local.request_id
        if remote_copy is None:
            mirrored = await self._mirror(
                f"create {request_id}",
                self._remote.create_request(local),
            )
        else:
            changes = diff_fields(remote_copy, local)
            mirrored = True
            if changes:
                mirrored = await self._mirror(
                    f"update {request_id}",
                    self._remote.patch_request(request_id, changes),
                )
        became_approved = local.status is RequestStatus.APPROVED and (
            remote_copy is None or remote_copy.status is not RequestStatus.APPROVED
        )
        if mirrored and became_approved:
            mirrored = await self._mirror(
                f"booking {request_id}",
                self._remote.create_booking(local),
            )
        return mirrored

    async def _send_tracked(self, remote_copy: Optional[BookingRequest], local: BookingRequest) -> bool:
        request_id = local.request_id
        self._unmirrored[request_id] = (remote_copy, local)
        self._in_flight.add(request_id)
        try:
            mirrored = await self._push(remote_copy, local)
        finally:
            self._in_flight.discard(request_id)
        pending = self._unmirrored.get(request_id)
        if mirrored and pending is not None and pending[1] is local:
            del self._unmirrored[request_id]
        return mirrored

    async def _retry_unmirrored(self, remote_view: dict[str, BookingRequest]) -> None:
        for request_id, (_, local) in list(self._unmirrored.items()):
            if request_id in self._in_flight:
                continue
            if await self._send_tracked(remote_view.get(request_id), local):
                logger.info("Deferred write mirrored | request_id=%s", request_id)

    async def record_created(self, request: BookingRequest) -> bool:
        """Persist a newly submitted request locally, then mirror it."""
        self._persist_locally()
        return await self._send_tracked(None, request)

    async def record_updated(self, before: BookingRequest, after: BookingRequest) -> bool:
        """Persist a transition or edit locally, then mirror the changed fields."""
        self._persist_locally()
        if not diff_fields(before, after):
            return True
        pending = self._unmirrored.get(before.request_id)
        # Diff against what the remote last acknowledged, not the local chain.
        baseline = pending[0] if pending is not None else before
        return await self._send_tracked(baseline, after)

    def replace_ledger(self, requests: list[BookingRequest]) -> None:
        """Wholesale import of an exported ledger into cache and shared storage."""
        self._unmirrored.clear()
        self._store.replace_all(requests)
        self._ever_loaded = True
        self._persist_locally()

    async def _poll_forever(self) -> None:
        while True:
            await asyncio.sleep(self._settings.poll_interval_seconds)
            await self.refresh()

    def start_polling(self) -> None:
        if self.polling:
            return
        self._poll_task = asyncio.get_running_loop().create_task(self._poll_forever())
        logger.info(
            "Ledger polling started | interval_seconds=%s",
            self._settings.poll_interval_seconds,
        )

    async def stop_polling(self) -> None:
        task = self._poll_task
        self._poll_task = None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def on_visibility_regained(self) -> LedgerSource:
        return await self.refresh()
