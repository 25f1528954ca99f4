"""User and admin apps converging through one in-process ledger server."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from datetime import date

import httpx
import pytest

from app import create_app
from roombook.domain.models import RequestStatus
from roombook.services.actor_service import build_admin_actor, build_user_actor
from roombook.services.lifecycle_service import ConflictError, RequestDraft
from roombook.utils.config import get_settings


TODAY = date(2025, 6, 1)
DAY = "2025-06-10"


def build_settings(tmp_path, name: str):
    get_settings.cache_clear()
    return replace(
        get_settings(),
        data_dir=tmp_path / "server",
        snapshot_dir=tmp_path / "snapshot",
        local_storage_path=tmp_path / f"{name}.db",
        admin_token=None,
    )


def library_draft(name: str, start: str, end: str) -> RequestDraft:
    return RequestDraft(
        resource_id="library",
        requester_name=name,
        requester_contact="555-0100",
        requester_email=f"{name.lower()}@example.com",
        date=DAY,
        start_time=start,
        end_time=end,
        attendee_count=20,
        purpose="Reading club",
    )


def test_library_scenario_across_two_actors(tmp_path) -> None:
    server = create_app(build_settings(tmp_path, "server"))
    transport = httpx.ASGITransport(app=server)

    async def scenario():
        user = build_user_actor(
            build_settings(tmp_path, "user"),
            transport=transport,
            today_provider=lambda: TODAY,
        )
        admin = build_admin_actor(
            build_settings(tmp_path, "admin"),
            transport=transport,
            today_provider=lambda: TODAY,
        )
        async with user, admin:
            await user.load()
            await admin.load()

            request_a = await user.submit(library_draft("Alice", "09:00", "11:00"))
            assert request_a.status is RequestStatus.PENDING
            assert user.occupied_slots("library", DAY) == frozenset()

            await admin.sync.on_visibility_regained()
            assert [item.request_id for item in admin.queue()] == [request_a.request_id]
            await admin.accept(request_a.request_id, confirmed=True)

            await user.load()
            occupied = user.occupied_slots("library", DAY)
            assert {slot.start for slot in occupied} == {"09:00", "10:00"}

            warning = user.check_conflict("library", DAY, "10:00", "12:00")
            assert warning is not None
            assert warning.conflict.request_id == request_a.request_id
            assert warning.message == "Room is booked by Alice from 9:00 AM to 11:00 AM."
            with pytest.raises(ConflictError) as excinfo:
                await user.submit(library_draft("Bob", "10:00", "12:00"))
            assert excinfo.value.conflict.request_id == request_a.request_id

            assert user.check_conflict("library", DAY, "11:00", "13:00") is None
            request_c = await user.submit(library_draft("Carol", "11:00", "13:00"))

            await admin.load()
            return request_a, request_c, admin.summary()

    request_a, request_c, summary = asyncio.run(scenario())

    stored = server.state.ledger_repository.list_requests()
    assert [row["id"] for row in stored] == [request_a.request_id, request_c.request_id]
    assert stored[0]["status"] == "approved"
    assert [row["id"] for row in server.state.ledger_repository.list_bookings()] == [
        request_a.request_id
    ]
    assert summary.total == 2
    assert summary.pending == 1
    assert summary.approved == 1
