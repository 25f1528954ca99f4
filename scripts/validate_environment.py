#!/usr/bin/env python3
"""Validate local room-booking ledger environment readiness."""

from __future__ import annotations

import asyncio
import importlib
import shutil
import sys
import tempfile
from dataclasses import replace
from datetime import date, timedelta
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

import httpx

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from roombook.repository.ledger_file_repository import LedgerFileRepository
from roombook.repository.shared_storage import SharedStorage
from roombook.repository.snapshot_repository import SnapshotRepository
from roombook.services.actor_service import build_user_actor
from roombook.services.lifecycle_service import RequestDraft
from roombook.services.sync_service import LedgerSource
from roombook.utils.config import Settings, get_settings

SEPARATOR_LINE = "=" * 44

PACKAGE_SPECS = [
    ("fastapi", "fastapi"),
    ("uvicorn", "uvicorn"),
    ("pydantic", "pydantic"),
    ("httpx", "httpx"),
    ("pytest", "pytest"),
]


def _print_result(name: str, success: bool, detail: str = "") -> tuple[bool, str]:
    if success:
        return True, f"[PASS] {name}{detail}"
    return False, f"[FAIL] {name}: {detail}"


def _unreachable(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("remote disabled for validation", request=request)


async def _offline_submission(settings: Settings) -> tuple[LedgerSource, bool]:
    """Submit one request with the remote down; it must persist locally."""
    actor = build_user_actor(settings, transport=httpx.MockTransport(_unreachable))
    async with actor:
        source = await actor.load()
        next_monday = date.today() + timedelta(days=7 - date.today().weekday())
        created = await actor.submit(
            RequestDraft(
                resource_id="library",
                requester_name="Validation",
                requester_contact="000",
                requester_email="validation@example.com",
                date=next_monday.isoformat(),
                start_time="09:00",
                end_time="10:00",
                attendee_count=10,
                purpose="environment check",
            )
        )
    stored = SharedStorage(settings).read_requests() or []
    return source, any(item.request_id == created.request_id for item in stored)


def main() -> int:
    results: list[str] = []
    all_passed = True
    temp_dir = tempfile.mkdtemp(prefix="roombook-env-")

    # CHECK 1 - Python version >= 3.10
    if sys.version_info >= (3, 10):
        ok, line = _print_result("Python " + sys.version.split()[0], True)
    else:
        ok, line = _print_result(
            "Python version >= 3.10",
            False,
            f"found {sys.version.split()[0]}",
        )
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 2 - Required packages importable
    import_errors: list[str] = []
    for module_name, dist_name in PACKAGE_SPECS:
        try:
            importlib.import_module(module_name)
            version(dist_name)
        except (ImportError, PackageNotFoundError) as exc:
            import_errors.append(f"{module_name} ({exc})")
    if import_errors:
        ok, line = _print_result(
            "Required packages",
            False,
            "missing/unimportable -> " + "; ".join(import_errors),
        )
    else:
        ok, line = _print_result("Required packages: all importable", True)
    results.append(line)
    all_passed = all_passed and ok

    try:
        temp_path = Path(temp_dir)
        validation_settings = replace(
            get_settings(),
            data_dir=temp_path / "server",
            snapshot_dir=PROJECT_ROOT / "data",
            local_storage_path=temp_path / "local_storage.db",
        )

        # CHECK 3 - Server ledger storage initialization
        try:
            LedgerFileRepository(validation_settings).initialize_storage()
            ok, line = _print_result("Ledger storage initialization", True)
        except RuntimeError as exc:
            ok, line = _print_result("Ledger storage initialization", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 4 - Snapshot catalog
        catalog = SnapshotRepository(validation_settings).load_resources()
        ok, line = _print_result(
            "Snapshot rooms",
            len(catalog.resources) > 0,
            f": {len(catalog.resources)} rooms",
        )
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 5 - Offline submission survives in shared storage
        try:
            source, stored = asyncio.run(_offline_submission(validation_settings))
            if not stored:
                raise RuntimeError("submitted request missing from shared storage")
            ok, line = _print_result(
                "Offline submission",
                True,
                f": loaded from {source.value}",
            )
        except Exception as exc:
            ok, line = _print_result("Offline submission", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)

    print(SEPARATOR_LINE)
    print(" Room Booking Ledger Environment Validation")
    print(SEPARATOR_LINE)
    for line in results:
        print(f" {line}")
    print(SEPARATOR_LINE)
    if all_passed:
        print(" All checks passed. Environment is ready.")
        print(SEPARATOR_LINE)
        return 0
    print(" One or more checks failed.")
    print(SEPARATOR_LINE)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
