from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path

from roombook.repository.snapshot_repository import FALLBACK_RESOURCES, SnapshotRepository
from roombook.utils.config import get_settings


BUNDLED_DATA = Path(__file__).resolve().parents[1] / "data"


def build_repository(snapshot_dir: Path) -> SnapshotRepository:
    get_settings.cache_clear()
    return SnapshotRepository(replace(get_settings(), snapshot_dir=snapshot_dir))


def test_bundled_rooms_load_with_closed_grounds() -> None:
    catalog = build_repository(BUNDLED_DATA).load_resources()

    assert catalog.ids() == ["auditorium", "library", "grounds", "avr", "gym"]
    assert catalog.get("library").capacity == 100
    assert catalog.get("grounds").is_closed_on(5)
    assert not catalog.get("gym").is_closed_on(5)


def test_missing_documents_fall_back(tmp_path) -> None:
    repository = build_repository(tmp_path)

    assert repository.load_resources().resources == FALLBACK_RESOURCES
    assert repository.load_requests() is None
    assert repository.load_bookings() == []
    assert repository.load_events() == []
    assert repository.load_forecast() is None


def test_documents_without_expected_root_are_ignored(tmp_path) -> None:
    (tmp_path / "requests.json").write_text(json.dumps({"rows": []}), encoding="utf-8")
    (tmp_path / "events.json").write_text(
        json.dumps({"events": [{"title": "Open day", "date": "2025-06-20"}]}),
        encoding="utf-8",
    )
    repository = build_repository(tmp_path)

    assert repository.load_requests() is None
    assert repository.load_events() == [{"title": "Open day", "date": "2025-06-20"}]


def test_bookings_parse_and_skip_malformed_rows(tmp_path) -> None:
    rows = [
        {
            "id": "bk_1",
            "roomId": "gym",
            "name": "Coach",
            "date": "2025-06-10",
            "startTime": "13:00",
            "endTime": "15:00",
            "status": "approved",
        },
        {"id": "bk_broken", "roomId": "gym"},
    ]
    (tmp_path / "bookings.json").write_text(json.dumps({"bookings": rows}), encoding="utf-8")

    bookings = build_repository(tmp_path).load_bookings()

    assert [item.request_id for item in bookings] == ["bk_1"]
    assert bookings[0].resource_id == "gym"
    assert (bookings[0].start_time, bookings[0].end_time) == ("13:00", "15:00")
