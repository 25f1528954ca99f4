"""Read-only access to the bundled static snapshot documents."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

from roombook.domain.models import BookingRequest, Resource, ResourceCatalog
from roombook.utils.config import Settings, get_settings
from roombook.utils.logger import get_logger


logger = get_logger(__name__)


FALLBACK_RESOURCES: tuple[Resource, ...] = (
    Resource("auditorium", "Auditorium", 1000),
    Resource("library", "Library", 100),
    Resource("grounds", "Grounds", 1800, closed_weekdays=frozenset({5, 6})),
    Resource("avr", "AVR", 150),
    Resource("gym", "Gym", 2000),
)


class SnapshotRepository:
    """Loads `rooms`, `requests`, `bookings`, `events`, and `forecast` documents.

    Each file is a JSON object with a single named root, e.g.
    ``{"requests": [...]}``.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._snapshot_dir = Path(self._settings.snapshot_dir)

    @property
    def snapshot_dir(self) -> Path:
        return self._snapshot_dir

    def _read_root(self, filename: str, root: str) -> Any:
        path = self._snapshot_dir / filename
        with path.open("r", encoding="utf-8") as handle:
            document = json.load(handle)
        if not isinstance(document, dict) or root not in document:
            raise ValueError(f"{filename} has no '{root}' root")
        return document[root]

    def load_resources(self) -> ResourceCatalog:
        """Return the room catalog, falling back to the built-in rooms."""
        try:
            rooms = self._read_root("rooms.json", "rooms")
            resources = tuple(Resource.from_dict(item) for item in rooms)
            if not resources:
                raise ValueError("rooms.json is empty")
            return ResourceCatalog(resources=resources)
        except (OSError, ValueError, KeyError, TypeError) as exc:
            logger.warning("Using fallback rooms | reason=%s", exc)
            return ResourceCatalog(resources=FALLBACK_RESOURCES)

    def load_requests(self) -> Optional[list[BookingRequest]]:
        """Return the snapshot ledger, or None when it cannot be read."""
        try:
            items = self._read_root("requests.json", "requests")
            return [BookingRequest.from_dict(item) for item in items]
        except (OSError, ValueError, KeyError, TypeError) as exc:
            logger.warning("Snapshot requests unavailable | reason=%s", exc)
            return None

    def load_bookings(self) -> list[BookingRequest]:
        """Legacy confirmed bookings; malformed rows are skipped."""
        try:
            items = list(self._read_root("bookings.json", "bookings"))
        except (OSError, ValueError, TypeError) as exc:
            logger.warning("Snapshot bookings unavailable | reason=%s", exc)
            return []
        bookings: list[BookingRequest] = []
        for item in items:
            try:
                bookings.append(BookingRequest.from_dict(item))
            except (AttributeError, KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping malformed snapshot booking | reason=%s", exc)
        return bookings

    def load_events(self) -> list[dict[str, Any]]:
        try:
            return list(self._read_root("events.json", "events"))
        except (OSError, ValueError, TypeError):
            return []

    def load_forecast(self) -> Optional[dict[str, Any]]:
        try:
            return self._read_root("forecast.json", "forecast")
        except (OSError, ValueError, TypeError):
            return None
