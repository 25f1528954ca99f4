"""Server-side persistence of the authoritative ledger in JSON documents."""

from __future__ import annotations

import json
from pathlib import Path
from threading import RLock
from typing import Any, Callable, Optional

from roombook.utils.config import Settings, get_settings
from roombook.utils.logger import get_logger


logger = get_logger(__name__)


class LedgerFileRepository:
    """Owns `requests.json` and `bookings.json` inside the data directory.

    Every operation reads and rewrites the whole document under a lock, so
    concurrent HTTP handlers never interleave partial writes.
    """

    _REQUESTS_FILE = "requests.json"
    _BOOKINGS_FILE = "bookings.json"

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._data_dir = Path(self._settings.data_dir)
        self._lock = RLock()

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def initialize_storage(self) -> None:
        """Create the data directory and empty documents if they are missing."""
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            with self._lock:
                for filename, root in (
                    (self._REQUESTS_FILE, "requests"),
                    (self._BOOKINGS_FILE, "bookings"),
                ):
                    path = self._data_dir / filename
                    if not path.exists():
                        self._write(path, {root: []})
            logger.info("Ledger storage initialized at %s", self._data_dir)
        except OSError as exc:
            raise RuntimeError(f"Ledger storage initialization failed: {exc}") from exc

    def _read(self, filename: str, root: str) -> dict[str, Any]:
        path = self._data_dir / filename
        if not path.exists():
            return {root: []}
        try:
            with path.open("r", encoding="utf-8") as handle:
                document = json.load(handle)
        except (OSError, ValueError) as exc:
            raise RuntimeError(f"Failed to read {filename}: {exc}") from exc
        if not isinstance(document, dict) or not isinstance(document.get(root), list):
            document = {root: []}
        return document

    def _write(self, path: Path, document: dict[str, Any]) -> None:
        try:
            temp_path = path.with_suffix(path.suffix + ".tmp")
            with temp_path.open("w", encoding="utf-8") as handle:
                json.dump(document, handle, indent=2)
            temp_path.replace(path)
        except OSError as exc:
            raise RuntimeError(f"Failed to write {path.name}: {exc}") from exc

    def list_requests(self) -> list[dict[str, Any]]:
        with self._lock:
            return list(self._read(self._REQUESTS_FILE, "requests")["requests"])

    def append_request(self, record: dict[str, Any]) -> dict[str, Any]:
        with self._lock:
            document = self._read(self._REQUESTS_FILE, "requests")
            document["requests"].append(record)
            self._write(self._data_dir / self._REQUESTS_FILE, document)
        logger.info("Request saved | request_id=%s", record.get("id"))
        return record

    def patch_request(
        self,
        request_id: str,
        updates: dict[str, Any],
        validate: Optional[Callable[[dict[str, Any]], dict[str, Any]]] = None,
    ) -> Optional[dict[str, Any]]:
        """Merge `updates` into the stored record; None when the id is unknown.

        `validate` sees the merged record before it is written and may raise
        to abort the update.
        """
        with self._lock:
            document = self._read(self._REQUESTS_FILE, "requests")
            for index, record in enumerate(document["requests"]):
                if record.get("id") == request_id:
                    merged = {**record, **updates, "id": request_id}
                    if validate is not None:
                        merged = validate(merged)
                    document["requests"][index] = merged
                    self._write(self._data_dir / self._REQUESTS_FILE, document)
                    logger.info(
                        "Request updated | request_id=%s | fields=%s",
                        request_id,
                        sorted(updates),
                    )
                    return merged
        return None

    def list_bookings(self) -> list[dict[str, Any]]:
        with self._lock:
            return list(self._read(self._BOOKINGS_FILE, "bookings")["bookings"])

    def append_booking(self, booking: dict[str, Any]) -> dict[str, Any]:
        with self._lock:
            document = self._read(self._BOOKINGS_FILE, "bookings")
            document["bookings"].append(booking)
            self._write(self._data_dir / self._BOOKINGS_FILE, document)
        logger.info("Booking saved | booking_id=%s", booking.get("id"))
        return booking
