"""Shared-key persisted storage backed by a single SQLite key/value table.

Both actors may open the same database file. Values are opaque strings; the
request ledger is stored as one JSON array and rewritten wholesale.
"""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Optional

from roombook.domain.models import BookingRequest
from roombook.utils.config import Settings, get_settings
from roombook.utils.logger import get_logger


logger = get_logger(__name__)


class SharedStorage:
    """Encapsulates SQLite access so the sync layer stays storage-agnostic."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._db_path = Path(self._settings.local_storage_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._initialized = False

    @property
    def database_path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        connection = sqlite3.connect(self._db_path)
        connection.row_factory = sqlite3.Row
        return connection

    def initialize(self) -> None:
        if self._initialized:
            return
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS KeyValueStore (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL,
                        updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
                    );
                    """
                )
                conn.commit()
            self._initialized = True
            logger.info("Shared storage initialized at %s", self._db_path)
        except sqlite3.Error as exc:
            raise RuntimeError(f"Shared storage initialization failed: {exc}") from exc

    def get_item(self, key: str) -> Optional[str]:
        self.initialize()
        try:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT value FROM KeyValueStore WHERE key = ?;",
                    (key,),
                ).fetchone()
        except sqlite3.Error as exc:
            raise RuntimeError(f"Shared storage read failed: {exc}") from exc
        if row is None:
            return None
        return str(row["value"])

    def set_item(self, key: str, value: str) -> None:
        self.initialize()
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO KeyValueStore (key, value, updated_at)
                    VALUES (?, ?, CURRENT_TIMESTAMP)
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = excluded.updated_at;
                    """,
                    (key, value),
                )
                conn.commit()
        except sqlite3.Error as exc:
            raise RuntimeError(f"Shared storage write failed: {exc}") from exc

    def remove_item(self, key: str) -> None:
        self.initialize()
        try:
            with self._connect() as conn:
                conn.execute("DELETE FROM KeyValueStore WHERE key = ?;", (key,))
                conn.commit()
        except sqlite3.Error as exc:
            raise RuntimeError(f"Shared storage delete failed: {exc}") from exc

    def read_requests(self, key: Optional[str] = None) -> Optional[list[BookingRequest]]:
        """Return the stored ledger, or None when the key has never been written."""
        raw = self.get_item(key or self._settings.shared_storage_key)
        if raw is None:
            return None
        try:
            payload = json.loads(raw)
            if not isinstance(payload, list):
                raise ValueError("stored ledger is not a JSON array")
            return [BookingRequest.from_dict(item) for item in payload]
        except (ValueError, KeyError, TypeError) as exc:
            raise RuntimeError(f"Shared storage ledger is corrupt: {exc}") from exc

    def write_requests(
        self,
        requests: list[BookingRequest],
        key: Optional[str] = None,
    ) -> None:
        self.set_item(
            key or self._settings.shared_storage_key,
            json.dumps([request.to_dict() for request in requests]),
        )
