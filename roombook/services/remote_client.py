"""Async HTTP client for the remote authoritative ledger."""

from __future__ import annotations

from typing import Any, Optional

import httpx

from roombook.domain.models import BookingRequest
from roombook.utils.config import Settings, get_settings
from roombook.utils.logger import get_logger


logger = get_logger(__name__)


class TransportError(Exception):
    """Raised when a remote call fails for any reason."""


class RemoteRequestNotFoundError(TransportError):
    """Raised when the remote ledger does not know the patched id."""


class RemoteLedgerClient:
    """Thin wrapper over `httpx.AsyncClient` that only speaks domain types.

    Every transport failure (connection error, timeout, non-2xx status, or
    malformed body) surfaces as `TransportError` so callers can fall back.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._client = httpx.AsyncClient(
            base_url=self._settings.remote_base_url,
            timeout=self._settings.remote_timeout_seconds,
            transport=transport,
        )
        self._bearer_token: str | None = None

    def _headers(self) -> dict[str, str]:
        if self._bearer_token is None:
            return {}
        return {"Authorization": f"Bearer {self._bearer_token}"}

    async def _send(
        self,
        method: str,
        url: str,
        *,
        json_body: Any = None,
    ) -> Any:
        try:
            response = await self._client.request(
                method,
                url,
                json=json_body,
                headers=self._headers(),
            )
        except httpx.HTTPError as exc:
            raise TransportError(f"{method} {url} failed: {exc}") from exc
        if response.status_code == 404 and method == "PATCH":
            raise RemoteRequestNotFoundError(f"{url} is unknown to the remote ledger")
        try:
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as exc:
            raise TransportError(
                f"{method} {url} returned {response.status_code}"
            ) from exc
        except ValueError as exc:
            raise TransportError(f"{method} {url} returned a malformed body") from exc

    async def fetch_requests(self) -> list[BookingRequest]:
        payload = await self._send("GET", "/requests")
        if not isinstance(payload, dict) or not isinstance(payload.get("requests"), list):
            raise TransportError("GET /requests returned an unexpected document")
        try:
            return [BookingRequest.from_dict(item) for item in payload["requests"]]
        except (KeyError, TypeError, ValueError) as exc:
            raise TransportError(f"GET /requests returned an invalid record: {exc}") from exc

    async def create_request(self, request: BookingRequest) -> dict[str, Any]:
        return await self._send("POST", "/requests", json_body=request.to_dict())

    async def patch_request(self, request_id: str, changes: dict[str, Any]) -> dict[str, Any]:
        return await self._send("PATCH", f"/requests/{request_id}", json_body=changes)

    async def create_booking(self, request: BookingRequest) -> dict[str, Any]:
        return await self._send("POST", "/bookings", json_body=request.to_dict())

    async def login(self, admin_token: str) -> str:
        payload = await self._send("POST", "/login", json_body={"admin_token": admin_token})
        token = payload.get("access_token") if isinstance(payload, dict) else None
        if not token:
            raise TransportError("POST /login returned no access token")
        self._bearer_token = str(token)
        return self._bearer_token

    async def aclose(self) -> None:
        await self._client.aclose()
