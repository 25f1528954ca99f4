"""Single shared admin flag backed by an optional admin token."""

from __future__ import annotations

import secrets
from typing import Optional

from roombook.utils.config import Settings, get_settings


class AuthenticationError(Exception):
    """Base authentication failure."""


class AdminTokenNotConfiguredError(AuthenticationError):
    """Raised when ADMIN_TOKEN is missing."""


class InvalidAdminTokenError(AuthenticationError):
    """Raised when provided token is invalid."""


class AdminSessionRequiredError(AuthenticationError):
    """Raised when an admin action is attempted before login."""


class AuthService:
    """Validates the admin token and issues one bearer session.

    When no ADMIN_TOKEN is configured, admin checks are disabled entirely.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._session_token: str | None = None

    @property
    def auth_enabled(self) -> bool:
        return bool(self._settings.admin_token)

    @property
    def logged_in(self) -> bool:
        return not self.auth_enabled or self._session_token is not None

    def _expected_token(self) -> str:
        if not self._settings.admin_token:
            raise AdminTokenNotConfiguredError(
                "ADMIN_TOKEN is not configured. Set ADMIN_TOKEN in environment variables."
            )
        return self._settings.admin_token

    def login(self, provided_admin_token: str) -> str:
        expected = self._expected_token()
        if not secrets.compare_digest(provided_admin_token, expected):
            raise InvalidAdminTokenError("Invalid admin token")
        self._session_token = secrets.token_urlsafe(32)
        return self._session_token

    def logout(self) -> None:
        self._session_token = None

    def validate_bearer_token(self, bearer_token: str) -> None:
        if not self.auth_enabled:
            return
        if self._session_token is None:
            raise InvalidAdminTokenError("No active session. Login first.")
        if not secrets.compare_digest(bearer_token, self._session_token):
            raise InvalidAdminTokenError("Invalid bearer token")

    def require_session(self) -> None:
        if not self.logged_in:
            raise AdminSessionRequiredError("Admin login is required for this action")
