"""
app.py - FastAPI application factory for the remote request ledger.

This is the ASGI application object imported by uvicorn. It wires the JSON
ledger repository and the admin auth service, registers routers, and
prepares storage on startup.

Usage (via launcher):
    python main.py

Usage (direct uvicorn):
    uvicorn app:app --reload
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from roombook.controllers.admin_controller import router as admin_router
from roombook.controllers.ledger_controller import router as ledger_router
from roombook.repository.ledger_file_repository import LedgerFileRepository
from roombook.services.auth_service import AuthService
from roombook.utils.config import Settings, get_settings
from roombook.utils.logger import get_logger


logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build and wire the FastAPI application.

    Services are attached to app.state so every dependency is traceable
    from this function.
    """
    settings = settings or get_settings()

    ledger_repository = LedgerFileRepository(settings)
    auth_service = AuthService(settings=settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        _startup(app)
        yield

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )

    app.include_router(ledger_router)
    app.include_router(admin_router)

    app.state.settings = settings
    app.state.ledger_repository = ledger_repository
    app.state.auth_service = auth_service

    # Storage is created eagerly so transports that skip lifespan still work.
    ledger_repository.initialize_storage()
    return app


def _startup(app: FastAPI) -> None:
    """Idempotent startup sequence. Safe to re-run on server restarts."""
    repository: LedgerFileRepository = app.state.ledger_repository
    auth_service: AuthService = app.state.auth_service

    logger.info("Startup: ensuring ledger documents exist")
    repository.initialize_storage()

    if not auth_service.auth_enabled:
        logger.warning("Startup: ADMIN_TOKEN not set; admin endpoints are open")

    logger.info(
        "Startup complete | requests=%s | bookings=%s",
        len(repository.list_requests()),
        len(repository.list_bookings()),
    )


# Module-level app object for uvicorn
app = create_app()
