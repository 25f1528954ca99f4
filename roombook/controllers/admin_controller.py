"""Controller layer for admin login and ledger counters."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from roombook.controllers.dependencies import get_auth_service, get_ledger_repository, require_admin
from roombook.domain.models import BookingRequest
from roombook.repository.ledger_file_repository import LedgerFileRepository
from roombook.services.auth_service import (
    AdminTokenNotConfiguredError,
    AuthService,
    InvalidAdminTokenError,
)
from roombook.services.report_service import summarize_ledger
from roombook.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(tags=["admin"])


class LoginRequest(BaseModel):
    admin_token: str = Field(min_length=1)


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class SummaryResponse(BaseModel):
    total: int = Field(ge=0)
    pending: int = Field(ge=0)
    approved: int = Field(ge=0)
    rejected: int = Field(ge=0)
    paid: int = Field(ge=0)
    unpaid: int = Field(ge=0)
    upcoming: int = Field(ge=0)


@router.post("/login", response_model=LoginResponse)
async def login(
    payload: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    try:
        token = auth_service.login(payload.admin_token)
    except InvalidAdminTokenError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc
    except AdminTokenNotConfiguredError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(exc),
        ) from exc
    logger.info("Admin session issued")
    return LoginResponse(access_token=token)


@router.get(
    "/admin/summary",
    response_model=SummaryResponse,
    dependencies=[Depends(require_admin)],
)
async def admin_summary(
    repository: LedgerFileRepository = Depends(get_ledger_repository),
) -> SummaryResponse:
    try:
        requests = [BookingRequest.from_dict(item) for item in repository.list_requests()]
        return SummaryResponse(**summarize_ledger(requests, date.today()).to_dict())
    except Exception as exc:  # pragma: no cover
        logger.exception("Unexpected failure while summarizing ledger")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to summarize ledger",
        ) from exc
