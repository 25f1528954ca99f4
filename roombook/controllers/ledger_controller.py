"""HTTP controller layer for the authoritative request ledger."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator

from roombook.controllers.dependencies import get_ledger_repository, require_admin
from roombook.domain.models import BookingRequest
from roombook.repository.ledger_file_repository import LedgerFileRepository
from roombook.utils.config import get_settings
from roombook.utils.logger import get_logger


logger = get_logger(__name__)
settings = get_settings()

router = APIRouter(tags=["ledger"])


class RequestRecord(BaseModel):
    """Wire-format request; unknown keys are carried through untouched."""

    model_config = ConfigDict(extra="allow")

    id: str = Field(min_length=1)
    roomId: str = Field(min_length=1)
    date: str
    startTime: str = Field(pattern=settings.clock_regex)
    endTime: str = Field(pattern=settings.clock_regex)
    status: str = "pending"

    @field_validator("endTime")
    @classmethod
    def validate_interval(cls, value: str, info: ValidationInfo) -> str:
        start = info.data.get("startTime")
        if start is not None and start >= value:
            raise ValueError("endTime must be after startTime")
        return value


class RequestListResponse(BaseModel):
    requests: list[dict[str, Any]]


class BookingListResponse(BaseModel):
    bookings: list[dict[str, Any]]


class HealthResponse(BaseModel):
    status: str = "ok"


def _validated_merge(record: dict[str, Any]) -> dict[str, Any]:
    RequestRecord.model_validate(record)
    return record


def _normalized(record: dict[str, Any]) -> dict[str, Any]:
    try:
        return {**record, **BookingRequest.from_dict(record).to_dict()}
    except (KeyError, TypeError, ValueError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid request record: {exc}",
        ) from exc


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse()


@router.get("/requests", response_model=RequestListResponse)
async def list_requests(
    repository: LedgerFileRepository = Depends(get_ledger_repository),
) -> RequestListResponse:
    try:
        return RequestListResponse(requests=repository.list_requests())
    except RuntimeError as exc:
        logger.exception("Ledger read failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to read requests",
        ) from exc


@router.post("/requests", status_code=status.HTTP_201_CREATED)
async def create_request(
    payload: RequestRecord,
    repository: LedgerFileRepository = Depends(get_ledger_repository),
) -> dict[str, Any]:
    record = _normalized(payload.model_dump())
    try:
        return repository.append_request(record)
    except Exception as exc:  # pragma: no cover
        logger.exception("Unexpected failure while saving request")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save request",
        ) from exc


@router.patch(
    "/requests/{request_id}",
    dependencies=[Depends(require_admin)],
)
async def patch_request(
    request_id: str,
    updates: dict[str, Any] = Body(...),
    repository: LedgerFileRepository = Depends(get_ledger_repository),
) -> dict[str, Any]:
    try:
        merged = repository.patch_request(request_id, updates, validate=_validated_merge)
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=[error["msg"] for error in exc.errors()],
        ) from exc
    except Exception as exc:  # pragma: no cover
        logger.exception("Unexpected failure while updating request")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update request",
        ) from exc
    if merged is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Request {request_id} not found",
        )
    return merged


@router.get("/bookings", response_model=BookingListResponse)
async def list_bookings(
    repository: LedgerFileRepository = Depends(get_ledger_repository),
) -> BookingListResponse:
    try:
        return BookingListResponse(bookings=repository.list_bookings())
    except RuntimeError as exc:
        logger.exception("Booking read failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to read bookings",
        ) from exc


@router.post(
    "/bookings",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_booking(
    payload: RequestRecord,
    repository: LedgerFileRepository = Depends(get_ledger_repository),
) -> dict[str, Any]:
    booking = _normalized(payload.model_dump())
    try:
        return repository.append_booking(booking)
    except Exception as exc:  # pragma: no cover
        logger.exception("Unexpected failure while saving booking")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save booking",
        ) from exc
