"""HTTP route definitions for the service."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.auth import verify_token
from app.schemas import (
    DeleteResponse,
    ErrorResponse,
    TrafficCreateRequest,
    TrafficListResponse,
    TrafficRecordResponse,
    TrafficUpdateRequest,
)
from models.errors import TrafficError
from services.traffic import TrafficService, build_default_service

router = APIRouter()

_ERROR_RESPONSES = {
    code: {"model": ErrorResponse}
    for code in (
        status.HTTP_400_BAD_REQUEST,
        status.HTTP_401_UNAUTHORIZED,
        status.HTTP_404_NOT_FOUND,
        status.HTTP_405_METHOD_NOT_ALLOWED,
        status.HTTP_409_CONFLICT,
    )
}


def get_service() -> TrafficService:
    return build_default_service()


def _require_id(record_id: Optional[str]) -> str:
    if not record_id or not record_id.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Entry ID required",
        )
    return record_id.strip()


def _as_http_error(exc: TrafficError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=exc.message)


@router.get(
    "/traffic",
    response_model=TrafficListResponse,
    responses=_ERROR_RESPONSES,
    summary="Fetch every traffic entry, newest date first.",
)
async def list_traffic(
    _user_id: str = Depends(verify_token),
    service: TrafficService = Depends(get_service),
) -> TrafficListResponse:
    records = service.list_records()
    return TrafficListResponse(
        data=records,
        message=f"Retrieved {len(records)} traffic entries",
    )


@router.post(
    "/traffic",
    status_code=status.HTTP_201_CREATED,
    response_model=TrafficRecordResponse,
    responses=_ERROR_RESPONSES,
    summary="Add a traffic entry for a date that has none yet.",
)
async def create_traffic(
    payload: TrafficCreateRequest,
    _user_id: str = Depends(verify_token),
    service: TrafficService = Depends(get_service),
) -> TrafficRecordResponse:
    try:
        record = service.create_record(payload)
    except TrafficError as exc:
        raise _as_http_error(exc) from exc
    return TrafficRecordResponse(data=record, message="Traffic entry created successfully")


@router.put(
    "/traffic",
    response_model=TrafficRecordResponse,
    responses=_ERROR_RESPONSES,
    summary="Change the date and/or visits of an existing entry.",
)
async def update_traffic(
    payload: TrafficUpdateRequest,
    record_id: Optional[str] = Query(None, alias="id", description="Entry identifier."),
    _user_id: str = Depends(verify_token),
    service: TrafficService = Depends(get_service),
) -> TrafficRecordResponse:
    entry_id = _require_id(record_id)
    try:
        record = service.update_record(entry_id, payload)
    except TrafficError as exc:
        raise _as_http_error(exc) from exc
    return TrafficRecordResponse(data=record, message="Traffic entry updated successfully")


@router.delete(
    "/traffic",
    response_model=DeleteResponse,
    responses=_ERROR_RESPONSES,
    summary="Permanently remove an entry.",
)
async def delete_traffic(
    record_id: Optional[str] = Query(None, alias="id", description="Entry identifier."),
    _user_id: str = Depends(verify_token),
    service: TrafficService = Depends(get_service),
) -> DeleteResponse:
    entry_id = _require_id(record_id)
    try:
        service.delete_record(entry_id)
    except TrafficError as exc:
        raise _as_http_error(exc) from exc
    return DeleteResponse(message="Traffic entry deleted successfully")


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /health for service status."}
