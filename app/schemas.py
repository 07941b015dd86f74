"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from services.validation import EMPTY_UPDATE_MESSAGE, check_date, check_visits


class TrafficRecord(BaseModel):
    """A stored traffic entry as exposed over the API."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Identifier assigned by the store on creation.")
    date: str = Field(..., description="Calendar day in YYYY-MM-DD form.")
    visits: int = Field(..., ge=0)
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")


class TrafficCreateRequest(BaseModel):
    """Body of ``POST /traffic``."""

    date: str
    visits: int

    @field_validator("date", mode="before")
    @classmethod
    def validate_date(cls, value: Any) -> str:
        return check_date(value)

    @field_validator("visits", mode="before")
    @classmethod
    def validate_visits(cls, value: Any) -> int:
        return check_visits(value)


class TrafficUpdateRequest(BaseModel):
    """Body of ``PUT /traffic``; either field may be omitted, not both."""

    date: Optional[str] = None
    visits: Optional[int] = None

    @field_validator("date", mode="before")
    @classmethod
    def validate_date(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        return check_date(value)

    @field_validator("visits", mode="before")
    @classmethod
    def validate_visits(cls, value: Any) -> Optional[int]:
        if value is None:
            return None
        return check_visits(value)

    @model_validator(mode="after")
    def require_a_field(self) -> "TrafficUpdateRequest":
        if self.date is None and self.visits is None:
            raise ValueError(EMPTY_UPDATE_MESSAGE)
        return self


class TrafficListResponse(BaseModel):
    success: bool = True
    data: List[TrafficRecord] = Field(default_factory=list)
    message: Optional[str] = None


class TrafficRecordResponse(BaseModel):
    success: bool = True
    data: TrafficRecord
    message: Optional[str] = None


class DeleteResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None


class ErrorResponse(BaseModel):
    """Envelope for every failed request."""

    success: bool = False
    error: str
