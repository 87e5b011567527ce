"""Pydantic schemas for disaster reports.

Field names are snake_case in Python and camelCase on the wire.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from disaster_reports.models.report import ReportStatus

MIN_DESCRIPTION_LENGTH = 10


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class ReportCreate(CamelModel):
    disaster_type: str = Field(..., min_length=1, max_length=64)
    location: str = Field(..., min_length=1, max_length=255)
    detailed_address: str | None = Field(default=None, max_length=512)
    description: str = Field(..., min_length=MIN_DESCRIPTION_LENGTH)
    reporter_name: str | None = Field(default=None, max_length=255)
    reporter_phone: str | None = Field(default=None, max_length=32)
    reporter_email: str | None = Field(default=None, max_length=255)
    photos: list[str] = Field(default_factory=list)
    status: ReportStatus | None = None
    latitude: str | None = Field(default=None, max_length=32)
    longitude: str | None = Field(default=None, max_length=32)

    @field_validator("disaster_type", "location", mode="before")
    @classmethod
    def _strip_required(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator(
        "detailed_address", "reporter_name", "reporter_phone", "reporter_email", mode="before"
    )
    @classmethod
    def _optional_text(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("reporter_email")
    @classmethod
    def _check_email(cls, value: str | None) -> str | None:
        # Stored as typed; lookups by email are exact.
        if value is None:
            return value
        try:
            validate_email(value, check_deliverability=False)
        except EmailNotValidError as exc:
            raise ValueError(f"Invalid email address: {exc}") from exc
        return value

    @field_validator("photos", mode="before")
    @classmethod
    def _photos_as_list(cls, value: Any) -> Any:
        if value is None or value == "":
            return []
        if isinstance(value, str):
            return [value]
        return value

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def _coordinate_as_text(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return _blank_to_none(value)


class ReportRead(CamelModel):
    id: int
    code: str
    disaster_type: str
    location: str
    detailed_address: str | None = None
    description: str
    reporter_name: str | None = None
    reporter_phone: str | None = None
    reporter_email: str | None = None
    photos: list[str] = []
    status: ReportStatus
    latitude: str | None = None
    longitude: str | None = None
    assigned_to: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    @field_validator("photos", mode="before")
    @classmethod
    def _stored_photos(cls, value: Any) -> Any:
        return value or []


class StatusUpdate(CamelModel):
    # Kept as plain text so an unknown value maps to "Invalid status" rather than a schema error.
    status: Any = None
    assigned_to: str | None = Field(default=None, max_length=255)


class CoordinatesUpdate(CamelModel):
    latitude: float | str | None = None
    longitude: float | str | None = None
    location: str | None = None


class GeocodeRequest(CamelModel):
    location: str | None = None


class LatLng(CamelModel):
    lat: float
    lng: float


class GeocodeResult(LatLng):
    is_default: bool | None = None
    message: str | None = None


class BatchGeocodeUpdate(CamelModel):
    id: int
    location: str
    coordinates: LatLng
    status: str  # "success" or "default"


class BatchGeocodeResult(CamelModel):
    message: str
    total_processed: int
    success_count: int
    fail_count: int
    updates: list[BatchGeocodeUpdate]
