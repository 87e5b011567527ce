"""Disaster report endpoints."""
from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from disaster_reports.core.config import Settings
from disaster_reports.core.dependencies import get_app_settings, get_db, get_geocoder, get_transition_policy
from disaster_reports.core.exceptions import InvalidStatusError, InvalidTransitionError, StoreError
from disaster_reports.schemas.report import (
    BatchGeocodeResult,
    BatchGeocodeUpdate,
    CoordinatesUpdate,
    LatLng,
    ReportRead,
    StatusUpdate,
)
from disaster_reports.services import reports as report_service
from disaster_reports.services.geocoding import Geocoder
from disaster_reports.services.transitions import TransitionPolicy, parse_status

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["reports"])


def _store_failure(action: str, exc: Exception) -> HTTPException:
    logger.exception("Failed to %s", action)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Failed to {action}")


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Report not found")


@router.post("", response_model=ReportRead)
async def submit_report(
    payload: Any = Body(...),
    session: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
    geocoder: Geocoder = Depends(get_geocoder),
) -> ReportRead:
    data = report_service.validate_report(payload)

    if not data.latitude or not data.longitude:
        coords, _ = await geocoder.resolve(data.location)
        data = data.model_copy(update={"latitude": str(coords.lat), "longitude": str(coords.lng)})

    try:
        report = await report_service.create_report(
            session,
            data,
            code_prefix=settings.code_prefix,
            max_attempts=settings.code_max_attempts,
        )
        await session.commit()
    except (StoreError, SQLAlchemyError) as exc:
        raise _store_failure("create report", exc) from exc
    return ReportRead.model_validate(report)


@router.get("", response_model=list[ReportRead])
async def list_reports(
    status_filter: str | None = Query(default=None, alias="status"),
    email: str | None = Query(default=None),
    session: AsyncSession = Depends(get_db),
) -> list[ReportRead]:
    # Only one filter applies; status takes precedence when both are sent.
    try:
        if status_filter:
            reports = await report_service.list_reports_by_status(session, parse_status(status_filter))
        elif email:
            reports = await report_service.list_reports_by_email(session, email)
        else:
            reports = await report_service.list_reports(session)
    except InvalidStatusError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid status") from exc
    except StoreError as exc:
        raise _store_failure("fetch reports", exc) from exc
    return [ReportRead.model_validate(report) for report in reports]


@router.get("/recent", response_model=list[ReportRead])
async def list_recent_reports(
    limit: int = Query(default=10, ge=1, le=100),
    session: AsyncSession = Depends(get_db),
) -> list[ReportRead]:
    try:
        reports = await report_service.list_recent_reports(session, limit)
    except StoreError as exc:
        raise _store_failure("fetch reports", exc) from exc
    return [ReportRead.model_validate(report) for report in reports]


@router.get("/code/{code}", response_model=ReportRead)
async def get_report_by_code(code: str, session: AsyncSession = Depends(get_db)) -> ReportRead:
    try:
        report = await report_service.get_report_by_code(session, code)
    except StoreError as exc:
        raise _store_failure("fetch report", exc) from exc
    if not report:
        raise _not_found()
    return ReportRead.model_validate(report)


@router.get("/{report_id}", response_model=ReportRead)
async def get_report(report_id: int, session: AsyncSession = Depends(get_db)) -> ReportRead:
    try:
        report = await report_service.get_report(session, report_id)
    except StoreError as exc:
        raise _store_failure("fetch report", exc) from exc
    if not report:
        raise _not_found()
    return ReportRead.model_validate(report)


@router.patch("/{report_id}/status", response_model=ReportRead)
async def update_report_status(
    report_id: int,
    payload: StatusUpdate,
    session: AsyncSession = Depends(get_db),
    policy: TransitionPolicy = Depends(get_transition_policy),
) -> ReportRead:
    try:
        new_status = parse_status(payload.status)
    except InvalidStatusError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid status") from exc

    try:
        report = await report_service.update_report_status(
            session, report_id, new_status, payload.assigned_to, policy=policy
        )
        await session.commit()
    except InvalidTransitionError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    # The requested status is already parsed, so this one is the stored value.
    except (InvalidStatusError, StoreError, SQLAlchemyError) as exc:
        raise _store_failure("update report status", exc) from exc

    if not report:
        raise _not_found()
    return ReportRead.model_validate(report)


@router.patch("/{report_id}/coordinates", response_model=ReportRead)
async def update_report_coordinates(
    report_id: int,
    payload: CoordinatesUpdate,
    session: AsyncSession = Depends(get_db),
    geocoder: Geocoder = Depends(get_geocoder),
) -> ReportRead:
    lat, lng = payload.latitude, payload.longitude
    if lat in (None, "") or lng in (None, ""):
        if not payload.location:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="Location is required for geocoding"
            )
        coords, _ = await geocoder.resolve(payload.location)
        lat, lng = coords.lat, coords.lng

    try:
        report = await report_service.update_report_coordinates(session, report_id, str(lat), str(lng))
        await session.commit()
    except (StoreError, SQLAlchemyError) as exc:
        raise _store_failure("update coordinates", exc) from exc

    if not report:
        raise _not_found()
    return ReportRead.model_validate(report)


@router.post("/batch-geocode", response_model=BatchGeocodeResult)
async def batch_geocode_reports(
    session: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
    geocoder: Geocoder = Depends(get_geocoder),
) -> BatchGeocodeResult:
    """Fill in coordinates for every report that is still missing them."""
    updates: list[BatchGeocodeUpdate] = []
    success_count = 0
    fail_count = 0

    try:
        pending = await report_service.list_reports_without_coordinates(session)
        for index, report in enumerate(pending):
            if index and settings.geocoding_batch_delay_seconds > 0:
                # Nominatim allows roughly one request per second.
                await asyncio.sleep(settings.geocoding_batch_delay_seconds)

            logger.info("Geocoding report %s: %s", report.id, report.location)
            coords, is_default = await geocoder.resolve(report.location)
            await report_service.update_report_coordinates(session, report.id, str(coords.lat), str(coords.lng))
            if is_default:
                fail_count += 1
            else:
                success_count += 1
            updates.append(
                BatchGeocodeUpdate(
                    id=report.id,
                    location=report.location,
                    coordinates=LatLng(lat=coords.lat, lng=coords.lng),
                    status="default" if is_default else "success",
                )
            )
        await session.commit()
    except (StoreError, SQLAlchemyError) as exc:
        raise _store_failure("batch geocode reports", exc) from exc

    return BatchGeocodeResult(
        message="Batch geocoding completed",
        total_processed=len(updates),
        success_count=success_count,
        fail_count=fail_count,
        updates=updates,
    )
