"""Aggregate statistics endpoints for the admin dashboard."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from disaster_reports.core.dependencies import get_db
from disaster_reports.core.exceptions import StoreError
from disaster_reports.schemas.stats import ReportStats, TrendPoint
from disaster_reports.services import reports as report_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/stats", tags=["stats"])


def _failed(exc: StoreError) -> HTTPException:
    logger.exception("Failed to fetch statistics")
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch statistics")


@router.get("", response_model=ReportStats)
async def get_stats(session: AsyncSession = Depends(get_db)) -> ReportStats:
    try:
        return await report_service.get_report_stats(session)
    except StoreError as exc:
        raise _failed(exc) from exc


@router.get("/disaster-types", response_model=dict[str, int])
async def get_disaster_type_counts(session: AsyncSession = Depends(get_db)) -> dict[str, int]:
    try:
        return await report_service.count_by_disaster_type(session)
    except StoreError as exc:
        raise _failed(exc) from exc


@router.get("/trend", response_model=list[TrendPoint])
async def get_trend(
    days: int = Query(default=30, ge=1, le=365),
    session: AsyncSession = Depends(get_db),
) -> list[TrendPoint]:
    try:
        return await report_service.report_trend(session, days)
    except StoreError as exc:
        raise _failed(exc) from exc
