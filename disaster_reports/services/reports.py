"""Service layer for report persistence, lookup and aggregation."""
from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from datetime import date, datetime, timedelta, timezone
from typing import Any

from pydantic import ValidationError
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from disaster_reports.core.exceptions import ReportValidationError, StoreError
from disaster_reports.db.base import utcnow
from disaster_reports.models.report import Report, ReportStatus
from disaster_reports.schemas.report import ReportCreate
from disaster_reports.schemas.stats import ReportStats, TrendPoint
from disaster_reports.services.codes import generate_code
from disaster_reports.services.transitions import TransitionPolicy

logger = logging.getLogger(__name__)

_STATS_FIELDS = {
    ReportStatus.PENDING.value: "pending",
    ReportStatus.VALIDATED.value: "validated",
    ReportStatus.IN_PROGRESS.value: "in_progress",
    ReportStatus.RESOLVED.value: "resolved",
}


def _error_field(loc: tuple[Any, ...]) -> str:
    parts = [str(part) for part in loc if part != "body"]
    return ".".join(parts) or "body"


def format_validation_errors(errors: list[dict[str, Any]]) -> list[dict[str, str]]:
    """Flatten pydantic error entries into ``{field, message}`` pairs."""

    return [{"field": _error_field(tuple(error.get("loc", ()))), "message": error["msg"]} for error in errors]


def validate_report(payload: Mapping[str, Any] | ReportCreate) -> ReportCreate:
    """Check an untrusted submission, reporting every failing field at once."""

    if isinstance(payload, ReportCreate):
        return payload
    if not isinstance(payload, Mapping):
        raise ReportValidationError([{"field": "body", "message": "Expected a JSON object"}])
    try:
        return ReportCreate.model_validate(dict(payload))
    except ValidationError as exc:
        raise ReportValidationError(format_validation_errors(exc.errors())) from exc


@asynccontextmanager
async def _store_errors(action: str) -> AsyncIterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        raise StoreError(f"Failed to {action}") from exc


async def _code_exists(session: AsyncSession, code: str) -> bool:
    result = await session.execute(select(Report.id).where(Report.code == code))
    return result.first() is not None


async def create_report(
    session: AsyncSession,
    data: ReportCreate,
    *,
    code_prefix: str = "QA",
    max_attempts: int = 3,
) -> Report:
    """Persist a new report under a freshly generated tracking code."""

    values = data.model_dump(exclude={"status"})
    status = (data.status or ReportStatus.PENDING).value

    for attempt in range(1, max_attempts + 1):
        code = generate_code(code_prefix)
        async with _store_errors("create report"):
            if await _code_exists(session, code):
                logger.warning("Tracking code %s already taken (attempt %d/%d)", code, attempt, max_attempts)
                continue
            try:
                # A collision rolls back to the savepoint only.
                async with session.begin_nested():
                    report = Report(code=code, status=status, **values)
                    session.add(report)
                    await session.flush()
            except IntegrityError:
                logger.warning("Tracking code %s collided on insert (attempt %d/%d)", code, attempt, max_attempts)
                continue
            await session.refresh(report)
        logger.info("Created report %s (%s at %s)", report.code, report.disaster_type, report.location)
        return report

    raise StoreError("Failed to create report: could not allocate a unique tracking code")


async def get_report(session: AsyncSession, report_id: int) -> Report | None:
    async with _store_errors("fetch report"):
        return await session.get(Report, report_id)


async def get_report_by_code(session: AsyncSession, code: str) -> Report | None:
    async with _store_errors("fetch report"):
        result = await session.execute(select(Report).where(Report.code == code))
        return result.scalar_one_or_none()


async def list_reports(session: AsyncSession) -> list[Report]:
    async with _store_errors("fetch reports"):
        result = await session.execute(select(Report).order_by(Report.created_at, Report.id))
        return list(result.scalars().all())


async def list_reports_by_email(session: AsyncSession, email: str) -> list[Report]:
    # Exact, case-sensitive match. Reports filed without an email never match.
    async with _store_errors("fetch reports"):
        result = await session.execute(
            select(Report)
            .where(Report.reporter_email.is_not(None), Report.reporter_email == email)
            .order_by(Report.created_at, Report.id)
        )
        return list(result.scalars().all())


async def list_reports_by_status(session: AsyncSession, status: ReportStatus) -> list[Report]:
    async with _store_errors("fetch reports"):
        result = await session.execute(
            select(Report).where(Report.status == status.value).order_by(Report.created_at, Report.id)
        )
        return list(result.scalars().all())


async def list_recent_reports(session: AsyncSession, limit: int = 10) -> list[Report]:
    async with _store_errors("fetch reports"):
        result = await session.execute(
            select(Report).order_by(Report.created_at.desc(), Report.id.desc()).limit(limit)
        )
        return list(result.scalars().all())


async def list_reports_without_coordinates(session: AsyncSession) -> list[Report]:
    async with _store_errors("fetch reports"):
        result = await session.execute(
            select(Report)
            .where((Report.latitude.is_(None)) | (Report.latitude == "") | (Report.longitude.is_(None)) | (Report.longitude == ""))
            .order_by(Report.created_at, Report.id)
        )
        return list(result.scalars().all())


async def update_report_status(
    session: AsyncSession,
    report_id: int,
    status: ReportStatus,
    assigned_to: str | None = None,
    *,
    policy: TransitionPolicy | None = None,
) -> Report | None:
    """Move a report to ``status``.

    A given ``assigned_to`` replaces the previous assignee, an empty string clears
    it and ``None`` leaves it untouched.
    """

    report = await get_report(session, report_id)
    if report is None:
        return None

    (policy or TransitionPolicy()).check(report.status, status)

    previous = report.status
    report.status = status.value
    if assigned_to is not None:
        report.assigned_to = assigned_to.strip() or None
    report.updated_at = utcnow()
    async with _store_errors("update report status"):
        await session.flush()
    logger.info("Report %s status %s -> %s", report.code, previous, report.status)
    return report


async def update_report_coordinates(
    session: AsyncSession, report_id: int, latitude: str, longitude: str
) -> Report | None:
    report = await get_report(session, report_id)
    if report is None:
        return None

    report.latitude = latitude
    report.longitude = longitude
    report.updated_at = utcnow()
    async with _store_errors("update coordinates"):
        await session.flush()
    return report


async def get_report_stats(session: AsyncSession) -> ReportStats:
    async with _store_errors("fetch statistics"):
        result = await session.execute(select(Report.status, func.count(Report.id)).group_by(Report.status))
        rows = result.all()

    stats = ReportStats()
    for status, count in rows:
        stats.total += count
        field = _STATS_FIELDS.get(status)
        if field:
            setattr(stats, field, getattr(stats, field) + count)
    return stats


async def count_by_disaster_type(session: AsyncSession) -> dict[str, int]:
    kind = func.lower(Report.disaster_type)
    async with _store_errors("fetch statistics"):
        result = await session.execute(select(kind, func.count(Report.id)).group_by(kind).order_by(kind))
        return {name: count for name, count in result.all()}


def _as_utc_date(value: datetime) -> date:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.date()


async def report_trend(session: AsyncSession, days: int = 30, today: date | None = None) -> list[TrendPoint]:
    """Daily report counts for the last ``days`` days, oldest first, zero-filled."""

    today = today or datetime.now(timezone.utc).date()
    first_day = today - timedelta(days=days - 1)
    cutoff = datetime.combine(first_day, datetime.min.time(), tzinfo=timezone.utc)

    async with _store_errors("fetch statistics"):
        result = await session.execute(select(Report.created_at).where(Report.created_at >= cutoff))
        created = result.scalars().all()

    counts: dict[date, int] = {}
    for stamp in created:
        day = _as_utc_date(stamp)
        counts[day] = counts.get(day, 0) + 1

    return [
        TrendPoint(date=(first_day + timedelta(days=offset)).isoformat(), count=counts.get(first_day + timedelta(days=offset), 0))
        for offset in range(days)
    ]
