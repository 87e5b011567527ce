from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from disaster_reports.core.exceptions import InvalidTransitionError, ReportValidationError, StoreError
from disaster_reports.models.report import ReportStatus
from disaster_reports.schemas.report import ReportCreate
from disaster_reports.services import reports as report_service
from disaster_reports.services.transitions import TransitionPolicy


def _report(**overrides) -> ReportCreate:
    payload = {
        "disasterType": "banjir",
        "location": "Jakarta",
        "description": "Banjir besar di lokasi",
        "reporterEmail": "a@b.com",
    }
    payload.update(overrides)
    return ReportCreate.model_validate(payload)


@pytest.mark.asyncio
async def test_create_report_assigns_code_and_defaults(db_session: AsyncSession):
    report = await report_service.create_report(db_session, _report())

    assert report.id is not None
    assert report.code.startswith("QA-")
    assert report.status == ReportStatus.PENDING.value
    assert report.photos == []
    assert report.created_at is not None
    assert report.updated_at is not None


@pytest.mark.asyncio
async def test_create_report_keeps_explicit_status_and_prefix(db_session: AsyncSession):
    report = await report_service.create_report(db_session, _report(status="validated"), code_prefix="SB")

    assert report.status == "validated"
    assert report.code.startswith("SB-")


@pytest.mark.asyncio
async def test_lookup_by_code_returns_same_report(db_session: AsyncSession):
    created = [await report_service.create_report(db_session, _report()) for _ in range(5)]

    for report in created:
        found = await report_service.get_report_by_code(db_session, report.code)
        assert found is not None
        assert found.id == report.id

    assert await report_service.get_report_by_code(db_session, "QA-000000-XXX") is None
    assert await report_service.get_report(db_session, 9999) is None


@pytest.mark.asyncio
async def test_codes_unique_across_many_creations(db_session: AsyncSession):
    reports = [await report_service.create_report(db_session, _report()) for _ in range(200)]
    codes = {report.code for report in reports}
    assert len(codes) == len(reports)


@pytest.mark.asyncio
async def test_create_retries_when_code_is_taken(db_session: AsyncSession, monkeypatch):
    existing = await report_service.create_report(db_session, _report())
    proposals = iter([existing.code, "QA-000001-NEW"])
    monkeypatch.setattr(report_service, "generate_code", lambda prefix="QA": next(proposals))

    report = await report_service.create_report(db_session, _report())

    assert report.code == "QA-000001-NEW"


@pytest.mark.asyncio
async def test_create_gives_up_after_max_attempts(db_session: AsyncSession, monkeypatch):
    existing = await report_service.create_report(db_session, _report())
    monkeypatch.setattr(report_service, "generate_code", lambda prefix="QA": existing.code)

    with pytest.raises(StoreError):
        await report_service.create_report(db_session, _report(), max_attempts=3)


@pytest.mark.asyncio
async def test_insert_collision_keeps_earlier_reports(db_session: AsyncSession, monkeypatch):
    kept = await report_service.create_report(db_session, _report(location="Bandung"))
    proposals = iter([kept.code, "QA-000001-NEW"])
    monkeypatch.setattr(report_service, "generate_code", lambda prefix="QA": next(proposals))

    # Another process took the code between the lookup and the insert.
    async def never_taken(session, code):
        return False

    monkeypatch.setattr(report_service, "_code_exists", never_taken)

    report = await report_service.create_report(db_session, _report(location="Surabaya"))

    assert report.code == "QA-000001-NEW"
    stored = await report_service.list_reports(db_session)
    assert [r.code for r in stored] == [kept.code, "QA-000001-NEW"]


@pytest.mark.asyncio
async def test_insert_collisions_exhaust_attempts(db_session: AsyncSession, monkeypatch):
    kept = await report_service.create_report(db_session, _report())
    monkeypatch.setattr(report_service, "generate_code", lambda prefix="QA": kept.code)

    async def never_taken(session, code):
        return False

    monkeypatch.setattr(report_service, "_code_exists", never_taken)

    with pytest.raises(StoreError):
        await report_service.create_report(db_session, _report(), max_attempts=2)

    assert [r.id for r in await report_service.list_reports(db_session)] == [kept.id]


@pytest.mark.asyncio
async def test_list_reports_ordered_by_creation(db_session: AsyncSession):
    first = await report_service.create_report(db_session, _report(location="Bandung"))
    second = await report_service.create_report(db_session, _report(location="Surabaya"))

    reports = await report_service.list_reports(db_session)

    assert [report.id for report in reports] == [first.id, second.id]


@pytest.mark.asyncio
async def test_list_by_email_is_exact_and_case_sensitive(db_session: AsyncSession):
    mine = await report_service.create_report(db_session, _report(reporterEmail="a@b.com"))
    await report_service.create_report(db_session, _report(reporterEmail="A@B.com"))
    await report_service.create_report(db_session, _report(reporterEmail="other@b.com"))
    await report_service.create_report(db_session, _report(reporterEmail=None))

    reports = await report_service.list_reports_by_email(db_session, "a@b.com")

    assert [report.id for report in reports] == [mine.id]
    assert await report_service.list_reports_by_email(db_session, "") == []


@pytest.mark.asyncio
async def test_list_by_status(db_session: AsyncSession):
    await report_service.create_report(db_session, _report())
    resolved = await report_service.create_report(db_session, _report(status="resolved"))

    reports = await report_service.list_reports_by_status(db_session, ReportStatus.RESOLVED)

    assert [report.id for report in reports] == [resolved.id]


@pytest.mark.asyncio
async def test_update_status_keeps_code_and_created_at(db_session: AsyncSession):
    report = await report_service.create_report(db_session, _report())
    code, created_at = report.code, report.created_at

    updated = await report_service.update_report_status(db_session, report.id, ReportStatus.RESOLVED)
    await db_session.commit()
    await db_session.refresh(updated)

    fetched = await report_service.get_report(db_session, report.id)
    assert fetched.status == "resolved"
    assert fetched.code == code
    assert fetched.created_at == created_at


@pytest.mark.asyncio
async def test_update_status_assignee_handling(db_session: AsyncSession):
    report = await report_service.create_report(db_session, _report())

    await report_service.update_report_status(db_session, report.id, ReportStatus.VALIDATED, "Tim SAR 1")
    assert report.assigned_to == "Tim SAR 1"

    await report_service.update_report_status(db_session, report.id, ReportStatus.IN_PROGRESS, "Tim SAR 2")
    assert report.assigned_to == "Tim SAR 2"

    await report_service.update_report_status(db_session, report.id, ReportStatus.RESOLVED)
    assert report.assigned_to == "Tim SAR 2"

    await report_service.update_report_status(db_session, report.id, ReportStatus.RESOLVED, "")
    assert report.assigned_to is None


@pytest.mark.asyncio
async def test_update_status_unknown_report(db_session: AsyncSession):
    assert await report_service.update_report_status(db_session, 404, ReportStatus.RESOLVED) is None


@pytest.mark.asyncio
async def test_update_status_respects_strict_policy(db_session: AsyncSession):
    report = await report_service.create_report(db_session, _report())

    with pytest.raises(InvalidTransitionError):
        await report_service.update_report_status(
            db_session, report.id, ReportStatus.IN_PROGRESS, policy=TransitionPolicy(strict=True)
        )
    assert report.status == "pending"


@pytest.mark.asyncio
async def test_stats_on_empty_store(db_session: AsyncSession):
    stats = await report_service.get_report_stats(db_session)

    assert stats.model_dump(by_alias=True) == {
        "total": 0,
        "pending": 0,
        "validated": 0,
        "inProgress": 0,
        "resolved": 0,
    }


@pytest.mark.asyncio
async def test_stats_with_one_report_per_status(db_session: AsyncSession):
    for status in ReportStatus:
        await report_service.create_report(db_session, _report(status=status.value))

    stats = await report_service.get_report_stats(db_session)

    assert stats.model_dump(by_alias=True) == {
        "total": 4,
        "pending": 1,
        "validated": 1,
        "inProgress": 1,
        "resolved": 1,
    }


@pytest.mark.asyncio
async def test_coordinates_update_and_missing_listing(db_session: AsyncSession):
    located = await report_service.create_report(db_session, _report(latitude="-6.2", longitude="106.8"))
    missing = await report_service.create_report(db_session, _report())

    pending = await report_service.list_reports_without_coordinates(db_session)
    assert [report.id for report in pending] == [missing.id]

    await report_service.update_report_coordinates(db_session, missing.id, "-6.9", "107.6")
    assert await report_service.list_reports_without_coordinates(db_session) == []
    assert located.latitude == "-6.2"
    assert await report_service.update_report_coordinates(db_session, 404, "0", "0") is None


@pytest.mark.asyncio
async def test_count_by_disaster_type_is_case_insensitive(db_session: AsyncSession):
    await report_service.create_report(db_session, _report(disasterType="Banjir"))
    await report_service.create_report(db_session, _report(disasterType="banjir"))
    await report_service.create_report(db_session, _report(disasterType="Gempa"))

    assert await report_service.count_by_disaster_type(db_session) == {"banjir": 2, "gempa": 1}


@pytest.mark.asyncio
async def test_recent_reports_newest_first(db_session: AsyncSession):
    created = [await report_service.create_report(db_session, _report()) for _ in range(3)]

    recent = await report_service.list_recent_reports(db_session, limit=2)

    assert [report.id for report in recent] == [created[2].id, created[1].id]


@pytest.mark.asyncio
async def test_trend_is_zero_filled(db_session: AsyncSession):
    await report_service.create_report(db_session, _report())
    today = datetime.now(timezone.utc).date()

    trend = await report_service.report_trend(db_session, days=7, today=today)

    assert len(trend) == 7
    assert trend[0].date == (today - timedelta(days=6)).isoformat()
    assert trend[-1].date == today.isoformat()
    assert trend[-1].count == 1
    assert sum(point.count for point in trend) == 1


def test_validate_report_description_boundary():
    with pytest.raises(ReportValidationError) as exc_info:
        report_service.validate_report(
            {"disasterType": "banjir", "location": "Jakarta", "description": "123456789"}
        )
    assert [error["field"] for error in exc_info.value.errors] == ["description"]

    accepted = report_service.validate_report(
        {"disasterType": "banjir", "location": "Jakarta", "description": "1234567890"}
    )
    assert accepted.description == "1234567890"


def test_validate_report_lists_every_failing_field():
    with pytest.raises(ReportValidationError) as exc_info:
        report_service.validate_report({"location": "  ", "description": "short", "reporterEmail": "nope"})

    fields = {error["field"] for error in exc_info.value.errors}
    assert fields == {"disasterType", "location", "description", "reporterEmail"}


def test_validate_report_rejects_non_object():
    with pytest.raises(ReportValidationError) as exc_info:
        report_service.validate_report(["not", "an", "object"])
    assert exc_info.value.errors[0]["field"] == "body"


def test_validate_report_normalizes_photos_and_blanks():
    data = report_service.validate_report(
        {
            "disasterType": "banjir",
            "location": "Jakarta",
            "description": "Banjir besar di lokasi",
            "photos": "https://example.com/a.jpg",
            "reporterEmail": "",
            "latitude": -6.2088,
        }
    )
    assert data.photos == ["https://example.com/a.jpg"]
    assert data.reporter_email is None
    assert data.latitude == "-6.2088"
