import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from disaster_reports.core.config import Settings
from disaster_reports.models.report import Report
from disaster_reports.models.user import User
from disaster_reports.services.seed import SAMPLE_REPORTS, seed_database


@pytest.mark.asyncio
async def test_seed_is_idempotent(db_session: AsyncSession):
    settings = Settings(seed_admin_username="admin", seed_admin_password="admin123", seed_sample_reports=True)

    await seed_database(db_session, settings)
    await seed_database(db_session, settings)

    users = (await db_session.execute(select(User))).scalars().all()
    assert [(user.username, user.role) for user in users] == [("admin", "admin")]

    count = await db_session.scalar(select(func.count(Report.id)))
    assert count == len(SAMPLE_REPORTS)


@pytest.mark.asyncio
async def test_seed_without_sample_reports(db_session: AsyncSession):
    await seed_database(db_session, Settings(seed_sample_reports=False))

    assert await db_session.scalar(select(func.count(Report.id))) == 0
