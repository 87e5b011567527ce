"""Startup seeding of the admin account and demo reports."""
from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from disaster_reports.core.config import Settings
from disaster_reports.models.report import Report
from disaster_reports.schemas.report import ReportCreate
from disaster_reports.services.reports import create_report
from disaster_reports.services.users import ensure_admin

logger = logging.getLogger(__name__)

SAMPLE_REPORTS: list[dict[str, str]] = [
    {
        "disasterType": "Banjir",
        "location": "Jakarta Pusat",
        "detailedAddress": "Jl. MH Thamrin No. 10",
        "description": "Banjir setinggi 50cm akibat hujan deras sejak pagi. Beberapa kendaraan mogok dan akses jalan terganggu.",
        "reporterName": "Ahmad Fauzi",
        "reporterPhone": "081234567890",
        "reporterEmail": "ahmad.fauzi@email.com",
        "latitude": "-6.2088",
        "longitude": "106.8456",
        "status": "pending",
    },
    {
        "disasterType": "Kebakaran",
        "location": "Bandung, Jawa Barat",
        "detailedAddress": "Jl. Asia Afrika No. 25",
        "description": "Kebakaran di area pasar tradisional. Api sudah mulai dipadamkan oleh pemadam kebakaran.",
        "reporterName": "Siti Nurhaliza",
        "reporterPhone": "082345678901",
        "reporterEmail": "siti.nur@email.com",
        "latitude": "-6.9175",
        "longitude": "107.6191",
        "status": "validated",
    },
    {
        "disasterType": "Longsor",
        "location": "Bogor, Jawa Barat",
        "detailedAddress": "Jl. Raya Puncak KM 15",
        "description": "Longsor di tebing jalan raya akibat hujan berkepanjangan. Jalur lalu lintas terputus.",
        "reporterName": "Budi Santoso",
        "reporterPhone": "083456789012",
        "reporterEmail": "budi.santoso@email.com",
        "latitude": "-6.5971",
        "longitude": "106.8060",
        "status": "in_progress",
    },
    {
        "disasterType": "Gempa",
        "location": "Yogyakarta",
        "detailedAddress": "Malioboro Street",
        "description": "Gempa bumi berkekuatan 5.2 SR terasa selama 15 detik. Tidak ada kerusakan berarti.",
        "reporterName": "Dewi Sartika",
        "reporterPhone": "084567890123",
        "reporterEmail": "dewi.sartika@email.com",
        "latitude": "-7.7956",
        "longitude": "110.3695",
        "status": "resolved",
    },
    {
        "disasterType": "Banjir",
        "location": "Surabaya, Jawa Timur",
        "detailedAddress": "Jl. Pemuda No. 50",
        "description": "Genangan air di area perumahan akibat drainase yang tersumbat.",
        "reporterName": "Rudi Hartono",
        "reporterPhone": "085678901234",
        "reporterEmail": "rudi.hartono@email.com",
        "latitude": "-7.2575",
        "longitude": "112.7521",
        "status": "pending",
    },
]


async def seed_database(session: AsyncSession, settings: Settings) -> None:
    """Create the admin user and, on an empty reports table, the demo reports. Idempotent."""

    await ensure_admin(
        session,
        settings.seed_admin_username,
        settings.seed_admin_password,
        settings.seed_admin_name,
    )
    await session.commit()

    if not settings.seed_sample_reports:
        return

    result = await session.execute(select(Report.id).limit(1))
    if result.first() is not None:
        return

    for payload in SAMPLE_REPORTS:
        await create_report(
            session,
            ReportCreate.model_validate(payload),
            code_prefix=settings.code_prefix,
            max_attempts=settings.code_max_attempts,
        )
    await session.commit()
    logger.info("Created %d sample reports", len(SAMPLE_REPORTS))
