"""Database model for citizen disaster reports."""
from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import JSON, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from disaster_reports.db.base import Base, utcnow


class ReportStatus(str, enum.Enum):
    """Triage state of a report."""

    PENDING = "pending"
    VALIDATED = "validated"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"


class Report(Base):
    """Incident submitted by a citizen and tracked by its public code."""

    __tablename__ = "reports"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    code: Mapped[str] = mapped_column(String(32), unique=True, nullable=False, index=True)
    disaster_type: Mapped[str] = mapped_column(String(64), nullable=False)
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    detailed_address: Mapped[str | None] = mapped_column(String(512), default=None)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    reporter_name: Mapped[str | None] = mapped_column(String(255), default=None)
    reporter_phone: Mapped[str | None] = mapped_column(String(32), default=None)
    reporter_email: Mapped[str | None] = mapped_column(String(255), default=None, index=True)
    photos: Mapped[list[str]] = mapped_column(JSON, default=list)  # ordered photo URLs
    status: Mapped[str] = mapped_column(String(32), default=ReportStatus.PENDING.value, index=True)
    latitude: Mapped[str | None] = mapped_column(String(32), default=None)
    longitude: Mapped[str | None] = mapped_column(String(32), default=None)
    assigned_to: Mapped[str | None] = mapped_column(String(255), default=None)  # free text, not a user FK
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
