"""Aggregate report statistics."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ReportStats(BaseModel):
    total: int = 0
    pending: int = 0
    validated: int = 0
    in_progress: int = 0
    resolved: int = 0

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TrendPoint(BaseModel):
    date: str
    count: int
