"""API router aggregator."""
from fastapi import APIRouter

from disaster_reports.api.routes import auth, geocoding, reports, stats

api_router = APIRouter(prefix="/api")
api_router.include_router(auth.router)
api_router.include_router(reports.router)
api_router.include_router(stats.router)
api_router.include_router(geocoding.router)

__all__ = ["api_router"]
