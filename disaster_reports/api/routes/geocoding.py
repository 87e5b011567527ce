"""Manual geocoding endpoint used by the report form map picker."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from disaster_reports.core.dependencies import get_geocoder
from disaster_reports.schemas.report import GeocodeRequest, GeocodeResult
from disaster_reports.services.geocoding import Geocoder

router = APIRouter(tags=["geocoding"])


@router.post("/geocode", response_model=GeocodeResult, response_model_exclude_none=True)
async def geocode(payload: GeocodeRequest, geocoder: Geocoder = Depends(get_geocoder)) -> GeocodeResult:
    if not payload.location or not payload.location.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Location is required")

    coords, is_default = await geocoder.resolve(payload.location)
    if is_default:
        return GeocodeResult(
            lat=coords.lat,
            lng=coords.lng,
            is_default=True,
            message="Using default coordinates for this location",
        )
    return GeocodeResult(lat=coords.lat, lng=coords.lng)
