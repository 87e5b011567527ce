"""Location to coordinate lookup backed by OpenStreetMap Nominatim."""
from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from disaster_reports.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class Coordinates:
    lat: float
    lng: float


CITY_COORDINATES: dict[str, Coordinates] = {
    "jakarta": Coordinates(-6.2088, 106.8456),
    "bandung": Coordinates(-6.9175, 107.6191),
    "surabaya": Coordinates(-7.2575, 112.7521),
    "yogyakarta": Coordinates(-7.7956, 110.3695),
    "medan": Coordinates(3.5952, 98.6722),
    "makassar": Coordinates(-5.1477, 119.4327),
    "palembang": Coordinates(-2.9761, 104.7754),
    "semarang": Coordinates(-6.9667, 110.4167),
    "denpasar": Coordinates(-8.6500, 115.2167),
    "pontianak": Coordinates(-0.0263, 109.3425),
    "balikpapan": Coordinates(-1.2379, 116.8294),
    "manado": Coordinates(1.4748, 124.8421),
    "pekanbaru": Coordinates(0.5071, 101.4478),
    "banjarmasin": Coordinates(-3.3194, 114.5906),
    "padang": Coordinates(-0.9471, 100.4172),
}
FALLBACK_COORDINATES = CITY_COORDINATES["jakarta"]


def default_coordinates(location: str) -> Coordinates:
    """Pick coordinates of the first known city named in ``location``, else Jakarta."""

    needle = location.lower()
    for city, coords in CITY_COORDINATES.items():
        if city in needle:
            return coords
    return FALLBACK_COORDINATES


class Geocoder:
    """Resolve free-text locations to coordinates.

    Lookups never raise for remote failures; they log and return ``None`` so a
    report submission is never blocked on the geocoding service.
    """

    def __init__(self, settings: Settings | None = None, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._settings = settings or get_settings()
        self._transport = transport

    async def lookup(self, location: str) -> Coordinates | None:
        if not self._settings.geocoding_enabled or not location.strip():
            return None

        params = {
            "format": "json",
            "q": f"{location}, Indonesia",
            "limit": 1,
            "countrycodes": self._settings.geocoding_country,
        }
        headers = {"User-Agent": self._settings.app_name}
        try:
            async with httpx.AsyncClient(
                timeout=self._settings.geocoding_timeout_seconds, transport=self._transport
            ) as client:
                response = await client.get(self._settings.geocoding_url, params=params, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning("Geocoding request for %r failed: %s", location, exc)
            return None

        if response.status_code >= 400:
            logger.warning("Geocoding request for %r returned %s", location, response.status_code)
            return None

        try:
            results = response.json()
            first = results[0]
            return Coordinates(lat=float(first["lat"]), lng=float(first["lon"]))
        except (ValueError, KeyError, IndexError, TypeError):
            logger.info("No geocoding match for %r", location)
            return None

    async def resolve(self, location: str) -> tuple[Coordinates, bool]:
        """Return coordinates and whether they came from the static fallback table."""

        coords = await self.lookup(location)
        if coords is not None:
            return coords, False
        fallback = default_coordinates(location)
        logger.info("Using default coordinates %s for %r", fallback, location)
        return fallback, True
