"""Location providers and manual coordinate entry."""

from __future__ import annotations

from typing import Protocol

from prayer_compass.errors import InvalidLocation, LocationUnavailable
from prayer_compass.models import GeoPoint


class LocationProvider(Protocol):
    async def locate(self) -> GeoPoint:
        """One-shot location request.

        Raises:
            LocationUnavailable: If the user denied access or the lookup failed.
        """
        ...


class StaticLocationProvider:
    """Provider returning a fixed (e.g. manually entered) point, or failing when None."""

    def __init__(self, point: GeoPoint | None, reason: str = "location permission denied") -> None:
        self._point = point
        self._reason = reason

    async def locate(self) -> GeoPoint:
        if self._point is None:
            raise LocationUnavailable(self._reason)
        return self._point


def parse_manual_location(lat_text: str, lon_text: str) -> GeoPoint:
    """Parse user-typed latitude/longitude.

    Raises:
        InvalidLocation: If either value is empty, not a number or out of range.
    """

    lat_s = (lat_text or "").strip()
    lon_s = (lon_text or "").strip()
    if not lat_s or not lon_s:
        raise InvalidLocation("latitude and longitude are both required")
    try:
        lat = float(lat_s)
        lon = float(lon_s)
    except ValueError as exc:
        raise InvalidLocation(f"not a number: {lat_text!r}, {lon_text!r}") from exc
    return GeoPoint.validated(lat, lon)
