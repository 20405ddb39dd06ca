"""Geospatial utilities on a spherical Earth (no external dependencies)."""

from __future__ import annotations

import math

from prayer_compass.models import EARTH_RADIUS_KM, KAABA, BearingResult, GeoPoint


def normalize_degrees(x: float) -> float:
    """Map any angle into [0, 360).

    NaN is returned unchanged.
    """

    d = ((x % 360.0) + 360.0) % 360.0
    # tiny negative inputs round up to exactly 360.0 in float arithmetic
    return 0.0 if d >= 360.0 else d


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute Haversine distance in meters between two lat/lon points.

    Args:
        lat1: Latitude 1 in degrees.
        lon1: Longitude 1 in degrees.
        lat2: Latitude 2 in degrees.
        lon2: Longitude 2 in degrees.

    Returns:
        Distance in meters.
    """

    r = EARTH_RADIUS_KM * 1000.0
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2.0) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2.0) ** 2
    a = min(1.0, max(0.0, a))
    c = 2.0 * math.atan2(math.sqrt(a), math.sqrt(1.0 - a))
    return r * c


def distance_km(from_pt: GeoPoint, to_pt: GeoPoint) -> float:
    """Great-circle distance in kilometres (Earth radius 6371 km)."""

    if from_pt == to_pt:
        return 0.0
    return haversine_m(from_pt.latitude, from_pt.longitude, to_pt.latitude, to_pt.longitude) / 1000.0


def bearing(from_pt: GeoPoint, to_pt: GeoPoint) -> float:
    """Initial great-circle bearing from ``from_pt`` to ``to_pt``.

    Returns:
        Degrees in [0, 360), 0 = true north, clockwise.

    Notes:
        Degenerate input (identical points, or a start point on a pole) has no
        meaningful direction; the result is still stable and never raises.
        Identical points yield 0.0, as does any NaN intermediate.
    """

    if from_pt == to_pt:
        return 0.0
    phi1 = math.radians(from_pt.latitude)
    phi2 = math.radians(to_pt.latitude)
    d_lambda = math.radians(to_pt.longitude - from_pt.longitude)

    y = math.sin(d_lambda) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(d_lambda)
    deg = math.degrees(math.atan2(y, x))
    if math.isnan(deg):
        return 0.0
    return normalize_degrees(deg)


def qibla(point: GeoPoint, target: GeoPoint = KAABA) -> BearingResult:
    """Bearing and distance from ``point`` to the Kaaba (or another target)."""

    return BearingResult(bearing=bearing(point, target), distance_km=distance_km(point, target))
