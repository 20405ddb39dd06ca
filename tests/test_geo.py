from __future__ import annotations

import math

import pytest

from prayer_compass.geo import bearing, distance_km, haversine_m, normalize_degrees, qibla
from prayer_compass.models import KAABA, GeoPoint

POINTS = [
    GeoPoint(0.0, 0.0),
    GeoPoint(51.5074, -0.1278),
    GeoPoint(-33.8688, 151.2093),
    GeoPoint(40.7128, -74.0060),
    GeoPoint(89.9, 10.0),
    GeoPoint(-90.0, 0.0),
    GeoPoint(0.0, 180.0),
    GeoPoint(0.0, -180.0),
    KAABA,
]


@pytest.mark.parametrize("x", [-720.5, -360.0, -1.0, -1e-15, 0.0, 45.0, 359.999, 360.0, 1080.25])
def test_normalize_degrees_range_and_idempotent(x: float) -> None:
    once = normalize_degrees(x)
    assert 0.0 <= once < 360.0
    assert normalize_degrees(once) == once


def test_normalize_degrees_values() -> None:
    assert normalize_degrees(-90.0) == 270.0
    assert normalize_degrees(450.0) == 90.0
    assert normalize_degrees(360.0) == 0.0


def test_bearing_always_in_range() -> None:
    for a in POINTS:
        for b in POINTS:
            value = bearing(a, b)
            assert 0.0 <= value < 360.0


def test_bearing_same_point_does_not_raise() -> None:
    assert bearing(KAABA, KAABA) == 0.0
    pole = GeoPoint(90.0, 0.0)
    assert 0.0 <= bearing(pole, pole) < 360.0


def test_bearing_nan_input_is_stable() -> None:
    bad = GeoPoint(float("nan"), 0.0)
    assert bearing(bad, KAABA) == bearing(bad, KAABA) == 0.0


def test_bearing_cardinal_directions() -> None:
    origin = GeoPoint(0.0, 0.0)
    assert bearing(origin, GeoPoint(10.0, 0.0)) == pytest.approx(0.0)
    assert bearing(origin, GeoPoint(0.0, 10.0)) == pytest.approx(90.0)
    assert bearing(origin, GeoPoint(-10.0, 0.0)) == pytest.approx(180.0)
    assert bearing(origin, GeoPoint(0.0, -10.0)) == pytest.approx(270.0)


def test_distance_symmetric_and_zero() -> None:
    for a in POINTS:
        assert distance_km(a, a) == 0.0
        for b in POINTS:
            assert distance_km(a, b) == pytest.approx(distance_km(b, a))
            assert distance_km(a, b) >= 0.0


def test_distance_known_value() -> None:
    london = GeoPoint(51.5074, -0.1278)
    paris = GeoPoint(48.8566, 2.3522)
    assert distance_km(london, paris) == pytest.approx(343.5, rel=0.01)
    assert haversine_m(51.5074, -0.1278, 48.8566, 2.3522) == pytest.approx(343_500, rel=0.01)


def test_antipodes_is_half_circumference() -> None:
    assert distance_km(GeoPoint(0.0, 0.0), GeoPoint(0.0, 180.0)) == pytest.approx(math.pi * 6371.0)


def test_near_kaaba_points_north_east_and_is_close() -> None:
    result = qibla(GeoPoint(21.0, 39.0))
    assert 0.0 < result.bearing < 90.0
    assert result.distance_km < 100.0


def test_qibla_from_new_york() -> None:
    result = qibla(GeoPoint(40.7128, -74.0060))
    assert result.bearing == pytest.approx(58.5, abs=0.5)
    assert result.distance_km == pytest.approx(10300, rel=0.02)
