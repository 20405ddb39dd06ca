"""Qibla compass: static target bearing fused with a live device heading."""

from __future__ import annotations

import logging
from typing import Callable, Protocol

from prayer_compass.geo import normalize_degrees, qibla
from prayer_compass.models import KAABA, BearingResult, GeoPoint, HeadingSample

logger = logging.getLogger(__name__)

HeadingCallback = Callable[[HeadingSample], None]


class OrientationStream(Protocol):
    """Device-orientation source. May never emit (sensor absent or denied)."""

    def subscribe(self, callback: HeadingCallback) -> Callable[[], None]:
        """Register ``callback``; returns a function that unsubscribes it."""
        ...


def heading_from_alpha(alpha: float) -> HeadingSample:
    """Convert a W3C deviceorientation ``alpha`` (counter-clockwise) to a compass heading."""

    return HeadingSample(degrees=normalize_degrees(360.0 - alpha))


class QiblaCompass:
    """Owns the qibla bearing/distance and the latest heading sample.

    The bearing and distance are recomputed only on location changes; heading
    samples are last-write-wins with no smoothing.
    """

    def __init__(self, target: GeoPoint = KAABA) -> None:
        self.target = target
        self._location: GeoPoint | None = None
        self._result: BearingResult | None = None
        self._heading: HeadingSample | None = None
        self._unsubscribe: Callable[[], None] | None = None
        self._closed = False

    @property
    def location(self) -> GeoPoint | None:
        return self._location

    @property
    def heading(self) -> HeadingSample | None:
        return self._heading

    @property
    def bearing_result(self) -> BearingResult | None:
        return self._result

    def on_location(self, point: GeoPoint) -> BearingResult:
        point = point.validate()
        if point != self._location or self._result is None:
            self._location = point
            self._result = qibla(point, self.target)
            logger.debug("qibla from %s: %.2f deg, %.1f km", point, self._result.bearing, self._result.distance_km)
        return self._result

    def on_heading(self, sample: HeadingSample) -> None:
        if self._closed:
            return
        self._heading = sample

    @property
    def rotation(self) -> float | None:
        """Needle rotation ``heading - bearing`` in degrees (positive = clockwise).

        Without any heading sample the device is assumed to face north, so the
        rotation is ``-bearing``. None until a location is known.
        """

        if self._result is None:
            return None
        if self._heading is None:
            return -self._result.bearing
        return self._heading.degrees - self._result.bearing

    def attach(self, stream: OrientationStream) -> None:
        """Subscribe to a device-orientation stream (replacing any previous one)."""

        if self._closed:
            raise RuntimeError("compass already torn down")
        self._detach()
        self._unsubscribe = stream.subscribe(self.on_heading)

    def _detach(self) -> None:
        if self._unsubscribe is not None:
            unsubscribe, self._unsubscribe = self._unsubscribe, None
            unsubscribe()

    def teardown(self) -> None:
        self._closed = True
        self._detach()
