"""Solar-position routine used by the prayer-time calculator.

The calculator only needs "when does the sun reach this position on that day".
``AstralSolarRoutine`` answers that with the astral library; tests swap in a
fake that implements the same ``SolarRoutine`` protocol.
"""

from __future__ import annotations

import logging
import math
from datetime import date, datetime, timedelta, tzinfo
from typing import Callable, Protocol

from astral import Observer
from astral.sun import SunDirection, elevation, noon, sunrise, sunset, time_at_elevation

from prayer_compass.errors import SolarCalculationUndefined
from prayer_compass.models import GeoPoint

logger = logging.getLogger(__name__)


class SolarRoutine(Protocol):
    """Black-box solar math. Every method raises SolarCalculationUndefined when
    the sun never reaches the requested position that day."""

    def time_at_depression(
        self, point: GeoPoint, day: date, depression: float, rising: bool, tz: tzinfo
    ) -> datetime: ...

    def solar_noon(self, point: GeoPoint, day: date, tz: tzinfo) -> datetime: ...

    def sunrise(self, point: GeoPoint, day: date, tz: tzinfo) -> datetime: ...

    def sunset(self, point: GeoPoint, day: date, tz: tzinfo) -> datetime: ...

    def asr_time(self, point: GeoPoint, day: date, shadow_factor: float, tz: tzinfo) -> datetime: ...


def asr_elevation(noon_elevation: float, shadow_factor: float) -> float:
    """Sun elevation (degrees) at which an object's shadow equals
    ``shadow_factor`` times its height plus its noon shadow.

    Raises:
        SolarCalculationUndefined: If the sun stays below the horizon at noon.
    """

    if noon_elevation <= 0.0:
        raise SolarCalculationUndefined(f"sun below horizon at noon ({noon_elevation:.2f} deg)")
    noon_shadow = 1.0 / math.tan(math.radians(noon_elevation))
    return math.degrees(math.atan(1.0 / (shadow_factor + noon_shadow)))


class AstralSolarRoutine:
    """SolarRoutine backed by ``astral.sun``.

    Every event is anchored on the solar noon that falls on ``day`` in ``tz``:
    rising events are the last occurrence before that noon and setting events
    the first occurrence after it. Setting events may therefore fall after
    local midnight (summer Isha at high latitudes), and with a timezone far
    from the location's own, Fajr may fall on the previous calendar date.
    """

    def _observer(self, point: GeoPoint) -> Observer:
        return Observer(latitude=point.latitude, longitude=point.longitude)

    def _noon(self, obs: Observer, day: date, tz: tzinfo) -> datetime:
        result = noon(obs, day, tz)
        local_day = result.astimezone(tz).date()
        if local_day != day:
            result = noon(obs, day + (timedelta(days=1) if local_day < day else timedelta(days=-1)), tz)
        return result.astimezone(tz)

    def _anchored(
        self,
        noon_dt: datetime,
        day: date,
        tz: tzinfo,
        compute: Callable[[date], datetime],
        before_noon: bool,
    ) -> datetime:
        candidates: list[datetime] = []
        errors: list[str] = []
        for offset in (-1, 0, 1):
            try:
                candidates.append(compute(day + timedelta(days=offset)))
            except ValueError as exc:
                errors.append(str(exc))
        window = timedelta(hours=24)
        if before_noon:
            hits = [c for c in candidates if noon_dt - window < c < noon_dt]
            picked = max(hits, default=None)
        else:
            hits = [c for c in candidates if noon_dt < c < noon_dt + window]
            picked = min(hits, default=None)
        if picked is None:
            reason = errors[0] if errors else "no occurrence within the solar day"
            raise SolarCalculationUndefined(reason)
        return picked.astimezone(tz)

    def time_at_depression(
        self, point: GeoPoint, day: date, depression: float, rising: bool, tz: tzinfo
    ) -> datetime:
        obs = self._observer(point)
        direction = SunDirection.RISING if rising else SunDirection.SETTING
        return self._anchored(
            self._noon(obs, day, tz),
            day,
            tz,
            lambda d: time_at_elevation(obs, -depression, d, direction, tz),
            before_noon=rising,
        )

    def solar_noon(self, point: GeoPoint, day: date, tz: tzinfo) -> datetime:
        return self._noon(self._observer(point), day, tz)

    def sunrise(self, point: GeoPoint, day: date, tz: tzinfo) -> datetime:
        obs = self._observer(point)
        return self._anchored(self._noon(obs, day, tz), day, tz, lambda d: sunrise(obs, d, tz), before_noon=True)

    def sunset(self, point: GeoPoint, day: date, tz: tzinfo) -> datetime:
        obs = self._observer(point)
        return self._anchored(self._noon(obs, day, tz), day, tz, lambda d: sunset(obs, d, tz), before_noon=False)

    def asr_time(self, point: GeoPoint, day: date, shadow_factor: float, tz: tzinfo) -> datetime:
        obs = self._observer(point)
        noon_dt = self._noon(obs, day, tz)
        target = asr_elevation(elevation(obs, noon_dt), shadow_factor)
        logger.debug("asr elevation for %s on %s: %.3f deg", point, day, target)
        return self._anchored(
            noon_dt,
            day,
            tz,
            lambda d: time_at_elevation(obs, target, d, SunDirection.SETTING, tz),
            before_noon=False,
        )
