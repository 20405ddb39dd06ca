"""Daily prayer schedule from a location, a date and a calculation method."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, tzinfo
from typing import Callable, Iterator, Mapping

from prayer_compass.errors import SolarCalculationUndefined
from prayer_compass.methods import DEFAULT_METHOD, AsrMethod, CalculationMethod
from prayer_compass.models import DEFAULT_TZ, PRAYER_ORDER, GeoPoint, PrayerEntry, PrayerLabel, PrayerSchedule
from prayer_compass.solar import AstralSolarRoutine, SolarRoutine
from prayer_compass.timeutils import today_in, tzinfo_from_name

logger = logging.getLogger(__name__)


def round_to_minute(dt: datetime) -> datetime:
    """Round to the nearest minute (30 seconds and above round up)."""

    rounded = dt.replace(second=0, microsecond=0)
    if dt.second >= 30:
        rounded += timedelta(minutes=1)
    return rounded


def _enforce_order(entries: list[PrayerEntry]) -> list[PrayerEntry]:
    """Flag entries that break strictly increasing order as unavailable."""

    out: list[PrayerEntry] = []
    prev: datetime | None = None
    for e in entries:
        if e.instant is not None and prev is not None and e.instant <= prev:
            logger.warning("%s at %s is not after %s; marking unavailable", e.label.value, e.instant, prev)
            e = PrayerEntry(label=e.label, instant=None)
        if e.instant is not None:
            prev = e.instant
        out.append(e)
    return out


class PrayerTimeCalculator:
    """Orchestrates six solar-routine calls into a PrayerSchedule.

    Args:
        method: Twilight-angle convention for Fajr/Isha (and Maghrib, for some methods).
        asr_method: Asr shadow factor convention.
        routine: Solar-position routine; defaults to the astral-backed one.
        adjustments: Optional per-prayer offsets in minutes.
    """

    def __init__(
        self,
        method: CalculationMethod = DEFAULT_METHOD,
        asr_method: AsrMethod = AsrMethod.STANDARD,
        routine: SolarRoutine | None = None,
        adjustments: Mapping[PrayerLabel, int] | None = None,
    ) -> None:
        self.method = method
        self.asr_method = asr_method
        self.routine: SolarRoutine = routine if routine is not None else AstralSolarRoutine()
        self.adjustments: dict[PrayerLabel, int] = dict(adjustments or {})

    def _attempt(self, label: PrayerLabel, fn: Callable[[], datetime]) -> datetime | None:
        try:
            return fn()
        except SolarCalculationUndefined as exc:
            logger.warning("%s unavailable: %s", label.value, exc)
            return None

    def _raw_instants(self, point: GeoPoint, day: date, tz: tzinfo) -> dict[PrayerLabel, datetime | None]:
        params = self.method.params
        r = self.routine
        out: dict[PrayerLabel, datetime | None] = {}

        out[PrayerLabel.FAJR] = self._attempt(
            PrayerLabel.FAJR, lambda: r.time_at_depression(point, day, params.fajr_angle, True, tz)
        )
        out[PrayerLabel.SUNRISE] = self._attempt(PrayerLabel.SUNRISE, lambda: r.sunrise(point, day, tz))
        out[PrayerLabel.DHUHR] = self._attempt(PrayerLabel.DHUHR, lambda: r.solar_noon(point, day, tz))
        out[PrayerLabel.ASR] = self._attempt(
            PrayerLabel.ASR, lambda: r.asr_time(point, day, self.asr_method.shadow_factor, tz)
        )
        if params.maghrib_angle is not None:
            maghrib_angle = params.maghrib_angle
            out[PrayerLabel.MAGHRIB] = self._attempt(
                PrayerLabel.MAGHRIB, lambda: r.time_at_depression(point, day, maghrib_angle, False, tz)
            )
        else:
            out[PrayerLabel.MAGHRIB] = self._attempt(PrayerLabel.MAGHRIB, lambda: r.sunset(point, day, tz))

        if params.isha_interval_minutes is not None:
            maghrib = out[PrayerLabel.MAGHRIB]
            out[PrayerLabel.ISHA] = (
                None if maghrib is None else maghrib + timedelta(minutes=params.isha_interval_minutes)
            )
        else:
            isha_angle = params.isha_angle if params.isha_angle is not None else params.fajr_angle
            out[PrayerLabel.ISHA] = self._attempt(
                PrayerLabel.ISHA, lambda: r.time_at_depression(point, day, isha_angle, False, tz)
            )
        return out

    def calculate(
        self,
        point: GeoPoint,
        day: date | None = None,
        tz_name: str = DEFAULT_TZ,
    ) -> PrayerSchedule:
        """Compute the schedule for ``day`` (defaults to today in ``tz_name``).

        Returns:
            PrayerSchedule with exactly six entries in canonical order. Entries the
            sun cannot produce (polar day/night) have ``instant=None``.

        Raises:
            InvalidLocation: If the point is out of range.
            ValueError: If tz_name is not a known timezone.
        """

        point = point.validate()
        tz = tzinfo_from_name(tz_name)
        if day is None:
            day = today_in(tz_name)

        raw = self._raw_instants(point, day, tz)
        entries: list[PrayerEntry] = []
        for label in PRAYER_ORDER:
            instant = raw[label]
            if instant is not None:
                instant = round_to_minute(instant.astimezone(tz))
                instant += timedelta(minutes=self.adjustments.get(label, 0))
            entries.append(PrayerEntry(label=label, instant=instant))

        schedule = PrayerSchedule(day=day, entries=tuple(_enforce_order(entries)))
        logger.debug("schedule for %s on %s (%s): %s", point, day, self.method.value, schedule)
        return schedule

    def calculate_range(
        self,
        point: GeoPoint,
        start: date,
        days: int,
        tz_name: str = DEFAULT_TZ,
    ) -> Iterator[PrayerSchedule]:
        """Yield schedules for ``days`` consecutive days starting at ``start``."""

        for i in range(max(0, days)):
            yield self.calculate(point, start + timedelta(days=i), tz_name)
