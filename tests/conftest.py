from __future__ import annotations

from datetime import date, datetime, time, timedelta, tzinfo
from zoneinfo import ZoneInfo

import pytest

from prayer_compass.errors import SolarCalculationUndefined
from prayer_compass.models import GeoPoint, PrayerEntry, PrayerLabel, PrayerSchedule

TZ = ZoneInfo("Asia/Riyadh")


class FakeSolarRoutine:
    """Deterministic solar routine: fixed local clock times, optional failures."""

    TIMES = {
        "fajr": time(5, 0, 10),
        "sunrise": time(6, 30, 40),
        "noon": time(12, 15, 0),
        "asr": time(15, 40, 29),
        "sunset": time(18, 20, 0),
        "maghrib_angle": time(18, 35, 0),
        "isha": time(19, 45, 0),
    }

    def __init__(self, failing: set[str] | None = None, times: dict[str, time] | None = None) -> None:
        self.failing = failing or set()
        self.times = {**self.TIMES, **(times or {})}
        self.calls: list[tuple[str, date]] = []

    def _at(self, name: str, day: date, tz: tzinfo) -> datetime:
        self.calls.append((name, day))
        if name in self.failing:
            raise SolarCalculationUndefined(f"{name} never happens")
        return datetime.combine(day, self.times[name], tzinfo=tz)

    def time_at_depression(self, point, day, depression, rising, tz):
        if rising:
            return self._at("fajr", day, tz)
        return self._at("maghrib_angle" if depression < 10 else "isha", day, tz)

    def solar_noon(self, point, day, tz):
        return self._at("noon", day, tz)

    def sunrise(self, point, day, tz):
        return self._at("sunrise", day, tz)

    def sunset(self, point, day, tz):
        return self._at("sunset", day, tz)

    def asr_time(self, point, day, shadow_factor, tz):
        return self._at("asr", day, tz)


class FakeOrientationStream:
    def __init__(self) -> None:
        self.callbacks: list = []

    def subscribe(self, callback):
        self.callbacks.append(callback)

        def unsubscribe() -> None:
            self.callbacks.remove(callback)

        return unsubscribe

    def emit(self, sample) -> None:
        for cb in list(self.callbacks):
            cb(sample)


def make_schedule(day: date, offsets_h: dict[PrayerLabel, float | None], base: datetime) -> PrayerSchedule:
    entries = []
    for label, h in offsets_h.items():
        entries.append(PrayerEntry(label=label, instant=None if h is None else base + timedelta(hours=h)))
    return PrayerSchedule(day=day, entries=tuple(entries))


@pytest.fixture
def riyadh() -> GeoPoint:
    return GeoPoint(24.7136, 46.6753)


@pytest.fixture
def fake_routine() -> FakeSolarRoutine:
    return FakeSolarRoutine()


@pytest.fixture
def orientation_stream() -> FakeOrientationStream:
    return FakeOrientationStream()
