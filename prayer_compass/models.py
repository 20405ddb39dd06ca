"""Value types shared by the prayer-time, tracker and compass modules."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Final

from prayer_compass.errors import InvalidLocation


@dataclass(frozen=True, slots=True)
class GeoPoint:
    """A location on the spherical Earth.

    Attributes:
        latitude: Decimal degrees in [-90, 90].
        longitude: Decimal degrees in [-180, 180].
    """

    latitude: float
    longitude: float

    @classmethod
    def validated(cls, latitude: float, longitude: float) -> GeoPoint:
        """Build a GeoPoint, rejecting out-of-range coordinates.

        Raises:
            InvalidLocation: If latitude/longitude is out of range or NaN.
        """

        try:
            lat = float(latitude)
            lon = float(longitude)
        except (TypeError, ValueError) as exc:
            raise InvalidLocation(f"coordinates must be numbers: {latitude!r}, {longitude!r}") from exc
        if math.isnan(lat) or not -90.0 <= lat <= 90.0:
            raise InvalidLocation(f"latitude out of range [-90, 90]: {latitude!r}")
        if math.isnan(lon) or not -180.0 <= lon <= 180.0:
            raise InvalidLocation(f"longitude out of range [-180, 180]: {longitude!r}")
        return cls(latitude=lat, longitude=lon)

    def validate(self) -> GeoPoint:
        """Return self if in range, otherwise raise InvalidLocation."""

        return GeoPoint.validated(self.latitude, self.longitude)


class PrayerLabel(str, Enum):
    """The six daily instants, in canonical (declaration) order."""

    FAJR = "Fajr"
    SUNRISE = "Sunrise"
    DHUHR = "Dhuhr"
    ASR = "Asr"
    MAGHRIB = "Maghrib"
    ISHA = "Isha"


PRAYER_ORDER: Final[tuple[PrayerLabel, ...]] = tuple(PrayerLabel)


@dataclass(frozen=True, slots=True)
class PrayerEntry:
    """One labelled instant of a schedule.

    Attributes:
        label: Which prayer/event this is.
        instant: Timezone-aware datetime, or None when the sun never reaches
            the required position that day (flagged unavailable).
        next_day: True when the entry was taken from the following day's schedule.
    """

    label: PrayerLabel
    instant: datetime | None
    next_day: bool = False

    @property
    def available(self) -> bool:
        return self.instant is not None

    @property
    def display_name(self) -> str:
        if self.next_day:
            return f"{self.label.value} (Tomorrow)"
        return self.label.value

    def as_next_day(self) -> PrayerEntry:
        return replace(self, next_day=True)


@dataclass(frozen=True, slots=True)
class PrayerSchedule:
    """Prayer instants for one calendar day.

    Entries always follow PRAYER_ORDER; available instants are strictly increasing.
    """

    day: date | None
    entries: tuple[PrayerEntry, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.entries

    def available_entries(self) -> tuple[PrayerEntry, ...]:
        return tuple(e for e in self.entries if e.available)

    def get(self, label: PrayerLabel) -> PrayerEntry | None:
        for e in self.entries:
            if e.label == label:
                return e
        return None


EMPTY_SCHEDULE: Final[PrayerSchedule] = PrayerSchedule(day=None)


@dataclass(frozen=True, slots=True)
class NextEventState:
    """The upcoming event and the time left until it."""

    candidate: PrayerEntry | None
    remaining: timedelta = timedelta(0)

    @property
    def remaining_seconds(self) -> int:
        """Whole seconds remaining, never negative."""

        return max(0, int(self.remaining.total_seconds()))

    @property
    def remaining_text(self) -> str:
        s = self.remaining_seconds
        return f"{s // 3600}h {(s % 3600) // 60}m {s % 60}s"

    @property
    def needs_next_day(self) -> bool:
        return self.candidate is not None and self.candidate.next_day


NO_EVENT: Final[NextEventState] = NextEventState(candidate=None)


@dataclass(frozen=True, slots=True)
class HeadingSample:
    """Most recent device heading in degrees, 0 = north, clockwise."""

    degrees: float

    def __post_init__(self) -> None:
        # frozen: normalize through object.__setattr__
        d = ((self.degrees % 360.0) + 360.0) % 360.0
        if math.isnan(d):
            d = 0.0
        object.__setattr__(self, "degrees", 0.0 if d >= 360.0 else d)


@dataclass(frozen=True, slots=True)
class BearingResult:
    """Initial great-circle bearing and distance to a target point."""

    bearing: float
    distance_km: float


KAABA: Final[GeoPoint] = GeoPoint(latitude=21.4225, longitude=39.8262)
EARTH_RADIUS_KM: Final[float] = 6371.0
DEFAULT_TZ: Final[str] = "UTC"
TICK_INTERVAL_SECONDS: Final[float] = 1.0
