"""Event types delivered to the engine by its event sources."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from prayer_compass.models import GeoPoint, HeadingSample


@dataclass(frozen=True, slots=True)
class LocationAcquired:
    point: GeoPoint


@dataclass(frozen=True, slots=True)
class LocationFailed:
    reason: str


@dataclass(frozen=True, slots=True)
class HeadingChanged:
    sample: HeadingSample


@dataclass(frozen=True, slots=True)
class ClockTick:
    now: datetime


@dataclass(frozen=True, slots=True)
class DayChanged:
    """Force a recompute for ``day`` (e.g. the user picked another date)."""

    day: date


Event = LocationAcquired | LocationFailed | HeadingChanged | ClockTick | DayChanged
