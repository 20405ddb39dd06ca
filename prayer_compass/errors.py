"""Exception types raised by the prayer/qibla engine."""

from __future__ import annotations


class PrayerCompassError(Exception):
    """Base class for recoverable engine errors."""


class InvalidLocation(PrayerCompassError, ValueError):
    """Coordinates are out of range (or not numbers)."""


class LocationUnavailable(PrayerCompassError):
    """The location provider denied or failed the request."""


class SolarCalculationUndefined(PrayerCompassError):
    """The sun never reaches the requested position on that day (polar regions)."""
