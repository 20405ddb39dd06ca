"""Time parsing, formatting and clock utilities."""

from __future__ import annotations

from datetime import date, datetime, timedelta, tzinfo
from typing import Protocol

from zoneinfo import ZoneInfo

from prayer_compass.models import DEFAULT_TZ


def tzinfo_from_name(tz_name: str) -> tzinfo:
    """Create tzinfo from an IANA timezone name.

    Args:
        tz_name: Timezone name like "Asia/Riyadh".

    Returns:
        tzinfo instance.

    Raises:
        ValueError: If timezone name is invalid on this system.
    """

    try:
        return ZoneInfo(tz_name)
    except Exception as exc:  # ZoneInfo raises KeyError / ZoneInfoNotFoundError (platform dependent)
        raise ValueError(f"invalid timezone: {tz_name!r}, e.g. Asia/Riyadh") from exc


def now_in(tz_name: str = DEFAULT_TZ) -> datetime:
    return datetime.now(tzinfo_from_name(tz_name))


def today_in(tz_name: str = DEFAULT_TZ) -> date:
    return now_in(tz_name).date()


def parse_date(text: str) -> date:
    """Parse "YYYY-MM-DD".

    Raises:
        ValueError: If cannot parse.
    """

    try:
        return date.fromisoformat(text.strip())
    except ValueError as exc:
        raise ValueError(f"cannot parse date: {text!r}, expected e.g. 2025-03-01") from exc


def format_clock(dt: datetime | None) -> str:
    """12-hour clock text like "4:05 AM", or "--" for an unavailable instant."""

    if dt is None:
        return "--"
    hour = dt.hour % 12 or 12
    return f"{hour}:{dt.minute:02d} {'AM' if dt.hour < 12 else 'PM'}"


def format_hhmm(dt: datetime | None) -> str:
    return "" if dt is None else dt.strftime("%H:%M")


class Clock(Protocol):
    """Supplies the current wall-clock time (timezone-aware)."""

    def now(self) -> datetime: ...


class SystemClock:
    """Wall clock in a fixed IANA timezone."""

    def __init__(self, tz_name: str = DEFAULT_TZ) -> None:
        self._tz = tzinfo_from_name(tz_name)

    def now(self) -> datetime:
        return datetime.now(self._tz)


class FixedClock:
    """A manually advanced clock, for replaying tick sequences."""

    def __init__(self, start: datetime) -> None:
        self._now = start

    def now(self) -> datetime:
        return self._now

    def set(self, when: datetime) -> None:
        self._now = when

    def advance(self, delta: timedelta) -> datetime:
        self._now = self._now + delta
        return self._now
