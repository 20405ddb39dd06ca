"""Next-prayer countdown state machine.

States: IDLE (no schedule) -> TRACKING (ticking) -> STOPPED (torn down, terminal).
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Callable, Sequence

from prayer_compass.models import (
    NO_EVENT,
    TICK_INTERVAL_SECONDS,
    NextEventState,
    PrayerEntry,
    PrayerSchedule,
)
from prayer_compass.timeutils import Clock

logger = logging.getLogger(__name__)


class TrackerState(Enum):
    IDLE = "idle"
    TRACKING = "tracking"
    STOPPED = "stopped"


class EntryStatus(Enum):
    PASSED = "passed"
    NEXT = "next"
    UPCOMING = "upcoming"
    UNAVAILABLE = "unavailable"


def _first_after(entries: Sequence[PrayerEntry], now: datetime) -> PrayerEntry | None:
    best: PrayerEntry | None = None
    for e in entries:
        if e.instant is None or e.instant <= now:
            continue
        # strict "<": on equal instants the earlier-declared entry wins
        if best is None or e.instant < best.instant:  # type: ignore[operator]
            best = e
    return best


def _tomorrow_candidate(today: PrayerSchedule, tomorrow: PrayerSchedule | None) -> PrayerEntry | None:
    if tomorrow is not None:
        avail = tomorrow.available_entries()
        return avail[0].as_next_day() if avail else None
    # tomorrow not computed yet: approximate with today's first event one day later
    avail = today.available_entries()
    if not avail:
        return None
    first = avail[0]
    return PrayerEntry(label=first.label, instant=first.instant + timedelta(days=1), next_day=True)  # type: ignore[operator]


def select_next_event(
    schedule: PrayerSchedule,
    now: datetime,
    tomorrow: PrayerSchedule | None = None,
) -> NextEventState:
    """Pick the earliest available entry strictly after ``now``.

    When every entry of ``schedule`` has passed, the candidate is the first
    available entry of ``tomorrow`` flagged ``next_day``. Unavailable entries
    are never candidates. ``remaining`` is clamped to zero.
    """

    if schedule.is_empty:
        return NO_EVENT
    candidate = _first_after(schedule.entries, now)
    if candidate is None:
        candidate = _tomorrow_candidate(schedule, tomorrow)
    if candidate is None or candidate.instant is None:
        return NO_EVENT
    remaining = max(timedelta(0), candidate.instant - now)
    return NextEventState(candidate=candidate, remaining=remaining)


def entry_statuses(
    schedule: PrayerSchedule,
    now: datetime,
    state: NextEventState,
) -> list[tuple[PrayerEntry, EntryStatus]]:
    """Per-entry display status for a schedule list."""

    out: list[tuple[PrayerEntry, EntryStatus]] = []
    next_label = None
    if state.candidate is not None and not state.candidate.next_day:
        next_label = state.candidate.label
    for e in schedule.entries:
        if e.instant is None:
            status = EntryStatus.UNAVAILABLE
        elif e.label == next_label:
            status = EntryStatus.NEXT
        elif e.instant <= now:
            status = EntryStatus.PASSED
        else:
            status = EntryStatus.UPCOMING
        out.append((e, status))
    return out


class NextEventTracker:
    """Recomputes the next event on every tick.

    The tracker never computes schedules itself. When all of today's entries
    have passed and no schedule for the following day was provided, it calls
    ``on_next_day_needed(day)`` once; the owner answers with ``provide_next_day``.

    Args:
        interval_seconds: Tick period used by ``run``.
        on_next_day_needed: Request hook for the following day's schedule.
    """

    def __init__(
        self,
        interval_seconds: float = TICK_INTERVAL_SECONDS,
        on_next_day_needed: Callable[[date], None] | None = None,
    ) -> None:
        self.interval_seconds = interval_seconds
        self._on_next_day_needed = on_next_day_needed
        self._status = TrackerState.IDLE
        self._schedule: PrayerSchedule | None = None
        self._tomorrow: PrayerSchedule | None = None
        self._requested_day: date | None = None
        self._current: NextEventState = NO_EVENT
        self._ticks = 0
        self._stop_event: asyncio.Event | None = None

    @property
    def status(self) -> TrackerState:
        return self._status

    @property
    def current(self) -> NextEventState:
        return self._current

    @property
    def ticks(self) -> int:
        return self._ticks

    @property
    def schedule(self) -> PrayerSchedule | None:
        return self._schedule

    def load(self, schedule: PrayerSchedule) -> None:
        """Replace today's schedule; the previous one (and its follow-up) is dropped."""

        if self._status is TrackerState.STOPPED:
            logger.debug("ignoring schedule load after stop")
            return
        self._schedule = schedule
        self._tomorrow = None
        self._requested_day = None
        self._current = NO_EVENT
        self._status = TrackerState.IDLE if schedule.is_empty else TrackerState.TRACKING

    def provide_next_day(self, schedule: PrayerSchedule) -> None:
        if self._status is TrackerState.STOPPED:
            return
        self._tomorrow = schedule

    def _next_day(self) -> date | None:
        if self._schedule is None or self._schedule.day is None:
            return None
        return self._schedule.day + timedelta(days=1)

    def _roll_over(self, now: datetime) -> None:
        if self._tomorrow is None or self._tomorrow.day is None:
            return
        avail = self._tomorrow.available_entries()
        # Fajr of the following solar day can precede local midnight when the
        # timezone lags the location
        reached_first = bool(avail) and avail[0].instant <= now  # type: ignore[operator]
        if now.date() >= self._tomorrow.day or reached_first:
            logger.info("day changed: tracking schedule for %s", self._tomorrow.day)
            self._schedule = self._tomorrow
            self._tomorrow = None
            self._requested_day = None

    def tick(self, now: datetime) -> NextEventState:
        """Recompute the next event for ``now`` and publish it."""

        if self._status is not TrackerState.TRACKING or self._schedule is None:
            return self._current
        self._roll_over(now)
        result = select_next_event(self._schedule, now, self._tomorrow)
        if result.needs_next_day and self._tomorrow is None:
            wanted = self._next_day()
            if wanted is not None and wanted != self._requested_day:
                self._requested_day = wanted
                if self._on_next_day_needed is not None:
                    self._on_next_day_needed(wanted)
                    if self._tomorrow is not None:
                        result = select_next_event(self._schedule, now, self._tomorrow)
        # the request hook may have torn us down; publish nothing after stop
        if self._status is not TrackerState.TRACKING:
            return self._current
        self._current = result
        self._ticks += 1
        return result

    async def run(self, clock: Clock) -> None:
        """Tick every ``interval_seconds`` until ``stop()`` is called."""

        self._stop_event = asyncio.Event()
        if self._status is TrackerState.STOPPED:
            return
        while self._status is not TrackerState.STOPPED:
            self.tick(clock.now())
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                continue

    def stop(self) -> None:
        """Stop tracking. Takes effect immediately; no later tick is published."""

        self._status = TrackerState.STOPPED
        if self._stop_event is not None:
            self._stop_event.set()
