"""Engine facade: single owner of schedule, countdown and compass state.

Event sources (location, clock, orientation) deliver typed events through
``dispatch``; the presentation layer reads state through the ``get_*`` methods.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Iterable

from prayer_compass.compass import OrientationStream, QiblaCompass
from prayer_compass.config import EngineConfig
from prayer_compass.errors import InvalidLocation, LocationUnavailable
from prayer_compass.events import ClockTick, DayChanged, Event, HeadingChanged, LocationAcquired, LocationFailed
from prayer_compass.location import LocationProvider
from prayer_compass.models import EMPTY_SCHEDULE, BearingResult, GeoPoint, NextEventState, PrayerSchedule
from prayer_compass.prayer_times import PrayerTimeCalculator
from prayer_compass.timeutils import Clock, SystemClock
from prayer_compass.tracker import NextEventTracker

logger = logging.getLogger(__name__)


class PrayerCompassEngine:
    """Wires the calculator, tracker and compass together.

    Args:
        config: Engine configuration.
        calculator: Prayer-time calculator; built from ``config`` when omitted.
        compass: Qibla compass; a Kaaba-targeted one when omitted.
        clock: Wall clock for "today" and the countdown loop.
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        calculator: PrayerTimeCalculator | None = None,
        compass: QiblaCompass | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.config = config or EngineConfig()
        self.calculator = calculator or PrayerTimeCalculator(
            method=self.config.method,
            asr_method=self.config.asr_method,
            adjustments=self.config.adjustments,
        )
        self.compass = compass or QiblaCompass()
        self.clock: Clock = clock or SystemClock(self.config.tz_name)
        self.tracker = NextEventTracker(
            interval_seconds=self.config.tick_interval_seconds,
            on_next_day_needed=self._compute_next_day,
        )
        self._location: GeoPoint | None = None
        self._schedule: PrayerSchedule = EMPTY_SCHEDULE
        self._location_error: str | None = None

    # -- presentation getters -------------------------------------------------

    @property
    def has_location(self) -> bool:
        return self._location is not None

    @property
    def location(self) -> GeoPoint | None:
        return self._location

    @property
    def location_error(self) -> str | None:
        return self._location_error

    def get_prayer_schedule(self) -> PrayerSchedule:
        """Current schedule, or the empty schedule when no location is known."""

        tracked = self.tracker.schedule
        return tracked if tracked is not None else self._schedule

    def get_next_event_state(self) -> NextEventState:
        return self.tracker.current

    def get_qibla_bearing_and_distance(self) -> BearingResult | None:
        return self.compass.bearing_result

    def get_compass_rotation(self) -> float | None:
        return self.compass.rotation

    # -- event handling -------------------------------------------------------

    def dispatch(self, event: Event) -> None:
        if isinstance(event, LocationAcquired):
            self._on_location(event.point)
        elif isinstance(event, LocationFailed):
            self._on_location_failed(event.reason)
        elif isinstance(event, HeadingChanged):
            self.compass.on_heading(event.sample)
        elif isinstance(event, ClockTick):
            self.tracker.tick(event.now)
        elif isinstance(event, DayChanged):
            self._recompute(event.day)
        else:
            raise TypeError(f"unsupported event: {event!r}")

    def feed(self, events: Iterable[Event]) -> None:
        for event in events:
            self.dispatch(event)

    def _on_location(self, point: GeoPoint) -> None:
        try:
            point = point.validate()
        except InvalidLocation as exc:
            logger.warning("rejected location %s: %s", point, exc)
            self._location_error = str(exc)
            return
        self._location = point
        self._location_error = None
        self.compass.on_location(point)
        self._recompute(self.clock.now().date())

    def _on_location_failed(self, reason: str) -> None:
        logger.warning("location unavailable: %s", reason)
        self._location_error = reason

    def _recompute(self, day: date) -> None:
        if self._location is None:
            logger.debug("no location yet; skipping schedule for %s", day)
            return
        self._schedule = self.calculator.calculate(self._location, day, self.config.tz_name)
        self.tracker.load(self._schedule)

    def _compute_next_day(self, day: date) -> None:
        if self._location is None:
            return
        logger.info("computing schedule for %s", day)
        self.tracker.provide_next_day(self.calculator.calculate(self._location, day, self.config.tz_name))

    # -- async boundaries -----------------------------------------------------

    async def acquire_location(self, provider: LocationProvider) -> bool:
        """One-shot location request. Failure leaves the engine in "no location" state.

        Returns:
            True when a location was applied.
        """

        try:
            point = await provider.locate()
        except LocationUnavailable as exc:
            self.dispatch(LocationFailed(reason=str(exc) or "location unavailable"))
            return False
        self.dispatch(LocationAcquired(point=point))
        return self._location_error is None

    def attach_orientation(self, stream: OrientationStream) -> None:
        self.compass.attach(stream)

    async def run(self, clock: Clock | None = None) -> None:
        """Drive the countdown until ``teardown()``."""

        await self.tracker.run(clock or self.clock)

    def tick(self, now: datetime) -> NextEventState:
        self.dispatch(ClockTick(now=now))
        return self.tracker.current

    def teardown(self) -> None:
        self.tracker.stop()
        self.compass.teardown()

