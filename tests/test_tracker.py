from __future__ import annotations

import asyncio
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from conftest import make_schedule
from prayer_compass.models import EMPTY_SCHEDULE, NO_EVENT, PrayerEntry, PrayerLabel, PrayerSchedule
from prayer_compass.timeutils import FixedClock
from prayer_compass.tracker import (
    EntryStatus,
    NextEventTracker,
    TrackerState,
    entry_statuses,
    select_next_event,
)

TZ = ZoneInfo("Asia/Riyadh")
DAY = date(2024, 3, 20)
T = datetime(2024, 3, 20, 4, 0, tzinfo=TZ)
TOMORROW = DAY + timedelta(days=1)


def _three() -> PrayerSchedule:
    return make_schedule(DAY, {PrayerLabel.FAJR: 1, PrayerLabel.DHUHR: 5, PrayerLabel.ISHA: 9}, T)


def _tomorrow() -> PrayerSchedule:
    return make_schedule(
        TOMORROW, {PrayerLabel.FAJR: 24.5, PrayerLabel.DHUHR: 29, PrayerLabel.ISHA: 33}, T
    )


def test_candidate_is_next_upcoming_entry() -> None:
    state = select_next_event(_three(), T + timedelta(hours=3))
    assert state.candidate.label is PrayerLabel.DHUHR
    assert state.candidate.instant == T + timedelta(hours=5)
    assert state.remaining == timedelta(hours=2)
    assert state.remaining_text == "2h 0m 0s"


def test_all_passed_rolls_over_to_tomorrow_first_entry() -> None:
    state = select_next_event(_three(), T + timedelta(hours=10), _tomorrow())
    assert state.candidate.label is PrayerLabel.FAJR
    assert state.candidate.next_day
    assert state.candidate.instant == T + timedelta(hours=24.5)
    assert state.candidate.display_name == "Fajr (Tomorrow)"
    assert state.needs_next_day


def test_all_passed_without_tomorrow_uses_shifted_first_entry() -> None:
    state = select_next_event(_three(), T + timedelta(hours=10))
    assert state.candidate.label is PrayerLabel.FAJR
    assert state.candidate.next_day
    assert state.candidate.instant == T + timedelta(hours=25)
    assert state.remaining == timedelta(hours=15)


def test_instant_equal_to_now_is_not_upcoming() -> None:
    state = select_next_event(_three(), T + timedelta(hours=5))
    assert state.candidate.label is PrayerLabel.ISHA


def test_unavailable_fajr_is_skipped() -> None:
    schedule = make_schedule(DAY, {PrayerLabel.FAJR: None, PrayerLabel.SUNRISE: 2, PrayerLabel.DHUHR: 8}, T)
    state = select_next_event(schedule, T)
    assert state.candidate.label is PrayerLabel.SUNRISE

    tomorrow = make_schedule(TOMORROW, {PrayerLabel.FAJR: None, PrayerLabel.SUNRISE: 26}, T)
    state = select_next_event(schedule, T + timedelta(hours=20), tomorrow)
    assert state.candidate.label is PrayerLabel.SUNRISE
    assert state.candidate.next_day


def test_tie_resolves_to_earlier_declared_label() -> None:
    schedule = make_schedule(DAY, {PrayerLabel.ASR: 3, PrayerLabel.MAGHRIB: 3}, T)
    assert select_next_event(schedule, T).candidate.label is PrayerLabel.ASR


def test_remaining_is_clamped_to_zero() -> None:
    stale_tomorrow = make_schedule(TOMORROW, {PrayerLabel.FAJR: 2}, T)
    state = select_next_event(_three(), T + timedelta(hours=10), stale_tomorrow)
    assert state.remaining == timedelta(0)
    assert state.remaining_text == "0h 0m 0s"


def test_empty_or_all_unavailable_schedule() -> None:
    assert select_next_event(EMPTY_SCHEDULE, T) is NO_EVENT
    schedule = make_schedule(DAY, {PrayerLabel.FAJR: None, PrayerLabel.ISHA: None}, T)
    assert select_next_event(schedule, T).candidate is None


def test_tracker_idle_until_loaded() -> None:
    tracker = NextEventTracker()
    assert tracker.status is TrackerState.IDLE
    assert tracker.tick(T) is NO_EVENT
    assert tracker.ticks == 0

    tracker.load(_three())
    assert tracker.status is TrackerState.TRACKING
    assert tracker.tick(T).candidate.label is PrayerLabel.FAJR
    assert tracker.ticks == 1

    tracker.load(EMPTY_SCHEDULE)
    assert tracker.status is TrackerState.IDLE


def test_tracker_requests_next_day_once() -> None:
    requested: list[date] = []
    tracker = NextEventTracker(on_next_day_needed=requested.append)
    tracker.load(_three())

    late = T + timedelta(hours=10)
    first = tracker.tick(late)
    tracker.tick(late + timedelta(seconds=1))
    assert requested == [TOMORROW]
    assert first.candidate.next_day

    tracker.provide_next_day(_tomorrow())
    state = tracker.tick(late + timedelta(seconds=2))
    assert state.candidate.instant == T + timedelta(hours=24.5)


def test_tracker_uses_schedule_provided_by_request_hook() -> None:
    tracker = NextEventTracker(on_next_day_needed=lambda day: tracker.provide_next_day(_tomorrow()))
    tracker.load(_three())
    state = tracker.tick(T + timedelta(hours=10))
    assert state.candidate.instant == T + timedelta(hours=24.5)


def test_tracker_rolls_over_after_midnight() -> None:
    tracker = NextEventTracker()
    tracker.load(_three())
    tracker.provide_next_day(_tomorrow())
    after_midnight = datetime(2024, 3, 21, 0, 30, tzinfo=TZ)
    state = tracker.tick(after_midnight)
    assert tracker.schedule.day == TOMORROW
    assert state.candidate.label is PrayerLabel.FAJR
    assert not state.candidate.next_day


def test_stop_is_immediate_and_final() -> None:
    tracker = NextEventTracker()
    tracker.load(_three())
    before = tracker.tick(T)
    tracker.stop()
    assert tracker.status is TrackerState.STOPPED
    assert tracker.tick(T + timedelta(hours=3)) is before
    assert tracker.ticks == 1
    tracker.load(_tomorrow())
    assert tracker.status is TrackerState.STOPPED


def test_stop_during_tick_publishes_nothing() -> None:
    tracker = NextEventTracker(on_next_day_needed=lambda day: tracker.stop())
    tracker.load(_three())
    tracker.tick(T + timedelta(hours=10))
    assert tracker.current is NO_EVENT
    assert tracker.ticks == 0


def test_run_ticks_until_stopped() -> None:
    clock = FixedClock(T)
    tracker = NextEventTracker(interval_seconds=0.01)
    tracker.load(_three())

    async def scenario() -> int:
        task = asyncio.create_task(tracker.run(clock))
        await asyncio.sleep(0.05)
        clock.advance(timedelta(hours=3))
        await asyncio.sleep(0.05)
        tracker.stop()
        await asyncio.wait_for(task, timeout=1.0)
        count = tracker.ticks
        await asyncio.sleep(0.03)
        assert tracker.ticks == count
        return count

    count = asyncio.run(scenario())
    assert count >= 2
    assert tracker.current.candidate.label is PrayerLabel.DHUHR


def test_entry_statuses() -> None:
    schedule = make_schedule(
        DAY, {PrayerLabel.FAJR: 1, PrayerLabel.SUNRISE: None, PrayerLabel.DHUHR: 5, PrayerLabel.ISHA: 9}, T
    )
    now = T + timedelta(hours=3)
    state = select_next_event(schedule, now)
    statuses = {e.label: s for e, s in entry_statuses(schedule, now, state)}
    assert statuses == {
        PrayerLabel.FAJR: EntryStatus.PASSED,
        PrayerLabel.SUNRISE: EntryStatus.UNAVAILABLE,
        PrayerLabel.DHUHR: EntryStatus.NEXT,
        PrayerLabel.ISHA: EntryStatus.UPCOMING,
    }


def test_entry_statuses_next_day_marks_nothing_next() -> None:
    now = T + timedelta(hours=10)
    state = select_next_event(_three(), now)
    assert all(s is EntryStatus.PASSED for _, s in entry_statuses(_three(), now, state))
    assert isinstance(state.candidate, PrayerEntry)


def test_isha_after_midnight_stays_on_todays_schedule() -> None:
    schedule = make_schedule(DAY, {PrayerLabel.FAJR: 1, PrayerLabel.MAGHRIB: 14, PrayerLabel.ISHA: 20.5}, T)
    tracker = NextEventTracker()
    tracker.load(schedule)
    state = tracker.tick(datetime(2024, 3, 21, 0, 10, tzinfo=TZ))
    assert tracker.schedule.day == DAY
    assert state.candidate.label is PrayerLabel.ISHA
    assert not state.candidate.next_day
    assert state.remaining == timedelta(minutes=20)


def test_tracker_rolls_over_when_fajr_precedes_midnight() -> None:
    tracker = NextEventTracker()
    tracker.load(_three())
    early = make_schedule(TOMORROW, {PrayerLabel.FAJR: 18, PrayerLabel.DHUHR: 25, PrayerLabel.ISHA: 33}, T)
    tracker.provide_next_day(early)
    state = tracker.tick(T + timedelta(hours=19))
    assert tracker.schedule.day == TOMORROW
    assert state.candidate.label is PrayerLabel.DHUHR
    assert not state.candidate.next_day
