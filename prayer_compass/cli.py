"""Command-line interface for prayer_compass.

Run:
    python -m prayer_compass schedule --lat 21.4225 --lon 39.8262 --tz Asia/Riyadh
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import timedelta

from prayer_compass.compass import QiblaCompass
from prayer_compass.config import EngineConfig
from prayer_compass.engine import PrayerCompassEngine
from prayer_compass.errors import InvalidLocation
from prayer_compass.events import HeadingChanged, LocationAcquired
from prayer_compass.methods import CalculationMethod
from prayer_compass.models import TICK_INTERVAL_SECONDS, GeoPoint, HeadingSample, PrayerSchedule
from prayer_compass.prayer_times import PrayerTimeCalculator
from prayer_compass.timeutils import format_clock, parse_date, today_in
from prayer_compass.timetable import write_timetable_csv
from prayer_compass.tracker import entry_statuses

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _point(args: argparse.Namespace) -> GeoPoint:
    return GeoPoint.validated(args.lat, args.lon)


def _calculator(cfg: EngineConfig) -> PrayerTimeCalculator:
    return PrayerTimeCalculator(method=cfg.method, asr_method=cfg.asr_method, adjustments=cfg.adjustments)


def _engine(args: argparse.Namespace) -> PrayerCompassEngine:
    cfg = EngineConfig.from_args(args)
    engine = PrayerCompassEngine(cfg)
    engine.dispatch(LocationAcquired(point=_point(args)))
    return engine


def _print_schedule(schedule: PrayerSchedule) -> None:
    for e in schedule.entries:
        shown = format_clock(e.instant) if e.available else "unavailable"
        print(f"{e.label.value:<8} {shown}")


def _cmd_schedule(args: argparse.Namespace) -> int:
    cfg = EngineConfig.from_args(args)
    day = parse_date(args.date) if args.date else today_in(cfg.tz_name)
    schedule = _calculator(cfg).calculate(_point(args), day, cfg.tz_name)

    print(f"### {day.isoformat()} ({cfg.method.value}, asr={cfg.asr_method.name.lower()}, tz={cfg.tz_name})")
    _print_schedule(schedule)

    if args.json:
        payload = {
            "date": day.isoformat(),
            "latitude": args.lat,
            "longitude": args.lon,
            "method": cfg.method.value,
            "entries": [
                {"label": e.label.value, "time": e.instant.isoformat() if e.instant else None}
                for e in schedule.entries
            ],
        }
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


def _cmd_next(args: argparse.Namespace) -> int:
    engine = _engine(args)
    now = engine.clock.now()
    state = engine.tick(now)
    if state.candidate is None:
        print("no upcoming prayer (all entries unavailable)")
        return 0
    for e, status in entry_statuses(engine.get_prayer_schedule(), now, state):
        print(f"{e.label.value:<8} {format_clock(e.instant):>9}  {status.value}")
    print()
    print(f"next: {state.candidate.display_name} at {format_clock(state.candidate.instant)}")
    print(f"remaining: {state.remaining_text}")
    return 0


def _cmd_qibla(args: argparse.Namespace) -> int:
    compass = QiblaCompass()
    result = compass.on_location(_point(args))
    if args.heading is not None:
        compass.on_heading(HeadingSample(degrees=args.heading))
    print(f"bearing={result.bearing:.1f} deg, distance={result.distance_km:.0f} km")
    print(f"rotation={compass.rotation:.1f} deg")
    return 0


async def _watch(engine: PrayerCompassEngine, ticks: int) -> None:
    runner = asyncio.create_task(engine.run())
    try:
        shown = 0
        while ticks <= 0 or shown < ticks:
            await asyncio.sleep(engine.config.tick_interval_seconds)
            state = engine.get_next_event_state()
            name = state.candidate.display_name if state.candidate else "-"
            print(f"\r{name}: {state.remaining_text}   ", end="", flush=True)
            shown += 1
    finally:
        engine.teardown()
        await runner
        print()


def _cmd_watch(args: argparse.Namespace) -> int:
    engine = _engine(args)
    if args.heading is not None:
        engine.dispatch(HeadingChanged(sample=HeadingSample(degrees=args.heading)))
    result = engine.get_qibla_bearing_and_distance()
    if result is not None:
        print(f"qibla {result.bearing:.1f} deg, {result.distance_km:.0f} km", file=sys.stderr)
    try:
        asyncio.run(_watch(engine, args.ticks))
    except KeyboardInterrupt:
        print("\nstopped", file=sys.stderr)
    return 0


def _cmd_timetable(args: argparse.Namespace) -> int:
    cfg = EngineConfig.from_args(args)
    start = parse_date(args.start) if args.start else today_in(cfg.tz_name)
    schedules = _calculator(cfg).calculate_range(_point(args), start, args.days, cfg.tz_name)
    n = write_timetable_csv(schedules, args.out)
    last = start + timedelta(days=max(0, n - 1))
    print(f"wrote {n} days ({start.isoformat()} .. {last.isoformat()}) to {args.out}")
    return 0


def _add_location_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--lat", type=float, required=True, help="latitude in decimal degrees")
    p.add_argument("--lon", type=float, required=True, help="longitude in decimal degrees")
    p.add_argument("--tz", type=str, required=True, help="IANA timezone of the location, e.g. Asia/Jakarta")


def _add_method_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--method",
        type=str,
        default=CalculationMethod.MUSLIM_WORLD_LEAGUE.value,
        help=f"calculation method ({', '.join(m.value for m in CalculationMethod)})",
    )
    p.add_argument("--asr", type=str, default="standard", choices=["standard", "hanafi"], help="asr convention")
    p.add_argument(
        "--adjust",
        action="append",
        default=[],
        metavar="PRAYER=MIN",
        help="add minutes to a prayer, e.g. Maghrib=3 (repeatable)",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser."""

    p = argparse.ArgumentParser(prog="prayer_compass")
    p.add_argument(
        "--log-level",
        type=str.upper,
        default="WARNING",
        choices=LOG_LEVELS,
        help="logging level",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    p_sch = sub.add_parser("schedule", help="prayer times for one day")
    _add_location_args(p_sch)
    _add_method_args(p_sch)
    p_sch.add_argument("--date", type=str, default=None, help="YYYY-MM-DD, default today in --tz")
    p_sch.add_argument("--json", action="store_true", help="also print JSON")
    p_sch.set_defaults(func=_cmd_schedule)

    p_next = sub.add_parser("next", help="next prayer and time remaining")
    _add_location_args(p_next)
    _add_method_args(p_next)
    p_next.set_defaults(func=_cmd_next)

    p_q = sub.add_parser("qibla", help="qibla bearing, distance and compass rotation")
    p_q.add_argument("--lat", type=float, required=True, help="latitude in decimal degrees")
    p_q.add_argument("--lon", type=float, required=True, help="longitude in decimal degrees")
    p_q.add_argument("--heading", type=float, default=None, help="device heading in degrees (default: north)")
    p_q.set_defaults(func=_cmd_qibla)

    p_w = sub.add_parser("watch", help="live countdown to the next prayer")
    _add_location_args(p_w)
    _add_method_args(p_w)
    p_w.add_argument("--heading", type=float, default=None, help="device heading in degrees")
    p_w.add_argument("--ticks", type=int, default=0, help="stop after N ticks (0 = until Ctrl-C)")
    p_w.add_argument("--interval", type=float, default=TICK_INTERVAL_SECONDS, help="tick interval in seconds")
    p_w.set_defaults(func=_cmd_watch)

    p_tt = sub.add_parser("timetable", help="export a multi-day timetable CSV")
    _add_location_args(p_tt)
    _add_method_args(p_tt)
    p_tt.add_argument("--start", type=str, default=None, help="first day YYYY-MM-DD, default today")
    p_tt.add_argument("--days", type=int, default=30, help="number of days")
    p_tt.add_argument("--out", type=str, default="timetable.csv", help="output CSV path")
    p_tt.set_defaults(func=_cmd_timetable)

    return p


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint."""

    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")
    try:
        return int(args.func(args))
    except (InvalidLocation, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
