"""Timetable (multi-day schedule) CSV export."""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable

from prayer_compass.models import PRAYER_ORDER, PrayerSchedule
from prayer_compass.timeutils import format_hhmm

FIELDNAMES = ["date", *(label.value.lower() for label in PRAYER_ORDER)]


def timetable_rows(schedules: Iterable[PrayerSchedule]) -> list[dict[str, str]]:
    """One row per day; unavailable instants are empty strings."""

    rows: list[dict[str, str]] = []
    for s in schedules:
        row = {"date": s.day.isoformat() if s.day else ""}
        for label in PRAYER_ORDER:
            entry = s.get(label)
            row[label.value.lower()] = format_hhmm(entry.instant if entry else None)
        rows.append(row)
    return rows


def write_timetable_csv(schedules: Iterable[PrayerSchedule], out_path: str | Path) -> int:
    """Write schedules to CSV. Returns the number of rows written."""

    rows = timetable_rows(schedules)
    p = Path(out_path)
    with p.open("w", encoding="utf-8", newline="") as f:
        w = csv.DictWriter(f, fieldnames=FIELDNAMES)
        w.writeheader()
        w.writerows(rows)
    return len(rows)
