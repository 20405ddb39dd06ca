"""Engine configuration."""

from __future__ import annotations

import argparse
from dataclasses import dataclass, field

from prayer_compass.methods import DEFAULT_METHOD, AsrMethod, CalculationMethod, asr_method_from_name, method_from_name
from prayer_compass.models import DEFAULT_TZ, TICK_INTERVAL_SECONDS, PrayerLabel


@dataclass(frozen=True, slots=True)
class EngineConfig:
    """Parameters shared by the calculator, tracker and CLI."""

    tz_name: str = DEFAULT_TZ
    method: CalculationMethod = DEFAULT_METHOD
    asr_method: AsrMethod = AsrMethod.STANDARD
    tick_interval_seconds: float = TICK_INTERVAL_SECONDS
    # minutes added to each computed instant, e.g. {PrayerLabel.MAGHRIB: 3}
    adjustments: dict[PrayerLabel, int] = field(default_factory=dict)

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> EngineConfig:
        """Build from parsed CLI arguments (missing attributes keep defaults)."""

        adjustments: dict[PrayerLabel, int] = {}
        for item in getattr(args, "adjust", None) or []:
            adjustments.update(parse_adjustment(item))
        return cls(
            tz_name=getattr(args, "tz", DEFAULT_TZ),
            method=method_from_name(getattr(args, "method", DEFAULT_METHOD.value)),
            asr_method=asr_method_from_name(getattr(args, "asr", "standard")),
            tick_interval_seconds=float(getattr(args, "interval", TICK_INTERVAL_SECONDS)),
            adjustments=adjustments,
        )


def parse_adjustment(text: str) -> dict[PrayerLabel, int]:
    """Parse "Maghrib=3" into {PrayerLabel.MAGHRIB: 3}.

    Raises:
        ValueError: If the label or minutes are invalid.
    """

    name, sep, minutes = text.partition("=")
    if not sep:
        raise ValueError(f"adjustment must look like Maghrib=3, got {text!r}")
    wanted = name.strip().lower()
    for label in PrayerLabel:
        if label.value.lower() == wanted:
            return {label: int(minutes.strip())}
    raise ValueError(f"unknown prayer in adjustment: {name!r}")
