"""Named calculation methods (twilight angles and Asr shadow factor)."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True, slots=True)
class MethodParams:
    """Angles (degrees below the horizon) defining Fajr/Isha for a method.

    Exactly one of ``isha_angle`` / ``isha_interval_minutes`` is set. When
    ``maghrib_angle`` is set, Maghrib is taken at that depression instead of sunset.
    """

    fajr_angle: float
    isha_angle: float | None = None
    isha_interval_minutes: int | None = None
    maghrib_angle: float | None = None


class CalculationMethod(str, Enum):
    MUSLIM_WORLD_LEAGUE = "MuslimWorldLeague"
    ISNA = "ISNA"
    EGYPT = "Egypt"
    KARACHI = "Karachi"
    UMM_AL_QURA = "UmmAlQura"
    DUBAI = "Dubai"
    QATAR = "Qatar"
    KUWAIT = "Kuwait"
    SINGAPORE = "Singapore"
    TURKEY = "Turkey"
    TEHRAN = "Tehran"

    @property
    def params(self) -> MethodParams:
        return _PARAMS[self]


_PARAMS: dict[CalculationMethod, MethodParams] = {
    CalculationMethod.MUSLIM_WORLD_LEAGUE: MethodParams(fajr_angle=18.0, isha_angle=17.0),
    CalculationMethod.ISNA: MethodParams(fajr_angle=15.0, isha_angle=15.0),
    CalculationMethod.EGYPT: MethodParams(fajr_angle=19.5, isha_angle=17.5),
    CalculationMethod.KARACHI: MethodParams(fajr_angle=18.0, isha_angle=18.0),
    CalculationMethod.UMM_AL_QURA: MethodParams(fajr_angle=18.5, isha_interval_minutes=90),
    CalculationMethod.DUBAI: MethodParams(fajr_angle=18.2, isha_angle=18.2),
    CalculationMethod.QATAR: MethodParams(fajr_angle=18.0, isha_interval_minutes=90),
    CalculationMethod.KUWAIT: MethodParams(fajr_angle=18.0, isha_angle=17.5),
    CalculationMethod.SINGAPORE: MethodParams(fajr_angle=20.0, isha_angle=18.0),
    CalculationMethod.TURKEY: MethodParams(fajr_angle=18.0, isha_angle=17.0),
    CalculationMethod.TEHRAN: MethodParams(fajr_angle=17.7, isha_angle=14.0, maghrib_angle=4.5),
}


class AsrMethod(Enum):
    """Juristic convention for Asr: shadow length factor."""

    STANDARD = 1
    HANAFI = 2

    @property
    def shadow_factor(self) -> int:
        return self.value


DEFAULT_METHOD = CalculationMethod.MUSLIM_WORLD_LEAGUE


def _key(name: str) -> str:
    return name.strip().replace("-", "").replace("_", "").replace(" ", "").lower()


def method_from_name(name: str) -> CalculationMethod:
    """Look up a calculation method by name, e.g. "MuslimWorldLeague" or "umm_al_qura".

    Raises:
        ValueError: If the name is unknown.
    """

    wanted = _key(name)
    for m in CalculationMethod:
        if wanted in (_key(m.name), _key(m.value)):
            return m
    choices = ", ".join(m.value for m in CalculationMethod)
    raise ValueError(f"unknown calculation method: {name!r} (choices: {choices})")


def asr_method_from_name(name: str) -> AsrMethod:
    """Look up an Asr convention by name ("standard"/"shafi" or "hanafi")."""

    wanted = _key(name)
    if wanted in ("standard", "shafi"):
        return AsrMethod.STANDARD
    if wanted == "hanafi":
        return AsrMethod.HANAFI
    raise ValueError(f"unknown asr method: {name!r} (choices: standard, hanafi)")
