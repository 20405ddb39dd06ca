from __future__ import annotations

from datetime import date, datetime

import streamlit as st

from prayer_compass.config import EngineConfig
from prayer_compass.engine import PrayerCompassEngine
from prayer_compass.errors import InvalidLocation
from prayer_compass.events import DayChanged, HeadingChanged, LocationAcquired
from prayer_compass.location import parse_manual_location
from prayer_compass.methods import AsrMethod, CalculationMethod
from prayer_compass.models import KAABA, HeadingSample
from prayer_compass.timeutils import format_clock, tzinfo_from_name
from prayer_compass.tracker import EntryStatus, entry_statuses

_STATUS_TEXT = {
    EntryStatus.PASSED: "passed",
    EntryStatus.NEXT: "up next",
    EntryStatus.UPCOMING: "",
    EntryStatus.UNAVAILABLE: "unavailable (polar)",
}


def _build_engine(
    lat_text: str,
    lon_text: str,
    tz_name: str,
    method: CalculationMethod,
    asr: AsrMethod,
    day: date,
) -> PrayerCompassEngine:
    engine = PrayerCompassEngine(EngineConfig(tz_name=tz_name, method=method, asr_method=asr))
    engine.dispatch(LocationAcquired(point=parse_manual_location(lat_text, lon_text)))
    if day != engine.clock.now().date():
        engine.dispatch(DayChanged(day=day))
    return engine


def main() -> None:
    st.set_page_config(page_title="Prayer times & Qibla", layout="wide")
    st.title("Prayer times & Qibla direction")

    with st.sidebar:
        st.subheader("Location")
        lat_text = st.text_input("Latitude", value=str(KAABA.latitude))
        lon_text = st.text_input("Longitude", value=str(KAABA.longitude))
        tz_name = st.text_input("Timezone (IANA)", value="Asia/Riyadh")

        st.subheader("Calculation")
        method = st.selectbox(
            "Method", list(CalculationMethod), format_func=lambda m: m.value, index=0
        )
        asr = st.selectbox("Asr", list(AsrMethod), format_func=lambda a: a.name.title(), index=0)
        heading = st.slider("Device heading (deg)", min_value=0, max_value=359, value=0)

    try:
        tz = tzinfo_from_name(tz_name)
    except ValueError as exc:
        st.error(str(exc))
        return
    day = st.date_input("Date", value=datetime.now(tz).date())

    try:
        engine = _build_engine(lat_text, lon_text, tz_name, method, asr, day)
    except InvalidLocation as exc:
        st.error(f"Invalid location: {exc}")
        return
    engine.dispatch(HeadingChanged(sample=HeadingSample(degrees=float(heading))))

    now = engine.clock.now()
    state = engine.tick(now)
    schedule = engine.get_prayer_schedule()

    c1, c2 = st.columns(2)
    with c1:
        st.subheader("Next prayer")
        if state.candidate is not None:
            st.metric(state.candidate.display_name, format_clock(state.candidate.instant))
            st.metric("Time remaining", state.remaining_text)
        else:
            st.info("No upcoming prayer time can be computed for this location.")

        rows = [
            {"prayer": e.label.value, "time": format_clock(e.instant), "status": _STATUS_TEXT[s]}
            for e, s in entry_statuses(schedule, now, state)
        ]
        st.dataframe(rows, use_container_width=True)

    with c2:
        st.subheader("Qibla")
        result = engine.get_qibla_bearing_and_distance()
        rotation = engine.get_compass_rotation()
        if result is not None and rotation is not None:
            st.metric("Bearing", f"{result.bearing:.1f}°")
            st.metric("Distance to Kaaba", f"{result.distance_km:,.0f} km")
            st.metric("Needle rotation", f"{rotation:.1f}°")

    st.caption("Hold the device flat and turn until the needle rotation reads 0°.")


if __name__ == "__main__":
    main()
