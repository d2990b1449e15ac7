from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

import erfa
import pytest

from sampa.timescale import (
    J2000,
    TimeScales,
    calendar_from_julian_day,
    delta_t_from_leap_seconds,
    julian_day,
    julian_day_from_datetime,
    time_scales,
)


def _erfa_julian_day(dt: datetime) -> float:
    dt = dt.astimezone(UTC)
    djm0, djm = erfa.cal2jd(dt.year, dt.month, dt.day)
    fraction = (dt.hour + (dt.minute + (dt.second + dt.microsecond / 1_000_000) / 60.0) / 60.0) / 24.0
    return float(djm0 + djm) + fraction


def test_golden_julian_day():
    jd = julian_day(2003, 10, 17, 12, 30, 30, 0.0, -7.0)
    assert jd == pytest.approx(2452930.312847, abs=0.025 / 86400)


@pytest.mark.parametrize(
    "instant, expected",
    [
        (datetime(2013, 1, 1, 0, 30, tzinfo=UTC), 2456293.520833),
        (datetime(2023, 7, 7, 16, 30, 6, tzinfo=UTC), 2460133.18757),
    ],
)
def test_julian_day_from_datetime(instant: datetime, expected: float):
    assert julian_day_from_datetime(instant, 0.0) == pytest.approx(expected, abs=1e-5)


def test_offset_and_delta_ut1_shift_the_day():
    local = datetime(2020, 3, 1, 2, 0, tzinfo=timezone(timedelta(hours=5)))
    utc = local.astimezone(UTC)
    assert julian_day_from_datetime(local, 0.0) == pytest.approx(
        julian_day_from_datetime(utc, 0.0), abs=1e-9
    )
    shifted = julian_day_from_datetime(utc, 0.5) - julian_day_from_datetime(utc, 0.0)
    assert shifted == pytest.approx(0.5 / 86400.0, abs=1e-9)


@pytest.mark.parametrize(
    "instant",
    [
        datetime(1987, 6, 19, 12, 0, tzinfo=UTC),
        datetime(2003, 10, 17, 19, 30, 30, tzinfo=UTC),
        datetime(2024, 2, 29, 23, 59, 59, tzinfo=UTC),
        datetime(1700, 1, 1, 6, 15, tzinfo=UTC),
    ],
)
def test_matches_erfa_gregorian_dates(instant: datetime):
    assert julian_day_from_datetime(instant, 0.0) == pytest.approx(
        _erfa_julian_day(instant), abs=1e-8
    )


def test_calendar_switch():
    assert julian_day(1582, 10, 4) == pytest.approx(2299159.5)
    assert julian_day(1582, 10, 15) == pytest.approx(2299160.5)
    assert julian_day(2000, 1, 1, 12) == pytest.approx(J2000)


@pytest.mark.parametrize(
    "instant",
    [
        datetime(2003, 10, 17, 19, 30, 30, tzinfo=UTC),
        datetime(1999, 12, 31, 23, 59, 59, tzinfo=UTC),
        datetime(2100, 3, 1, 0, 0, 1, tzinfo=UTC),
        datetime(1600, 2, 29, 12, 0, tzinfo=UTC),
    ],
)
def test_round_trip_within_a_second(instant: datetime):
    recovered = calendar_from_julian_day(julian_day_from_datetime(instant, 0.0))
    assert abs((recovered - instant).total_seconds()) < 1.0


def test_round_trip_before_the_gregorian_reform():
    jd = julian_day(1000, 5, 10, 6)
    recovered = calendar_from_julian_day(jd)
    assert (recovered.year, recovered.month, recovered.day, recovered.hour) == (1000, 5, 10, 6)


def test_time_scale_chain():
    scales = TimeScales.from_julian_day(J2000, 64.184)
    assert scales.jc == 0.0
    assert scales.jde == pytest.approx(J2000 + 64.184 / 86400.0)
    assert scales.jce == pytest.approx(64.184 / 86400.0 / 36525.0)
    assert scales.jme == pytest.approx(scales.jce / 10.0)


def test_time_scales_requires_aware_datetime():
    with pytest.raises(ValueError):
        time_scales(datetime(2020, 1, 1), 0.0, 69.0)


def test_delta_t_from_leap_seconds():
    instant = datetime(2017, 6, 1, 12, tzinfo=UTC)
    assert delta_t_from_leap_seconds(instant) == pytest.approx(32.184 + 37.0)
    assert delta_t_from_leap_seconds(instant, 0.4) == pytest.approx(32.184 + 37.0 - 0.4)


def test_delta_t_uses_utc_date():
    # 2016-12-31 23:30 UTC, before the leap second, expressed in UTC+2.
    instant = datetime(2017, 1, 1, 1, 30, tzinfo=timezone(timedelta(hours=2)))
    assert delta_t_from_leap_seconds(instant) == pytest.approx(32.184 + 36.0)
