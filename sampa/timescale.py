"""Conversion of civil instants to the Julian time scales used by the series."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import erfa

__all__ = [
    "J2000",
    "TimeScales",
    "calendar_from_julian_day",
    "delta_t_from_leap_seconds",
    "julian_day",
    "julian_day_from_datetime",
    "time_scales",
    "utc_offset_hours",
]

J2000 = 2451545.0
SECONDS_PER_DAY = 86400.0
DAYS_PER_CENTURY = 36525.0
TT_MINUS_TAI = 32.184
GREGORIAN_SWITCH_JD = 2299160.0


@dataclass(frozen=True)
class TimeScales:
    """Julian Day and the century/millennium values derived from it.

    ``jd`` and ``jc`` are on the UT1 axis, the ``*e*`` values on the
    terrestrial (ephemeris) axis offset by ``delta_t`` seconds.
    """

    jd: float
    jc: float
    jde: float
    jce: float
    jme: float

    @classmethod
    def from_julian_day(cls, jd: float, delta_t: float) -> "TimeScales":
        jc = (jd - J2000) / DAYS_PER_CENTURY
        jde = jd + delta_t / SECONDS_PER_DAY
        jce = (jde - J2000) / DAYS_PER_CENTURY
        jme = jce / 10.0
        return cls(jd=jd, jc=jc, jde=jde, jce=jce, jme=jme)


def julian_day(
    year: int,
    month: int,
    day: int,
    hour: float = 0.0,
    minute: float = 0.0,
    second: float = 0.0,
    delta_ut1: float = 0.0,
    timezone: float = 0.0,
) -> float:
    """Julian Day of a local civil time.

    Dates after JD 2299160 are treated as Gregorian, earlier ones as Julian.
    ``timezone`` is the local offset from UTC in hours and ``delta_ut1`` the
    UT1-UTC correction in seconds.
    """

    day_decimal = day + (hour - timezone + (minute + (second + delta_ut1) / 60.0) / 60.0) / 24.0
    if month < 3:
        month += 12
        year -= 1

    jd = (
        math.floor(365.25 * (year + 4716.0))
        + math.floor(30.6001 * (month + 1))
        + day_decimal
        - 1524.5
    )
    if jd > GREGORIAN_SWITCH_JD:
        a = math.floor(year / 100)
        jd += 2 - a + math.floor(a / 4)
    return jd


def utc_offset_hours(instant: datetime) -> float:
    """Return the UTC offset of an aware datetime in hours."""

    offset = instant.utcoffset()
    if offset is None:
        raise ValueError("datetime must be timezone-aware")
    return offset.total_seconds() / 3600.0


def julian_day_from_datetime(instant: datetime, delta_ut1: float) -> float:
    """Julian Day (UT1) of a timezone-aware datetime."""

    timezone = utc_offset_hours(instant)
    return julian_day(
        instant.year,
        instant.month,
        instant.day,
        instant.hour,
        instant.minute,
        instant.second + instant.microsecond / 1_000_000,
        delta_ut1,
        timezone,
    )


def time_scales(instant: datetime, delta_ut1: float, delta_t: float) -> TimeScales:
    """Compute JD, JC, JDE, JCE and JME for *instant*."""

    return TimeScales.from_julian_day(julian_day_from_datetime(instant, delta_ut1), delta_t)


def calendar_from_julian_day(jd: float) -> datetime:
    """Reconstruct the UTC civil datetime of a Julian Day.

    Inverse of :func:`julian_day` with zero offsets; raises :class:`ValueError`
    for dates outside the range :class:`datetime.datetime` can represent.
    """

    shifted = jd + 0.5
    z = math.floor(shifted)
    f = shifted - z
    if z < GREGORIAN_SWITCH_JD + 1:
        a = z
    else:
        alpha = math.floor((z - 1867216.25) / 36524.25)
        a = z + 1 + alpha - math.floor(alpha / 4)
    b = a + 1524
    c = math.floor((b - 122.1) / 365.25)
    d = math.floor(365.25 * c)
    e = math.floor((b - d) / 30.6001)

    day = b - d - math.floor(30.6001 * e)
    month = e - 1 if e < 14 else e - 13
    year = c - 4716 if month > 2 else c - 4715

    midnight = datetime(int(year), int(month), int(day), tzinfo=UTC)
    return midnight + timedelta(microseconds=round(f * SECONDS_PER_DAY * 1_000_000))


def delta_t_from_leap_seconds(instant: datetime, delta_ut1: float = 0.0) -> float:
    """Derive TT-UT1 in seconds as ``32.184 + (TAI-UTC) - (UT1-UTC)``.

    TAI-UTC comes from the leap-second table shipped with ERFA.
    """

    if instant.tzinfo is None:
        raise ValueError("datetime must be timezone-aware")
    utc = instant.astimezone(UTC)
    seconds = utc.hour * 3600 + utc.minute * 60 + utc.second + utc.microsecond / 1_000_000
    tai_minus_utc = erfa.dat(utc.year, utc.month, utc.day, seconds / SECONDS_PER_DAY)
    return TT_MINUS_TAI + float(tai_minus_utc) - delta_ut1
