"""Sunrise, sun transit and sunset for an observer's local civil date."""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Optional, Sequence, Tuple

import numpy as np

from .earth import GeocentricSun, geocentric_sun
from .timescale import TimeScales, julian_day
from .utils import (
    SUN_RADIUS,
    limit_degrees,
    limit_degrees180,
    limit_degrees180pm,
    limit_minutes,
    limit_zero2one,
    polynomial,
)

if TYPE_CHECKING:  # pragma: no cover
    from .spa import ObservationInput

__all__ = [
    "POLAR_DAY",
    "POLAR_NIGHT",
    "RiseTransitSet",
    "STATUS_OK",
    "equation_of_time",
    "interpolate_rts",
    "solve_rise_transit_set",
    "sun_mean_longitude",
]

LOGGER = logging.getLogger(__name__)

STATUS_OK = "ok"
POLAR_DAY = "polar_day"
POLAR_NIGHT = "polar_night"

SIDEREAL_DEGREES_PER_DAY = 360.985647

# Sun mean longitude, quintic in JME, highest order first.
_SUN_MEAN_LONGITUDE = (
    -1.0 / 2000000.0, -1.0 / 15300.0, 1.0 / 49931.0, 0.03032028, 360007.6982779, 280.4664567,
)


@dataclass(frozen=True)
class RiseTransitSet:
    """Rise/transit/set solution for one local civil date.

    Hours are local fractional hours in the observation's UTC offset. In the
    polar states every field except ``equation_of_time`` is NaN.
    """

    sunrise: float
    transit: float
    sunset: float
    equation_of_time: float  # minutes
    sunrise_hour_angle: float
    sunset_hour_angle: float
    transit_altitude: float
    status: str = STATUS_OK

    def to_datetimes(
        self, instant: datetime
    ) -> Tuple[Optional[datetime], Optional[datetime], Optional[datetime]]:
        """Sunrise, transit and sunset as aware datetimes on *instant*'s local date."""

        midnight = instant.replace(hour=0, minute=0, second=0, microsecond=0)

        def _at(hours: float) -> Optional[datetime]:
            if math.isnan(hours):
                return None
            return midnight + timedelta(hours=hours)

        return _at(self.sunrise), _at(self.transit), _at(self.sunset)


def sun_mean_longitude(jme: float) -> float:
    return limit_degrees(polynomial(_SUN_MEAN_LONGITUDE, jme))


def equation_of_time(m: float, alpha: float, delta_psi: float, epsilon: float) -> float:
    """Apparent minus mean solar time in minutes, folded into about ``[-20, 20]``."""

    return limit_minutes(
        4.0 * (m - 0.0057183 - alpha + delta_psi * math.cos(math.radians(epsilon)))
    )


def _hour_angle_argument(latitude: float, delta_zero: float, h0_prime: float) -> float:
    lat_rad = math.radians(latitude)
    delta_rad = math.radians(delta_zero)
    return (math.sin(math.radians(h0_prime)) - math.sin(lat_rad) * math.sin(delta_rad)) / (
        math.cos(lat_rad) * math.cos(delta_rad)
    )


def interpolate_rts(samples: Sequence[float], n: float) -> float:
    """Quadratic interpolation across the day-before, day-of and day-after samples.

    Differences of two or more are folded back into ``[0, 1)`` so right
    ascension crossing 0/360 degrees does not break the fit.
    """

    minus, zero, plus = samples
    a = zero - minus
    b = plus - zero
    if abs(a) >= 2.0:
        a = limit_zero2one(a)
    if abs(b) >= 2.0:
        b = limit_zero2one(b)
    return zero + n * (a + b + (b - a) * n) / 2.0


def _altitude(latitude: float, delta_prime: float, h_prime: float) -> float:
    lat_rad = math.radians(latitude)
    delta_prime_rad = math.radians(delta_prime)
    sine = math.sin(lat_rad) * math.sin(delta_prime_rad) + math.cos(lat_rad) * math.cos(
        delta_prime_rad
    ) * math.cos(math.radians(h_prime))
    return math.degrees(math.asin(float(np.clip(sine, -1.0, 1.0))))


def _refine(
    m: float,
    h_rts: float,
    delta_prime: float,
    latitude: float,
    h_prime: float,
    h0_prime: float,
) -> float:
    return m + (h_rts - h0_prime) / (
        360.0
        * math.cos(math.radians(delta_prime))
        * math.cos(math.radians(latitude))
        * math.sin(math.radians(h_prime))
    )


def _local_hours(day_fraction: float, timezone: float) -> float:
    return float(24.0 * limit_zero2one(day_fraction + timezone / 24.0))


def _polar(status: str, eot: float) -> RiseTransitSet:
    nan = float("nan")
    return RiseTransitSet(
        sunrise=nan,
        transit=nan,
        sunset=nan,
        equation_of_time=eot,
        sunrise_hour_angle=nan,
        sunset_hour_angle=nan,
        transit_altitude=nan,
        status=status,
    )


def solve_rise_transit_set(obs: "ObservationInput", sun: GeocentricSun) -> RiseTransitSet:
    """Solve sunrise, transit and sunset for the local date of ``obs.instant``.

    *sun* is the primary run for the observation itself; it supplies the
    equation of time. The Sun is then sampled at 0h UT of the day before,
    the day of and the day after the local date, with UT1-UTC taken as zero.

    Parameters
    ----------
    obs:
        The observation; only its date, UTC offset, coordinates, ``delta_t``
        and ``atmospheric_refraction`` are used.
    sun:
        Geocentric Sun for ``obs.instant``.

    Returns
    -------
    RiseTransitSet
        ``status`` is ``"polar_day"`` or ``"polar_night"`` when the Sun does
        not cross the horizon that day.
    """

    eot = equation_of_time(
        sun_mean_longitude(sun.time.jme), sun.alpha, sun.delta_psi, sun.epsilon
    )

    jd_zero = julian_day(obs.instant.year, obs.instant.month, obs.instant.day)
    nu = geocentric_sun(TimeScales.from_julian_day(jd_zero, obs.delta_t)).nu
    samples = [
        geocentric_sun(TimeScales.from_julian_day(jd_zero + offset, 0.0)) for offset in (-1, 0, 1)
    ]
    alphas = np.array([sample.alpha for sample in samples])
    deltas = np.array([sample.delta for sample in samples])

    h0_prime = -(SUN_RADIUS + obs.atmospheric_refraction)
    m_transit = (alphas[1] - obs.longitude - nu) / 360.0

    argument = _hour_angle_argument(obs.latitude, deltas[1], h0_prime)
    if abs(argument) > 1.0:
        status = POLAR_DAY if argument < -1.0 else POLAR_NIGHT
        LOGGER.debug(
            json.dumps(
                {
                    "event": "polar_rise_set",
                    "status": status,
                    "date": obs.instant.date().isoformat(),
                    "lat": obs.latitude,
                }
            )
        )
        return _polar(status, eot)

    h0 = limit_degrees180(math.degrees(math.acos(argument)))
    # Order: rise, transit, set.
    m_rts = np.array(
        [
            limit_zero2one(m_transit - h0 / 360.0),
            limit_zero2one(m_transit),
            limit_zero2one(m_transit + h0 / 360.0),
        ]
    )

    h_prime = np.empty(3)
    h_rts = np.empty(3)
    delta_prime = np.empty(3)
    for i, m in enumerate(m_rts):
        nu_rts = nu + SIDEREAL_DEGREES_PER_DAY * m
        n = m + obs.delta_t / 86400.0
        alpha_prime = interpolate_rts(alphas, n)
        delta_prime[i] = interpolate_rts(deltas, n)
        h_prime[i] = limit_degrees180pm(nu_rts + obs.longitude - alpha_prime)
        h_rts[i] = _altitude(obs.latitude, delta_prime[i], h_prime[i])

    timezone = obs.timezone
    rise, transit, set_ = 0, 1, 2
    return RiseTransitSet(
        sunrise=_local_hours(
            _refine(
                m_rts[rise], h_rts[rise], delta_prime[rise], obs.latitude, h_prime[rise], h0_prime
            ),
            timezone,
        ),
        transit=_local_hours(m_rts[transit] - h_prime[transit] / 360.0, timezone),
        sunset=_local_hours(
            _refine(m_rts[set_], h_rts[set_], delta_prime[set_], obs.latitude, h_prime[set_], h0_prime),
            timezone,
        ),
        equation_of_time=eot,
        sunrise_hour_angle=float(h_prime[rise]),
        sunset_hour_angle=float(h_prime[set_]),
        transit_altitude=float(h_rts[transit]),
    )
