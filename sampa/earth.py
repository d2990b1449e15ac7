"""Earth orbit, nutation, obliquity and sidereal time: the geocentric Sun.

This module covers everything the solar pipeline computes before the
observer's position matters. The rise/transit/set solver reuses it at three
midnights, and the lunar pipeline reuses its nutation, obliquity and
sidereal time for the same instant.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

from .periodic import earth_series, nutation_series
from .terms import EARTH_LATITUDE_TERMS, EARTH_LONGITUDE_TERMS, EARTH_RADIUS_TERMS
from .timescale import J2000, TimeScales
from .topocentric import geocentric_declination, geocentric_right_ascension
from .utils import limit_degrees, polynomial

__all__ = [
    "GeocentricSun",
    "aberration_correction",
    "earth_heliocentric_latitude",
    "earth_heliocentric_longitude",
    "earth_radius_vector",
    "ecliptic_mean_obliquity",
    "fundamental_arguments",
    "geocentric_longitude",
    "geocentric_sun",
    "greenwich_mean_sidereal_time",
    "greenwich_sidereal_time",
    "nutation_longitude_and_obliquity",
]

# Cubic polynomials in JCE, highest order first, degrees.
_MEAN_ELONGATION_MOON_SUN = (1.0 / 189474.0, -0.0019142, 445267.11148, 297.85036)
_MEAN_ANOMALY_SUN = (-1.0 / 300000.0, -0.0001603, 35999.05034, 357.52772)
_MEAN_ANOMALY_MOON = (1.0 / 56250.0, 0.0086972, 477198.867398, 134.96298)
_ARGUMENT_LATITUDE_MOON = (1.0 / 327270.0, -0.0036825, 483202.017538, 93.27191)
_ASCENDING_LONGITUDE_MOON = (1.0 / 450000.0, 0.0020708, -1934.136261, 125.04452)

# Laskar's mean obliquity in arcseconds, polynomial in JME / 10.
_MEAN_OBLIQUITY = (
    2.45, 5.79, 27.87, 7.12, -39.05, -249.67, -51.38, 1999.25, -1.55, -4680.93, 84381.448,
)


def earth_heliocentric_longitude(jme: float) -> float:
    """Earth heliocentric longitude L in degrees, wrapped into ``[0, 360)``."""

    return limit_degrees(math.degrees(earth_series(EARTH_LONGITUDE_TERMS, jme)))


def earth_heliocentric_latitude(jme: float) -> float:
    """Earth heliocentric latitude B in degrees."""

    return math.degrees(earth_series(EARTH_LATITUDE_TERMS, jme))


def earth_radius_vector(jme: float) -> float:
    """Earth-Sun distance R in astronomical units."""

    return earth_series(EARTH_RADIUS_TERMS, jme)


def geocentric_longitude(l: float) -> float:
    theta = l + 180.0
    if theta >= 360.0:
        theta -= 360.0
    return theta


def fundamental_arguments(jce: float) -> Tuple[float, float, float, float, float]:
    """Mean elongation, Sun and Moon mean anomalies, Moon argument of latitude
    and ascending node longitude, in degrees (not wrapped)."""

    return (
        polynomial(_MEAN_ELONGATION_MOON_SUN, jce),
        polynomial(_MEAN_ANOMALY_SUN, jce),
        polynomial(_MEAN_ANOMALY_MOON, jce),
        polynomial(_ARGUMENT_LATITUDE_MOON, jce),
        polynomial(_ASCENDING_LONGITUDE_MOON, jce),
    )


def nutation_longitude_and_obliquity(jce: float) -> Tuple[float, float]:
    return nutation_series(fundamental_arguments(jce), jce)


def ecliptic_mean_obliquity(jme: float) -> float:
    """Mean obliquity of the ecliptic in arcseconds."""

    return polynomial(_MEAN_OBLIQUITY, jme / 10.0)


def aberration_correction(r: float) -> float:
    return -20.4898 / (3600.0 * r)


def greenwich_mean_sidereal_time(jd: float, jc: float) -> float:
    return limit_degrees(
        280.46061837
        + 360.98564736629 * (jd - J2000)
        + jc * jc * (0.000387933 - jc / 38710000.0)
    )


def greenwich_sidereal_time(nu0: float, delta_psi: float, epsilon: float) -> float:
    return nu0 + delta_psi * math.cos(math.radians(epsilon))


@dataclass(frozen=True)
class GeocentricSun:
    """Apparent geocentric position of the Sun and the Earth-orientation values
    computed alongside it (degrees unless noted)."""

    time: TimeScales
    l: float
    b: float
    r: float  # AU
    theta: float
    beta: float
    fundamental_arguments: Tuple[float, float, float, float, float]
    delta_psi: float
    delta_epsilon: float
    epsilon0: float  # arcseconds
    epsilon: float
    delta_tau: float
    lamda: float
    nu0: float
    nu: float
    alpha: float
    delta: float


def geocentric_sun(time: TimeScales) -> GeocentricSun:
    """Run the heliocentric-to-geocentric stages for one set of time scales."""

    l = earth_heliocentric_longitude(time.jme)
    b = earth_heliocentric_latitude(time.jme)
    r = earth_radius_vector(time.jme)

    theta = geocentric_longitude(l)
    beta = -b

    arguments = fundamental_arguments(time.jce)
    delta_psi, delta_epsilon = nutation_series(arguments, time.jce)

    epsilon0 = ecliptic_mean_obliquity(time.jme)
    epsilon = delta_epsilon + epsilon0 / 3600.0

    delta_tau = aberration_correction(r)
    lamda = theta + delta_psi + delta_tau
    nu0 = greenwich_mean_sidereal_time(time.jd, time.jc)
    nu = greenwich_sidereal_time(nu0, delta_psi, epsilon)

    return GeocentricSun(
        time=time,
        l=l,
        b=b,
        r=r,
        theta=theta,
        beta=beta,
        fundamental_arguments=arguments,
        delta_psi=delta_psi,
        delta_epsilon=delta_epsilon,
        epsilon0=epsilon0,
        epsilon=epsilon,
        delta_tau=delta_tau,
        lamda=lamda,
        nu0=nu0,
        nu=nu,
        alpha=geocentric_right_ascension(lamda, epsilon, beta),
        delta=geocentric_declination(beta, epsilon, lamda),
    )
