"""Lunar position pipeline.

The Moon is carried through the same topocentric stages as the Sun, but its
geocentric position comes from the 120-term lunar series. Nutation, true
obliquity and apparent sidereal time are taken from a completed solar run
for the same instant.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Tuple

from .periodic import lunar_series
from .spa import SolarState
from .terms import MOON_LATITUDE_TERMS, MOON_LONGITUDE_DISTANCE_TERMS
from .topocentric import (
    Topocentric,
    geocentric_declination,
    geocentric_right_ascension,
    topocentric_position,
)
from .utils import limit_degrees, polynomial

__all__ = [
    "LunarResult",
    "LunarState",
    "compute_lunar_position",
    "moon_earth_distance",
    "moon_equatorial_horizontal_parallax",
    "moon_fundamental_arguments",
    "moon_longitude_and_latitude",
    "trace_lunar_position",
]

MOON_MEAN_DISTANCE_KM = 385000.56
EARTH_RADIUS_KM = 6378.14
LUNAR_SCALE = 1.0e6

_MOON_MEAN_LONGITUDE = (-1.0 / 65194000.0, 1.0 / 538841.0, -0.0015786, 481267.88123421, 218.3164477)
_MOON_MEAN_ELONGATION = (-1.0 / 113065000.0, 1.0 / 545868.0, -0.0018819, 445267.1114034, 297.8501921)
_SUN_MEAN_ANOMALY = (1.0 / 24490000.0, -0.0001536, 35999.0502909, 357.5291092)
_MOON_MEAN_ANOMALY = (-1.0 / 14712000.0, 1.0 / 69699.0, 0.0087414, 477198.8675055, 134.9633964)
_MOON_LATITUDE_ARGUMENT = (1.0 / 863310000.0, -1.0 / 3526000.0, -0.0036539, 483202.0175233, 93.2720950)


def moon_fundamental_arguments(jce: float) -> Tuple[float, float, float, float, float]:
    """Return ``(L', D, M, M', F)`` in degrees, each wrapped into ``[0, 360)``."""

    return (
        limit_degrees(polynomial(_MOON_MEAN_LONGITUDE, jce)),
        limit_degrees(polynomial(_MOON_MEAN_ELONGATION, jce)),
        limit_degrees(polynomial(_SUN_MEAN_ANOMALY, jce)),
        limit_degrees(polynomial(_MOON_MEAN_ANOMALY, jce)),
        limit_degrees(polynomial(_MOON_LATITUDE_ARGUMENT, jce)),
    )


def moon_longitude_and_latitude(
    jce: float,
    l_prime: float,
    f: float,
    m_prime: float,
    l: float,
    b: float,
) -> Tuple[float, float]:
    """Geocentric lunar longitude and latitude in degrees.

    Adds the Venus, Jupiter and flattening perturbations (arguments A1, A2
    and A3) to the raw series sums. Latitude is returned signed.
    """

    def sin_deg(angle: float) -> float:
        return math.sin(math.radians(angle))

    a1 = 119.75 + 131.849 * jce
    a2 = 53.09 + 479264.290 * jce
    a3 = 313.45 + 481266.484 * jce

    delta_l = 3958 * sin_deg(a1) + 318 * sin_deg(a2) + 1962 * sin_deg(l_prime - f)
    delta_b = (
        -2235 * sin_deg(l_prime)
        + 175 * sin_deg(a1 - f)
        + 127 * sin_deg(l_prime - m_prime)
        + 382 * sin_deg(a3)
        + 175 * sin_deg(a1 + f)
        - 115 * sin_deg(l_prime + m_prime)
    )

    lamda_prime = limit_degrees(l_prime + (l + delta_l) / LUNAR_SCALE)
    beta = (b + delta_b) / LUNAR_SCALE
    return lamda_prime, beta


def moon_earth_distance(r: float) -> float:
    """Earth-Moon centre distance in kilometres from the series distance sum."""

    return MOON_MEAN_DISTANCE_KM + r / 1000.0


def moon_equatorial_horizontal_parallax(cap_delta: float) -> float:
    return math.degrees(math.asin(EARTH_RADIUS_KM / cap_delta))


@dataclass(frozen=True)
class LunarResult:
    zenith: float
    azimuth_astro: float
    azimuth: float
    distance: float  # km
    parallax: float


@dataclass(frozen=True)
class LunarState:
    """Intermediate lunar values for one instant (degrees unless noted)."""

    l_prime: float
    d: float
    m: float
    m_prime: float
    f: float
    l: float
    r: float
    b: float
    lamda_prime: float
    beta: float
    cap_delta: float  # km
    pi: float
    lamda: float
    alpha: float
    delta: float
    topocentric: Topocentric
    result: LunarResult = field(repr=False)


def trace_lunar_position(solar: SolarState) -> LunarState:
    """Run the lunar pipeline for the instant and observer of *solar*."""

    obs = solar.observation
    sun = solar.sun
    jce = sun.time.jce

    l_prime, d, m, m_prime, f = moon_fundamental_arguments(jce)
    l, r = lunar_series(MOON_LONGITUDE_DISTANCE_TERMS, (d, m, m_prime, f), jce)
    b, _ = lunar_series(MOON_LATITUDE_TERMS, (d, m, m_prime, f), jce)

    lamda_prime, beta = moon_longitude_and_latitude(jce, l_prime, f, m_prime, l, b)
    cap_delta = moon_earth_distance(r)
    pi = moon_equatorial_horizontal_parallax(cap_delta)

    lamda = lamda_prime + sun.delta_psi
    alpha = geocentric_right_ascension(lamda, sun.epsilon, beta)
    delta = geocentric_declination(beta, sun.epsilon, lamda)
    topo = topocentric_position(obs, sun.nu, alpha, delta, pi)

    result = LunarResult(
        zenith=topo.zenith,
        azimuth_astro=topo.azimuth_astro,
        azimuth=topo.azimuth,
        distance=cap_delta,
        parallax=pi,
    )
    return LunarState(
        l_prime=l_prime,
        d=d,
        m=m,
        m_prime=m_prime,
        f=f,
        l=l,
        r=r,
        b=b,
        lamda_prime=lamda_prime,
        beta=beta,
        cap_delta=cap_delta,
        pi=pi,
        lamda=lamda,
        alpha=alpha,
        delta=delta,
        topocentric=topo,
        result=result,
    )


def compute_lunar_position(solar: SolarState) -> LunarResult:
    """Topocentric zenith and azimuth of the Moon.

    Parameters
    ----------
    solar:
        A completed solar run; the Moon is computed for the same observation.
    """

    return trace_lunar_position(solar).result
