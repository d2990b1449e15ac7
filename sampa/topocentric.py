"""Equatorial and horizontal coordinate stages shared by the Sun and Moon.

Given a body's apparent ecliptic position, its equatorial horizontal parallax
and the apparent sidereal time, these functions produce the observer's view:
hour angle, parallax-corrected declination, refracted elevation and azimuth.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Tuple

import numpy as np

from .utils import SUN_RADIUS, limit_degrees

if TYPE_CHECKING:  # pragma: no cover
    from .spa import ObservationInput

__all__ = [
    "EARTH_FLATTENING_RATIO",
    "EARTH_RADIUS_M",
    "Topocentric",
    "atmospheric_refraction_correction",
    "geocentric_declination",
    "geocentric_right_ascension",
    "observer_hour_angle",
    "right_ascension_parallax_and_topocentric_declination",
    "surface_incidence_angle",
    "topocentric_azimuth_angle",
    "topocentric_azimuth_angle_astro",
    "topocentric_elevation_angle",
    "topocentric_position",
]

EARTH_FLATTENING_RATIO = 0.99664719  # 1 - f for the reference ellipsoid.
EARTH_RADIUS_M = 6378140.0
REFRACTION_POLE_OFFSET = 5.11


def geocentric_right_ascension(lamda: float, epsilon: float, beta: float) -> float:
    lamda_rad = math.radians(lamda)
    epsilon_rad = math.radians(epsilon)
    alpha = math.atan2(
        math.sin(lamda_rad) * math.cos(epsilon_rad)
        - math.tan(math.radians(beta)) * math.sin(epsilon_rad),
        math.cos(lamda_rad),
    )
    return limit_degrees(math.degrees(alpha))


def geocentric_declination(beta: float, epsilon: float, lamda: float) -> float:
    beta_rad = math.radians(beta)
    epsilon_rad = math.radians(epsilon)
    return math.degrees(
        math.asin(
            math.sin(beta_rad) * math.cos(epsilon_rad)
            + math.cos(beta_rad) * math.sin(epsilon_rad) * math.sin(math.radians(lamda))
        )
    )


def observer_hour_angle(nu: float, longitude: float, alpha: float) -> float:
    return limit_degrees(nu + longitude - alpha)


def right_ascension_parallax_and_topocentric_declination(
    latitude: float,
    elevation: float,
    xi: float,
    h: float,
    delta: float,
) -> Tuple[float, float]:
    """Return ``(delta_alpha, delta_prime)`` in degrees.

    The observer is placed on an oblate Earth at *elevation* metres; *xi* is
    the body's equatorial horizontal parallax.
    """

    lat_rad = math.radians(latitude)
    xi_rad = math.radians(xi)
    h_rad = math.radians(h)
    delta_rad = math.radians(delta)

    u = math.atan(EARTH_FLATTENING_RATIO * math.tan(lat_rad))
    y = EARTH_FLATTENING_RATIO * math.sin(u) + elevation * math.sin(lat_rad) / EARTH_RADIUS_M
    x = math.cos(u) + elevation * math.cos(lat_rad) / EARTH_RADIUS_M

    denominator = math.cos(delta_rad) - x * math.sin(xi_rad) * math.cos(h_rad)
    delta_alpha_rad = math.atan2(-x * math.sin(xi_rad) * math.sin(h_rad), denominator)
    delta_prime = math.degrees(
        math.atan2(
            (math.sin(delta_rad) - y * math.sin(xi_rad)) * math.cos(delta_alpha_rad),
            denominator,
        )
    )
    return math.degrees(delta_alpha_rad), delta_prime


def topocentric_elevation_angle(latitude: float, delta_prime: float, h_prime: float) -> float:
    """Elevation of the body above the horizon before refraction, in degrees."""

    lat_rad = math.radians(latitude)
    delta_prime_rad = math.radians(delta_prime)
    sine = math.sin(lat_rad) * math.sin(delta_prime_rad) + math.cos(lat_rad) * math.cos(
        delta_prime_rad
    ) * math.cos(math.radians(h_prime))
    return math.degrees(math.asin(float(np.clip(sine, -1.0, 1.0))))


def atmospheric_refraction_correction(
    pressure: float,
    temperature: float,
    atmospheric_refraction: float,
    e0: float,
) -> float:
    """Refraction lift in degrees for a body at uncorrected elevation *e0*.

    Bodies below ``-(SUN_RADIUS + atmospheric_refraction)`` get no correction.
    The Bennett-style formula has a pole at ``e0 = -5.11`` and is only used
    above it, while its tangent argument stays within ``(0, 90]`` degrees;
    elsewhere the correction is zero.
    """

    if e0 < -(SUN_RADIUS + atmospheric_refraction):
        return 0.0
    offset = e0 + REFRACTION_POLE_OFFSET
    if offset <= 0.0:
        return 0.0
    argument = e0 + 10.3 / offset
    if not 0.0 < argument <= 90.0:
        return 0.0
    tangent = math.tan(math.radians(argument))
    if tangent <= 0.0 or not math.isfinite(tangent):
        return 0.0
    return (pressure / 1010.0) * (283.0 / (273.0 + temperature)) * 1.02 / (60.0 * tangent)


def topocentric_azimuth_angle_astro(h_prime: float, latitude: float, delta_prime: float) -> float:
    """Azimuth measured westward from south, in ``[0, 360)``."""

    h_prime_rad = math.radians(h_prime)
    lat_rad = math.radians(latitude)
    azimuth = math.atan2(
        math.sin(h_prime_rad),
        math.cos(h_prime_rad) * math.sin(lat_rad)
        - math.tan(math.radians(delta_prime)) * math.cos(lat_rad),
    )
    return limit_degrees(math.degrees(azimuth))


def topocentric_azimuth_angle(azimuth_astro: float) -> float:
    """Azimuth measured eastward from north, in ``[0, 360)``."""

    return limit_degrees(azimuth_astro + 180.0)


def surface_incidence_angle(
    zenith: float,
    azimuth_astro: float,
    azimuth_rotation: float,
    slope: float,
) -> float:
    zenith_rad = math.radians(zenith)
    slope_rad = math.radians(slope)
    cosine = math.cos(zenith_rad) * math.cos(slope_rad) + math.sin(slope_rad) * math.sin(
        zenith_rad
    ) * math.cos(math.radians(azimuth_astro - azimuth_rotation))
    return math.degrees(math.acos(float(np.clip(cosine, -1.0, 1.0))))


@dataclass(frozen=True)
class Topocentric:
    """Observer-centred quantities for one body at one instant (degrees)."""

    h: float
    delta_alpha: float
    delta_prime: float
    alpha_prime: float
    h_prime: float
    e0: float
    delta_e: float
    e: float
    zenith: float
    azimuth_astro: float
    azimuth: float


def topocentric_position(
    observation: "ObservationInput",
    nu: float,
    alpha: float,
    delta: float,
    parallax: float,
) -> Topocentric:
    """Carry a geocentric ``(alpha, delta)`` through to refracted zenith and azimuth."""

    h = observer_hour_angle(nu, observation.longitude, alpha)
    delta_alpha, delta_prime = right_ascension_parallax_and_topocentric_declination(
        observation.latitude, observation.elevation, parallax, h, delta
    )
    alpha_prime = alpha + delta_alpha
    h_prime = h - delta_alpha

    e0 = topocentric_elevation_angle(observation.latitude, delta_prime, h_prime)
    delta_e = atmospheric_refraction_correction(
        observation.pressure,
        observation.temperature,
        observation.atmospheric_refraction,
        e0,
    )
    e = float(np.clip(e0 + delta_e, -90.0, 90.0))
    azimuth_astro = topocentric_azimuth_angle_astro(h_prime, observation.latitude, delta_prime)

    return Topocentric(
        h=h,
        delta_alpha=delta_alpha,
        delta_prime=delta_prime,
        alpha_prime=alpha_prime,
        h_prime=h_prime,
        e0=e0,
        delta_e=delta_e,
        e=e,
        zenith=90.0 - e,
        azimuth_astro=azimuth_astro,
        azimuth=topocentric_azimuth_angle(azimuth_astro),
    )
