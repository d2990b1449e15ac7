"""Combined Sun and Moon positions: separation and apparent disk sizes."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .mpa import LunarResult, trace_lunar_position
from .spa import ObservationInput, SolarResult, trace_solar_position

__all__ = [
    "SunMoonResult",
    "angular_distance_sun_moon",
    "compute_sun_moon",
    "moon_disk_radius",
    "sun_disk_radius",
]


def angular_distance_sun_moon(
    zen_sun: float, azm_sun: float, zen_moon: float, azm_moon: float
) -> float:
    """Topocentric angle between Sun and Moon centres, in degrees."""

    zs = math.radians(zen_sun)
    zm = math.radians(zen_moon)
    cosine = math.cos(zs) * math.cos(zm) + math.sin(zs) * math.sin(zm) * math.cos(
        math.radians(azm_sun - azm_moon)
    )
    return math.degrees(math.acos(float(np.clip(cosine, -1.0, 1.0))))


def sun_disk_radius(r: float) -> float:
    return 959.63 / (3600.0 * r)


def moon_disk_radius(e: float, pi: float, cap_delta: float) -> float:
    return (
        358473400.0
        * (1.0 + math.sin(math.radians(e)) * math.sin(math.radians(pi)))
        / (3600.0 * cap_delta)
    )


@dataclass(frozen=True)
class SunMoonResult:
    """Sun and Moon for one observation, with their separation and radii (degrees)."""

    sun: SolarResult
    moon: LunarResult
    angular_separation: float
    sun_radius: float
    moon_radius: float


def compute_sun_moon(obs: ObservationInput) -> Optional[SunMoonResult]:
    """Compute the Sun (with incidence and rise/transit/set) and the Moon for *obs*.

    Returns ``None`` when *obs* is rejected by the solar validation.
    """

    solar = trace_solar_position(obs, incidence=True, rise_transit_set=True)
    if solar is None:
        return None
    lunar = trace_lunar_position(solar)

    return SunMoonResult(
        sun=solar.result,
        moon=lunar.result,
        angular_separation=angular_distance_sun_moon(
            solar.result.zenith, solar.result.azimuth, lunar.result.zenith, lunar.result.azimuth
        ),
        sun_radius=sun_disk_radius(solar.sun.r),
        moon_radius=moon_disk_radius(lunar.topocentric.e, lunar.pi, lunar.cap_delta),
    )
