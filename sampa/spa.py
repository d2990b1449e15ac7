"""Solar position pipeline: observation input, validation, trace and result."""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from .earth import GeocentricSun, geocentric_sun
from .rts import RiseTransitSet, solve_rise_transit_set
from .timescale import TimeScales, time_scales, utc_offset_hours
from .topocentric import Topocentric, surface_incidence_angle, topocentric_position

__all__ = [
    "ObservationInput",
    "SolarResult",
    "SolarState",
    "compute_solar_position",
    "sun_equatorial_horizontal_parallax",
    "trace_solar_position",
    "validate_observation",
]

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ObservationInput:
    """One observer at one instant, with the atmosphere and surface they see.

    Parameters
    ----------
    instant:
        Timezone-aware local civil time. Its UTC offset is the observer time
        zone used for rise/transit/set hours.
    delta_ut1:
        UT1-UTC in seconds.
    delta_t:
        TT-UT1 in seconds.
    latitude, longitude:
        Geographic coordinates in degrees, east and north positive.
    elevation:
        Metres above mean sea level.
    pressure:
        Annual average local pressure in millibars.
    temperature:
        Annual average local temperature in degrees Celsius.
    slope:
        Surface slope from the horizontal, in degrees.
    azimuth_rotation:
        Surface azimuth rotation measured from south, in degrees.
    atmospheric_refraction:
        Refraction at sunrise and sunset in degrees.
    """

    instant: datetime
    delta_ut1: float
    delta_t: float
    latitude: float
    longitude: float
    elevation: float = 0.0
    pressure: float = 1000.0
    temperature: float = 10.0
    slope: float = 0.0
    azimuth_rotation: float = 0.0
    atmospheric_refraction: float = 0.5667

    def __post_init__(self) -> None:
        if self.instant.tzinfo is None or self.instant.utcoffset() is None:
            raise ValueError("datetime must be timezone-aware")

    @property
    def timezone(self) -> float:
        """UTC offset of :attr:`instant` in hours."""

        return utc_offset_hours(self.instant)


def validate_observation(obs: ObservationInput, *, incidence: bool = False) -> Optional[str]:
    """Return the reason *obs* is out of range, or ``None`` when it is usable."""

    numeric = {
        "delta_ut1": obs.delta_ut1,
        "delta_t": obs.delta_t,
        "latitude": obs.latitude,
        "longitude": obs.longitude,
        "elevation": obs.elevation,
        "pressure": obs.pressure,
        "temperature": obs.temperature,
        "atmospheric_refraction": obs.atmospheric_refraction,
    }
    if incidence:
        numeric["slope"] = obs.slope
        numeric["azimuth_rotation"] = obs.azimuth_rotation
    for name, value in numeric.items():
        if not math.isfinite(value):
            return f"{name} must be finite"

    if obs.pressure < 0 or obs.pressure > 5000:
        return "pressure must be within [0, 5000] millibars"
    if obs.temperature <= -273 or obs.temperature > 6000:
        return "temperature must be within (-273, 6000] degrees Celsius"
    if obs.delta_ut1 <= -1 or obs.delta_ut1 >= 1:
        return "delta_ut1 must be within (-1, 1) seconds"
    if abs(obs.delta_t) > 8000:
        return "delta_t must be within [-8000, 8000] seconds"
    if abs(obs.timezone) > 18:
        return "UTC offset must be within 18 hours"
    if abs(obs.longitude) > 180:
        return "longitude must be within [-180, 180] degrees"
    if abs(obs.latitude) > 90:
        return "latitude must be within [-90, 90] degrees"
    if abs(obs.atmospheric_refraction) > 5:
        return "atmospheric_refraction must be within [-5, 5] degrees"
    if obs.elevation < -6500000:
        return "elevation must be at least -6500000 metres"
    if incidence:
        if abs(obs.slope) > 360:
            return "slope must be within [-360, 360] degrees"
        if abs(obs.azimuth_rotation) > 360:
            return "azimuth_rotation must be within [-360, 360] degrees"
    return None


def sun_equatorial_horizontal_parallax(r: float) -> float:
    return 8.794 / (3600.0 * r)


@dataclass(frozen=True)
class SolarResult:
    """Flat solar output for one observation (degrees).

    ``incidence`` and ``rise_transit_set`` are ``None`` when not requested.
    """

    zenith: float
    azimuth_astro: float
    azimuth: float
    incidence: Optional[float] = None
    rise_transit_set: Optional[RiseTransitSet] = None

    @property
    def sunrise(self) -> Optional[float]:
        return None if self.rise_transit_set is None else self.rise_transit_set.sunrise

    @property
    def transit(self) -> Optional[float]:
        return None if self.rise_transit_set is None else self.rise_transit_set.transit

    @property
    def sunset(self) -> Optional[float]:
        return None if self.rise_transit_set is None else self.rise_transit_set.sunset


@dataclass(frozen=True)
class SolarState:
    """Every intermediate value of one solar run, plus its flat result.

    The lunar pipeline takes this object rather than a bare instant so it can
    reuse the nutation, obliquity and sidereal time of the same instant.
    """

    observation: ObservationInput
    sun: GeocentricSun
    xi: float
    topocentric: Topocentric
    result: SolarResult = field(repr=False)

    @property
    def time(self) -> TimeScales:
        return self.sun.time


def trace_solar_position(
    obs: ObservationInput,
    *,
    incidence: bool = False,
    rise_transit_set: bool = False,
) -> Optional[SolarState]:
    """Run the solar pipeline and keep every intermediate value.

    Returns ``None`` when *obs* fails :func:`validate_observation`; nothing is
    computed in that case.
    """

    reason = validate_observation(obs, incidence=incidence)
    if reason is not None:
        LOGGER.debug(json.dumps({"event": "observation_rejected", "reason": reason}))
        return None

    sun = geocentric_sun(time_scales(obs.instant, obs.delta_ut1, obs.delta_t))
    xi = sun_equatorial_horizontal_parallax(sun.r)
    topo = topocentric_position(obs, sun.nu, sun.alpha, sun.delta, xi)

    incidence_angle = None
    if incidence:
        incidence_angle = surface_incidence_angle(
            topo.zenith, topo.azimuth_astro, obs.azimuth_rotation, obs.slope
        )

    rts = solve_rise_transit_set(obs, sun) if rise_transit_set else None

    result = SolarResult(
        zenith=topo.zenith,
        azimuth_astro=topo.azimuth_astro,
        azimuth=topo.azimuth,
        incidence=incidence_angle,
        rise_transit_set=rts,
    )
    return SolarState(observation=obs, sun=sun, xi=xi, topocentric=topo, result=result)


def compute_solar_position(
    obs: ObservationInput,
    *,
    incidence: bool = False,
    rise_transit_set: bool = False,
) -> Optional[SolarResult]:
    """Topocentric zenith and azimuth of the Sun for *obs*.

    Parameters
    ----------
    obs:
        Observer, instant and atmosphere.
    incidence:
        Also compute the incidence angle on a surface described by
        ``obs.slope`` and ``obs.azimuth_rotation``.
    rise_transit_set:
        Also solve sunrise, sun transit and sunset for the local civil date
        of ``obs.instant``, together with the equation of time.

    Returns
    -------
    SolarResult or None
        ``None`` when an input is out of range.
    """

    state = trace_solar_position(obs, incidence=incidence, rise_transit_set=rise_transit_set)
    return None if state is None else state.result
