"""Sun and Moon position algorithms (NREL SPA, MPA and SAMPA)."""

from .batch import SampaError, evaluate_batch, load_observations
from .mpa import LunarResult, LunarState, compute_lunar_position, trace_lunar_position
from .rts import RiseTransitSet
from .spa import (
    ObservationInput,
    SolarResult,
    SolarState,
    compute_solar_position,
    trace_solar_position,
    validate_observation,
)
from .sun_moon import SunMoonResult, compute_sun_moon
from .timescale import (
    TimeScales,
    calendar_from_julian_day,
    delta_t_from_leap_seconds,
    julian_day,
    julian_day_from_datetime,
    time_scales,
)

__all__ = [
    "LunarResult",
    "LunarState",
    "ObservationInput",
    "RiseTransitSet",
    "SampaError",
    "SolarResult",
    "SolarState",
    "SunMoonResult",
    "TimeScales",
    "calendar_from_julian_day",
    "compute_lunar_position",
    "compute_solar_position",
    "compute_sun_moon",
    "delta_t_from_leap_seconds",
    "evaluate_batch",
    "julian_day",
    "julian_day_from_datetime",
    "load_observations",
    "time_scales",
    "trace_lunar_position",
    "trace_solar_position",
    "validate_observation",
]
