"""Command-line front end: ``python -m sampa``."""

from __future__ import annotations

import argparse
import json
import logging
import math
import sys
from dataclasses import asdict
from datetime import UTC, datetime
from typing import Any, Dict, Optional, Sequence

from .batch import SampaError, evaluate_batch, load_observations
from .spa import ObservationInput, SolarResult, compute_solar_position, validate_observation
from .sun_moon import SunMoonResult, compute_sun_moon
from .timescale import delta_t_from_leap_seconds

__all__ = ["build_parser", "main", "result_to_dict"]

EXIT_OUT_OF_RANGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sampa",
        description="Topocentric Sun and Moon positions (NREL SPA/MPA).",
    )
    parser.add_argument("--time", type=str, default=None, help="ISO-8601 instant with UTC offset (default: now)")
    parser.add_argument("--lat", type=float, default=None, help="latitude in degrees")
    parser.add_argument("--lon", type=float, default=None, help="longitude in degrees, east positive")
    parser.add_argument("--elev", type=float, default=0.0, help="elevation in metres")
    parser.add_argument("--pressure", type=float, default=1000.0, help="pressure in millibars")
    parser.add_argument("--temp", type=float, default=10.0, help="temperature in degrees Celsius")
    parser.add_argument("--dut1", type=float, default=0.0, help="UT1-UTC in seconds")
    parser.add_argument(
        "--delta-t",
        type=float,
        default=None,
        help="TT-UT1 in seconds (default: derived from the leap-second table)",
    )
    parser.add_argument("--slope", type=float, default=0.0, help="surface slope in degrees")
    parser.add_argument(
        "--azimuth-rotation", type=float, default=0.0, help="surface azimuth rotation in degrees"
    )
    parser.add_argument(
        "--refraction", type=float, default=0.5667, help="refraction at sunrise/sunset in degrees"
    )
    parser.add_argument("--moon", action="store_true", help="print combined Sun and Moon output")
    parser.add_argument("--csv", type=str, default=None, help="batch mode: observation CSV file")
    parser.add_argument("--jobs", type=int, default=None, help="batch worker count")
    parser.add_argument("--log-level", type=str, default="WARNING", help="logging level")
    return parser


def _clean(value: Any) -> Any:
    if isinstance(value, float) and math.isnan(value):
        return None
    if isinstance(value, dict):
        return {key: _clean(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_clean(item) for item in value]
    return value


def _rts_times(result: SolarResult, instant: Optional[datetime]) -> Dict[str, Optional[str]]:
    if result.rise_transit_set is None or instant is None:
        return {}
    times = result.rise_transit_set.to_datetimes(instant)
    return {
        f"{name}_local": None if moment is None else moment.isoformat()
        for name, moment in zip(("sunrise", "transit", "sunset"), times)
    }


def result_to_dict(result: Any, instant: Optional[datetime] = None) -> Optional[Dict[str, Any]]:
    """JSON-ready view of a solar or Sun-Moon result; NaN becomes ``None``."""

    if result is None:
        return None
    payload = _clean(asdict(result))
    if isinstance(result, SunMoonResult):
        payload["sun"].update(_rts_times(result.sun, instant))
    elif isinstance(result, SolarResult):
        payload.update(_rts_times(result, instant))
    return payload


def _emit(payload: Any) -> None:
    print(json.dumps(payload))


def _error(message: str, code: str) -> Dict[str, Any]:
    return {"ok": False, "code": code, "error": message}


def _parse_instant(text: Optional[str]) -> datetime:
    if text is None:
        return datetime.now(UTC)
    instant = datetime.fromisoformat(text)
    if instant.tzinfo is None:
        raise ValueError("--time must include a UTC offset")
    return instant


def _run_batch(ns: argparse.Namespace) -> int:
    try:
        observations = load_observations(ns.csv)
        results = evaluate_batch(observations, n_jobs=ns.jobs, moon=ns.moon)
    except (SampaError, ValueError) as exc:
        _emit(_error(str(exc), "batch_error"))
        return 1
    for obs, result in zip(observations, results):
        _emit(result_to_dict(result, obs.instant))
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    ns = build_parser().parse_args(argv)
    logging.basicConfig(level=ns.log_level.upper(), format="%(message)s")

    if ns.csv is not None:
        return _run_batch(ns)

    if ns.lat is None or ns.lon is None:
        _emit(_error("--lat and --lon are required", "validation_error"))
        return EXIT_OUT_OF_RANGE

    try:
        instant = _parse_instant(ns.time)
    except ValueError as exc:
        _emit(_error(str(exc), "validation_error"))
        return EXIT_OUT_OF_RANGE

    delta_t = ns.delta_t
    if delta_t is None:
        delta_t = delta_t_from_leap_seconds(instant, ns.dut1)

    obs = ObservationInput(
        instant=instant,
        delta_ut1=ns.dut1,
        delta_t=delta_t,
        latitude=ns.lat,
        longitude=ns.lon,
        elevation=ns.elev,
        pressure=ns.pressure,
        temperature=ns.temp,
        slope=ns.slope,
        azimuth_rotation=ns.azimuth_rotation,
        atmospheric_refraction=ns.refraction,
    )

    if ns.moon:
        result = compute_sun_moon(obs)
    else:
        result = compute_solar_position(obs, incidence=True, rise_transit_set=True)
    if result is None:
        reason = validate_observation(obs, incidence=True) or "observation out of range"
        _emit(_error(reason, "out_of_range"))
        return EXIT_OUT_OF_RANGE

    _emit(result_to_dict(result, instant))
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
