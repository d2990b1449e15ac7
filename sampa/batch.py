"""CSV ingestion and parallel evaluation of many observations."""

from __future__ import annotations

import json
import logging
import os
import time
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import List, Optional, Sequence, Union

import numpy as np
from joblib import Parallel, delayed

from .spa import ObservationInput, SolarResult, compute_solar_position
from .sun_moon import SunMoonResult, compute_sun_moon

__all__ = [
    "CSV_COLUMNS",
    "SampaError",
    "evaluate_batch",
    "load_observations",
    "resolve_n_jobs",
]

LOGGER = logging.getLogger(__name__)

N_JOBS_ENV = "SAMPA_N_JOBS"

CSV_COLUMNS = (
    "Year",
    "Month",
    "Day",
    "Hour",
    "Minute",
    "Second",
    "DeltaUT1",
    "DeltaT",
    "Timezone",
    "Longitude",
    "Latitude",
    "Elevation",
    "Pressure",
    "Temperature",
    "Slope",
    "AzmRotation",
    "AtmosRefract",
)

BatchItem = Optional[Union[SolarResult, SunMoonResult]]


class SampaError(RuntimeError):
    """Raised when a batch cannot be loaded or evaluated."""


def _row_to_observation(row: np.ndarray) -> ObservationInput:
    (
        year, month, day, hour, minute, second,
        delta_ut1, delta_t, tz_hours,
        longitude, latitude, elevation,
        pressure, temperature, slope, azimuth_rotation, refraction,
    ) = (float(value) for value in row[: len(CSV_COLUMNS)])

    instant = datetime(
        int(year),
        int(month),
        int(day),
        int(hour),
        int(minute),
        tzinfo=timezone(timedelta(hours=tz_hours)),
    ) + timedelta(seconds=second)
    return ObservationInput(
        instant=instant,
        delta_ut1=delta_ut1,
        delta_t=delta_t,
        latitude=latitude,
        longitude=longitude,
        elevation=elevation,
        pressure=pressure,
        temperature=temperature,
        slope=slope,
        azimuth_rotation=azimuth_rotation,
        atmospheric_refraction=refraction,
    )


def load_observations(path: Union[str, Path]) -> List[ObservationInput]:
    """Read observations from a comma-separated file with one header row.

    Columns follow :data:`CSV_COLUMNS`; any further columns are ignored.

    Raises
    ------
    SampaError
        If the file cannot be read or has too few columns.
    ValueError
        If a field is not numeric or does not form a valid date.
    """

    source = Path(path).expanduser()
    if not source.is_file():
        raise SampaError(f"Observation file not found: {source}")

    try:
        table = np.loadtxt(source, delimiter=",", skiprows=1, ndmin=2)
    except OSError as exc:
        raise SampaError(f"Failed to read observation file '{source}': {exc}") from exc

    if table.size == 0:
        return []
    if table.shape[1] < len(CSV_COLUMNS):
        raise SampaError(
            f"Observation file '{source}' has {table.shape[1]} columns, "
            f"expected at least {len(CSV_COLUMNS)}"
        )
    return [_row_to_observation(row) for row in table]


def resolve_n_jobs(n_jobs: Optional[int] = None) -> int:
    """Worker count from *n_jobs*, else ``SAMPA_N_JOBS``, else 1."""

    if n_jobs is not None:
        return n_jobs
    raw = os.environ.get(N_JOBS_ENV)
    if not raw:
        return 1
    try:
        return int(raw)
    except ValueError as exc:
        raise SampaError(f"{N_JOBS_ENV} must be an integer, got {raw!r}") from exc


def _evaluate_one(obs: ObservationInput, moon: bool) -> BatchItem:
    if moon:
        return compute_sun_moon(obs)
    return compute_solar_position(obs, incidence=True, rise_transit_set=True)


def evaluate_batch(
    observations: Sequence[ObservationInput],
    *,
    n_jobs: Optional[int] = None,
    backend: Optional[str] = None,
    moon: bool = False,
) -> List[BatchItem]:
    """Evaluate every observation independently, preserving input order.

    Rejected observations yield ``None`` in their slot. With one worker the
    batch runs in-process; otherwise it is dispatched through
    :class:`joblib.Parallel` using *backend* (joblib's default when ``None``).
    """

    jobs = resolve_n_jobs(n_jobs)
    start_time = time.perf_counter()

    if jobs == 1 or len(observations) <= 1:
        results = [_evaluate_one(obs, moon) for obs in observations]
    else:
        results = Parallel(n_jobs=jobs, backend=backend)(
            delayed(_evaluate_one)(obs, moon) for obs in observations
        )

    rejected = sum(1 for item in results if item is None)
    LOGGER.info(
        json.dumps(
            {
                "event": "batch_complete",
                "rows": len(results),
                "rejected": rejected,
                "n_jobs": jobs,
                "moon": moon,
                "duration_ms": round((time.perf_counter() - start_time) * 1000.0, 3),
            }
        )
    )
    return list(results)
